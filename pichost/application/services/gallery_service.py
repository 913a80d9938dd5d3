from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..ports.gallery_repo import GalleryRepository
from ..ports.storage_repo import StorageRepository
from .config_service import normalize_slug
from ...exceptions import NotFound


@dataclass
class GalleryImage:
    id: int
    url: str
    title: Optional[str]
    description: Optional[str]
    width: Optional[int]
    height: Optional[int]
    created_at: datetime


@dataclass
class GalleryView:
    slug: str
    title: Optional[str]
    description: Optional[str]
    owner: str
    images: List[GalleryImage] = field(default_factory=list)


@dataclass
class GalleryService:
    """Resolves public gallery slugs. Never looks at the caller's identity."""

    gallery_repo: GalleryRepository
    storage_repo: StorageRepository

    def resolve(self, slug: str) -> GalleryView:
        slug = normalize_slug(slug)
        gallery = self.gallery_repo.find_published(slug) if slug else None
        if gallery is None:
            # Unknown and unpublished galleries look the same from outside
            raise NotFound("Gallery not found")

        images = [
            GalleryImage(
                id=rec.id,
                url=self.storage_repo.url_for(rec.storage_key),
                title=rec.title,
                description=rec.description,
                width=rec.width,
                height=rec.height,
                created_at=rec.created_at,
            )
            for rec in self.gallery_repo.list_published_images(gallery)
        ]
        return GalleryView(
            slug=gallery.slug,
            title=gallery.title,
            description=gallery.description,
            owner=gallery.owner_username,
            images=images,
        )
