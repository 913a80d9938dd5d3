from dataclasses import dataclass
from typing import List, Optional, Protocol

from .image_repo import ImageRecord


@dataclass
class PublishedGallery:
    user_id: str
    owner_username: str
    slug: str
    title: Optional[str]
    description: Optional[str]


class GalleryRepository(Protocol):
    def find_published(self, slug: str) -> Optional[PublishedGallery]:
        """Return the gallery only when its slug matches and it is enabled."""
        ...

    def list_published_images(self, gallery: PublishedGallery) -> List[ImageRecord]:
        ...
