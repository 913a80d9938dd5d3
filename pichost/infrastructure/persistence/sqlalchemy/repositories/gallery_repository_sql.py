from typing import List, Optional

from sqlmodel import Session, select

from .....db.models import Image, User, UserConfig
from .....application.ports.gallery_repo import GalleryRepository, PublishedGallery
from .....application.ports.image_repo import ImageRecord
from .image_repository_sql import to_record


class SqlGalleryRepository(GalleryRepository):
    """Read-only access to published galleries; every query filters on visibility."""

    def __init__(self, session: Session):
        self.session = session

    def find_published(self, slug: str) -> Optional[PublishedGallery]:
        row = self.session.exec(
            select(UserConfig, User)
            .join(User, User.id == UserConfig.user_id)
            .where(UserConfig.gallery_slug == slug, UserConfig.gallery_enabled == True)  # noqa: E712
        ).first()
        if not row:
            return None
        config, user = row
        return PublishedGallery(
            user_id=config.user_id,
            owner_username=user.username,
            slug=config.gallery_slug,
            title=config.gallery_title,
            description=config.gallery_description,
        )

    def list_published_images(self, gallery: PublishedGallery) -> List[ImageRecord]:
        rows = self.session.exec(
            select(Image)
            .where(Image.user_id == gallery.user_id, Image.is_public == True)  # noqa: E712
            .order_by(Image.id.asc())
        ).all()
        return [to_record(r) for r in rows]
