from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from .....db.models import Image
from .....application.ports.image_repo import ImageRepository, ImageRecord


def to_record(img: Image) -> ImageRecord:
    return ImageRecord(
        id=img.id,
        user_id=img.user_id,
        storage_key=img.storage_key,
        filename=img.filename,
        content_type=img.content_type,
        file_size=img.file_size,
        width=img.width,
        height=img.height,
        title=img.title,
        description=img.description,
        is_public=img.is_public,
        created_at=img.created_at,
    )


class SqlImageRepository(ImageRepository):
    """Image records, always filtered by owner."""

    def __init__(self, session: Session):
        self.session = session

    def _owned(self, owner_id: str, image_id: int, lock: bool = False) -> Optional[Image]:
        stmt = select(Image).where(Image.id == image_id, Image.user_id == owner_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.session.exec(stmt).first()

    def create_for_owner(self, owner_id: str, storage_key: str, filename: str, content_type: str,
                         file_size: int, width: Optional[int], height: Optional[int],
                         title: Optional[str], description: Optional[str], is_public: bool) -> ImageRecord:
        img = Image(
            user_id=owner_id,
            storage_key=storage_key,
            filename=filename,
            content_type=content_type,
            file_size=file_size,
            width=width,
            height=height,
            title=title,
            description=description,
            is_public=is_public,
        )
        self.session.add(img)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(img)
        return to_record(img)

    def list_for_owner(self, owner_id: str) -> List[ImageRecord]:
        rows = self.session.exec(
            select(Image).where(Image.user_id == owner_id).order_by(Image.id.desc())
        ).all()
        return [to_record(r) for r in rows]

    def update_for_owner(self, owner_id: str, image_id: int, changes: Dict[str, Any]) -> Optional[ImageRecord]:
        img = self._owned(owner_id, image_id, lock=True)
        if img is None:
            self.session.rollback()
            return None
        for name, value in changes.items():
            setattr(img, name, value)
        self.session.add(img)
        self.session.commit()
        self.session.refresh(img)
        return to_record(img)

    def delete_for_owner(self, owner_id: str, image_id: int) -> Optional[ImageRecord]:
        img = self._owned(owner_id, image_id, lock=True)
        if img is None:
            self.session.rollback()
            return None
        record = to_record(img)
        self.session.delete(img)
        self.session.commit()
        return record
