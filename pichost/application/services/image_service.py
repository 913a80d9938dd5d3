from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import io
import logging
import os

from PIL import Image as PILImage, UnidentifiedImageError

from ..ports.image_repo import ImageRepository, ImageRecord
from ..ports.storage_repo import StorageRepository
from ...exceptions import InvalidMedia, NotFound

logger = logging.getLogger(__name__)

# Declared content type -> (Pillow format, file extension)
IMAGE_FORMATS = {
    "image/jpeg": ("JPEG", ".jpg"),
    "image/png": ("PNG", ".png"),
    "image/gif": ("GIF", ".gif"),
    "image/webp": ("WEBP", ".webp"),
}

EDITABLE_FIELDS = ("title", "description", "is_public")
# Storage keys carry no owner information; they end up in public URLs
STORAGE_SUBDIR = "images"


@dataclass
class ImageMetadata:
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = False


@dataclass
class ImageService:
    image_repo: ImageRepository
    storage_repo: StorageRepository
    allowed_types: Sequence[str]
    max_file_size: int

    def validate_media(self, content: bytes, content_type: Optional[str]) -> Dict[str, Any]:
        """Check an upload against the type allow-list and size limit.

        Returns the pixel dimensions and file extension of an accepted image.
        """
        if content_type not in self.allowed_types or content_type not in IMAGE_FORMATS:
            raise InvalidMedia(f"File type {content_type} not allowed")
        if not content:
            raise InvalidMedia("Uploaded file is empty")
        if len(content) > self.max_file_size:
            raise InvalidMedia(
                f"File too large (max {self.max_file_size // (1024 * 1024)}MB)",
                status_code=413,
            )

        expected_format, extension = IMAGE_FORMATS[content_type]
        try:
            with PILImage.open(io.BytesIO(content)) as img:
                detected_format = img.format
                width, height = img.size
                img.verify()
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            logger.info(f"Rejected upload that failed to decode: {e.__class__.__name__}")
            raise InvalidMedia("File content is not a valid image")

        if detected_format != expected_format:
            raise InvalidMedia("File content does not match its declared type")
        return {"width": width, "height": height, "extension": extension}

    def upload_image(self, user_id: str, content: bytes, filename: Optional[str], content_type: Optional[str],
                     metadata: Optional[ImageMetadata] = None) -> ImageRecord:
        metadata = metadata or ImageMetadata()
        media = self.validate_media(content, content_type)
        safe_name = os.path.basename(filename or "").strip()[:255] or f"upload{media['extension']}"

        key = self.storage_repo.save_bytes(STORAGE_SUBDIR, media["extension"], content)
        try:
            record = self.image_repo.create_for_owner(
                user_id,
                storage_key=key,
                filename=safe_name,
                content_type=content_type,
                file_size=len(content),
                width=media["width"],
                height=media["height"],
                title=metadata.title,
                description=metadata.description,
                is_public=metadata.is_public,
            )
        except Exception:
            # Keep storage in step with the database
            self.storage_repo.delete(key)
            raise
        logger.info(f"Image {record.id} uploaded by user {user_id} ({record.file_size} bytes)")
        return record

    def list_images(self, user_id: str) -> List[ImageRecord]:
        return self.image_repo.list_for_owner(user_id)

    def update_image(self, user_id: str, image_id: int, fields: Dict[str, Any]) -> ImageRecord:
        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        record = self.image_repo.update_for_owner(user_id, image_id, changes)
        if record is None:
            raise NotFound("Image not found")
        return record

    def delete_image(self, user_id: str, image_id: int) -> None:
        # Missing and not-owned are reported identically
        record = self.image_repo.delete_for_owner(user_id, image_id)
        if record is None:
            raise NotFound("Image not found")
        if not self.storage_repo.delete(record.storage_key):
            logger.warning(f"Stored content for image {image_id} was already gone")

    def url_for(self, record: ImageRecord) -> str:
        return self.storage_repo.url_for(record.storage_key)
