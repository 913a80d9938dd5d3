import logging
from typing import Optional

from fastapi import Depends, File, Form, UploadFile

from ..application.ports.image_repo import ImageRecord
from ..application.services.image_service import ImageMetadata, ImageService
from ..dependencies import get_image_service, require_user
from ..exceptions import create_success_response
from ..schemas import ImageResponse, MessageResponse, UpdateImageRequest

logger = logging.getLogger(__name__)


def _image_response(service: ImageService, record: ImageRecord) -> ImageResponse:
    return ImageResponse(
        id=record.id,
        url=service.url_for(record),
        filename=record.filename,
        content_type=record.content_type,
        file_size=record.file_size,
        width=record.width,
        height=record.height,
        title=record.title,
        description=record.description,
        is_public=record.is_public,
        created_at=record.created_at,
    )


def upload_image(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None, max_length=200),
    description: Optional[str] = Form(None, max_length=1000),
    is_public: bool = Form(False),
    current_user: str = Depends(require_user),
    image_service: ImageService = Depends(get_image_service),
):
    # One byte past the limit is enough to reject an oversized upload
    data = file.file.read(image_service.max_file_size + 1)
    record = image_service.upload_image(
        current_user,
        data,
        file.filename,
        file.content_type,
        ImageMetadata(title=title, description=description, is_public=is_public),
    )
    return create_success_response(_image_response(image_service, record))


def list_images(current_user: str = Depends(require_user), image_service: ImageService = Depends(get_image_service)):
    images = [_image_response(image_service, r) for r in image_service.list_images(current_user)]
    return create_success_response({"images": images, "total": len(images)})


def update_image(
    image_id: int,
    payload: UpdateImageRequest,
    current_user: str = Depends(require_user),
    image_service: ImageService = Depends(get_image_service),
):
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("is_public") is None:
        changes.pop("is_public", None)
    record = image_service.update_image(current_user, image_id, changes)
    return create_success_response(_image_response(image_service, record))


def delete_image(image_id: int, current_user: str = Depends(require_user), image_service: ImageService = Depends(get_image_service)):
    image_service.delete_image(current_user, image_id)
    return create_success_response(MessageResponse(message="Image deleted"))
