from fastapi import Depends

from ..application.services.gallery_service import GalleryService
from ..dependencies import get_gallery_service
from ..exceptions import create_success_response
from ..schemas import GalleryImageResponse, GalleryResponse


def get_public_gallery(slug: str, gallery_service: GalleryService = Depends(get_gallery_service)):
    """Public gallery by slug; reachable without a session token."""
    view = gallery_service.resolve(slug)
    return create_success_response(GalleryResponse(
        slug=view.slug,
        title=view.title,
        description=view.description,
        owner=view.owner,
        images=[
            GalleryImageResponse(
                id=img.id,
                url=img.url,
                title=img.title,
                description=img.description,
                width=img.width,
                height=img.height,
                created_at=img.created_at,
            )
            for img in view.images
        ],
    ))
