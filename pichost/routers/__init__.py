# Routers package: the API surface is declared once as a static table
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple

from fastapi import APIRouter, Depends

from . import auth_router
from . import config_router
from . import gallery_router
from . import github_router
from . import images_router
from ..dependencies import require_user
from ..schemas import ErrorResponse


class Access(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    access: Access
    endpoint: Callable
    tag: str
    status_code: int = 200


# Order matters: /gallery/check-slug must be matched before /gallery/{slug}
ROUTE_TABLE: Tuple[Route, ...] = (
    Route("POST", "/auth/register", Access.PUBLIC, auth_router.register, "Authentication", 201),
    Route("POST", "/auth/login", Access.PUBLIC, auth_router.login, "Authentication"),
    Route("GET", "/auth/me", Access.PROTECTED, auth_router.me, "Authentication"),
    Route("DELETE", "/auth/account", Access.PROTECTED, auth_router.delete_account, "Authentication"),
    Route("GET", "/gallery/check-slug", Access.PROTECTED, config_router.check_slug, "Gallery"),
    Route("GET", "/gallery/{slug}", Access.PUBLIC, gallery_router.get_public_gallery, "Gallery"),
    Route("GET", "/github/repos", Access.PROTECTED, github_router.list_repositories, "GitHub"),
    Route("POST", "/github/verify-token", Access.PROTECTED, github_router.verify_token, "GitHub"),
    Route("POST", "/config", Access.PROTECTED, config_router.save_config, "Config"),
    Route("GET", "/config", Access.PROTECTED, config_router.get_config, "Config"),
    Route("POST", "/upload", Access.PROTECTED, images_router.upload_image, "Images", 201),
    Route("GET", "/images", Access.PROTECTED, images_router.list_images, "Images"),
    Route("PATCH", "/images/{image_id}", Access.PROTECTED, images_router.update_image, "Images"),
    Route("DELETE", "/images/{image_id}", Access.PROTECTED, images_router.delete_image, "Images"),
)


def build_api_router(routes: Tuple[Route, ...] = ROUTE_TABLE) -> APIRouter:
    router = APIRouter(prefix="/api")
    for route in routes:
        dependencies = []
        responses = {}
        if route.access is Access.PROTECTED:
            dependencies.append(Depends(require_user))
            responses[401] = {"model": ErrorResponse}
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            dependencies=dependencies,
            responses=responses,
            tags=[route.tag],
            name=f"{route.tag.lower()}:{route.endpoint.__name__}",
        )
    return router


__all__ = [
    "Access",
    "Route",
    "ROUTE_TABLE",
    "build_api_router",
]
