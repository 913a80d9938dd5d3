"""Request-scoped wiring between FastAPI and the application services."""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from .application.services.auth_service import AuthService
from .application.services.config_service import ConfigService
from .application.services.gallery_service import GalleryService
from .application.services.image_service import ImageService
from .core.config import Settings
from .database import get_session
from .exceptions import AuthInvalid
from .infrastructure.persistence.sqlalchemy.repositories.config_repository_sql import SqlConfigRepository
from .infrastructure.persistence.sqlalchemy.repositories.gallery_repository_sql import SqlGalleryRepository
from .infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request, session: Session = Depends(get_session)) -> AuthService:
    state = request.app.state
    return AuthService(
        user_repo=SqlUserRepository(session),
        token_service=state.token_service,
        audit_logger=state.audit_logger,
        image_repo=SqlImageRepository(session),
        storage_repo=state.storage,
    )


def get_config_service(request: Request, session: Session = Depends(get_session)) -> ConfigService:
    return ConfigService(
        config_repo=SqlConfigRepository(session),
        repository_provider=request.app.state.repository_provider,
    )


def get_image_service(request: Request, session: Session = Depends(get_session)) -> ImageService:
    settings = request.app.state.settings
    return ImageService(
        image_repo=SqlImageRepository(session),
        storage_repo=request.app.state.storage,
        allowed_types=settings.ALLOWED_IMAGE_TYPES,
        max_file_size=settings.MAX_FILE_SIZE,
    )


def get_gallery_service(request: Request, session: Session = Depends(get_session)) -> GalleryService:
    return GalleryService(
        gallery_repo=SqlGalleryRepository(session),
        storage_repo=request.app.state.storage,
    )


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """Auth gate: verify the bearer token and bind the user id to the request."""
    if not credentials or not credentials.credentials:
        raise AuthInvalid("Authentication required")
    user_id = auth_service.authenticate(credentials.credentials)
    request.state.user_id = user_id
    return user_id
