# Schemas package
from .auth.auth import RegisterRequest, LoginRequest, UserResponse, AuthResponse
from .config.config import (
    SaveConfigRequest, ConfigResponse, SlugAvailabilityResponse, VerifyTokenRequest, RepositoryResponse
)
from .images.image import ImageResponse, UpdateImageRequest
from .gallery.gallery import GalleryImageResponse, GalleryResponse
from .common.common import ErrorResponse, MessageResponse
