# Models package (re-export feature modules for stable imports)
from .users.user import User
from .users.config import UserConfig
from .media.image import Image

__all__ = [
    "User",
    "UserConfig",
    "Image",
]
