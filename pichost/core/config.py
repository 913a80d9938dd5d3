# pichost/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

DEFAULT_SECRET_KEY = "change-me-in-prod"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", frozen=True)

    # Application Settings
    APP_NAME: str = "pichost"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 9090
    SHUTDOWN_TIMEOUT_SECONDS: int = 30

    # Database Settings
    DATABASE_URL: str = "sqlite:///./pichost.db"

    # Security Settings
    JWT_SECRET_KEY: str = DEFAULT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"

    # File Upload Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/gif", "image/webp"]
    UPLOAD_DIR: str = "uploads"

    # Frontend build served as the SPA fallback
    FRONTEND_DIST_DIR: str = "./frontend/dist"

    # GitHub Settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: float = 10.0
    GITHUB_MAX_RETRIES: int = 2
    GITHUB_RETRY_BACKOFF_SECONDS: float = 0.5

    # Middleware settings
    GZIP_MIN_SIZE: int = 500

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def secret_key_configured(self) -> bool:
        return bool(self.JWT_SECRET_KEY) and self.JWT_SECRET_KEY != DEFAULT_SECRET_KEY

    @property
    def assets_dir(self) -> str:
        return os.path.join(self.FRONTEND_DIST_DIR, "assets")

    @property
    def index_file(self) -> str:
        return os.path.join(self.FRONTEND_DIST_DIR, "index.html")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
