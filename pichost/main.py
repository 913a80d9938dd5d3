import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.staticfiles import StaticFiles

# Load environment variables as early as possible
load_dotenv()

from .application.ports.repository_provider import RepositoryProvider
from .application.services.token_service import TokenService
from .core.config import Settings, get_settings
from .database import build_engine, create_db_and_tables
from .exceptions import NotFound, http_exception_handler, validation_exception_handler
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.github.github_provider import GitHubRepositoryProvider
from .infrastructure.storage.local_storage import LocalStorageRepository
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, RequestSizeLimitMiddleware, SecurityMiddleware
from .routers import build_api_router

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}...")
    create_db_and_tables(app.state.engine)
    logger.info("Database initialized successfully")
    yield
    # Shutdown: in-flight requests have drained by now
    logger.info("Shutting down, closing database connections...")
    app.state.engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None, repository_provider: Optional[RepositoryProvider] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    if not settings.secret_key_configured:
        if not settings.DEBUG:
            raise RuntimeError("JWT_SECRET_KEY must be configured before starting the server")
        logger.warning("Using the placeholder JWT secret; DEBUG mode only")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )

    # Process-wide, read-only after this point
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.token_service = TokenService(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    app.state.storage = LocalStorageRepository(settings.UPLOAD_DIR, url_prefix="/uploads")
    app.state.audit_logger = StdAuditLogger()
    app.state.repository_provider = repository_provider or GitHubRepositoryProvider(
        api_url=settings.GITHUB_API_URL,
        timeout=settings.GITHUB_TIMEOUT_SECONDS,
        max_retries=settings.GITHUB_MAX_RETRIES,
        backoff=settings.GITHUB_RETRY_BACKOFF_SECONDS,
    )

    # Custom exception handlers
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_file_size=settings.MAX_FILE_SIZE)
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(build_api_router())

    @app.get("/health", tags=["Health"])
    def health_check():
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Uploaded content, stored under random keys
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    # Frontend build; any other unmatched GET falls back to index.html
    if os.path.isdir(settings.assets_dir):
        app.mount("/assets", StaticFiles(directory=settings.assets_dir), name="assets")

    @app.get("/favicon.svg", include_in_schema=False)
    def favicon():
        path = os.path.join(settings.FRONTEND_DIST_DIR, "favicon.svg")
        if not os.path.isfile(path):
            raise NotFound()
        return FileResponse(path)

    logger.info(f"Application configured, {settings.APP_NAME} will listen on port {settings.PORT}")
    return app


def run() -> None:
    """Console entry point: serve with a bounded graceful-shutdown window."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "pichost.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT_SECONDS,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
