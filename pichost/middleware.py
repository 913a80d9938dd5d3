import logging
import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .exceptions import create_error_response

logger = logging.getLogger(__name__)

# Room for multipart boundaries and form fields on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # API payloads carry tokens and private listings
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, tagged with a request id and the caller."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        user_id = getattr(request.state, "user_id", None) or "-"
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} user={user_id} "
            f"status={response.status_code} {elapsed_ms:.1f}ms"
        )
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            message = f"Internal server error: {e}" if self.debug else "Internal server error"
            return JSONResponse(status_code=500, content=create_error_response(message, "internal_error"))


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared length exceeds the upload limit."""

    def __init__(self, app: ASGIApp, max_file_size: int):
        super().__init__(app)
        self.max_body_size = max_file_size + MULTIPART_OVERHEAD

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
            logger.info(f"Rejected {content_length}-byte body on {request.url.path}")
            return JSONResponse(
                status_code=413,
                content=create_error_response("Request entity too large", "invalid_media"),
            )
        return await call_next(request)
