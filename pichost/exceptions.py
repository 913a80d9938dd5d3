import logging
import os

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Base class for errors with a stable, client-facing ``code``."""

    status_code = 400
    code = "bad_request"
    message = "Bad request"

    def __init__(self, detail: str = None, status_code: int = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail or self.message)


class AuthInvalid(APIException):
    status_code = 401
    code = "auth_invalid"
    message = "Invalid authentication token"

    def __init__(self, detail: str = None):
        super().__init__(detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class AuthExpired(AuthInvalid):
    code = "auth_expired"
    message = "Authentication token has expired"


class InvalidCredentials(APIException):
    status_code = 401
    code = "invalid_credentials"
    message = "Invalid username or password"


class UserAlreadyExists(APIException):
    status_code = 409
    code = "user_exists"
    message = "Username is already taken"


class NotFound(APIException):
    status_code = 404
    code = "not_found"
    message = "Resource not found"


class SlugConflict(APIException):
    status_code = 409
    code = "slug_conflict"
    message = "Gallery slug is already taken"


class InvalidConfig(APIException):
    status_code = 400
    code = "invalid_config"
    message = "Invalid configuration"


class InvalidMedia(APIException):
    status_code = 415
    code = "invalid_media"
    message = "Unsupported media"


class InvalidExternalToken(APIException):
    status_code = 400
    code = "invalid_external_token"
    message = "GitHub token is invalid or has been revoked"


class ExternalServiceUnavailable(APIException):
    status_code = 503
    code = "external_service_unavailable"
    message = "GitHub is currently unavailable, please retry later"


def create_error_response(error_message: str, code: str = "error") -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message,
        "code": code,
    }


def create_success_response(data) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error in the response envelope.

    A 404 that no route produced (no ``APIException``) is an unmatched path:
    ``/api/*`` gets a structured error, anything else gets the SPA entry document.
    """
    if isinstance(exc, APIException):
        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(exc.detail, exc.code),
            headers=getattr(exc, "headers", None),
        )

    if exc.status_code == 404:
        path = request.url.path
        if path == "/api" or path.startswith("/api/"):
            return JSONResponse(
                status_code=404,
                content=create_error_response("API route not found", "api_route_not_found"),
            )
        # Missing uploaded content is a real 404, never the SPA page
        uploads_prefix = request.app.state.storage.url_prefix + "/"
        index_file = request.app.state.settings.index_file
        if (request.method in ("GET", "HEAD") and not path.startswith(uploads_prefix)
                and os.path.isfile(index_file)):
            return FileResponse(index_file)
        return JSONResponse(status_code=404, content=create_error_response("Not found", "not_found"))

    if exc.status_code == 405:
        return JSONResponse(
            status_code=405,
            content=create_error_response("Method not allowed", "method_not_allowed"),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail), "http_error"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=422, content=create_error_response(message, "validation_error"))
