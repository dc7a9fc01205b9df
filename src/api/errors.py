"""
JSON error responses.

Every failure leaves the API as {"error": <message>} with an optional
"details" string carrying the raw upstream message. Status codes:
400 for validation, 401 for authentication, 500 for everything else.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.auth.session import AuthConfigurationError, AuthorizationError
from ..core.images.models import UploadValidationError
from ..infrastructure.storage.client import StorageError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """An error with a chosen status and client-facing message."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return error_response(exc.status_code, exc.error, exc.details)

    @app.exception_handler(UploadValidationError)
    async def validation_error_handler(request: Request, exc: UploadValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", details)

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        return error_response(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(AuthConfigurationError)
    async def auth_configuration_handler(request: Request, exc: AuthConfigurationError):
        logger.error("Authentication is not configured", extra={"path": request.url.path})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Storage operation failed",
            str(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Logs the full error server-side. The response carries only a
        generic message, with no details.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
        )
