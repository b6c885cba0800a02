"""
Error types for the auth API and its exception handlers.

Validation and authentication errors carry a message meant for the end user.
Persistence and unexpected errors are rendered with a generic message only;
the detail goes to the log.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised by the storage layer when a read or write cannot be completed."""


class AuthAPIError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AuthAPIError):
    """Missing or malformed request fields."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(AuthAPIError):
    """Bad credentials or a missing token."""
    status_code = status.HTTP_401_UNAUTHORIZED


class Conflict(AuthAPIError):
    """Duplicate email or username."""
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(AuthAPIError):
    """The credential store failed; the message is always generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def auth_api_error_handler(request: Request, exc: AuthAPIError) -> JSONResponse:
    """Render an ``AuthAPIError`` as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(
            f"Auth API error: {exc.message}",
            exc_info=exc.__cause__ is not None,
            extra={"extra_fields": {
                "path": request.url.path,
                "action": request.query_params.get("action"),
                "status_code": exc.status_code,
            }}
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, reveal nothing."""
    logger.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"extra_fields": {
            "path": request.url.path,
            "action": request.query_params.get("action"),
        }}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the auth API exception handlers to ``app``."""
    app.add_exception_handler(AuthAPIError, auth_api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
