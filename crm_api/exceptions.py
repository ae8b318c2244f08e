"""Application exceptions and their HTTP rendering."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "APP_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppException):
    """Malformed or missing identifier or enum input, caught before the database."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class NotFoundError(AppException):
    """A record expected to exist after a write could not be read back."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class PersistenceError(AppException):
    """The database call itself failed; the driver error is chained as ``__cause__``."""

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        super().__init__(message or f"Database operation '{operation}' failed")


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an application exception as JSON."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )
