"""
Error taxonomy and HTTP mapping.

Services raise the exceptions defined here instead of ``HTTPException``
so that business rules stay independent of FastAPI.  The handlers
installed by ``install_exception_handlers`` turn them into JSON
responses of the form ``{"error": "<message>"}``.

Unexpected failures (for example an ``sqlite3.Error``) are logged with
their traceback and answered with a generic 500 message; internal
details never reach the client.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map to a specific HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(ApiError):
    pass


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Build a short message from the first pydantic validation problem."""
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    # loc looks like ("body", "monthlyAmount"); drop the "body" part
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    message = first.get("msg", ValidationError.default_message)
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": InternalError.default_message})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_error(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": InternalError.default_message},
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the error handlers on ``app``."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
