"""
Error taxonomy and application-wide exception handlers.

Services raise subclasses of ``AppError`` for expected failures; the
handler registered by ``register_exception_handlers`` turns them into
``{"message": ...}`` responses with the matching status code.
Unmatched routes and unexpected exceptions are formatted as
``{"success": false, "message": ..., "stack": ...}`` where ``stack``
is only included in a development environment.
"""

import logging
import traceback
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures that map to a specific HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not Found"


class ConflictError(AppError):
    # Duplicate unique fields are reported as a plain bad request.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"


@contextmanager
def internal_error(message: str) -> Iterator[None]:
    """Map unexpected exceptions raised in the block to ``InternalError``.

    ``AppError`` instances pass through untouched.  Anything else is
    logged with its traceback and replaced by an ``InternalError``
    carrying the generic ``message``.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as e:
        logger.exception("%s: %s", message, e)
        raise InternalError(message) from e


def _error_body(request: Request, message: str, exc: BaseException | None = None) -> dict:
    body = {"success": False, "message": message}
    if exc is not None and request.app.state.settings.is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.message, exc))
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Format framework-raised HTTP errors, e.g. 404 for unmatched routes."""
    status_code = exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
    message = exc.detail if isinstance(exc.detail, str) else "Internal Server Error"
    log = logger.error if status_code >= 500 else logger.warning
    log("%s %s -> %s: %s", request.method, request.url.path, status_code, message)
    return JSONResponse(
        status_code=status_code,
        content=_error_body(request, message, exc),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    status_code = getattr(exc, "status_code", None) or status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal Server Error"
    if request.app.state.settings.is_development and str(exc):
        message = str(exc)
    return JSONResponse(status_code=status_code, content=_error_body(request, message, exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
