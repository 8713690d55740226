"""Error taxonomy and the JSON error surface.

Every failure a route can produce is an AppError subclass carrying its HTTP
status. Handlers registered in create_app() turn them (and FastAPI's own
validation/HTTP errors) into `{"error": "<message>"}` bodies, so clients see
one error shape everywhere.

Persistence and provider failures are converted at the route boundary with
persistence_errors(): the raw exception is logged with context, the client
only gets the generic message.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class Unauthenticated(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class InvalidArgument(AppError):
    status_code = 400


class InternalError(AppError):
    status_code = 500


class PageRedirect(AppError):
    """Raised by page routes: the browser is sent elsewhere instead of an error body."""

    status_code = 307

    def __init__(self, location: str):
        super().__init__(f"Redirect to {location}")
        self.location = location


@contextmanager
def persistence_errors(operation: str, message: str, **context) -> Iterator[None]:
    """Log database/provider failures and re-raise them as InternalError."""
    try:
        yield
    except (SQLAlchemyError, httpx.HTTPError) as e:
        logger.error(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise InternalError(message) from e


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that render every error as `{"error": ...}`."""

    @app.exception_handler(PageRedirect)
    async def handle_page_redirect(request: Request, exc: PageRedirect):
        return RedirectResponse(exc.location, status_code=exc.status_code)

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request data",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            "request.unhandled_error",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )
