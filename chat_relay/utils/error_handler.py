"""Error handling utilities and custom exceptions.

Every error leaving the API uses the same envelope, ``{"error": message}``,
so the browser client only has one shape to parse.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config.app_config import get_app_config


class ChatError(Exception):
    """Exception raised when a chat operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Chat request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidConversationError(ChatError):
    """The submitted conversation cannot be relayed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request body"


class ProviderError(ChatError):
    """The upstream language model call failed (network, timeout, non-2xx)."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to get AI response. Please try again."


def error_response(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def http_exception_handler(request: Request, exc: ChatError) -> JSONResponse:
    """Convert a ChatError into its JSON error envelope."""
    if exc.status_code >= 500:
        logger.error("ChatError on {} {}: {}", request.method, request.url.path, exc)
    else:
        logger.warning("Rejected {} {}: {}", request.method, request.url.path, exc)
    return error_response(exc.status_code, exc.message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures as 400 with a readable message."""
    message = "; ".join(_describe_validation_error(error) for error in exc.errors())
    logger.warning("Invalid request to {}: {}", request.url.path, message)
    return error_response(status.HTTP_400_BAD_REQUEST, message or "Invalid request body")


async def starlette_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors (404, 405, ...) in the error envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Not Found", path=request.url.path)
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; hides internals in production."""
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    message = "Internal Server Error" if get_app_config().is_production else str(exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to ``app``."""
    app.add_exception_handler(ChatError, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def _describe_validation_error(error: dict[str, object]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")  # type: ignore[union-attr]
    message = str(error.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message
