"""
Error translation for the API.

Every failure leaves the service in one shape:
``{"success": false, "message": ..., "code": ..., "errors"?: [...]}``.
Lifecycle components raise typed ``AppError`` subclasses; nothing below the
routers builds an error response by hand.
"""

import logging
import re
from typing import Any, Callable, Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from core.exceptions import AppError, InternalError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never reach a client or a log line
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r"bearer\s+[A-Za-z0-9\-_.=]+", re.IGNORECASE),
]

HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_REQUIRED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "UNPROCESSABLE",
}


def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message (non-strings are stringified)

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)
    return sanitized


def error_response(
    status_code: int,
    code: str,
    message: str,
    errors: Optional[list[dict[str, Any]]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Render the failure envelope."""
    content: dict[str, Any] = {
        "success": False,
        "message": sanitize_error_message(message),
        "code": code,
    }
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into ``field``/``message``/``type`` dicts."""
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" marker
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        errors.append(
            {
                "field": ".".join(loc),
                "message": sanitize_error_message(error.get("msg", "")),
                "type": error.get("type", "value_error"),
            }
        )
    return errors


def _app_error_response(exc: AppError) -> JSONResponse:
    errors = exc.details if isinstance(exc.details, list) else None
    return error_response(exc.status_code, exc.code, exc.message, errors)


def _internal_error_response(exc: Exception, debug: bool) -> JSONResponse:
    error = InternalError()
    message = error.message
    if debug:
        message = f"{message} ({type(exc).__name__})"
    return error_response(error.status_code, error.code, message)


class ErrorHandlingMiddleware:
    """
    Outermost ASGI guard.

    Catches anything that escaped the FastAPI exception handlers (for
    instance errors raised inside other middleware) and renders the same
    envelope instead of a bare 500.
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                # Headers already went out; nothing sane to send
                raise
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> JSONResponse:
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")

        if isinstance(exc, AppError):
            logger.warning(
                f"{exc.code}: {request_method} {request_path} - "
                f"{sanitize_error_message(exc.message)}"
            )
            return _app_error_response(exc)

        if isinstance(exc, StarletteHTTPException):
            return error_response(
                exc.status_code,
                HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
                exc.detail,
            )

        logger.error(
            f"Unhandled exception: {request_method} {request_path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        return _internal_error_response(exc, self.debug)


def setup_error_handlers(app: FastAPI, debug: bool = False) -> None:
    """
    Register the exception handlers that translate failures to the envelope.

    Args:
        app: FastAPI application instance
        debug: Whether 500 messages may name the exception type
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"{exc.code}: {request.method} {request.url.path} - "
            f"{sanitize_error_message(exc.message)}"
        )
        return _app_error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code,
            HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
            exc.detail,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        errors = format_validation_errors(exc)
        logger.info(
            f"Validation error: {request.method} {request.url.path} - {errors}"
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            "Request validation failed",
            errors,
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(
            f"Database integrity error: {request.method} {request.url.path}",
            exc_info=True,
        )
        return error_response(
            status.HTTP_409_CONFLICT,
            "CONFLICT",
            "Database integrity constraint violated",
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"SQLAlchemy error: {request.method} {request.url.path}", exc_info=True
        )
        return _internal_error_response(exc, debug)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        return _internal_error_response(exc, debug)
