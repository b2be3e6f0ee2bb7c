"""
Error handling middleware with error message sanitization.

Every failure leaves the API as ``{"error": {"code", "message", "path",
"method", ...}}``. Domain errors carry their own status and code; database
errors are mapped through ``DATABASE_ERRORS``; anything else is a 500 whose
message never reaches the client.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from core.errors import DomainError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never be returned or logged
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'\b\d{16}\b'),  # Credit card
]

# Checked in order; the first matching class wins
DATABASE_ERRORS = (
    (IntegrityError, status.HTTP_409_CONFLICT, "INTEGRITY_ERROR",
     "Database integrity constraint violated"),
    (OperationalError, status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_ERROR",
     "Database service temporarily unavailable"),
    (SQLAlchemyError, status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR",
     "A database error occurred"),
)


def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def error_response(
    status_code: int,
    code: str,
    message: str,
    path: str,
    method: str,
    request_id: Optional[str] = None,
    headers: Optional[dict] = None,
    **extra: Any,
) -> JSONResponse:
    """Build the error envelope shared by the middleware and the handlers."""
    body = {"code": code, "message": message, **extra, "path": path, "method": method}
    if request_id:
        body["request_id"] = request_id
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Format validation errors into a user-friendly structure."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def _domain_fields(exc: DomainError) -> dict[str, Any]:
    fields = exc.to_dict()
    fields["message"] = sanitize_error_message(fields["message"])
    return fields


def _debug_details(exc: Exception) -> dict[str, Any]:
    return {
        "type": type(exc).__name__,
        "message": sanitize_error_message(exc),
        "traceback": traceback.format_exc(),
    }


class ErrorHandlingMiddleware:
    """
    Error boundary around the routes.

    Exceptions that escape the registered handlers (database errors and
    plain bugs) are logged and turned into sanitized JSON here.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to include the exception and traceback in responses
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> JSONResponse:
        path = scope.get("path", "unknown")
        method = scope.get("method", "unknown")
        request_id = dict(scope.get("headers") or []).get(b"x-request-id")
        context = {
            "path": path,
            "method": method,
            "request_id": request_id.decode() if request_id else None,
        }

        if isinstance(exc, DomainError):
            logger.warning(f"{method} {path} rejected: {exc.code}")
            return error_response(exc.status_code, **_domain_fields(exc), **context)

        for exc_class, status_code, code, message in DATABASE_ERRORS:
            if isinstance(exc, exc_class):
                break
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            code = "INTERNAL_SERVER_ERROR"
            message = "An unexpected error occurred"

        logger.error(
            f"{type(exc).__name__} on {method} {path}: {sanitize_error_message(exc)}",
            exc_info=True,
        )
        extra = {"details": _debug_details(exc)} if self.debug else {}
        return error_response(status_code, code, message, **context, **extra)


def setup_error_handlers(app):
    """
    Register exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """Handle workflow errors raised by services."""
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
        return error_response(
            exc.status_code,
            path=str(request.url.path),
            method=request.method,
            request_id=request.headers.get("x-request-id"),
            **_domain_fields(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code,
            "HTTP_EXCEPTION",
            sanitize_error_message(exc.detail),
            str(request.url.path),
            request.method,
            request_id=request.headers.get("x-request-id"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            str(request.url.path),
            request.method,
            request_id=request.headers.get("x-request-id"),
            details=format_validation_errors(exc),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Last resort for errors raised outside the error handling middleware."""
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(exc)}",
            exc_info=True,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
            str(request.url.path),
            request.method,
        )
