"""
Structured logging middleware with sensitive data masking.

Each request produces a ``request_started`` and a ``request_completed``
JSON event. Engineer contact details travel through message bodies and
profiles, so emails and phone numbers are masked wherever they appear,
not only in fields with sensitive names.
"""

import logging
import time
import json
import re
import uuid
import traceback
from typing import Callable, Any, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Field names whose values are never logged
SENSITIVE_FIELD_PATTERN = re.compile(
    r'password|token|secret|authorization|cookie|phone', re.IGNORECASE
)

# PII patterns to detect and mask inside string values
PII_PATTERNS = [
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    (re.compile(r'\+?\d[\d\-\s]{8,}\d'), '[PHONE]'),
]

SKIP_PATHS = ('/health', '/ready', '/metrics')

BODY_METHODS = ('POST', 'PUT', 'PATCH')


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    return SENSITIVE_FIELD_PATTERN.search(field_name) is not None


def _mask_text(text: str) -> str:
    for pattern, replacement in PII_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, depth: int = 0, max_depth: int = 10) -> Any:
    """
    Recursively mask sensitive data in dictionaries and lists.

    Args:
        data: Data structure to mask
        depth: Current recursion depth
        max_depth: Maximum recursion depth

    Returns:
        Data structure with sensitive values masked
    """
    if depth > max_depth:
        return "[MAX_DEPTH_EXCEEDED]"
    if isinstance(data, str):
        return _mask_text(data)
    if isinstance(data, list):
        return [mask_sensitive_data(item, depth + 1, max_depth) for item in data]
    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if is_sensitive_field(str(key))
            else mask_sensitive_data(value, depth + 1, max_depth)
            for key, value in data.items()
        }
    return data


def mask_headers(headers: dict) -> dict:
    """Mask sensitive headers, keeping the scheme of an Authorization header."""
    masked = {}
    for key, value in headers.items():
        if not is_sensitive_field(key):
            masked[key] = value
            continue
        scheme, _, credentials = str(value).partition(' ')
        if key.lower() == 'authorization' and credentials:
            masked[key] = f"{scheme} [REDACTED]"
        else:
            masked[key] = "[REDACTED]"
    return masked


def should_log_request(path: str) -> bool:
    """Skip health checks to reduce noise."""
    return not path.startswith(SKIP_PATHS)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging with request IDs and timing.

    The request ID is taken from ``x-request-id`` when present, generated
    otherwise, and echoed back on the response. Authenticated requests are
    tagged with the caller's user id and role.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        max_body_size: int = 1024,
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
        request.state.request_id = request_id

        if not should_log_request(request.url.path):
            response = await call_next(request)
            response.headers['x-request-id'] = request_id
            return response

        event = {
            'request_id': request_id,
            'method': request.method,
            'path': request.url.path,
            **self._caller(request),
        }
        started = {
            **event,
            'query_params': mask_sensitive_data(dict(request.query_params)),
            'headers': mask_headers(dict(request.headers)),
        }
        if self.log_request_body and request.method in BODY_METHODS:
            body = await self._get_request_body(request)
            if body is not None:
                started['body'] = mask_sensitive_data(body)
        self._emit(logging.INFO, 'request_started', started)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            status_code = response.status_code if response is not None else 500
            completed = {
                **event,
                'status_code': status_code,
                'duration_ms': round((time.perf_counter() - start_time) * 1000, 2),
            }
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            self._emit(level, 'request_completed', completed)

        response.headers['x-request-id'] = request_id
        return response

    @staticmethod
    def _emit(level: int, name: str, fields: dict) -> None:
        logger.log(level, json.dumps({'event': name, **fields}, default=str))

    @staticmethod
    def _caller(request: Request) -> dict:
        claims = request.scope.get('auth')
        if not claims:
            return {}
        return {'user_id': claims.get('user_id'), 'role': claims.get('role')}

    async def _get_request_body(self, request: Request) -> Optional[Any]:
        """Read a JSON body for logging, or None."""
        if 'application/json' not in request.headers.get('content-type', ''):
            return None
        body_bytes = await request.body()
        if len(body_bytes) > self.max_body_size:
            return {'_truncated': True, '_size': len(body_bytes)}
        try:
            return json.loads(body_bytes)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Could not parse request body: {e}")
            return None


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    EXTRA_FIELDS = ('request_id', 'user_id')

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Whether to format logs as JSON
    """
    level = getattr(logging, log_level.upper())
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        StructuredFormatter() if json_logs
        else logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for noisy in ('uvicorn.access', 'sqlalchemy.engine'):
        logging.getLogger(noisy).setLevel(logging.WARNING)
