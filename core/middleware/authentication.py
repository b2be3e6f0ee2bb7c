"""
Authentication middleware.

Validates a bearer token when one is sent and stores its claims on the
request scope. Requests without a token pass through as anonymous; the
route dependencies decide whether anonymous access is acceptable. A token
that is present but expired or invalid is rejected here with 401.
"""

import logging
from typing import Callable, Optional
import jwt
from fastapi import Request, status

from core.middleware.error_handling import error_response
from core.security import verify_jwt_token, JWTPayload

logger = logging.getLogger(__name__)

# Public endpoints never look at the Authorization header
PUBLIC_ENDPOINTS = [
    "/health",
    "/api/v1/auth/login",
    "/api/v1/auth/register/company",
    "/api/v1/auth/register/engineer",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class AuthenticationError(Exception):
    """Base exception for authentication errors."""
    pass


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""
    pass


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""
    pass


class AuthenticationMiddleware:
    """Decode bearer tokens into ``scope["auth"]``."""

    def __init__(
        self,
        app: Callable,
        jwt_secret: Optional[str] = None,
        jwt_algorithm: Optional[str] = None,
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification (defaults to settings)
            jwt_algorithm: JWT signing algorithm (defaults to settings)
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        scope["auth"] = None

        if self._is_public_endpoint(request.url.path):
            await self.app(scope, receive, send)
            return

        token = self._extract_token(request)
        if token:
            try:
                scope["auth"] = self._decode(token)
            except TokenExpiredError:
                await self._send_error_response(
                    scope,
                    receive,
                    send,
                    code="TOKEN_EXPIRED",
                    message="Authentication token has expired. Please log in again.",
                )
                return
            except TokenInvalidError as e:
                logger.warning(f"Invalid token: {str(e)}")
                await self._send_error_response(
                    scope,
                    receive,
                    send,
                    code="TOKEN_INVALID",
                    message="Invalid authentication token.",
                )
                return

        await self.app(scope, receive, send)

    def _decode(self, token: str) -> JWTPayload:
        try:
            return verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(str(e))

    def _is_public_endpoint(self, path: str) -> bool:
        if path in PUBLIC_ENDPOINTS:
            return True
        public_prefixes = ["/health", "/docs", "/redoc", "/openapi"]
        return any(path.startswith(prefix) for prefix in public_prefixes)

    def _extract_token(self, request: Request) -> Optional[str]:
        """Extract JWT token from the Authorization header."""
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]
        return None

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        code: str,
        message: str,
    ) -> None:
        response = error_response(
            status.HTTP_401_UNAUTHORIZED,
            code,
            message,
            scope.get("path", "unknown"),
            scope.get("method", "unknown"),
            headers={"WWW-Authenticate": "Bearer"},
        )
        await response(scope, receive, send)


def get_token_payload(request: Request) -> Optional[JWTPayload]:
    """Claims of the current request's token, or None when anonymous."""
    return request.scope.get("auth")
