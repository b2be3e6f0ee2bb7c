"""
Security utilities: password hashing, JWT access tokens and one-time tokens.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, TypedDict

import bcrypt
import jwt

from core.config import settings


class JWTPayload(TypedDict, total=False):
    """Claims carried by an access token."""
    user_id: int
    email: str
    role: str
    type: str
    exp: int
    iat: int
    jti: str


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plain password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: User ID
        email: User email
        role: COMPANY or ENGINEER
        secret_key: Signing secret (defaults to settings)
        algorithm: Signing algorithm (defaults to settings)
        expires_delta: Lifetime (defaults to settings)

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload: JWTPayload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Token is malformed, badly signed or not an access token
    """
    payload = jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    if "user_id" not in payload or "role" not in payload:
        raise jwt.InvalidTokenError("Token missing user_id or role")
    return payload


def generate_approval_token() -> str:
    """URL-safe single-use token for payment approval links."""
    return secrets.token_urlsafe(32)
