"""
Tests for core security utilities.

Tests:
- Password hashing and verification
- Access token creation and validation
- Token expiration
- Approval tokens
"""

import pytest
from datetime import datetime, timedelta, timezone
import jwt as pyjwt

from core.security import (
    create_access_token,
    generate_approval_token,
    hash_password,
    verify_jwt_token,
    verify_password,
)
from core.config import settings


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password(self):
        """Test password hashing."""
        password = "SecurePassword123!"
        hashed = hash_password(password)

        assert isinstance(hashed, str)
        assert hashed != password
        assert hashed.startswith("$2b$")  # bcrypt format

    def test_hash_password_different_each_time(self):
        """Test that hashing same password produces different hashes."""
        assert hash_password("SecurePassword123!") != hash_password("SecurePassword123!")

    def test_verify_password(self):
        hashed = hash_password("SecurePassword123!")

        assert verify_password("SecurePassword123!", hashed) is True
        assert verify_password("WrongPassword", hashed) is False

    def test_verify_against_malformed_hash(self):
        """A corrupt stored hash fails closed."""
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    """Test access token creation and validation."""

    def test_round_trip_claims(self):
        token = create_access_token(user_id=7, email="hr@acme.example", role="COMPANY")
        payload = verify_jwt_token(token)

        assert payload["user_id"] == 7
        assert payload["role"] == "COMPANY"
        assert payload["type"] == "access"
        assert payload["exp"] > payload["iat"]

    def test_unique_token_ids(self):
        first = verify_jwt_token(create_access_token(1, "a@example.com", "ENGINEER"))
        second = verify_jwt_token(create_access_token(1, "a@example.com", "ENGINEER"))
        assert first["jti"] != second["jti"]

    def test_expired_token(self):
        token = create_access_token(
            1, "a@example.com", "ENGINEER", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(pyjwt.ExpiredSignatureError):
            verify_jwt_token(token)

    def test_wrong_secret(self):
        token = create_access_token(1, "a@example.com", "ENGINEER", secret_key="x" * 40)
        with pytest.raises(pyjwt.InvalidSignatureError):
            verify_jwt_token(token)

    def test_non_access_token_rejected(self):
        now = datetime.now(timezone.utc)
        token = pyjwt.encode(
            {
                "user_id": 1,
                "role": "COMPANY",
                "type": "refresh",
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(pyjwt.InvalidTokenError):
            verify_jwt_token(token)

    def test_missing_role_rejected(self):
        now = datetime.now(timezone.utc)
        token = pyjwt.encode(
            {"user_id": 1, "type": "access", "exp": int((now + timedelta(hours=1)).timestamp())},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(pyjwt.InvalidTokenError):
            verify_jwt_token(token)

    def test_none_algorithm_rejected(self):
        token = pyjwt.encode(
            {"user_id": 1, "role": "COMPANY", "type": "access"}, key=None, algorithm="none"
        )
        with pytest.raises(pyjwt.InvalidTokenError):
            verify_jwt_token(token)


class TestApprovalTokens:
    def test_tokens_are_unique_and_url_safe(self):
        tokens = {generate_approval_token() for _ in range(50)}

        assert len(tokens) == 50
        for token in tokens:
            assert len(token) >= 40
            assert all(c.isalnum() or c in "-_" for c in token)
