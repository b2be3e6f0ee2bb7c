"""
Domain errors raised by the workflow engine and services.

Every error carries the HTTP status and machine-readable code it maps to;
the API layer turns them into ``{"error": {...}}`` responses.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for all workflow errors."""

    status_code: int = 400
    code: str = "DOMAIN_ERROR"
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the error response body."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        payload.update(self.details)
        return payload


class Unauthorized(DomainError):
    """No session or an invalid one."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(DomainError):
    """Valid session but wrong role or not the resource owner."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "You don't have permission to perform this action"


class NotFound(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class DuplicateApplication(DomainError):
    status_code = 409
    code = "DUPLICATE_APPLICATION"
    default_message = "You have already applied to this posting"


class DuplicateAccount(DomainError):
    status_code = 409
    code = "DUPLICATE_ACCOUNT"
    default_message = "An account with this email already exists"


class EmptyContent(DomainError):
    status_code = 400
    code = "EMPTY_CONTENT"
    default_message = "Message content must not be empty"


class ValidationError(DomainError):
    """Malformed input that passed schema validation but not business rules."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input provided"


class NotEntitled(DomainError):
    """
    Entitlement check failed.

    Distinct from Forbidden: the caller is allowed in principle and can
    fix it by paying, so the response carries ``requires_payment``.
    """

    status_code = 403
    code = "NOT_ENTITLED"
    default_message = "A paid plan is required to use this feature"

    def __init__(
        self,
        message: Optional[str] = None,
        feature: Optional[str] = None,
        requires_payment: bool = True,
    ):
        super().__init__(message, feature=feature, requires_payment=requires_payment)
        self.feature = feature
        self.requires_payment = requires_payment
