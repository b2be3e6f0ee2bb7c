"""
Application workflow rules.

Status changes are permissive: the owning company may move an application
from any status to any other, including back out of a terminal status.
The terminal set exists for display only.

Contact permission is a one-way latch. The first engineer message on an
application unlocks the engineer's private contact fields for the company,
and nothing ever clears it.
"""

from typing import Any, Optional

from core.errors import EmptyContent, ValidationError
from database.models.applications import Application, ApplicationStatus
from database.models.communications import SenderType

INITIAL_STATUS = ApplicationStatus.PENDING

TERMINAL_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})

CONTACT_FIELDS = ("phone_number", "email")


def parse_status(value: Any) -> ApplicationStatus:
    """Coerce a raw status value, raising ValidationError on unknown labels."""
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}")


def is_terminal(status: ApplicationStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: ApplicationStatus, new: ApplicationStatus) -> bool:
    """Every transition is allowed."""
    return True


def apply_status(application: Application, new_status: Any) -> ApplicationStatus:
    """
    Overwrite the application's status.

    Args:
        application: Application row
        new_status: Target status (enum or raw value)

    Returns:
        The previous status
    """
    target = parse_status(new_status)
    previous = application.status
    if not can_transition(previous, target):
        raise ValidationError(f"Cannot move application from {previous} to {target}")
    application.status = target
    return previous


def clean_message_content(content: Optional[str]) -> str:
    """Strip message content; blank content is rejected."""
    cleaned = (content or "").strip()
    if not cleaned:
        raise EmptyContent()
    return cleaned


def latch_contact_permission(application: Application, sender_type: SenderType) -> bool:
    """
    Set the contact latch when the engineer writes.

    Returns:
        True if this call flipped the latch
    """
    if sender_type != SenderType.ENGINEER or application.has_contact_permission:
        return False
    application.has_contact_permission = True
    return True


def redact_contact(profile: dict[str, Any], has_contact_permission: bool) -> dict[str, Any]:
    """
    Hide an engineer's private contact fields from a company.

    The stored record always has them; this is a presentation rule.
    """
    redacted = dict(profile)
    if not has_contact_permission:
        for field in CONTACT_FIELDS:
            if field in redacted:
                redacted[field] = None
    redacted["has_contact_permission"] = has_contact_permission
    return redacted
