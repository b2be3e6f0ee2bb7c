"""
Unread message accounting.

A reader's unread messages on an application are the counterpart's
messages created strictly after the reader's last read marker. No marker
means the thread was never opened and every counterpart message is unread.
"""

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from core.utils.datetime import ensure_utc


def _role_value(role: Any) -> str:
    return getattr(role, "value", role)


def is_unread(message: Any, reader_role: Any, last_read_at: Optional[datetime]) -> bool:
    """Whether a single message counts as unread for the reader."""
    if _role_value(message.sender_type) == _role_value(reader_role):
        return False
    if last_read_at is None:
        return True
    return ensure_utc(message.created_at) > ensure_utc(last_read_at)


def count_unread(
    messages: Iterable[Any],
    reader_role: Any,
    last_read_at: Optional[datetime],
) -> int:
    """
    Count unread messages on one application.

    Args:
        messages: Objects with ``sender_type`` and ``created_at``
        reader_role: Role of the reader (COMPANY or ENGINEER)
        last_read_at: Reader's marker for this application, or None

    Returns:
        Number of unread counterpart messages
    """
    return sum(1 for message in messages if is_unread(message, reader_role, last_read_at))


def unread_by_application(
    messages: Iterable[Any],
    reader_role: Any,
    markers: Mapping[int, datetime],
) -> dict[int, int]:
    """Unread counts keyed by ``application_id`` for a batch of messages."""
    counts: dict[int, int] = {}
    for message in messages:
        application_id = message.application_id
        counts.setdefault(application_id, 0)
        if is_unread(message, reader_role, markers.get(application_id)):
            counts[application_id] += 1
    return counts


def aggregate_unread(per_application: Mapping[int, int]) -> int:
    """Dashboard badge total."""
    return sum(per_application.values())


def first_unread_index(
    messages: list[Any], reader_role: Any, last_read_at: Optional[datetime]
) -> Optional[int]:
    """Index of the first unread message in a thread, for scroll-to behaviour."""
    for index, message in enumerate(messages):
        if is_unread(message, reader_role, last_read_at):
            return index
    return None
