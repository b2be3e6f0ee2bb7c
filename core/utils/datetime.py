"""Datetime utilities for common operations."""

import calendar
import math
from datetime import datetime, timedelta, timezone
from typing import Optional


SECONDS_PER_DAY = 24 * 60 * 60


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Make a datetime timezone-aware.

    Naive values (as returned by some database drivers) are taken to be UTC.

    Args:
        dt: Datetime or None

    Returns:
        Aware datetime in UTC, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_days(dt: datetime, days: int) -> datetime:
    """
    Add days to a datetime.

    Args:
        dt: Datetime
        days: Number of days to add (can be negative)

    Returns:
        New datetime
    """
    return dt + timedelta(days=days)


def add_hours(dt: datetime, hours: int) -> datetime:
    """Add hours to a datetime."""
    return dt + timedelta(hours=hours)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months to a datetime.

    The day is clamped to the last day of the target month, so
    January 31st plus one month is the last day of February.

    Args:
        dt: Datetime
        months: Number of months to add (can be negative)

    Returns:
        New datetime
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def days_until(target: datetime, reference: datetime) -> int:
    """
    Whole days from reference until target, rounded up.

    Returns 0 when target is not after reference.
    """
    seconds = (ensure_utc(target) - ensure_utc(reference)).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / SECONDS_PER_DAY)
