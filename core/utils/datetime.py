"""Datetime utilities for common operations."""

from datetime import datetime, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes, convert aware ones to UTC.

    Some drivers (SQLite) hand timestamps back without tzinfo even for
    ``DateTime(timezone=True)`` columns; values are always stored in UTC.

    Args:
        dt: Datetime to normalise

    Returns:
        Timezone-aware UTC datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_past(dt: datetime, reference: Optional[datetime] = None) -> bool:
    """
    Check if datetime is strictly before ``reference`` (default: now).

    Args:
        dt: Datetime to check
        reference: Point in time to compare against

    Returns:
        True if in the past
    """
    return ensure_utc(dt) < ensure_utc(reference or now())

