"""Timestamp utilities for UTC handling and datetime formatting.

This module provides utilities for working with timestamps in UTC:
- Getting current UTC time
- Converting timezone-naive to timezone-aware UTC
- Formatting ISO 8601 strings for exports and persistence
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    If the datetime is timezone-naive, it's treated as UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    # If timezone-naive, treat as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)



def format_timestamp(dt: datetime, include_microseconds: bool = False) -> str:
    """Format a datetime as ISO 8601 string in UTC.

    Args:
        dt: Datetime to format
        include_microseconds: Whether to include microseconds in output

    Returns:
        ISO 8601 formatted string with 'Z' suffix

    Example:
        >>> from datetime import datetime, timezone
        >>> dt = datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc)
        >>> format_timestamp(dt)
        '2025-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""

    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
