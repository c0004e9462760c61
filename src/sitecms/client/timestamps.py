"""
ISO-8601 timestamp helpers shared by the cache and the coordinator.

Timestamps travel as strings in the ``updatedAt`` field. The content store
writes them in UTC with a ``Z`` suffix and millisecond precision.
"""

from datetime import datetime, timezone
from typing import Optional


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds and ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    """Current time as an ``updatedAt`` string."""
    return format_timestamp(datetime.now(timezone.utc))


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ``updatedAt`` value into an aware UTC datetime.

    Accepts a trailing ``Z``. Naive values are taken as UTC.

    Args:
        value: Timestamp string (or datetime)

    Returns:
        Aware datetime, or None if the value is empty or unparseable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
