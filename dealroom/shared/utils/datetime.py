"""
UTC datetime utilities.

All datetimes handled by the document manager are timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def utc_now_ms() -> int:
    """Return the current Unix time in milliseconds (object key prefix)."""
    return int(utc_now().timestamp() * 1000)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    Naive values (e.g. read back from SQLite) are assumed to be UTC; aware
    values are converted. Use at repository boundaries.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)
