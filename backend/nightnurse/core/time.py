"""Time utilities for timezone-aware UTC datetimes."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and store clocks."""
    return datetime.now(UTC)


def to_naive_utc(value: datetime) -> datetime:
    """Convert to a naive UTC datetime, the form SQLite columns hold."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
