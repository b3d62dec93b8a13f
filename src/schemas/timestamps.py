"""Timestamp helpers shared by the schemas.

Object-store timestamps are compared as strings, so every timestamp that
reaches the ledger is rendered through ``format_timestamp``.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with milliseconds.

    Example: ``2024-01-01T00:00:00.000Z``
    """
    utc = ensure_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by ``format_timestamp`` (or any ISO string)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))


def to_storage(value: datetime | None) -> datetime | None:
    """Normalize a datetime to naive UTC for database columns."""
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)
