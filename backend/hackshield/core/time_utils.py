"""Time helpers — one place for "now" and timezone normalization.

Invariants:
    - Every datetime leaving this module is timezone-aware UTC
    - Naive datetimes are assumed to be UTC (SQLite drops tzinfo on read)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values, convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None
