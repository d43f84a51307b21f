"""
utils/timestamps.py — UTC helpers shared by models and services.

Everything is stored and rendered in UTC. SQLite hands back naive values and
PostgreSQL renders timestamptz in the session time zone; as_utc() brings both
back to an aware UTC datetime.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive values are read as UTC; aware values are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
