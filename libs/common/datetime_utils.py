"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat a naive datetime as UTC; convert aware ones to UTC.

    Some drivers (SQLite) hand back naive values for ``DateTime(timezone=True)``
    columns, so anything read from the store goes through here before it is
    compared with ``utc_now()``.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc(value: datetime, local_tz: str) -> datetime:
    """Normalise client input: naive values are read in ``local_tz``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(local_tz))
    return value.astimezone(timezone.utc)
