"""
Datetime helpers shared by the selector and the API schemas.

SQLite returns naive datetimes for timezone-aware columns. Everything is
written as UTC, so a naive value is interpreted as UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def as_utc(dt: datetime) -> datetime:
    """Return dt as a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def serialize_utc_datetime(dt: Optional[datetime]) -> Optional[datetime]:
    """Field serializer form of as_utc that passes None through."""
    return as_utc(dt) if dt is not None else None
