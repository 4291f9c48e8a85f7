"""Date manipulation utilities"""

from datetime import datetime, timezone
from typing import Optional


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_key(value: Optional[datetime]) -> str:
    """ISO calendar day (YYYY-MM-DD) of a timestamp in UTC"""
    if value is None:
        raise ValueError("Transaction has no created_at timestamp")
    return to_utc(value).date().isoformat()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
