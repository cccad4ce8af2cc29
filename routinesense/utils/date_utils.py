"""
Date/time helpers shared by the stores and the streak engine.
Handles MongoDB's requirement for timezone-naive datetimes.
"""

from datetime import datetime, timedelta, date, timezone
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

def get_utc_now() -> datetime:
    """
    Get current UTC time as timezone-NAIVE datetime for MongoDB compatibility.
    MongoDB stores all datetimes as UTC internally but expects naive datetimes.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)

def ensure_mongodb_compatible(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is compatible with MongoDB (timezone-naive UTC).

    Args:
        dt: Datetime object (can be naive or aware)

    Returns:
        datetime: Timezone-naive datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        utc_dt = dt.astimezone(timezone.utc)
        return utc_dt.replace(tzinfo=None)

    return dt

def utc_today() -> date:
    """Calendar day in UTC, the day completions are recorded against"""
    return get_utc_now().date()

def to_day_string(day: Union[date, datetime]) -> str:
    """Format a calendar day as YYYY-MM-DD"""
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()

def parse_day_string(value: str) -> date:
    """Parse YYYY-MM-DD; a full ISO timestamp is cut down to its day"""
    return date.fromisoformat(value[:10])

def iter_days_back(start: date, max_days: int):
    """Yield start, start-1, ... for at most max_days days"""
    for offset in range(max_days):
        yield start - timedelta(days=offset)
