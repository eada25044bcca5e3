"""Date manipulation utilities"""

from datetime import date, datetime, time
from typing import Optional, Tuple


def day_bounds(start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Expand a date range to [start 00:00:00, end 23:59:59]; missing bounds stay open"""
    start_dt = datetime.combine(start, time.min) if start else None
    end_dt = datetime.combine(end, time(23, 59, 59)) if end else None
    return start_dt, end_dt


def whole_hours_between(a: datetime, b: datetime) -> int:
    """Absolute number of complete hours between two instants"""
    return int(abs((b - a).total_seconds()) // 3600)


def whole_days_between(a: datetime, b: datetime) -> int:
    """Complete 24-hour periods from a to b, truncated toward zero (negative when b is earlier)"""
    seconds = (b - a).total_seconds()
    days = int(abs(seconds) // 86400)
    return days if seconds >= 0 else -days


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to local wall-clock time; naive values pass through"""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
