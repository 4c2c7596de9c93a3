"""
Ride duration derivation.

duration_minutes is a denormalized copy of (end_time - start_time). It is
never taken from callers; these helpers are the only place it is computed.
"""
import math
from datetime import datetime, timezone
from typing import Optional


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a timestamp to timezone-aware UTC.

    Naive datetimes are taken to already be UTC (that is what the database
    hands back for SQLite, and what clients omitting an offset mean).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start_time: datetime, end_time: datetime) -> float:
    """Exact minute difference, negative when end precedes start."""
    return (to_utc(end_time) - to_utc(start_time)).total_seconds() / 60


def rounded_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """
    Duration used when a ride is created: nearest whole minute, halves up.

    Examples:
        10:00 -> 10:30       => 30
        10:00 -> 10:30:30    => 31
    """
    return math.floor(minutes_between(start_time, end_time) + 0.5)


def exact_duration_minutes(start_time: datetime, end_time: datetime) -> float:
    """Duration used when both times are updated: unrounded, two-decimal storage precision."""
    return round(minutes_between(start_time, end_time), 2)
