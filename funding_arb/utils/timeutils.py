"""UTC time helpers shared by adapters and services."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def calculate_next_funding_time(
    interval_hours: float = 8,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Calculate next funding time for a venue that settles on a fixed UTC schedule.

    The day is split into slots of ``interval_hours`` starting at 00:00 UTC and
    the first slot boundary at or after ``now`` is returned. When no boundary
    is left today, the next settlement is tomorrow at 00:00 UTC.

    Args:
        interval_hours: Funding interval in hours (non-positive values mean 8h)
        now: Reference time, defaults to the current UTC time

    Returns:
        Next funding datetime in UTC
    """
    if now is None:
        now = utcnow()
    if interval_hours <= 0:
        interval_hours = 8

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    step = timedelta(hours=interval_hours)

    boundary = midnight
    next_midnight = midnight + timedelta(days=1)
    while boundary < next_midnight:
        if boundary >= now:
            return boundary
        boundary += step

    return next_midnight


def seconds_until(moment: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` to ``moment``, rounded down. Negative if already passed."""
    return math.floor((moment - now).total_seconds())
