"""Rental duration between pickup and drop-off.

Durations are billed in half-hour steps and always rounded up:
70 minutes bills as 1.5 hours, exactly 60 minutes as 1.0 hour and any
positive duration of 30 minutes or less as 0.5 hours.
"""
from dataclasses import dataclass
from datetime import date, time, datetime, timedelta
from typing import Optional

HALF_HOUR = timedelta(minutes=30)


@dataclass(frozen=True)
class TimeRange:
    total_hours: float
    valid: bool


INVALID_RANGE = TimeRange(total_hours=0.0, valid=False)


def combine(d: Optional[date], t: Optional[time]) -> Optional[datetime]:
    """Local wall-clock instant for a date and a time; no timezone is attached."""
    if d is None or t is None:
        return None
    return datetime.combine(d, t.replace(tzinfo=None))


def billable_half_hours(elapsed: timedelta) -> int:
    # integer microseconds so exact half-hour boundaries are not pushed up
    elapsed_us = elapsed // timedelta(microseconds=1)
    half_hour_us = HALF_HOUR // timedelta(microseconds=1)
    return -(-elapsed_us // half_hour_us)


def compute_time_range(
    pickup_date: Optional[date],
    pickup_time: Optional[time],
    dropoff_date: Optional[date],
    dropoff_time: Optional[time],
) -> TimeRange:
    pickup = combine(pickup_date, pickup_time)
    dropoff = combine(dropoff_date, dropoff_time)
    if pickup is None or dropoff is None:
        return INVALID_RANGE

    elapsed = dropoff - pickup
    if elapsed <= timedelta(0):
        return INVALID_RANGE

    return TimeRange(total_hours=billable_half_hours(elapsed) / 2, valid=True)
