# campus_gate/utils/clock.py
"""Campus-local time helpers shared by schedule matching and visitor passes."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from campus_gate.config import settings

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every *_at / timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def to_campus_time(moment: datetime, offset_minutes: Optional[int] = None) -> datetime:
    """Shift a UTC timestamp (naive or aware) to campus wall-clock time."""
    if offset_minutes is None:
        offset_minutes = settings.CAMPUS_UTC_OFFSET_MINUTES
    return to_naive_utc(moment) + timedelta(minutes=offset_minutes)


def campus_date(moment: datetime) -> date:
    return to_campus_time(moment).date()


def day_name(moment: datetime) -> str:
    return DAY_NAMES[moment.weekday()]


def time_to_minutes(value: str) -> int:
    """'HH:MM' → minutes since midnight. Raises ValueError on malformed input."""
    hours, minutes = value.strip().split(":")
    h, m = int(hours), int(minutes)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"time out of range: {value}")
    return h * 60 + m


def campus_day_bounds(moment: datetime) -> tuple:
    """UTC [start, end) of the campus-local day containing `moment`."""
    offset = timedelta(minutes=settings.CAMPUS_UTC_OFFSET_MINUTES)
    local_midnight = datetime.combine(campus_date(moment), datetime.min.time())
    start = local_midnight - offset
    return start, start + timedelta(days=1)


RANGE_DAYS = {"week": 7, "month": 30}


def range_bounds(range_name: str, moment: datetime) -> tuple:
    """
    UTC [start, end] for a log viewer range ending at `moment`:
    day = campus day so far, week = last 7 days, month = last 30 days.
    """
    moment = to_naive_utc(moment)
    if range_name in RANGE_DAYS:
        return moment - timedelta(days=RANGE_DAYS[range_name]), moment
    return campus_day_bounds(moment)[0], moment
