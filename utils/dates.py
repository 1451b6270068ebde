# utils/dates.py
from datetime import datetime, timedelta, timezone

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def utcnow() -> datetime:
    # pymongo hands back naive UTC datetimes, keep ours comparable
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def day_bounds(value: datetime):
    start = start_of_day(value)
    return start, start + timedelta(days=1)


def weekday_name(value: datetime) -> str:
    return WEEKDAYS[value.weekday()]
