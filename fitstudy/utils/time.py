# fitstudy/utils/time.py

import calendar
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to aware UTC.

    SQLite hands timestamps back without tzinfo; they are stored in UTC, so a
    naive value is read as UTC rather than local time.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(now: Optional[datetime]) -> datetime:
    """Use the caller's clock reading when given, otherwise read it once here."""
    return ensure_utc(now) if now is not None else utcnow()


def add_months(value: datetime, months: int) -> datetime:
    """
    Move a datetime forward by whole calendar months.

    The month field advances and carries into the year. When the target
    month is shorter than the source day, the day is clamped to the last day
    of that month: Jan 31 + 3 months is Apr 30, Nov 30 + 3 months is Feb 28
    (Feb 29 in leap years). Time of day and tzinfo are kept.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
