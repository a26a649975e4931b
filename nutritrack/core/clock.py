"""Calendar-day convention shared by the streak engine and the task scheduler."""

from datetime import date, datetime
from typing import Optional


def local_now(now: Optional[datetime] = None) -> datetime:
    """Naive datetimes are taken as local wall-clock time; aware ones are converted to it."""
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def local_day(now: Optional[datetime] = None) -> date:
    return local_now(now).date()
