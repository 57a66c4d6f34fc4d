"""
Month keys.

Budgets and spending are bucketed by calendar month ("YYYY-MM").
The bucket of a transaction is taken from the local calendar, so a
timestamp near midnight at month end lands in the month the user saw.
The engine accepts any MonthKeyFunc, which keeps the calendar choice
at the boundary.
"""

from datetime import date, datetime, timezone
from typing import Callable, Union


MonthKeyFunc = Callable[[datetime], str]


def month_key_for(moment: Union[datetime, date]) -> str:
    """
    Derive "YYYY-MM" from the local calendar.

    Aware datetimes are converted to local time first; naive datetimes
    and plain dates are taken as already local.
    """
    if isinstance(moment, datetime) and moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment.year:04d}-{moment.month:02d}"


def utc_month_key_for(moment: datetime) -> str:
    """Month key in UTC. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment.year:04d}-{moment.month:02d}"


def month_key(year: int, month: int) -> str:
    """Build a month key from its parts, validating the month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    return f"{year:04d}-{month:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """Split "YYYY-MM" into (year, month)."""
    try:
        year_str, month_str = key.split("-")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise ValueError(f"Invalid month key: {key!r}")
    if len(year_str) != 4 or len(month_str) != 2 or not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {key!r}")
    return year, month


def as_local_naive(moment: datetime) -> datetime:
    """
    Naive local time.

    Aware datetimes are converted to the local zone and stripped, so every
    stored date compares with every other.
    """
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment
