"""Helpers for the compact `YYYYMMDD` date strings used by grid parameters."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import TypeAlias

YYYYMMDD = "%Y%m%d"
_COMPACT_DATE = re.compile(r"^\d{8}$")

DateLike: TypeAlias = date | datetime


def _as_date(value: DateLike | None) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def format_yyyymmdd(value: DateLike | None) -> str:
    """Format a date as `YYYYMMDD`; empty string for `None`."""
    if value is None:
        return ""
    return value.strftime(YYYYMMDD)


def parse_yyyymmdd(text: str | None) -> datetime | None:
    """Parse `YYYYMMDD` into a midnight datetime, or `None` when invalid."""
    if not text or not _COMPACT_DATE.match(text):
        return None
    try:
        return datetime(int(text[:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        return None


def last_day_of_month(value: DateLike | None = None) -> str:
    """Last calendar day of the month containing `value` (today by default)."""
    current = _as_date(value)
    last = calendar.monthrange(current.year, current.month)[1]
    return format_yyyymmdd(current.replace(day=last))


def first_weekday_of_month(value: DateLike | None = None) -> str:
    """First Monday-to-Friday day of the month containing `value`."""
    current = _as_date(value).replace(day=1)
    while current.weekday() >= 5:
        current += timedelta(days=1)
    return format_yyyymmdd(current)


def _shift_months(value: date, months: int) -> date:
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_ago(days: int, *, today: date | None = None) -> str:
    return format_yyyymmdd(_as_date(today) - timedelta(days=days))


def months_ago(months: int, *, today: date | None = None) -> str:
    return format_yyyymmdd(_shift_months(_as_date(today), -months))


def years_ago(years: int, *, today: date | None = None) -> str:
    return format_yyyymmdd(_shift_months(_as_date(today), -12 * years))


def today() -> str:
    return format_yyyymmdd(date.today())
