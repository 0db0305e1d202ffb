"""
Date helpers for month-keyed reporting.

Month keys are "YYYY-MM". Month ranges are the literal strings
"YYYY-MM-01" .. "YYYY-MM-31" regardless of the month's length; ISO dates
sort lexicographically so the range never leaks into the next month.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime

_MONTH_KEY_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])")


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date or datetime string (only the date part is used)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def parse_month(key: str) -> date:
    """First day of the month named by a zero-padded "YYYY-MM" key."""
    if not isinstance(key, str) or not _MONTH_KEY_RE.fullmatch(key):
        raise ValueError(f"Invalid month key {key!r}, expected YYYY-MM")
    return date(int(key[:4]), int(key[5:7]), 1)


def month_range(key: str) -> tuple[str, str]:
    """Inclusive string bounds used by every month-scoped filter."""
    parse_month(key)
    return f"{key}-01", f"{key}-31"


def last_day_of_month(key: str) -> date:
    first = parse_month(key)
    return first.replace(day=calendar.monthrange(first.year, first.month)[1])


def shift_month(key: str, months: int) -> str:
    """Move a month key by a whole number of months."""
    first = parse_month(key)
    index = first.year * 12 + (first.month - 1) + months
    return f"{index // 12}-{index % 12 + 1:02d}"


def add_months(d: date, months: int) -> date:
    """
    Calendar month arithmetic on a date.

    The day is clamped to the target month's length (Mar 31 - 1 month is
    Feb 28/29).
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = index // 12, index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def trailing_months(count: int, end_month: str) -> list[str]:
    """`count` consecutive month keys ending at `end_month`, oldest first."""
    return [shift_month(end_month, -offset) for offset in range(count - 1, -1, -1)]


def days_between(start: str | date, end: str | date) -> int:
    """Whole days from start to end (negative when end is earlier)."""
    start_d = parse_date(start)
    end_d = parse_date(end)
    if start_d is None or end_d is None:
        raise ValueError(f"Cannot diff missing dates: {start!r} -> {end!r}")
    return (end_d - start_d).days


def in_range(value: str, date_from: str | None, date_to: str | None) -> bool:
    """Inclusive lexicographic range check on ISO date strings."""
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True
