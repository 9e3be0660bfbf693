"""Utility functions for the offset loan calculator.

This module provides helpers for parsing user input into Python data types and
for handling dates: adding months, parsing date strings and the
Gregorian rules (leap years, month lengths) the calendar generator relies on.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Union

DATE_FMT = "%Y-%m-%d"
COMPACT_FMT = "%Y%m%d"

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """Return True for Gregorian leap years (2000 and 2024 yes, 1900 and 2023 no)."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(month: int, year: int) -> int:
    """Return the number of days in ``month`` (1-12) of ``year``."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12; got {month}")
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_LENGTHS[month - 1]


def parse_date(value: Union[str, date, datetime]) -> date:
    """Convert a string, ``date`` or ``datetime`` into a ``date``.

    Accepts ``YYYY-MM-DD`` and ``YYYYMMDD`` strings. Time of day is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in (DATE_FMT, COMPACT_FMT):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Invalid date string: {value!r}")
    raise TypeError(f"Unsupported type for date: {type(value).__name__}")


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional ``k``/``m`` suffixes and commas.

    ``"650k"`` gives 650000.0, ``"1.2m"`` gives 1200000.0.
    """
    text = str(value).strip().lower().replace(",", "").replace("$", "")
    factor = 1.0
    if text.endswith("k"):
        factor = 1_000.0
        text = text[:-1]
    elif text.endswith("m"):
        factor = 1_000_000.0
        text = text[:-1]
    try:
        return float(text) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_rate(value: Union[str, float]) -> float:
    """Parse an annual rate given either as a fraction or as a percent.

    ``"6.5"``, ``"6.5%"`` and ``"0.065"`` all give 0.065. A ``%`` suffix always
    means percent (``"0.5%"`` is 0.005); a bare number of 1 or more is read as
    percent too.
    """
    text = str(value).strip()
    percent = text.endswith("%")
    if percent:
        text = text[:-1]
    try:
        rate = float(text)
    except ValueError as exc:
        raise ValueError(f"Invalid rate: {value}") from exc
    if percent or rate >= 1:
        rate = rate / 100
    return rate
