"""Calendar-day arithmetic shared by the partitioner and the renderers."""
from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Iterator

DAY_ABBR = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
_ISO_DAY = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def days_in_month(year: int, month: int) -> int:
    """Return 28-31 for the given month (1-12) using the Gregorian leap rule."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return calendar.monthrange(year, month)[1]


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=days_in_month(day.year, day.month))


def add_months(day: date, months: int) -> date:
    """Return the first day of the month `months` after `day`'s month.

    The day of month is always reset to 1, so Jan 31 + 1 lands on Feb 1.
    """
    index = day.year * 12 + (day.month - 1) + months
    year, month_zero = divmod(index, 12)
    return date(year, month_zero + 1, 1)


def iter_months(first: date, last: date) -> Iterator[date]:
    """Yield the first day of every month from `first` through `last`, inclusive."""
    current = start_of_month(first)
    stop = start_of_month(last)
    if current > stop:
        return
    while True:
        yield current
        # date.max falls in December 9999; never step past the last month
        if current == stop:
            return
        current = add_months(current, 1)


def day_of_week(day: date) -> int:
    """Ordinal with Sunday = 0 through Saturday = 6."""
    return (day.weekday() + 1) % 7


def is_weekend(day: date) -> bool:
    return day_of_week(day) in (0, 6)


def day_of_week_label(day: date) -> str:
    return DAY_ABBR[day_of_week(day)]


def parse_day(text: str) -> date:
    """Parse a strict YYYY-MM-DD string into a calendar day."""
    match = _ISO_DAY.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"expected YYYY-MM-DD, got {text!r}")
    year, month, day = (int(part) for part in match.groups())
    # date() rejects impossible days such as 2025-02-30
    return date(year, month, day)


def format_day_month(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d}"
