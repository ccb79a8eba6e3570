"""Data models shared across the month-table application."""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Tuple

from .calendar_math import DAY_ABBR, days_in_month, end_of_month

DEFAULT_COLOR = "#7aa7ff"


@dataclass(frozen=True)
class TaskInterval:
    """One labeled bar covering the inclusive day range [start, end]."""

    label: str
    start: date
    end: date
    color: str = DEFAULT_COLOR


@dataclass(frozen=True, order=True)
class MonthWindow:
    """A calendar month used as the partitioning unit (month is 1-based)."""

    year: int
    month: int

    @classmethod
    def containing(cls, day: date) -> "MonthWindow":
        return cls(day.year, day.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return end_of_month(self.first_day)

    @property
    def day_count(self) -> int:
        return days_in_month(self.year, self.month)

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def days(self) -> Iterator[date]:
        for number in range(1, self.day_count + 1):
            yield date(self.year, self.month, number)


@dataclass(frozen=True)
class DayColumn:
    """Header data for one day of a month grid."""

    day: int
    weekday: int  # 0 = Sunday
    is_weekend: bool
    shaded: bool = False

    @property
    def label(self) -> str:
        return DAY_ABBR[self.weekday]


@dataclass(frozen=True)
class TaskRow:
    """A task clipped to one month, with one occupancy flag per day."""

    task: TaskInterval
    seg_start: date
    seg_end: date
    occupied: Tuple[bool, ...]

    @property
    def occupied_days(self) -> Tuple[int, ...]:
        return tuple(index + 1 for index, flag in enumerate(self.occupied) if flag)


@dataclass(frozen=True)
class MonthGrid:
    """Everything a renderer needs to draw one month table."""

    month: MonthWindow
    day_columns: Tuple[DayColumn, ...]
    rows: Tuple[TaskRow, ...] = field(default_factory=tuple)

    @property
    def day_count(self) -> int:
        return len(self.day_columns)

    @property
    def title(self) -> str:
        return self.month.title


@dataclass(frozen=True)
class PartitionOptions:
    weekend_shading: bool = True
    default_color: str = DEFAULT_COLOR
