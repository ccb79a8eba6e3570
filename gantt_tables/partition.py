"""Split task intervals into per-month occupancy grids."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from .calendar_math import day_of_week, is_weekend, iter_months
from .models import DayColumn, MonthGrid, MonthWindow, PartitionOptions, TaskInterval, TaskRow
from .normalize import RawTask, normalize_tasks

logger = logging.getLogger(__name__)


def partition(tasks: Iterable[RawTask], options: Optional[PartitionOptions] = None) -> List[MonthGrid]:
    """Return one grid per month touched by `tasks`, in chronological order.

    Every record is validated before any month is computed, so a bad task
    raises ValidationError (or EmptyInputError for no tasks) and nothing
    is returned. Months no task intersects are left out.
    """
    options = options or PartitionOptions()
    normalized = normalize_tasks(tasks, default_color=options.default_color)

    grids: List[MonthGrid] = []
    for month in month_windows(normalized):
        grid = build_month_grid(month, normalized, weekend_shading=options.weekend_shading)
        if grid.rows:
            grids.append(grid)
    logger.debug("Partitioned %d task(s) into %d month grid(s)", len(normalized), len(grids))
    return grids


def compute_bounds(tasks: Sequence[TaskInterval]) -> Tuple[date, date]:
    """Return (earliest start, latest end) over a non-empty task list."""
    min_start = tasks[0].start
    max_end = tasks[0].end
    for task in tasks[1:]:
        if task.start < min_start:
            min_start = task.start
        if task.end > max_end:
            max_end = task.end
    return min_start, max_end


def month_windows(tasks: Sequence[TaskInterval]) -> List[MonthWindow]:
    """Every month from the earliest start to the latest end, gaps included."""
    min_start, max_end = compute_bounds(tasks)
    windows = [MonthWindow.containing(first) for first in iter_months(min_start, max_end)]
    logger.debug("Month range %s..%s spans %d month(s)", min_start, max_end, len(windows))
    return windows


def clip_to_month(task: TaskInterval, month: MonthWindow) -> Optional[Tuple[date, date]]:
    """Intersect a task with a month, or None when they do not overlap."""
    seg_start = max(task.start, month.first_day)
    seg_end = min(task.end, month.last_day)
    if seg_start > seg_end:
        return None
    return seg_start, seg_end


def build_day_columns(month: MonthWindow, *, weekend_shading: bool = True) -> Tuple[DayColumn, ...]:
    columns = []
    for day in month.days():
        weekend = is_weekend(day)
        columns.append(
            DayColumn(
                day=day.day,
                weekday=day_of_week(day),
                is_weekend=weekend,
                shaded=weekend_shading and weekend,
            )
        )
    return tuple(columns)


def build_month_grid(
    month: MonthWindow,
    tasks: Sequence[TaskInterval],
    *,
    weekend_shading: bool = True,
) -> MonthGrid:
    """Build the grid for one month; rows keep the order of `tasks`."""
    rows: List[TaskRow] = []
    for task in tasks:
        segment = clip_to_month(task, month)
        if segment is None:
            continue
        seg_start, seg_end = segment
        occupied = tuple(seg_start <= day <= seg_end for day in month.days())
        rows.append(TaskRow(task=task, seg_start=seg_start, seg_end=seg_end, occupied=occupied))
    return MonthGrid(
        month=month,
        day_columns=build_day_columns(month, weekend_shading=weekend_shading),
        rows=tuple(rows),
    )
