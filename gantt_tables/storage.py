"""CSV persistence helpers for task lists."""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List

from .models import DEFAULT_COLOR, TaskInterval
from .normalize import normalize_task

logger = logging.getLogger(__name__)

_TASK_HEADER = ["label", "start", "end", "color"]


def save_tasks(path: Path | str, tasks: Iterable[TaskInterval]) -> None:
    """Persist the task list to CSV."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(_TASK_HEADER)
        for task in tasks:
            writer.writerow([task.label, task.start.isoformat(), task.end.isoformat(), task.color])
    logger.info("Saved tasks to %s", csv_path)


def load_tasks(path: Path | str, default_color: str = DEFAULT_COLOR) -> List[TaskInterval]:
    """Load a task list from CSV.

    Blank rows are skipped; any other invalid row raises ValidationError
    with the index of the task among the loaded ones.
    """
    csv_path = Path(path)
    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if header is None or [cell.strip().lower() for cell in header[:3]] != _TASK_HEADER[:3]:
            raise ValueError("Invalid task CSV: missing label,start,end header")

        tasks: List[TaskInterval] = []
        for row in reader:
            cells = [cell.strip() for cell in row] + [""] * (4 - len(row))
            label, start, end, color = cells[:4]
            if not label and not start and not end:
                continue
            record = {"label": label, "start": start, "end": end, "color": color}
            tasks.append(normalize_task(record, len(tasks), default_color))

    logger.info("Loaded %d task(s) from %s", len(tasks), csv_path)
    return tasks
