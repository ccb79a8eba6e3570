"""Turn caller-supplied task records into validated TaskInterval values."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Union

from .calendar_math import parse_day
from .errors import EmptyInputError, ValidationError
from .models import DEFAULT_COLOR, TaskInterval

logger = logging.getLogger(__name__)

RawTask = Union[TaskInterval, Mapping[str, Any]]


def normalize_tasks(raw_tasks: Iterable[RawTask], default_color: str = DEFAULT_COLOR) -> List[TaskInterval]:
    """Validate every record, failing on the first bad one.

    Raises EmptyInputError for an empty sequence and ValidationError
    (carrying the index and label) for a malformed record.
    """
    tasks = [normalize_task(raw, index, default_color) for index, raw in enumerate(raw_tasks)]
    if not tasks:
        raise EmptyInputError()
    logger.debug("Normalized %d task(s)", len(tasks))
    return tasks


def normalize_task(raw: RawTask, index: int, default_color: str = DEFAULT_COLOR) -> TaskInterval:
    if isinstance(raw, TaskInterval):
        fields: Mapping[str, Any] = {
            "label": raw.label,
            "start": raw.start,
            "end": raw.end,
            "color": raw.color,
        }
    elif isinstance(raw, Mapping):
        fields = raw
    else:
        raise ValidationError(index, f"expected a mapping with label/start/end, got {type(raw).__name__}")

    label = _clean_text(fields.get("label"))
    if not label:
        raise ValidationError(index, "label is required")

    start = _coerce_day(fields.get("start"), "start", index, label)
    end = _coerce_day(fields.get("end"), "end", index, label)
    if start > end:
        raise ValidationError(index, f"start {start.isoformat()} is after end {end.isoformat()}", label)

    color = _clean_text(fields.get("color")) or default_color
    return TaskInterval(label=label, start=start, end=end, color=color)


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_day(value: Any, name: str, index: int, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(index, f"{name} is required", label)
    if not isinstance(value, str):
        raise ValidationError(index, f"{name} must be a YYYY-MM-DD string or date", label)
    try:
        return parse_day(value)
    except ValueError as exc:
        raise ValidationError(index, f"{name} is not a valid date: {exc}", label) from exc
