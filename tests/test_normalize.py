from datetime import date, datetime

import pytest

from gantt_tables.errors import EmptyInputError, GanttError, ValidationError
from gantt_tables.models import DEFAULT_COLOR, TaskInterval
from gantt_tables.normalize import normalize_task, normalize_tasks


def test_normalizes_text_dates_and_strips_fields() -> None:
    tasks = normalize_tasks(
        [
            {"label": "  Study ", "start": "2025-09-03", "end": "2025-09-10", "color": " #4caf50 "},
            {"label": "Buy", "start": date(2025, 9, 8), "end": datetime(2025, 9, 18, 17, 30)},
        ]
    )

    assert tasks == [
        TaskInterval(label="Study", start=date(2025, 9, 3), end=date(2025, 9, 10), color="#4caf50"),
        TaskInterval(label="Buy", start=date(2025, 9, 8), end=date(2025, 9, 18), color=DEFAULT_COLOR),
    ]


@pytest.mark.parametrize(
    "record, fragment",
    [
        ({"start": "2025-09-01", "end": "2025-09-02"}, "label is required"),
        ({"label": "   ", "start": "2025-09-01", "end": "2025-09-02"}, "label is required"),
        ({"label": "No start", "end": "2025-09-02"}, "start is required"),
        ({"label": "No end", "start": "2025-09-01", "end": ""}, "end is required"),
        ({"label": "Bad date", "start": "2025-13-01", "end": "2025-09-02"}, "start is not a valid date"),
        ({"label": "Numeric", "start": 20250901, "end": "2025-09-02"}, "start must be"),
        ({"label": "Backwards", "start": "2025-09-05", "end": "2025-09-01"}, "is after end"),
    ],
)
def test_invalid_records_raise(record: dict, fragment: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_task(record, 3)

    assert excinfo.value.index == 3
    assert fragment in excinfo.value.reason
    assert "index 3" in str(excinfo.value)


def test_error_names_label_when_known() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_task({"label": "Backwards", "start": "2025-09-05", "end": "2025-09-01"}, 0)
    assert "'Backwards'" in str(excinfo.value)


def test_rejects_non_mapping_records() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_tasks([("Task", "2025-09-01", "2025-09-02")])
    assert excinfo.value.index == 0


def test_first_invalid_record_wins() -> None:
    records = [
        {"label": "Ok", "start": "2025-09-01", "end": "2025-09-02"},
        {"label": "Broken", "start": "nope", "end": "2025-09-02"},
        {"label": "", "start": "2025-09-01", "end": "2025-09-02"},
    ]
    with pytest.raises(ValidationError) as excinfo:
        normalize_tasks(records)
    assert excinfo.value.index == 1


def test_revalidates_task_intervals() -> None:
    backwards = TaskInterval(label="Typed", start=date(2025, 9, 5), end=date(2025, 9, 1))
    with pytest.raises(ValidationError):
        normalize_tasks([backwards])


def test_empty_input() -> None:
    with pytest.raises(EmptyInputError):
        normalize_tasks([])
    with pytest.raises(GanttError):
        normalize_tasks(iter(()))


def test_errors_are_value_errors() -> None:
    assert issubclass(ValidationError, ValueError)
    assert issubclass(EmptyInputError, ValueError)
