from datetime import date
from pathlib import Path

import pytest

from gantt_tables.errors import ValidationError
from gantt_tables.models import DEFAULT_COLOR, TaskInterval
from gantt_tables.storage import load_tasks, save_tasks


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "sample.csv"
    tasks = [
        TaskInterval(label="Study", start=date(2025, 9, 3), end=date(2025, 9, 10), color="#7aa7ff"),
        TaskInterval(label="Build", start=date(2025, 9, 15), end=date(2025, 10, 7), color="#4caf50"),
    ]

    save_tasks(path, tasks)

    assert load_tasks(path) == tasks


def test_save_tasks_writes_iso_dates(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "tasks.csv"
    save_tasks(path, [TaskInterval(label="Notes", start=date(2025, 9, 3), end=date(2025, 9, 3), color="red")])

    text = path.read_text(encoding="utf-8").splitlines()
    assert text[0] == "label,start,end,color"
    assert text[1] == "Notes,2025-09-03,2025-09-03,red"


def test_load_fills_missing_color_and_skips_blank_rows(tmp_path: Path) -> None:
    path = tmp_path / "partial.csv"
    path.write_text(
        "label,start,end\n"
        "Study,2025-09-03,2025-09-10\n"
        ",,\n"
        "Buy,2025-09-08,2025-09-18\n",
        encoding="utf-8",
    )

    tasks = load_tasks(path, default_color="#abcdef")

    assert [task.label for task in tasks] == ["Study", "Buy"]
    assert {task.color for task in tasks} == {"#abcdef"}


def test_load_rejects_missing_header(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("Study,2025-09-03,2025-09-10\n", encoding="utf-8")

    with pytest.raises(ValueError, match="header"):
        load_tasks(path)


def test_load_reports_invalid_row_index(tmp_path: Path) -> None:
    path = tmp_path / "invalid.csv"
    path.write_text(
        "label,start,end,color\n"
        "Ok,2025-09-01,2025-09-02,\n"
        "\n"
        "Backwards,2025-09-09,2025-09-02,\n",
        encoding="utf-8",
    )

    with pytest.raises(ValidationError) as excinfo:
        load_tasks(path)
    assert excinfo.value.index == 1
    assert excinfo.value.label == "Backwards"


def test_default_color_constant_matches_bar_default() -> None:
    assert DEFAULT_COLOR == "#7aa7ff"
