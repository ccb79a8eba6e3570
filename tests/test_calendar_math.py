from datetime import date

import pytest

from gantt_tables.calendar_math import (
    add_months,
    day_of_week,
    day_of_week_label,
    days_in_month,
    end_of_month,
    format_day_month,
    is_weekend,
    iter_months,
    parse_day,
    start_of_month,
)


@pytest.mark.parametrize(
    "year, month, expected",
    [
        (2025, 1, 31),
        (2025, 4, 30),
        (2025, 2, 28),
        (2024, 2, 29),
        (1900, 2, 28),
        (2000, 2, 29),
    ],
)
def test_days_in_month(year: int, month: int, expected: int) -> None:
    assert days_in_month(year, month) == expected


def test_days_in_month_rejects_bad_month() -> None:
    with pytest.raises(ValueError):
        days_in_month(2025, 13)


def test_month_boundaries() -> None:
    assert start_of_month(date(2025, 9, 17)) == date(2025, 9, 1)
    assert end_of_month(date(2025, 9, 17)) == date(2025, 9, 30)
    assert end_of_month(date(2024, 2, 3)) == date(2024, 2, 29)


def test_add_months_normalizes_to_first_day() -> None:
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 1)
    assert add_months(date(2025, 11, 15), 2) == date(2026, 1, 1)
    assert add_months(date(2025, 1, 10), -1) == date(2024, 12, 1)
    assert add_months(date(2025, 3, 31), 0) == date(2025, 3, 1)


def test_iter_months_is_inclusive() -> None:
    months = list(iter_months(date(2025, 10, 25), date(2026, 1, 2)))
    assert months == [date(2025, 10, 1), date(2025, 11, 1), date(2025, 12, 1), date(2026, 1, 1)]
    assert list(iter_months(date(2025, 9, 3), date(2025, 9, 10))) == [date(2025, 9, 1)]
    assert list(iter_months(date(2025, 10, 1), date(2025, 9, 30))) == []


def test_iter_months_stops_at_last_representable_month() -> None:
    assert list(iter_months(date(9999, 11, 5), date(9999, 12, 31))) == [date(9999, 11, 1), date(9999, 12, 1)]


def test_day_of_week_starts_on_sunday() -> None:
    # 2025-09-07 is a Sunday, 2025-09-13 a Saturday
    assert day_of_week(date(2025, 9, 7)) == 0
    assert day_of_week(date(2025, 9, 8)) == 1
    assert day_of_week(date(2025, 9, 13)) == 6
    assert day_of_week_label(date(2025, 9, 7)) == "Sun"
    assert day_of_week_label(date(2025, 9, 10)) == "Wed"


def test_is_weekend() -> None:
    assert is_weekend(date(2025, 9, 6))
    assert is_weekend(date(2025, 9, 7))
    assert not is_weekend(date(2025, 9, 8))
    assert not is_weekend(date(2025, 9, 12))


def test_parse_day() -> None:
    assert parse_day("2025-09-03") == date(2025, 9, 3)
    assert parse_day(" 2024-02-29 ") == date(2024, 2, 29)


@pytest.mark.parametrize(
    "text",
    [
        "2025-02-30",
        "2025-9-3",
        "03/09/2025",
        "2025-09-03T00:00:00",
        "",
        # Arabic-Indic digits
        "\u0662\u0660\u0662\u0665-\u0660\u0669-\u0660\u0663",
    ],
)
def test_parse_day_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ValueError):
        parse_day(text)


def test_format_day_month() -> None:
    assert format_day_month(date(2025, 9, 3)) == "03/09"
