from datetime import date, datetime

import pytest

import cfo_bot.periods as periods


def test_add_months_lands_on_first_of_month() -> None:
    """Short months never fail: 31 January + 1 month is 1 February."""
    assert periods.add_months(date(2026, 1, 31), 1) == date(2026, 2, 1)
    assert periods.add_months(date(2026, 11, 15), 3) == date(2027, 2, 1)
    assert periods.add_months(date(2026, 1, 10), -1) == date(2025, 12, 1)
    assert periods.add_months(date(2026, 5, 20), 0) == date(2026, 5, 1)


def test_month_label() -> None:
    assert periods.month_label(date(2026, 3, 1)) == "Mar 2026"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2026-03", date(2026, 3, 1)),
        ("2026-03-17", date(2026, 3, 1)),
        (" 2026-12 ", date(2026, 12, 1)),
        (date(2026, 7, 9), date(2026, 7, 1)),
        (datetime(2026, 7, 9, 13, 30), date(2026, 7, 1)),
    ],
)
def test_parse_month(raw, expected) -> None:
    assert periods.parse_month(raw) == expected


@pytest.mark.parametrize("raw", ["March", "2026-13", "2026/03", ""])
def test_parse_month_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValueError):
        periods.parse_month(raw)
