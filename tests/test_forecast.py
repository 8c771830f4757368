import math
from datetime import date

import pytest

import cfo_bot.forecast as forecast
from cfo_bot.forecast import (
    ForecastAssumptions,
    InvalidInputError,
    StartingPosition,
    find_runway_end,
    forecast_to_dataframe,
    project,
)

TODAY = date(2026, 1, 15)


def test_flat_forecast_accumulates_net_change() -> None:
    """With 0% growth, cash moves by the same net change every month."""
    rows = project(
        StartingPosition(cash=1000, revenue=500, expenses=600),
        ForecastAssumptions(months_to_forecast=3),
        today=TODAY,
    )

    assert [r.cash for r in rows] == [900, 800, 700]
    assert all(r.net_change == -100 for r in rows)
    assert all(r.revenue == 500 and r.expenses == 600 for r in rows)


def test_month_labels_start_the_month_after_today() -> None:
    rows = project(
        StartingPosition(cash=0, revenue=0, expenses=0),
        ForecastAssumptions(months_to_forecast=3),
        today=TODAY,
    )

    assert [r.month for r in rows] == ["Feb 2026", "Mar 2026", "Apr 2026"]


def test_month_labels_roll_over_the_year() -> None:
    rows = project(
        StartingPosition(cash=0, revenue=0, expenses=0),
        ForecastAssumptions(months_to_forecast=2),
        today=date(2026, 11, 30),
    )

    assert [r.month for r in rows] == ["Dec 2026", "Jan 2027"]


def test_default_today_is_isolated_for_tests(monkeypatch) -> None:
    monkeypatch.setattr(forecast, "_today", lambda: date(2026, 12, 1))

    rows = project(
        StartingPosition(cash=0, revenue=0, expenses=0),
        ForecastAssumptions(months_to_forecast=1),
    )

    assert rows[0].month == "Jan 2027"


def test_growth_compounds_on_projected_values() -> None:
    """Month 2 grows from month 1's projected revenue, not from the start."""
    rows = project(
        StartingPosition(cash=0, revenue=1000, expenses=0),
        ForecastAssumptions(revenue_growth_pct=10, months_to_forecast=3),
        today=TODAY,
    )

    assert [r.revenue for r in rows] == [1100, 1210, 1331]
    assert [r.cash for r in rows] == [1100, 2310, 3641]


def test_negative_and_large_growth_rates_are_accepted() -> None:
    rows = project(
        StartingPosition(cash=0, revenue=100, expenses=100),
        ForecastAssumptions(
            revenue_growth_pct=150, expense_change_pct=-50, months_to_forecast=1
        ),
        today=TODAY,
    )

    assert rows[0].revenue == 250
    assert rows[0].expenses == 50
    assert rows[0].net_change == 200


def test_halves_round_towards_positive_infinity() -> None:
    """Rounding is floor(x + 0.5): 7.5 -> 8 and -7.5 -> -7 (not banker's)."""
    rows = project(
        StartingPosition(cash=0, revenue=0, expenses=5),
        ForecastAssumptions(expense_change_pct=50, months_to_forecast=1),
        today=TODAY,
    )

    assert rows[0].expenses == 8
    assert rows[0].net_change == -7
    assert rows[0].cash == -7
    # Python's built-in round() would give -8 here.
    assert round(-7.5) == -8


def test_rounding_is_applied_only_at_emission() -> None:
    """Internal accumulation keeps fractions: 0.4 per month adds up."""
    rows = project(
        StartingPosition(cash=0, revenue=0.4, expenses=0),
        ForecastAssumptions(months_to_forecast=3),
        today=TODAY,
    )

    assert [r.revenue for r in rows] == [0, 0, 0]
    assert [r.cash for r in rows] == [0, 1, 1]


@pytest.mark.parametrize("months", [0, -3])
def test_non_positive_horizon_returns_empty_projection(months: int) -> None:
    rows = project(
        StartingPosition(cash=1000, revenue=10, expenses=20),
        ForecastAssumptions(months_to_forecast=months),
        today=TODAY,
    )
    assert rows == []


@pytest.mark.parametrize("months", [1.5, "12", True, None])
def test_non_integer_horizon_is_rejected(months) -> None:
    with pytest.raises(InvalidInputError):
        project(
            StartingPosition(cash=0, revenue=0, expenses=0),
            ForecastAssumptions(months_to_forecast=months),
            today=TODAY,
        )


@pytest.mark.parametrize(
    "start, assumptions",
    [
        (StartingPosition(cash=math.nan, revenue=0, expenses=0), ForecastAssumptions()),
        (StartingPosition(cash=0, revenue=math.inf, expenses=0), ForecastAssumptions()),
        (StartingPosition(cash=0, revenue=0, expenses="100"), ForecastAssumptions()),
        (
            StartingPosition(cash=0, revenue=0, expenses=0),
            ForecastAssumptions(revenue_growth_pct=None),
        ),
        (
            StartingPosition(cash=0, revenue=0, expenses=0),
            ForecastAssumptions(expense_change_pct=-math.inf),
        ),
    ],
)
def test_non_finite_numbers_are_rejected(start, assumptions) -> None:
    with pytest.raises(InvalidInputError):
        project(start, assumptions, today=TODAY)


def test_invalid_input_error_is_a_value_error() -> None:
    assert issubclass(InvalidInputError, ValueError)


def test_projection_is_deterministic() -> None:
    start = StartingPosition(cash=25000, revenue=8000, expenses=9500)
    assumptions = ForecastAssumptions(
        revenue_growth_pct=3.5, expense_change_pct=1.2, months_to_forecast=24
    )

    assert project(start, assumptions, today=TODAY) == project(
        start, assumptions, today=TODAY
    )


def test_runway_end_is_first_negative_month() -> None:
    rows = project(
        StartingPosition(cash=1000, revenue=0, expenses=400),
        ForecastAssumptions(months_to_forecast=6),
        today=date(2026, 1, 1),
    )

    outcome = find_runway_end(rows)

    assert outcome.runs_out is True
    assert outcome.month_index == 3
    assert outcome.month_label == "Apr 2026"
    assert outcome.final_cash is None


def test_runway_end_driven_by_expense_growth() -> None:
    """Cash starts growing, then 20% monthly expense growth turns it negative."""
    rows = project(
        StartingPosition(cash=10000, revenue=5000, expenses=4000),
        ForecastAssumptions(expense_change_pct=20, months_to_forecast=6),
        today=TODAY,
    )

    assert [r.cash for r in rows[:5]] == [10200, 9440, 7528, 4234, -720]
    assert rows[4].expenses == 9953
    assert rows[4].net_change == -4953

    outcome = find_runway_end(rows)

    assert outcome.runs_out is True
    assert outcome.month_index == 5
    assert outcome.month_label == "Jun 2026"


def test_negative_starting_cash_runs_out_in_first_month() -> None:
    rows = project(
        StartingPosition(cash=-500, revenue=1000, expenses=1000),
        ForecastAssumptions(months_to_forecast=3),
        today=TODAY,
    )

    outcome = find_runway_end(rows)

    assert outcome.runs_out is True
    assert outcome.month_index == 1
    assert outcome.month_label == "Feb 2026"


def test_zero_cash_does_not_count_as_running_out() -> None:
    rows = project(
        StartingPosition(cash=800, revenue=0, expenses=400),
        ForecastAssumptions(months_to_forecast=2),
        today=TODAY,
    )

    outcome = find_runway_end(rows)

    assert outcome.runs_out is False
    assert outcome.final_cash == 0


def test_runway_outcome_for_profitable_business() -> None:
    rows = project(
        StartingPosition(cash=5000, revenue=3000, expenses=2000),
        ForecastAssumptions(months_to_forecast=12),
        today=TODAY,
    )

    outcome = find_runway_end(rows)

    assert outcome.runs_out is False
    assert outcome.final_cash == 17000


def test_runway_outcome_for_empty_projection() -> None:
    outcome = find_runway_end([])
    assert outcome.runs_out is False
    assert outcome.final_cash is None


def test_forecast_to_dataframe_columns_and_values() -> None:
    rows = project(
        StartingPosition(cash=1000, revenue=500, expenses=600),
        ForecastAssumptions(months_to_forecast=2),
        today=TODAY,
    )

    df = forecast_to_dataframe(rows)

    assert list(df.columns) == ["month", "revenue", "expenses", "net_change", "cash"]
    assert df["cash"].tolist() == [900, 800]
    assert df["month"].tolist() == ["Feb 2026", "Mar 2026"]


def test_forecast_to_dataframe_empty() -> None:
    df = forecast_to_dataframe([])
    assert df.empty
    assert list(df.columns) == ["month", "revenue", "expenses", "net_change", "cash"]
