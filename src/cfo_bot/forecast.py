# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cash-flow forecast engine for CFO Bot.

The engine projects cash, revenue and expenses forward month by month from
a starting position (usually the latest snapshot) under constant monthly
growth rates:

    revenue_i  = revenue_{i-1}  * (1 + revenue_growth_pct / 100)
    expenses_i = expenses_{i-1} * (1 + expense_change_pct / 100)
    net_i      = revenue_i - expenses_i
    cash_i     = cash_{i-1} + net_i

Growth compounds: each month is derived from the previous *projected*
month, never from the starting values. Running totals are kept unrounded;
values are rounded to whole currency units only when a row is emitted, so
rounding errors never accumulate.

Rounding follows `floor(x + 0.5)`: halves go towards positive infinity
(2.5 -> 3, -2.5 -> -2), not Python's round-half-to-even.

The module also answers the runway question ("in which month does cash
first go negative?") and converts a projection into a pandas DataFrame for
display or export.

Everything here is pure: no I/O, no hidden state. Calling `project` twice
with the same inputs (and the same `today`) returns identical rows.
"""

import math
from dataclasses import dataclass
from datetime import date
from numbers import Integral, Real
from typing import Optional

import pandas as pd

from .periods import _today, add_months, month_label


class InvalidInputError(ValueError):
    """Raised when forecast inputs are not finite numbers or valid horizons."""


@dataclass(frozen=True)
class StartingPosition:
    """Cash, monthly revenue and monthly expenses the projection starts from."""

    cash: float
    revenue: float
    expenses: float


@dataclass(frozen=True)
class ForecastAssumptions:
    """
    Constant monthly assumptions applied over the whole horizon.

    Attributes:
        revenue_growth_pct: Monthly revenue growth, in percent (may be negative).
        expense_change_pct: Monthly expense change, in percent (may be negative).
        months_to_forecast: Number of months to project.
    """

    revenue_growth_pct: float = 0.0
    expense_change_pct: float = 0.0
    months_to_forecast: int = 12


@dataclass(frozen=True)
class ForecastRow:
    """One projected month, with values rounded to whole currency units."""

    month: str
    cash: int
    revenue: int
    expenses: int
    net_change: int


@dataclass(frozen=True)
class RunwayOutcome:
    """
    Result of scanning a projection for the first negative cash month.

    When `runs_out` is True, `month_index` (1-based) and `month_label`
    identify that month. Otherwise `final_cash` holds the last projected
    cash balance (None for an empty projection).
    """

    runs_out: bool
    month_index: Optional[int] = None
    month_label: Optional[str] = None
    final_cash: Optional[int] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _require_finite(name: str, value) -> float:
    # bool is a Real subclass, but True% growth is never meaningful.
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInputError(f"{name} must be a number, got {value!r}.")
    as_float = float(value)
    if not math.isfinite(as_float):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}.")
    return as_float


def _validate(
    start: StartingPosition, assumptions: ForecastAssumptions
) -> tuple[float, float, float, float, float, int]:
    months = assumptions.months_to_forecast
    if isinstance(months, bool) or not isinstance(months, Integral):
        raise InvalidInputError(
            f"months_to_forecast must be an integer, got {months!r}."
        )

    return (
        _require_finite("cash", start.cash),
        _require_finite("revenue", start.revenue),
        _require_finite("expenses", start.expenses),
        _require_finite("revenue_growth_pct", assumptions.revenue_growth_pct),
        _require_finite("expense_change_pct", assumptions.expense_change_pct),
        int(months),
    )


def project(
    start: StartingPosition,
    assumptions: ForecastAssumptions,
    *,
    today: Optional[date] = None,
) -> list[ForecastRow]:
    """
    Project cash, revenue and expenses forward month by month.

    Args:
        start: Starting cash balance and monthly revenue/expenses.
        assumptions: Monthly growth/change rates and horizon.
        today: Reference date for month labels. Row i is labelled with
            the month of `today + i months`. Defaults to the current date.

    Returns:
        One ForecastRow per projected month, in chronological order.
        An empty list when `months_to_forecast` is zero or negative.

    Raises:
        InvalidInputError: if `months_to_forecast` is not an integer or any
            numeric input is not a finite number.
    """
    cash, revenue, expenses, revenue_growth, expense_change, months = _validate(
        start, assumptions
    )

    if months <= 0:
        return []

    reference = today if today is not None else _today()
    revenue_factor = 1 + revenue_growth / 100
    expense_factor = 1 + expense_change / 100

    rows: list[ForecastRow] = []
    for i in range(1, months + 1):
        revenue = revenue * revenue_factor
        expenses = expenses * expense_factor
        net_change = revenue - expenses
        cash = cash + net_change

        rows.append(
            ForecastRow(
                month=month_label(add_months(reference, i)),
                cash=_round_half_up(cash),
                revenue=_round_half_up(revenue),
                expenses=_round_half_up(expenses),
                net_change=_round_half_up(net_change),
            )
        )

    return rows


def find_runway_end(rows: list[ForecastRow]) -> RunwayOutcome:
    """
    Find the first projected month where cash goes negative.

    Returns:
        RunwayOutcome with `runs_out=True` and the 1-based month index and
        label of the first negative row, or `runs_out=False` with the final
        projected cash when cash stays at or above zero over the horizon.
    """
    for index, row in enumerate(rows, start=1):
        if row.cash < 0:
            return RunwayOutcome(
                runs_out=True,
                month_index=index,
                month_label=row.month,
            )

    final_cash = rows[-1].cash if rows else None
    return RunwayOutcome(runs_out=False, final_cash=final_cash)


def forecast_to_dataframe(rows: list[ForecastRow]) -> pd.DataFrame:
    """
    Convert forecast rows into a DataFrame.

    Columns: month, revenue, expenses, net_change, cash (the order of the
    monthly projection table).
    """
    columns = ["month", "revenue", "expenses", "net_change", "cash"]
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        [
            {
                "month": r.month,
                "revenue": r.revenue,
                "expenses": r.expenses,
                "net_change": r.net_change,
                "cash": r.cash,
            }
            for r in rows
        ]
    )
    return df[columns]
