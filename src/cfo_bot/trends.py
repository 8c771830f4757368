# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Snapshot trend and runway helpers.

Given the latest snapshot and, optionally, the one before it, these
helpers derive the figures shown next to the raw numbers:

- net monthly result and net burn,
- runway in whole months at the current burn (or "Profitable"),
- period-over-period trends as "+10%" / "-4%" / "No change",
- the largest period-over-period changes among tracked fields.

All functions are pure and accept any object exposing the snapshot
attributes (`cash_balance`, `revenue`, `expenses`, `accounts_receivable`,
`accounts_payable`). Missing or None values count as zero.
"""

import math
from dataclasses import dataclass
from typing import Literal, Optional

Direction = Literal["up", "down", "neutral"]

TRACKED_CHANGE_FIELDS: tuple[str, ...] = ("revenue", "expenses", "accounts_payable")


@dataclass(frozen=True)
class Trend:
    """Formatted trend label and its direction."""

    label: Optional[str]
    direction: Direction


@dataclass(frozen=True)
class FieldChange:
    """Absolute period-over-period change for one snapshot field."""

    field: str
    change: float


@dataclass(frozen=True)
class SnapshotSummary:
    """Derived figures for the latest snapshot."""

    net_monthly: float
    net_burn: float
    runway_months: Optional[int]
    runway_label: str
    cash_trend: Trend
    revenue_trend: Trend
    expenses_trend: Trend
    top_changes: list[FieldChange]


def _value(snapshot, field: str) -> float:
    raw = getattr(snapshot, field, None)
    return float(raw) if raw is not None else 0.0


def net_monthly(latest) -> float:
    """Revenue minus expenses for the snapshot month."""
    return _value(latest, "revenue") - _value(latest, "expenses")


def net_burn(latest) -> float:
    """Expenses minus revenue (positive when the business is burning cash)."""
    return -net_monthly(latest)


def runway_months(latest) -> Optional[int]:
    """
    Whole months of runway at the current net burn.

    Returns None when the business is not burning cash (net monthly >= 0).
    """
    net = net_monthly(latest)
    if net >= 0:
        return None
    return math.floor(_value(latest, "cash_balance") / abs(net))


def runway_label(latest) -> str:
    """'N months' or 'Profitable'."""
    months = runway_months(latest)
    if months is None:
        return "Profitable"
    return f"{months} months"


def percent_trend(current: Optional[float], previous: Optional[float]) -> Trend:
    """
    Percentage change from `previous` to `current`.

    Returns Trend(None, "neutral") when either value is missing or zero,
    "No change" when the change is below 1% in magnitude, and otherwise a
    signed whole-percent label such as "+10%" or "-25%".
    """
    if not current or not previous:
        return Trend(label=None, direction="neutral")

    diff = (current - previous) / previous * 100
    if abs(diff) < 1:
        return Trend(label="No change", direction="neutral")

    sign = "+" if diff > 0 else "-"
    # Half away from zero, so the sign and magnitude round symmetrically.
    magnitude = int(math.floor(abs(diff) + 0.5))
    return Trend(label=f"{sign}{magnitude}%", direction="up" if diff > 0 else "down")


def top_changes(latest, previous, n: int = 3) -> list[FieldChange]:
    """
    Largest non-zero changes among TRACKED_CHANGE_FIELDS, by absolute value.

    Returns an empty list when there is no previous snapshot.
    """
    if previous is None:
        return []

    changes = [
        FieldChange(field=name, change=_value(latest, name) - _value(previous, name))
        for name in TRACKED_CHANGE_FIELDS
    ]
    changes = [c for c in changes if c.change != 0]
    changes.sort(key=lambda c: abs(c.change), reverse=True)
    return changes[:n]


def summarize(latest, previous=None) -> SnapshotSummary:
    """Bundle all derived figures for the latest snapshot."""

    def _trend(field: str) -> Trend:
        if previous is None:
            return Trend(label=None, direction="neutral")
        return percent_trend(getattr(latest, field), getattr(previous, field))

    return SnapshotSummary(
        net_monthly=net_monthly(latest),
        net_burn=net_burn(latest),
        runway_months=runway_months(latest),
        runway_label=runway_label(latest),
        cash_trend=_trend("cash_balance"),
        revenue_trend=_trend("revenue"),
        expenses_trend=_trend("expenses"),
        top_changes=top_changes(latest, previous),
    )
