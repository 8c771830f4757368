# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Month helpers for CFO Bot.

Snapshots, statements and forecast rows all work at month granularity.
This module normalizes dates to the first day of their month, moves them
forward by whole months and renders the short "Mon YYYY" labels used in
forecast tables and prompts.
"""

from datetime import date, datetime
from typing import Union


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def month_start(value: date) -> date:
    """Return the first day of the month containing `value`."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """
    Shift a date by a whole number of months.

    The result is always the first day of the target month, so that
    "today + i months" never fails on short months (e.g. 31 Jan + 1).
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month_zero = divmod(index, 12)
    return date(year, month_zero + 1, 1)


def month_label(value: date) -> str:
    """Format a date as a short month label, e.g. 'Mar 2026'."""
    return value.strftime("%b %Y")


def parse_month(raw: Union[str, date]) -> date:
    """
    Parse a month given as 'YYYY-MM' or 'YYYY-MM-DD'.

    Returns:
        The first day of that month.

    Raises:
        ValueError: if the value cannot be parsed.
    """
    if isinstance(raw, datetime):
        return month_start(raw.date())
    if isinstance(raw, date):
        return month_start(raw)

    text = str(raw).strip()
    try:
        if len(text) == 7:
            parsed = datetime.strptime(text, "%Y-%m").date()
        else:
            parsed = date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(
            f"Invalid month: {raw!r}. Expected YYYY-MM or YYYY-MM-DD."
        ) from exc

    return month_start(parsed)
