# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for CFO Bot.

This module turns stored records and derived results into pandas DataFrames
ready for display (``df.to_string(index=False)``) or CSV export, and formats
amounts the way founders read them ("$12,500", "-$3,000").

The helpers only reshape data; no computation beyond rounding for display
happens here.
"""

import math
from collections.abc import Iterable, Sequence
from typing import Optional

import pandas as pd

from .categorization import LineItem
from .trends import FieldChange

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "CA$",
    "AUD": "A$",
}

FIELD_LABELS: dict[str, str] = {
    "cash_balance": "Cash",
    "revenue": "Revenue",
    "expenses": "Expenses",
    "accounts_receivable": "Accounts receivable",
    "accounts_payable": "Accounts payable",
}


def format_currency(value: Optional[float], currency: str = "USD") -> str:
    """
    Format an amount as whole currency units with thousands separators.

    Halves round away from zero. Negative amounts carry a leading minus sign
    ("-$1,234"). Unknown currency codes are used as a prefix ("CHF 1,234").
    None formats as "-".
    """
    if value is None:
        return "-"

    magnitude = int(math.floor(abs(float(value)) + 0.5))
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if value < 0 and magnitude != 0 else ""
    return f"{sign}{symbol}{magnitude:,}"


def field_label(field: str) -> str:
    """Human-readable label of a snapshot field."""
    return FIELD_LABELS.get(field, field.replace("_", " ").capitalize())


def snapshots_to_dataframe(snapshots: Sequence) -> pd.DataFrame:
    """
    Convert snapshots into a DataFrame, in the order given.

    Columns: period, cash_balance, revenue, expenses, net_monthly,
    accounts_receivable, accounts_payable.
    """
    columns = [
        "period",
        "cash_balance",
        "revenue",
        "expenses",
        "net_monthly",
        "accounts_receivable",
        "accounts_payable",
    ]
    if not snapshots:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "period": s.period.strftime("%b %Y"),
            "cash_balance": round(s.cash_balance, 2),
            "revenue": round(s.revenue, 2),
            "expenses": round(s.expenses, 2),
            "net_monthly": round(s.revenue - s.expenses, 2),
            "accounts_receivable": round(s.accounts_receivable, 2),
            "accounts_payable": round(s.accounts_payable, 2),
        }
        for s in snapshots
    ]
    return pd.DataFrame(rows)[columns]


def line_items_to_dataframe(items: Iterable[LineItem]) -> pd.DataFrame:
    """
    Convert reviewed line items into a DataFrame.

    The `suggested` column is "yes" for categories reused from past uploads.
    """
    columns = ["line_name", "amount", "category", "suggested"]
    rows = [
        {
            "line_name": item.line_name,
            "amount": round(item.amount, 2),
            "category": item.category,
            "suggested": "yes" if item.is_suggested else "",
        }
        for item in items
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


def changes_to_dataframe(
    changes: Iterable[FieldChange], currency: str = "USD"
) -> pd.DataFrame:
    """Convert the largest period-over-period changes into a DataFrame."""
    columns = ["field", "change"]
    rows = []
    for change in changes:
        formatted = format_currency(change.change, currency)
        if change.change > 0:
            formatted = f"+{formatted}"
        rows.append({"field": field_label(change.field), "change": formatted})
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


def decisions_to_dataframe(decisions: Sequence) -> pd.DataFrame:
    """Convert decisions into a DataFrame, newest first as given."""
    columns = ["id", "title", "amount", "status", "analyzed", "created_at"]
    if not decisions:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "id": d.id,
            "title": d.title,
            "amount": d.amount,
            "status": d.status,
            "analyzed": "yes" if d.ai_analysis else "",
            "created_at": d.created_at.date().isoformat(),
        }
        for d in decisions
    ]
    return pd.DataFrame(rows)[columns]


def businesses_to_dataframe(businesses: Sequence) -> pd.DataFrame:
    """Convert businesses into a DataFrame."""
    columns = ["id", "name", "industry", "currency", "monthly_burn_target"]
    if not businesses:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "id": b.id,
            "name": b.name,
            "industry": b.industry,
            "currency": b.currency,
            "monthly_burn_target": b.monthly_burn_target,
        }
        for b in businesses
    ]
    return pd.DataFrame(rows)[columns]


def statements_to_dataframe(statements: Sequence) -> pd.DataFrame:
    """Convert uploaded statements into a DataFrame."""
    columns = ["id", "file_name", "statement_type", "period", "uploaded_at", "notes"]
    if not statements:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "id": s.id,
            "file_name": s.file_name,
            "statement_type": s.statement_type,
            "period": s.period.strftime("%b %Y"),
            "uploaded_at": s.created_at.date().isoformat(),
            "notes": s.notes or "",
        }
        for s in statements
    ]
    return pd.DataFrame(rows)[columns]


def conversations_to_dataframe(conversations: Sequence) -> pd.DataFrame:
    """Convert conversations into a DataFrame, in the order given."""
    columns = ["id", "title", "messages", "updated_at"]
    if not conversations:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "id": c.id,
            "title": c.title,
            "messages": len(c.messages),
            "updated_at": c.updated_at.strftime("%Y-%m-%d %H:%M"),
        }
        for c in conversations
    ]
    return pd.DataFrame(rows)[columns]
