from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from cfo_bot.categorization import LineItem
from cfo_bot.trends import FieldChange
from cfo_bot.views import (
    changes_to_dataframe,
    conversations_to_dataframe,
    decisions_to_dataframe,
    format_currency,
    line_items_to_dataframe,
    snapshots_to_dataframe,
    statements_to_dataframe,
)


@pytest.mark.parametrize(
    "value, currency, expected",
    [
        (1234.4, "USD", "$1,234"),
        (1234.5, "USD", "$1,235"),
        (-1234.5, "USD", "-$1,235"),
        (-0.4, "USD", "$0"),
        (0, "USD", "$0"),
        (1500000, "EUR", "€1,500,000"),
        (42, "gbp", "£42"),
        (1000, "CHF", "CHF 1,000"),
        (None, "USD", "-"),
    ],
)
def test_format_currency(value, currency, expected) -> None:
    assert format_currency(value, currency) == expected


def test_snapshots_to_dataframe() -> None:
    snapshots = [
        SimpleNamespace(
            period=date(2026, 2, 1),
            cash_balance=47000.0,
            revenue=12000.0,
            expenses=15000.0,
            accounts_receivable=3000.0,
            accounts_payable=1200.0,
        )
    ]

    df = snapshots_to_dataframe(snapshots)

    assert df["period"].tolist() == ["Feb 2026"]
    assert df["net_monthly"].tolist() == [-3000.0]
    assert list(df.columns)[0] == "period"
    assert snapshots_to_dataframe([]).empty


def test_line_items_to_dataframe_marks_suggested() -> None:
    df = line_items_to_dataframe(
        [
            LineItem("Figma", 45.0, "Software", is_suggested=True),
            LineItem("Coffee", 12.5),
        ]
    )

    assert list(df.columns) == ["line_name", "amount", "category", "suggested"]
    assert df["suggested"].tolist() == ["yes", ""]
    assert line_items_to_dataframe([]).empty


def test_changes_to_dataframe_signs_and_labels() -> None:
    df = changes_to_dataframe(
        [FieldChange("expenses", -200.0), FieldChange("accounts_payable", 50.0)]
    )

    assert df["field"].tolist() == ["Expenses", "Accounts payable"]
    assert df["change"].tolist() == ["-$200", "+$50"]


def test_decisions_to_dataframe() -> None:
    decision = SimpleNamespace(
        id=1,
        title="Hire designer",
        amount=6000.0,
        status="considering",
        ai_analysis='{"recommendation": "yes"}',
        created_at=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc),
    )

    df = decisions_to_dataframe([decision])

    assert df["analyzed"].tolist() == ["yes"]
    assert df["created_at"].tolist() == ["2026-01-05"]
    assert decisions_to_dataframe([]).empty


def test_statements_to_dataframe() -> None:
    statement = SimpleNamespace(
        id=3,
        file_name="pl_jan.csv",
        statement_type="profit_loss",
        period=date(2026, 1, 1),
        notes=None,
        created_at=datetime(2026, 2, 2, 10, 30, tzinfo=timezone.utc),
    )

    df = statements_to_dataframe([statement])

    assert df["period"].tolist() == ["Jan 2026"]
    assert df["uploaded_at"].tolist() == ["2026-02-02"]
    assert df["notes"].tolist() == [""]
    assert statements_to_dataframe([]).empty


def test_conversations_to_dataframe() -> None:
    conversation = SimpleNamespace(
        id=7,
        title="How long is my runway?",
        messages=(object(), object()),
        updated_at=datetime(2026, 2, 2, 10, 30, tzinfo=timezone.utc),
    )

    df = conversations_to_dataframe([conversation])

    assert list(df.columns) == ["id", "title", "messages", "updated_at"]
    assert df["messages"].tolist() == [2]
    assert df["updated_at"].tolist() == ["2026-02-02 10:30"]
    assert conversations_to_dataframe([]).empty
