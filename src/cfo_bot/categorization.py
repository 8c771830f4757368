# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category suggestions for uploaded statement line items.

When a founder uploads a financial statement, every extracted line
(e.g. "Office Rent", "Revenue - Subscriptions") receives a suggested
expense category before the founder reviews and confirms it.

Resolution order for a single line name:

1. Exact reuse
   The name is normalized (lowercase, surrounding whitespace removed) and
   compared with the names of previously confirmed line items for the same
   business, most recent first. The first exact match wins and its category
   is reused; the result is flagged `is_suggested=True`.

2. Keyword dictionary
   Otherwise the normalized name is scanned against a fixed, ordered list
   of (keyword, category) pairs. The first keyword found as a substring
   wins. Order matters: "sales commission" maps to Revenue because "sales"
   is checked before any other keyword. Results from this step are never
   flagged as suggested.

3. Default
   Anything else (including empty names) falls back to "Other".

Once the engine has produced its suggestions, a manual category change on
a line clears its `is_suggested` flag (see `recategorize`).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Optional

CATEGORIES: tuple[str, ...] = (
    "Revenue",
    "Cost of Goods Sold",
    "Payroll",
    "Marketing",
    "Software",
    "Rent",
    "General & Administrative",
    "Other",
)

DEFAULT_CATEGORY = "Other"

# Ordered: first substring match wins.
CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("revenue", "Revenue"),
    ("sales", "Revenue"),
    ("income", "Revenue"),
    ("cogs", "Cost of Goods Sold"),
    ("cost of sales", "Cost of Goods Sold"),
    ("salary", "Payroll"),
    ("wages", "Payroll"),
    ("payroll", "Payroll"),
    ("marketing", "Marketing"),
    ("advertising", "Marketing"),
    ("software", "Software"),
    ("saas", "Software"),
    ("rent", "Rent"),
    ("lease", "Rent"),
)

# Number of past line items consulted for exact-name reuse.
HISTORY_WINDOW = 100


@dataclass(frozen=True)
class LineItem:
    """
    A statement line with its category.

    `is_suggested` is True only when the category was reused from a past
    line item with exactly the same (normalized) name.
    """

    line_name: str
    amount: float
    category: str = DEFAULT_CATEGORY
    is_suggested: bool = False


@dataclass(frozen=True)
class CategorySuggestion:
    """Suggested category for a single line name."""

    category: str
    is_suggested: bool


def normalize_line_name(line_name: Optional[str]) -> str:
    """Lowercase and strip a line name; None becomes an empty string."""
    if line_name is None:
        return ""
    return str(line_name).strip().lower()


def _keyword_category(normalized: str) -> Optional[str]:
    if not normalized:
        return None
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in normalized:
            return category
    return None


def suggest(line_name: Optional[str], history: Iterable[LineItem]) -> CategorySuggestion:
    """
    Suggest a category for a line name.

    Args:
        line_name: Raw line name as extracted from the statement.
        history: Previously confirmed line items for the same business,
            most recent first (typically the last HISTORY_WINDOW items).

    Returns:
        CategorySuggestion. Exact historical matches win and are flagged
        `is_suggested=True`; keyword and default matches are not flagged.
    """
    normalized = normalize_line_name(line_name)

    for item in history:
        if normalize_line_name(item.line_name) == normalized:
            return CategorySuggestion(category=item.category, is_suggested=True)

    category = _keyword_category(normalized)
    if category is not None:
        return CategorySuggestion(category=category, is_suggested=False)

    return CategorySuggestion(category=DEFAULT_CATEGORY, is_suggested=False)


def suggest_line_items(
    lines: Iterable[tuple[str, float]],
    history: Sequence[LineItem],
) -> list[LineItem]:
    """
    Run `suggest` once per extracted (line_name, amount) pair.

    Returns the line items ready for the review step, in input order.
    """
    items: list[LineItem] = []
    for line_name, amount in lines:
        suggestion = suggest(line_name, history)
        items.append(
            LineItem(
                line_name=line_name,
                amount=float(amount),
                category=suggestion.category,
                is_suggested=suggestion.is_suggested,
            )
        )
    return items


def recategorize(item: LineItem, category: str) -> LineItem:
    """
    Return a copy of `item` with a manually chosen category.

    The `is_suggested` flag is always cleared: the category now comes from
    the user, not from historical reuse.

    Raises:
        ValueError: if `category` is not one of CATEGORIES.
    """
    if category not in CATEGORIES:
        allowed = ", ".join(CATEGORIES)
        raise ValueError(f"Unknown category {category!r}. Expected one of: {allowed}.")
    return replace(item, category=category, is_suggested=False)


def count_suggested(items: Iterable[LineItem]) -> int:
    """Number of items whose category was reused from past uploads."""
    return sum(1 for item in items if item.is_suggested)
