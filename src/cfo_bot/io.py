# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for CFO Bot.

This module reads the lines of an uploaded financial statement from a CSV
file and normalizes them into the `(line_name, amount)` pairs consumed by
the category suggestion engine.

Expected input formats
----------------------

Column names are case-insensitive and surrounding whitespace is ignored.

Line name column (first one found wins):

    line_name, name, line, account, description, label

Amount column(s):

1) Single amount column (first one found wins)
       amount, total, value

2) Debit / credit pair
       debit, credit

   The signed amount is computed as:

       amount = credit - debit

   Blank debit or credit cells count as zero.

Amounts may carry currency symbols ($, €, £), thousands separators and
accounting-style parentheses for negatives: "(1,200.00)" reads as -1200.

Rows whose line name is empty are dropped. Any other column is ignored.

Output schema
-------------
A pandas DataFrame with exactly these columns:

    - ``line_name`` (str, stripped)
    - ``amount``    (float, signed)

Only ``.csv`` files are read locally. Other formats (PDF, spreadsheets) must
be converted upstream.
"""

import os
from pathlib import Path
from typing import Union

import pandas as pd

NAME_COLUMNS: tuple[str, ...] = (
    "line_name",
    "name",
    "line",
    "account",
    "description",
    "label",
)
AMOUNT_COLUMNS: tuple[str, ...] = ("amount", "total", "value")

_AMOUNT_NOISE = r"[\$€£,\s()]"


def _first_present(columns: set[str], candidates: tuple[str, ...]) -> str | None:
    for candidate in candidates:
        if candidate in columns:
            return candidate
    return None


def _clean_amounts(
    series: pd.Series, column: str, blank_as_zero: bool = False
) -> pd.Series:
    """
    Convert raw amount cells to floats.

    Raises:
        ValueError: if a cell cannot be read as a finite number.
    """
    text = series.fillna("").astype(str).str.strip()
    negative = text.str.startswith("(") & text.str.endswith(")")
    text = text.str.replace(_AMOUNT_NOISE, "", regex=True)

    if blank_as_zero:
        text = text.replace("", "0")

    values = pd.to_numeric(text, errors="coerce").astype(float)
    if values.isna().any():
        raise ValueError(f"Invalid numeric values in '{column}' column.")
    if (values.abs() == float("inf")).any():
        raise ValueError(f"Non-finite amounts in '{column}' column.")

    return values.where(~negative, -values)


def read_statement_lines(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read the lines of a financial statement from a CSV file.

    Parameters
    ----------
    path:
        Path to the CSV export of the statement.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly the columns ``line_name`` and ``amount``,
        in file order.

    Raises
    ------
    ValueError
        If the file is not a CSV file, if no line name or amount column can
        be found, or if an amount cannot be parsed.
    FileNotFoundError
        If the file does not exist.
    """
    suffix = Path(path).suffix.lower()
    if suffix != ".csv":
        raise ValueError(
            f"Unsupported statement file type {suffix or '(none)'!r}. "
            "Only .csv statements can be read; export PDF or spreadsheet "
            "statements to CSV first."
        )

    df = pd.read_csv(path, dtype=str)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [str(c).lower().strip() for c in df.columns]
    cols = set(df.columns)

    name_col = _first_present(cols, NAME_COLUMNS)
    amount_col = _first_present(cols, AMOUNT_COLUMNS)
    has_debit_credit = {"debit", "credit"}.issubset(cols)

    if name_col is None or (amount_col is None and not has_debit_credit):
        raise ValueError(
            "Invalid statement structure. Expected a line name column "
            f"({', '.join(NAME_COLUMNS)}) and either an amount column "
            f"({', '.join(AMOUNT_COLUMNS)}) or a debit/credit pair "
            "(column names are case-insensitive)."
        )

    d = df.copy()
    d["line_name"] = d[name_col].fillna("").astype(str).str.strip()
    d = d[d["line_name"] != ""].copy()

    # ----- Case 1: single amount column -------------------------------------
    if amount_col is not None:
        d["amount"] = _clean_amounts(d[amount_col], amount_col)

    # ----- Case 2: debit / credit pair --------------------------------------
    else:
        debit = _clean_amounts(d["debit"], "debit", blank_as_zero=True)
        credit = _clean_amounts(d["credit"], "credit", blank_as_zero=True)
        d["amount"] = credit - debit

    return d[["line_name", "amount"]].reset_index(drop=True)
