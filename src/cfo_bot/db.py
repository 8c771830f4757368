# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for CFO Bot.

This module provides all low-level accessors for the SQLite database used by
the application. It is responsible for:

- Initializing the database schema.
- Storing businesses and their periodic financial snapshots.
- Recording uploaded financial statements and their confirmed line items.
- Storing decisions and their structured advisor analysis.
- Storing advisor conversations and their messages.

Every record except businesses belongs to exactly one business; all queries
take an explicit `business_id`. There is no notion of a globally
"selected" business at this level.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) businesses
   - id                        INTEGER PRIMARY KEY AUTOINCREMENT
   - name                      TEXT    NOT NULL
   - industry                  TEXT    NOT NULL DEFAULT 'other'
   - currency                  TEXT    NOT NULL DEFAULT 'USD'
   - timezone                  TEXT
   - description               TEXT
   - monthly_burn_target_cents INTEGER
   - created_at                TEXT    NOT NULL (ISO datetime, UTC)

2) snapshots
   One row per recorded month. Snapshots are never updated.
   - id, business_id, period (ISO date, first day of month),
     cash_balance_cents, revenue_cents, expenses_cents,
     accounts_receivable_cents, accounts_payable_cents, notes, created_at

3) statements
   Metadata of uploaded statements (the file itself stays where it is).
   - id, business_id, file_name, file_path,
     statement_type ('profit_loss' | 'balance_sheet' | 'cash_flow'),
     period, notes, created_at

4) statement_line_items
   Confirmed, categorized statement lines. Also the history consulted by the
   category suggestion engine.
   - id, business_id, statement_id, line_name, amount_cents, category,
     is_suggested (0/1), created_at

5) decisions
   - id, business_id, title, question, amount_cents, context,
     status ('considering' | 'decided_yes' | 'decided_no' | 'deferred'),
     ai_analysis (JSON text), created_at, updated_at

6) conversations / conversation_messages
   - conversations: id, business_id, title, created_at, updated_at
   - conversation_messages: id, conversation_id, role ('user' | 'assistant'),
     content, created_at

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- Amounts are stored as signed integer cents and converted back to floats.
- All timestamps are stored as ISO-8601 text (UTC).
- Foreign key enforcement is explicitly enabled; deleting a business
  cascades to everything that belongs to it.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from .categorization import CATEGORIES

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for CFO Bot.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


StatementType = Literal["profit_loss", "balance_sheet", "cash_flow"]
DecisionStatus = Literal["considering", "decided_yes", "decided_no", "deferred"]
MessageRole = Literal["user", "assistant"]

STATEMENT_TYPES: tuple[str, ...] = ("profit_loss", "balance_sheet", "cash_flow")
DECISION_STATUSES: tuple[str, ...] = (
    "considering",
    "decided_yes",
    "decided_no",
    "deferred",
)
INDUSTRIES: tuple[str, ...] = (
    "saas",
    "ecommerce",
    "services",
    "agency",
    "consulting",
    "marketplace",
    "manufacturing",
    "retail",
    "hospitality",
    "healthcare",
    "education",
    "other",
)


@dataclass(frozen=True)
class Business:
    """A business profile owned by a founder."""

    id: int
    name: str
    industry: str
    currency: str
    timezone: str | None
    description: str | None
    monthly_burn_target: float | None
    created_at: datetime


@dataclass(frozen=True)
class NewBusiness:
    """Data required to create a business."""

    name: str
    industry: str = "other"
    currency: str = "USD"
    timezone: str | None = None
    description: str | None = None
    monthly_burn_target: float | None = None


@dataclass(frozen=True)
class BusinessUpdate:
    """Partial update of a business. Only non-None values are applied."""

    name: str | None = None
    industry: str | None = None
    currency: str | None = None
    timezone: str | None = None
    description: str | None = None
    monthly_burn_target: float | None = None


@dataclass(frozen=True)
class Snapshot:
    """A point-in-time record of a business's core financial figures."""

    id: int
    business_id: int
    period: date
    cash_balance: float
    revenue: float
    expenses: float
    accounts_receivable: float
    accounts_payable: float
    notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class NewSnapshot:
    """Data required to record a snapshot. `period` is normalized to month start."""

    period: date
    cash_balance: float
    revenue: float = 0.0
    expenses: float = 0.0
    accounts_receivable: float = 0.0
    accounts_payable: float = 0.0
    notes: str | None = None


@dataclass(frozen=True)
class Statement:
    """Metadata of an uploaded financial statement."""

    id: int
    business_id: int
    file_name: str
    file_path: str
    statement_type: str
    period: date
    notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class NewStatement:
    """Data required to record an uploaded statement."""

    file_name: str
    file_path: str
    statement_type: StatementType
    period: date
    notes: str | None = None


@dataclass(frozen=True)
class StoredLineItem:
    """A confirmed statement line item as stored in the database."""

    id: int
    business_id: int
    statement_id: int | None
    line_name: str
    amount: float
    category: str
    is_suggested: bool
    created_at: datetime


@dataclass(frozen=True)
class Decision:
    """
    A yes/no financial decision being considered.

    `ai_analysis` holds the raw JSON text of the advisor analysis; higher
    layers validate it before use.
    """

    id: int
    business_id: int
    title: str
    question: str
    amount: float | None
    context: str | None
    status: str
    ai_analysis: str | None
    created_at: datetime
    updated_at: datetime | None


@dataclass(frozen=True)
class NewDecision:
    """Data required to create a decision. New decisions start as 'considering'."""

    title: str
    question: str
    amount: float | None = None
    context: str | None = None


@dataclass(frozen=True)
class DecisionUpdate:
    """Fields that can be updated on a decision."""

    status: DecisionStatus | None = None
    ai_analysis: str | None = None


@dataclass(frozen=True)
class Message:
    """One conversation turn."""

    role: str
    content: str
    timestamp: datetime


@dataclass(frozen=True)
class Conversation:
    """An advisor conversation with its messages in chronological order."""

    id: int
    business_id: int
    title: str
    messages: tuple[Message, ...]
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection with foreign keys enabled.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS businesses (
            id                        INTEGER PRIMARY KEY AUTOINCREMENT,
            name                      TEXT    NOT NULL,
            industry                  TEXT    NOT NULL DEFAULT 'other',
            currency                  TEXT    NOT NULL DEFAULT 'USD',
            timezone                  TEXT,
            description               TEXT,
            monthly_burn_target_cents INTEGER,
            created_at                TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS snapshots (
            id                        INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id               INTEGER NOT NULL,
            period                    TEXT    NOT NULL,  -- ISO date 'YYYY-MM-01'
            cash_balance_cents        INTEGER NOT NULL,
            revenue_cents             INTEGER NOT NULL DEFAULT 0,
            expenses_cents            INTEGER NOT NULL DEFAULT 0,
            accounts_receivable_cents INTEGER NOT NULL DEFAULT 0,
            accounts_payable_cents    INTEGER NOT NULL DEFAULT 0,
            notes                     TEXT,
            created_at                TEXT    NOT NULL,

            FOREIGN KEY (business_id) REFERENCES businesses(id) ON DELETE CASCADE
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS statements (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id    INTEGER NOT NULL,
            file_name      TEXT    NOT NULL,
            file_path      TEXT    NOT NULL,
            statement_type TEXT    NOT NULL,
            period         TEXT    NOT NULL,
            notes          TEXT,
            created_at     TEXT    NOT NULL,

            FOREIGN KEY (business_id) REFERENCES businesses(id) ON DELETE CASCADE
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS statement_line_items (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id  INTEGER NOT NULL,
            statement_id INTEGER,
            line_name    TEXT    NOT NULL,
            amount_cents INTEGER NOT NULL,
            category     TEXT    NOT NULL,
            is_suggested INTEGER NOT NULL DEFAULT 0,
            created_at   TEXT    NOT NULL,

            FOREIGN KEY (business_id) REFERENCES businesses(id) ON DELETE CASCADE,
            FOREIGN KEY (statement_id) REFERENCES statements(id) ON DELETE CASCADE
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS decisions (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id  INTEGER NOT NULL,
            title        TEXT    NOT NULL,
            question     TEXT    NOT NULL,
            amount_cents INTEGER,
            context      TEXT,
            status       TEXT    NOT NULL DEFAULT 'considering',
            ai_analysis  TEXT,
            created_at   TEXT    NOT NULL,
            updated_at   TEXT,

            FOREIGN KEY (business_id) REFERENCES businesses(id) ON DELETE CASCADE
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS conversations (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id INTEGER NOT NULL,
            title       TEXT    NOT NULL,
            created_at  TEXT    NOT NULL,
            updated_at  TEXT    NOT NULL,

            FOREIGN KEY (business_id) REFERENCES businesses(id) ON DELETE CASCADE
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS conversation_messages (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            conversation_id INTEGER NOT NULL,
            role            TEXT    NOT NULL,
            content         TEXT    NOT NULL,
            created_at      TEXT    NOT NULL,

            FOREIGN KEY (conversation_id) REFERENCES conversations(id)
                ON DELETE CASCADE
        );
        """
    )

    # Indexes
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_snapshots_business_period
            ON snapshots(business_id, period);
        """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_line_items_business
            ON statement_line_items(business_id, id);
        """
    )

    conn.commit()


def _to_cents(amount: float) -> int:
    value = float(amount)
    if not math.isfinite(value):
        raise ValueError(f"Amount must be a finite number, got {amount!r}.")
    return int(round(value * 100))


def _to_cents_optional(amount: float | None) -> int | None:
    return None if amount is None else _to_cents(amount)


def _from_cents(cents: int | None) -> float | None:
    return None if cents is None else float(cents) / 100.0


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)).isoformat()


def _month_start_iso(value) -> str:
    """ISO date of the first day of the month containing `value`."""
    return date.fromisoformat(_to_iso_date(value)).replace(day=1).isoformat()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None


# ---------------------------------------------------------------------------
# Public API: initialization
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates tables and indexes if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Businesses
# ---------------------------------------------------------------------------

_BUSINESS_COLUMNS = """
    id, name, industry, currency, timezone, description,
    monthly_burn_target_cents, created_at
"""


def _row_to_business(row: tuple) -> Business:
    (
        business_id,
        name,
        industry,
        currency,
        tz,
        description,
        burn_target_cents,
        created_at_str,
    ) = row
    return Business(
        id=business_id,
        name=name,
        industry=industry,
        currency=currency,
        timezone=tz,
        description=description,
        monthly_burn_target=_from_cents(burn_target_cents),
        created_at=datetime.fromisoformat(created_at_str),
    )


def create_business(cfg: DatabaseConfig, new_business: NewBusiness) -> Business:
    """
    Insert a new business.

    Raises
    ------
    ValueError
        If the name is empty or the industry is unknown.
    """
    if not new_business.name or not new_business.name.strip():
        raise ValueError("Business name cannot be empty.")
    if new_business.industry not in INDUSTRIES:
        raise ValueError(f"Unknown industry: {new_business.industry!r}.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO businesses (
                name, industry, currency, timezone, description,
                monthly_burn_target_cents, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (
                new_business.name.strip(),
                new_business.industry,
                new_business.currency,
                new_business.timezone,
                new_business.description,
                _to_cents_optional(new_business.monthly_burn_target),
                _now_utc_iso(),
            ),
        )
        business_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    logger.info("Created business #%s (%s)", business_id, new_business.name)

    result = get_business(cfg, business_id)
    if result is None:
        msg = f"Business #{business_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def get_business(cfg: DatabaseConfig, business_id: int) -> Business | None:
    """Load a business by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"SELECT {_BUSINESS_COLUMNS} FROM businesses WHERE id = ?;",
            (business_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    return _row_to_business(row) if row is not None else None


def list_businesses(cfg: DatabaseConfig) -> list[Business]:
    """Return all businesses, most recently created first."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"SELECT {_BUSINESS_COLUMNS} FROM businesses ORDER BY id DESC;"
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_business(r) for r in rows]


def update_business(
    cfg: DatabaseConfig,
    business_id: int,
    update: BusinessUpdate,
) -> Business:
    """
    Apply a partial update to a business.

    Raises
    ------
    ValueError
        If no fields are provided or the industry is unknown.
    LookupError
        If the business does not exist.
    """
    fields: list[str] = []
    params: list[object] = []

    if update.name is not None:
        if not update.name.strip():
            raise ValueError("Business name cannot be empty.")
        fields.append("name = ?")
        params.append(update.name.strip())
    if update.industry is not None:
        if update.industry not in INDUSTRIES:
            raise ValueError(f"Unknown industry: {update.industry!r}.")
        fields.append("industry = ?")
        params.append(update.industry)
    if update.currency is not None:
        fields.append("currency = ?")
        params.append(update.currency)
    if update.timezone is not None:
        fields.append("timezone = ?")
        params.append(update.timezone)
    if update.description is not None:
        fields.append("description = ?")
        params.append(update.description)
    if update.monthly_burn_target is not None:
        fields.append("monthly_burn_target_cents = ?")
        params.append(_to_cents(update.monthly_burn_target))

    if not fields:
        raise ValueError("No fields to update in BusinessUpdate.")

    init_database(cfg)
    params.append(business_id)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"UPDATE businesses SET {', '.join(fields)} WHERE id = ?;",
            params,
        )
        conn.commit()
        updated = cur.rowcount
    finally:
        conn.close()

    if updated == 0:
        raise LookupError(f"Business #{business_id} not found.")

    result = get_business(cfg, business_id)
    if result is None:
        msg = f"Business #{business_id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_business(cfg: DatabaseConfig, business_id: int) -> bool:
    """
    Delete a business and everything that belongs to it.

    Returns True if a business was deleted.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM businesses WHERE id = ?;", (business_id,))
        conn.commit()
        deleted = cur.rowcount > 0
    finally:
        conn.close()

    if deleted:
        logger.info("Deleted business #%s", business_id)
    return deleted


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

_SNAPSHOT_COLUMNS = """
    id, business_id, period, cash_balance_cents, revenue_cents,
    expenses_cents, accounts_receivable_cents, accounts_payable_cents,
    notes, created_at
"""


def _row_to_snapshot(row: tuple) -> Snapshot:
    (
        snapshot_id,
        business_id,
        period_str,
        cash_cents,
        revenue_cents,
        expenses_cents,
        receivable_cents,
        payable_cents,
        notes,
        created_at_str,
    ) = row
    return Snapshot(
        id=snapshot_id,
        business_id=business_id,
        period=date.fromisoformat(period_str),
        cash_balance=float(cash_cents) / 100.0,
        revenue=float(revenue_cents) / 100.0,
        expenses=float(expenses_cents) / 100.0,
        accounts_receivable=float(receivable_cents) / 100.0,
        accounts_payable=float(payable_cents) / 100.0,
        notes=notes,
        created_at=datetime.fromisoformat(created_at_str),
    )


def insert_snapshot(
    cfg: DatabaseConfig,
    business_id: int,
    new_snapshot: NewSnapshot,
) -> Snapshot:
    """
    Record a new snapshot for a business.

    The period is normalized to the first day of its month. Snapshots are
    immutable: there is no update counterpart.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO snapshots (
                business_id, period, cash_balance_cents, revenue_cents,
                expenses_cents, accounts_receivable_cents,
                accounts_payable_cents, notes, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                business_id,
                _month_start_iso(new_snapshot.period),
                _to_cents(new_snapshot.cash_balance),
                _to_cents(new_snapshot.revenue),
                _to_cents(new_snapshot.expenses),
                _to_cents(new_snapshot.accounts_receivable),
                _to_cents(new_snapshot.accounts_payable),
                new_snapshot.notes,
                _now_utc_iso(),
            ),
        )
        snapshot_id = cur.lastrowid
        conn.commit()

        cur = conn.execute(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM snapshots WHERE id = ?;",
            (snapshot_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    logger.info("Recorded snapshot #%s for business #%s", snapshot_id, business_id)
    return _row_to_snapshot(row)


def list_snapshots(
    cfg: DatabaseConfig,
    business_id: int,
    limit: Optional[int] = None,
) -> list[Snapshot]:
    """
    Return the snapshots of a business, newest period first.

    Snapshots sharing the same period are ordered newest record first, so
    the latest correction of a month is treated as "latest".
    """
    init_database(cfg)

    sql = f"""
        SELECT {_SNAPSHOT_COLUMNS}
          FROM snapshots
         WHERE business_id = ?
         ORDER BY period DESC, id DESC
    """
    params: list[object] = [business_id]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))

    conn = _connect(cfg)
    try:
        rows = conn.execute(sql, params).fetchall()
    finally:
        conn.close()

    return [_row_to_snapshot(r) for r in rows]


# ---------------------------------------------------------------------------
# Statements and line items
# ---------------------------------------------------------------------------


def _row_to_statement(row: tuple) -> Statement:
    (
        statement_id,
        business_id,
        file_name,
        file_path,
        statement_type,
        period_str,
        notes,
        created_at_str,
    ) = row
    return Statement(
        id=statement_id,
        business_id=business_id,
        file_name=file_name,
        file_path=file_path,
        statement_type=statement_type,
        period=date.fromisoformat(period_str),
        notes=notes,
        created_at=datetime.fromisoformat(created_at_str),
    )


def _check_statement_type(statement_type: str) -> None:
    if statement_type not in STATEMENT_TYPES:
        allowed = ", ".join(STATEMENT_TYPES)
        raise ValueError(
            f"Unknown statement type: {statement_type!r}. "
            f"Expected one of: {allowed}."
        )


def _insert_statement_row(
    conn: sqlite3.Connection,
    business_id: int,
    new_statement: NewStatement,
) -> Statement:
    """Insert a statement on an open connection, without committing."""
    cur = conn.execute(
        """
        INSERT INTO statements (
            business_id, file_name, file_path, statement_type,
            period, notes, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?);
        """,
        (
            business_id,
            new_statement.file_name,
            new_statement.file_path,
            new_statement.statement_type,
            _month_start_iso(new_statement.period),
            new_statement.notes,
            _now_utc_iso(),
        ),
    )
    row = conn.execute(
        """
        SELECT id, business_id, file_name, file_path, statement_type,
               period, notes, created_at
          FROM statements
         WHERE id = ?;
        """,
        (cur.lastrowid,),
    ).fetchone()
    return _row_to_statement(row)


def insert_statement(
    cfg: DatabaseConfig,
    business_id: int,
    new_statement: NewStatement,
) -> Statement:
    """
    Record an uploaded statement.

    Raises
    ------
    ValueError
        If the statement type is not one of STATEMENT_TYPES.
    """
    _check_statement_type(new_statement.statement_type)

    init_database(cfg)

    conn = _connect(cfg)
    try:
        statement = _insert_statement_row(conn, business_id, new_statement)
        conn.commit()
    finally:
        conn.close()

    logger.info("Recorded statement #%s for business #%s", statement.id, business_id)
    return statement


def list_statements(cfg: DatabaseConfig, business_id: int) -> list[Statement]:
    """Return the statements of a business, most recently uploaded first."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            """
            SELECT id, business_id, file_name, file_path, statement_type,
                   period, notes, created_at
              FROM statements
             WHERE business_id = ?
             ORDER BY id DESC;
            """,
            (business_id,),
        ).fetchall()
    finally:
        conn.close()

    return [_row_to_statement(r) for r in rows]


def _line_item_rows(business_id: int, items: Iterable) -> list[tuple]:
    """
    Validate line items and build their rows, without the statement id.

    Raises
    ------
    ValueError
        If a category is not one of categorization.CATEGORIES or an amount
        is not a finite number.
    """
    created_at = _now_utc_iso()
    rows = []
    for item in items:
        if item.category not in CATEGORIES:
            raise ValueError(
                f"Unknown category {item.category!r} for line "
                f"{item.line_name!r}. Expected one of: {', '.join(CATEGORIES)}."
            )
        rows.append(
            (
                business_id,
                item.line_name,
                _to_cents(item.amount),
                item.category,
                1 if item.is_suggested else 0,
                created_at,
            )
        )
    return rows


def _insert_line_item_rows(
    conn: sqlite3.Connection,
    statement_id: int | None,
    rows: list[tuple],
) -> None:
    conn.executemany(
        """
        INSERT INTO statement_line_items (
            business_id, statement_id, line_name, amount_cents,
            category, is_suggested, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?);
        """,
        [(row[0], statement_id, *row[1:]) for row in rows],
    )


def insert_line_items(
    cfg: DatabaseConfig,
    business_id: int,
    statement_id: int | None,
    items: Iterable,
) -> int:
    """
    Store a batch of confirmed line items in a single transaction.

    `items` are objects exposing `line_name`, `amount`, `category` and
    `is_suggested` (typically categorization.LineItem). Every item is
    validated before anything is written.

    Returns the number of rows inserted.

    Raises
    ------
    ValueError
        If a category is unknown or an amount is not finite.
    """
    rows = _line_item_rows(business_id, items)
    if not rows:
        return 0

    init_database(cfg)

    conn = _connect(cfg)
    try:
        _insert_line_item_rows(conn, statement_id, rows)
        conn.commit()
    finally:
        conn.close()

    logger.info(
        "Stored %d line items for business #%s (statement #%s)",
        len(rows),
        business_id,
        statement_id,
    )
    return len(rows)


def insert_statement_with_line_items(
    cfg: DatabaseConfig,
    business_id: int,
    new_statement: NewStatement,
    items: Iterable,
) -> tuple[Statement, int]:
    """
    Record a statement together with its confirmed line items.

    Both are written in one transaction: if any line item is rejected, the
    statement is not recorded either.

    Returns the stored statement and the number of line items inserted.

    Raises
    ------
    ValueError
        If the statement type or a category is unknown, or an amount is
        not finite.
    """
    _check_statement_type(new_statement.statement_type)
    rows = _line_item_rows(business_id, items)

    init_database(cfg)

    conn = _connect(cfg)
    try:
        statement = _insert_statement_row(conn, business_id, new_statement)
        if rows:
            _insert_line_item_rows(conn, statement.id, rows)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

    logger.info(
        "Recorded statement #%s with %d line items for business #%s",
        statement.id,
        len(rows),
        business_id,
    )
    return statement, len(rows)


def list_recent_line_items(
    cfg: DatabaseConfig,
    business_id: int,
    limit: int = 100,
) -> list[StoredLineItem]:
    """
    Return the most recent confirmed line items of a business, newest first.

    This is the history consulted by the category suggestion engine.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            """
            SELECT id, business_id, statement_id, line_name, amount_cents,
                   category, is_suggested, created_at
              FROM statement_line_items
             WHERE business_id = ?
             ORDER BY id DESC
             LIMIT ?;
            """,
            (business_id, int(limit)),
        ).fetchall()
    finally:
        conn.close()

    return [
        StoredLineItem(
            id=item_id,
            business_id=owner_id,
            statement_id=statement_id,
            line_name=line_name,
            amount=float(amount_cents) / 100.0,
            category=category,
            is_suggested=bool(is_suggested),
            created_at=datetime.fromisoformat(created_at_str),
        )
        for (
            item_id,
            owner_id,
            statement_id,
            line_name,
            amount_cents,
            category,
            is_suggested,
            created_at_str,
        ) in rows
    ]


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

_DECISION_COLUMNS = """
    id, business_id, title, question, amount_cents, context, status,
    ai_analysis, created_at, updated_at
"""


def _row_to_decision(row: tuple) -> Decision:
    (
        decision_id,
        business_id,
        title,
        question,
        amount_cents,
        context,
        status,
        ai_analysis,
        created_at_str,
        updated_at_str,
    ) = row
    return Decision(
        id=decision_id,
        business_id=business_id,
        title=title,
        question=question,
        amount=_from_cents(amount_cents),
        context=context,
        status=status,
        ai_analysis=ai_analysis,
        created_at=datetime.fromisoformat(created_at_str),
        updated_at=_parse_ts(updated_at_str),
    )


def insert_decision(
    cfg: DatabaseConfig,
    business_id: int,
    new_decision: NewDecision,
) -> Decision:
    """Create a decision with status 'considering'."""
    if not new_decision.title.strip() or not new_decision.question.strip():
        raise ValueError("Decision title and question cannot be empty.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO decisions (
                business_id, title, question, amount_cents, context,
                status, ai_analysis, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, 'considering', NULL, ?, NULL);
            """,
            (
                business_id,
                new_decision.title.strip(),
                new_decision.question.strip(),
                _to_cents_optional(new_decision.amount),
                new_decision.context,
                _now_utc_iso(),
            ),
        )
        decision_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    logger.info("Created decision #%s for business #%s", decision_id, business_id)

    result = get_decision(cfg, business_id, decision_id)
    if result is None:
        msg = f"Decision #{decision_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def get_decision(
    cfg: DatabaseConfig,
    business_id: int,
    decision_id: int,
) -> Decision | None:
    """Load a decision of a business, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"""
            SELECT {_DECISION_COLUMNS}
              FROM decisions
             WHERE id = ? AND business_id = ?;
            """,
            (decision_id, business_id),
        ).fetchone()
    finally:
        conn.close()

    return _row_to_decision(row) if row is not None else None


def list_decisions(cfg: DatabaseConfig, business_id: int) -> list[Decision]:
    """Return the decisions of a business, most recently created first."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            f"""
            SELECT {_DECISION_COLUMNS}
              FROM decisions
             WHERE business_id = ?
             ORDER BY created_at DESC, id DESC;
            """,
            (business_id,),
        ).fetchall()
    finally:
        conn.close()

    return [_row_to_decision(r) for r in rows]


def update_decision(
    cfg: DatabaseConfig,
    business_id: int,
    decision_id: int,
    update: DecisionUpdate,
) -> Decision:
    """
    Update the status and/or advisor analysis of a decision.

    Raises
    ------
    ValueError
        If no fields are provided or the status is unknown.
    LookupError
        If the decision does not exist for this business.
    """
    fields: list[str] = []
    params: list[object] = []

    if update.status is not None:
        if update.status not in DECISION_STATUSES:
            allowed = ", ".join(DECISION_STATUSES)
            raise ValueError(
                f"Unknown decision status: {update.status!r}. "
                f"Expected one of: {allowed}."
            )
        fields.append("status = ?")
        params.append(update.status)
    if update.ai_analysis is not None:
        fields.append("ai_analysis = ?")
        params.append(update.ai_analysis)

    if not fields:
        raise ValueError("No fields to update in DecisionUpdate.")

    fields.append("updated_at = ?")
    params.append(_now_utc_iso())
    params.extend([decision_id, business_id])

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            UPDATE decisions
               SET {", ".join(fields)}
             WHERE id = ? AND business_id = ?;
            """,
            params,
        )
        conn.commit()
        updated = cur.rowcount
    finally:
        conn.close()

    if updated == 0:
        raise LookupError(f"Decision #{decision_id} not found.")

    result = get_decision(cfg, business_id, decision_id)
    if result is None:
        msg = f"Decision #{decision_id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


def _load_messages(conn: sqlite3.Connection, conversation_id: int) -> tuple[Message, ...]:
    rows = conn.execute(
        """
        SELECT role, content, created_at
          FROM conversation_messages
         WHERE conversation_id = ?
         ORDER BY id ASC;
        """,
        (conversation_id,),
    ).fetchall()
    return tuple(
        Message(role=role, content=content, timestamp=datetime.fromisoformat(ts))
        for role, content, ts in rows
    )


def create_conversation(
    cfg: DatabaseConfig,
    business_id: int,
    title: str,
) -> Conversation:
    """Create an empty conversation for a business."""
    init_database(cfg)
    now = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO conversations (business_id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?);
            """,
            (business_id, title, now, now),
        )
        conversation_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    logger.info(
        "Created conversation #%s for business #%s", conversation_id, business_id
    )

    result = get_conversation(cfg, business_id, conversation_id)
    if result is None:
        msg = (
            f"Conversation #{conversation_id} was just inserted "
            "but could not be reloaded."
        )
        raise RuntimeError(msg)
    return result


def get_conversation(
    cfg: DatabaseConfig,
    business_id: int,
    conversation_id: int,
) -> Conversation | None:
    """Load a conversation with all its messages, or None."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            """
            SELECT id, business_id, title, created_at, updated_at
              FROM conversations
             WHERE id = ? AND business_id = ?;
            """,
            (conversation_id, business_id),
        ).fetchone()
        if row is None:
            return None
        messages = _load_messages(conn, conversation_id)
    finally:
        conn.close()

    conv_id, owner_id, title, created_at_str, updated_at_str = row
    return Conversation(
        id=conv_id,
        business_id=owner_id,
        title=title,
        messages=messages,
        created_at=datetime.fromisoformat(created_at_str),
        updated_at=datetime.fromisoformat(updated_at_str),
    )


def list_conversations(cfg: DatabaseConfig, business_id: int) -> list[Conversation]:
    """Return the conversations of a business, most recently updated first."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            """
            SELECT id, business_id, title, created_at, updated_at
              FROM conversations
             WHERE business_id = ?
             ORDER BY updated_at DESC, id DESC;
            """,
            (business_id,),
        ).fetchall()
        conversations = [
            Conversation(
                id=conv_id,
                business_id=owner_id,
                title=title,
                messages=_load_messages(conn, conv_id),
                created_at=datetime.fromisoformat(created_at_str),
                updated_at=datetime.fromisoformat(updated_at_str),
            )
            for conv_id, owner_id, title, created_at_str, updated_at_str in rows
        ]
    finally:
        conn.close()

    return conversations


def append_message(
    cfg: DatabaseConfig,
    business_id: int,
    conversation_id: int,
    role: MessageRole,
    content: str,
) -> Conversation:
    """
    Append a message to a conversation and bump its `updated_at`.

    Raises
    ------
    ValueError
        If the role is not 'user' or 'assistant'.
    LookupError
        If the conversation does not exist for this business.
    """
    if role not in ("user", "assistant"):
        raise ValueError(f"Unknown message role: {role!r}.")

    init_database(cfg)
    now = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE conversations
               SET updated_at = ?
             WHERE id = ? AND business_id = ?;
            """,
            (now, conversation_id, business_id),
        )
        if cur.rowcount == 0:
            conn.rollback()
            raise LookupError(f"Conversation #{conversation_id} not found.")

        conn.execute(
            """
            INSERT INTO conversation_messages (conversation_id, role, content, created_at)
            VALUES (?, ?, ?, ?);
            """,
            (conversation_id, role, content, now),
        )
        conn.commit()
    finally:
        conn.close()

    result = get_conversation(cfg, business_id, conversation_id)
    if result is None:
        msg = f"Conversation #{conversation_id} vanished while appending a message."
        raise RuntimeError(msg)
    return result


def delete_conversation(
    cfg: DatabaseConfig,
    business_id: int,
    conversation_id: int,
) -> bool:
    """Delete a conversation and its messages. Returns True if deleted."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "DELETE FROM conversations WHERE id = ? AND business_id = ?;",
            (conversation_id, business_id),
        )
        conn.commit()
        deleted = cur.rowcount > 0
    finally:
        conn.close()

    return deleted
