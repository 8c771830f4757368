# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for CFO Bot.

This module sits between:
- the low-level database helpers in `db.py`,
- the pure engines (`forecast.py`, `categorization.py`, `trends.py`),
- the advisor (`advisor.py`), and
- user-facing layers such as the CLI.

Every function takes the global AppConfig and an explicit `business_id`.
The business is checked first; a missing business raises
BusinessNotFoundError.

Responsibilities
----------------
1) Businesses
   - Create, list, update and delete business profiles.

2) Snapshots
   - Record monthly snapshots.
   - Build the snapshot overview: latest and previous snapshot, derived
     trends and runway, recent history.

3) Forecasts
   - Project cash from the latest snapshot under given or configured
     assumptions, and detect the month cash runs out.

4) Statements
   - Read a statement file and suggest a category for each line, reusing
     the categories of previously confirmed lines.
   - Record the statement and persist the confirmed line items.

5) Decisions and conversations
   - Track decisions and their status.
   - Ask the advisor for decision analysis, forecast insights and chat
     answers grounded in the latest snapshot.

Design notes
------------
- Errors raised by storage or by the advisor are not caught here; the CLI
  decides how to present them.
- The pure engines never see configuration or storage: this module reads
  what they need and passes plain values in.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from . import db
from .advisor import (
    DecisionAnalysis,
    ForecastInsights,
    LLMClient,
    chat_prompt,
    decision_prompt,
    forecast_insights_prompt,
    request_decision_analysis,
    request_forecast_insights,
    request_reply,
)
from .categorization import LineItem, count_suggested, suggest_line_items
from .config import AppConfig
from .db import (
    Business,
    BusinessUpdate,
    Conversation,
    DatabaseConfig,
    Decision,
    DecisionUpdate,
    NewBusiness,
    NewDecision,
    NewSnapshot,
    NewStatement,
    Snapshot,
    Statement,
)
from .forecast import (
    ForecastAssumptions,
    ForecastRow,
    RunwayOutcome,
    StartingPosition,
    find_runway_end,
    project,
)
from .io import read_statement_lines
from .trends import SnapshotSummary, summarize

logger = logging.getLogger(__name__)

# Number of snapshots shown in the overview history.
HISTORY_SIZE = 6

# Conversation titles are the first characters of the opening message.
TITLE_LENGTH = 50


class BusinessNotFoundError(LookupError):
    """Raised when a service is called for a business that does not exist."""


@dataclass(frozen=True)
class SnapshotOverview:
    """Latest snapshot with its derived figures and recent history."""

    latest: Snapshot
    previous: Optional[Snapshot]
    summary: SnapshotSummary
    history: list[Snapshot]


@dataclass(frozen=True)
class ForecastResult:
    """A projection from the latest snapshot and its runway outcome."""

    start: StartingPosition
    assumptions: ForecastAssumptions
    rows: list[ForecastRow]
    runway: RunwayOutcome


@dataclass(frozen=True)
class UploadResult:
    """Outcome of confirming an uploaded statement."""

    statement: Statement
    stored_items: int
    suggested_items: int


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_db_config(app_config: AppConfig) -> DatabaseConfig:
    """Convenience helper to access the database configuration."""
    return app_config.database


def _latest_snapshot(app_config: AppConfig, business_id: int) -> Optional[Snapshot]:
    snapshots = db.list_snapshots(_get_db_config(app_config), business_id, limit=1)
    return snapshots[0] if snapshots else None


def conversation_title(message: str) -> str:
    """Title of a new conversation: the first 50 characters, '...' when cut."""
    text = message.strip()
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + "..."
    return text


# ---------------------------------------------------------------------------
# Businesses
# ---------------------------------------------------------------------------


def require_business(app_config: AppConfig, business_id: int) -> Business:
    """
    Load a business or fail.

    Raises
    ------
    BusinessNotFoundError
        If no business has this id.
    """
    business = db.get_business(_get_db_config(app_config), business_id)
    if business is None:
        raise BusinessNotFoundError(f"Business #{business_id} not found.")
    return business


def create_business(app_config: AppConfig, new_business: NewBusiness) -> Business:
    """Create a business profile."""
    return db.create_business(_get_db_config(app_config), new_business)


def list_businesses(app_config: AppConfig) -> list[Business]:
    """List all business profiles, newest first."""
    return db.list_businesses(_get_db_config(app_config))


def update_business(
    app_config: AppConfig, business_id: int, update: BusinessUpdate
) -> Business:
    """Apply a partial update to a business profile."""
    require_business(app_config, business_id)
    return db.update_business(_get_db_config(app_config), business_id, update)


def delete_business(app_config: AppConfig, business_id: int) -> None:
    """
    Delete a business and everything recorded for it.

    Raises
    ------
    BusinessNotFoundError
        If no business has this id.
    """
    require_business(app_config, business_id)
    db.delete_business(_get_db_config(app_config), business_id)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


def record_snapshot(
    app_config: AppConfig,
    business_id: int,
    new_snapshot: NewSnapshot,
) -> Snapshot:
    """Record a monthly snapshot for a business."""
    require_business(app_config, business_id)
    return db.insert_snapshot(_get_db_config(app_config), business_id, new_snapshot)


def list_snapshots(
    app_config: AppConfig,
    business_id: int,
    limit: Optional[int] = None,
) -> list[Snapshot]:
    """List the snapshots of a business, newest period first."""
    require_business(app_config, business_id)
    return db.list_snapshots(_get_db_config(app_config), business_id, limit=limit)


def snapshot_overview(
    app_config: AppConfig,
    business_id: int,
) -> Optional[SnapshotOverview]:
    """
    Build the snapshot overview of a business.

    Returns
    -------
    SnapshotOverview or None
        None when the business has no snapshot yet. Otherwise the latest
        and previous snapshots, the derived summary (trends against the
        previous snapshot, runway, largest changes) and up to HISTORY_SIZE
        most recent snapshots.
    """
    snapshots = list_snapshots(app_config, business_id, limit=HISTORY_SIZE)
    if not snapshots:
        return None

    latest = snapshots[0]
    previous = snapshots[1] if len(snapshots) > 1 else None

    return SnapshotOverview(
        latest=latest,
        previous=previous,
        summary=summarize(latest, previous),
        history=snapshots,
    )


# ---------------------------------------------------------------------------
# Forecasts
# ---------------------------------------------------------------------------


def forecast_for_business(
    app_config: AppConfig,
    business_id: int,
    assumptions: Optional[ForecastAssumptions] = None,
    *,
    today: Optional[date] = None,
) -> Optional[ForecastResult]:
    """
    Project cash forward from the latest snapshot of a business.

    Parameters
    ----------
    assumptions:
        Growth assumptions and horizon. Defaults to the [forecast] section
        of the configuration.
    today:
        Reference date for month labels (defaults to the current date).

    Returns
    -------
    ForecastResult or None
        None when the business has no snapshot to start from.
    """
    require_business(app_config, business_id)
    latest = _latest_snapshot(app_config, business_id)
    if latest is None:
        return None

    if assumptions is None:
        assumptions = app_config.forecast_defaults

    start = StartingPosition(
        cash=latest.cash_balance,
        revenue=latest.revenue,
        expenses=latest.expenses,
    )
    rows = project(start, assumptions, today=today)

    return ForecastResult(
        start=start,
        assumptions=assumptions,
        rows=rows,
        runway=find_runway_end(rows),
    )


def forecast_insights(
    app_config: AppConfig,
    business_id: int,
    client: LLMClient,
    assumptions: Optional[ForecastAssumptions] = None,
    *,
    today: Optional[date] = None,
) -> Optional[ForecastInsights]:
    """
    Ask the advisor to comment on the forecast of a business.

    Returns None when the business has no snapshot.
    """
    result = forecast_for_business(app_config, business_id, assumptions, today=today)
    if result is None:
        return None

    latest = _latest_snapshot(app_config, business_id)
    prompt = forecast_insights_prompt(
        latest, result.assumptions, result.rows, app_config.currency
    )
    return request_forecast_insights(client, prompt)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def review_statement(
    app_config: AppConfig,
    business_id: int,
    path: str,
) -> list[LineItem]:
    """
    Read a statement file and suggest a category for each of its lines.

    Categories of the business's most recent confirmed line items (up to
    `history_window`) are reused for lines with the same name.
    """
    require_business(app_config, business_id)

    lines_df = read_statement_lines(path)
    history = db.list_recent_line_items(
        _get_db_config(app_config), business_id, limit=app_config.history_window
    )

    lines = zip(lines_df["line_name"], lines_df["amount"])
    items = suggest_line_items(lines, history)
    logger.debug(
        "Suggested categories for %d lines of %s (%d reused)",
        len(items),
        path,
        count_suggested(items),
    )
    return items


def upload_statement(
    app_config: AppConfig,
    business_id: int,
    path: str,
    statement_type: str,
    period: date,
    items: list[LineItem],
    notes: Optional[str] = None,
) -> UploadResult:
    """
    Record a reviewed statement and persist its confirmed line items.

    The confirmed items become part of the history used for future
    category suggestions.
    """
    require_business(app_config, business_id)
    db_cfg = _get_db_config(app_config)

    statement, stored = db.insert_statement_with_line_items(
        db_cfg,
        business_id,
        NewStatement(
            file_name=Path(path).name,
            file_path=os.fspath(Path(path).resolve()),
            statement_type=statement_type,
            period=period,
            notes=notes,
        ),
        items,
    )

    return UploadResult(
        statement=statement,
        stored_items=stored,
        suggested_items=count_suggested(items),
    )


def list_statements(app_config: AppConfig, business_id: int) -> list[Statement]:
    """List uploaded statements, most recent first."""
    require_business(app_config, business_id)
    return db.list_statements(_get_db_config(app_config), business_id)


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


def create_decision(
    app_config: AppConfig,
    business_id: int,
    new_decision: NewDecision,
) -> Decision:
    """Start tracking a decision (status 'considering')."""
    require_business(app_config, business_id)
    return db.insert_decision(_get_db_config(app_config), business_id, new_decision)


def list_decisions(app_config: AppConfig, business_id: int) -> list[Decision]:
    """List decisions, newest first."""
    require_business(app_config, business_id)
    return db.list_decisions(_get_db_config(app_config), business_id)


def get_decision(app_config: AppConfig, business_id: int, decision_id: int) -> Decision:
    """
    Load a decision of a business.

    Raises
    ------
    LookupError
        If the decision does not exist for this business.
    """
    require_business(app_config, business_id)
    decision = db.get_decision(_get_db_config(app_config), business_id, decision_id)
    if decision is None:
        raise LookupError(f"Decision #{decision_id} not found.")
    return decision


def set_decision_status(
    app_config: AppConfig,
    business_id: int,
    decision_id: int,
    status: str,
) -> Decision:
    """Move a decision to another status."""
    require_business(app_config, business_id)
    return db.update_decision(
        _get_db_config(app_config),
        business_id,
        decision_id,
        DecisionUpdate(status=status),
    )


def analyze_decision(
    app_config: AppConfig,
    business_id: int,
    decision_id: int,
    client: LLMClient,
) -> DecisionAnalysis:
    """
    Ask the advisor to analyze a decision and store the analysis with it.

    The prompt includes the latest snapshot when one exists.
    """
    decision = get_decision(app_config, business_id, decision_id)
    latest = _latest_snapshot(app_config, business_id)

    analysis = request_decision_analysis(
        client, decision_prompt(decision, latest, app_config.currency)
    )

    db.update_decision(
        _get_db_config(app_config),
        business_id,
        decision_id,
        DecisionUpdate(ai_analysis=analysis.model_dump_json()),
    )
    logger.info(
        "Stored %s analysis for decision #%s", analysis.recommendation, decision_id
    )
    return analysis


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


def ask(
    app_config: AppConfig,
    business_id: int,
    message: str,
    client: LLMClient,
    conversation_id: Optional[int] = None,
) -> Conversation:
    """
    Send a message to the advisor and store both sides of the exchange.

    A new conversation is started when `conversation_id` is None; its title
    is taken from the message. The prompt includes the latest snapshot and
    the last `advisor.history_messages` messages of the conversation.

    Returns
    -------
    Conversation
        The conversation including the assistant reply as its last message.

    Raises
    ------
    ValueError
        If the message is empty.
    LookupError
        If `conversation_id` does not exist for this business.
    """
    text = message.strip()
    if not text:
        raise ValueError("Message cannot be empty.")

    business = require_business(app_config, business_id)
    db_cfg = _get_db_config(app_config)

    if conversation_id is None:
        conversation = db.create_conversation(
            db_cfg, business_id, conversation_title(text)
        )
        conversation_id = conversation.id

    conversation = db.append_message(db_cfg, business_id, conversation_id, "user", text)

    prompt = chat_prompt(
        business.name,
        _latest_snapshot(app_config, business_id),
        conversation.messages,
        text,
        history_messages=app_config.advisor.history_messages,
        currency=app_config.currency,
    )
    reply = request_reply(client, prompt)

    return db.append_message(db_cfg, business_id, conversation_id, "assistant", reply)


def list_conversations(app_config: AppConfig, business_id: int) -> list[Conversation]:
    """List conversations, most recently updated first."""
    require_business(app_config, business_id)
    return db.list_conversations(_get_db_config(app_config), business_id)


def get_conversation(
    app_config: AppConfig, business_id: int, conversation_id: int
) -> Conversation:
    """
    Load a conversation with its messages.

    Raises
    ------
    LookupError
        If the conversation does not exist for this business.
    """
    require_business(app_config, business_id)
    conversation = db.get_conversation(
        _get_db_config(app_config), business_id, conversation_id
    )
    if conversation is None:
        raise LookupError(f"Conversation #{conversation_id} not found.")
    return conversation


def delete_conversation(
    app_config: AppConfig, business_id: int, conversation_id: int
) -> bool:
    """Delete a conversation. Returns True if it existed."""
    require_business(app_config, business_id)
    return db.delete_conversation(_get_db_config(app_config), business_id, conversation_id)
