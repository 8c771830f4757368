# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for CFO Bot.

This module wires together the main building blocks of CFO Bot:

- global configuration (database, forecast defaults, advisor, display),
- business profiles and monthly snapshots,
- statement import with category suggestions,
- the forecast engine,
- decisions and advisor conversations.

The CLI is intentionally thin: it does not implement financial logic
itself. It parses arguments, calls `services`, and renders the results as
console tables and/or CSV files.


Configuration
-------------

By default, the CLI reads ``cfo_bot_config.toml`` from the current working
directory (built-in defaults apply when it does not exist). Override with:

    --config PATH

Verbosity: ``-v`` logs at INFO level, ``-vv`` at DEBUG level. Without it,
the ``[logging].level`` setting applies.


Selecting a business
--------------------

Every business-scoped command takes ``--business ID``. Use
``business list`` to find the ids.


Commands
--------

business add NAME [--industry ...] [--currency ...] [--burn-target ...]
business list
business update ID [--name ...] [--industry ...] [--burn-target ...]
business delete ID --yes
    Deletes the business and everything recorded for it.

snapshot add --business ID --period YYYY-MM --cash N [--revenue N]
             [--expenses N] [--receivable N] [--payable N] [--notes TEXT]
snapshot list --business ID [--limit N]
snapshot show --business ID
    Latest snapshot, trends against the previous one, runway and the
    largest changes.

forecast --business ID [--months N] [--revenue-growth PCT]
         [--expense-change PCT] [--insights]
    Month-by-month projection from the latest snapshot. ``--insights``
    also asks the advisor for commentary.

statement review --business ID FILE.csv
    Show the lines of a statement with suggested categories.
statement import --business ID FILE.csv --type TYPE --period YYYY-MM
                 [--set "Line name=Category" ...] [--notes TEXT]
    Store the statement and its categorized lines. ``--set`` overrides a
    suggested category before saving.
statement list --business ID

decision add --business ID --title T --question Q [--amount N] [--context C]
decision list --business ID
decision status --business ID DECISION_ID STATUS
decision analyze --business ID DECISION_ID

ask --business ID "message" [--conversation ID]
conversation list --business ID
conversation show --business ID CONVERSATION_ID
conversation delete --business ID CONVERSATION_ID


Output
------

Tables are printed with ``DataFrame.to_string(index=False)``. When the
display mode is ``csv`` or ``both`` (from configuration or
``--display-mode``), list-like outputs are also written as timestamped CSV
files under ``--output-dir`` (``data/output`` by default).

Advisor commands need an API key in the environment variable named by
``[advisor].api_key_env`` (``OPENAI_API_KEY`` by default).


Examples
--------

    cfo-bot business add "Acme Studio" --industry agency
    cfo-bot snapshot add --business 1 --period 2026-01 --cash 50000 \\
        --revenue 12000 --expenses 15000
    cfo-bot forecast --business 1 --months 18 --revenue-growth 3
    cfo-bot statement import --business 1 pl_jan.csv --type profit_loss \\
        --period 2026-01 --set "Figma=Software"
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__, services
from .advisor import OpenAIClient, load_decision_analysis
from .categorization import CATEGORIES, LineItem, count_suggested, recategorize
from .config import AppConfig, load_app_config
from .db import (
    DECISION_STATUSES,
    INDUSTRIES,
    STATEMENT_TYPES,
    BusinessUpdate,
    NewBusiness,
    NewDecision,
    NewSnapshot,
)
from .forecast import ForecastAssumptions, forecast_to_dataframe
from .periods import _today, month_label, parse_month
from .views import (
    businesses_to_dataframe,
    changes_to_dataframe,
    conversations_to_dataframe,
    decisions_to_dataframe,
    format_currency,
    line_items_to_dataframe,
    snapshots_to_dataframe,
    statements_to_dataframe,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="cfo-bot",
        description=(
            "CFO Bot - Financial clarity application for small-business "
            "founders. Records monthly snapshots, categorizes statements, "
            "forecasts cash and answers questions grounded in your numbers."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of cfo_bot and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'cfo_bot_config.toml' in the current directory is "
            "used when present."
        ),
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v: INFO, -vv: DEBUG).",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output-dir",
        dest="output_dir",
        help=(
            "Output directory where CSV files are written when display mode "
            "includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    # Shared --business option for business-scoped commands.
    scoped = argparse.ArgumentParser(add_help=False)
    scoped.add_argument(
        "--business",
        dest="business_id",
        type=int,
        required=True,
        help="Id of the business to work on (see 'business list').",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # business
    # ------------------------------------------------------------------
    business_parser = subparsers.add_parser("business", help="Manage businesses.")
    business_sub = business_parser.add_subparsers(
        dest="business_command", metavar="business-command"
    )

    business_add = business_sub.add_parser("add", help="Create a business.")
    business_add.add_argument("name", help="Business name.")
    business_add.add_argument("--industry", choices=INDUSTRIES, default="other")
    business_add.add_argument("--currency", default="USD")
    business_add.add_argument("--timezone")
    business_add.add_argument("--description")
    business_add.add_argument(
        "--burn-target",
        dest="burn_target",
        type=float,
        help="Target monthly burn.",
    )

    business_sub.add_parser("list", help="List businesses.")

    business_update = business_sub.add_parser(
        "update", help="Update fields of a business."
    )
    business_update.add_argument("business_id", type=int)
    business_update.add_argument("--name")
    business_update.add_argument("--industry", choices=INDUSTRIES)
    business_update.add_argument("--currency")
    business_update.add_argument("--timezone")
    business_update.add_argument("--description")
    business_update.add_argument(
        "--burn-target",
        dest="burn_target",
        type=float,
        help="Target monthly burn.",
    )

    business_delete = business_sub.add_parser(
        "delete",
        help="Delete a business with all its snapshots, statements, "
        "decisions and conversations.",
    )
    business_delete.add_argument("business_id", type=int)
    business_delete.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the deletion. Without it nothing is deleted.",
    )

    # ------------------------------------------------------------------
    # snapshot
    # ------------------------------------------------------------------
    snapshot_parser = subparsers.add_parser(
        "snapshot", help="Record and inspect monthly snapshots."
    )
    snapshot_sub = snapshot_parser.add_subparsers(
        dest="snapshot_command", metavar="snapshot-command"
    )

    snapshot_add = snapshot_sub.add_parser(
        "add", parents=[scoped], help="Record a monthly snapshot."
    )
    snapshot_add.add_argument(
        "--period",
        help="Month of the snapshot (YYYY-MM). Defaults to the current month.",
    )
    snapshot_add.add_argument("--cash", type=float, required=True, help="Cash in bank.")
    snapshot_add.add_argument("--revenue", type=float, default=0.0)
    snapshot_add.add_argument("--expenses", type=float, default=0.0)
    snapshot_add.add_argument(
        "--receivable", type=float, default=0.0, help="Accounts receivable."
    )
    snapshot_add.add_argument(
        "--payable", type=float, default=0.0, help="Accounts payable."
    )
    snapshot_add.add_argument("--notes")

    snapshot_list = snapshot_sub.add_parser(
        "list", parents=[scoped], help="List snapshots, newest first."
    )
    snapshot_list.add_argument("--limit", type=int)

    snapshot_sub.add_parser(
        "show",
        parents=[scoped],
        help="Show the latest snapshot with trends and runway.",
    )

    # ------------------------------------------------------------------
    # forecast
    # ------------------------------------------------------------------
    forecast_parser = subparsers.add_parser(
        "forecast",
        parents=[scoped],
        help="Project cash forward from the latest snapshot.",
    )
    forecast_parser.add_argument(
        "--months",
        type=int,
        help="Months to forecast (1-36). Defaults to [forecast].months.",
    )
    forecast_parser.add_argument(
        "--revenue-growth",
        dest="revenue_growth",
        type=float,
        help="Monthly revenue growth in percent.",
    )
    forecast_parser.add_argument(
        "--expense-change",
        dest="expense_change",
        type=float,
        help="Monthly expense change in percent.",
    )
    forecast_parser.add_argument(
        "--insights",
        action="store_true",
        help="Ask the advisor for commentary on the forecast.",
    )

    # ------------------------------------------------------------------
    # statement
    # ------------------------------------------------------------------
    statement_parser = subparsers.add_parser(
        "statement", help="Review and import financial statements."
    )
    statement_sub = statement_parser.add_subparsers(
        dest="statement_command", metavar="statement-command"
    )

    statement_review = statement_sub.add_parser(
        "review",
        parents=[scoped],
        help="Show statement lines with suggested categories.",
    )
    statement_review.add_argument("path", help="Statement CSV file.")

    statement_import = statement_sub.add_parser(
        "import",
        parents=[scoped],
        help="Store a statement and its categorized lines.",
    )
    statement_import.add_argument("path", help="Statement CSV file.")
    statement_import.add_argument(
        "--type",
        dest="statement_type",
        choices=STATEMENT_TYPES,
        default="profit_loss",
    )
    statement_import.add_argument(
        "--period",
        help="Month covered by the statement (YYYY-MM). Defaults to the current month.",
    )
    statement_import.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="LINE=CATEGORY",
        help=(
            "Override the category of a line before saving. Can be repeated. "
            f"Categories: {', '.join(CATEGORIES)}."
        ),
    )
    statement_import.add_argument("--notes")

    statement_sub.add_parser(
        "list", parents=[scoped], help="List uploaded statements."
    )

    # ------------------------------------------------------------------
    # decision
    # ------------------------------------------------------------------
    decision_parser = subparsers.add_parser(
        "decision", help="Track financial decisions."
    )
    decision_sub = decision_parser.add_subparsers(
        dest="decision_command", metavar="decision-command"
    )

    decision_add = decision_sub.add_parser(
        "add", parents=[scoped], help="Start tracking a decision."
    )
    decision_add.add_argument("--title", required=True)
    decision_add.add_argument("--question", required=True)
    decision_add.add_argument("--amount", type=float)
    decision_add.add_argument("--context")

    decision_sub.add_parser("list", parents=[scoped], help="List decisions.")

    decision_status = decision_sub.add_parser(
        "status", parents=[scoped], help="Change the status of a decision."
    )
    decision_status.add_argument("decision_id", type=int)
    decision_status.add_argument("status", choices=DECISION_STATUSES)

    decision_analyze = decision_sub.add_parser(
        "analyze", parents=[scoped], help="Ask the advisor to analyze a decision."
    )
    decision_analyze.add_argument("decision_id", type=int)

    # ------------------------------------------------------------------
    # conversation
    # ------------------------------------------------------------------
    conversation_parser = subparsers.add_parser(
        "conversation", help="Browse and delete advisor conversations."
    )
    conversation_sub = conversation_parser.add_subparsers(
        dest="conversation_command", metavar="conversation-command"
    )

    conversation_sub.add_parser(
        "list", parents=[scoped], help="List conversations, most recent first."
    )

    conversation_show = conversation_sub.add_parser(
        "show", parents=[scoped], help="Print the messages of a conversation."
    )
    conversation_show.add_argument("conversation_id", type=int)

    conversation_delete = conversation_sub.add_parser(
        "delete", parents=[scoped], help="Delete a conversation."
    )
    conversation_delete.add_argument("conversation_id", type=int)

    # ------------------------------------------------------------------
    # ask
    # ------------------------------------------------------------------
    ask_parser = subparsers.add_parser(
        "ask", parents=[scoped], help="Ask the advisor a question."
    )
    ask_parser.add_argument("message", help="Your question.")
    ask_parser.add_argument(
        "--conversation",
        dest="conversation_id",
        type=int,
        help="Continue an existing conversation instead of starting a new one.",
    )

    return ap


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(config: AppConfig, verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.log_level, logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_month_arg(value: Optional[str]):
    """
    Parse an optional YYYY-MM argument, defaulting to the current month.

    Raises
    ------
    SystemExit
        If the month format is invalid.
    """
    if value is None:
        return parse_month(_today())
    try:
        return parse_month(value)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _advisor_client(config: AppConfig) -> OpenAIClient:
    try:
        return OpenAIClient.from_config(config.advisor)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _render(
    args: argparse.Namespace,
    config: AppConfig,
    df: pd.DataFrame,
    title: str,
    csv_stem: str,
) -> None:
    """Print and/or export a table depending on the display mode."""
    display_mode = args.display_mode or config.display_mode

    if display_mode in {"table", "both"}:
        print()
        print(f"=== {title} ===")
        if df.empty:
            print("(no rows)")
        else:
            print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        path = output_dir / f"{csv_stem}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def _apply_overrides(items: list[LineItem], overrides: list[str]) -> list[LineItem]:
    """
    Apply 'Line name=Category' overrides to reviewed line items.

    Line names are matched case-insensitively. Overridden lines lose their
    'suggested' flag.

    Raises
    ------
    SystemExit
        If an override is malformed, names an unknown line or an unknown
        category.
    """
    result = list(items)
    for raw in overrides:
        name, sep, category = raw.rpartition("=")
        if not sep or not name.strip():
            raise SystemExit(f"Invalid --set value {raw!r}. Expected LINE=CATEGORY.")

        wanted = name.strip().lower()
        matched = False
        for index, item in enumerate(result):
            if item.line_name.strip().lower() == wanted:
                try:
                    result[index] = recategorize(item, category.strip())
                except ValueError as exc:
                    raise SystemExit(str(exc)) from exc
                matched = True

        if not matched:
            raise SystemExit(f"No statement line named {name.strip()!r}.")
    return result


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_business(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "business_command", None)

    if subcmd == "add":
        business = services.create_business(
            config,
            NewBusiness(
                name=args.name,
                industry=args.industry,
                currency=args.currency,
                timezone=args.timezone,
                description=args.description,
                monthly_burn_target=args.burn_target,
            ),
        )
        print(f"Created business #{business.id}: {business.name}")
    elif subcmd == "list":
        businesses = services.list_businesses(config)
        if not businesses:
            print("No businesses yet. Create one with 'business add NAME'.")
            return
        _render(args, config, businesses_to_dataframe(businesses), "Businesses", "businesses")
    elif subcmd == "update":
        business = services.update_business(
            config,
            args.business_id,
            BusinessUpdate(
                name=args.name,
                industry=args.industry,
                currency=args.currency,
                timezone=args.timezone,
                description=args.description,
                monthly_burn_target=args.burn_target,
            ),
        )
        print(f"Updated business #{business.id}: {business.name}")
    elif subcmd == "delete":
        business = services.require_business(config, args.business_id)
        if not args.yes:
            print(
                f"This deletes business #{business.id} ({business.name}) and "
                "everything recorded for it. Re-run with --yes to confirm."
            )
            return
        services.delete_business(config, business.id)
        print(f"Deleted business #{business.id}: {business.name}")
    else:
        print(
            "No business subcommand specified. "
            "Available: 'add', 'list', 'update', 'delete'."
        )


def _handle_snapshot_show(args: argparse.Namespace, config: AppConfig) -> None:
    overview = services.snapshot_overview(config, args.business_id)
    if overview is None:
        print("No snapshots yet. Record one with 'snapshot add'.")
        return

    latest = overview.latest
    summary = overview.summary
    currency = config.currency

    def _line(label: str, value: float, trend=None) -> str:
        text = f"{label:<22}{format_currency(value, currency):>14}"
        if trend is not None and trend.label:
            text += f"  ({trend.label})"
        return text

    print(f"=== Snapshot {month_label(latest.period)} ===")
    print(_line("Cash in bank", latest.cash_balance, summary.cash_trend))
    print(_line("Monthly revenue", latest.revenue, summary.revenue_trend))
    print(_line("Monthly expenses", latest.expenses, summary.expenses_trend))
    print(_line("Net monthly", summary.net_monthly))
    print(_line("Accounts receivable", latest.accounts_receivable))
    print(_line("Accounts payable", latest.accounts_payable))
    print(f"{'Runway':<22}{summary.runway_label:>14}")

    if summary.top_changes:
        _render(
            args,
            config,
            changes_to_dataframe(summary.top_changes, currency),
            "What changed",
            "changes",
        )

    _render(
        args,
        config,
        snapshots_to_dataframe(overview.history),
        "Recent snapshots",
        "snapshots",
    )


def _handle_snapshot(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "snapshot_command", None)

    if subcmd == "add":
        snapshot = services.record_snapshot(
            config,
            args.business_id,
            NewSnapshot(
                period=_parse_month_arg(args.period),
                cash_balance=args.cash,
                revenue=args.revenue,
                expenses=args.expenses,
                accounts_receivable=args.receivable,
                accounts_payable=args.payable,
                notes=args.notes,
            ),
        )
        print(
            f"Recorded snapshot #{snapshot.id} for {month_label(snapshot.period)}."
        )
    elif subcmd == "list":
        snapshots = services.list_snapshots(config, args.business_id, limit=args.limit)
        _render(args, config, snapshots_to_dataframe(snapshots), "Snapshots", "snapshots")
    elif subcmd == "show":
        _handle_snapshot_show(args, config)
    else:
        print("No snapshot subcommand specified. Available: 'add', 'list', 'show'.")


def _handle_forecast(args: argparse.Namespace, config: AppConfig) -> None:
    defaults = config.forecast_defaults
    months = args.months if args.months is not None else defaults.months_to_forecast
    if not 1 <= months <= 36:
        raise SystemExit("--months must be between 1 and 36.")

    assumptions = ForecastAssumptions(
        revenue_growth_pct=(
            args.revenue_growth
            if args.revenue_growth is not None
            else defaults.revenue_growth_pct
        ),
        expense_change_pct=(
            args.expense_change
            if args.expense_change is not None
            else defaults.expense_change_pct
        ),
        months_to_forecast=months,
    )

    result = services.forecast_for_business(config, args.business_id, assumptions)
    if result is None:
        print("No snapshots yet. Record one with 'snapshot add' to forecast.")
        return

    _render(args, config, forecast_to_dataframe(result.rows), "Cash forecast", "forecast")

    print()
    runway = result.runway
    if runway.runs_out:
        print(
            f"Cash runs out in {runway.month_label} "
            f"(month {runway.month_index} of {len(result.rows)})."
        )
    else:
        print(
            f"Cash stays positive for all {len(result.rows)} months, ending at "
            f"{format_currency(runway.final_cash, config.currency)}."
        )

    if args.insights:
        insights = services.forecast_insights(
            config, args.business_id, _advisor_client(config), assumptions
        )
        if insights is not None:
            print()
            print(f"=== Advisor insights ({insights.sentiment}) ===")
            print(f"Health: {insights.health_assessment}")
            print(f"Key insight: {insights.key_insight}")
            print(f"Recommendation: {insights.recommendation}")


def _handle_statement(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "statement_command", None)
    if subcmd == "list":
        statements = services.list_statements(config, args.business_id)
        _render(args, config, statements_to_dataframe(statements), "Statements", "statements")
        return
    if subcmd not in {"review", "import"}:
        print(
            "No statement subcommand specified. "
            "Available: 'review', 'import', 'list'."
        )
        return

    items = services.review_statement(config, args.business_id, args.path)

    if subcmd == "review":
        _render(
            args,
            config,
            line_items_to_dataframe(items),
            f"Statement lines ({len(items)})",
            "statement_lines",
        )
        suggested = count_suggested(items)
        if suggested:
            print()
            print(f"{suggested} categories reused from your previous uploads.")
        return

    items = _apply_overrides(items, args.overrides)
    result = services.upload_statement(
        config,
        args.business_id,
        args.path,
        args.statement_type,
        _parse_month_arg(args.period),
        items,
        notes=args.notes,
    )
    print(
        f"Imported statement #{result.statement.id} "
        f"({result.statement.file_name}): {result.stored_items} lines, "
        f"{result.suggested_items} with reused categories."
    )


def _handle_decision(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "decision_command", None)

    if subcmd == "add":
        decision = services.create_decision(
            config,
            args.business_id,
            NewDecision(
                title=args.title,
                question=args.question,
                amount=args.amount,
                context=args.context,
            ),
        )
        print(f"Created decision #{decision.id}: {decision.title}")
    elif subcmd == "list":
        decisions = services.list_decisions(config, args.business_id)
        _render(args, config, decisions_to_dataframe(decisions), "Decisions", "decisions")
        for decision in decisions:
            analysis = load_decision_analysis(decision.ai_analysis)
            if analysis is not None:
                print(
                    f"#{decision.id}: advisor says {analysis.recommendation} "
                    f"({analysis.confidence} confidence)"
                )
    elif subcmd == "status":
        decision = services.set_decision_status(
            config, args.business_id, args.decision_id, args.status
        )
        print(f"Decision #{decision.id} is now '{decision.status}'.")
    elif subcmd == "analyze":
        analysis = services.analyze_decision(
            config, args.business_id, args.decision_id, _advisor_client(config)
        )
        print(f"Recommendation: {analysis.recommendation} ({analysis.confidence} confidence)")
        print(analysis.summary)
        if analysis.considerations:
            print()
            print("Key considerations:")
            for item in analysis.considerations:
                print(f"- {item}")
        print()
        print(f"Watch out for: {analysis.watch_out_for}")
    else:
        print(
            "No decision subcommand specified. "
            "Available: 'add', 'list', 'status', 'analyze'."
        )


def _handle_ask(args: argparse.Namespace, config: AppConfig) -> None:
    conversation = services.ask(
        config,
        args.business_id,
        args.message,
        _advisor_client(config),
        conversation_id=args.conversation_id,
    )
    print(conversation.messages[-1].content)
    print()
    print(f"(conversation #{conversation.id}: {conversation.title})")


def _handle_conversation(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "conversation_command", None)

    if subcmd == "list":
        conversations = services.list_conversations(config, args.business_id)
        if not conversations:
            print("No conversations yet. Start one with 'ask'.")
            return
        _render(
            args,
            config,
            conversations_to_dataframe(conversations),
            "Conversations",
            "conversations",
        )
    elif subcmd == "show":
        conversation = services.get_conversation(
            config, args.business_id, args.conversation_id
        )
        print(f"=== Conversation #{conversation.id}: {conversation.title} ===")
        for message in conversation.messages:
            speaker = "You" if message.role == "user" else "CFO Bot"
            print()
            print(f"{speaker}:")
            print(message.content)
    elif subcmd == "delete":
        if not services.delete_conversation(
            config, args.business_id, args.conversation_id
        ):
            raise LookupError(f"Conversation #{args.conversation_id} not found.")
        print(f"Deleted conversation #{args.conversation_id}.")
    else:
        print(
            "No conversation subcommand specified. "
            "Available: 'list', 'show', 'delete'."
        )


_HANDLERS = {
    "business": _handle_business,
    "snapshot": _handle_snapshot,
    "forecast": _handle_forecast,
    "statement": _handle_statement,
    "decision": _handle_decision,
    "ask": _handle_ask,
    "conversation": _handle_conversation,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the CFO Bot CLI.

    This function parses command-line arguments, loads the application
    configuration, configures logging and dispatches to the requested
    command. Domain errors are reported as a one-line message through
    SystemExit.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"cfo_bot version {__version__}")
        return

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    _configure_logging(config, args.verbose)

    handler = _HANDLERS.get(getattr(args, "command", None))
    if handler is None:
        parser.print_help()
        return

    try:
        handler(args, config)
    except (LookupError, ValueError) as exc:
        logger.debug("Command failed", exc_info=True)
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
