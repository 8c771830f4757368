# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
LLM-backed advisor for CFO Bot.

The advisor never computes anything itself: it builds plain-text prompts
grounded in the business's stored numbers, sends them to a language model
through the small `LLMClient` interface and validates structured answers
with pydantic before they reach the rest of the application.

Three kinds of requests exist:

- forecast insights (structured: `ForecastInsights`),
- decision analysis (structured: `DecisionAnalysis`),
- free-form chat grounded in the latest snapshot.

`OpenAIClient` is the production implementation of `LLMClient`. Tests use a
fake client implementing the same two methods.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from typing import Any, Literal, Optional, Protocol

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError

from .forecast import ForecastAssumptions, ForecastRow
from .views import format_currency

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available"
NO_DATA = "No financial data available yet."

SYSTEM_PROMPT = (
    "You are CFO Bot, a calm, thoughtful virtual CFO for small business "
    "founders. Ground every statement in the numbers you are given."
)


class AdvisorResponseError(ValueError):
    """Raised when the language model returns an unusable answer."""


# ---------------------------------------------------------------------------
# Structured responses
# ---------------------------------------------------------------------------


class ForecastInsights(BaseModel):
    """Short commentary on a forecast."""

    health_assessment: str
    key_insight: str
    recommendation: str
    sentiment: Literal["positive", "cautious", "concerning"]


class DecisionAnalysis(BaseModel):
    """Balanced analysis of a yes/no financial decision."""

    recommendation: Literal["yes", "no", "depends"]
    summary: str
    considerations: list[str] = Field(default_factory=list)
    watch_out_for: str
    confidence: Literal["high", "medium", "low"]


def _validate(model: type[BaseModel], payload: Any):
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise AdvisorResponseError(
            f"Invalid {model.__name__} returned by the advisor: {exc}"
        ) from exc


def parse_forecast_insights(payload: Any) -> ForecastInsights:
    """Validate a raw JSON payload as ForecastInsights."""
    return _validate(ForecastInsights, payload)


def parse_decision_analysis(payload: Any) -> DecisionAnalysis:
    """Validate a raw JSON payload as DecisionAnalysis."""
    return _validate(DecisionAnalysis, payload)


def load_decision_analysis(raw_json: Optional[str]) -> Optional[DecisionAnalysis]:
    """
    Rebuild a DecisionAnalysis from the JSON text stored with a decision.

    Returns None when no analysis has been stored yet.
    """
    if not raw_json:
        return None
    try:
        return DecisionAnalysis.model_validate_json(raw_json)
    except ValidationError as exc:
        raise AdvisorResponseError("Stored decision analysis is invalid.") from exc


# ---------------------------------------------------------------------------
# Client interface
# ---------------------------------------------------------------------------


class LLMClient(Protocol):
    """What the advisor needs from a language model."""

    def complete(self, prompt: str) -> str: ...

    def complete_json(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]: ...


class OpenAIClient:
    """
    LLMClient implementation backed by the OpenAI Responses API.

    Args:
        model: Model name, e.g. "gpt-4o-mini".
        api_key: API key. When None, the OpenAI SDK reads OPENAI_API_KEY.
        client: Pre-built `openai.OpenAI` instance (takes precedence).
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.model = model
        self._client = client if client is not None else OpenAI(api_key=api_key)

    @classmethod
    def from_config(cls, advisor_config) -> "OpenAIClient":
        """
        Build a client from an AdvisorConfig.

        Raises:
            ValueError: if the configured API key variable is not set.
        """
        api_key = os.environ.get(advisor_config.api_key_env)
        if not api_key:
            raise ValueError(
                f"Environment variable {advisor_config.api_key_env} is not set; "
                "the advisor needs an API key."
            )
        return cls(model=advisor_config.model, api_key=api_key)

    def _input(self, prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def complete(self, prompt: str) -> str:
        resp = self._client.responses.create(model=self.model, input=self._input(prompt))
        return resp.output_text.strip()

    def complete_json(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        resp = self._client.responses.create(
            model=self.model,
            input=self._input(prompt),
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema.get("title", "response"),
                    "schema": schema,
                }
            },
        )
        try:
            return json.loads(resp.output_text)
        except json.JSONDecodeError as exc:
            raise AdvisorResponseError("The advisor did not return valid JSON.") from exc


# ---------------------------------------------------------------------------
# Prompt builders
# ---------------------------------------------------------------------------


def _amount(value: Optional[float], currency: str) -> str:
    if value is None:
        return NOT_AVAILABLE
    return format_currency(value, currency)


def _or_zero(value: Optional[float]) -> float:
    return float(value) if value is not None else 0.0


def financial_context(
    business_name: Optional[str], latest, currency: str = "USD"
) -> str:
    """
    Describe the latest snapshot for chat prompts.

    Missing figures read "Not available"; no snapshot at all reads
    "No financial data available yet."
    """
    if latest is None:
        return NO_DATA

    net = _or_zero(latest.revenue) - _or_zero(latest.expenses)
    return "\n".join(
        [
            f"Current financial situation for {business_name or 'the business'}:",
            f"- Cash in bank: {_amount(latest.cash_balance, currency)}",
            f"- Monthly revenue: {_amount(latest.revenue, currency)}",
            f"- Monthly expenses: {_amount(latest.expenses, currency)}",
            f"- Net monthly: {format_currency(net, currency)}",
            f"- Accounts receivable: {_amount(latest.accounts_receivable, currency)}",
            f"- Accounts payable: {_amount(latest.accounts_payable, currency)}",
        ]
    )


def _situation_lines(latest, currency: str, burn_label: str) -> list[str]:
    revenue = _or_zero(latest.revenue)
    expenses = _or_zero(latest.expenses)
    return [
        f"- Cash: {format_currency(latest.cash_balance, currency)}",
        f"- Monthly revenue: {format_currency(revenue, currency)}",
        f"- Monthly expenses: {format_currency(expenses, currency)}",
        f"- {burn_label}: {format_currency(expenses - revenue, currency)}",
    ]


def forecast_insights_prompt(
    latest,
    assumptions: ForecastAssumptions,
    rows: Sequence[ForecastRow],
    currency: str = "USD",
) -> str:
    """Prompt asking for ForecastInsights on a projection."""
    ending_cash = rows[-1].cash if rows else 0
    lines = [
        "As a calm, thoughtful CFO, analyze this financial forecast for a small "
        "business. Be conversational and reassuring.",
        "",
        "Current situation:",
        *_situation_lines(latest, currency, "Net monthly burn"),
        "",
        "Forecast assumptions:",
        f"- Revenue growth: {assumptions.revenue_growth_pct:g}% per month",
        f"- Expense change: {assumptions.expense_change_pct:g}% per month",
        "",
        f"{len(rows)}-month forecast ending cash: "
        f"{format_currency(ending_cash, currency)}",
        "",
        "Provide brief, actionable insights. Focus on:",
        "1. Overall health assessment (1-2 sentences)",
        "2. Key risk or opportunity (1-2 sentences)",
        "3. One specific recommendation (1-2 sentences)",
        "",
        "Keep it warm and human, not robotic. Use plain language.",
    ]
    return "\n".join(lines)


def decision_prompt(decision, latest, currency: str = "USD") -> str:
    """Prompt asking for a DecisionAnalysis of a stored decision."""
    lines = [
        "As a thoughtful, calm CFO advising a small business founder, analyze "
        "this financial decision:",
        "",
        f"Decision: {decision.title}",
        f"Question: {decision.question}",
    ]
    if decision.amount:
        lines.append(f"Amount involved: {format_currency(decision.amount, currency)}")
    if decision.context:
        lines.append(f"Additional context: {decision.context}")

    lines.append("")
    if latest is None:
        lines.append(NO_DATA)
    else:
        lines.append("Current financial situation:")
        lines.extend(_situation_lines(latest, currency, "Monthly burn"))

    lines += [
        "",
        "Provide a balanced analysis with:",
        "1. A clear recommendation (yes, no, or it depends)",
        "2. Key considerations (2-3 bullet points)",
        "3. What to watch out for",
        "4. A confidence level for your recommendation",
        "",
        "Be warm, conversational, and reassuring. Use plain language. Remember "
        "this is a real person making a stressful decision.",
    ]
    return "\n".join(lines)


def format_history(messages: Sequence, limit: int = 10) -> str:
    """Render the last `limit` messages as 'User: ...' / 'CFO Bot: ...' blocks."""
    if limit <= 0:
        return ""
    recent = list(messages)[-limit:]
    return "\n\n".join(
        f"{'User' if m.role == 'user' else 'CFO Bot'}: {m.content}" for m in recent
    )


def chat_prompt(
    business_name: Optional[str],
    latest,
    messages: Sequence,
    user_message: str,
    history_messages: int = 10,
    currency: str = "USD",
) -> str:
    """
    Prompt for a free-form advisor answer.

    `messages` is the stored conversation (oldest first); only the last
    `history_messages` are included.
    """
    return "\n".join(
        [
            "You are CFO Bot, a calm, thoughtful virtual CFO for small business "
            "founders.",
            "You're like a wise friend who happens to be great with numbers. You "
            "speak in plain language,",
            "you're reassuring but honest, and you always ground your advice in "
            "the user's actual financial situation.",
            "",
            financial_context(business_name, latest, currency),
            "",
            "Conversation so far:",
            format_history(messages, history_messages),
            "",
            f"User's latest message: {user_message}",
            "",
            "Respond naturally and helpfully. If you reference numbers, explain "
            "what they mean in plain terms.",
            "Keep responses concise but warm. Use short paragraphs. Don't be "
            "overly formal or use jargon.",
            "If you don't have enough information to answer something, say so and "
            "suggest what data would help.",
        ]
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


def request_forecast_insights(client: LLMClient, prompt: str) -> ForecastInsights:
    """Send a forecast prompt and validate the structured answer."""
    logger.debug("Forecast insights prompt:\n%s", prompt)
    payload = client.complete_json(prompt, ForecastInsights.model_json_schema())
    return parse_forecast_insights(payload)


def request_decision_analysis(client: LLMClient, prompt: str) -> DecisionAnalysis:
    """Send a decision prompt and validate the structured answer."""
    logger.debug("Decision prompt:\n%s", prompt)
    payload = client.complete_json(prompt, DecisionAnalysis.model_json_schema())
    return parse_decision_analysis(payload)


def request_reply(client: LLMClient, prompt: str) -> str:
    """Send a chat prompt and return the non-empty answer."""
    logger.debug("Chat prompt:\n%s", prompt)
    reply = client.complete(prompt).strip()
    if not reply:
        raise AdvisorResponseError("The advisor returned an empty answer.")
    return reply
