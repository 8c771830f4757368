import json
from types import SimpleNamespace

import pytest

from cfo_bot.advisor import (
    NO_DATA,
    AdvisorResponseError,
    DecisionAnalysis,
    ForecastInsights,
    OpenAIClient,
    chat_prompt,
    decision_prompt,
    financial_context,
    forecast_insights_prompt,
    format_history,
    load_decision_analysis,
    parse_decision_analysis,
    parse_forecast_insights,
    request_reply,
)
from cfo_bot.forecast import ForecastAssumptions, ForecastRow

VALID_ANALYSIS = {
    "recommendation": "depends",
    "summary": "You can afford it if the March invoice lands.",
    "considerations": ["Runway drops to 4 months", "Hiring takes 6 weeks"],
    "watch_out_for": "Late payments from your biggest client.",
    "confidence": "medium",
}

VALID_INSIGHTS = {
    "health_assessment": "Steady.",
    "key_insight": "Costs grow faster than revenue.",
    "recommendation": "Review software subscriptions.",
    "sentiment": "cautious",
}


def make_snapshot(**overrides) -> SimpleNamespace:
    values = {
        "cash_balance": 50000.0,
        "revenue": 12000.0,
        "expenses": 15000.0,
        "accounts_receivable": 3000.0,
        "accounts_payable": 1200.0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def make_messages(count: int) -> list[SimpleNamespace]:
    return [
        SimpleNamespace(
            role="user" if i % 2 == 0 else "assistant",
            content=f"message-{i:02d}",
        )
        for i in range(count)
    ]


class FakeResponses:
    def __init__(self, output_text: str):
        self.output_text = output_text
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(output_text=self.output_text)


# ---------------------------------------------------------------------------
# Structured responses
# ---------------------------------------------------------------------------


def test_parse_valid_payloads():
    analysis = parse_decision_analysis(VALID_ANALYSIS)
    assert isinstance(analysis, DecisionAnalysis)
    assert analysis.recommendation == "depends"
    assert len(analysis.considerations) == 2

    insights = parse_forecast_insights(VALID_INSIGHTS)
    assert isinstance(insights, ForecastInsights)
    assert insights.sentiment == "cautious"


@pytest.mark.parametrize(
    "payload",
    [
        {**VALID_ANALYSIS, "recommendation": "maybe"},
        {**VALID_ANALYSIS, "confidence": "certain"},
        {k: v for k, v in VALID_ANALYSIS.items() if k != "summary"},
        "not an object",
    ],
)
def test_invalid_decision_payload_raises(payload):
    with pytest.raises(AdvisorResponseError):
        parse_decision_analysis(payload)


def test_invalid_insights_payload_is_a_value_error():
    with pytest.raises(ValueError):
        parse_forecast_insights({**VALID_INSIGHTS, "sentiment": "ecstatic"})


def test_load_decision_analysis_from_stored_json():
    assert load_decision_analysis(None) is None
    loaded = load_decision_analysis(json.dumps(VALID_ANALYSIS))
    assert loaded == DecisionAnalysis(**VALID_ANALYSIS)

    with pytest.raises(AdvisorResponseError):
        load_decision_analysis('{"recommendation": "yes"}')


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def test_financial_context_with_and_without_snapshot():
    assert financial_context("Acme", None) == NO_DATA

    text = financial_context("Acme", make_snapshot(accounts_receivable=None))

    assert "Current financial situation for Acme:" in text
    assert "- Cash in bank: $50,000" in text
    assert "- Net monthly: -$3,000" in text
    assert "- Accounts receivable: Not available" in text
    assert "- Accounts payable: $1,200" in text


def test_financial_context_without_business_name():
    assert "for the business:" in financial_context(None, make_snapshot())


def test_forecast_insights_prompt_mentions_assumptions_and_ending_cash():
    rows = [
        ForecastRow(month="Feb 2026", cash=47000, revenue=12000, expenses=15000, net_change=-3000),
        ForecastRow(month="Mar 2026", cash=44000, revenue=12000, expenses=15000, net_change=-3000),
    ]

    text = forecast_insights_prompt(
        make_snapshot(),
        ForecastAssumptions(revenue_growth_pct=2.5, expense_change_pct=-1),
        rows,
    )

    assert "- Net monthly burn: $3,000" in text
    assert "- Revenue growth: 2.5% per month" in text
    assert "- Expense change: -1% per month" in text
    assert "2-month forecast ending cash: $44,000" in text


def test_decision_prompt_optional_fields():
    decision = SimpleNamespace(
        title="Hire designer",
        question="Can we afford a designer?",
        amount=6000.0,
        context="Agency work is picking up.",
    )

    text = decision_prompt(decision, make_snapshot())
    assert "Decision: Hire designer" in text
    assert "Amount involved: $6,000" in text
    assert "Additional context: Agency work is picking up." in text
    assert "- Monthly burn: $3,000" in text

    bare = SimpleNamespace(title="T", question="Q", amount=None, context=None)
    bare_text = decision_prompt(bare, None)
    assert "Amount involved" not in bare_text
    assert "Additional context" not in bare_text
    assert NO_DATA in bare_text


def test_history_is_limited_to_last_messages():
    messages = make_messages(12)

    history = format_history(messages, limit=10)

    assert "message-00" not in history
    assert "message-01" not in history
    assert history.startswith("User: message-02")
    assert history.endswith("CFO Bot: message-11")
    assert format_history(messages, limit=0) == ""


def test_chat_prompt_is_grounded_in_snapshot_and_history():
    text = chat_prompt(
        "Acme",
        make_snapshot(),
        make_messages(3),
        "Should I raise prices?",
        history_messages=2,
    )

    assert "You are CFO Bot" in text
    assert "- Cash in bank: $50,000" in text
    assert "message-00" not in text
    assert "CFO Bot: message-01" in text
    assert "User: message-02" in text
    assert "User's latest message: Should I raise prices?" in text


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def test_request_reply_rejects_empty_answer():
    class Silent:
        def complete(self, prompt):
            return "   "

    with pytest.raises(AdvisorResponseError):
        request_reply(Silent(), "hello")


def test_openai_client_complete_uses_responses_api():
    responses = FakeResponses("  Keep an eye on payroll.  ")
    client = OpenAIClient(model="gpt-4o-mini", client=SimpleNamespace(responses=responses))

    assert client.complete("How am I doing?") == "Keep an eye on payroll."

    call = responses.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["input"][0]["role"] == "system"
    assert call["input"][1] == {"role": "user", "content": "How am I doing?"}


def test_openai_client_complete_json_requests_schema():
    responses = FakeResponses(json.dumps(VALID_INSIGHTS))
    client = OpenAIClient(client=SimpleNamespace(responses=responses))
    schema = ForecastInsights.model_json_schema()

    assert client.complete_json("prompt", schema) == VALID_INSIGHTS

    text_format = responses.calls[0]["text"]["format"]
    assert text_format["type"] == "json_schema"
    assert text_format["schema"] == schema


def test_openai_client_complete_json_invalid_json():
    responses = FakeResponses("not json")
    client = OpenAIClient(client=SimpleNamespace(responses=responses))

    with pytest.raises(AdvisorResponseError):
        client.complete_json("prompt", {"type": "object"})


def test_openai_client_from_config_requires_key(monkeypatch):
    monkeypatch.delenv("CFO_BOT_TEST_KEY", raising=False)
    advisor_config = SimpleNamespace(model="gpt-4o-mini", api_key_env="CFO_BOT_TEST_KEY")

    with pytest.raises(ValueError, match="CFO_BOT_TEST_KEY"):
        OpenAIClient.from_config(advisor_config)
