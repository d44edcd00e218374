"""
Tests for the suggestion agent.

No real API calls: the agent is given fake models that return canned text
or raise.
"""

import asyncio
import json

import pytest
from google.api_core import exceptions as google_exceptions
from tenacity import wait_none

from founderstack.agents import (
    FALLBACK_QUOTES,
    AccountDraft,
    SuggestionAgent,
    is_quota_error,
    portfolio_digest,
)
from founderstack.agents.suggestions import (
    INSIGHTS_FALLBACK,
    INSIGHTS_QUOTA_FALLBACK,
    QUESTION_FALLBACK,
    QUESTION_QUOTA_FALLBACK,
)
from founderstack.audit import AuditLogger
from founderstack.config import GeminiSettings
from founderstack.models.audit import AuditEventType
from founderstack.models.portfolio import PricingModel, TwoFactorMethod


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Returns queued outcomes in order: text is returned, exceptions raised."""

    def __init__(self, *outcomes, delay: float = 0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResponse(outcome)


def make_agent(model=None, audit=None, **settings):
    return SuggestionAgent(
        settings=GeminiSettings(api_key=None, **settings),
        model=model,
        audit_logger=audit,
        retry_wait=wait_none(),
    )


class TestQuotaDetection:

    @pytest.mark.parametrize("error", [
        google_exceptions.ResourceExhausted("slow down"),
        Exception("429 Too Many Requests"),
        Exception("You exceeded your current quota"),
        Exception("RESOURCE_EXHAUSTED"),
    ])
    def test_quota_errors(self, error):
        assert is_quota_error(error) is True

    def test_other_errors(self):
        assert is_quota_error(ValueError("bad request")) is False
        assert is_quota_error(asyncio.TimeoutError()) is False


class TestQuote:

    async def test_returns_model_text(self):
        agent = make_agent(FakeModel("  Ship it. - Someone  "))
        assert await agent.entrepreneurial_quote() == "Ship it. - Someone"

    async def test_empty_text_gives_first_fallback(self):
        agent = make_agent(FakeModel(""))
        assert await agent.entrepreneurial_quote() == FALLBACK_QUOTES[0]

    async def test_failure_gives_a_fallback_quote(self):
        audit = AuditLogger()
        agent = make_agent(FakeModel(google_exceptions.ResourceExhausted("quota")), audit=audit)
        assert await agent.entrepreneurial_quote() in FALLBACK_QUOTES
        event = audit.recent()[0]
        assert event.event_type == AuditEventType.SUGGESTION_FALLBACK
        assert event.details["quota_exceeded"] is True

    async def test_without_api_key_uses_fallback(self):
        agent = make_agent()
        assert agent.is_available is False
        assert await agent.entrepreneurial_quote() in FALLBACK_QUOTES


class TestInsights:

    async def test_sends_subscriptions(self, seed_state):
        model = FakeModel("1. Cancel Zoom")
        agent = make_agent(model)
        assert await agent.analyze_subscriptions(seed_state.subscriptions) == "1. Cancel Zoom"
        assert "Klaviyo" in model.prompts[0]
        assert "3 brief strategic suggestions" in model.prompts[0]

    async def test_quota_fallback(self, seed_state):
        agent = make_agent(FakeModel(Exception("429 quota exceeded")))
        assert await agent.analyze_subscriptions(seed_state.subscriptions) == INSIGHTS_QUOTA_FALLBACK

    async def test_generic_fallback(self, seed_state):
        agent = make_agent(FakeModel(ValueError("boom")))
        assert await agent.analyze_subscriptions(seed_state.subscriptions) == INSIGHTS_FALLBACK

    async def test_timeout_falls_back(self, seed_state):
        agent = make_agent(FakeModel("late", delay=1.0), request_timeout_seconds=0.01)
        assert await agent.analyze_subscriptions(seed_state.subscriptions) == INSIGHTS_FALLBACK


class TestRetries:

    async def test_transient_error_retried(self):
        model = FakeModel(google_exceptions.ServiceUnavailable("blip"), "Recovered")
        agent = make_agent(model, max_attempts=2)
        assert await agent.subscription_email_purpose("AWS") == "Recovered"
        assert len(model.prompts) == 2

    async def test_attempts_bounded(self):
        model = FakeModel(google_exceptions.ServiceUnavailable("down"))
        agent = make_agent(model, max_attempts=3)
        assert await agent.subscription_email_purpose("AWS") == ""
        assert len(model.prompts) == 3

    async def test_quota_not_retried(self):
        model = FakeModel(google_exceptions.ResourceExhausted("quota"))
        agent = make_agent(model, max_attempts=3)
        await agent.subscription_email_purpose("AWS")
        assert len(model.prompts) == 1


class TestAccountDraft:

    async def test_parses_json(self):
        payload = {
            "platform": "Vercel", "email": "dev@cifr.io",
            "twoFactorAuth": "SMS", "pricingModel": "Paid", "notes": "Hobby plan",
        }
        agent = make_agent(FakeModel(json.dumps(payload)))
        draft = await agent.parse_account_text("vercel dev@cifr.io sms paid hobby plan")
        assert draft == AccountDraft(
            platform="Vercel", email="dev@cifr.io", two_factor_auth="SMS",
            pricing_model=PricingModel.PAID, notes="Hobby plan",
        )
        assert draft.to_fields()["notes"] == ["Hobby plan"]

    @pytest.mark.parametrize("raw, expected", [
        ("Auth App", TwoFactorMethod.AUTHENTICATOR),
        ("sms", TwoFactorMethod.SMS),
        ("Email", TwoFactorMethod.NONE),
        ("", None),
    ])
    def test_two_factor_normalised(self, raw, expected):
        draft = AccountDraft(platform="Vercel", email="dev@cifr.io", two_factor_auth=raw)
        assert draft.two_factor_auth == expected

    async def test_missing_required_field_gives_none(self):
        agent = make_agent(FakeModel(json.dumps({"platform": "Vercel"})))
        assert await agent.parse_account_text("vercel") is None

    async def test_garbage_gives_none(self):
        agent = make_agent(FakeModel("no idea"))
        assert await agent.parse_account_text("???") is None

    async def test_failure_gives_none(self):
        agent = make_agent(FakeModel(RuntimeError("down")))
        assert await agent.parse_account_text("vercel") is None


class TestPortfolioQuestion:

    async def test_prompt_has_no_secrets(self, seed_state):
        model = FakeModel("You spend $208.99 a month.")
        agent = make_agent(model)
        answer = await agent.ask_portfolio_question(seed_state, "What do I spend?")
        assert answer == "You spend $208.99 a month."
        prompt = model.prompts[0]
        assert "What do I spend?" in prompt
        assert "password123" not in prompt
        assert "Backup Codes" not in prompt

    async def test_fallbacks(self, seed_state):
        quota = make_agent(FakeModel(google_exceptions.ResourceExhausted("quota")))
        other = make_agent(FakeModel(RuntimeError("down")))
        assert await quota.ask_portfolio_question(seed_state, "?") == QUESTION_QUOTA_FALLBACK
        assert await other.ask_portfolio_question(seed_state, "?") == QUESTION_FALLBACK

    def test_digest_names_owning_company(self, seed_state):
        digest = portfolio_digest(seed_state)
        assert digest["accounts"][0]["company"] == "Cifr"
        assert digest["subscriptions"][2]["company"] == "EcoStream"
        assert "password" not in json.dumps(digest)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
