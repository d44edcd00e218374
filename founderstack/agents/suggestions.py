"""
Suggestion Service Client

DESIGN DECISION: Suggestions are DECORATION, never data.
The text-generation service can only produce prose (a quote, advice, a short
purpose line) or a draft the user still has to confirm. It never writes to
the store.

FAILURE POLICY:
- Every public method returns a usable value; nothing is raised to the caller
- Quota errors and other errors get different fallback texts
- Transient transport errors are retried a bounded number of times
- Each call is bounded by a timeout, so a slow service cannot block the user
- Without an API key every call degrades to its fallback immediately

Calls are stateless: no conversation history, no caching.
"""

import asyncio
import json
import random
from typing import Any, Iterable, Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from founderstack.audit import AuditLogger
from founderstack.config import GeminiSettings, get_settings
from founderstack.models.audit import AuditEventBuilder
from founderstack.models.portfolio import AppState, PricingModel, Subscription, TwoFactorMethod


logger = structlog.get_logger(__name__)


FALLBACK_QUOTES = (
    "The best way to predict the future is to create it. - Peter Drucker",
    "The way to get started is to quit talking and begin doing. - Walt Disney",
    "Your time is limited, so don't waste it living someone else's life. - Steve Jobs",
    "If you are not embarrassed by the first version of your product, you've launched too late. - Reid Hoffman",
    "Sustain a vision of who you want to be. - Oprah Winfrey",
    "Success is not final, failure is not fatal: it is the courage to continue that counts. - Winston Churchill",
    "Risk more than others think is safe. Dream more than others think is practical. - Howard Schultz",
)

INSIGHTS_QUOTA_FALLBACK = (
    "We are experiencing high traffic. Please manually review your subscriptions "
    "for unused seats or opportunities to switch to annual billing for discounts."
)
INSIGHTS_FALLBACK = "Could not generate insights at this time."
QUESTION_QUOTA_FALLBACK = (
    "I'm momentarily unavailable due to high request volume. Please try again shortly."
)
QUESTION_FALLBACK = "I couldn't process that query right now."

# Worth another attempt; everything else fails straight to the fallback
TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


class SuggestionUnavailableError(Exception):
    """The service is not configured."""
    pass


def is_quota_error(error: BaseException) -> bool:
    """True if the error means the service's rate limit or quota is exhausted."""
    if isinstance(error, google_exceptions.ResourceExhausted):
        return True
    if getattr(error, "code", None) == 429 or getattr(error, "status", None) in (429, "RESOURCE_EXHAUSTED"):
        return True
    message = str(error)
    return "429" in message or "quota" in message.lower() or "RESOURCE_EXHAUSTED" in message


class AccountDraft(BaseModel):
    """
    Account fields extracted from pasted text.

    A draft only: the user reviews it before it is dispatched as an add.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    platform: str
    email: str
    two_factor_auth: Optional[TwoFactorMethod] = None
    pricing_model: Optional[PricingModel] = None
    notes: Optional[str] = None

    @field_validator("two_factor_auth", mode="before")
    @classmethod
    def normalize_two_factor(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v.strip():
            return v or None
        v = v.strip()
        if v in ("Auth App", "Authenticator"):
            return TwoFactorMethod.AUTHENTICATOR
        if v.upper() == "SMS":
            return TwoFactorMethod.SMS
        return TwoFactorMethod.NONE

    @field_validator("pricing_model", mode="before")
    @classmethod
    def lower_pricing_model(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    def to_fields(self) -> dict[str, Any]:
        """Fields for an account add intent."""
        fields: dict[str, Any] = {"platform": self.platform, "email": self.email}
        if self.two_factor_auth:
            fields["two_factor_auth"] = self.two_factor_auth
        if self.pricing_model:
            fields["pricing_model"] = self.pricing_model
        if self.notes:
            fields["notes"] = [self.notes]
        return fields


def portfolio_digest(state: AppState) -> dict[str, list[dict[str, Any]]]:
    """
    Minified view of the portfolio sent with a question.

    Only names, emails and costs. Passwords, recovery methods and bank
    details never leave the device.
    """
    names = {c.id: c.name for c in state.companies}
    return {
        "companies": [{"name": c.name, "structure": c.structure} for c in state.companies],
        "accounts": [
            {
                "company": names.get(a.company_id),
                "platform": a.platform,
                "email": a.email,
                "cost": a.subscription_cost,
                "interval": a.subscription_interval.value if a.subscription_interval else None,
            }
            for a in state.accounts
        ],
        "subscriptions": [
            {
                "company": names.get(s.company_id),
                "name": s.name,
                "cost": s.cost,
                "billingCycle": s.billing_cycle.value,
                "status": s.status.value,
                "email": s.email,
            }
            for s in state.subscriptions
        ],
    }


class SuggestionAgent:
    """
    Client for the text-generation service.

    RESPONSIBILITIES:
    - Quotes, cost-saving insights, email purposes, portfolio answers
    - Drafting account fields from pasted text

    BOUNDARIES:
    - NEVER mutates state
    - NEVER raises to the caller
    - NEVER sends stored secrets
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
        reasoning_model: Any = None,
        audit_logger: Optional[AuditLogger] = None,
        retry_wait: Any = None,
    ):
        """
        Args:
            settings: Gemini settings (defaults to the environment)
            model: Object with an async generate_content_async(); built from
                settings when omitted and an API key is configured
            reasoning_model: Same, used for portfolio questions
            audit_logger: Receives a SUGGESTION_FALLBACK event per fallback
            retry_wait: tenacity wait strategy between attempts
        """
        self._settings = settings or get_settings().gemini
        self._audit = audit_logger
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)
        self._model = model
        self._reasoning_model = reasoning_model

        if self._model is None and self._settings.is_configured:
            self._configure_genai()
        if self._reasoning_model is None:
            self._reasoning_model = self._model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )
        self._reasoning_model = genai.GenerativeModel(
            model_name=self._settings.reasoning_model_name,
            generation_config={"max_output_tokens": self._settings.max_tokens},
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _generate(
        self,
        prompt: str,
        generation_config: Optional[dict] = None,
        reasoning: bool = False,
    ) -> str:
        """
        One bounded request with retries for transient errors.

        Raises whatever the last attempt raised; callers turn that into a
        fallback.
        """
        model = self._reasoning_model if reasoning else self._model
        if model is None:
            raise SuggestionUnavailableError("Gemini API key is not configured")

        kwargs = {"generation_config": generation_config} if generation_config else {}
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=self._retry_wait,
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        ):
            with attempt:
                response = await asyncio.wait_for(
                    model.generate_content_async(prompt, **kwargs),
                    timeout=self._settings.request_timeout_seconds,
                )
        return (response.text or "").strip()

    def _fallback(self, operation: str, error: BaseException) -> bool:
        """Record a fallback. Returns True if it was a quota error."""
        quota = is_quota_error(error)
        if quota:
            logger.warning("suggestion_quota_exceeded", operation=operation)
        else:
            logger.error("suggestion_failed", operation=operation, error=str(error) or type(error).__name__)
        if self._audit:
            self._audit.log(
                AuditEventBuilder.suggestion_fallback(operation, str(error) or type(error).__name__, quota)
            )
        return quota

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def entrepreneurial_quote(self) -> str:
        prompt = (
            "Provide one short, highly inspiring quote for entrepreneurs or business owners. "
            "Return only the quote and the author name. Example: "
            '"The way to get started is to quit talking and begin doing. - Walt Disney"'
        )
        try:
            text = await self._generate(prompt, {"temperature": 0.9})
            if text:
                return text
            return FALLBACK_QUOTES[0]
        except Exception as e:
            self._fallback("entrepreneurial_quote", e)
            return random.choice(FALLBACK_QUOTES)

    async def analyze_subscriptions(self, subscriptions: Iterable[Subscription]) -> str:
        """Three brief suggestions to save money or tidy the tool stack."""
        payload = [
            s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in subscriptions
        ]
        prompt = (
            "Analyze these business subscriptions and provide 3 brief strategic suggestions "
            "to save money or optimize the tech stack. "
            f"Subscriptions: {json.dumps(payload)}"
        )
        try:
            text = await self._generate(prompt, {"temperature": 0.7})
            return text or INSIGHTS_FALLBACK
        except Exception as e:
            if self._fallback("analyze_subscriptions", e):
                return INSIGHTS_QUOTA_FALLBACK
            return INSIGHTS_FALLBACK

    async def subscription_email_purpose(self, subscription_name: str) -> str:
        """A 12-word-at-most description of what the account email is for. '' on failure."""
        prompt = (
            "Provide a very short (max 12 words), professional, and strategic explanation of "
            f'what the primary account email for "{subscription_name}" is typically used for '
            "in a company. Focus on things like 'Primary Admin', 'Billing notifications', "
            "'Team invites', 'SSO ownership', etc. "
            'Example for GitHub: "Receives all pull request notifications, team invites, and security alerts." '
            'Example for AWS: "Root account owner for billing, console access, and IAM escalation." '
            "Return ONLY the purpose text, no quotes or prefix."
        )
        try:
            return await self._generate(prompt, {"temperature": 0.7})
        except Exception as e:
            self._fallback("subscription_email_purpose", e)
            return ""

    async def parse_account_text(self, text: str) -> Optional[AccountDraft]:
        """
        Extract account fields from free text.

        Returns:
            AccountDraft, or None if the service failed or returned
            something that is not a usable account
        """
        prompt = (
            "Parse the following raw text into a structured JSON account object with the keys "
            "platform, email, twoFactorAuth, pricingModel (one of: free, paid) and notes. "
            f'Text: "{text}"'
        )
        try:
            raw = await self._generate(prompt, {"response_mime_type": "application/json"})
            start = raw.find("{")
            end = raw.rfind("}") + 1
            if start < 0 or end <= start:
                raise ValueError("Response contains no JSON object")
            return AccountDraft.model_validate(json.loads(raw[start:end]))
        except (ValidationError, json.JSONDecodeError) as e:
            logger.warning("account_draft_unusable", error=str(e))
            return None
        except Exception as e:
            self._fallback("parse_account_text", e)
            return None

    async def ask_portfolio_question(self, state: AppState, question: str) -> str:
        prompt = f"""You are a smart portfolio manager assistant for an entrepreneur.

Here is the minified data of all companies, accounts, and subscriptions:
{json.dumps(portfolio_digest(state))}

User Question: "{question}"

Instructions:
1. Answer briefly and directly (max 2 sentences).
2. If the user asks about costs, sum them up across relevant companies.
3. If the user asks for a login/email, specify which company it belongs to.
4. Be helpful and professional."""

        try:
            text = await self._generate(prompt, reasoning=True)
            return text or QUESTION_FALLBACK
        except Exception as e:
            if self._fallback("ask_portfolio_question", e):
                return QUESTION_QUOTA_FALLBACK
            return QUESTION_FALLBACK
