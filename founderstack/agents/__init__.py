"""Suggestion service client."""

from founderstack.agents.suggestions import (
    FALLBACK_QUOTES,
    AccountDraft,
    SuggestionAgent,
    SuggestionUnavailableError,
    is_quota_error,
    portfolio_digest,
)

__all__ = [
    "FALLBACK_QUOTES",
    "AccountDraft",
    "SuggestionAgent",
    "SuggestionUnavailableError",
    "is_quota_error",
    "portfolio_digest",
]
