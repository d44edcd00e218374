"""
Free-text filtering and global search.

Matching is a case-insensitive substring test over a fixed set of fields per
kind. Queries are trimmed first; an empty or whitespace-only query leaves a
collection untouched, in its original order.
"""

from functools import lru_cache
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict

from founderstack.models.portfolio import (
    COLLECTION_FIELDS,
    Account,
    AppState,
    Company,
    EntityKind,
    Subscription,
)


class AnnotatedRecord(BaseModel):
    """A search hit together with its owning company's display details."""

    model_config = ConfigDict(frozen=True)

    record: Union[Account, Subscription]
    company_name: Optional[str] = None
    company_color: Optional[str] = None


class GlobalSearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str = ""
    companies: tuple[Company, ...] = ()
    accounts: tuple[AnnotatedRecord, ...] = ()
    subscriptions: tuple[AnnotatedRecord, ...] = ()

    @property
    def has_results(self) -> bool:
        return bool(self.companies or self.accounts or self.subscriptions)


def _needle(query: str) -> str:
    """Whitespace-only queries count as empty."""
    return query.strip().lower()


def _matches(needle: str, *values) -> bool:
    for value in values:
        if value is None:
            continue
        if isinstance(value, (tuple, list)):
            if any(needle in str(v).lower() for v in value):
                return True
        elif needle in str(value).lower():
            return True
    return False


def filter_companies(companies: Iterable[Company], query: str) -> tuple[Company, ...]:
    """Match on name, structure and description."""
    companies = tuple(companies)
    needle = _needle(query)
    if not needle:
        return companies
    return tuple(c for c in companies if _matches(needle, c.name, c.structure, c.description))


def filter_accounts(accounts: Iterable[Account], query: str) -> tuple[Account, ...]:
    """Match on platform, email, 2FA method and any note."""
    accounts = tuple(accounts)
    needle = _needle(query)
    if not needle:
        return accounts
    return tuple(
        a for a in accounts
        if _matches(needle, a.platform, a.email, a.two_factor_auth.value, a.notes)
    )


def filter_subscriptions(subscriptions: Iterable[Subscription], query: str) -> tuple[Subscription, ...]:
    """Match on name and payment method."""
    subscriptions = tuple(subscriptions)
    needle = _needle(query)
    if not needle:
        return subscriptions
    return tuple(s for s in subscriptions if _matches(needle, s.name, s.payment_method))


@lru_cache(maxsize=128)
def company_records(state: AppState, kind: EntityKind, company_id: str) -> tuple:
    """Records of one dependent kind owned by a company, in insertion order."""
    kind = EntityKind(kind)
    if kind is EntityKind.COMPANY:
        return tuple(c for c in state.companies if c.id == company_id)
    collection = getattr(state, COLLECTION_FIELDS[kind])
    return tuple(r for r in collection if r.company_id == company_id)


def _annotate(state: AppState, record) -> AnnotatedRecord:
    company = state.company(record.company_id)
    return AnnotatedRecord(
        record=record,
        company_name=company.name if company else None,
        company_color=company.color if company else None,
    )


@lru_cache(maxsize=64)
def global_search(state: AppState, query: str) -> GlobalSearchResult:
    """
    Search companies, accounts and subscriptions at once.

    Companies match on name; accounts on platform, email and 2FA method;
    subscriptions on name. A blank query yields an empty result rather
    than the whole portfolio.
    """
    needle = _needle(query)
    if not needle:
        return GlobalSearchResult(query=query)

    return GlobalSearchResult(
        query=query,
        companies=tuple(c for c in state.companies if _matches(needle, c.name)),
        accounts=tuple(
            _annotate(state, a) for a in state.accounts
            if _matches(needle, a.platform, a.email, a.two_factor_auth.value)
        ),
        subscriptions=tuple(
            _annotate(state, s) for s in state.subscriptions
            if _matches(needle, s.name)
        ),
    )
