"""
Derived-View Calculators

DESIGN DECISION: Every number shown to the user is COMPUTED from the current
snapshot, never stored. These functions are pure; the ones that take a whole
snapshot are memoised on (snapshot, key), which is safe because snapshots are
immutable.

BURN FORMULA:
    (cost + sum(sub_services.cost)) x (1 if Monthly else 1/12)
Sub-service cost counts regardless of its status, and so does the parent's.
"""

from functools import lru_cache
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from founderstack.models.portfolio import (
    AppState,
    BillingCycle,
    Company,
    Institution,
    Subscription,
    SubscriptionStatus,
)


HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# Each institution counts this many times toward the financial item tally
INSTITUTION_WEIGHT = 2


class CompanySummary(BaseModel):
    """Per-company counts and burn, as shown on a dashboard card."""

    model_config = ConfigDict(frozen=True)

    company: Company
    account_count: int = 0
    subscription_count: int = 0
    card_count: int = 0
    loan_count: int = 0
    institution_count: int = 0
    document_count: int = 0
    financial_item_count: int = 0
    monthly_burn: float = 0.0


def subscription_monthly_burn(subscription: Subscription) -> float:
    """Monthly cost of one subscription including its sub-services."""
    total = subscription.cost + sum(s.cost for s in subscription.sub_services)
    if subscription.billing_cycle == BillingCycle.MONTHLY:
        return total
    return total / 12


def monthly_burn(subscriptions: Iterable[Subscription]) -> float:
    return sum(subscription_monthly_burn(s) for s in subscriptions)


@lru_cache(maxsize=32)
def total_monthly_burn(state: AppState) -> float:
    """Monthly burn across every company."""
    return monthly_burn(state.subscriptions)


@lru_cache(maxsize=128)
def company_monthly_burn(state: AppState, company_id: str) -> float:
    return monthly_burn(s for s in state.subscriptions if s.company_id == company_id)


def active_tools_count(subscriptions: Iterable[Subscription]) -> int:
    """Active subscriptions plus their active sub-services."""
    count = 0
    for subscription in subscriptions:
        if subscription.status == SubscriptionStatus.ACTIVE:
            count += 1
        count += sum(1 for s in subscription.sub_services if s.status == SubscriptionStatus.ACTIVE)
    return count


def institution_total_balance(institution: Institution) -> float:
    return sum(a.balance for a in institution.accounts)


def _count(records, company_id: str) -> int:
    return sum(1 for r in records if r.company_id == company_id)


@lru_cache(maxsize=128)
def company_summary(state: AppState, company_id: str) -> Optional[CompanySummary]:
    """
    Counts and burn for one company.

    Returns:
        CompanySummary, or None if the company does not exist
    """
    company = state.company(company_id)
    if company is None:
        return None

    cards = _count(state.financial_cards, company_id)
    loans = _count(state.loans, company_id)
    institutions = _count(state.institutions, company_id)

    return CompanySummary(
        company=company,
        account_count=_count(state.accounts, company_id),
        subscription_count=_count(state.subscriptions, company_id),
        card_count=cards,
        loan_count=loans,
        institution_count=institutions,
        document_count=_count(state.documents, company_id),
        financial_item_count=cards + loans + INSTITUTION_WEIGHT * institutions,
        monthly_burn=company_monthly_burn(state, company_id),
    )


@lru_cache(maxsize=32)
def portfolio_overview(state: AppState) -> tuple[CompanySummary, ...]:
    """One summary per company, in company insertion order."""
    return tuple(company_summary(state, c.id) for c in state.companies)


def time_ago(timestamp: Optional[int], now: int) -> str:
    """
    Coarse relative time for dashboard cards.

    'Never' when there is no timestamp, 'Just now' under an hour,
    then whole hours up to a day and whole days after that.
    """
    if not timestamp:
        return "Never"
    diff = now - timestamp
    days = diff // DAY_MS
    if days == 0:
        hours = diff // HOUR_MS
        if hours == 0:
            return "Just now"
        return f"{hours}h ago"
    return f"{days}d ago"
