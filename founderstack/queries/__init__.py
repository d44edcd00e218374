"""Derived views: burn, counts, filters and search over a snapshot."""

from founderstack.queries.calculators import (
    CompanySummary,
    active_tools_count,
    company_monthly_burn,
    company_summary,
    institution_total_balance,
    monthly_burn,
    portfolio_overview,
    subscription_monthly_burn,
    time_ago,
    total_monthly_burn,
)
from founderstack.queries.search import (
    AnnotatedRecord,
    GlobalSearchResult,
    company_records,
    filter_accounts,
    filter_companies,
    filter_subscriptions,
    global_search,
)

__all__ = [
    "AnnotatedRecord",
    "CompanySummary",
    "GlobalSearchResult",
    "active_tools_count",
    "company_monthly_burn",
    "company_records",
    "company_summary",
    "filter_accounts",
    "filter_companies",
    "filter_subscriptions",
    "global_search",
    "institution_total_balance",
    "monthly_burn",
    "portfolio_overview",
    "subscription_monthly_burn",
    "time_ago",
    "total_monthly_burn",
]
