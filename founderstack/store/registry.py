"""
Entity-kind registry.

One generic CRUD path serves all seven collections. Each kind registers its
model, its collection on AppState, the defaults applied on creation, and any
cascade hooks. Only accounts register hooks (the shadow subscription link).
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from founderstack.models.portfolio import (
    COLLECTION_FIELDS,
    Account,
    AccountStatus,
    BillingCycle,
    CardNetwork,
    CardStatus,
    CardType,
    Company,
    CompanyDocument,
    DocumentType,
    EntityKind,
    FinancialCard,
    Institution,
    Loan,
    LoanStatus,
    PortfolioModel,
    PricingModel,
    RenewMode,
    Subscription,
    SubscriptionStatus,
    TwoFactorMethod,
)
from founderstack.store import shadow


AddHook = Callable[..., None]
UpdateHook = Callable[..., None]
DeleteHook = Callable[..., None]


@dataclass(frozen=True)
class KindSpec:
    kind: EntityKind
    model: type[PortfolioModel]
    collection: str
    # now (epoch ms) -> defaults for absent or empty fields
    defaults: Callable[[int], dict[str, Any]]
    on_add: Optional[AddHook] = None
    on_update: Optional[UpdateHook] = None
    on_delete: Optional[DeleteHook] = None


def _company_defaults(now: int) -> dict[str, Any]:
    return {
        "name": "New Company",
        "structure": "LLC",
        "description": "",
        "color": "#4f46e5",
    }


def _account_defaults(now: int) -> dict[str, Any]:
    return {
        "platform": "New Platform",
        "website": "",
        "email": "N/A",
        "two_factor_auth": TwoFactorMethod.NONE.value,
        "recovery_method": "",
        "password": "",
        "pricing_model": PricingModel.PAID,
        "notes": (),
        "subscription_cost": 0.0,
        "subscription_interval": BillingCycle.MONTHLY,
        "payment_method": "",
        "next_billing_date": "",
        "renew": RenewMode.AUTO,
        "status": AccountStatus.ACTIVE,
    }


def _subscription_defaults(now: int) -> dict[str, Any]:
    return {
        "name": "New Tech Stack",
        "cost": 0.0,
        "currency": "USD",
        "billing_cycle": BillingCycle.MONTHLY,
        "payment_method": "",
        "next_renewal": shadow.iso_date(now),
        "renew": RenewMode.AUTO,
        "status": SubscriptionStatus.ACTIVE,
        "sub_services": (),
    }


def _card_defaults(now: int) -> dict[str, Any]:
    return {
        "name": "New Card",
        "card_holder": "",
        "last4": "0000",
        "expiry": "12/99",
        "network": CardNetwork.VISA,
        "type": CardType.CREDIT,
        "status": CardStatus.ACTIVE,
        "limit": 0.0,
    }


def _loan_defaults(now: int) -> dict[str, Any]:
    return {
        "lender": "Bank",
        "name": "New Loan",
        "principal_amount": 0.0,
        "remaining_balance": 0.0,
        "interest_rate": 0.0,
        "term": "Unknown",
        "monthly_payment": 0.0,
        "start_date": shadow.iso_date(now),
        "status": LoanStatus.ACTIVE,
    }


def _institution_defaults(now: int) -> dict[str, Any]:
    return {
        "name": "New Bank",
        "login_url": "",
        "email": "",
        "username": "",
        "password": "",
        "accounts": (),
    }


def _document_defaults(now: int) -> dict[str, Any]:
    return {
        "name": "New Document",
        "type": DocumentType.OTHER,
        "url": "",
        "upload_date": shadow.iso_date(now),
        "notes": "",
    }


_REGISTRY: dict[EntityKind, KindSpec] = {}


def register(spec: KindSpec) -> None:
    _REGISTRY[spec.kind] = spec


def get_spec(kind) -> KindSpec:
    """Look up the registration of a kind given as EntityKind or its string value."""
    return _REGISTRY[EntityKind(kind)]


def registered_kinds() -> tuple[EntityKind, ...]:
    return tuple(_REGISTRY)


register(KindSpec(EntityKind.COMPANY, Company, COLLECTION_FIELDS[EntityKind.COMPANY], _company_defaults))
register(KindSpec(
    EntityKind.ACCOUNT,
    Account,
    COLLECTION_FIELDS[EntityKind.ACCOUNT],
    _account_defaults,
    on_add=shadow.on_account_added,
    on_update=shadow.on_account_updated,
    on_delete=shadow.on_account_deleted,
))
register(KindSpec(EntityKind.SUBSCRIPTION, Subscription, COLLECTION_FIELDS[EntityKind.SUBSCRIPTION], _subscription_defaults))
register(KindSpec(EntityKind.FINANCIAL_CARD, FinancialCard, COLLECTION_FIELDS[EntityKind.FINANCIAL_CARD], _card_defaults))
register(KindSpec(EntityKind.LOAN, Loan, COLLECTION_FIELDS[EntityKind.LOAN], _loan_defaults))
register(KindSpec(EntityKind.INSTITUTION, Institution, COLLECTION_FIELDS[EntityKind.INSTITUTION], _institution_defaults))
register(KindSpec(EntityKind.DOCUMENT, CompanyDocument, COLLECTION_FIELDS[EntityKind.DOCUMENT], _document_defaults))
