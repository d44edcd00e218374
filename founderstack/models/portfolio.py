"""
Core Data Models for FounderStack

These models define the schemas of the seven portfolio collections and of the
snapshot that holds them. They are designed to:
1. Be immutable, so an old snapshot is never affected by a later mutation
2. Keep the persisted layout (camelCase JSON) stable across releases
3. Be hashable, so derived views can be memoised on the snapshot itself

DESIGN DECISION: Python attributes are snake_case while the stored document
keeps the original camelCase names through field aliases. Ordered collections
are tuples, which keeps frozen models hashable.

NOTE: The store performs no business validation (negative costs, malformed
dates, blank names are accepted). See founderstack.validation for the
advisory checks a view layer can run before dispatching an intent.
"""

import secrets
import string
import time
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# =============================================================================
# HELPERS
# =============================================================================

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


def new_id(taken: Iterable[str] = ()) -> str:
    """
    Generate a fresh opaque identifier.

    Ids are 9 base-36 characters. `taken` lets the caller guarantee
    uniqueness within a collection.
    """
    taken = set(taken)
    while True:
        candidate = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))
        if candidate not in taken:
            return candidate


def now_ms() -> int:
    """Current time as epoch milliseconds (the stored timestamp unit)."""
    return int(time.time() * 1000)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntityKind(str, Enum):
    """Tag of each of the seven portfolio collections."""
    COMPANY = "company"
    ACCOUNT = "account"
    SUBSCRIPTION = "subscription"
    FINANCIAL_CARD = "financial_card"
    LOAN = "loan"
    INSTITUTION = "institution"
    DOCUMENT = "document"


class PricingModel(str, Enum):
    FREE = "free"
    PAID = "paid"


class BillingCycle(str, Enum):
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class RenewMode(str, Enum):
    AUTO = "Auto"
    MANUAL = "Manual"


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TRIAL = "Trial"


class SubscriptionStatus(str, Enum):
    ACTIVE = "Active"
    CANCELLED = "Cancelled"
    PENDING = "Pending"


class TwoFactorMethod(str, Enum):
    """
    Second-factor methods an account can record.

    Legacy spellings and unknown values are normalised on load.
    """
    AUTHENTICATOR = "Authenticator"
    SMS = "SMS"
    NONE = "None"


class CardNetwork(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMEX = "Amex"
    DISCOVER = "Discover"
    OTHER = "Other"


class CardType(str, Enum):
    CREDIT = "Credit"
    DEBIT = "Debit"


class CardStatus(str, Enum):
    ACTIVE = "Active"
    FROZEN = "Frozen"
    EXPIRED = "Expired"


class LoanStatus(str, Enum):
    ACTIVE = "Active"
    PAID_OFF = "Paid Off"
    DEFAULT = "Default"


class InstitutionAccountType(str, Enum):
    CHECKING = "Checking"
    SAVINGS = "Savings"
    INVESTING = "Investing"
    CD = "CD"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    OTHER = "Other"


class DocumentType(str, Enum):
    FORMATION = "Formation"
    LEGAL = "Legal"
    CONTRACT = "Contract"
    FINANCE = "Finance"
    OTHER = "Other"


# Structures offered when creating a company. Company.structure stays a free string.
COMPANY_STRUCTURES = (
    "LLC",
    "C-Corp",
    "S-Corp",
    "Sole Proprietorship",
    "Partnership",
    "Holding Company",
    "Non-Profit",
    "Personal",
    "Other",
)


# =============================================================================
# ENTITY MODELS
# =============================================================================

class PortfolioModel(BaseModel):
    """Base for every stored record: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class Company(PortfolioModel):
    """
    Root aggregate. Every other entity references a company by company_id.

    Timestamps are epoch milliseconds. last_modified moves whenever the
    company or anything it owns changes; last_viewed only moves when the
    user opens the company.
    """
    id: str
    name: str
    structure: str = "LLC"
    description: str = ""
    color: str = "#4f46e5"
    logo_url: Optional[str] = None
    last_modified: Optional[int] = None
    last_viewed: Optional[int] = None


class Account(PortfolioModel):
    """
    A login held by a company on some platform.

    Shadow-linked to the Subscription of the same company whose name equals
    this account's platform.
    """
    id: str
    company_id: str
    platform: str
    website: Optional[str] = None
    email: str = ""
    two_factor_auth: TwoFactorMethod = TwoFactorMethod.NONE
    recovery_method: Optional[str] = None
    # Stored in plain text: a known limitation, not a feature
    password: Optional[str] = None
    pricing_model: PricingModel = PricingModel.PAID
    notes: tuple[str, ...] = ()
    subscription_cost: Optional[float] = None
    subscription_interval: Optional[BillingCycle] = None
    payment_method: Optional[str] = None
    next_billing_date: Optional[str] = None
    renew: Optional[RenewMode] = None
    status: Optional[AccountStatus] = None


class SubService(PortfolioModel):
    """An add-on billed together with its parent subscription."""
    id: str
    name: str
    cost: float = 0.0
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE


class Subscription(PortfolioModel):
    id: str
    company_id: str
    name: str
    cost: float = 0.0
    currency: str = "USD"
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    payment_method: Optional[str] = None
    next_renewal: str = ""
    renew: Optional[RenewMode] = None
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    sub_services: tuple[SubService, ...] = ()
    email: Optional[str] = None
    email_purpose: Optional[str] = None


class FinancialCard(PortfolioModel):
    id: str
    company_id: str
    name: str
    card_holder: str = ""
    last4: str = ""
    expiry: str = ""  # MM/YY
    network: CardNetwork = CardNetwork.VISA
    type: CardType = CardType.CREDIT
    status: CardStatus = CardStatus.ACTIVE
    limit: Optional[float] = None


class Loan(PortfolioModel):
    id: str
    company_id: str
    lender: str
    name: str
    principal_amount: float = 0.0
    remaining_balance: float = 0.0
    interest_rate: float = 0.0  # percentage
    term: str = ""
    monthly_payment: float = 0.0
    start_date: str = ""
    status: LoanStatus = LoanStatus.ACTIVE


class InstitutionAccount(PortfolioModel):
    """A bank account embedded in its Institution."""
    id: str
    name: str
    type: InstitutionAccountType = InstitutionAccountType.CHECKING
    last4: str = ""
    balance: float = 0.0


class Institution(PortfolioModel):
    """A bank (or broker) with its login and embedded sub-accounts."""
    id: str
    company_id: str
    name: str
    login_url: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    accounts: tuple[InstitutionAccount, ...] = ()


class CompanyDocument(PortfolioModel):
    """A document reference: external link or embedded data URL."""
    id: str
    company_id: str
    name: str
    type: DocumentType = DocumentType.OTHER
    url: str = ""
    upload_date: str = ""
    notes: Optional[str] = None


# =============================================================================
# SNAPSHOT
# =============================================================================

class AppState(PortfolioModel):
    """
    One immutable snapshot of all seven collections.

    Collections keep insertion order. A transition returns a new AppState and
    shares every collection it did not touch with the previous one.
    """
    companies: tuple[Company, ...] = ()
    accounts: tuple[Account, ...] = ()
    subscriptions: tuple[Subscription, ...] = ()
    financial_cards: tuple[FinancialCard, ...] = ()
    loans: tuple[Loan, ...] = ()
    institutions: tuple[Institution, ...] = ()
    documents: tuple[CompanyDocument, ...] = ()

    def company(self, company_id: Optional[str]) -> Optional[Company]:
        """Find a company by id."""
        if company_id is None:
            return None
        return next((c for c in self.companies if c.id == company_id), None)

    def to_document(self) -> dict[str, Any]:
        """Convert to the JSON-ready, camelCase persisted layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "AppState":
        """Build a snapshot from the persisted layout (already migrated)."""
        return cls.model_validate(document)


# Collection attribute on AppState for each kind
COLLECTION_FIELDS: dict[EntityKind, str] = {
    EntityKind.COMPANY: "companies",
    EntityKind.ACCOUNT: "accounts",
    EntityKind.SUBSCRIPTION: "subscriptions",
    EntityKind.FINANCIAL_CARD: "financial_cards",
    EntityKind.LOAN: "loans",
    EntityKind.INSTITUTION: "institutions",
    EntityKind.DOCUMENT: "documents",
}

# Collections whose records hang off a company
DEPENDENT_KINDS = tuple(kind for kind in EntityKind if kind is not EntityKind.COMPANY)
