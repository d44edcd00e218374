"""
Data Models Package

This package contains all Pydantic models used in FounderStack.
All data flowing through the system must conform to these schemas.
"""

from founderstack.models.portfolio import (
    COLLECTION_FIELDS,
    COMPANY_STRUCTURES,
    DEPENDENT_KINDS,
    Account,
    AccountStatus,
    AppState,
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
    InstitutionAccount,
    InstitutionAccountType,
    Loan,
    LoanStatus,
    PortfolioModel,
    PricingModel,
    RenewMode,
    SubService,
    Subscription,
    SubscriptionStatus,
    TwoFactorMethod,
    new_id,
    now_ms,
)
from founderstack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Portfolio models
    "COLLECTION_FIELDS",
    "COMPANY_STRUCTURES",
    "DEPENDENT_KINDS",
    "Account",
    "AccountStatus",
    "AppState",
    "BillingCycle",
    "CardNetwork",
    "CardStatus",
    "CardType",
    "Company",
    "CompanyDocument",
    "DocumentType",
    "EntityKind",
    "FinancialCard",
    "Institution",
    "InstitutionAccount",
    "InstitutionAccountType",
    "Loan",
    "LoanStatus",
    "PortfolioModel",
    "PricingModel",
    "RenewMode",
    "SubService",
    "Subscription",
    "SubscriptionStatus",
    "TwoFactorMethod",
    "new_id",
    "now_ms",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
