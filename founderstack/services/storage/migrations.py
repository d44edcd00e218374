"""
Forward-only schema migrations applied to the stored document on load.

Every rule is a backfill or rename that leaves already-current data as it is,
so loading what was just saved yields the same snapshot. A new field added to
the persisted layout must come with a rule here.
"""

from typing import Any

import structlog


logger = structlog.get_logger(__name__)

COLLECTIONS = (
    "companies",
    "accounts",
    "subscriptions",
    "financialCards",
    "loans",
    "institutions",
    "documents",
)

# Second-factor values understood by the normaliser (legacy spelling included)
_KNOWN_TWO_FACTOR = {"Auth App", "Authenticator", "SMS", "None"}


def _normalize_two_factor(value: Any) -> str:
    if value in ("Auth App", "Authenticator"):
        return "Authenticator"
    if value == "SMS":
        return "SMS"
    return "None"


def _migrate_company(company: dict, now: int, applied: set[str]) -> dict:
    company = dict(company)
    legacy_industry = company.pop("industry", None)
    if company.get("structure") is None:
        company["structure"] = legacy_industry or "LLC"
        applied.add("industry_to_structure")
    if company.get("lastModified") is None:
        company["lastModified"] = now
        applied.add("backfill_last_modified")
    if company.get("lastViewed") is None:
        company["lastViewed"] = now
        applied.add("backfill_last_viewed")
    return company


def _migrate_account(account: dict, applied: set[str]) -> dict:
    account = dict(account)

    legacy_category = account.pop("category", None)
    if not account.get("pricingModel"):
        account["pricingModel"] = str(legacy_category).lower() if legacy_category else "paid"
        applied.add("category_to_pricing_model")

    original = account.get("twoFactorAuth")
    normalized = _normalize_two_factor(original)
    if original != normalized:
        account["twoFactorAuth"] = normalized
        applied.add("normalize_two_factor")
        if original and original not in _KNOWN_TWO_FACTOR and not account.get("recoveryMethod"):
            account["recoveryMethod"] = original

    notes = account.get("notes")
    if notes is None:
        account["notes"] = []
        applied.add("backfill_notes")
    elif isinstance(notes, str):
        account["notes"] = [notes] if notes else []
        applied.add("notes_to_list")

    return account


def migrate_document(document: dict, now: int) -> tuple[dict, list[str]]:
    """
    Bring a stored document up to the current layout.

    Args:
        document: Parsed JSON of the stored state (not modified)
        now: Epoch milliseconds used for timestamp backfills

    Returns:
        (migrated_document, names_of_rules_that_changed_something)
    """
    if not isinstance(document, dict):
        raise TypeError(f"Stored state must be a JSON object, got {type(document).__name__}")

    migrated = dict(document)
    applied: set[str] = set()

    for collection in COLLECTIONS:
        if not isinstance(migrated.get(collection), list):
            migrated[collection] = []
            applied.add(f"backfill_{collection}")

    migrated["companies"] = [
        _migrate_company(c, now, applied) for c in migrated["companies"]
    ]
    migrated["accounts"] = [
        _migrate_account(a, applied) for a in migrated["accounts"]
    ]

    if applied:
        logger.info("state_migrated", rules=sorted(applied))
    return migrated, sorted(applied)
