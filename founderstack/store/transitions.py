"""
Domain State Store transitions.

DESIGN DECISION: Every intent is a pure function from (snapshot, intent) to a
new snapshot. The input snapshot is never modified and collections a
transition does not touch are shared with the result.

GUARANTEES:
- A transition applies completely (cascades included) or not at all
- Missing ids and missing company context are no-ops: the very same
  snapshot object is returned and nothing is raised
- Any add/update/delete under a company refreshes that company's
  last_modified, and never moves it backwards
- Records keep their position; new records are appended

Field values that cannot be coerced into the entity's types raise
InvalidFieldsError. That is the one deliberate exception to "never raise":
it signals a programming error in the caller, not a race.
"""

from functools import lru_cache
from typing import Any, Mapping, Optional

import structlog
from pydantic import ValidationError

from founderstack.models.portfolio import (
    AppState,
    EntityKind,
    PortfolioModel,
    DEPENDENT_KINDS,
    new_id,
    now_ms,
)
from founderstack.store.context import SessionContext
from founderstack.store.draft import Draft
from founderstack.store.errors import (
    EntityNotFoundError,
    InvalidFieldsError,
    MissingCompanyContextError,
    StoreError,
)
from founderstack.store.registry import KindSpec, get_spec


logger = structlog.get_logger(__name__)

# Never reassigned through an update
_IMMUTABLE_FIELDS = frozenset({"id", "company_id"})


# =============================================================================
# FIELD HANDLING
# =============================================================================

@lru_cache(maxsize=None)
def _field_lookup(model: type[PortfolioModel]) -> dict[str, str]:
    """Map both python names and camelCase aliases to python field names."""
    lookup = {}
    for name, info in model.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


def field_name(kind, key: str) -> Optional[str]:
    """Python field name for `key` (snake_case or camelCase), None if unknown."""
    return _field_lookup(get_spec(kind).model).get(key)


def _normalize_fields(spec: KindSpec, fields: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    lookup = _field_lookup(spec.model)
    normalized = {}
    for key, value in (fields or {}).items():
        name = lookup.get(key)
        if name is None:
            logger.warning("unknown_field_ignored", kind=spec.kind.value, field=key)
            continue
        normalized[name] = value
    return normalized


def _with_defaults(spec: KindSpec, values: dict[str, Any], now: int) -> dict[str, Any]:
    merged = dict(values)
    for name, default in spec.defaults(now).items():
        if merged.get(name) is None or merged.get(name) == "":
            merged[name] = default
    return merged


def _build(spec: KindSpec, values: dict[str, Any]) -> PortfolioModel:
    try:
        return spec.model.model_validate(values)
    except ValidationError as e:
        raise InvalidFieldsError(spec.kind.value, str(e)) from e


def _locate(snapshot: AppState, spec: KindSpec, entity_id: Optional[str]) -> tuple[int, PortfolioModel]:
    for index, record in enumerate(getattr(snapshot, spec.collection)):
        if record.id == entity_id:
            return index, record
    raise EntityNotFoundError(spec.kind.value, entity_id)


def _require_company(snapshot: AppState, context: Optional[SessionContext]) -> str:
    company_id = context.selected_company_id if context else None
    if company_id is None:
        raise MissingCompanyContextError("No company selected")
    if snapshot.company(company_id) is None:
        raise MissingCompanyContextError(f"Selected company {company_id!r} does not exist")
    return company_id


def _ignored(intent: str, kind: EntityKind, entity_id: Optional[str], error: StoreError) -> None:
    logger.debug(
        "mutation_ignored",
        intent=intent,
        kind=kind.value,
        entity_id=entity_id,
        reason=str(error),
    )


# =============================================================================
# TRANSITIONS
# =============================================================================

def add_entity(
    snapshot: AppState,
    kind,
    fields: Optional[Mapping[str, Any]] = None,
    context: Optional[SessionContext] = None,
    now: Optional[int] = None,
) -> AppState:
    """
    Create a record of `kind` and append it to its collection.

    Dependent kinds are created under context.selected_company_id; without a
    selected (existing) company the call is a no-op. Absent fields take the
    kind's defaults. Account creation also writes the companion subscription.
    """
    spec = get_spec(kind)
    now = now_ms() if now is None else now

    company_id = None
    if spec.kind is not EntityKind.COMPANY:
        try:
            company_id = _require_company(snapshot, context)
        except MissingCompanyContextError as e:
            _ignored("add", spec.kind, None, e)
            return snapshot

    values = _with_defaults(spec, _normalize_fields(spec, fields), now)
    values["id"] = new_id(r.id for r in getattr(snapshot, spec.collection))
    if company_id is not None:
        values["company_id"] = company_id
    else:
        values["last_modified"] = now
        values["last_viewed"] = now

    record = _build(spec, values)

    draft = Draft(snapshot)
    draft.append(spec.collection, record)
    if spec.on_add:
        spec.on_add(draft, record, now)
    if company_id is not None:
        draft.touch_company(company_id, now)
    return draft.commit()


def update_entity(
    snapshot: AppState,
    kind,
    entity_id: str,
    fields: Optional[Mapping[str, Any]] = None,
    now: Optional[int] = None,
) -> AppState:
    """
    Merge `fields` into the record with `entity_id`.

    Unspecified fields keep their values; id and company_id cannot change.
    Account updates are mirrored onto the shadow subscription(s).
    """
    spec = get_spec(kind)
    now = now_ms() if now is None else now

    try:
        index, before = _locate(snapshot, spec, entity_id)
    except EntityNotFoundError as e:
        _ignored("update", spec.kind, entity_id, e)
        return snapshot

    changes = {
        name: value
        for name, value in _normalize_fields(spec, fields).items()
        if name not in _IMMUTABLE_FIELDS
    }
    if spec.kind is EntityKind.COMPANY:
        changes["last_modified"] = max(
            changes.get("last_modified") or 0, before.last_modified or 0, now,
        )

    after = _build(spec, {**before.model_dump(), **changes})

    draft = Draft(snapshot)
    records = list(draft.get(spec.collection))
    records[index] = after
    draft.set(spec.collection, records)
    if spec.on_update:
        spec.on_update(draft, before, after, changes, now)
    if spec.kind is not EntityKind.COMPANY:
        draft.touch_company(before.company_id, now)
    return draft.commit()


def delete_entity(
    snapshot: AppState,
    kind,
    entity_id: str,
    now: Optional[int] = None,
) -> AppState:
    """
    Remove the record with `entity_id`.

    Deleting a company cascades (see delete_company). Deleting an account
    also removes its shadow subscription(s).
    """
    spec = get_spec(kind)
    if spec.kind is EntityKind.COMPANY:
        return delete_company(snapshot, entity_id)

    now = now_ms() if now is None else now

    try:
        index, record = _locate(snapshot, spec, entity_id)
    except EntityNotFoundError as e:
        _ignored("delete", spec.kind, entity_id, e)
        return snapshot

    draft = Draft(snapshot)
    records = list(draft.get(spec.collection))
    del records[index]
    draft.set(spec.collection, records)
    if spec.on_delete:
        spec.on_delete(draft, record, now)
    draft.touch_company(record.company_id, now)
    return draft.commit()


def delete_company(snapshot: AppState, company_id: str) -> AppState:
    """
    Remove a company and every record that references it, in one transition.

    No last_modified is touched: the company is gone.
    """
    if snapshot.company(company_id) is None:
        _ignored("delete", EntityKind.COMPANY, company_id,
                 EntityNotFoundError(EntityKind.COMPANY.value, company_id))
        return snapshot

    draft = Draft(snapshot)
    draft.set("companies", (c for c in snapshot.companies if c.id != company_id))
    for kind in DEPENDENT_KINDS:
        collection = get_spec(kind).collection
        draft.set(collection, (
            r for r in getattr(snapshot, collection) if r.company_id != company_id
        ))
    return draft.commit()


def mark_company_viewed(
    snapshot: AppState,
    company_id: str,
    now: Optional[int] = None,
) -> AppState:
    """Refresh last_viewed when the user opens a company. last_modified is untouched."""
    now = now_ms() if now is None else now
    spec = get_spec(EntityKind.COMPANY)
    try:
        index, company = _locate(snapshot, spec, company_id)
    except EntityNotFoundError as e:
        _ignored("view", spec.kind, company_id, e)
        return snapshot

    draft = Draft(snapshot)
    companies = list(snapshot.companies)
    companies[index] = company.model_copy(update={"last_viewed": now})
    draft.set("companies", companies)
    return draft.commit()


def removed_counts(before: AppState, after: AppState) -> dict[str, int]:
    """Records per collection that exist in `before` but not in `after`."""
    counts = {}
    for kind in EntityKind:
        collection = get_spec(kind).collection
        remaining = {r.id for r in getattr(after, collection)}
        removed = sum(1 for r in getattr(before, collection) if r.id not in remaining)
        if removed:
            counts[collection] = removed
    return counts
