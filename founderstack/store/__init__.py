"""
Domain State Store

Pure transitions over immutable AppState snapshots, with the cross-collection
cascade rules (company deletion, account/subscription shadow link,
last_modified bookkeeping).
"""

from founderstack.store.context import ActiveTab, ActiveView, SessionContext
from founderstack.store.errors import (
    EntityNotFoundError,
    InvalidFieldsError,
    MissingCompanyContextError,
    StoreError,
)
from founderstack.store.registry import KindSpec, get_spec, registered_kinds
from founderstack.store.shadow import shadow_subscriptions
from founderstack.store.transitions import (
    add_entity,
    delete_company,
    delete_entity,
    field_name,
    mark_company_viewed,
    removed_counts,
    update_entity,
)

__all__ = [
    # Context
    "ActiveTab",
    "ActiveView",
    "SessionContext",
    # Exceptions
    "EntityNotFoundError",
    "InvalidFieldsError",
    "MissingCompanyContextError",
    "StoreError",
    # Registry
    "KindSpec",
    "get_spec",
    "registered_kinds",
    # Transitions
    "add_entity",
    "delete_company",
    "delete_entity",
    "field_name",
    "mark_company_viewed",
    "removed_counts",
    "shadow_subscriptions",
    "update_entity",
]
