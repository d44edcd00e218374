"""
Store exceptions.

Not-found and missing-context conditions are raised inside the store and
turned into no-ops at the public transition boundary. InvalidFieldsError is
the only one that reaches callers.
"""

from typing import Optional


class StoreError(Exception):
    """Base exception for store operations."""
    pass


class EntityNotFoundError(StoreError):
    """The targeted record does not exist in its collection."""

    def __init__(self, kind: str, entity_id: Optional[str]):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id!r} not found")


class MissingCompanyContextError(StoreError):
    """A dependent record was added with no (or an unknown) selected company."""
    pass


class InvalidFieldsError(StoreError):
    """Field values could not be coerced into the entity's types."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"Invalid fields for {kind}: {message}")
