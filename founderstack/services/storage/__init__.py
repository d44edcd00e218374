"""
Storage Services Package

Provides the key-value interface, its file and in-memory backends, and the
Persistent Store Adapter (load/save/clear with migrations and seed data)
plus the fire-and-forget snapshot writer on top of it.
"""

from founderstack.services.storage.interface import (
    CorruptStateError,
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)
from founderstack.services.storage.backends import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
)
from founderstack.services.storage.adapter import (
    DEFAULT_SESSION_KEY,
    DEFAULT_STATE_KEY,
    LoadOutcome,
    PersistentStoreAdapter,
)
from founderstack.services.storage.migrations import migrate_document
from founderstack.services.storage.seed import build_seed_state, seed_document
from founderstack.services.storage.writer import SaveStatus, SnapshotWriter

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "CorruptStateError",
    "QuotaExceededError",
    "StorageError",
    # Backends
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    # Adapter
    "DEFAULT_SESSION_KEY",
    "DEFAULT_STATE_KEY",
    "LoadOutcome",
    "PersistentStoreAdapter",
    "build_seed_state",
    "migrate_document",
    "seed_document",
    # Writer
    "SaveStatus",
    "SnapshotWriter",
]
