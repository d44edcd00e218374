"""Services package."""

from founderstack.services.storage import (
    CorruptStateError,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistentStoreAdapter,
    QuotaExceededError,
    SaveStatus,
    SnapshotWriter,
    StorageError,
)

__all__ = [
    # Storage services
    "CorruptStateError",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PersistentStoreAdapter",
    "QuotaExceededError",
    "SaveStatus",
    "SnapshotWriter",
    "StorageError",
]
