"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the local key-value slot
the application state lives in. This allows us to:
1. Keep state in a file on disk for normal use
2. Use in-memory storage for testing
3. Swap in another backend without touching the adapter or the store

The interface is intentionally tiny - get, set and remove of text values.
Serialization, migrations and seeding live in the adapter above it.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for a string key-value slot.

    Implementations are synchronous and blocking; the adapter moves calls
    off the event loop.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous one.

        Raises:
            QuotaExceededError: If the value does not fit
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """The value is larger than the backend allows."""

    def __init__(self, size: int, quota: int):
        self.size = size
        self.quota = quota
        super().__init__(f"Value of {size} bytes exceeds quota of {quota} bytes")


class CorruptStateError(StorageError):
    """The stored value exists but cannot be turned into application state."""
    pass
