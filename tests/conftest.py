"""
Shared fixtures.

No real API calls and no real disk unless a test asks for tmp_path.
"""

import pytest

from founderstack.models.portfolio import AppState
from founderstack.services.storage import (
    InMemoryKeyValueStore,
    PersistentStoreAdapter,
    build_seed_state,
)
from founderstack.store import SessionContext


# 2024-11-14T22:13:20Z
NOW = 1_731_622_400_000


class FixedClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def seed_state() -> AppState:
    return build_seed_state(NOW)


@pytest.fixture
def cifr_context() -> SessionContext:
    """Company view of the first seed company."""
    return SessionContext().open_company("1")


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def adapter(memory_store, clock):
    return PersistentStoreAdapter(memory_store, clock=clock)
