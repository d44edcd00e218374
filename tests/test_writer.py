"""Tests for the fire-and-forget snapshot writer."""

import asyncio

import pytest

from founderstack.models.portfolio import AppState, Company
from founderstack.services.storage import (
    DEFAULT_STATE_KEY,
    InMemoryKeyValueStore,
    PersistentStoreAdapter,
    SnapshotWriter,
)

from tests.conftest import NOW


def snapshot(name: str) -> AppState:
    return AppState(companies=(Company(id="c", name=name),))


class GatedAdapter:
    """Adapter stand-in whose saves wait for a gate and can be told to fail."""

    def __init__(self):
        self.saved: list[AppState] = []
        self.gate = asyncio.Event()
        self.gate.set()
        self.fail = False

    async def save(self, state: AppState) -> bool:
        await self.gate.wait()
        if self.fail:
            return False
        self.saved.append(state)
        return True


class TestSnapshotWriter:
    """Tests for coalescing and status reporting."""

    async def test_submit_does_not_block(self):
        adapter = GatedAdapter()
        adapter.gate.clear()
        writer = SnapshotWriter(adapter, clock=lambda: NOW)

        writer.submit(snapshot("a"))
        assert writer.status.is_saving is True
        assert adapter.saved == []

        adapter.gate.set()
        status = await writer.flush()
        assert adapter.saved == [snapshot("a")]
        assert status.is_saving is False
        assert status.last_saved_at == NOW

    async def test_coalesces_to_latest(self):
        adapter = GatedAdapter()
        adapter.gate.clear()
        writer = SnapshotWriter(adapter)

        writer.submit(snapshot("a"))
        await asyncio.sleep(0)  # first write is now in flight
        writer.submit(snapshot("b"))
        writer.submit(snapshot("c"))
        adapter.gate.set()
        await writer.flush()

        assert adapter.saved == [snapshot("a"), snapshot("c")]
        assert writer.writes == 2

    async def test_last_write_reflects_last_submit(self):
        store = InMemoryKeyValueStore()
        writer = SnapshotWriter(PersistentStoreAdapter(store), debounce_seconds=0.01)
        for name in ("a", "b", "c", "d"):
            writer.submit(snapshot(name))
        await writer.flush()
        assert '"name": "d"' in store.get(DEFAULT_STATE_KEY)
        assert writer.writes == 1

    async def test_failure_reported_not_raised(self):
        adapter = GatedAdapter()
        adapter.fail = True
        results = []
        writer = SnapshotWriter(adapter, on_result=results.append)

        writer.submit(snapshot("a"))
        status = await writer.flush()
        assert status.save_error is True
        assert status.last_saved_at is None
        assert results == [False]

    async def test_next_success_clears_error(self):
        adapter = GatedAdapter()
        adapter.fail = True
        results = []
        writer = SnapshotWriter(adapter, on_result=results.append, clock=lambda: NOW)

        writer.submit(snapshot("a"))
        await writer.flush()
        adapter.fail = False
        writer.submit(snapshot("b"))
        status = await writer.flush()

        assert status.save_error is False
        assert status.last_saved_at == NOW
        assert results == [False, True]

    async def test_crashing_adapter_counts_as_failure(self):
        class Broken:
            async def save(self, state):
                raise RuntimeError("disk on fire")

        writer = SnapshotWriter(Broken())
        writer.submit(snapshot("a"))
        status = await writer.flush()
        assert status.save_error is True

    async def test_quota_failure_through_real_adapter(self):
        writer = SnapshotWriter(PersistentStoreAdapter(InMemoryKeyValueStore(quota_bytes=10)))
        writer.submit(snapshot("too big for ten bytes"))
        assert (await writer.flush()).save_error is True

    async def test_flush_without_submit(self):
        writer = SnapshotWriter(GatedAdapter())
        status = await writer.flush()
        assert status.is_saving is False
        assert writer.writes == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
