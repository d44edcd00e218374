"""
Snapshot Writer

DESIGN DECISION: Persistence is fire-and-forget. The in-memory snapshot is
replaced first and the write happens afterwards on the event loop, so the user
never waits for the disk.

The writer is a single-writer queue of depth one:
- submit() only records the latest snapshot and makes sure a drain task runs
- snapshots submitted while a write is in flight are coalesced; only the
  newest one is written next
- the last write always reflects the last submitted snapshot
- failures flip SaveStatus.save_error and call on_result(False); they never
  roll back memory and are never retried on their own (the next submit is
  the retry)
"""

import asyncio
from typing import Callable, Optional

import structlog
from pydantic import BaseModel

from founderstack.models.portfolio import AppState, now_ms
from founderstack.services.storage.adapter import PersistentStoreAdapter


logger = structlog.get_logger(__name__)


class SaveStatus(BaseModel):
    """What the view layer shows next to the data: saving / error / saved at."""
    is_saving: bool = False
    save_error: bool = False
    last_saved_at: Optional[int] = None


class SnapshotWriter:
    def __init__(
        self,
        adapter: PersistentStoreAdapter,
        debounce_seconds: float = 0.0,
        on_result: Optional[Callable[[bool], None]] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self._adapter = adapter
        self._debounce = debounce_seconds
        self._on_result = on_result
        self._clock = clock
        self._pending: Optional[AppState] = None
        self._task: Optional[asyncio.Task] = None
        self._status = SaveStatus()
        self._writes = 0

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def writes(self) -> int:
        """Number of write attempts made so far."""
        return self._writes

    def submit(self, snapshot: AppState) -> None:
        """
        Queue a snapshot for writing and return immediately.

        Must be called from code running on the event loop.
        """
        self._pending = snapshot
        self._status = self._status.model_copy(update={"is_saving": True, "save_error": False})
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            if self._debounce:
                await asyncio.sleep(self._debounce)
            snapshot, self._pending = self._pending, None

            self._writes += 1
            try:
                ok = await self._adapter.save(snapshot)
            except Exception as e:
                # save() reports failures as False; anything else is a bug, not a reason to die
                logger.exception("snapshot_write_crashed", error=str(e))
                ok = False

            if ok:
                self._status = SaveStatus(
                    is_saving=self._pending is not None,
                    save_error=False,
                    last_saved_at=self._clock(),
                )
            else:
                self._status = SaveStatus(
                    is_saving=self._pending is not None,
                    save_error=True,
                    last_saved_at=self._status.last_saved_at,
                )

            if self._on_result:
                try:
                    self._on_result(ok)
                except Exception as e:
                    logger.error("save_callback_failed", error=str(e))

    async def flush(self) -> SaveStatus:
        """Wait until every submitted snapshot has been written (or has failed)."""
        while self._task is not None and not self._task.done():
            await self._task
        return self._status
