"""
Persistent Store Adapter

Serializes the whole snapshot as one JSON document under a fixed key and
applies schema migrations when it is read back.

ERROR POLICY:
- load(): absent, unreadable, unparsable or invalid state falls back to seed
  data. Problems are logged, never raised.
- save(): any serialization or storage failure (quota included) returns
  False. Nothing is raised and nothing is retried here; the caller decides
  how to tell the user.
"""

import asyncio
import json
from enum import Enum
from typing import Callable, Optional

import structlog

from founderstack.models.portfolio import AppState, now_ms
from founderstack.services.storage.interface import (
    CorruptStateError,
    KeyValueStore,
    StorageError,
)
from founderstack.services.storage.migrations import migrate_document
from founderstack.services.storage.seed import build_seed_state
from founderstack.store.context import SessionContext


logger = structlog.get_logger(__name__)

DEFAULT_STATE_KEY = "founderstack_db_v1"
DEFAULT_SESSION_KEY = "founderstack_session"


class LoadOutcome(str, Enum):
    """How the last load() produced its snapshot."""
    LOADED = "loaded"
    SEEDED = "seeded"        # nothing stored yet
    RECOVERED = "recovered"  # stored state was corrupt; seed used instead


class PersistentStoreAdapter:
    """
    Load/save/clear of the application state in a KeyValueStore.

    Blocking backend calls run in a worker thread so the event loop (and the
    user) never waits on disk.
    """

    def __init__(
        self,
        store: KeyValueStore,
        state_key: str = DEFAULT_STATE_KEY,
        session_key: str = DEFAULT_SESSION_KEY,
        clock: Callable[[], int] = now_ms,
    ):
        self._store = store
        self._state_key = state_key
        self._session_key = session_key
        self._clock = clock
        self.last_load_outcome: Optional[LoadOutcome] = None
        self.last_load_error: Optional[str] = None
        self.last_migrations: list[str] = []

    @property
    def state_key(self) -> str:
        return self._state_key

    async def load(self) -> AppState:
        """
        Read, migrate and return the stored snapshot.

        On first run (or when the stored state is unusable) the seed dataset
        is written and returned.
        """
        now = self._clock()
        self.last_load_error = None
        self.last_migrations = []

        try:
            raw = await asyncio.to_thread(self._store.get, self._state_key)
        except StorageError as e:
            logger.error("state_read_failed", key=self._state_key, error=str(e))
            raw = None
            self.last_load_error = str(e)

        if raw is not None:
            try:
                state = self._parse(raw, now)
                self.last_load_outcome = LoadOutcome.LOADED
                return state
            except CorruptStateError as e:
                logger.error("state_corrupt", key=self._state_key, error=str(e))
                self.last_load_error = str(e)

        self.last_load_outcome = (
            LoadOutcome.RECOVERED if self.last_load_error else LoadOutcome.SEEDED
        )
        seed = build_seed_state(now)
        if not await self.save(seed):
            logger.warning("seed_write_failed", key=self._state_key)
        return seed

    def _parse(self, raw: str, now: int) -> AppState:
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"Stored state is not valid JSON: {e}") from e

        try:
            migrated, applied = migrate_document(document, now)
            state = AppState.from_document(migrated)
        except (TypeError, ValueError, AttributeError) as e:
            raise CorruptStateError(f"Stored state does not match the schema: {e}") from e

        self.last_migrations = applied
        return state

    async def save(self, snapshot: AppState) -> bool:
        """
        Serialize and write the snapshot.

        Returns:
            True if written, False on any serialization or storage failure
        """
        try:
            payload = json.dumps(snapshot.to_document(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("state_serialization_failed", error=str(e))
            return False

        try:
            await asyncio.to_thread(self._store.set, self._state_key, payload)
        except StorageError as e:
            logger.error(
                "state_save_failed",
                key=self._state_key,
                error=str(e),
                size_bytes=len(payload.encode("utf-8")),
            )
            return False

        return True

    async def clear(self) -> AppState:
        """Remove the stored state and return the seed dataset."""
        try:
            await asyncio.to_thread(self._store.remove, self._state_key)
        except StorageError as e:
            logger.error("state_clear_failed", key=self._state_key, error=str(e))
        return build_seed_state(self._clock())

    # -------------------------------------------------------------------------
    # Session context (view, tab, selected company)
    # -------------------------------------------------------------------------

    async def save_session(self, context: SessionContext) -> bool:
        payload = context.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(self._store.set, self._session_key, payload)
        except StorageError as e:
            logger.warning("session_save_failed", error=str(e))
            return False
        return True

    async def load_session(self) -> SessionContext:
        """The persisted session context, or a fresh one if absent or unreadable."""
        try:
            raw = await asyncio.to_thread(self._store.get, self._session_key)
        except StorageError as e:
            logger.warning("session_read_failed", error=str(e))
            return SessionContext()

        if raw is None:
            return SessionContext()
        try:
            return SessionContext.model_validate_json(raw)
        except ValueError as e:
            logger.warning("session_corrupt", error=str(e))
            return SessionContext()
