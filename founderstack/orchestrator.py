"""
Main Orchestrator for FounderStack

This module ties together all the components and is the single entry point
for a view layer:
1. Navigation (dashboard, company, tab) through an explicit SessionContext
2. Mutation intents (add / update / delete) through the pure store transitions
3. Derived views (burn, overview, search) computed from the current snapshot
4. Suggestions (insights, quote, questions, drafts) from the suggestion agent

DESIGN DECISION: The orchestrator enforces the ordering guarantees:
- Memory first: the new snapshot replaces the old one before anything else
- Persistence second, fire-and-forget: a slow or failed save never blocks or
  undoes an intent, it only flips SaveStatus.save_error
- Suggestions are independent of both and never raise
- Every intent is audited, ignored ones included
"""

import asyncio
from typing import Any, Callable, Mapping, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from founderstack.agents import AccountDraft, SuggestionAgent
from founderstack.audit import AuditLogger, configure_logging
from founderstack.config import Settings, get_settings
from founderstack.models.audit import AuditEventBuilder
from founderstack.models.portfolio import (
    COLLECTION_FIELDS,
    AppState,
    Company,
    EntityKind,
    now_ms,
)
from founderstack.queries import (
    CompanySummary,
    GlobalSearchResult,
    company_monthly_burn,
    company_records,
    company_summary,
    global_search,
    portfolio_overview,
    total_monthly_burn,
)
from founderstack.services.storage import (
    FileKeyValueStore,
    LoadOutcome,
    PersistentStoreAdapter,
    SaveStatus,
    SnapshotWriter,
)
from founderstack.store import (
    ActiveTab,
    SessionContext,
    add_entity,
    delete_company,
    delete_entity,
    mark_company_viewed,
    removed_counts,
    update_entity,
)


logger = structlog.get_logger(__name__)


class CompanyView(BaseModel):
    """Everything the company screen shows, for one company."""

    model_config = ConfigDict(frozen=True)

    company: Company
    summary: CompanySummary
    accounts: tuple = ()
    subscriptions: tuple = ()
    financial_cards: tuple = ()
    loans: tuple = ()
    institutions: tuple = ()
    documents: tuple = ()


class PortfolioSession:
    """
    Holds the current snapshot and session context and applies intents.

    Intents are synchronous and return as soon as memory is updated. They
    must be called while an event loop is running, since persistence is
    scheduled on it.
    """

    def __init__(
        self,
        adapter: PersistentStoreAdapter,
        agent: Optional[SuggestionAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
        debounce_seconds: float = 0.0,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize session.

        Args:
            adapter: Persistent store adapter for state and session context
            agent: Suggestion agent. Built from settings if not provided.
            audit_logger: Audit logger. A local one is created if not provided.
            debounce_seconds: Coalescing delay for state saves
            clock: Epoch-ms clock used for every timestamp
        """
        self._adapter = adapter
        self._audit = audit_logger or AuditLogger()
        self._agent = agent or SuggestionAgent(audit_logger=self._audit)
        self._clock = clock
        self._writer = SnapshotWriter(
            adapter,
            debounce_seconds=debounce_seconds,
            on_result=self._on_saved,
            clock=clock,
        )
        self._state = AppState()
        self._context = SessionContext()
        self._background: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def save_status(self) -> SaveStatus:
        return self._writer.status

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def selected_company(self) -> Optional[Company]:
        return self._state.company(self._context.selected_company_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> AppState:
        """Load the stored state (or seed data) and the last session context."""
        self._state = await self._adapter.load()

        outcome = self._adapter.last_load_outcome
        if outcome is LoadOutcome.LOADED:
            counts = {
                field: len(getattr(self._state, field))
                for field in COLLECTION_FIELDS.values()
            }
            self._audit.log(AuditEventBuilder.state_loaded(counts))
        elif outcome is LoadOutcome.RECOVERED:
            self._audit.log(AuditEventBuilder.state_corrupt(self._adapter.last_load_error or "unknown"))
            self._audit.log(AuditEventBuilder.state_seeded("stored state was unreadable"))
        else:
            self._audit.log(AuditEventBuilder.state_seeded("no stored state"))

        context = await self._adapter.load_session()
        if context.selected_company_id and self._state.company(context.selected_company_id) is None:
            context = context.show_dashboard()
        self._context = context
        return self._state

    async def reset(self) -> AppState:
        """Drop all stored data and start over from the seed dataset."""
        await self._writer.flush()
        self._state = await self._adapter.clear()
        self._set_context(SessionContext())
        self._audit.log(AuditEventBuilder.state_reset())
        return self._state

    async def flush(self) -> SaveStatus:
        """Wait for pending state and session writes."""
        if self._background:
            await asyncio.gather(*list(self._background))
        return await self._writer.flush()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def select_company(self, company_id: str, tab: ActiveTab = ActiveTab.ACCOUNTS) -> SessionContext:
        """Open a company: refreshes its last_viewed and switches to the company view."""
        new_state = mark_company_viewed(self._state, company_id, now=self._clock())
        if new_state is self._state:
            self._audit.log(AuditEventBuilder.mutation_ignored("view", EntityKind.COMPANY.value, company_id))
            return self._context

        self._audit.log(AuditEventBuilder.company_viewed(company_id))
        self._commit(new_state)
        self._set_context(self._context.open_company(company_id, tab))
        return self._context

    def show_dashboard(self) -> SessionContext:
        self._set_context(self._context.show_dashboard())
        return self._context

    def set_tab(self, tab: ActiveTab) -> SessionContext:
        self._set_context(self._context.with_tab(tab))
        return self._context

    # -------------------------------------------------------------------------
    # Mutation intents
    # -------------------------------------------------------------------------

    def add(self, kind, fields: Optional[Mapping[str, Any]] = None):
        """
        Create a record under the selected company (or a company).

        Returns:
            The new record, or None if the intent was ignored
        """
        kind = EntityKind(kind)
        new_state = add_entity(self._state, kind, fields, self._context, now=self._clock())
        if new_state is self._state:
            self._audit.log(AuditEventBuilder.mutation_ignored("add", kind.value, None))
            return None

        record = getattr(new_state, COLLECTION_FIELDS[kind])[-1]
        self._audit.log(AuditEventBuilder.entity_added(
            kind.value, record.id, getattr(record, "company_id", record.id),
        ))
        self._commit(new_state)
        return record

    def add_company(self, fields: Optional[Mapping[str, Any]] = None) -> Optional[Company]:
        return self.add(EntityKind.COMPANY, fields)

    def update(self, kind, entity_id: str, fields: Optional[Mapping[str, Any]] = None) -> bool:
        """Merge fields into a record. Returns False if the record does not exist."""
        kind = EntityKind(kind)
        new_state = update_entity(self._state, kind, entity_id, fields, now=self._clock())
        if new_state is self._state:
            self._audit.log(AuditEventBuilder.mutation_ignored("update", kind.value, entity_id))
            return False

        record = next(r for r in getattr(new_state, COLLECTION_FIELDS[kind]) if r.id == entity_id)
        self._audit.log(AuditEventBuilder.entity_updated(
            kind.value, entity_id, getattr(record, "company_id", entity_id), sorted(fields or {}),
        ))
        self._commit(new_state)
        return True

    def delete(self, kind, entity_id: str) -> bool:
        """Delete a record (a company cascades). Returns False if it does not exist."""
        kind = EntityKind(kind)
        before = self._state
        if kind is EntityKind.COMPANY:
            new_state = delete_company(before, entity_id)
        else:
            new_state = delete_entity(before, kind, entity_id, now=self._clock())

        if new_state is before:
            self._audit.log(AuditEventBuilder.mutation_ignored("delete", kind.value, entity_id))
            return False

        if kind is EntityKind.COMPANY:
            self._audit.log(AuditEventBuilder.company_deleted(entity_id, removed_counts(before, new_state)))
        else:
            record = next(r for r in getattr(before, COLLECTION_FIELDS[kind]) if r.id == entity_id)
            self._audit.log(AuditEventBuilder.entity_deleted(kind.value, entity_id, record.company_id))
        self._commit(new_state)

        if kind is EntityKind.COMPANY and self._context.selected_company_id == entity_id:
            self._set_context(self._context.show_dashboard())
        return True

    def delete_selected_company(self) -> bool:
        company_id = self._context.selected_company_id
        if company_id is None:
            self._audit.log(AuditEventBuilder.mutation_ignored("delete", EntityKind.COMPANY.value, None))
            return False
        return self.delete(EntityKind.COMPANY, company_id)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def monthly_burn(self, company_id: Optional[str] = None) -> float:
        if company_id is None:
            return total_monthly_burn(self._state)
        return company_monthly_burn(self._state, company_id)

    def overview(self) -> tuple[CompanySummary, ...]:
        return portfolio_overview(self._state)

    def search(self, query: str) -> GlobalSearchResult:
        return global_search(self._state, query)

    def company_view(self, company_id: Optional[str] = None) -> Optional[CompanyView]:
        """Records and summary of a company (the selected one by default)."""
        company_id = company_id or self._context.selected_company_id
        company = self._state.company(company_id)
        if company is None:
            return None
        return CompanyView(
            company=company,
            summary=company_summary(self._state, company_id),
            **{
                COLLECTION_FIELDS[kind]: company_records(self._state, kind, company_id)
                for kind in EntityKind
                if kind is not EntityKind.COMPANY
            },
        )

    # -------------------------------------------------------------------------
    # Suggestions
    # -------------------------------------------------------------------------

    async def generate_insights(self) -> str:
        """Cost-saving suggestions for the selected company's subscriptions."""
        company_id = self._context.selected_company_id
        subscriptions = company_records(self._state, EntityKind.SUBSCRIPTION, company_id) if company_id else ()
        return await self._agent.analyze_subscriptions(subscriptions)

    async def quote(self) -> str:
        return await self._agent.entrepreneurial_quote()

    async def ask(self, question: str) -> str:
        return await self._agent.ask_portfolio_question(self._state, question)

    async def suggest_email_purpose(self, subscription_name: str) -> str:
        return await self._agent.subscription_email_purpose(subscription_name)

    async def draft_account_from_text(self, text: str) -> Optional[AccountDraft]:
        return await self._agent.parse_account_text(text)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, new_state: AppState) -> None:
        self._state = new_state
        self._writer.submit(new_state)

    def _set_context(self, context: SessionContext) -> None:
        if context == self._context:
            return
        self._context = context
        task = asyncio.get_running_loop().create_task(self._adapter.save_session(context))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _on_saved(self, ok: bool) -> None:
        if ok:
            self._audit.log(AuditEventBuilder.save_succeeded(self._writer.status.last_saved_at or self._clock()))
        else:
            self._audit.log(AuditEventBuilder.save_failed())


def create_session(settings: Optional[Settings] = None) -> PortfolioSession:
    """
    Factory function to create a session with the default components.

    Args:
        settings: Settings to use (defaults to the environment)

    Returns:
        A PortfolioSession; call `await session.start()` before use
    """
    settings = settings or get_settings()
    app = settings.app
    storage = settings.storage

    configure_logging(level=app.log_level, json_logs=app.log_json)

    store = FileKeyValueStore(storage.directory, quota_bytes=storage.quota_bytes)
    adapter = PersistentStoreAdapter(
        store,
        state_key=storage.state_key,
        session_key=storage.session_key,
    )
    audit_logger = AuditLogger(history_size=app.audit_history_size)
    agent = SuggestionAgent(settings=settings.gemini, audit_logger=audit_logger)

    logger.info(
        "session_created",
        environment=app.app_environment,
        storage_directory=str(storage.directory),
        suggestions_enabled=agent.is_available,
    )
    return PortfolioSession(
        adapter,
        agent=agent,
        audit_logger=audit_logger,
        debounce_seconds=storage.save_debounce_seconds,
    )
