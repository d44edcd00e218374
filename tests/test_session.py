"""
Integration tests for PortfolioSession.

In-memory storage and a fake suggestion model; no network.
"""

import json

import pytest

from founderstack.agents import SuggestionAgent
from founderstack.audit import AuditLogger
from founderstack.config import GeminiSettings
from founderstack.models.audit import AuditEventType
from founderstack.models.portfolio import EntityKind
from founderstack.orchestrator import PortfolioSession, create_session
from founderstack.services.storage import (
    DEFAULT_SESSION_KEY,
    DEFAULT_STATE_KEY,
    InMemoryKeyValueStore,
    PersistentStoreAdapter,
    build_seed_state,
)
from founderstack.store import ActiveTab, ActiveView

from tests.conftest import NOW
from tests.test_suggestions import FakeModel


def event_types(session: PortfolioSession) -> list[AuditEventType]:
    return [e.event_type for e in session.audit.recent()]


@pytest.fixture
def model():
    return FakeModel("Consolidate video tools.")


@pytest.fixture
async def session(memory_store, clock, model):
    audit = AuditLogger()
    agent = SuggestionAgent(
        settings=GeminiSettings(api_key=None),
        model=model,
        audit_logger=audit,
    )
    session = PortfolioSession(
        PersistentStoreAdapter(memory_store, clock=clock),
        agent=agent,
        audit_logger=audit,
        clock=clock,
    )
    await session.start()
    await session.flush()
    return session


class TestStart:

    async def test_first_start_seeds(self, session, memory_store):
        assert session.state == build_seed_state(NOW)
        assert session.context.active_view == ActiveView.DASHBOARD
        assert AuditEventType.STATE_SEEDED in event_types(session)
        assert memory_store.get(DEFAULT_STATE_KEY) is not None

    async def test_restart_restores_state_and_context(self, session, memory_store, clock):
        session.select_company("2", ActiveTab.SUBSCRIPTIONS)
        session.add(EntityKind.DOCUMENT, {"name": "Lease"})
        await session.flush()

        again = PortfolioSession(PersistentStoreAdapter(memory_store, clock=clock), clock=clock,
                                 agent=SuggestionAgent(settings=GeminiSettings(api_key=None)))
        await again.start()
        assert again.state == session.state
        assert again.context.selected_company_id == "2"
        assert again.context.active_tab == ActiveTab.SUBSCRIPTIONS
        assert AuditEventType.STATE_LOADED in event_types(again)

    async def test_context_for_deleted_company_falls_back(self, memory_store, clock):
        memory_store.set(DEFAULT_SESSION_KEY, json.dumps({
            "selectedCompanyId": "ghost", "activeView": "company", "activeTab": "documents",
        }))
        session = PortfolioSession(PersistentStoreAdapter(memory_store, clock=clock),
                                   agent=SuggestionAgent(settings=GeminiSettings(api_key=None)))
        await session.start()
        assert session.context.selected_company_id is None
        assert session.context.active_view == ActiveView.DASHBOARD
        assert session.context.active_tab == ActiveTab.DOCUMENTS

    async def test_corrupt_state_is_audited(self, memory_store, clock):
        memory_store.set(DEFAULT_STATE_KEY, "{oops")
        session = PortfolioSession(PersistentStoreAdapter(memory_store, clock=clock),
                                   agent=SuggestionAgent(settings=GeminiSettings(api_key=None)))
        await session.start()
        assert session.state == build_seed_state(NOW)
        assert AuditEventType.STATE_CORRUPT in event_types(session)


class TestNavigation:

    async def test_select_company_marks_viewed(self, session, clock):
        clock.advance(1000)
        context = session.select_company("3")
        assert context.selected_company_id == "3"
        assert context.active_view == ActiveView.COMPANY
        assert session.state.company("3").last_viewed == NOW + 1000
        assert session.selected_company.name == "Vortex Agency"

    async def test_select_missing_company_ignored(self, session):
        before = session.state
        session.select_company("ghost")
        assert session.state is before
        assert session.context.selected_company_id is None
        assert event_types(session)[0] == AuditEventType.MUTATION_IGNORED

    async def test_tab_and_dashboard(self, session, memory_store):
        session.select_company("1")
        session.set_tab(ActiveTab.INSIGHTS)
        session.show_dashboard()
        await session.flush()
        assert session.context.active_view == ActiveView.DASHBOARD
        assert session.context.active_tab == ActiveTab.INSIGHTS
        stored = json.loads(memory_store.get(DEFAULT_SESSION_KEY))
        assert stored["activeView"] == "dashboard"


class TestIntents:

    async def test_add_requires_selected_company(self, session):
        assert session.add(EntityKind.LOAN, {"name": "Bridge"}) is None
        assert event_types(session)[0] == AuditEventType.MUTATION_IGNORED

    async def test_add_update_delete(self, session, memory_store):
        session.select_company("1")
        account = session.add("account", {"platform": "Linear", "subscriptionCost": 8})
        assert account.company_id == "1"
        assert session.state.subscriptions[-1].name == "Linear"

        assert session.update("account", account.id, {"platform": "Linear Plus"}) is True
        assert session.state.subscriptions[-1].name == "Linear Plus"

        assert session.delete("account", account.id) is True
        assert all(s.name != "Linear Plus" for s in session.state.subscriptions)

        status = await session.flush()
        assert status.save_error is False
        stored = json.loads(memory_store.get(DEFAULT_STATE_KEY))
        assert len(stored["accounts"]) == len(build_seed_state(NOW).accounts)

        types = event_types(session)
        assert AuditEventType.ENTITY_ADDED in types
        assert AuditEventType.ENTITY_UPDATED in types
        assert AuditEventType.ENTITY_DELETED in types

    async def test_missing_ids_are_noops(self, session):
        before = session.state
        assert session.update("loan", "ghost", {"name": "x"}) is False
        assert session.delete("loan", "ghost") is False
        assert session.state is before

    async def test_add_company_does_not_select_it(self, session):
        company = session.add_company({"name": "Acme", "structure": "Non-Profit"})
        assert company.name == "Acme"
        assert session.context.selected_company_id is None
        assert session.overview()[-1].company.id == company.id

    async def test_delete_selected_company(self, session):
        session.select_company("1")
        assert session.delete_selected_company() is True
        assert session.state.company("1") is None
        assert session.context.active_view == ActiveView.DASHBOARD
        assert session.context.selected_company_id is None
        assert event_types(session)[0] == AuditEventType.COMPANY_DELETED
        assert session.delete_selected_company() is False

    async def test_failed_save_keeps_memory(self, clock):
        session = PortfolioSession(
            PersistentStoreAdapter(InMemoryKeyValueStore(quota_bytes=1024), clock=clock),
            agent=SuggestionAgent(settings=GeminiSettings(api_key=None)),
            clock=clock,
        )
        await session.start()  # the seed does not fit
        session.add_company({"name": "Kept"})
        status = await session.flush()
        assert status.save_error is True
        assert session.state.companies[-1].name == "Kept"
        assert AuditEventType.SAVE_FAILED in event_types(session)

    async def test_reset(self, session, memory_store):
        session.select_company("1")
        session.delete_selected_company()
        await session.flush()

        state = await session.reset()
        assert state == build_seed_state(NOW)
        assert session.context.selected_company_id is None
        assert memory_store.get(DEFAULT_STATE_KEY) is None
        assert event_types(session)[0] == AuditEventType.STATE_RESET


class TestDerivedViews:

    async def test_burn(self, session):
        assert session.monthly_burn() == pytest.approx(208.99)
        assert session.monthly_burn("2") == pytest.approx(120.0)

    async def test_search(self, session):
        assert session.search("slack").accounts[0].company_name == "Cifr"

    async def test_company_view(self, session):
        assert session.company_view() is None
        session.select_company("1")
        view = session.company_view()
        assert view.company.id == "1"
        assert [a.id for a in view.accounts] == ["a1", "a2"]
        assert [i.id for i in view.institutions] == ["i1"]
        assert view.summary.financial_item_count == 5
        assert session.company_view("ghost") is None


class TestSuggestions:

    async def test_insights_for_selected_company(self, session, model):
        session.select_company("2")
        assert await session.generate_insights() == "Consolidate video tools."
        assert "Klaviyo" in model.prompts[-1]
        assert "Zoom" not in model.prompts[-1]

    async def test_other_suggestions(self, session):
        assert await session.quote() == "Consolidate video tools."
        assert await session.ask("Spend?") == "Consolidate video tools."
        assert await session.suggest_email_purpose("Zoom") == "Consolidate video tools."
        assert await session.draft_account_from_text("zoom") is None


class TestFactory:

    async def test_create_session_uses_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FOUNDERSTACK_STORAGE_DIRECTORY", str(tmp_path))
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        from founderstack.config import Settings

        session = create_session(Settings())
        await session.start()
        await session.flush()
        assert (tmp_path / f"{DEFAULT_STATE_KEY}.json").exists()
        assert len(session.state.companies) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
