"""Tests for the account/subscription shadow link."""

import pytest

from founderstack.models.portfolio import (
    BillingCycle,
    EntityKind,
    SubscriptionStatus,
)
from founderstack.store import (
    SessionContext,
    add_entity,
    delete_entity,
    shadow_subscriptions,
    update_entity,
)
from founderstack.store.shadow import iso_date

from tests.conftest import NOW


@pytest.fixture
def with_account(seed_state, cifr_context):
    """Seed state plus a Notion account under company 1."""
    state = add_entity(
        seed_state, EntityKind.ACCOUNT,
        {
            "platform": "Notion",
            "email": "ops@cifr.io",
            "subscriptionCost": 96,
            "subscriptionInterval": "Yearly",
            "paymentMethod": "Visa ••4242",
            "nextBillingDate": "2025-01-01",
        },
        cifr_context, now=NOW,
    )
    return state, state.accounts[-1]


class TestCompanionSubscription:
    """Tests for the subscription written with a new account."""

    def test_created_with_account(self, with_account, seed_state):
        state, account = with_account
        assert len(state.subscriptions) == len(seed_state.subscriptions) + 1
        sub = state.subscriptions[-1]
        assert sub.name == "Notion"
        assert sub.company_id == "1"
        assert sub.cost == 96
        assert sub.currency == "USD"
        assert sub.billing_cycle == BillingCycle.YEARLY
        assert sub.payment_method == "Visa ••4242"
        assert sub.next_renewal == "2025-01-01"
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.sub_services == ()
        assert shadow_subscriptions(state, account) == (sub,)

    def test_inactive_account_gives_cancelled_subscription(self, seed_state, cifr_context):
        state = add_entity(
            seed_state, EntityKind.ACCOUNT, {"platform": "Figma", "status": "Inactive"},
            cifr_context, now=NOW,
        )
        assert state.subscriptions[-1].status == SubscriptionStatus.CANCELLED

    def test_monthly_by_default_and_renews_today(self, seed_state, cifr_context):
        state = add_entity(seed_state, EntityKind.ACCOUNT, {"platform": "Figma"}, cifr_context, now=NOW)
        sub = state.subscriptions[-1]
        assert sub.billing_cycle == BillingCycle.MONTHLY
        assert sub.next_renewal == iso_date(NOW) == "2024-11-14"
        assert sub.cost == 0

    def test_ids_distinct(self, with_account):
        state, _ = with_account
        ids = [s.id for s in state.subscriptions]
        assert len(ids) == len(set(ids))


class TestAccountUpdateSync:
    """Tests for mirroring account changes onto the shadow subscription."""

    def test_rename_matches_before_rename(self, with_account):
        state, account = with_account
        new = update_entity(state, EntityKind.ACCOUNT, account.id, {"platform": "Notion AI"}, now=NOW)
        names = [s.name for s in new.subscriptions if s.company_id == "1"]
        assert "Notion AI" in names
        assert "Notion" not in names

    def test_cost_and_interval_sync(self, with_account):
        state, account = with_account
        new = update_entity(
            state, EntityKind.ACCOUNT, account.id,
            {"subscription_cost": 10, "subscription_interval": "Monthly"}, now=NOW,
        )
        sub = new.subscriptions[-1]
        assert sub.cost == 10
        assert sub.billing_cycle == BillingCycle.MONTHLY

    def test_interval_kept_when_not_in_update(self, with_account):
        state, account = with_account
        new = update_entity(state, EntityKind.ACCOUNT, account.id, {"email": "new@cifr.io"}, now=NOW)
        assert new.subscriptions[-1].billing_cycle == BillingCycle.YEARLY
        assert new.subscriptions[-1] == state.subscriptions[-1]

    def test_empty_platform_does_not_rename(self, with_account):
        state, account = with_account
        new = update_entity(state, EntityKind.ACCOUNT, account.id, {"platform": ""}, now=NOW)
        assert new.subscriptions[-1].name == "Notion"

    def test_account_without_shadow_leaves_subscriptions(self, seed_state):
        # Slack (a2) has no same-named subscription
        new = update_entity(seed_state, EntityKind.ACCOUNT, "a2", {"subscriptionCost": 20}, now=NOW)
        assert new.subscriptions == seed_state.subscriptions

    def test_other_company_same_name_untouched(self, with_account):
        state, account = with_account
        other = add_entity(
            state, EntityKind.SUBSCRIPTION, {"name": "Notion", "cost": 1},
            SessionContext().open_company("2"),
            now=NOW,
        )
        new = update_entity(other, EntityKind.ACCOUNT, account.id, {"subscription_cost": 50}, now=NOW)
        company2 = [s for s in new.subscriptions if s.company_id == "2" and s.name == "Notion"]
        assert company2[0].cost == 1

    def test_duplicate_platform_updates_every_match(self, with_account, cifr_context):
        state, account = with_account
        state = add_entity(state, EntityKind.ACCOUNT, {"platform": "Notion"}, cifr_context, now=NOW)
        new = update_entity(state, EntityKind.ACCOUNT, account.id, {"subscription_cost": 7}, now=NOW)
        notion = [s for s in new.subscriptions if s.name == "Notion"]
        assert len(notion) == 2
        assert all(s.cost == 7 for s in notion)


class TestAccountDeleteCascade:
    """Tests for removing the shadow subscription with its account."""

    def test_delete_removes_shadow(self, with_account, seed_state):
        state, account = with_account
        new = delete_entity(state, EntityKind.ACCOUNT, account.id, now=NOW)
        assert new.subscriptions == seed_state.subscriptions
        assert shadow_subscriptions(new, account) == ()

    def test_delete_subscription_keeps_account(self, with_account):
        state, account = with_account
        sub = state.subscriptions[-1]
        new = delete_entity(state, EntityKind.SUBSCRIPTION, sub.id, now=NOW)
        assert account in new.accounts


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
