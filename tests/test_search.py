"""Tests for filtering and global search."""

import pytest

from founderstack.models.portfolio import Account, EntityKind
from founderstack.queries import (
    company_records,
    filter_accounts,
    filter_companies,
    filter_subscriptions,
    global_search,
)


@pytest.fixture
def two_accounts():
    return [
        Account(id="1", company_id="c", platform="AWS", email="a@x.com"),
        Account(id="2", company_id="c", platform="Slack", email="b@x.com"),
    ]


class TestFilters:
    """Tests for per-collection free-text filters."""

    def test_filter_accounts_by_platform(self, two_accounts):
        assert filter_accounts(two_accounts, "aws") == (two_accounts[0],)

    def test_empty_query_returns_all_in_order(self, two_accounts):
        assert filter_accounts(two_accounts, "") == tuple(two_accounts)

    def test_whitespace_query_returns_all(self, two_accounts, seed_state):
        assert filter_accounts(two_accounts, "   ") == tuple(two_accounts)
        assert filter_companies(seed_state.companies, " \t") == seed_state.companies
        assert filter_subscriptions(seed_state.subscriptions, " ") == seed_state.subscriptions

    def test_query_is_trimmed(self, two_accounts):
        assert filter_accounts(two_accounts, "  slack ") == (two_accounts[1],)

    def test_filter_accounts_by_email_and_notes(self, seed_state):
        assert [a.id for a in filter_accounts(seed_state.accounts, "ECOSTREAM")] == ["a3"]
        assert [a.id for a in filter_accounts(seed_state.accounts, "card 4242")] == ["a1"]

    def test_filter_accounts_by_two_factor(self, seed_state):
        assert [a.id for a in filter_accounts(seed_state.accounts, "sms")] == ["a2"]

    def test_filter_companies(self, seed_state):
        assert [c.id for c in filter_companies(seed_state.companies, "corp")] == ["1", "3"]
        assert [c.id for c in filter_companies(seed_state.companies, "water")] == ["2"]

    def test_filter_subscriptions_by_payment_method(self, seed_state):
        assert [s.id for s in filter_subscriptions(seed_state.subscriptions, "paypal")] == ["s3"]
        assert [s.id for s in filter_subscriptions(seed_state.subscriptions, "zoom")] == ["s2"]

    def test_no_match(self, seed_state):
        assert filter_subscriptions(seed_state.subscriptions, "nothing like this") == ()


class TestCompanyRecords:

    def test_records_of_one_company(self, seed_state):
        assert [d.id for d in company_records(seed_state, EntityKind.DOCUMENT, "1")] == ["d1", "d2"]
        assert company_records(seed_state, "loan", "3") == ()


class TestGlobalSearch:
    """Tests for the cross-collection search."""

    def test_annotates_with_company(self, seed_state):
        result = global_search(seed_state, "cifr")
        assert [c.id for c in result.companies] == ["1"]
        assert [hit.record.id for hit in result.accounts] == ["a1", "a2"]
        assert all(hit.company_name == "Cifr" for hit in result.accounts)
        assert all(hit.company_color == "#4f46e5" for hit in result.accounts)
        assert result.has_results is True

    def test_subscriptions_by_name_only(self, seed_state):
        result = global_search(seed_state, "klaviyo")
        assert [hit.record.id for hit in result.subscriptions] == ["s3"]
        assert result.subscriptions[0].company_name == "EcoStream"
        assert result.companies == ()

    def test_no_results(self, seed_state):
        result = global_search(seed_state, "zzzz")
        assert result.has_results is False

    def test_blank_query_is_empty(self, seed_state):
        result = global_search(seed_state, "   ")
        assert result.has_results is False

    def test_orphan_record_has_no_company(self, seed_state):
        orphan = seed_state.model_copy(update={
            "accounts": seed_state.accounts + (
                Account(id="x", company_id="gone", platform="Orphan"),
            ),
        })
        hit = global_search(orphan, "orphan").accounts[0]
        assert hit.company_name is None
        assert hit.company_color is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
