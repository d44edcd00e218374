"""
Account <-> Subscription shadow link.

An account and a subscription are linked when they belong to the same company
and the subscription's name equals the account's platform, compared exactly
(case-sensitive). There is no stored foreign key: creating an account writes a
companion subscription, and later account changes are mirrored onto every
subscription that matches the account as it was before the change.

KNOWN AMBIGUITY: two accounts of one company with the same platform share
their shadow subscriptions, so editing either one rewrites both.
"""

from datetime import datetime, timezone

from founderstack.models.portfolio import (
    Account,
    AccountStatus,
    AppState,
    BillingCycle,
    Subscription,
    SubscriptionStatus,
    new_id,
)
from founderstack.store.draft import Draft


def iso_date(now: int) -> str:
    """UTC calendar date of an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(now / 1000, tz=timezone.utc).date().isoformat()


def is_shadow_of(subscription: Subscription, account: Account) -> bool:
    return (
        subscription.company_id == account.company_id
        and subscription.name == account.platform
    )


def shadow_subscriptions(snapshot: AppState, account: Account) -> tuple[Subscription, ...]:
    """Every subscription currently linked to `account`."""
    return tuple(s for s in snapshot.subscriptions if is_shadow_of(s, account))


def companion_subscription(account: Account, taken_ids, now: int) -> Subscription:
    """The subscription written alongside a newly created account."""
    cycle = (
        BillingCycle.YEARLY
        if account.subscription_interval == BillingCycle.YEARLY
        else BillingCycle.MONTHLY
    )
    status = (
        SubscriptionStatus.CANCELLED
        if account.status == AccountStatus.INACTIVE
        else SubscriptionStatus.ACTIVE
    )
    return Subscription(
        id=new_id(taken_ids),
        company_id=account.company_id,
        name=account.platform,
        cost=account.subscription_cost or 0.0,
        currency="USD",
        billing_cycle=cycle,
        payment_method=account.payment_method,
        next_renewal=account.next_billing_date or iso_date(now),
        renew=account.renew,
        status=status,
        sub_services=(),
    )


def on_account_added(draft: Draft, account: Account, now: int) -> None:
    subscriptions = draft.get("subscriptions")
    companion = companion_subscription(account, (s.id for s in subscriptions), now)
    draft.append("subscriptions", companion)


def on_account_updated(
    draft: Draft,
    before: Account,
    after: Account,
    changes: dict,
    now: int,
) -> None:
    updates = {}
    if "platform" in changes and after.platform:
        updates["name"] = after.platform
    if changes.get("subscription_cost") is not None:
        updates["cost"] = after.subscription_cost
    if changes.get("subscription_interval") is not None:
        updates["billing_cycle"] = (
            BillingCycle.YEARLY
            if after.subscription_interval == BillingCycle.YEARLY
            else BillingCycle.MONTHLY
        )

    if not updates:
        return

    draft.set("subscriptions", (
        s.model_copy(update=updates) if is_shadow_of(s, before) else s
        for s in draft.get("subscriptions")
    ))


def on_account_deleted(draft: Draft, account: Account, now: int) -> None:
    draft.set("subscriptions", (
        s for s in draft.get("subscriptions") if not is_shadow_of(s, account)
    ))
