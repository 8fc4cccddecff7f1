"""Tests for the abandoned checkout sweep."""
from datetime import datetime, timedelta

from app.config import settings
from app.models.subscription import SubscriptionStatus
from app.services import scheduler as scheduler_module
from app.services.scheduler import expire_abandoned_subscriptions, start_scheduler, stop_scheduler
from app.services.subscription_ledger import agent_subscriptions, team_subscriptions


async def _pending(test_db, gateway, ledger, user, item, age: timedelta):
    intent = await gateway.create_payment_intent(item.price, "usd", {})
    sub = await ledger.create(
        test_db, user.uuid, item.uuid, SubscriptionStatus.PENDING, stripe_payment_intent_id=intent.id
    )
    sub.created_at = datetime.utcnow() - age
    await test_db.commit()
    return sub


async def test_expires_only_stale_pending_rows(session_factory, test_db, gateway, test_user, test_agent, test_team):
    ttl = timedelta(minutes=settings.PENDING_SUBSCRIPTION_TTL_MINUTES)
    stale_agent = await _pending(test_db, gateway, agent_subscriptions, test_user, test_agent, ttl * 2)
    stale_team = await _pending(test_db, gateway, team_subscriptions, test_user, test_team, ttl * 2)
    fresh = await _pending(test_db, gateway, agent_subscriptions, test_user, test_agent, timedelta(minutes=1))
    active = await agent_subscriptions.create(test_db, test_user.uuid, test_agent.uuid, SubscriptionStatus.ACTIVE)
    active.created_at = datetime.utcnow() - ttl * 2
    await test_db.commit()

    expired = await expire_abandoned_subscriptions(session_factory=session_factory, gateway=gateway)

    assert expired == 2
    async with session_factory() as session:
        assert (await agent_subscriptions.get_by_id(session, stale_agent.uuid)).status == "expired"
        assert (await agent_subscriptions.get_by_id(session, stale_agent.uuid)).end_date is not None
        assert (await team_subscriptions.get_by_id(session, stale_team.uuid)).status == "expired"
        assert (await agent_subscriptions.get_by_id(session, fresh.uuid)).status == "pending"
        assert (await agent_subscriptions.get_by_id(session, active.uuid)).status == "active"
    assert gateway.intents[stale_agent.stripe_payment_intent_id].status == "canceled"
    assert gateway.intents[fresh.stripe_payment_intent_id].status == "requires_payment_method"


async def test_intent_cancel_failure_does_not_block_expiry(session_factory, test_db, gateway, test_user, test_agent):
    stale = await _pending(test_db, gateway, agent_subscriptions, test_user, test_agent, timedelta(days=3))
    gateway.fail_on.add("cancel_payment_intent")

    expired = await expire_abandoned_subscriptions(session_factory=session_factory, gateway=gateway)

    assert expired == 1
    async with session_factory() as session:
        assert (await agent_subscriptions.get_by_id(session, stale.uuid)).status == "expired"


async def test_expired_row_cannot_be_completed(client, session_factory, test_db, gateway, test_user, test_agent, user_headers):
    stale = await _pending(test_db, gateway, agent_subscriptions, test_user, test_agent, timedelta(days=3))
    await expire_abandoned_subscriptions(session_factory=session_factory, gateway=gateway)
    gateway.set_status(stale.stripe_payment_intent_id, "succeeded")

    response = await client.post(
        f"/api/subscriptions/{stale.uuid}/complete",
        json={"payment_intent_id": stale.stripe_payment_intent_id},
        headers=user_headers
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Subscription is expired"}


async def test_nothing_to_expire(session_factory, gateway):
    assert await expire_abandoned_subscriptions(session_factory=session_factory, gateway=gateway) == 0


async def test_scheduler_disabled(monkeypatch):
    monkeypatch.setattr(settings, "SCHEDULER_ENABLED", False)

    start_scheduler()

    assert not scheduler_module.scheduler.running


async def test_scheduler_registers_expiry_job(monkeypatch):
    monkeypatch.setattr(settings, "SCHEDULER_ENABLED", True)

    start_scheduler()
    try:
        job = scheduler_module.scheduler.get_job("expire_abandoned_subscriptions")
        assert job is not None
        assert job.trigger.interval == timedelta(minutes=settings.PENDING_SWEEP_INTERVAL_MINUTES)
    finally:
        stop_scheduler()
