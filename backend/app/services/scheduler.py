"""Scheduler service for periodic jobs using APScheduler."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings
from app.database import AsyncSessionLocal
from app.models.subscription import SubscriptionStatus
from app.services.exceptions import PaymentGatewayError
from app.services.payment_gateway import StripePaymentGateway, get_payment_gateway
from app.services.subscription_ledger import agent_subscriptions, team_subscriptions
from app.services.subscription_orchestrator import checkout_lock

logger = logging.getLogger(__name__)

# Initialize scheduler
scheduler = AsyncIOScheduler()


async def expire_abandoned_subscriptions(
    session_factory=None,
    gateway: Optional[StripePaymentGateway] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Expire pending subscriptions whose checkout was never completed.

    Rows older than ``PENDING_SUBSCRIPTION_TTL_MINUTES`` become ``expired``
    and their open PaymentIntent is canceled at Stripe (best-effort).
    Returns the number of rows expired.
    """
    session_factory = session_factory or AsyncSessionLocal
    gateway = gateway or get_payment_gateway()
    cutoff = (now or datetime.utcnow()) - timedelta(minutes=settings.PENDING_SUBSCRIPTION_TTL_MINUTES)

    expired = 0
    async with session_factory() as session:
        for ledger in (agent_subscriptions, team_subscriptions):
            stale = await ledger.list_stale_pending(session, cutoff)
            for subscription in stale:
                item_id = getattr(subscription, ledger.item_field)
                async with checkout_lock(ledger, subscription.user_id, item_id):
                    await session.refresh(subscription)
                    if subscription.status != SubscriptionStatus.PENDING.value:
                        continue
                    await ledger.set_status(session, subscription.uuid, SubscriptionStatus.EXPIRED)
                    await session.commit()
                expired += 1

                if not subscription.stripe_payment_intent_id:
                    continue
                try:
                    await gateway.cancel_payment_intent(subscription.stripe_payment_intent_id)
                except PaymentGatewayError as e:
                    logger.warning(
                        f"Could not cancel payment intent {subscription.stripe_payment_intent_id} "
                        f"of expired subscription {subscription.uuid}: {e}"
                    )

    logger.info(f"Expired {expired} abandoned pending subscriptions")
    return expired


async def _run_expiry_job():
    try:
        await expire_abandoned_subscriptions()
    except Exception as e:
        logger.error(f"Error in expire_abandoned_subscriptions: {e}")


def start_scheduler():
    """Start the APScheduler with the subscription maintenance jobs."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by configuration")
        return

    scheduler.add_job(
        _run_expiry_job,
        trigger=IntervalTrigger(minutes=settings.PENDING_SWEEP_INTERVAL_MINUTES),
        id="expire_abandoned_subscriptions",
        name="Expire abandoned pending subscriptions",
        replace_existing=True
    )

    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler():
    """Stop the APScheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
