"""Subscription ledger: the authoritative store of subscription rows.

The ledger knows nothing about payment semantics beyond storing Stripe
correlation ids. Operations flush but never commit; the caller owns the
transaction boundary. Lookups that find nothing return ``None`` and leave it
to the caller to decide what absence means.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.subscription import (
    Subscription,
    TeamSubscription,
    SubscriptionStatus,
    TERMINAL_STATUSES,
)

logger = logging.getLogger(__name__)


class SubscriptionLedger:
    """Status transitions and queries for one subscription table.

    ``item_field`` names the catalog foreign key column (``agent_id`` or
    ``team_id``); the same operations serve both agent and team ledgers.
    """

    def __init__(self, model, item_field: str, kind: str):
        self.model = model
        self.item_field = item_field
        self.kind = kind

    @property
    def _item_column(self):
        return getattr(self.model, self.item_field)

    async def _find_with_status(self, db: AsyncSession, user_id: str, item_id: str, status: str):
        result = await db.execute(
            select(self.model)
            .where(
                self.model.user_id == user_id,
                self._item_column == item_id,
                self.model.status == status,
            )
            .order_by(self.model.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_active(self, db: AsyncSession, user_id: str, item_id: str):
        """Return the active subscription for (user, item), if any."""
        return await self._find_with_status(db, user_id, item_id, SubscriptionStatus.ACTIVE.value)

    async def find_pending(self, db: AsyncSession, user_id: str, item_id: str):
        """Return the most recent pending subscription for (user, item), if any."""
        return await self._find_with_status(db, user_id, item_id, SubscriptionStatus.PENDING.value)

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        item_id: str,
        status: SubscriptionStatus,
        stripe_payment_intent_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
    ):
        """
        Insert a new subscription row.

        No uniqueness check happens here. Callers serialise the
        check-then-create sequence themselves.
        """
        subscription = self.model(
            user_id=user_id,
            status=SubscriptionStatus(status).value,
            start_date=start_date or datetime.utcnow(),
            stripe_payment_intent_id=stripe_payment_intent_id,
            **{self.item_field: item_id},
        )
        db.add(subscription)
        await db.flush()
        logger.info(
            f"Created {self.kind} subscription {subscription.uuid} "
            f"(user={user_id}, {self.item_field}={item_id}, status={subscription.status})"
        )
        return subscription

    async def get_by_id(self, db: AsyncSession, subscription_id: str):
        result = await db.execute(select(self.model).where(self.model.uuid == subscription_id))
        return result.scalar_one_or_none()

    async def set_status(self, db: AsyncSession, subscription_id: str, status: SubscriptionStatus):
        """
        Move a subscription to ``status``.

        Entering a terminal status stamps ``end_date`` once; a row that is
        already terminal keeps its original end date.
        """
        subscription = await self.get_by_id(db, subscription_id)
        if subscription is None:
            return None

        new_status = SubscriptionStatus(status).value
        if new_status in TERMINAL_STATUSES and not subscription.is_terminal:
            subscription.end_date = datetime.utcnow()
        previous = subscription.status
        subscription.status = new_status
        await db.flush()

        logger.info(f"{self.kind.capitalize()} subscription {subscription.uuid}: {previous} -> {new_status}")
        return subscription

    async def attach_gateway_ids(
        self,
        db: AsyncSession,
        subscription_id: str,
        stripe_payment_intent_id: Optional[str] = None,
        stripe_subscription_id: Optional[str] = None,
        stripe_price_id: Optional[str] = None,
    ):
        """Merge Stripe ids into the row. A missing value never clears a stored one."""
        subscription = await self.get_by_id(db, subscription_id)
        if subscription is None:
            return None

        if stripe_payment_intent_id:
            subscription.stripe_payment_intent_id = stripe_payment_intent_id
        if stripe_subscription_id:
            subscription.stripe_subscription_id = stripe_subscription_id
        if stripe_price_id:
            subscription.stripe_price_id = stripe_price_id

        await db.flush()
        return subscription

    async def list_by_user(self, db: AsyncSession, user_id: str) -> Sequence:
        result = await db.execute(
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
        )
        return result.scalars().all()

    async def cancel(self, db: AsyncSession, subscription_id: str):
        """
        Cancel locally. Reaching out to Stripe is the orchestrator's job.

        Returns ``None`` for an unknown id. An already canceled or expired row
        is returned untouched.
        """
        subscription = await self.get_by_id(db, subscription_id)
        if subscription is None or subscription.is_terminal:
            return subscription
        return await self.set_status(db, subscription_id, SubscriptionStatus.CANCELED)

    async def list_stale_pending(self, db: AsyncSession, older_than: datetime) -> Sequence:
        """Pending rows created before ``older_than`` (abandoned checkouts)."""
        result = await db.execute(
            select(self.model).where(
                self.model.status == SubscriptionStatus.PENDING.value,
                self.model.created_at < older_than,
            )
        )
        return result.scalars().all()


agent_subscriptions = SubscriptionLedger(Subscription, "agent_id", kind="agent")
team_subscriptions = SubscriptionLedger(TeamSubscription, "team_id", kind="team")
