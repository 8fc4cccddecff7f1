"""Subscription checkout workflow: start, complete and cancel.

State machine per subscription row::

    (none) --start--> pending --complete--> active --cancel--> canceled
                         |                                       ^
                         +-------------- cancel -----------------+
                         +-- expiry sweep --> expired

Stripe is consulted only where money changes hands (start, complete) and,
best-effort, on cancel to stop future charges. Local ledger state is the
source of truth for access.
"""
import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.subscription import SubscriptionStatus
from app.models.user import User
from app.services.exceptions import (
    AlreadySubscribedError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
    PaymentGatewayError,
    PaymentNotCompleteError,
)
from app.services.payment_gateway import PAYMENT_CANCELED, StripePaymentGateway
from app.services.subscription_ledger import SubscriptionLedger

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One ``asyncio.Lock`` per key, dropped once nobody holds a reference."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[tuple, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, key: tuple) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


# Serialises check-then-act sequences per (kind, user, item) within the process
checkout_locks = KeyedLocks()


def checkout_lock(ledger: SubscriptionLedger, user_id: str, item_id: str) -> asyncio.Lock:
    return checkout_locks.get((ledger.kind, user_id, item_id))


@dataclass
class CheckoutSession:
    """What the client needs to confirm payment directly with Stripe."""

    subscription: object
    client_secret: str
    amount: int
    currency: str
    resumed: bool = False


class SubscriptionOrchestrator:
    """Drives one subscription ledger through its checkout state machine."""

    def __init__(
        self,
        db: AsyncSession,
        gateway: StripePaymentGateway,
        ledger: SubscriptionLedger,
        load_item: Callable[[AsyncSession, str], Awaitable[Optional[object]]],
        item_label: str,
    ):
        self.db = db
        self.gateway = gateway
        self.ledger = ledger
        self.load_item = load_item
        self.item_label = item_label

    def _lock_for(self, user_id: str, item_id: str) -> asyncio.Lock:
        return checkout_lock(self.ledger, user_id, item_id)

    async def _get_owned(self, user: User, subscription_id: str):
        subscription = await self.ledger.get_by_id(self.db, subscription_id)
        if subscription is None:
            raise NotFoundError("Subscription not found")
        if subscription.user_id != user.uuid and not user.is_admin:
            raise ForbiddenError("Not authorized to modify this subscription")
        return subscription

    async def start(self, user: User, item_id: str) -> CheckoutSession:
        """
        Begin checkout for ``item_id``.

        The Stripe intent is created before the pending row is written, so a
        gateway failure never leaves an orphan row behind. A pending attempt
        that is still payable is resumed instead of opening a second one.
        """
        item = await self.load_item(self.db, item_id)
        if item is None:
            raise NotFoundError(f"{self.item_label} not found")

        async with self._lock_for(user.uuid, item_id):
            if await self.ledger.find_active(self.db, user.uuid, item_id):
                raise AlreadySubscribedError(f"Already subscribed to this {self.item_label.lower()}")

            pending = await self.ledger.find_pending(self.db, user.uuid, item_id)
            if pending is not None:
                resumed = await self._resume(pending, item)
                if resumed is not None:
                    return resumed

            if pending is None or pending.status != SubscriptionStatus.ACTIVE.value:
                return await self._open_checkout(user, item, item_id)

        # The earlier attempt was paid but never completed; _resume activated it
        await self.ensure_gateway_customer(user)
        raise AlreadySubscribedError(f"Already subscribed to this {self.item_label.lower()}")

    async def _open_checkout(self, user: User, item, item_id: str) -> CheckoutSession:
        intent = await self.gateway.create_payment_intent(
            amount=item.price,
            currency=settings.PAYMENT_CURRENCY,
            metadata={
                "user_id": user.uuid,
                self.ledger.item_field: item_id,
                "product_name": item.name,
                "subscription_kind": self.ledger.kind,
            },
            customer=user.stripe_customer_id,
        )

        subscription = await self.ledger.create(
            self.db,
            user.uuid,
            item_id,
            SubscriptionStatus.PENDING,
            stripe_payment_intent_id=intent.id,
        )
        await self.db.commit()

        return CheckoutSession(
            subscription=subscription,
            client_secret=intent.client_secret,
            amount=item.price,
            currency=settings.PAYMENT_CURRENCY,
        )

    async def _activate(self, subscription, payment_intent_id: str):
        """Flip a pending row to active. Caller holds the checkout lock."""
        item_id = getattr(subscription, self.ledger.item_field)
        active = await self.ledger.find_active(self.db, subscription.user_id, item_id)
        if active is not None and active.uuid != subscription.uuid:
            logger.warning(
                f"Payment {payment_intent_id} succeeded but user {subscription.user_id} already has "
                f"active {self.ledger.kind} subscription {active.uuid}; needs manual refund"
            )
            raise AlreadySubscribedError(f"Already subscribed to this {self.item_label.lower()}")

        await self.ledger.attach_gateway_ids(
            self.db, subscription.uuid, stripe_payment_intent_id=payment_intent_id
        )
        subscription = await self.ledger.set_status(self.db, subscription.uuid, SubscriptionStatus.ACTIVE)
        await self.db.commit()
        return subscription

    async def _resume(self, pending, item) -> Optional[CheckoutSession]:
        """
        Hand back the open intent of ``pending``.

        Returns ``None`` when there is nothing to resume: the row is either
        retired because Stripe dropped its intent, or activated because the
        intent was already paid.
        """
        if not pending.stripe_payment_intent_id:
            await self.ledger.set_status(self.db, pending.uuid, SubscriptionStatus.EXPIRED)
            return None

        intent = await self.gateway.retrieve_payment_intent(pending.stripe_payment_intent_id)
        if intent.succeeded:
            logger.info(
                f"Pending {self.ledger.kind} subscription {pending.uuid} was paid "
                f"(intent {intent.id}) without completing; activating"
            )
            await self._activate(pending, intent.id)
            return None
        if intent.status == PAYMENT_CANCELED or intent.amount not in (None, item.price):
            logger.info(
                f"Retiring pending {self.ledger.kind} subscription {pending.uuid} "
                f"(intent {intent.id} status={intent.status}, amount={intent.amount})"
            )
            await self.ledger.set_status(self.db, pending.uuid, SubscriptionStatus.EXPIRED)
            return None

        logger.info(f"Resuming pending {self.ledger.kind} subscription {pending.uuid}")
        return CheckoutSession(
            subscription=pending,
            client_secret=intent.client_secret,
            amount=item.price,
            currency=settings.PAYMENT_CURRENCY,
            resumed=True,
        )

    async def complete(self, user: User, subscription_id: str, payment_intent_id: str):
        """
        Activate a pending subscription once Stripe confirms the payment.

        The client's claim is never trusted: the intent is re-fetched and must
        report ``succeeded``.
        """
        subscription = await self._get_owned(user, subscription_id)

        if subscription.status == SubscriptionStatus.ACTIVE.value:
            if subscription.stripe_payment_intent_id == payment_intent_id:
                return subscription
            raise InvalidTransitionError("Subscription is already active")
        if subscription.status != SubscriptionStatus.PENDING.value:
            raise InvalidTransitionError(f"Subscription is {subscription.status}")
        if subscription.stripe_payment_intent_id and subscription.stripe_payment_intent_id != payment_intent_id:
            raise InvalidRequestError("Payment intent does not belong to this subscription")

        intent = await self.gateway.retrieve_payment_intent(payment_intent_id)
        if not intent.succeeded:
            logger.info(
                f"Payment intent {payment_intent_id} for subscription {subscription.uuid} "
                f"not succeeded (status={intent.status})"
            )
            raise PaymentNotCompleteError(intent.status)

        item_id = getattr(subscription, self.ledger.item_field)
        async with self._lock_for(subscription.user_id, item_id):
            # The expiry sweep may have retired the row while Stripe was consulted
            await self.db.refresh(subscription)
            if (
                subscription.status == SubscriptionStatus.ACTIVE.value
                and subscription.stripe_payment_intent_id == payment_intent_id
            ):
                # A concurrent complete for the same payment won the lock
                return subscription
            if subscription.status != SubscriptionStatus.PENDING.value:
                logger.warning(
                    f"Payment {payment_intent_id} succeeded but {self.ledger.kind} subscription "
                    f"{subscription.uuid} is {subscription.status}; needs manual refund"
                )
                raise InvalidTransitionError(f"Subscription is {subscription.status}")

            subscription = await self._activate(subscription, payment_intent_id)

        if subscription.user_id == user.uuid:
            await self.ensure_gateway_customer(user)
        await self.db.refresh(subscription)
        return subscription

    async def ensure_gateway_customer(self, user: User) -> Optional[str]:
        """
        Link the user to a Stripe customer if they have none yet.

        Failures are logged and swallowed: the subscription is already paid
        and active, and the next completion will try again.
        """
        if user.stripe_customer_id:
            return user.stripe_customer_id

        try:
            customer_id = await self.gateway.create_customer(
                email=user.email, name=user.name, user_id=user.uuid
            )
        except PaymentGatewayError as e:
            logger.warning(f"Could not provision Stripe customer for user {user.uuid}: {e}")
            return None

        user.stripe_customer_id = customer_id
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Could not store Stripe customer {customer_id} for user {user.uuid}: {e}")
            return None

        logger.info(f"Linked user {user.uuid} to Stripe customer {customer_id}")
        return customer_id

    async def cancel(self, user: User, subscription_id: str):
        """
        Cancel locally first, then ask Stripe to stop billing.

        The Stripe side is cleanup only: its failure is logged and the local
        cancellation stands.
        """
        subscription = await self._get_owned(user, subscription_id)
        item_id = getattr(subscription, self.ledger.item_field)

        async with self._lock_for(subscription.user_id, item_id):
            await self.db.refresh(subscription)
            if subscription.is_terminal:
                raise InvalidTransitionError(f"Subscription already {subscription.status}")

            was_pending = subscription.status == SubscriptionStatus.PENDING.value
            subscription = await self.ledger.cancel(self.db, subscription.uuid)
            await self.db.commit()

        try:
            if subscription.stripe_subscription_id:
                await self.gateway.cancel_subscription(subscription.stripe_subscription_id)
            elif was_pending and subscription.stripe_payment_intent_id:
                await self.gateway.cancel_payment_intent(subscription.stripe_payment_intent_id)
        except PaymentGatewayError as e:
            logger.warning(f"Stripe cleanup failed for canceled subscription {subscription.uuid}: {e}")

        return subscription
