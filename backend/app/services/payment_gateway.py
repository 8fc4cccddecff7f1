"""Stripe adapter used by the subscription workflow.

The rest of the application never talks to the ``stripe`` SDK directly: it goes
through :class:`StripePaymentGateway`, which runs the blocking SDK calls in a
worker thread, normalises results into plain dataclasses and converts SDK
errors into :class:`PaymentGatewayError`.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import stripe

from app.config import settings
from app.services.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

# Configure Stripe
stripe.api_key = settings.STRIPE_SECRET_KEY

PAYMENT_SUCCEEDED = "succeeded"
PAYMENT_CANCELED = "canceled"


@dataclass
class PaymentIntent:
    """Gateway-agnostic view of a Stripe PaymentIntent."""

    id: str
    status: str
    client_secret: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCEEDED


def _as_dict(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return dict(value)


def _to_intent(obj: Any) -> PaymentIntent:
    return PaymentIntent(
        id=obj.id,
        status=obj.status,
        client_secret=getattr(obj, "client_secret", None),
        amount=getattr(obj, "amount", None),
        currency=getattr(obj, "currency", None),
        metadata=_as_dict(getattr(obj, "metadata", None)),
    )


class StripePaymentGateway:
    """Async facade over the Stripe SDK calls the subscription flow needs."""

    async def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe {operation} failed: {e}")
            raise PaymentGatewayError(operation) from e

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict,
        customer: Optional[str] = None,
    ) -> PaymentIntent:
        """Create a card PaymentIntent for ``amount`` minor units."""
        params = {
            "amount": amount,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if customer:
            params["customer"] = customer
        intent = await self._call("create_payment_intent", stripe.PaymentIntent.create, **params)
        logger.info(f"Created payment intent {intent.id} for {amount} {currency}")
        return _to_intent(intent)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        intent = await self._call(
            "retrieve_payment_intent", stripe.PaymentIntent.retrieve, payment_intent_id
        )
        return _to_intent(intent)

    async def cancel_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        intent = await self._call(
            "cancel_payment_intent", stripe.PaymentIntent.cancel, payment_intent_id
        )
        return _to_intent(intent)

    async def create_customer(self, email: str, name: Optional[str], user_id: str) -> str:
        """
        Create a Stripe customer and return its id.

        The idempotency key is derived from the user id so that two concurrent
        provisioning attempts resolve to the same customer.
        """
        customer = await self._call(
            "create_customer",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata={"user_id": user_id},
            idempotency_key=f"customer-{user_id}",
        )
        return customer.id

    async def cancel_subscription(self, stripe_subscription_id: str) -> None:
        """Stop future charges for a recurring Stripe subscription."""
        await self._call(
            "cancel_subscription", stripe.Subscription.cancel, stripe_subscription_id
        )
        logger.info(f"Canceled Stripe subscription {stripe_subscription_id}")


_gateway = StripePaymentGateway()


def get_payment_gateway() -> StripePaymentGateway:
    """FastAPI dependency returning the process-wide gateway adapter."""
    return _gateway
