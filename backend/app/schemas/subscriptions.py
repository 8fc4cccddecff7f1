"""Pydantic schemas for subscription checkout endpoints."""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class CheckoutResponse(BaseModel):
    """Response of create-payment-intent: everything the client needs to pay with Stripe."""

    client_secret: str = Field(..., description="Stripe PaymentIntent client secret")
    subscription_id: str = Field(..., description="UUID of the pending subscription")
    publishable_key: str = Field(..., description="Stripe publishable key")
    amount: int = Field(..., description="Amount in minor currency units")
    currency: str = Field(..., description="Currency code")


class SubscriptionCompleteRequest(BaseModel):
    """Request to activate a subscription after client-side payment confirmation."""

    payment_intent_id: str = Field(..., min_length=1, description="Stripe PaymentIntent ID")


class SubscriptionBase(BaseModel):
    uuid: str
    status: str
    user_id: str
    start_date: datetime
    end_date: Optional[datetime] = None
    stripe_payment_intent_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionResponse(SubscriptionBase):
    """Schema for agent subscription detail response."""
    agent_id: str


class TeamSubscriptionResponse(SubscriptionBase):
    """Schema for agent-team subscription detail response."""
    team_id: str
