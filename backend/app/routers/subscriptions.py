"""Subscription checkout endpoints for agents and agent teams.

Flow: create-payment-intent -> (client confirms with Stripe) -> complete.
All state changes go through :class:`SubscriptionOrchestrator`; errors it
raises are rendered by the ``SubscriptionError`` handler in ``main.py``.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.config import settings
from app.models.user import User
from app.schemas.agents import AgentResponse, AgentTeamResponse
from app.schemas.subscriptions import (
    CheckoutResponse, SubscriptionCompleteRequest,
    SubscriptionResponse, TeamSubscriptionResponse
)
from app.auth.dependencies import get_current_active_user
from app.services import catalog
from app.services.payment_gateway import StripePaymentGateway, get_payment_gateway
from app.services.subscription_ledger import agent_subscriptions, team_subscriptions
from app.services.subscription_orchestrator import SubscriptionOrchestrator, CheckoutSession

router = APIRouter()


def get_agent_orchestrator(
    db: AsyncSession = Depends(get_db),
    gateway: StripePaymentGateway = Depends(get_payment_gateway)
) -> SubscriptionOrchestrator:
    return SubscriptionOrchestrator(db, gateway, agent_subscriptions, catalog.get_agent_by_id, "Agent")


def get_team_orchestrator(
    db: AsyncSession = Depends(get_db),
    gateway: StripePaymentGateway = Depends(get_payment_gateway)
) -> SubscriptionOrchestrator:
    return SubscriptionOrchestrator(db, gateway, team_subscriptions, catalog.get_agent_team_by_id, "Agent team")


def _checkout_response(checkout: CheckoutSession) -> CheckoutResponse:
    return CheckoutResponse(
        client_secret=checkout.client_secret,
        subscription_id=checkout.subscription.uuid,
        publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
        amount=checkout.amount,
        currency=checkout.currency
    )


# ── Agents ─────────────────────────────────────────────────────────────────────

@router.post(
    "/api/agents/{agent_id}/create-payment-intent",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_agent_payment_intent(
    agent_id: str,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_agent_orchestrator)
):
    """
    Start a subscription to an agent.

    - 404 if the agent does not exist
    - 400 if the user already has an active subscription to it
    - Creates the Stripe PaymentIntent, then a pending subscription
    - Returns the client secret for Stripe Elements
    """
    checkout = await orchestrator.start(current_user, agent_id)
    return _checkout_response(checkout)


@router.post("/api/subscriptions/{subscription_id}/complete", response_model=SubscriptionResponse)
async def complete_agent_subscription(
    subscription_id: str,
    request_data: SubscriptionCompleteRequest,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_agent_orchestrator)
):
    """Activate the subscription once Stripe reports the payment intent as succeeded."""
    return await orchestrator.complete(current_user, subscription_id, request_data.payment_intent_id)


@router.post("/api/subscriptions/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_agent_subscription(
    subscription_id: str,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_agent_orchestrator)
):
    """Cancel a subscription (owner or admin)."""
    return await orchestrator.cancel(current_user, subscription_id)


@router.get("/api/user/subscriptions", response_model=list[SubscriptionResponse])
async def list_user_subscriptions(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """All of the current user's agent subscriptions, newest first."""
    return await agent_subscriptions.list_by_user(db, current_user.uuid)


@router.get("/api/user/agents", response_model=list[AgentResponse])
async def list_user_agents(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Agents the current user has an active subscription to."""
    return await catalog.list_user_agents(db, current_user.uuid)


# ── Agent teams ────────────────────────────────────────────────────────────────

@router.post(
    "/api/agent-teams/{team_id}/create-payment-intent",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_team_payment_intent(
    team_id: str,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_team_orchestrator)
):
    """Start a subscription to an agent team."""
    checkout = await orchestrator.start(current_user, team_id)
    return _checkout_response(checkout)


@router.post("/api/team-subscriptions/{subscription_id}/complete", response_model=TeamSubscriptionResponse)
async def complete_team_subscription(
    subscription_id: str,
    request_data: SubscriptionCompleteRequest,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_team_orchestrator)
):
    return await orchestrator.complete(current_user, subscription_id, request_data.payment_intent_id)


@router.post("/api/team-subscriptions/{subscription_id}/cancel", response_model=TeamSubscriptionResponse)
async def cancel_team_subscription(
    subscription_id: str,
    current_user: User = Depends(get_current_active_user),
    orchestrator: SubscriptionOrchestrator = Depends(get_team_orchestrator)
):
    return await orchestrator.cancel(current_user, subscription_id)


@router.get("/api/user/team-subscriptions", response_model=list[TeamSubscriptionResponse])
async def list_user_team_subscriptions(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    return await team_subscriptions.list_by_user(db, current_user.uuid)


@router.get("/api/user/agent-teams", response_model=list[AgentTeamResponse])
async def list_user_agent_teams(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    teams = await catalog.list_user_agent_teams(db, current_user.uuid)
    return [AgentTeamResponse.from_team(t) for t in teams]
