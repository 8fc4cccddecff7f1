"""Database models for the Agent Marketplace API."""
from app.models.user import User, UserRole
from app.models.agent_team import AgentTeam
from app.models.agent import Agent
from app.models.subscription import Subscription, TeamSubscription, SubscriptionStatus
from app.models.workflow_request import WorkflowRequest

__all__ = [
    "User",
    "UserRole",
    "AgentTeam",
    "Agent",
    "Subscription",
    "TeamSubscription",
    "SubscriptionStatus",
    "WorkflowRequest",
]
