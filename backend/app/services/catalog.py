"""Read-side lookups over the agent catalog."""
from typing import Optional, Sequence

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.agent import Agent
from app.models.agent_team import AgentTeam
from app.models.subscription import Subscription, TeamSubscription, SubscriptionStatus


async def get_agent_by_id(db: AsyncSession, agent_id: str) -> Optional[Agent]:
    result = await db.execute(select(Agent).where(Agent.uuid == agent_id))
    return result.scalar_one_or_none()


async def get_agent_team_by_id(db: AsyncSession, team_id: str) -> Optional[AgentTeam]:
    result = await db.execute(select(AgentTeam).where(AgentTeam.uuid == team_id))
    return result.scalar_one_or_none()


async def list_agents(db: AsyncSession) -> Sequence[Agent]:
    result = await db.execute(select(Agent).order_by(Agent.created_at))
    return result.scalars().all()


async def list_featured_agents(db: AsyncSession) -> Sequence[Agent]:
    """Agents carrying any badge (popular, new or enterprise)."""
    result = await db.execute(
        select(Agent)
        .where(or_(Agent.is_popular.is_(True), Agent.is_new.is_(True), Agent.is_enterprise.is_(True)))
        .order_by(Agent.created_at)
    )
    return result.scalars().all()


async def list_team_agents(db: AsyncSession, team_id: str) -> Sequence[Agent]:
    result = await db.execute(select(Agent).where(Agent.team_id == team_id).order_by(Agent.created_at))
    return result.scalars().all()


async def list_agent_teams(db: AsyncSession) -> Sequence[AgentTeam]:
    result = await db.execute(select(AgentTeam).order_by(AgentTeam.created_at))
    return result.scalars().all()


async def list_featured_agent_teams(db: AsyncSession) -> Sequence[AgentTeam]:
    result = await db.execute(
        select(AgentTeam)
        .where(or_(AgentTeam.is_popular.is_(True), AgentTeam.is_featured.is_(True)))
        .order_by(AgentTeam.created_at)
    )
    return result.scalars().all()


async def list_user_agents(db: AsyncSession, user_id: str) -> Sequence[Agent]:
    """Agents the user currently has an active subscription to."""
    result = await db.execute(
        select(Agent)
        .join(Subscription, Subscription.agent_id == Agent.uuid)
        .where(
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.ACTIVE.value,
        )
    )
    return result.scalars().all()


async def list_user_agent_teams(db: AsyncSession, user_id: str) -> Sequence[AgentTeam]:
    """Teams the user currently has an active subscription to."""
    result = await db.execute(
        select(AgentTeam)
        .join(TeamSubscription, TeamSubscription.team_id == AgentTeam.uuid)
        .where(
            TeamSubscription.user_id == user_id,
            TeamSubscription.status == SubscriptionStatus.ACTIVE.value,
        )
    )
    return result.scalars().all()
