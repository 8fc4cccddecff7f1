"""Agents router: public catalog reads and admin management."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.database import get_db
from app.models.agent import Agent
from app.models.subscription import Subscription
from app.models.user import User
from app.auth.dependencies import admin_required
from app.schemas.agents import AgentCreate, AgentUpdate, AgentResponse
from app.services import catalog

router = APIRouter()


async def _require_team(db: AsyncSession, team_id: str | None) -> None:
    if team_id and await catalog.get_agent_team_by_id(db, team_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Agent team not found"
        )


@router.get("/api/agents", response_model=list[AgentResponse])
async def list_agents(db: AsyncSession = Depends(get_db)):
    """List all agents (public, no auth required)."""
    return await catalog.list_agents(db)


@router.get("/api/agents/featured", response_model=list[AgentResponse])
async def list_featured_agents(db: AsyncSession = Depends(get_db)):
    """Agents flagged popular, new or enterprise."""
    return await catalog.list_featured_agents(db)


@router.get("/api/agents/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: str, db: AsyncSession = Depends(get_db)):
    agent = await catalog.get_agent_by_id(db, agent_id)
    if not agent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Agent not found"
        )
    return agent


@router.post("/api/admin/agents", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    agent_data: AgentCreate,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Create a new agent. Admin only."""
    await _require_team(db, agent_data.team_id)

    agent = Agent(**agent_data.model_dump(), created_by=admin_user.uuid)
    db.add(agent)
    await db.commit()
    await db.refresh(agent)
    return agent


@router.put("/api/admin/agents/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: str,
    agent_data: AgentUpdate,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Update an agent. Admin only. Existing subscriptions keep their paid terms."""
    agent = await catalog.get_agent_by_id(db, agent_id)
    if not agent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Agent not found"
        )

    changes = agent_data.model_dump(exclude_unset=True)
    await _require_team(db, changes.get("team_id"))
    for field, value in changes.items():
        setattr(agent, field, value)

    await db.commit()
    await db.refresh(agent)
    return agent


@router.delete("/api/admin/agents/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(
    agent_id: str,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Delete an agent. Admin only. Refused while subscriptions reference it."""
    agent = await catalog.get_agent_by_id(db, agent_id)
    if not agent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Agent not found"
        )

    count_result = await db.execute(
        select(func.count(Subscription.uuid)).where(Subscription.agent_id == agent_id)
    )
    if count_result.scalar():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Agent has subscriptions and cannot be deleted"
        )

    await db.delete(agent)
    await db.commit()
