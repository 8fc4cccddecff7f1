"""Agent teams router: public catalog reads and admin management."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update

from app.database import get_db
from app.models.agent import Agent
from app.models.agent_team import AgentTeam
from app.models.subscription import TeamSubscription
from app.models.user import User
from app.auth.dependencies import admin_required
from app.schemas.agents import AgentResponse, AgentTeamCreate, AgentTeamUpdate, AgentTeamResponse
from app.services import catalog

router = APIRouter()


async def _get_team_or_404(db: AsyncSession, team_id: str) -> AgentTeam:
    team = await catalog.get_agent_team_by_id(db, team_id)
    if not team:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Agent team not found"
        )
    return team


def _workflow_json(steps) -> dict:
    return {"steps": [s.model_dump() for s in sorted(steps, key=lambda s: s.step)]}


@router.get("/api/agent-teams", response_model=list[AgentTeamResponse])
async def list_agent_teams(db: AsyncSession = Depends(get_db)):
    teams = await catalog.list_agent_teams(db)
    return [AgentTeamResponse.from_team(t) for t in teams]


@router.get("/api/agent-teams/featured", response_model=list[AgentTeamResponse])
async def list_featured_agent_teams(db: AsyncSession = Depends(get_db)):
    teams = await catalog.list_featured_agent_teams(db)
    return [AgentTeamResponse.from_team(t) for t in teams]


@router.get("/api/agent-teams/{team_id}", response_model=AgentTeamResponse)
async def get_agent_team(team_id: str, db: AsyncSession = Depends(get_db)):
    team = await _get_team_or_404(db, team_id)
    return AgentTeamResponse.from_team(team)


@router.get("/api/agent-teams/{team_id}/agents", response_model=list[AgentResponse])
async def list_team_agents(team_id: str, db: AsyncSession = Depends(get_db)):
    """Member agents of a team."""
    await _get_team_or_404(db, team_id)
    return await catalog.list_team_agents(db, team_id)


@router.post("/api/admin/agent-teams", response_model=AgentTeamResponse, status_code=status.HTTP_201_CREATED)
async def create_agent_team(
    team_data: AgentTeamCreate,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Create a new agent team. Admin only."""
    fields = team_data.model_dump(exclude={"workflow"})
    team = AgentTeam(**fields, workflow=_workflow_json(team_data.workflow), created_by=admin_user.uuid)
    db.add(team)
    await db.commit()
    await db.refresh(team)
    return AgentTeamResponse.from_team(team)


@router.put("/api/admin/agent-teams/{team_id}", response_model=AgentTeamResponse)
async def update_agent_team(
    team_id: str,
    team_data: AgentTeamUpdate,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Update an agent team. Admin only."""
    team = await _get_team_or_404(db, team_id)

    changes = team_data.model_dump(exclude_unset=True, exclude={"workflow"})
    for field, value in changes.items():
        setattr(team, field, value)
    if team_data.workflow is not None:
        team.workflow = _workflow_json(team_data.workflow)

    await db.commit()
    await db.refresh(team)
    return AgentTeamResponse.from_team(team)


@router.delete("/api/admin/agent-teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent_team(
    team_id: str,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Delete an agent team and detach its member agents. Admin only."""
    team = await _get_team_or_404(db, team_id)

    count_result = await db.execute(
        select(func.count(TeamSubscription.uuid)).where(TeamSubscription.team_id == team_id)
    )
    if count_result.scalar():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Agent team has subscriptions and cannot be deleted"
        )

    await db.execute(
        update(Agent).where(Agent.team_id == team_id).values(team_id=None, team_role=None)
    )
    await db.delete(team)
    await db.commit()
