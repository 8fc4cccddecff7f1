"""Schemas for the agent and agent-team catalog."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class AgentCreate(BaseModel):
    """Schema for creating a catalog agent (admin only)."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="Price in minor currency units")
    category: str = Field(..., min_length=1, max_length=100)
    features: str = ""
    is_popular: bool = False
    is_new: bool = False
    is_enterprise: bool = False
    icon_class: Optional[str] = Field(None, max_length=100)
    icon_bg_class: Optional[str] = Field(None, max_length=100)
    gradient_class: Optional[str] = Field(None, max_length=100)
    team_id: Optional[str] = None
    team_role: Optional[str] = Field(None, max_length=100)


class AgentUpdate(BaseModel):
    """Partial agent update; omitted fields are left untouched."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    features: Optional[str] = None
    is_popular: Optional[bool] = None
    is_new: Optional[bool] = None
    is_enterprise: Optional[bool] = None
    icon_class: Optional[str] = None
    icon_bg_class: Optional[str] = None
    gradient_class: Optional[str] = None
    team_id: Optional[str] = None
    team_role: Optional[str] = None


class AgentResponse(BaseModel):
    uuid: str
    name: str
    description: str
    price: int
    category: str
    features: str
    is_popular: bool
    is_new: bool
    is_enterprise: bool
    icon_class: Optional[str] = None
    icon_bg_class: Optional[str] = None
    gradient_class: Optional[str] = None
    team_id: Optional[str] = None
    team_role: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class WorkflowStep(BaseModel):
    """One stage of a team workflow and the member agent responsible for it."""

    step: int = Field(..., ge=1)
    description: str
    agent: str


class AgentTeamCreate(BaseModel):
    """Schema for creating an agent team (admin only)."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0, description="Price in minor currency units")
    target: Optional[str] = None
    impact: Optional[str] = None
    workflow: List[WorkflowStep] = []
    icon_class: Optional[str] = Field(None, max_length=100)
    gradient_class: Optional[str] = Field(None, max_length=100)
    is_popular: bool = False
    is_featured: bool = False


class AgentTeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[int] = Field(None, ge=0)
    target: Optional[str] = None
    impact: Optional[str] = None
    workflow: Optional[List[WorkflowStep]] = None
    icon_class: Optional[str] = None
    gradient_class: Optional[str] = None
    is_popular: Optional[bool] = None
    is_featured: Optional[bool] = None


class AgentTeamResponse(BaseModel):
    uuid: str
    name: str
    description: str
    category: str
    price: int
    target: Optional[str] = None
    impact: Optional[str] = None
    workflow: List[WorkflowStep] = []
    icon_class: Optional[str] = None
    gradient_class: Optional[str] = None
    is_popular: bool
    is_featured: bool
    created_at: datetime

    @classmethod
    def from_team(cls, team) -> "AgentTeamResponse":
        return cls(
            uuid=team.uuid,
            name=team.name,
            description=team.description,
            category=team.category,
            price=team.price,
            target=team.target,
            impact=team.impact,
            workflow=[WorkflowStep(**s) for s in team.workflow_steps],
            icon_class=team.icon_class,
            gradient_class=team.gradient_class,
            is_popular=bool(team.is_popular),
            is_featured=bool(team.is_featured),
            created_at=team.created_at,
        )
