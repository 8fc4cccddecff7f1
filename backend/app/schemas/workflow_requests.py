"""Schemas for custom workflow requests."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

WorkflowComplexity = Literal["basic", "advanced", "enterprise"]
WorkflowRequestStatus = Literal["pending", "approved", "rejected", "completed"]


class WorkflowRequestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    complexity: WorkflowComplexity
    integrations: Optional[str] = None
    team_id: Optional[str] = None


class WorkflowRequestStatusUpdate(BaseModel):
    status: WorkflowRequestStatus


class WorkflowRequestResponse(BaseModel):
    uuid: str
    user_id: str
    name: str
    description: str
    complexity: str
    integrations: Optional[str] = None
    team_id: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
