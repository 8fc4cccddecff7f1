"""Custom workflow requests: user submission and admin review."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.user import User
from app.models.workflow_request import WorkflowRequest
from app.auth.dependencies import get_current_active_user, admin_required
from app.schemas.workflow_requests import (
    WorkflowRequestCreate, WorkflowRequestStatusUpdate, WorkflowRequestResponse
)
from app.services import catalog

router = APIRouter()


@router.post("/api/workflow-requests", response_model=WorkflowRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow_request(
    request_data: WorkflowRequestCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Submit a custom workflow request. New requests start as pending."""
    if request_data.team_id and await catalog.get_agent_team_by_id(db, request_data.team_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Agent team not found"
        )

    workflow_request = WorkflowRequest(
        **request_data.model_dump(),
        user_id=current_user.uuid,
        status="pending"
    )
    db.add(workflow_request)
    await db.commit()
    await db.refresh(workflow_request)
    return workflow_request


@router.get("/api/user/workflow-requests", response_model=list[WorkflowRequestResponse])
async def list_user_workflow_requests(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(WorkflowRequest)
        .where(WorkflowRequest.user_id == current_user.uuid)
        .order_by(WorkflowRequest.created_at.desc())
    )
    return result.scalars().all()


@router.get("/api/admin/workflow-requests", response_model=list[WorkflowRequestResponse])
async def list_all_workflow_requests(
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(WorkflowRequest).order_by(WorkflowRequest.created_at.desc()))
    return result.scalars().all()


@router.patch("/api/admin/workflow-requests/{request_id}", response_model=WorkflowRequestResponse)
async def update_workflow_request_status(
    request_id: str,
    update_data: WorkflowRequestStatusUpdate,
    admin_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Move a request to pending, approved, rejected or completed. Admin only."""
    result = await db.execute(select(WorkflowRequest).where(WorkflowRequest.uuid == request_id))
    workflow_request = result.scalar_one_or_none()

    if not workflow_request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workflow request not found"
        )

    workflow_request.status = update_data.status
    await db.commit()
    await db.refresh(workflow_request)
    return workflow_request
