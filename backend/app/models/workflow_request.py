"""WorkflowRequest model for custom automation requests submitted by users."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class WorkflowRequest(Base):
    """A user's request for a custom workflow, reviewed by admins."""

    __tablename__ = "workflow_requests"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    complexity: Mapped[str] = mapped_column(String(50), nullable=False)  # "basic", "advanced", "enterprise"
    integrations: Mapped[str | None] = mapped_column(Text, nullable=True)  # comma-separated
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")

    # Foreign keys
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)
    team_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("agent_teams.uuid"), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Indexes
    __table_args__ = (
        Index("idx_workflow_request_user_id", "user_id"),
        Index("idx_workflow_request_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<WorkflowRequest(uuid={self.uuid}, name={self.name}, status={self.status})>"
