"""AgentTeam model: a bundle of agents sold under one subscription."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class AgentTeam(Base):
    """
    Bundled catalog item.

    ``workflow`` holds ``{"steps": [{"step": 1, "description": ..., "agent": ...}, ...]}``
    describing which member agent handles each stage.
    """

    __tablename__ = "agent_teams"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Catalog info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    target: Mapped[str | None] = mapped_column(Text, nullable=True)
    impact: Mapped[str | None] = mapped_column(Text, nullable=True)
    workflow: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    icon_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gradient_class: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    created_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def workflow_steps(self) -> list[dict]:
        steps = (self.workflow or {}).get("steps", [])
        return sorted(steps, key=lambda s: s.get("step", 0))

    def __repr__(self) -> str:
        return f"<AgentTeam(uuid={self.uuid}, name={self.name}, price={self.price})>"
