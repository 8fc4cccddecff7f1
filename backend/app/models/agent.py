"""Agent model: a single subscribable automation unit in the catalog."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class Agent(Base):
    """Catalog agent. Prices are integers in minor currency units."""

    __tablename__ = "agents"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Catalog info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    features: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Badges (informational only)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)
    is_new: Mapped[bool] = mapped_column(Boolean, default=False)
    is_enterprise: Mapped[bool] = mapped_column(Boolean, default=False)

    # Presentation hints consumed by the frontend
    icon_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    icon_bg_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gradient_class: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Team affiliation
    team_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("agent_teams.uuid"), nullable=True)
    team_role: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Indexes
    __table_args__ = (
        Index("idx_agent_category", "category"),
        Index("idx_agent_team_id", "team_id"),
    )

    def __repr__(self) -> str:
        return f"<Agent(uuid={self.uuid}, name={self.name}, price={self.price})>"
