"""Subscription models for agent and agent-team subscriptions."""
from datetime import datetime
from enum import Enum
from uuid import uuid4
from sqlalchemy import String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class SubscriptionStatus(str, Enum):
    """Lifecycle states of a subscription row."""

    PENDING = "pending"
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset({SubscriptionStatus.CANCELED.value, SubscriptionStatus.EXPIRED.value})

_ACTIVE_ONLY = text("status = 'active'")


class SubscriptionFields:
    """Columns shared by both subscription ledgers."""

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    status: Mapped[str] = mapped_column(String(50), nullable=False, default=SubscriptionStatus.PENDING.value)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Stripe correlation handles, filled in progressively during checkout
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_price_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class Subscription(SubscriptionFields, Base):
    """A user's subscription to a single agent."""

    __tablename__ = "subscriptions"

    agent_id: Mapped[str] = mapped_column(String(36), ForeignKey("agents.uuid"), nullable=False)

    # Indexes
    __table_args__ = (
        Index("idx_subscription_user_id", "user_id"),
        Index("idx_subscription_agent_id", "agent_id"),
        Index("idx_subscription_status", "status"),
        Index("idx_subscription_payment_intent", "stripe_payment_intent_id"),
        # At most one active subscription per (user, agent)
        Index(
            "uq_subscription_active_user_agent",
            "user_id",
            "agent_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    def __repr__(self) -> str:
        return f"<Subscription(uuid={self.uuid}, user_id={self.user_id}, agent_id={self.agent_id}, status={self.status})>"


class TeamSubscription(SubscriptionFields, Base):
    """A user's subscription to an agent team."""

    __tablename__ = "team_subscriptions"

    team_id: Mapped[str] = mapped_column(String(36), ForeignKey("agent_teams.uuid"), nullable=False)

    # Indexes
    __table_args__ = (
        Index("idx_team_subscription_user_id", "user_id"),
        Index("idx_team_subscription_team_id", "team_id"),
        Index("idx_team_subscription_status", "status"),
        Index("idx_team_subscription_payment_intent", "stripe_payment_intent_id"),
        Index(
            "uq_team_subscription_active_user_team",
            "user_id",
            "team_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    def __repr__(self) -> str:
        return f"<TeamSubscription(uuid={self.uuid}, user_id={self.user_id}, team_id={self.team_id}, status={self.status})>"
