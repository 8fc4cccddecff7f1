"""User model for the Agent Marketplace API."""
from datetime import datetime
from enum import Enum
from uuid import uuid4
from sqlalchemy import String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class UserRole(str, Enum):
    """Capabilities a user account can hold."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """User model for authentication and billing identity."""

    __tablename__ = "users"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # User info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Account info
    status: Mapped[str] = mapped_column(String(50), default="active")
    user_role: Mapped[str] = mapped_column(String(50), default=UserRole.USER.value)

    # Stripe integration, provisioned lazily on the first completed subscription
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Indexes
    __table_args__ = (
        Index("idx_user_status", "status"),
    )

    @property
    def is_admin(self) -> bool:
        return self.user_role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(uuid={self.uuid}, email={self.email}, name={self.name})>"
