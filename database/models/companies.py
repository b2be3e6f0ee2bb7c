from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    BigInteger,
    DateTime,
    Text,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.jobs import Job, Project


# ==================== Enums ===================== #
class SubscriptionPlan(str, PyEnum):
    """Subscription plan levels."""

    FREE = "FREE"
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


# ==================== Company Model ===================== #
class Company(Base):
    """
    Hiring company profile with its subscription, trial and scout add-on fields.

    Entitlement is always derived from the dates here; ``is_trial_active`` is
    a cached hint that is refreshed on write and never trusted on read.
    """

    __tablename__: str = "companies"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, unique=True, index=True
    )

    # Profile
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String(500))
    industry: Mapped[str | None] = mapped_column(String(100))
    phone_number: Mapped[str | None] = mapped_column(String(30))
    email_notification_enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    # Subscription (written only by payment completion)
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(
        SQLEnum(SubscriptionPlan, native_enum=False, length=20),
        nullable=False,
        default=SubscriptionPlan.FREE,
    )
    subscription_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    # Trial
    trial_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    trial_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    has_used_trial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_trial_active: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Scout add-on
    has_scout_access: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    scout_access_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="company")
    jobs: Mapped[list["Job"]] = relationship("Job", back_populates="company")
    projects: Mapped[list["Project"]] = relationship(
        "Project", back_populates="company"
    )
