from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.companies import Company
    from database.models.engineers import Engineer


# ==================== User Role ===================== #
class UserRole(str, PyEnum):
    COMPANY = "COMPANY"  # posts jobs and projects, reviews applications
    ENGINEER = "ENGINEER"  # candidate who applies and receives scouts


class User(Base):
    """Login identity. Exactly one of company / engineer is attached, per role."""

    __tablename__: str = "users"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    company: Mapped["Company | None"] = relationship(
        "Company", back_populates="user", uselist=False
    )
    engineer: Mapped["Engineer | None"] = relationship(
        "Engineer", back_populates="user", uselist=False
    )
