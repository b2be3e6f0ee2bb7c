from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    BigInteger,
    DateTime,
    Float,
    Text,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import Application
    from database.models.companies import Company
    from database.models.engineers import Engineer


# ============ Message Enum =============== #
class SenderType(str, PyEnum):
    """Message sender type. Values match UserRole."""

    COMPANY = "COMPANY"
    ENGINEER = "ENGINEER"


# ============ Application Message Model =============== #
class Message(Base):
    """
    Message on an application thread.

    There is no per-message read flag; read state comes from ReadMarker.
    """

    __tablename__ = "messages"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_type: Mapped[SenderType] = mapped_column(
        SQLEnum(SenderType, native_enum=False, length=20), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, index=True
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="messages"
    )


# ============ Scout Email Model =============== #
class ScoutEmail(Base):
    """Scout message sent by a company to an engineer it wants to recruit."""

    __tablename__ = "scout_emails"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    company_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("companies.id"), nullable=False, index=True
    )
    engineer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("engineers.id"), nullable=False, index=True
    )
    job_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("jobs.id"), nullable=True
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    match_score: Mapped[float | None] = mapped_column(Float)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_replied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    company: Mapped["Company"] = relationship("Company")
    engineer: Mapped["Engineer"] = relationship("Engineer")
