"""
Payment records.

The payment provider and the admin approval step are outside the engine;
these rows only expose a status that flips to ``completed`` once approved,
at which point the company's subscription or scout fields are written.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    DateTime,
    Integer,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntPK
from database.models.companies import SubscriptionPlan
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.companies import Company


class PaymentPurpose(str, PyEnum):
    SUBSCRIPTION = "SUBSCRIPTION"
    SCOUT = "SCOUT"


class PaymentStatus(str, PyEnum):
    """Payment status as polled by the client."""

    PENDING = "pending"
    PENDING_APPROVAL = "pending_approval"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, PyEnum):
    CREDIT = "credit"
    WECHAT = "wechat"
    ALIPAY = "alipay"
    PAYPAY = "paypay"


class ApprovalStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Payment(Base):
    __tablename__: str = "payments"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    company_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("companies.id"), nullable=False, index=True
    )
    purpose: Mapped[PaymentPurpose] = mapped_column(
        SQLEnum(PaymentPurpose, native_enum=False, length=20), nullable=False
    )
    plan: Mapped[SubscriptionPlan] = mapped_column(
        SQLEnum(SubscriptionPlan, native_enum=False, length=20),
        nullable=False,
        default=SubscriptionPlan.BASIC,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="JPY")
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, native_enum=False, length=20), nullable=False
    )
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, native_enum=False, length=30),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    transaction_id: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    company: Mapped["Company"] = relationship("Company")
    approvals: Mapped[list["PaymentApproval"]] = relationship(
        "PaymentApproval", back_populates="payment", cascade="all, delete-orphan"
    )


class PaymentApproval(Base):
    """Single-use admin approval token for a payment."""

    __tablename__: str = "payment_approvals"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    payment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    status: Mapped[ApprovalStatus] = mapped_column(
        SQLEnum(ApprovalStatus, native_enum=False, length=20),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    payment: Mapped["Payment"] = relationship("Payment", back_populates="approvals")
