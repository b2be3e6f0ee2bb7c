"""
Application Models

Applications to jobs and IT projects share one table; ``resource_type``
says which foreign key is set. Read markers are the explicit per-role
unread cursor for each application's message thread.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    BigInteger,
    DateTime,
    Text,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base, BigIntPK
from database.models.users import UserRole
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.engineers import Engineer
    from database.models.jobs import Job, Project
    from database.models.communications import Message


# ==================== Application Enums ===================== #
class ApplicationStatus(str, PyEnum):
    """Lifecycle status of an application."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    INTERVIEW = "INTERVIEW"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ResourceType(str, PyEnum):
    """What the engineer applied to."""

    JOB = "JOB"
    PROJECT = "PROJECT"


# ==================== Application Model ===================== #
class Application(Base):
    __tablename__: str = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "engineer_id", name="uq_application_job_engineer"),
        UniqueConstraint(
            "project_id", "engineer_id", name="uq_application_project_engineer"
        ),
        CheckConstraint(
            "(job_id IS NULL) <> (project_id IS NULL)",
            name="ck_application_single_resource",
        ),
    )

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    resource_type: Mapped[ResourceType] = mapped_column(
        SQLEnum(ResourceType, native_enum=False, length=20), nullable=False
    )
    job_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("jobs.id"), nullable=True, index=True
    )
    project_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("projects.id"), nullable=True, index=True
    )
    engineer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("engineers.id"), nullable=False, index=True
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=20),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text)

    # One-way latch set by the engineer's first message
    has_contact_permission: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    job: Mapped["Job | None"] = relationship("Job")
    project: Mapped["Project | None"] = relationship("Project")
    engineer: Mapped["Engineer"] = relationship("Engineer")
    messages: Mapped[list["Message"]] = relationship(
        "Message",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    @property
    def resource_id(self) -> int:
        return self.job_id if self.resource_type == ResourceType.JOB else self.project_id

    @property
    def resource(self) -> "Job | Project | None":
        return self.job if self.resource_type == ResourceType.JOB else self.project

    @property
    def company_id(self) -> int | None:
        resource = self.resource
        return resource.company_id if resource is not None else None


class ReadMarker(Base):
    """Last time a role viewed an application's message thread."""

    __tablename__: str = "read_markers"
    __table_args__ = (
        UniqueConstraint("application_id", "reader_role", name="uq_read_marker"),
    )

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reader_role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20), nullable=False
    )
    last_read_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
