"""
Request actors.

The dashboard, message and application endpoints behave differently for a
company and for an engineer. Rather than branching on a role string, each
authenticated request is resolved to one of two actor classes exposing the
same capability surface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.sql.elements import ColumnElement

from core.errors import Forbidden, NotEntitled
from database.models.applications import Application
from database.models.communications import SenderType
from database.models.jobs import Job, Project
from database.models.users import UserRole


@dataclass(frozen=True)
class Actor(ABC):
    """Authenticated user acting on the workflow."""
    user_id: int
    profile_id: int

    role: Optional[UserRole] = None  # set by subclasses

    @property
    def sender_type(self) -> SenderType:
        return SenderType(self.role.value)

    @property
    @abstractmethod
    def counterpart_role(self) -> UserRole:
        ...

    @abstractmethod
    def owns_application(self, application: Application) -> bool:
        ...

    def can_set_status(self, application: Application) -> bool:
        return False

    @abstractmethod
    def application_filter(self) -> ColumnElement[bool]:
        """WHERE clause selecting the applications this actor can see."""

    def require_party(self, application: Application) -> None:
        if not self.owns_application(application):
            raise Forbidden("You are not a participant in this application")

    def require_company(self) -> "CompanyActor":
        raise Forbidden("Company account required")

    def require_engineer(self) -> "EngineerActor":
        raise Forbidden("Engineer account required")


@dataclass(frozen=True)
class CompanyActor(Actor):
    role: UserRole = UserRole.COMPANY

    @property
    def company_id(self) -> int:
        return self.profile_id

    @property
    def counterpart_role(self) -> UserRole:
        return UserRole.ENGINEER

    def owns_application(self, application: Application) -> bool:
        return application.company_id == self.company_id

    def can_set_status(self, application: Application) -> bool:
        return self.owns_application(application)

    def application_filter(self) -> ColumnElement[bool]:
        return or_(
            Application.job_id.in_(
                select(Job.id).where(Job.company_id == self.company_id)
            ),
            Application.project_id.in_(
                select(Project.id).where(Project.company_id == self.company_id)
            ),
        )

    def require_company(self) -> "CompanyActor":
        return self


@dataclass(frozen=True)
class EngineerActor(Actor):
    role: UserRole = UserRole.ENGINEER

    @property
    def engineer_id(self) -> int:
        return self.profile_id

    @property
    def counterpart_role(self) -> UserRole:
        return UserRole.COMPANY

    def owns_application(self, application: Application) -> bool:
        return application.engineer_id == self.engineer_id

    def application_filter(self) -> ColumnElement[bool]:
        return Application.engineer_id == self.engineer_id

    def require_engineer(self) -> "EngineerActor":
        return self


def build_actor(user_id: int, role: Any, profile_id: int) -> Actor:
    """Create the actor variant for a role."""
    role = UserRole(role)
    if role == UserRole.COMPANY:
        return CompanyActor(user_id=user_id, profile_id=profile_id)
    return EngineerActor(user_id=user_id, profile_id=profile_id)


def require_applicant(actor: Actor) -> "EngineerActor":
    """Only engineers may submit applications; anything else is not entitled."""
    if actor.role != UserRole.ENGINEER:
        raise NotEntitled(
            "Only engineer accounts can apply", feature="apply", requires_payment=False
        )
    return actor
