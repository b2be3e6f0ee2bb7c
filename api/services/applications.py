"""
Application service functions for API endpoints.

Submission, status changes and participant-scoped reads of job and
project applications.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import Actor, require_applicant
from core.errors import DuplicateApplication, Forbidden, NotFound, ValidationError
from core.workflow import INITIAL_STATUS, apply_status, is_terminal, redact_contact
from database.models.applications import Application, ResourceType
from database.models.engineers import Engineer
from database.models.jobs import Job, Project
from database.models.users import UserRole

logger = logging.getLogger(__name__)


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


def engineer_profile(engineer: Engineer) -> Dict[str, Any]:
    """Full engineer profile, contact fields included."""
    return {
        "id": engineer.id,
        "name": engineer.name,
        "first_name": engineer.first_name,
        "last_name": engineer.last_name,
        "current_position": engineer.current_position,
        "years_of_experience": engineer.years_of_experience,
        "bio": engineer.bio,
        "email": engineer.user.email if engineer.user else None,
        "phone_number": engineer.phone_number,
    }


def serialize_application(application: Application, viewer: Actor) -> Dict[str, Any]:
    """
    Render an application for one of its participants.

    Companies see the engineer's contact fields only once the contact
    latch is set.
    """
    resource = application.resource
    engineer = engineer_profile(application.engineer)
    if viewer.role == UserRole.COMPANY:
        engineer = redact_contact(engineer, application.has_contact_permission)

    return {
        "id": application.id,
        "resource_type": application.resource_type.value,
        "resource_id": application.resource_id,
        "status": application.status.value,
        "is_terminal": is_terminal(application.status),
        "cover_letter": application.cover_letter,
        "has_contact_permission": application.has_contact_permission,
        "created_at": _isoformat(application.created_at),
        "updated_at": _isoformat(application.updated_at),
        "resource": {
            "id": resource.id,
            "title": resource.title,
            "company_id": resource.company_id,
        } if resource else None,
        "engineer": engineer,
    }


def _application_query():
    return select(Application).options(
        selectinload(Application.job),
        selectinload(Application.project),
        selectinload(Application.engineer).selectinload(Engineer.user),
    )


async def load_application(
    db: AsyncSession, application_id: int, lock: bool = False
) -> Application:
    """
    Load an application with its posting and engineer.

    Raises:
        NotFound: If no application has this id
    """
    query = (
        _application_query()
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    application = result.scalar_one_or_none()
    if not application:
        raise NotFound("Application not found")
    return application


def _parse_resource_type(value: Any) -> ResourceType:
    try:
        return ResourceType(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown resource type '{value}'")


async def submit_application(
    db: AsyncSession,
    actor: Actor,
    resource_type: Any,
    resource_id: int,
    cover_letter: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Apply to a job or project as an engineer.

    Args:
        db: Database session
        actor: Requesting actor (must be an engineer)
        resource_type: JOB or PROJECT
        resource_id: Posting id
        cover_letter: Optional cover letter

    Returns:
        The created application

    Raises:
        NotEntitled: Actor is not an engineer
        NotFound: Posting missing or inactive
        DuplicateApplication: Engineer already applied to this posting
    """
    engineer = require_applicant(actor)
    kind = _parse_resource_type(resource_type)
    model = Job if kind == ResourceType.JOB else Project
    fk_column = Application.job_id if kind == ResourceType.JOB else Application.project_id

    resource = await db.get(model, resource_id)
    if not resource or not resource.is_active:
        raise NotFound(f"{kind.value.title()} not found")

    existing = await db.execute(
        select(Application.id).where(
            fk_column == resource_id,
            Application.engineer_id == engineer.engineer_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateApplication()

    application = Application(
        resource_type=kind,
        engineer_id=engineer.engineer_id,
        status=INITIAL_STATUS,
        cover_letter=cover_letter,
        has_contact_permission=False,
    )
    if kind == ResourceType.JOB:
        application.job_id = resource_id
    else:
        application.project_id = resource_id
    db.add(application)

    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission
        await db.rollback()
        raise DuplicateApplication()

    logger.info(
        f"Engineer {engineer.engineer_id} applied to {kind.value} {resource_id} "
        f"(application {application.id})"
    )
    return serialize_application(await load_application(db, application.id), actor)


async def get_application(
    db: AsyncSession, actor: Actor, application_id: int
) -> Dict[str, Any]:
    """Get one application; participants only."""
    application = await load_application(db, application_id)
    actor.require_party(application)
    return serialize_application(application, actor)


async def list_applications(
    db: AsyncSession,
    actor: Actor,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    List the applications an actor participates in, newest first.

    Args:
        db: Database session
        actor: Company (applications to its postings) or engineer (own)
        limit: Maximum number of results
        offset: Pagination offset

    Returns:
        Dictionary with applications list and pagination info
    """
    visible = actor.application_filter()

    count_result = await db.execute(
        select(func.count()).select_from(Application).where(visible)
    )
    total = count_result.scalar() or 0

    result = await db.execute(
        _application_query()
        .where(visible)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(limit)
        .offset(offset)
    )
    applications = result.scalars().all()

    return {
        "applications": [serialize_application(a, actor) for a in applications],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


async def set_status(
    db: AsyncSession, actor: Actor, application_id: int, new_status: Any
) -> Dict[str, Any]:
    """
    Overwrite an application's status as the owning company.

    Any status can be set from any other. The row is locked while it is
    updated.

    Raises:
        NotFound: Application missing
        Forbidden: Actor is not the company that owns the posting
        ValidationError: Unknown status value
    """
    application = await load_application(db, application_id, lock=True)
    if not actor.can_set_status(application):
        raise Forbidden("Only the posting company can change application status")

    previous = apply_status(application, new_status)
    await db.commit()

    logger.info(
        f"Application {application_id} status {previous.value} -> "
        f"{application.status.value}"
    )
    return serialize_application(await load_application(db, application_id), actor)
