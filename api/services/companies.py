"""
Company service functions for API endpoints.

Profile, subscription status and the dashboard summary.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core import entitlements
from core.actors import Actor, CompanyActor
from core.errors import NotFound
from core.utils.datetime import now as utc_now
from database.models.applications import Application
from database.models.companies import Company
from database.models.jobs import Job, Project
from database.models.users import UserRole
from api.services.messages import applications_with_unread

logger = logging.getLogger(__name__)

# Profile fields a company may edit itself
EDITABLE_FIELDS = (
    "name",
    "description",
    "website",
    "industry",
    "phone_number",
    "email_notification_enabled",
)


async def load_company(db: AsyncSession, company_id: int) -> Company:
    company = await db.get(Company, company_id)
    if not company:
        raise NotFound("Company not found")
    return company


def serialize_company(company: Company) -> Dict[str, Any]:
    return {
        "id": company.id,
        "name": company.name,
        "description": company.description,
        "website": company.website,
        "industry": company.industry,
        "phone_number": company.phone_number,
        "email_notification_enabled": company.email_notification_enabled,
        "created_at": company.created_at.isoformat() if company.created_at else None,
    }


async def get_company_profile(db: AsyncSession, actor: CompanyActor) -> Dict[str, Any]:
    """Company profile with its current entitlements."""
    company = await load_company(db, actor.company_id)
    current = utc_now()
    return {
        **serialize_company(company),
        "entitlements": entitlements.evaluate(company, current).to_dict(),
        "trial_message": entitlements.trial_message(company, current),
    }


async def update_company_profile(
    db: AsyncSession, actor: CompanyActor, updates: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Update editable profile fields.

    Unknown keys are ignored. The stored ``is_trial_active`` hint is
    refreshed from the trial dates on every write.
    """
    company = await load_company(db, actor.company_id)
    for field in EDITABLE_FIELDS:
        if field in updates and updates[field] is not None:
            setattr(company, field, updates[field])

    company.is_trial_active = entitlements.check_trial_status(company).is_active
    await db.commit()

    logger.info(f"Updated profile of company {company.id}")
    return await get_company_profile(db, actor)


async def get_subscription_status(
    db: AsyncSession, actor: Optional[Actor]
) -> Dict[str, Any]:
    """
    Lightweight paid-feature check.

    Anonymous and engineer callers get ``is_active: False`` rather than
    an error.
    """
    if actor is None or actor.role != UserRole.COMPANY:
        return {"is_active": False}

    company = await db.get(Company, actor.profile_id)
    if not company:
        return {"is_active": False}

    return {"is_active": entitlements.can_access_paid_features(company)}


async def _count_by_posting(db: AsyncSession, fk_column, visible) -> Dict[int, int]:
    result = await db.execute(
        select(fk_column, func.count(Application.id))
        .where(fk_column.is_not(None), visible)
        .group_by(fk_column)
    )
    return {posting_id: count for posting_id, count in result.all()}


async def get_dashboard(db: AsyncSession, actor: CompanyActor) -> Dict[str, Any]:
    """
    Everything the company dashboard renders in one call.

    Returns:
        Profile, entitlements, trial banner, postings with application
        counts, applications with unread counts and the unread total
    """
    company = await load_company(db, actor.company_id)
    current = utc_now()

    jobs_result = await db.execute(
        select(Job).where(Job.company_id == company.id).order_by(Job.created_at.desc())
    )
    projects_result = await db.execute(
        select(Project)
        .where(Project.company_id == company.id)
        .order_by(Project.created_at.desc())
    )
    job_counts = await _count_by_posting(
        db, Application.job_id, actor.application_filter()
    )
    project_counts = await _count_by_posting(
        db, Application.project_id, actor.application_filter()
    )
    inbox = await applications_with_unread(db, actor)

    return {
        "company": serialize_company(company),
        "entitlements": entitlements.evaluate(company, current).to_dict(),
        "trial_message": entitlements.trial_message(company, current),
        "jobs": [
            {
                "id": job.id,
                "title": job.title,
                "is_active": job.is_active,
                "application_count": job_counts.get(job.id, 0),
            }
            for job in jobs_result.scalars()
        ],
        "projects": [
            {
                "id": project.id,
                "title": project.title,
                "is_active": project.is_active,
                "application_count": project_counts.get(project.id, 0),
            }
            for project in projects_result.scalars()
        ],
        "applications": inbox["applications"],
        "total_unread": inbox["total_unread"],
    }
