"""
Job and project posting service functions.

Creating a posting is a paid feature; listing active postings is public.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import CompanyActor
from core.entitlements import Feature, require_paid_features
from database.models.jobs import Job, Project
from api.services.companies import load_company

logger = logging.getLogger(__name__)


def serialize_job(job: Job) -> Dict[str, Any]:
    return {
        "id": job.id,
        "company_id": job.company_id,
        "title": job.title,
        "description": job.description,
        "location": job.location,
        "salary_min": job.salary_min,
        "salary_max": job.salary_max,
        "remote_ok": job.remote_ok,
        "is_active": job.is_active,
        "created_at": job.created_at.isoformat() if job.created_at else None,
    }


def serialize_project(project: Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "company_id": project.company_id,
        "title": project.title,
        "description": project.description,
        "location": project.location,
        "monthly_rate": project.monthly_rate,
        "is_active": project.is_active,
        "created_at": project.created_at.isoformat() if project.created_at else None,
    }


async def create_job(
    db: AsyncSession,
    actor: CompanyActor,
    title: str,
    description: str,
    location: Optional[str] = None,
    salary_min: Optional[int] = None,
    salary_max: Optional[int] = None,
    remote_ok: bool = False,
) -> Dict[str, Any]:
    """
    Post a job.

    Raises:
        NotEntitled: Company has neither a paid plan nor a live trial
    """
    company = await load_company(db, actor.company_id)
    require_paid_features(company, Feature.JOB_POSTING)

    job = Job(
        company_id=company.id,
        title=title,
        description=description,
        location=location,
        salary_min=salary_min,
        salary_max=salary_max,
        remote_ok=remote_ok,
    )
    db.add(job)
    await db.commit()

    logger.info(f"Company {company.id} posted job {job.id}")
    return serialize_job(job)


async def create_project(
    db: AsyncSession,
    actor: CompanyActor,
    title: str,
    description: str,
    location: Optional[str] = None,
    monthly_rate: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Post an IT project.

    Raises:
        NotEntitled: Company has neither a paid plan nor a live trial
    """
    company = await load_company(db, actor.company_id)
    require_paid_features(company, Feature.PROJECT_POSTING)

    project = Project(
        company_id=company.id,
        title=title,
        description=description,
        location=location,
        monthly_rate=monthly_rate,
    )
    db.add(project)
    await db.commit()

    logger.info(f"Company {company.id} posted project {project.id}")
    return serialize_project(project)


async def _list_active(db: AsyncSession, model, serialize, key: str, limit: int, offset: int):
    count_result = await db.execute(
        select(func.count()).select_from(model).where(model.is_active.is_(True))
    )
    result = await db.execute(
        select(model)
        .where(model.is_active.is_(True))
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return {
        key: [serialize(row) for row in result.scalars()],
        "total": count_result.scalar() or 0,
        "limit": limit,
        "offset": offset,
    }


async def list_jobs(db: AsyncSession, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
    """Active job postings, newest first."""
    return await _list_active(db, Job, serialize_job, "jobs", limit, offset)


async def list_projects(db: AsyncSession, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
    """Active project postings, newest first."""
    return await _list_active(db, Project, serialize_project, "projects", limit, offset)
