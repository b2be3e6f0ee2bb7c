"""
Scout service functions.

Companies with both posting entitlement and the scout add-on send scout
messages to engineers; engineers read and reply to them.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import Actor, CompanyActor
from core.entitlements import require_scout_access
from core.errors import NotFound, ValidationError
from database.models.communications import ScoutEmail
from database.models.engineers import Engineer
from database.models.users import UserRole
from api.services.companies import load_company

logger = logging.getLogger(__name__)


def serialize_scout_email(scout: ScoutEmail) -> Dict[str, Any]:
    company = scout.company
    engineer = scout.engineer
    return {
        "id": scout.id,
        "company_id": scout.company_id,
        "engineer_id": scout.engineer_id,
        "job_id": scout.job_id,
        "subject": scout.subject,
        "content": scout.content,
        "match_score": scout.match_score,
        "is_read": scout.is_read,
        "is_replied": scout.is_replied,
        "created_at": scout.created_at.isoformat() if scout.created_at else None,
        "company": {
            "id": company.id,
            "name": company.name,
            "description": company.description,
            "website": company.website,
            "industry": company.industry,
        } if company else None,
        "engineer": {
            "id": engineer.id,
            "name": engineer.name,
            "current_position": engineer.current_position,
        } if engineer else None,
    }


def _scout_query():
    return select(ScoutEmail).options(
        selectinload(ScoutEmail.company),
        selectinload(ScoutEmail.engineer),
    )


async def send_scout(
    db: AsyncSession,
    actor: CompanyActor,
    engineer_ids: List[int],
    content: Optional[str],
    subject: Optional[str] = None,
    job_id: Optional[int] = None,
    match_score: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Send a scout message to one or more engineers.

    Unknown engineers are reported per recipient and do not abort the batch.

    Args:
        db: Database session
        actor: Sending company
        engineer_ids: Recipients
        content: Message body
        subject: Subject line (defaults to one naming the company)
        job_id: Optional job the scout is about
        match_score: Optional match score shown to the engineer

    Returns:
        Dictionary with per-recipient results and the success count

    Raises:
        NotEntitled: No paid plan or trial, or no scout add-on
        ValidationError: No recipients or blank content
    """
    company = await load_company(db, actor.company_id)
    require_scout_access(company)

    recipients = list(dict.fromkeys(engineer_ids or []))
    if not recipients:
        raise ValidationError("No engineers specified")
    body = (content or "").strip()
    if not body:
        raise ValidationError("Message is required")
    subject = (subject or "").strip() or f"Scout message from {company.name}"

    result = await db.execute(select(Engineer.id).where(Engineer.id.in_(recipients)))
    known = set(result.scalars().all())

    created = []
    results = []
    for engineer_id in recipients:
        if engineer_id not in known:
            results.append({
                "engineer_id": engineer_id,
                "success": False,
                "error": "Engineer not found",
            })
            continue
        scout = ScoutEmail(
            company_id=company.id,
            engineer_id=engineer_id,
            job_id=job_id,
            subject=subject,
            content=body,
            match_score=match_score,
        )
        db.add(scout)
        created.append(scout)
        results.append({"engineer_id": engineer_id, "success": True})

    await db.commit()

    scout_ids = iter(s.id for s in created)
    for item in results:
        if item["success"]:
            item["scout_email_id"] = next(scout_ids)

    logger.info(
        f"Company {company.id} sent {len(created)}/{len(recipients)} scout messages"
    )
    return {"count": len(created), "total": len(recipients), "results": results}


async def list_scout_emails(db: AsyncSession, actor: Actor) -> Dict[str, Any]:
    """Sent scouts for a company, received scouts for an engineer."""
    if actor.role == UserRole.COMPANY:
        condition = ScoutEmail.company_id == actor.profile_id
    else:
        condition = ScoutEmail.engineer_id == actor.profile_id

    result = await db.execute(
        _scout_query()
        .where(condition)
        .order_by(ScoutEmail.created_at.desc(), ScoutEmail.id.desc())
    )
    scouts = result.scalars().all()
    return {
        "scout_emails": [serialize_scout_email(s) for s in scouts],
        "unread_count": sum(1 for s in scouts if not s.is_read),
    }


async def _load_received(db: AsyncSession, actor: Actor, scout_id: int) -> ScoutEmail:
    engineer = actor.require_engineer()
    result = await db.execute(
        _scout_query().where(
            ScoutEmail.id == scout_id,
            ScoutEmail.engineer_id == engineer.engineer_id,
        )
    )
    scout = result.scalar_one_or_none()
    if not scout:
        raise NotFound("Scout email not found")
    return scout


async def read_scout_email(db: AsyncSession, actor: Actor, scout_id: int) -> Dict[str, Any]:
    """Open a received scout, marking it read."""
    scout = await _load_received(db, actor, scout_id)
    if not scout.is_read:
        scout.is_read = True
        await db.commit()
    return serialize_scout_email(scout)


async def reply_scout_email(db: AsyncSession, actor: Actor, scout_id: int) -> Dict[str, Any]:
    """
    Mark a received scout as replied.

    Raises:
        NotFound: Not a scout received by this engineer
        ValidationError: Already replied
    """
    scout = await _load_received(db, actor, scout_id)
    if scout.is_replied:
        raise ValidationError("Already replied")

    scout.is_replied = True
    scout.is_read = True
    await db.commit()

    logger.info(f"Engineer {scout.engineer_id} replied to scout {scout.id}")
    return serialize_scout_email(scout)
