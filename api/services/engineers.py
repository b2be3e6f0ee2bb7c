"""
Engineer profile service functions.
"""

from typing import Any, Dict
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import Actor, CompanyActor
from core.entitlements import Feature, require_paid_features
from core.errors import Forbidden, NotFound
from core.workflow import redact_contact
from database.models.applications import Application
from database.models.communications import ScoutEmail
from database.models.engineers import Engineer
from database.models.users import UserRole
from api.services.applications import engineer_profile
from api.services.companies import load_company

logger = logging.getLogger(__name__)


async def company_has_contact(
    db: AsyncSession, actor: CompanyActor, engineer_id: int
) -> bool:
    """
    Whether the engineer has opened contact with this company.

    True once the engineer has messaged on one of the company's
    applications, or replied to one of its scouts.
    """
    latched = await db.execute(
        select(Application.id)
        .where(
            Application.engineer_id == engineer_id,
            Application.has_contact_permission.is_(True),
            actor.application_filter(),
        )
        .limit(1)
    )
    if latched.scalar_one_or_none() is not None:
        return True

    replied = await db.execute(
        select(ScoutEmail.id)
        .where(
            ScoutEmail.engineer_id == engineer_id,
            ScoutEmail.company_id == actor.company_id,
            ScoutEmail.is_replied.is_(True),
        )
        .limit(1)
    )
    return replied.scalar_one_or_none() is not None


async def get_engineer_profile(
    db: AsyncSession, actor: Actor, engineer_id: int
) -> Dict[str, Any]:
    """
    Engineer profile as seen by the actor.

    Engineers may only view their own profile. Companies need paid access
    and see contact fields only after the engineer opened contact.

    Raises:
        NotFound: Unknown engineer
        Forbidden: Engineer viewing another engineer
        NotEntitled: Company without paid plan or trial
    """
    result = await db.execute(
        select(Engineer)
        .options(selectinload(Engineer.user))
        .where(Engineer.id == engineer_id)
    )
    engineer = result.scalar_one_or_none()
    if not engineer:
        raise NotFound("Engineer not found")

    profile = engineer_profile(engineer)

    if actor.role == UserRole.ENGINEER:
        if actor.profile_id != engineer.id:
            raise Forbidden("Engineers can only view their own profile")
        return profile

    company = await load_company(db, actor.profile_id)
    require_paid_features(company, Feature.COMPANY_DETAIL)
    return redact_contact(profile, await company_has_contact(db, actor, engineer.id))
