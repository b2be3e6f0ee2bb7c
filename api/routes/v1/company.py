"""
Company endpoints: profile, subscription status and dashboard.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor, CompanyActor
from database.engine import get_db
from api.dependencies import get_optional_actor, require_company
from api.schemas.company import CompanyProfileUpdate
from api.services import companies as company_service

router = APIRouter(prefix="/company", tags=["company"])


@router.get(
    "/profile",
    summary="Get Company Profile",
    description="Company profile with entitlements and trial banner.",
)
async def get_profile(
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await company_service.get_company_profile(db, actor)


@router.put(
    "/profile",
    summary="Update Company Profile",
)
async def update_profile(
    request: CompanyProfileUpdate,
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """Update editable profile fields; omitted fields are left unchanged."""
    return await company_service.update_company_profile(
        db, actor, request.model_dump(exclude_unset=True)
    )


@router.get(
    "/subscription-status",
    summary="Subscription Status",
    description="Whether paid features are available. Never fails for anonymous callers.",
)
async def subscription_status(
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    return await company_service.get_subscription_status(db, actor)


@router.get(
    "/dashboard",
    summary="Company Dashboard",
    description="Profile, entitlements, postings and applications with unread counts.",
)
async def dashboard(
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await company_service.get_dashboard(db, actor)
