"""
Scout endpoints.

Companies send scouts from ``/scout``; engineers open and reply to them
under ``/engineer/scout-emails``.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor, CompanyActor, EngineerActor
from database.engine import get_db
from api.dependencies import require_actor, require_company, require_engineer
from api.schemas.common import ErrorResponse
from api.schemas.scout import ScoutSendRequest
from api.services import scout as scout_service

router = APIRouter(tags=["scout"])


@router.post(
    "/scout",
    status_code=status.HTTP_201_CREATED,
    summary="Send Scout",
    description="Requires a paid plan or trial and the scout add-on.",
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def send_scout(
    request: ScoutSendRequest,
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await scout_service.send_scout(
        db,
        actor,
        engineer_ids=request.recipients,
        content=request.content,
        subject=request.subject,
        job_id=request.job_id,
        match_score=request.match_score,
    )


@router.get("/scout", summary="List Scouts")
async def list_scouts(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    """Sent scouts for a company, received scouts for an engineer."""
    return await scout_service.list_scout_emails(db, actor)


@router.get(
    "/engineer/scout-emails/{scout_id}",
    summary="Open Scout",
    responses={404: {"model": ErrorResponse}},
)
async def read_scout(
    scout_id: int = Path(..., description="Scout email ID"),
    actor: EngineerActor = Depends(require_engineer),
    db: AsyncSession = Depends(get_db),
):
    return await scout_service.read_scout_email(db, actor, scout_id)


@router.patch(
    "/engineer/scout-emails/{scout_id}",
    summary="Reply To Scout",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reply_scout(
    scout_id: int = Path(..., description="Scout email ID"),
    actor: EngineerActor = Depends(require_engineer),
    db: AsyncSession = Depends(get_db),
):
    return await scout_service.reply_scout_email(db, actor, scout_id)
