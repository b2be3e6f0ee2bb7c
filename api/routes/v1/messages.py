"""
Application message endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor
from database.engine import get_db
from api.dependencies import require_actor
from api.schemas.applications import MessageCreate
from api.schemas.common import ErrorResponse
from api.services import messages as message_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get(
    "",
    summary="Read Message Thread",
    description="Returns the thread oldest first and marks it read for the caller.",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_messages(
    application_id: int = Query(..., ge=1, description="Application ID"),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.list_messages(db, actor, application_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Post Message",
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def post_message(
    request: MessageCreate,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    """Post on an application thread as either participant."""
    return await message_service.post_message(
        db, actor, request.application_id, request.content
    )
