"""
Engineer profile endpoints.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor
from database.engine import get_db
from api.dependencies import require_actor
from api.schemas.common import ErrorResponse
from api.services import engineers as engineer_service

router = APIRouter(prefix="/engineers", tags=["engineers"])


@router.get(
    "/{engineer_id}",
    summary="Get Engineer Profile",
    description=(
        "Companies see email and phone only after the engineer has messaged "
        "them or replied to their scout."
    ),
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_engineer(
    engineer_id: int = Path(..., description="Engineer ID"),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    return await engineer_service.get_engineer_profile(db, actor, engineer_id)
