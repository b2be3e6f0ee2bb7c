"""
Application workflow endpoints.

Engineers submit applications to jobs and projects; the owning company
moves them between statuses. Both parties can read them.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor
from database.engine import get_db
from api.dependencies import get_pagination_params, require_actor
from api.schemas.applications import ApplicationCreate, StatusUpdate, UnreadCountResponse
from api.schemas.common import ErrorResponse
from api.services import applications as application_service
from api.services import messages as message_service

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get(
    "",
    summary="List Applications",
    description="Applications to the company's postings, or the engineer's own.",
)
async def list_applications(
    pagination: dict = Depends(get_pagination_params),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_applications(
        db, actor, limit=pagination["limit"], offset=pagination["offset"]
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit Application",
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def submit_application(
    request: ApplicationCreate,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    """Apply to a job or project. Only engineers can apply."""
    return await application_service.submit_application(
        db,
        actor,
        resource_type=request.resource_type,
        resource_id=request.resource_id,
        cover_letter=request.cover_letter,
    )


@router.get(
    "/with-unread",
    summary="Applications With Unread Counts",
)
async def applications_with_unread(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.applications_with_unread(db, actor)


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Unread Message Total",
)
async def unread_count(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await message_service.unread_total(db, actor))


@router.get(
    "/{application_id}",
    summary="Get Application Details",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_application(
    application_id: int = Path(..., description="Application ID"),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    """Application details. The engineer's contact fields stay hidden until they message."""
    return await application_service.get_application(db, actor, application_id)


@router.patch(
    "/{application_id}",
    summary="Update Application Status",
    description="Owning company only. Any status may be set from any other.",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_status(
    request: StatusUpdate,
    application_id: int = Path(..., description="Application ID"),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.set_status(db, actor, application_id, request.status)
