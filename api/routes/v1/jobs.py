"""
Job posting endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import CompanyActor
from database.engine import get_db
from api.dependencies import get_pagination_params, require_company
from api.schemas.common import ErrorResponse
from api.schemas.company import JobCreate
from api.services import postings as posting_service

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    summary="List Jobs",
    description="Active job postings, newest first.",
)
async def list_jobs(
    pagination: dict = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    return await posting_service.list_jobs(
        db, limit=pagination["limit"], offset=pagination["offset"]
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Post Job",
    description="Requires a paid plan or an active free trial.",
    responses={403: {"model": ErrorResponse}},
)
async def create_job(
    request: JobCreate,
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await posting_service.create_job(db, actor, **request.model_dump())
