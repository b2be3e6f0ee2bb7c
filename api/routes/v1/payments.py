"""
Payment endpoints.

The approve and reject links are opened by an administrator from an
email, so they authenticate by token rather than by session.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import CompanyActor
from database.engine import get_db
from api.dependencies import require_company
from api.schemas.common import ErrorResponse
from api.schemas.payments import PaymentCreate
from api.services import payments as payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Payment",
)
async def create_payment(
    request: PaymentCreate,
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.create_payment(
        db,
        actor,
        purpose=request.purpose,
        payment_method=request.payment_method,
        plan=request.plan,
    )


@router.get(
    "/{payment_id}",
    summary="Payment Status",
    responses={404: {"model": ErrorResponse}},
)
async def get_payment(
    payment_id: int = Path(..., description="Payment ID"),
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.get_payment_status(db, actor, payment_id)


@router.post(
    "/{payment_id}/mark-complete",
    summary="Mark Payment Complete",
    description="Company reports the payment as made; an approval request is opened.",
    responses={404: {"model": ErrorResponse}},
)
async def mark_complete(
    payment_id: int = Path(..., description="Payment ID"),
    actor: CompanyActor = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.request_approval(db, actor, payment_id)


@router.get(
    "/{payment_id}/approve",
    summary="Approve Payment",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def approve_payment(
    payment_id: int = Path(..., description="Payment ID"),
    token: str = Query("", description="Approval token"),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.approve_payment(db, payment_id, token)


@router.get(
    "/{payment_id}/reject",
    summary="Reject Payment",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reject_payment(
    payment_id: int = Path(..., description="Payment ID"),
    token: str = Query("", description="Approval token"),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.reject_payment(db, payment_id, token)
