"""
Payment service functions.

The engine does not talk to a payment provider. A payment is created as
``pending``, the company marks it paid which opens an approval request,
and an administrator approves or rejects it through a single-use token.
Approval writes the subscription or scout fields on the company in the
same commit; nothing else here changes entitlement.
"""

from typing import Any, Dict
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import CompanyActor
from core.config import settings
from core.errors import NotFound, ValidationError
from core.security import generate_approval_token
from core.utils.datetime import add_days, add_hours, add_months, ensure_utc, now as utc_now
from database.models.companies import Company, SubscriptionPlan
from database.models.payments import (
    ApprovalStatus,
    Payment,
    PaymentApproval,
    PaymentMethod,
    PaymentPurpose,
    PaymentStatus,
)

logger = logging.getLogger(__name__)
approval_logger = logging.getLogger("payments.approvals")


def serialize_payment(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "company_id": payment.company_id,
        "purpose": payment.purpose.value,
        "plan": payment.plan.value,
        "amount": payment.amount,
        "currency": payment.currency,
        "payment_method": payment.payment_method.value,
        "status": payment.status.value,
        "transaction_id": payment.transaction_id,
        "created_at": payment.created_at.isoformat() if payment.created_at else None,
        "updated_at": payment.updated_at.isoformat() if payment.updated_at else None,
    }


def _parse(enum_cls, value: Any, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(item.value for item in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Allowed: {allowed}")


async def _load_own_payment(db: AsyncSession, actor: CompanyActor, payment_id: int) -> Payment:
    payment = await db.get(Payment, payment_id)
    if not payment or payment.company_id != actor.company_id:
        raise NotFound("Payment not found")
    return payment


async def create_payment(
    db: AsyncSession,
    actor: CompanyActor,
    purpose: Any,
    payment_method: Any,
    plan: Any = SubscriptionPlan.BASIC,
) -> Dict[str, Any]:
    """
    Open a pending payment for a subscription or the scout add-on.

    Raises:
        ValidationError: Unknown purpose, method or plan, or a FREE plan
    """
    purpose = _parse(PaymentPurpose, purpose, "purpose")
    method = _parse(PaymentMethod, payment_method, "payment method")
    plan = _parse(SubscriptionPlan, plan, "plan")
    if plan == SubscriptionPlan.FREE:
        raise ValidationError("The FREE plan cannot be purchased")

    amount = settings.scout_fee if purpose == PaymentPurpose.SCOUT else settings.monthly_fee
    payment = Payment(
        company_id=actor.company_id,
        purpose=purpose,
        plan=plan,
        amount=amount,
        currency=settings.payment_currency,
        payment_method=method,
        status=PaymentStatus.PENDING,
    )
    db.add(payment)
    await db.commit()

    logger.info(f"Company {actor.company_id} opened {purpose.value} payment {payment.id}")
    return serialize_payment(payment)


async def get_payment_status(
    db: AsyncSession, actor: CompanyActor, payment_id: int
) -> Dict[str, Any]:
    """Payment as polled by the client."""
    return serialize_payment(await _load_own_payment(db, actor, payment_id))


def notify_admin(payment: Payment, approval: PaymentApproval) -> None:
    """
    Hand the approval links to the administrator.

    The token never goes back to the paying company; it only travels on
    the ``payments.approvals`` logger, which deployments route to the
    administrator's mailbox.
    """
    base = f"{settings.api_v1_prefix}/payments/{payment.id}"
    approval_logger.info(
        f"Payment {payment.id} from company {payment.company_id} awaits approval "
        f"by {settings.admin_email}: approve {base}/approve?token={approval.token} "
        f"reject {base}/reject?token={approval.token} "
        f"(expires {approval.expires_at.isoformat()})"
    )


async def request_approval(
    db: AsyncSession, actor: CompanyActor, payment_id: int
) -> Dict[str, Any]:
    """
    Mark a payment as paid by the company and open an approval request.

    The approval token is sent to the administrator only. Completed
    payments are returned unchanged.
    """
    payment = await _load_own_payment(db, actor, payment_id)
    if payment.status == PaymentStatus.COMPLETED:
        return serialize_payment(payment)

    approval = PaymentApproval(
        payment_id=payment.id,
        token=generate_approval_token(),
        status=ApprovalStatus.PENDING,
        expires_at=add_hours(utc_now(), settings.approval_token_hours),
    )
    payment.status = PaymentStatus.PENDING_APPROVAL
    db.add(approval)
    await db.commit()

    notify_admin(payment, approval)
    logger.info(f"Approval requested for payment {payment.id}")
    return serialize_payment(payment)


async def _load_pending_approval(
    db: AsyncSession, payment_id: int, token: str
) -> PaymentApproval | None:
    """
    Resolve an approval token for a payment.

    Returns None when the token was already used.

    Raises:
        ValidationError: Missing or expired token
        NotFound: Unknown token or token for another payment
    """
    if not token:
        raise ValidationError("Approval token is required")

    result = await db.execute(
        select(PaymentApproval)
        .options(selectinload(PaymentApproval.payment))
        .where(PaymentApproval.token == token)
        .with_for_update()
    )
    approval = result.scalar_one_or_none()
    if not approval or approval.payment_id != payment_id:
        raise NotFound("Approval request not found")

    if approval.status != ApprovalStatus.PENDING:
        return None
    if utc_now() > ensure_utc(approval.expires_at):
        raise ValidationError("Approval link has expired")
    return approval


def apply_entitlement(company: Company, payment: Payment, now) -> None:
    """Write the subscription or scout fields a completed payment grants."""
    if payment.purpose == PaymentPurpose.SCOUT:
        company.has_scout_access = True
        company.scout_access_expiry = add_days(now, settings.scout_access_days)
    else:
        company.subscription_plan = payment.plan
        company.subscription_expiry = add_months(now, settings.subscription_period_months)


async def approve_payment(db: AsyncSession, payment_id: int, token: str) -> Dict[str, Any]:
    """
    Approve a payment and grant what it paid for.

    The approval, the payment status and the company's entitlement fields
    are written in one commit. Reusing a token returns the payment with
    ``already_processed`` set.
    """
    approval = await _load_pending_approval(db, payment_id, token)
    if approval is None:
        payment = await db.get(Payment, payment_id)
        return {**serialize_payment(payment), "already_processed": True}

    payment = approval.payment
    company = await db.get(Company, payment.company_id)
    current = utc_now()

    approval.status = ApprovalStatus.APPROVED
    approval.approved_at = current
    payment.status = PaymentStatus.COMPLETED
    payment.transaction_id = f"APPROVED-{int(current.timestamp() * 1000)}"
    apply_entitlement(company, payment, current)
    await db.commit()

    logger.info(f"Payment {payment.id} approved for company {company.id}")
    return {**serialize_payment(payment), "already_processed": False}


async def reject_payment(db: AsyncSession, payment_id: int, token: str) -> Dict[str, Any]:
    """Reject a payment; the company's entitlement is left untouched."""
    approval = await _load_pending_approval(db, payment_id, token)
    if approval is None:
        payment = await db.get(Payment, payment_id)
        return {**serialize_payment(payment), "already_processed": True}

    payment = approval.payment
    approval.status = ApprovalStatus.REJECTED
    payment.status = PaymentStatus.FAILED
    await db.commit()

    logger.info(f"Payment {payment.id} rejected")
    return {**serialize_payment(payment), "already_processed": False}
