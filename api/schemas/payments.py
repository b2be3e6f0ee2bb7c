"""Payment API schemas."""

from pydantic import BaseModel, Field

from database.models.companies import SubscriptionPlan
from database.models.payments import PaymentMethod, PaymentPurpose


class PaymentCreate(BaseModel):
    """Schema for opening a payment."""

    purpose: PaymentPurpose = Field(
        PaymentPurpose.SUBSCRIPTION, description="Subscription or scout add-on"
    )
    payment_method: PaymentMethod
    plan: SubscriptionPlan = SubscriptionPlan.BASIC
