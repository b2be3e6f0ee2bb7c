"""Import every model so relationships resolve and create_all sees all tables."""

from database.models.users import User, UserRole
from database.models.companies import Company, SubscriptionPlan
from database.models.engineers import Engineer
from database.models.jobs import Job, Project
from database.models.applications import (
    Application,
    ApplicationStatus,
    ReadMarker,
    ResourceType,
)
from database.models.communications import Message, ScoutEmail, SenderType
from database.models.payments import (
    ApprovalStatus,
    Payment,
    PaymentApproval,
    PaymentMethod,
    PaymentPurpose,
    PaymentStatus,
)

__all__ = [
    "User",
    "UserRole",
    "Company",
    "SubscriptionPlan",
    "Engineer",
    "Job",
    "Project",
    "Application",
    "ApplicationStatus",
    "ReadMarker",
    "ResourceType",
    "Message",
    "ScoutEmail",
    "SenderType",
    "ApprovalStatus",
    "Payment",
    "PaymentApproval",
    "PaymentMethod",
    "PaymentPurpose",
    "PaymentStatus",
]
