"""
API Services Layer.

Database operations behind the API endpoints. Every function takes the
request's session and, where access depends on who is asking, its actor.
"""

from api.services.accounts import (
    register_company,
    register_engineer,
    authenticate,
    load_actor,
)

from api.services.applications import (
    submit_application,
    get_application,
    list_applications,
    set_status,
)

from api.services.messages import (
    post_message,
    list_messages,
    applications_with_unread,
    unread_total,
)

from api.services.companies import (
    get_company_profile,
    update_company_profile,
    get_subscription_status,
    get_dashboard,
)

from api.services.postings import (
    create_job,
    create_project,
    list_jobs,
    list_projects,
)

from api.services.engineers import (
    get_engineer_profile,
)

from api.services.scout import (
    send_scout,
    list_scout_emails,
    read_scout_email,
    reply_scout_email,
)

from api.services.payments import (
    create_payment,
    get_payment_status,
    request_approval,
    approve_payment,
    reject_payment,
)

__all__ = [
    # Accounts
    "register_company",
    "register_engineer",
    "authenticate",
    "load_actor",
    # Applications
    "submit_application",
    "get_application",
    "list_applications",
    "set_status",
    # Messages
    "post_message",
    "list_messages",
    "applications_with_unread",
    "unread_total",
    # Companies
    "get_company_profile",
    "update_company_profile",
    "get_subscription_status",
    "get_dashboard",
    # Postings
    "create_job",
    "create_project",
    "list_jobs",
    "list_projects",
    # Engineers
    "get_engineer_profile",
    # Scout
    "send_scout",
    "list_scout_emails",
    "read_scout_email",
    "reply_scout_email",
    # Payments
    "create_payment",
    "get_payment_status",
    "request_approval",
    "approve_payment",
    "reject_payment",
]
