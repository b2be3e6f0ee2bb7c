"""
Entitlement evaluation for companies.

Pure functions over a company snapshot and an evaluation instant. The
snapshot is anything exposing the Company subscription, trial and scout
attributes (the ORM row itself in practice). Nothing here touches the
database or reads the clock unless ``now`` is omitted.

A branch is active only when its end date is strictly after ``now``;
missing dates always mean "not active" for that branch.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from core.config import settings
from core.errors import NotEntitled
from core.utils.datetime import days_until, ensure_utc, now as utc_now
from database.models.companies import SubscriptionPlan


class Feature(str, Enum):
    """Gated company features."""

    JOB_POSTING = "job_posting"
    PROJECT_POSTING = "project_posting"
    SCOUT = "scout"
    COMPANY_DETAIL = "company_detail"


@dataclass(frozen=True)
class TrialStatus:
    """Trial window state at an instant."""
    is_active: bool
    days_remaining: int
    has_expired: bool
    trial_end_date: Optional[datetime]


@dataclass(frozen=True)
class Entitlements:
    """Everything the dashboard needs to know about a company's access."""
    has_active_paid_plan: bool
    trial: TrialStatus
    can_access_paid_features: bool
    has_scout_access: bool
    subscription_plan: str
    subscription_expiry: Optional[datetime]
    scout_access_expiry: Optional[datetime]

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_active_paid_plan": self.has_active_paid_plan,
            "can_access_paid_features": self.can_access_paid_features,
            "has_scout_access": self.has_scout_access,
            "subscription_plan": self.subscription_plan,
            "subscription_expiry": _isoformat(self.subscription_expiry),
            "scout_access_expiry": _isoformat(self.scout_access_expiry),
            "trial_status": {
                "is_active": self.trial.is_active,
                "days_remaining": self.trial.days_remaining,
                "has_expired": self.trial.has_expired,
                "trial_end_date": _isoformat(self.trial.trial_end_date),
            },
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _is_after(deadline: Optional[datetime], now: datetime) -> bool:
    deadline = ensure_utc(deadline)
    return deadline is not None and deadline > ensure_utc(now)


def _plan_value(plan: Any) -> str:
    return plan.value if isinstance(plan, Enum) else str(plan)


def has_active_paid_plan(company: Any, now: Optional[datetime] = None) -> bool:
    """Paid (non-FREE) plan whose expiry is still in the future."""
    now = now or utc_now()
    plan = getattr(company, "subscription_plan", None)
    if plan is None or _plan_value(plan) == SubscriptionPlan.FREE.value:
        return False
    return _is_after(getattr(company, "subscription_expiry", None), now)


def check_trial_status(company: Any, now: Optional[datetime] = None) -> TrialStatus:
    """
    Compute trial state from the trial end date.

    The stored ``is_trial_active`` flag is deliberately ignored; it can be
    stale. ``has_expired`` is only true when a trial existed, has ended, and
    no paid plan currently covers the company.

    Args:
        company: Company snapshot
        now: Evaluation instant (defaults to current UTC time)

    Returns:
        TrialStatus
    """
    now = now or utc_now()
    trial_end = ensure_utc(getattr(company, "trial_end_date", None))

    if _is_after(trial_end, now):
        return TrialStatus(
            is_active=True,
            days_remaining=days_until(trial_end, now),
            has_expired=False,
            trial_end_date=trial_end,
        )

    has_expired = trial_end is not None and not has_active_paid_plan(company, now)
    return TrialStatus(
        is_active=False,
        days_remaining=0,
        has_expired=has_expired,
        trial_end_date=trial_end,
    )


def can_access_paid_features(company: Any, now: Optional[datetime] = None) -> bool:
    """Job/project posting and company-detail access: paid plan OR live trial."""
    now = now or utc_now()
    return has_active_paid_plan(company, now) or check_trial_status(company, now).is_active


def has_scout_access(company: Any, now: Optional[datetime] = None) -> bool:
    """Scout add-on, independent of the subscription."""
    now = now or utc_now()
    return bool(getattr(company, "has_scout_access", False)) and _is_after(
        getattr(company, "scout_access_expiry", None), now
    )


def evaluate(company: Any, now: Optional[datetime] = None) -> Entitlements:
    """Evaluate every entitlement branch at one instant."""
    now = now or utc_now()
    paid = has_active_paid_plan(company, now)
    trial = check_trial_status(company, now)
    plan = getattr(company, "subscription_plan", None) or SubscriptionPlan.FREE
    return Entitlements(
        has_active_paid_plan=paid,
        trial=trial,
        can_access_paid_features=paid or trial.is_active,
        has_scout_access=has_scout_access(company, now),
        subscription_plan=_plan_value(plan),
        subscription_expiry=ensure_utc(getattr(company, "subscription_expiry", None)),
        scout_access_expiry=ensure_utc(getattr(company, "scout_access_expiry", None)),
    )


def trial_message(company: Any, now: Optional[datetime] = None) -> dict[str, str]:
    """
    User-facing trial banner.

    Returns:
        {"message": str, "type": "success" | "warning" | "error"}
    """
    now = now or utc_now()
    trial = check_trial_status(company, now)

    if not getattr(company, "has_used_trial", False) and trial.trial_end_date is None:
        return {"message": "Your free trial has not started yet.", "type": "success"}

    if trial.is_active:
        message = f"{trial.days_remaining} day(s) left in your free trial."
        if trial.days_remaining <= settings.trial_warning_days:
            return {
                "message": message + " Please consider upgrading your plan.",
                "type": "warning",
            }
        return {"message": message, "type": "success"}

    if trial.has_expired:
        return {
            "message": "Your free trial has ended. Upgrade your plan to keep using paid features.",
            "type": "error",
        }

    return {"message": "", "type": "success"}


def require_paid_features(
    company: Any, feature: Feature, now: Optional[datetime] = None
) -> None:
    """Raise NotEntitled unless the company has a paid plan or live trial."""
    if not can_access_paid_features(company, now):
        raise NotEntitled(
            f"A paid plan is required to use {feature.value.replace('_', ' ')}.",
            feature=feature.value,
        )


def require_scout_access(company: Any, now: Optional[datetime] = None) -> None:
    """Scouting needs both posting entitlement and the scout add-on."""
    now = now or utc_now()
    require_paid_features(company, Feature.SCOUT, now)
    if not has_scout_access(company, now):
        raise NotEntitled(
            "The scout add-on must be purchased to send scout messages.",
            feature=Feature.SCOUT.value,
        )
