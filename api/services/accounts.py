"""
Account service functions: registration, login and actor resolution.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import Actor, build_actor
from core.config import settings
from core.errors import DuplicateAccount, Unauthorized
from core.security import create_access_token, hash_password, verify_password
from core.utils.datetime import add_days, now as utc_now
from database.models.companies import Company, SubscriptionPlan
from database.models.engineers import Engineer
from database.models.users import User, UserRole

logger = logging.getLogger(__name__)


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(User.email == email))
    return result.scalar_one_or_none() is not None


async def _commit_new_account(db: AsyncSession, email: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateAccount()
    logger.info(f"Registered account {email}")


async def register_company(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    phone_number: Optional[str] = None,
    website: Optional[str] = None,
    description: Optional[str] = None,
) -> Company:
    """
    Register a company account with a free trial starting now.

    Raises:
        DuplicateAccount: If the email is already registered
    """
    if await _email_taken(db, email):
        raise DuplicateAccount()

    started = utc_now()
    user = User(email=email, password_hash=hash_password(password), role=UserRole.COMPANY)
    company = Company(
        user=user,
        name=name,
        phone_number=phone_number,
        website=website,
        description=description,
        subscription_plan=SubscriptionPlan.FREE,
        trial_start_date=started,
        trial_end_date=add_days(started, settings.trial_period_days),
        has_used_trial=True,
        is_trial_active=True,
    )
    db.add_all([user, company])
    await _commit_new_account(db, email)
    return company


async def register_engineer(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    display_name: Optional[str] = None,
    phone_number: Optional[str] = None,
    current_position: Optional[str] = None,
    years_of_experience: Optional[int] = None,
) -> Engineer:
    """
    Register an engineer account.

    Raises:
        DuplicateAccount: If the email is already registered
    """
    if await _email_taken(db, email):
        raise DuplicateAccount()

    user = User(email=email, password_hash=hash_password(password), role=UserRole.ENGINEER)
    engineer = Engineer(
        user=user,
        first_name=first_name,
        last_name=last_name,
        display_name=display_name,
        phone_number=phone_number,
        current_position=current_position,
        years_of_experience=years_of_experience,
    )
    db.add_all([user, engineer])
    await _commit_new_account(db, email)
    return engineer


async def authenticate(db: AsyncSession, email: str, password: str) -> Dict[str, Any]:
    """
    Check credentials and issue an access token.

    Returns:
        Dictionary with the token and the user's id and role

    Raises:
        Unauthorized: Unknown email, wrong password or inactive account
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Unauthorized("Account is inactive")

    token = create_access_token(user_id=user.id, email=user.email, role=user.role.value)
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
        "user": {"id": user.id, "email": user.email, "role": user.role.value},
    }


async def load_actor(db: AsyncSession, user_id: int) -> Actor:
    """
    Build the actor for an authenticated user id.

    Raises:
        Unauthorized: User missing, inactive, or without a profile for its role
    """
    result = await db.execute(
        select(User)
        .options(selectinload(User.company), selectinload(User.engineer))
        .where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise Unauthorized("User account not found or inactive")

    profile = user.company if user.role == UserRole.COMPANY else user.engineer
    if profile is None:
        raise Unauthorized("User has no profile for its role")

    return build_actor(user.id, user.role, profile.id)
