"""FastAPI dependencies for dependency injection."""

from typing import Optional
from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.actors import Actor, CompanyActor, EngineerActor
from core.errors import Unauthorized
from core.middleware.authentication import get_token_payload
from database.engine import get_db
from api.services import accounts as account_service

MAX_PAGE_SIZE = 100


async def get_optional_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Actor]:
    """
    Resolve the request's actor, or None for anonymous requests.

    The token claims are trusted for identity and role; the profile id is
    looked up so services can check ownership.
    """
    payload = get_token_payload(request)
    if not payload:
        return None
    return await account_service.load_actor(db, payload["user_id"])


async def require_actor(
    actor: Optional[Actor] = Depends(get_optional_actor),
) -> Actor:
    """Require an authenticated company or engineer."""
    if actor is None:
        raise Unauthorized()
    return actor


async def require_company(actor: Actor = Depends(require_actor)) -> CompanyActor:
    """Require a company account."""
    return actor.require_company()


async def require_engineer(actor: Actor = Depends(require_actor)) -> EngineerActor:
    """Require an engineer account."""
    return actor.require_engineer()


def get_pagination_params(
    page: int = Query(1, description="Page number (1-indexed)"),
    page_size: int = Query(50, description="Items per page"),
) -> dict:
    """
    Get pagination parameters.

    Args:
        page: Page number (1-indexed)
        page_size: Items per page

    Returns:
        Dictionary with offset and limit
    """
    if page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page must be >= 1"
        )

    if page_size < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page size must be >= 1"
        )

    page_size = min(page_size, MAX_PAGE_SIZE)

    return {
        "offset": (page - 1) * page_size,
        "limit": page_size,
        "page": page,
        "page_size": page_size,
    }
