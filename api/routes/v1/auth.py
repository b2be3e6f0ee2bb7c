"""
Authentication endpoints.

Provides:
- Company signup (starts the free trial)
- Engineer signup
- Email/password login issuing a bearer token
"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from database.engine import get_db
from database.models.users import UserRole
from api.schemas.auth import (
    CompanyRegisterRequest,
    EngineerRegisterRequest,
    LoginRequest,
    RegisteredResponse,
    TokenResponse,
)
from api.schemas.common import ErrorResponse
from api.services import accounts as account_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register/company",
    response_model=RegisteredResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a company",
    responses={409: {"model": ErrorResponse}},
)
async def register_company(
    request: CompanyRegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisteredResponse:
    """
    Create a company account.

    The company starts on the FREE plan with a free trial running from now.
    """
    company = await account_service.register_company(
        db,
        email=request.email,
        password=request.password,
        name=request.name,
        phone_number=request.phone_number,
        website=request.website,
        description=request.description,
    )
    return RegisteredResponse(
        id=company.id,
        user_id=company.user_id,
        email=request.email,
        role=UserRole.COMPANY.value,
    )


@router.post(
    "/register/engineer",
    response_model=RegisteredResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an engineer",
    responses={409: {"model": ErrorResponse}},
)
async def register_engineer(
    request: EngineerRegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisteredResponse:
    """Create an engineer account."""
    engineer = await account_service.register_engineer(
        db,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        display_name=request.display_name,
        phone_number=request.phone_number,
        current_position=request.current_position,
        years_of_experience=request.years_of_experience,
    )
    return RegisteredResponse(
        id=engineer.id,
        user_id=engineer.user_id,
        email=request.email,
        role=UserRole.ENGINEER.value,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    responses={401: {"model": ErrorResponse}},
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Exchange email and password for an access token."""
    result = await account_service.authenticate(db, request.email, request.password)
    return TokenResponse(**result)
