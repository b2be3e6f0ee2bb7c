"""Registration and login API schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from api.schemas.common import StrippedModel


class CompanyRegisterRequest(StrippedModel):
    """Schema for company registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    name: str = Field(..., min_length=1, max_length=255, description="Company name")
    phone_number: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)


class EngineerRegisterRequest(StrippedModel):
    """Schema for engineer registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    display_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    current_position: Optional[str] = Field(None, max_length=255)
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        """Validate phone number format."""
        if v and not any(c.isdigit() for c in v):
            raise ValueError("Phone must contain at least one digit")
        return v or None


class LoginRequest(BaseModel):
    """Email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthUser(BaseModel):
    id: int
    email: EmailStr
    role: Literal["COMPANY", "ENGINEER"]


class TokenResponse(BaseModel):
    """Access token issued on login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: AuthUser


class RegisteredResponse(BaseModel):
    """Result of a successful registration."""

    id: int = Field(description="Company or engineer profile id")
    user_id: int
    email: EmailStr
    role: Literal["COMPANY", "ENGINEER"]
