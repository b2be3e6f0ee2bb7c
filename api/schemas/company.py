"""Company profile and posting API schemas."""

from typing import Optional
from pydantic import Field, model_validator

from api.schemas.common import StrippedModel


class CompanyProfileUpdate(StrippedModel):
    """Editable company profile fields; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    email_notification_enabled: Optional[bool] = None


class JobCreate(StrippedModel):
    """Schema for posting a job."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: Optional[str] = Field(None, max_length=255)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    remote_ok: bool = False

    @model_validator(mode="after")
    def check_salary_range(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min cannot exceed salary_max")
        return self


class ProjectCreate(StrippedModel):
    """Schema for posting an IT project."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: Optional[str] = Field(None, max_length=255)
    monthly_rate: Optional[int] = Field(None, ge=0)
