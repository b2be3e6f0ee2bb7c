"""Application and message API schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from database.models.applications import ApplicationStatus

ResourceTypeLiteral = Literal["JOB", "PROJECT"]


class ApplicationCreate(BaseModel):
    """Schema for submitting an application."""

    resource_type: ResourceTypeLiteral = Field(
        "JOB", description="Whether the posting is a job or an IT project"
    )
    resource_id: int = Field(..., ge=1, description="Job or project id")
    cover_letter: Optional[str] = Field(None, max_length=10000)

    @field_validator("resource_type", mode="before")
    @classmethod
    def upper_resource_type(cls, v):
        return v.upper() if isinstance(v, str) else v


class StatusUpdate(BaseModel):
    """Schema for changing an application's status."""

    status: ApplicationStatus


class MessageCreate(BaseModel):
    """
    Schema for posting a message.

    Blank content is rejected by the service with EMPTY_CONTENT, so no
    minimum length is enforced here.
    """

    application_id: int = Field(..., ge=1)
    content: str = Field(..., max_length=10000)


class UnreadCountResponse(BaseModel):
    unread_count: int = Field(ge=0)
