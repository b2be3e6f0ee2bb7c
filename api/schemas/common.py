"""Common Pydantic schemas shared across the API."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class ErrorDetail(BaseModel):
    """Body of an error response."""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human readable message")
    feature: Optional[str] = Field(None, description="Gated feature, for NOT_ENTITLED")
    requires_payment: Optional[bool] = Field(
        None, description="Whether paying would lift the restriction"
    )
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error response model."""

    error: ErrorDetail


class StrippedModel(BaseModel):
    """Base for request bodies whose string fields are trimmed."""

    @field_validator("*", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v
