"""Scout API schemas."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class ScoutSendRequest(BaseModel):
    """
    Schema for sending scout messages.

    Accepts a single ``engineer_id`` or a list in ``engineer_ids``, and the
    body as ``content`` or ``message``.
    """

    engineer_id: Optional[int] = None
    engineer_ids: Optional[list[int]] = None
    job_id: Optional[int] = None
    subject: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    message: Optional[str] = None
    match_score: Optional[float] = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def merge_aliases(self):
        if not self.engineer_ids and self.engineer_id is not None:
            self.engineer_ids = [self.engineer_id]
        if not self.content and self.message:
            self.content = self.message
        return self

    @property
    def recipients(self) -> list[int]:
        return self.engineer_ids or []
