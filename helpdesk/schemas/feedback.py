"""
Feedback schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from helpdesk.schemas.base import BaseCreateSchema, BaseSchema

__all__ = ["FeedbackCreate", "FeedbackEligibility", "FeedbackResponse"]


class FeedbackCreate(BaseCreateSchema):
    complaint_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5, description="Overall rating (1-5 stars)")
    comments: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("comments")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class FeedbackEligibility(BaseSchema):
    """Read-only eligibility verdict; `reason` is set when not eligible."""

    can_submit_feedback: bool
    reason: Optional[str] = None
    has_existing_feedback: bool = False


class FeedbackResponse(BaseSchema):
    id: str
    complaint_id: str
    user_id: str
    rating: int
    comments: Optional[str] = None
    submitted_at: datetime

    complaint_title: Optional[str] = None
    user_name: Optional[str] = None
