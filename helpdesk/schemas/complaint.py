"""
Complaint schemas for creation, owner edits, admin status changes and
listing filters.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from helpdesk.models.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus
from helpdesk.schemas.base import (
    BaseCreateSchema,
    BaseFilterSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)

__all__ = [
    "ComplaintCreate",
    "ComplaintUpdate",
    "ComplaintStatusUpdate",
    "ComplaintFilter",
    "ComplaintResponse",
]


class ComplaintCreate(BaseCreateSchema):
    """
    Complaint submission payload.

    The optional employee fields seed the submitter's employee record the
    first time they file a complaint.
    """

    title: str = Field(..., min_length=1, max_length=255, description="Brief complaint summary")
    description: str = Field(..., min_length=1, description="Detailed complaint description")
    category: ComplaintCategory = Field(..., description="Primary complaint category")
    priority: ComplaintPriority = Field(
        default=ComplaintPriority.MEDIUM,
        description="Complaint priority level (defaults to medium)",
    )
    attachment: Optional[str] = Field(
        default=None,
        max_length=1024,
        description="Opaque reference to an uploaded file",
    )

    full_name: Optional[str] = Field(default=None, max_length=255)
    employee_id: Optional[str] = Field(default=None, max_length=64)
    department: Optional[str] = Field(default=None, max_length=255)

    @field_validator("title", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace only")
        return v

    @field_validator("attachment", "full_name", "employee_id", "department")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ComplaintUpdate(BaseUpdateSchema):
    """Owner edits, allowed while the complaint is Pending or Accepted."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[ComplaintCategory] = None
    priority: Optional[ComplaintPriority] = None
    attachment: Optional[str] = Field(default=None, max_length=1024)


class ComplaintStatusUpdate(BaseSchema):
    status: ComplaintStatus = Field(..., description="New complaint status")


class ComplaintFilter(BaseFilterSchema):
    """Listing filters. `user_id` is only honoured for admins."""

    status: Optional[ComplaintStatus] = None
    priority: Optional[ComplaintPriority] = None
    category: Optional[ComplaintCategory] = None
    user_id: Optional[str] = None
    search: Optional[str] = Field(default=None, max_length=255)
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class ComplaintResponse(BaseResponseSchema):
    user_id: str
    title: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus
    attachment: Optional[str] = None
    ai_resolved: bool = False
    ticket_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime
