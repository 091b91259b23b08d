"""
Meeting schemas.

Required fields of `MeetingCreate` are declared optional on purpose: the
scheduler validates them itself so a missing value yields a descriptive
error naming the field.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from helpdesk.models.enums import MeetingStatus
from helpdesk.schemas.base import BaseCreateSchema, BaseResponseSchema, BaseSchema

__all__ = ["MeetingCreate", "MeetingStatusUpdate", "MeetingResponse"]


class MeetingCreate(BaseCreateSchema):
    invited_user_id: Optional[str] = Field(default=None, description="Profile id of the invitee")
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    schedule_time: Optional[datetime] = Field(default=None, description="Meeting start time")
    meet_link: Optional[str] = Field(default=None, max_length=1024, description="External meeting URL")
    complaint_id: Optional[str] = Field(default=None, description="Optional related complaint")


class MeetingStatusUpdate(BaseSchema):
    status: MeetingStatus


class MeetingResponse(BaseResponseSchema):
    complaint_id: Optional[str] = None
    admin_id: str
    invited_user_id: str
    title: str
    description: Optional[str] = None
    schedule_time: datetime
    meet_link: str
    status: MeetingStatus

    invitee_name: Optional[str] = None
    invitee_email: Optional[str] = None
    complaint_title: Optional[str] = None
