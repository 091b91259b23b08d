"""
Ticket schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from helpdesk.models.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    TicketStatus,
)
from helpdesk.schemas.base import BaseFilterSchema, BaseResponseSchema, BaseSchema

__all__ = [
    "TicketStatusUpdate",
    "TicketAssign",
    "TicketFilter",
    "TicketResponse",
    "TicketComplaintSummary",
    "TicketDetail",
    "TicketSyncReport",
]


class TicketStatusUpdate(BaseSchema):
    status: TicketStatus = Field(..., description="New ticket status")


class TicketAssign(BaseSchema):
    assignee_id: str = Field(..., min_length=1, description="Profile id of the assignee")


class TicketFilter(BaseFilterSchema):
    """Filters applied to the ticket/complaint join."""

    status: Optional[TicketStatus] = None
    priority: Optional[ComplaintPriority] = None
    category: Optional[ComplaintCategory] = None
    search: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Matches ticket number or complaint title",
    )


class TicketResponse(BaseResponseSchema):
    ticket_number: str
    complaint_id: str
    status: TicketStatus
    assigned_to: Optional[str] = None
    resolution_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None


class TicketComplaintSummary(BaseSchema):
    id: str
    user_id: str
    title: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus


class TicketDetail(TicketResponse):
    """Ticket joined with the complaint it tracks."""

    complaint: Optional[TicketComplaintSummary] = None


class TicketSyncReport(BaseSchema):
    """Outcome of a reconcile pass over complaints lacking tickets."""

    total_complaints: int = 0
    existing_tickets: int = 0
    created: int = 0
    failed_complaint_ids: List[str] = Field(default_factory=list)
