"""
Dashboard and analytics schemas.
"""

from datetime import date
from typing import List

from pydantic import Field

from helpdesk.schemas.base import BaseSchema

__all__ = [
    "DashboardMetrics",
    "NameValue",
    "ComplaintBreakdown",
    "TrendPoint",
    "UserComplaintStats",
]


class DashboardMetrics(BaseSchema):
    total_complaints: int = 0
    active_tickets: int = Field(0, description="open, assigned or in_progress")
    resolved_tickets: int = Field(0, description="resolved or closed")
    pending_tickets: int = Field(0, description="open")
    ai_resolved_complaints: int = 0
    resolution_rate: float = Field(0.0, description="Resolved tickets as a percentage, one decimal")


class NameValue(BaseSchema):
    """Chart-ready bucket."""

    name: str
    value: int


class ComplaintBreakdown(BaseSchema):
    by_category: List[NameValue] = Field(default_factory=list)
    by_priority: List[NameValue] = Field(default_factory=list)
    by_status: List[NameValue] = Field(default_factory=list)


class TrendPoint(BaseSchema):
    date: date
    count: int


class UserComplaintStats(BaseSchema):
    total: int = 0
    pending: int = 0
    accepted: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
