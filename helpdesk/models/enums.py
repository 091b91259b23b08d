"""
Database enums mirroring schema enums.

Provides SQLAlchemy-compatible enum definitions that match
the Pydantic schema enums for consistency.
"""

import enum
from typing import Type

from sqlalchemy import Enum as SAEnum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AccountStatus(str, enum.Enum):
    """Profile account status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DEACTIVATED = "deactivated"


class ComplaintStatus(str, enum.Enum):
    """Complaint lifecycle status."""
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class ComplaintCategory(str, enum.Enum):
    """Complaint categorization."""
    SOFTWARE_BUG = "software_bug"
    LOGIN_ISSUE = "login_issue"
    PERFORMANCE = "performance"
    NETWORK = "network"
    TECHNICAL_SUPPORT = "technical_support"
    OTHER = "other"


class ComplaintPriority(str, enum.Enum):
    """Complaint priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketStatus(str, enum.Enum):
    """Ticket tracking status."""
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class MeetingStatus(str, enum.Enum):
    """Meeting status."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationType(str, enum.Enum):
    """Per-user notification types."""
    COMPLAINT_SUBMITTED = "complaint_submitted"
    STATUS_UPDATED = "status_updated"
    MEETING_SCHEDULED = "meeting_scheduled"
    MEETING_CANCELLED = "meeting_cancelled"


class AdminNotificationType(str, enum.Enum):
    """Admin-wide notification types."""
    NEW_COMPLAINT = "new_complaint"
    FEEDBACK_RECEIVED = "feedback_received"


# Statuses in which the owner may still edit the complaint
EDITABLE_COMPLAINT_STATUSES = frozenset({ComplaintStatus.PENDING, ComplaintStatus.ACCEPTED})

# Statuses in which feedback may be submitted
FEEDBACK_ELIGIBLE_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})

ACTIVE_TICKET_STATUSES = frozenset({
    TicketStatus.OPEN,
    TicketStatus.ASSIGNED,
    TicketStatus.IN_PROGRESS,
})

RESOLVED_TICKET_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})

# Explicit ticket -> complaint status mirror
TICKET_TO_COMPLAINT_STATUS = {
    TicketStatus.OPEN: ComplaintStatus.PENDING,
    TicketStatus.ASSIGNED: ComplaintStatus.ACCEPTED,
    TicketStatus.IN_PROGRESS: ComplaintStatus.IN_PROGRESS,
    TicketStatus.RESOLVED: ComplaintStatus.RESOLVED,
    TicketStatus.CLOSED: ComplaintStatus.CLOSED,
}


def enum_column(enum_cls: Type[enum.Enum], name: str) -> SAEnum:
    """Portable enum column type storing member values rather than names."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
