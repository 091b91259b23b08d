"""
Pydantic request/response schemas.
"""

from helpdesk.schemas.analytics import (
    ComplaintBreakdown,
    DashboardMetrics,
    NameValue,
    TrendPoint,
    UserComplaintStats,
)
from helpdesk.schemas.base import BaseSchema, MessageResponse
from helpdesk.schemas.complaint import (
    ComplaintCreate,
    ComplaintFilter,
    ComplaintResponse,
    ComplaintStatusUpdate,
    ComplaintUpdate,
)
from helpdesk.schemas.feedback import FeedbackCreate, FeedbackEligibility, FeedbackResponse
from helpdesk.schemas.meeting import MeetingCreate, MeetingResponse, MeetingStatusUpdate
from helpdesk.schemas.notification import (
    AdminNotificationResponse,
    MarkReadRequest,
    NotificationResponse,
    NotificationStats,
    validate_notification_metadata,
)
from helpdesk.schemas.ticket import (
    TicketAssign,
    TicketDetail,
    TicketFilter,
    TicketResponse,
    TicketStatusUpdate,
    TicketSyncReport,
)
from helpdesk.schemas.user import ChatMessage, ChatRequest, FunctionResponse, ProfileResponse

__all__ = [
    "AdminNotificationResponse",
    "BaseSchema",
    "ChatMessage",
    "ChatRequest",
    "ComplaintBreakdown",
    "ComplaintCreate",
    "ComplaintFilter",
    "ComplaintResponse",
    "ComplaintStatusUpdate",
    "ComplaintUpdate",
    "DashboardMetrics",
    "FeedbackCreate",
    "FeedbackEligibility",
    "FeedbackResponse",
    "FunctionResponse",
    "MarkReadRequest",
    "MeetingCreate",
    "MeetingResponse",
    "MeetingStatusUpdate",
    "MessageResponse",
    "NameValue",
    "NotificationResponse",
    "NotificationStats",
    "ProfileResponse",
    "TicketAssign",
    "TicketDetail",
    "TicketFilter",
    "TicketResponse",
    "TicketStatusUpdate",
    "TicketSyncReport",
    "TrendPoint",
    "UserComplaintStats",
    "validate_notification_metadata",
]
