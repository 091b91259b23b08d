"""
Business services. Each service operation is one database transaction.
"""

from helpdesk.services.analytics_service import AnalyticsService
from helpdesk.services.base_service import BaseService
from helpdesk.services.complaint_service import ComplaintService
from helpdesk.services.feedback_service import FeedbackService
from helpdesk.services.meeting_service import MeetingService
from helpdesk.services.notification_service import NotificationService
from helpdesk.services.ticket_service import TicketService, TicketSynchronizer, generate_ticket_number
from helpdesk.services.user_service import UserService

__all__ = [
    "AnalyticsService",
    "BaseService",
    "ComplaintService",
    "FeedbackService",
    "MeetingService",
    "NotificationService",
    "TicketService",
    "TicketSynchronizer",
    "UserService",
    "generate_ticket_number",
]
