from helpdesk.repositories.base_repository import BaseRepository
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.feedback_repository import FeedbackRepository
from helpdesk.repositories.meeting_repository import MeetingRepository
from helpdesk.repositories.notification_repository import (
    AdminNotificationRepository,
    NotificationRepository,
)
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import (
    AdminUserRepository,
    EmployeeRecordRepository,
    ProfileRepository,
)

__all__ = [
    "AdminNotificationRepository",
    "AdminUserRepository",
    "BaseRepository",
    "ComplaintRepository",
    "EmployeeRecordRepository",
    "FeedbackRepository",
    "MeetingRepository",
    "NotificationRepository",
    "ProfileRepository",
    "TicketRepository",
]
