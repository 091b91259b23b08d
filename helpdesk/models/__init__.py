"""
ORM models. Importing this package registers every table on `Base.metadata`.
"""

from helpdesk.models.base import Base, BaseModel, TimestampMixin
from helpdesk.models.complaint import Complaint
from helpdesk.models.feedback import Feedback
from helpdesk.models.meeting import Meeting
from helpdesk.models.notification import AdminNotification, Notification
from helpdesk.models.ticket import Ticket
from helpdesk.models.user import AdminUser, EmployeeRecord, Profile

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "Complaint",
    "Feedback",
    "Meeting",
    "Notification",
    "AdminNotification",
    "Ticket",
    "Profile",
    "EmployeeRecord",
    "AdminUser",
]
