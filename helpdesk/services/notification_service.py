"""
Notification fan-out and the read side of both notification surfaces.

Fan-out helpers never commit: they run inside the caller's transaction.
Metadata is validated against the type's schema before any write, so a
mismatched payload raises even when the write itself is best-effort.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.orm import Session

from helpdesk.config.settings import settings
from helpdesk.core.context import ActorContext
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import AdminNotificationType, ComplaintStatus, NotificationType
from helpdesk.models.meeting import Meeting
from helpdesk.models.notification import AdminNotification, Notification
from helpdesk.repositories.notification_repository import (
    AdminNotificationRepository,
    NotificationRepository,
)
from helpdesk.schemas.notification import (
    ComplaintSubmittedMetadata,
    FeedbackReceivedMetadata,
    MeetingCancelledMetadata,
    MeetingScheduledMetadata,
    NewComplaintMetadata,
    NotificationMetadata,
    NotificationStats,
    StatusUpdatedMetadata,
    validate_notification_metadata,
)
from helpdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)

MetadataInput = Union[NotificationMetadata, Mapping[str, Any]]


class NotificationService(BaseService[Notification, NotificationRepository]):
    """
    Writes per-user and admin notifications and serves their read side.
    """

    def __init__(self, db_session: Session):
        super().__init__(NotificationRepository(db_session), db_session)
        self.admin_repository = AdminNotificationRepository(db_session)
        self._logger = logger

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def send(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        metadata: MetadataInput,
        complaint_id: Optional[str] = None,
        ticket_id: Optional[str] = None,
        best_effort: bool = True,
    ) -> Optional[Notification]:
        """
        Insert a notification for one user.

        Args:
            user_id: Recipient
            notification_type: Closed notification type
            title: Short headline
            message: Body text
            metadata: Payload matching the type's metadata schema
            complaint_id: Related complaint, if any
            ticket_id: Related ticket, if any
            best_effort: Swallow (and log) insert failures

        Returns:
            The notification, or None when a best-effort insert failed

        Raises:
            ValidationError: If metadata does not match the type
        """
        payload = validate_notification_metadata(notification_type, metadata)
        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            meta=payload,
            complaint_id=complaint_id,
            ticket_id=ticket_id,
        )
        if not best_effort:
            return self.repository.create(notification)

        created = None
        with self.best_effort(
            "Notification insert",
            notification_type=notification_type.value,
            recipient_id=user_id,
        ):
            created = self.repository.create(notification)
        return created

    def send_admin(
        self,
        notification_type: AdminNotificationType,
        title: str,
        message: str,
        metadata: MetadataInput,
        user_id: Optional[str] = None,
        best_effort: bool = True,
    ) -> Optional[AdminNotification]:
        """Insert a notification on the shared admin surface."""
        payload = validate_notification_metadata(notification_type, metadata)
        notification = AdminNotification(
            notification_type=notification_type,
            title=title,
            message=message,
            meta=payload,
            user_id=user_id,
        )
        if not best_effort:
            return self.admin_repository.create(notification)

        created = None
        with self.best_effort(
            "Admin notification insert",
            notification_type=notification_type.value,
        ):
            created = self.admin_repository.create(notification)
        return created

    # --- Fan-out helpers -----------------------------------------------------

    def notify_complaint_submitted(self, complaint: Complaint) -> Optional[Notification]:
        return self.send(
            complaint.user_id,
            NotificationType.COMPLAINT_SUBMITTED,
            "Complaint submitted",
            f'Your complaint "{complaint.title}" has been submitted successfully.',
            ComplaintSubmittedMetadata(
                complaint_id=complaint.id,
                priority=complaint.priority,
                category=complaint.category,
            ),
            complaint_id=complaint.id,
        )

    def notify_admins_new_complaint(self, complaint: Complaint) -> Optional[AdminNotification]:
        return self.send_admin(
            AdminNotificationType.NEW_COMPLAINT,
            "New complaint received",
            f'New {complaint.priority.value} priority complaint: "{complaint.title}"',
            NewComplaintMetadata(
                complaint_id=complaint.id,
                user_id=complaint.user_id,
                priority=complaint.priority,
                category=complaint.category,
            ),
            user_id=complaint.user_id,
        )

    def notify_status_updated(
        self,
        complaint: Complaint,
        old_status: ComplaintStatus,
        new_status: ComplaintStatus,
    ) -> Optional[Notification]:
        return self.send(
            complaint.user_id,
            NotificationType.STATUS_UPDATED,
            "Complaint status updated",
            f'Your complaint "{complaint.title}" is now {new_status.value}.',
            StatusUpdatedMetadata(
                complaint_id=complaint.id,
                old_status=old_status,
                new_status=new_status,
            ),
            complaint_id=complaint.id,
        )

    def notify_meeting_scheduled(self, meeting: Meeting) -> Optional[Notification]:
        return self.send(
            meeting.invited_user_id,
            NotificationType.MEETING_SCHEDULED,
            "Meeting scheduled",
            f'A meeting "{meeting.title}" has been scheduled for '
            f'{meeting.schedule_time.strftime("%Y-%m-%d %H:%M")}.',
            MeetingScheduledMetadata(
                meeting_id=meeting.id,
                meet_link=meeting.meet_link,
                schedule_time=meeting.schedule_time,
                complaint_id=meeting.complaint_id,
            ),
            complaint_id=meeting.complaint_id,
        )

    def notify_meeting_cancelled(self, snapshot: Dict[str, Any]) -> Optional[Notification]:
        """Cancellation notice built from a snapshot of the deleted meeting."""
        return self.send(
            snapshot["invited_user_id"],
            NotificationType.MEETING_CANCELLED,
            "Meeting cancelled",
            f'The meeting "{snapshot["title"]}" has been cancelled.',
            MeetingCancelledMetadata(
                meeting_id=snapshot["id"],
                schedule_time=snapshot["schedule_time"],
                complaint_id=snapshot.get("complaint_id"),
            ),
            complaint_id=snapshot.get("complaint_id"),
        )

    def notify_feedback_received(
        self,
        complaint: Complaint,
        rating: int,
        comments: Optional[str],
    ) -> AdminNotification:
        """Written inside the feedback transaction; failures propagate."""
        return self.send_admin(
            AdminNotificationType.FEEDBACK_RECEIVED,
            "Feedback received",
            f'User rated complaint "{complaint.title}" {rating}/5.',
            FeedbackReceivedMetadata(
                complaint_id=complaint.id,
                rating=rating,
                has_comments=bool(comments),
            ),
            user_id=complaint.user_id,
            best_effort=False,
        )

    # -------------------------------------------------------------------------
    # User surface
    # -------------------------------------------------------------------------

    def list_notifications(
        self,
        actor: ActorContext,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        return self.repository.list_for_user(
            actor.user_id,
            limit=limit or settings.NOTIFICATION_LIST_LIMIT,
            unread_only=unread_only,
        )

    def get_stats(self, actor: ActorContext) -> NotificationStats:
        return NotificationStats(
            unread_count=self.repository.count_for_user(actor.user_id, unread_only=True),
            total_count=self.repository.count_for_user(actor.user_id),
        )

    def mark_as_read(self, actor: ActorContext, notification_ids: List[str]) -> int:
        """Mark the actor's own notifications read; other users' ids are ignored."""
        with self.transaction():
            return self.repository.mark_read(actor.user_id, notification_ids)

    def mark_all_as_read(self, actor: ActorContext) -> int:
        with self.transaction():
            updated = self.repository.mark_read(actor.user_id)
        self._logger.info(f"Marked {updated} notifications read for user {actor.user_id}")
        return updated

    # -------------------------------------------------------------------------
    # Admin surface
    # -------------------------------------------------------------------------

    def list_admin_notifications(
        self,
        actor: ActorContext,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[AdminNotification]:
        self._require_admin(actor, "view admin notifications")
        return self.admin_repository.list_recent(
            limit=limit or settings.NOTIFICATION_LIST_LIMIT,
            unread_only=unread_only,
        )

    def get_admin_stats(self, actor: ActorContext) -> NotificationStats:
        self._require_admin(actor, "view admin notifications")
        return NotificationStats(
            unread_count=self.admin_repository.count_unread(),
            total_count=self.admin_repository.count(),
        )

    def mark_admin_as_read(
        self,
        actor: ActorContext,
        notification_ids: Optional[List[str]] = None,
    ) -> int:
        self._require_admin(actor, "update admin notifications")
        with self.transaction():
            return self.admin_repository.mark_read(notification_ids)
