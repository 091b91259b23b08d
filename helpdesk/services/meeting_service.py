"""
Meeting scheduler.

Only administrators schedule, update and delete meetings. Reads are
filtered by the repository's visibility predicate, so a user can only ever
load meetings they are invited to.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import MissingFieldError, OwnershipError, ResourceNotFoundError, ValidationError
from helpdesk.models.enums import MeetingStatus
from helpdesk.models.meeting import Meeting
from helpdesk.models.user import AdminUser
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.meeting_repository import MeetingRepository
from helpdesk.repositories.user_repository import AdminUserRepository, ProfileRepository
from helpdesk.schemas.meeting import MeetingCreate
from helpdesk.services.base_service import BaseService
from helpdesk.services.notification_service import NotificationService
from helpdesk.utils.date_utils import now_utc, to_utc

logger = logging.getLogger(__name__)

REQUIRED_MEETING_FIELDS = (
    ("invited_user_id", "Invited user"),
    ("title", "Meeting title"),
    ("schedule_time", "Schedule time"),
    ("meet_link", "Meeting link"),
)

TERMINAL_MEETING_STATUSES = frozenset({MeetingStatus.COMPLETED, MeetingStatus.CANCELLED})


class MeetingService(BaseService[Meeting, MeetingRepository]):

    def __init__(self, db_session: Session):
        super().__init__(MeetingRepository(db_session), db_session)
        self.profile_repository = ProfileRepository(db_session)
        self.complaint_repository = ComplaintRepository(db_session)
        self.admin_user_repository = AdminUserRepository(db_session)
        self.notifications = NotificationService(db_session)
        self._logger = logger

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def schedule_meeting(self, actor: ActorContext, data: MeetingCreate) -> Meeting:
        """
        Schedule a meeting with a user, optionally tied to their complaint.

        Steps:
            1. Required fields must be present and non-blank.
            2. The invited user must exist.
            3. A supplied complaint must belong to the invited user; a
               missing complaint is dropped with a warning.
            4. The acting admin gets an admin_users record if absent.
            5. The meeting is inserted as `scheduled`.
            6. The invitee is notified (best-effort).

        Raises:
            AuthorizationError: If the actor is not an admin
            MissingFieldError: If a required field is missing or blank
            ResourceNotFoundError: If the invited user does not exist
            OwnershipError: If the complaint belongs to someone else
        """
        self._require_admin(actor, "schedule meetings")
        self._validate_required(data)

        with self.transaction():
            invitee = self.profile_repository.find_by_id(data.invited_user_id)
            if invitee is None:
                raise ResourceNotFoundError(
                    "User",
                    data.invited_user_id,
                    message="Invited user not found",
                )

            complaint_id = data.complaint_id or None
            if complaint_id:
                complaint = self.complaint_repository.find_by_id(complaint_id)
                if complaint is None:
                    self._logger.warning(
                        f"Complaint {complaint_id} not found; scheduling meeting without it"
                    )
                    complaint_id = None
                elif complaint.user_id != invitee.id:
                    raise OwnershipError(
                        "The selected complaint does not belong to the invited user",
                        details={"complaint_id": complaint_id, "invited_user_id": invitee.id},
                    )

            self._ensure_admin_record(actor)

            meeting = self.repository.create(Meeting(
                complaint_id=complaint_id,
                admin_id=actor.user_id,
                invited_user_id=invitee.id,
                title=data.title.strip(),
                description=data.description.strip() if data.description else None,
                schedule_time=to_utc(data.schedule_time),
                meet_link=data.meet_link.strip(),
                status=MeetingStatus.SCHEDULED,
            ))

            self.notifications.notify_meeting_scheduled(meeting)

        self._logger.info(f"Meeting {meeting.id} scheduled for user {meeting.invited_user_id}")
        return meeting

    @staticmethod
    def _validate_required(data: MeetingCreate) -> None:
        for field, label in REQUIRED_MEETING_FIELDS:
            value = getattr(data, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingFieldError(field, f"{label} is required")

    def _ensure_admin_record(self, actor: ActorContext) -> None:
        with self.best_effort("Admin record upsert", admin_id=actor.user_id):
            if self.admin_user_repository.find_by_user_id(actor.user_id) is None:
                self.admin_user_repository.create(AdminUser(
                    user_id=actor.user_id,
                    role=actor.role.value,
                ))

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_meeting_status(
        self,
        actor: ActorContext,
        meeting_id: str,
        status: MeetingStatus,
    ) -> Meeting:
        """Mark a meeting completed or cancelled."""
        self._require_admin(actor, "update meetings")
        status = MeetingStatus(status)
        if status not in TERMINAL_MEETING_STATUSES:
            raise ValidationError(
                "Meeting status can only be set to completed or cancelled",
                field_errors={"status": [f"unsupported value '{status.value}'"]},
            )
        with self.transaction():
            meeting = self.repository.get_by_id(meeting_id)
            return self.repository.update(meeting, {"status": status, "updated_at": now_utc()})

    def delete_meeting(self, actor: ActorContext, meeting_id: str) -> None:
        """Delete a meeting and tell the invitee it was cancelled (best-effort)."""
        self._require_admin(actor, "delete meetings")
        with self.transaction():
            meeting = self.repository.get_by_id(meeting_id)
            snapshot = {
                "id": meeting.id,
                "title": meeting.title,
                "invited_user_id": meeting.invited_user_id,
                "schedule_time": meeting.schedule_time,
                "complaint_id": meeting.complaint_id,
            }
            self.repository.delete(meeting)
            self.notifications.notify_meeting_cancelled(snapshot)

        self._logger.info(f"Meeting {meeting_id} deleted by {actor.user_id}")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_meetings(self, actor: ActorContext) -> List[Meeting]:
        return self.repository.list_visible(actor)

    def get_meeting(self, actor: ActorContext, meeting_id: str) -> Meeting:
        meeting = self.repository.find_visible(actor, meeting_id)
        if meeting is None:
            raise ResourceNotFoundError("Meeting", meeting_id)
        return meeting
