"""
Core complaint service: submission, owner edits, admin status changes,
deletion and listings.

Submission writes the complaint and its ticket in one transaction; the
notifications that follow are best-effort and never fail the submission.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import InvalidStateError, OwnershipError, ResourceNotFoundError
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintStatus
from helpdesk.models.user import EmployeeRecord
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.feedback_repository import FeedbackRepository
from helpdesk.repositories.meeting_repository import MeetingRepository
from helpdesk.repositories.user_repository import EmployeeRecordRepository, ProfileRepository
from helpdesk.schemas.complaint import ComplaintCreate, ComplaintFilter, ComplaintUpdate
from helpdesk.services.base_service import BaseService
from helpdesk.services.notification_service import NotificationService
from helpdesk.services.ticket_service import TicketService
from helpdesk.utils.date_utils import now_utc

logger = logging.getLogger(__name__)


class ComplaintService(BaseService[Complaint, ComplaintRepository]):
    """
    High-level complaint operations service.

    Owners submit and edit their complaints; administrators change status,
    accept, and delete.
    """

    def __init__(self, db_session: Session, ticket_service: Optional[TicketService] = None):
        """
        Initialize complaint service.

        Args:
            db_session: Active database session
            ticket_service: Ticket service sharing the same session
        """
        super().__init__(ComplaintRepository(db_session), db_session)
        self.tickets = ticket_service or TicketService(db_session)
        self.notifications = NotificationService(db_session)
        self.profile_repository = ProfileRepository(db_session)
        self.employee_repository = EmployeeRecordRepository(db_session)
        self.feedback_repository = FeedbackRepository(db_session)
        self.meeting_repository = MeetingRepository(db_session)
        self._logger = logger

    # -------------------------------------------------------------------------
    # Create & Update Operations
    # -------------------------------------------------------------------------

    def submit_complaint(self, actor: ActorContext, data: ComplaintCreate) -> Complaint:
        """
        Submit a new complaint.

        Ensures the submitter's employee record exists, inserts the complaint
        as Pending together with its ticket, then fans out notifications to
        the owner and the admin surface.

        Args:
            actor: Submitting user
            data: Complaint creation data

        Returns:
            The created complaint
        """
        self._logger.info(f"Submitting complaint for user {actor.user_id}")

        with self.transaction():
            self._ensure_employee_record(actor, data)

            complaint = self.repository.create(Complaint(
                user_id=actor.user_id,
                title=data.title,
                description=data.description,
                category=data.category,
                priority=data.priority,
                attachment=data.attachment,
                status=ComplaintStatus.PENDING,
            ))
            ticket = self.tickets.create_ticket(complaint.id)

            self.notifications.notify_complaint_submitted(complaint)
            self.notifications.notify_admins_new_complaint(complaint)

        self._logger.info(
            f"Complaint {complaint.id} submitted with ticket {ticket.ticket_number}"
        )
        return complaint

    def _ensure_employee_record(self, actor: ActorContext, data: ComplaintCreate) -> EmployeeRecord:
        """Create the employee record on first submission and bump its counter."""
        record = self.employee_repository.find_by_user_id(actor.user_id)
        if record is None:
            profile = self.profile_repository.get_by_id(actor.user_id)
            record = self.employee_repository.create(EmployeeRecord(
                user_id=actor.user_id,
                employee_id=data.employee_id or f"EMP-{actor.user_id[:8].upper()}",
                full_name=data.full_name or profile.full_name or profile.email or actor.user_id,
                department=data.department,
                total_complaints=0,
            ))
        return self.employee_repository.update(
            record, {"total_complaints": record.total_complaints + 1}
        )

    def update_complaint(
        self,
        actor: ActorContext,
        complaint_id: str,
        changes: ComplaintUpdate,
    ) -> Complaint:
        """
        Owner edit of content fields, allowed while Pending or Accepted.

        Raises:
            OwnershipError: If the actor does not own the complaint
            InvalidStateError: If the complaint is past Accepted
        """
        with self.transaction():
            complaint = self.get_complaint(actor, complaint_id)
            if not actor.owns(complaint.user_id):
                raise OwnershipError("You can only edit your own complaints")
            if not complaint.is_editable:
                raise InvalidStateError(
                    f"Complaint can no longer be edited (status: {complaint.status.value})",
                    details={"status": complaint.status.value},
                )
            data = changes.model_dump(exclude_unset=True, exclude_none=True)
            if data:
                data["updated_at"] = now_utc()
                self.repository.update(complaint, data)
            return complaint

    def update_complaint_status(
        self,
        actor: ActorContext,
        complaint_id: str,
        status: ComplaintStatus,
    ) -> Complaint:
        """
        Admin status change.

        The row's status becomes exactly `status` and `updated_at` advances.
        The ticket is left alone; see `TicketService.propagate_ticket_status`
        for the opposite direction.
        """
        self._require_admin(actor, "change complaint status")
        status = ComplaintStatus(status)

        with self.transaction():
            complaint = self.repository.get_by_id(complaint_id)
            old_status = complaint.status
            self.repository.update(complaint, {"status": status, "updated_at": now_utc()})
            if old_status is not status:
                self.notifications.notify_status_updated(complaint, old_status, status)

        self._logger.info(
            f"Complaint {complaint_id} status {old_status.value} -> {status.value} "
            f"by {actor.user_id}"
        )
        return complaint

    def accept_complaint(self, actor: ActorContext, complaint_id: str) -> Complaint:
        """
        Move a Pending complaint to Accepted.

        Raises:
            InvalidStateError: If the complaint is not Pending
        """
        self._require_admin(actor, "accept complaints")
        with self.transaction():
            complaint = self.repository.get_by_id(complaint_id)
            if complaint.status is not ComplaintStatus.PENDING:
                raise InvalidStateError(
                    "Complaint is already accepted",
                    details={"status": complaint.status.value},
                )
            return self.update_complaint_status(actor, complaint_id, ComplaintStatus.ACCEPTED)

    def delete_complaint(self, actor: ActorContext, complaint_id: str) -> None:
        """
        Delete a complaint with its ticket and feedback; meetings are detached.

        Admins may delete any complaint, owners only while it is Pending.
        """
        with self.transaction():
            complaint = self.get_complaint(actor, complaint_id)
            if not actor.is_admin:
                if not actor.owns(complaint.user_id):
                    raise OwnershipError("You can only delete your own complaints")
                if complaint.status is not ComplaintStatus.PENDING:
                    raise InvalidStateError(
                        "Only pending complaints can be deleted",
                        details={"status": complaint.status.value},
                    )

            for feedback in self.feedback_repository.find_by_complaint_id(complaint_id):
                self.feedback_repository.delete(feedback)
            for meeting in self.meeting_repository.find_by_complaint_id(complaint_id):
                self.meeting_repository.update(meeting, {"complaint_id": None})
            self.repository.delete(complaint)

        self._logger.info(f"Complaint {complaint_id} deleted by {actor.user_id}")

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def get_complaint(self, actor: ActorContext, complaint_id: str) -> Complaint:
        """
        Fetch a complaint visible to the actor.

        Other users' complaints are reported as not found.
        """
        complaint = self.repository.find_by_id(complaint_id)
        if complaint is None or not (actor.is_admin or actor.owns(complaint.user_id)):
            raise ResourceNotFoundError("Complaint", complaint_id)
        return complaint

    def list_complaints(
        self,
        actor: ActorContext,
        filters: Optional[ComplaintFilter] = None,
    ) -> List[Complaint]:
        """Admins see every complaint; users only their own."""
        filters = filters or ComplaintFilter()
        user_id = filters.user_id if actor.is_admin else actor.user_id
        return self.repository.search(
            status=filters.status,
            priority=filters.priority,
            category=filters.category,
            user_id=user_id,
            search=filters.search,
            skip=filters.offset,
            limit=filters.limit,
        )
