"""
Feedback closing loop.

Submitting feedback closes the complaint and its ticket and notifies the
admin surface. The feedback row and the three follow-up writes commit or
roll back together.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import (
    DuplicateEntryError,
    InvalidStateError,
    OwnershipError,
    ResourceNotFoundError,
)
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintStatus
from helpdesk.models.feedback import Feedback
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.feedback_repository import FeedbackRepository
from helpdesk.schemas.feedback import FeedbackCreate, FeedbackEligibility
from helpdesk.services.base_service import BaseService
from helpdesk.services.notification_service import NotificationService
from helpdesk.services.ticket_service import TicketService
from helpdesk.utils.date_utils import now_utc

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "Complaint not found"
REASON_NOT_OWNER = "You can only provide feedback for your own complaints"
REASON_NOT_RESOLVED = "Feedback can only be submitted for resolved or closed complaints"
REASON_ALREADY_SUBMITTED = "Feedback has already been submitted for this complaint"


class FeedbackService(BaseService[Feedback, FeedbackRepository]):

    def __init__(self, db_session: Session, ticket_service: TicketService = None):
        super().__init__(FeedbackRepository(db_session), db_session)
        self.complaint_repository = ComplaintRepository(db_session)
        self.tickets = ticket_service or TicketService(db_session)
        self.notifications = NotificationService(db_session)
        self._logger = logger

    def check_feedback_eligibility(self, actor: ActorContext, complaint_id: str) -> FeedbackEligibility:
        """
        Read-only eligibility check.

        Never raises for an ineligible request; the verdict carries the
        reason instead.
        """
        complaint = self.complaint_repository.find_by_id(complaint_id)
        if complaint is None:
            return FeedbackEligibility(can_submit_feedback=False, reason=REASON_NOT_FOUND)

        if not actor.owns(complaint.user_id):
            return FeedbackEligibility(can_submit_feedback=False, reason=REASON_NOT_OWNER)

        existing = self.repository.find_for(complaint_id, actor.user_id)
        if not complaint.accepts_feedback:
            return FeedbackEligibility(
                can_submit_feedback=False,
                reason=REASON_NOT_RESOLVED,
                has_existing_feedback=existing is not None,
            )
        if existing is not None:
            return FeedbackEligibility(
                can_submit_feedback=False,
                reason=REASON_ALREADY_SUBMITTED,
                has_existing_feedback=True,
            )
        return FeedbackEligibility(can_submit_feedback=True)

    def submit_feedback(self, actor: ActorContext, data: FeedbackCreate) -> Feedback:
        """
        Record feedback and run the closing loop in one transaction.

        Raises:
            ResourceNotFoundError: Complaint does not exist
            OwnershipError: Actor does not own the complaint
            InvalidStateError: Complaint is not Resolved or Closed
            DuplicateEntryError: Feedback already submitted
        """
        eligibility = self.check_feedback_eligibility(actor, data.complaint_id)
        if not eligibility.can_submit_feedback:
            self._raise_ineligible(data.complaint_id, eligibility)

        with self.transaction():
            feedback = self.repository.create(Feedback(
                complaint_id=data.complaint_id,
                user_id=actor.user_id,
                rating=data.rating,
                comments=data.comments,
                submitted_at=now_utc(),
            ))
            self.process_feedback_submission(data.complaint_id, data.rating, data.comments)

        self._logger.info(
            f"Feedback {feedback.id} recorded for complaint {data.complaint_id} "
            f"(rating {data.rating})"
        )
        return feedback

    @staticmethod
    def _raise_ineligible(complaint_id: str, eligibility: FeedbackEligibility) -> None:
        reason = eligibility.reason
        if reason == REASON_NOT_FOUND:
            raise ResourceNotFoundError("Complaint", complaint_id)
        if reason == REASON_NOT_OWNER:
            raise OwnershipError(reason, details={"complaint_id": complaint_id})
        if reason == REASON_ALREADY_SUBMITTED:
            raise DuplicateEntryError(reason, details={"complaint_id": complaint_id})
        raise InvalidStateError(reason, details={"complaint_id": complaint_id})

    def process_feedback_submission(self, complaint_id: str, rating: int, comments: str = None) -> Complaint:
        """
        Close the complaint and its ticket, then notify admins.

        1. complaint status -> Closed
        2. ticket status -> closed, resolved_at stamped, rating in the note
        3. feedback_received admin notification

        Runs inside the caller's transaction when there is one; a failure
        in any step rolls back all of them.
        """
        with self.transaction():
            complaint = self.complaint_repository.get_by_id(complaint_id)
            self.complaint_repository.update(
                complaint, {"status": ComplaintStatus.CLOSED, "updated_at": now_utc()}
            )
            self.tickets.close_for_feedback(complaint_id, rating)
            self.notifications.notify_feedback_received(complaint, rating, comments)
            return complaint

    def list_feedback(self, actor: ActorContext) -> List[Feedback]:
        """All feedback with complaint title and user name (admins only)."""
        self._require_admin(actor, "view feedback")
        return self.repository.list_enriched()
