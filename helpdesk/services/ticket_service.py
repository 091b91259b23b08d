"""
Ticket lifecycle service and the realtime ticket synchronizer.

Ticket status changes never propagate to the complaint on their own;
mirroring is the separate `propagate_ticket_status` call.
"""

import logging
import random
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from helpdesk.config.settings import settings
from helpdesk.core.exceptions import ConflictError, DatabaseError, DuplicateEntryError
from helpdesk.core.logging import log_execution_time
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import TICKET_TO_COMPLAINT_STATUS, TicketStatus
from helpdesk.models.ticket import Ticket
from helpdesk.realtime.change_feed import ChangeFeed, Subscription
from helpdesk.realtime.events import ChangeEvent, ChangeType
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import ProfileRepository
from helpdesk.schemas.ticket import TicketFilter, TicketSyncReport
from helpdesk.services.base_service import BaseService
from helpdesk.services.notification_service import NotificationService
from helpdesk.utils.date_utils import compact_date, now_utc, today_utc

logger = logging.getLogger(__name__)

TICKET_NUMBER_PREFIX = "TKT"


def generate_ticket_number(on: Optional[date] = None) -> str:
    """Return a candidate number of the form TKT-YYYYMMDD-NNNN."""
    suffix = random.randint(1, 9999)
    return f"{TICKET_NUMBER_PREFIX}-{compact_date(on or today_utc())}-{suffix:04d}"


def feedback_resolution_note(rating: int) -> str:
    return f"Ticket closed after user feedback. Rating: {rating}/5"


class TicketService(BaseService[Ticket, TicketRepository]):
    """
    Ticket creation, reconciliation, status transitions and assignment.

    Ticket numbers are unique in the database; a colliding number is
    retried with a fresh one inside a savepoint.
    """

    def __init__(
        self,
        db_session: Session,
        number_factory: Callable[[], str] = generate_ticket_number,
    ):
        super().__init__(TicketRepository(db_session), db_session)
        self.complaint_repository = ComplaintRepository(db_session)
        self.profile_repository = ProfileRepository(db_session)
        self._number_factory = number_factory
        self._logger = logger

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_ticket(self, complaint_id: str) -> Ticket:
        """
        Insert an `open` ticket for a complaint, retrying number collisions.

        Runs inside the caller's transaction. If another ticket for the
        complaint appears meanwhile, that ticket is returned instead.

        Raises:
            ConflictError: When every attempt collided
        """
        max_attempts = settings.TICKET_NUMBER_MAX_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            ticket_number = self._number_factory()
            try:
                with self.db.begin_nested():
                    ticket = self.repository.create(Ticket(
                        complaint_id=complaint_id,
                        ticket_number=ticket_number,
                        status=TicketStatus.OPEN,
                    ))
                self._logger.info(
                    f"Created ticket {ticket.ticket_number} for complaint {complaint_id}"
                )
                return ticket
            except DuplicateEntryError:
                existing = self.repository.find_by_complaint_id(complaint_id)
                if existing is not None:
                    return existing
                self._logger.warning(
                    f"Ticket number {ticket_number} already taken "
                    f"(attempt {attempt}/{max_attempts})"
                )

        raise ConflictError(
            "Could not allocate a unique ticket number",
            details={"complaint_id": complaint_id, "attempts": max_attempts},
        )

    def ensure_ticket_for_complaint(self, complaint_id: str) -> Ticket:
        """
        Return the complaint's ticket, creating it if missing.

        Raises:
            ResourceNotFoundError: If the complaint does not exist
        """
        with self.transaction():
            self.complaint_repository.get_by_id(complaint_id)
            existing = self.repository.find_by_complaint_id(complaint_id)
            if existing is not None:
                return existing
            return self.create_ticket(complaint_id)

    @log_execution_time()
    def ensure_tickets_for_all_complaints(self) -> TicketSyncReport:
        """
        Create a ticket for every complaint that lacks one.

        Each insert is isolated in its own savepoint: a failure is logged,
        recorded in the report, and the pass continues. Idempotent.
        """
        report = TicketSyncReport()
        with self.transaction():
            complaint_ids = self.complaint_repository.all_ids()
            existing = self.repository.complaint_ids_with_tickets()
            missing = [cid for cid in complaint_ids if cid not in existing]

            report.total_complaints = len(complaint_ids)
            report.existing_tickets = len(existing)

            for complaint_id in missing:
                try:
                    self.create_ticket(complaint_id)
                    report.created += 1
                except (ConflictError, DatabaseError) as e:
                    report.failed_complaint_ids.append(complaint_id)
                    self._logger.warning(
                        f"Failed to create ticket for complaint {complaint_id}: {e}"
                    )

        if missing:
            self._logger.info(
                f"Ticket sync created {report.created} of {len(missing)} missing tickets"
            )
        return report

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_ticket_status(self, ticket_id: str, new_status: TicketStatus) -> Ticket:
        """
        Set a ticket's status; `resolved` also stamps `resolved_at`.

        The complaint is not touched.
        """
        new_status = TicketStatus(new_status)
        with self.transaction():
            ticket = self.repository.get_by_id(ticket_id)
            changes = {"status": new_status, "updated_at": now_utc()}
            if new_status is TicketStatus.RESOLVED:
                changes["resolved_at"] = now_utc()
            return self.repository.update(ticket, changes)

    def assign_ticket(self, ticket_id: str, assignee_id: str) -> Ticket:
        """Assign a ticket; an `open` ticket moves to `assigned`."""
        with self.transaction():
            ticket = self.repository.get_by_id(ticket_id)
            self.profile_repository.get_by_id(assignee_id)
            changes = {"assigned_to": assignee_id, "updated_at": now_utc()}
            if ticket.status is TicketStatus.OPEN:
                changes["status"] = TicketStatus.ASSIGNED
            return self.repository.update(ticket, changes)

    def propagate_ticket_status(self, ticket_id: str) -> Complaint:
        """
        Mirror the ticket's status onto its complaint.

        The owner is notified (best-effort) when the complaint status changes.
        """
        with self.transaction():
            ticket = self.repository.get_by_id(ticket_id)
            complaint = self.complaint_repository.get_by_id(ticket.complaint_id)
            old_status = complaint.status
            new_status = TICKET_TO_COMPLAINT_STATUS[ticket.status]
            if old_status is not new_status:
                self.complaint_repository.update(
                    complaint, {"status": new_status, "updated_at": now_utc()}
                )
                NotificationService(self.db).notify_status_updated(complaint, old_status, new_status)
            return complaint

    def close_for_feedback(self, complaint_id: str, rating: int) -> Ticket:
        """
        Close a complaint's ticket after feedback, creating it if missing.

        Runs inside the caller's transaction.
        """
        ticket = self.repository.find_by_complaint_id(complaint_id)
        if ticket is None:
            ticket = self.create_ticket(complaint_id)
        now = now_utc()
        return self.repository.update(ticket, {
            "status": TicketStatus.CLOSED,
            "resolved_at": now,
            "resolution_notes": feedback_resolution_note(rating),
            "updated_at": now,
        })

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_ticket(self, ticket_id: str) -> Ticket:
        return self.repository.get_by_id(ticket_id)

    def list_tickets(self, filters: Optional[TicketFilter] = None) -> List[Ticket]:
        filters = filters or TicketFilter()
        return self.repository.search(
            status=filters.status,
            priority=filters.priority,
            category=filters.category,
            search=filters.search,
        )


class TicketSynchronizer:
    """
    Realtime consumer keeping every complaint paired with a ticket.

    New complaints are handled incrementally from `complaints` INSERT events.
    Starting (or reconnecting) runs a full reconcile pass to cover anything
    missed while disconnected.
    """

    CHANNEL = "tickets-complaints-realtime"

    def __init__(self, session_factory: sessionmaker, feed: ChangeFeed):
        self.session_factory = session_factory
        self.feed = feed
        self._subscription: Optional[Subscription] = None

    @property
    def is_running(self) -> bool:
        return self._subscription is not None

    def start(self) -> TicketSyncReport:
        if self._subscription is None:
            self._subscription = self.feed.subscribe(
                self.CHANNEL,
                "complaints",
                self._on_complaint_inserted,
                events=[ChangeType.INSERT],
            )
        return self.full_sync()

    def stop(self) -> None:
        if self._subscription is not None:
            self.feed.unsubscribe(self._subscription)
            self._subscription = None

    def reconnect(self) -> TicketSyncReport:
        self.stop()
        return self.start()

    def full_sync(self) -> TicketSyncReport:
        with self.session_factory() as session:
            report = TicketService(session).ensure_tickets_for_all_complaints()
        logger.info(
            f"Ticket synchronizer pass: {report.created} created, "
            f"{len(report.failed_complaint_ids)} failed"
        )
        return report

    def _on_complaint_inserted(self, change: ChangeEvent) -> None:
        complaint_id = change.record_id
        if not complaint_id:
            return
        with self.session_factory() as session:
            TicketService(session).ensure_ticket_for_complaint(complaint_id)
