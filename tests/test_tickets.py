import logging
import re
from itertools import chain, repeat

import pytest
from sqlalchemy import func, select

from helpdesk.core.exceptions import ConflictError, ResourceNotFoundError
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintStatus, NotificationType, TicketStatus
from helpdesk.models.notification import Notification
from helpdesk.models.ticket import Ticket
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.schemas.complaint import ComplaintCreate
from helpdesk.services.complaint_service import ComplaintService
from helpdesk.services.ticket_service import (
    TicketService,
    TicketSynchronizer,
    generate_ticket_number,
)

TICKET_NUMBER = re.compile(r"^TKT-\d{8}-\d{4}$")


def _ticket_for(db, complaint_id):
    return TicketRepository(db).find_by_complaint_id(complaint_id)


def _ticket_count(db):
    return db.scalar(select(func.count()).select_from(Ticket))


def test_generated_number_format():
    for _ in range(50):
        assert TICKET_NUMBER.match(generate_ticket_number())


def test_submission_creates_open_ticket(db, user, submit):
    complaint_id = submit(user)

    ticket = _ticket_for(db, complaint_id)
    assert ticket is not None
    assert ticket.status is TicketStatus.OPEN
    assert TICKET_NUMBER.match(ticket.ticket_number)


def test_number_collision_is_retried(db, user, submit):
    taken = "TKT-20250101-0001"
    first = TicketService(db, number_factory=lambda: taken)
    first_id = ComplaintService(db, ticket_service=first).submit_complaint(
        user, ComplaintCreate(title="First", description="d", category="network")
    ).id

    numbers = iter([taken, "TKT-20250101-0002"])
    second = TicketService(db, number_factory=lambda: next(numbers))
    second_id = ComplaintService(db, ticket_service=second).submit_complaint(
        user, ComplaintCreate(title="Second", description="d", category="network")
    ).id

    assert _ticket_for(db, first_id).ticket_number == taken
    assert _ticket_for(db, second_id).ticket_number == "TKT-20250101-0002"


def test_exhausted_numbers_fail_whole_submission(db, user):
    taken = "TKT-20250101-0001"
    ComplaintService(db, ticket_service=TicketService(db, number_factory=lambda: taken)).submit_complaint(
        user, ComplaintCreate(title="First", description="d", category="network")
    )

    service = ComplaintService(db, ticket_service=TicketService(db, number_factory=lambda: taken))
    with pytest.raises(ConflictError):
        service.submit_complaint(
            user, ComplaintCreate(title="Second", description="d", category="network")
        )

    assert db.scalar(select(func.count()).select_from(Complaint)) == 1
    assert _ticket_count(db) == 1


def test_sync_creates_one_ticket_per_complaint_and_is_idempotent(db, user, other_user, insert_complaint):
    ids = [insert_complaint(user), insert_complaint(user), insert_complaint(other_user)]

    report = TicketService(db).ensure_tickets_for_all_complaints()
    assert report.total_complaints == 3
    assert report.created == 3
    assert report.failed_complaint_ids == []

    again = TicketService(db).ensure_tickets_for_all_complaints()
    assert again.created == 0
    assert again.existing_tickets == 3
    assert _ticket_count(db) == 3
    for complaint_id in ids:
        assert _ticket_for(db, complaint_id) is not None


def test_sync_pass_logs_its_duration(db, caplog, user, insert_complaint):
    insert_complaint(user)
    caplog.set_level(logging.DEBUG, logger="helpdesk.services.ticket_service")

    TicketService(db).ensure_tickets_for_all_complaints()

    timed = [
        r for r in caplog.records
        if getattr(r, "function", None) == "ensure_tickets_for_all_complaints"
    ]
    assert len(timed) == 1
    assert timed[0].execution_time >= 0


def test_sync_continues_past_a_failing_complaint(db, user, insert_complaint):
    insert_complaint(user)
    insert_complaint(user)
    taken = "TKT-20250101-0001"
    # First complaint gets the number; the second one collides on every attempt
    numbers = chain([taken], repeat(taken))

    report = TicketService(db, number_factory=lambda: next(numbers)).ensure_tickets_for_all_complaints()

    assert report.created == 1
    assert len(report.failed_complaint_ids) == 1
    assert _ticket_count(db) == 1


def test_ensure_ticket_for_unknown_complaint(db):
    with pytest.raises(ResourceNotFoundError):
        TicketService(db).ensure_ticket_for_complaint("missing")


def test_resolving_ticket_stamps_resolved_at_and_leaves_complaint(db, user, submit):
    complaint_id = submit(user)
    ticket = _ticket_for(db, complaint_id)

    updated = TicketService(db).update_ticket_status(ticket.id, TicketStatus.RESOLVED)

    assert updated.status is TicketStatus.RESOLVED
    assert updated.resolved_at is not None
    assert db.get(Complaint, complaint_id).status is ComplaintStatus.PENDING


def test_other_status_does_not_stamp_resolved_at(db, user, submit):
    ticket = _ticket_for(db, submit(user))

    updated = TicketService(db).update_ticket_status(ticket.id, TicketStatus.IN_PROGRESS)

    assert updated.status is TicketStatus.IN_PROGRESS
    assert updated.resolved_at is None


def test_assign_moves_open_ticket_to_assigned(db, user, admin, submit):
    ticket = _ticket_for(db, submit(user))

    updated = TicketService(db).assign_ticket(ticket.id, admin.user_id)

    assert updated.assigned_to == admin.user_id
    assert updated.status is TicketStatus.ASSIGNED


def test_assign_to_unknown_profile(db, user, submit):
    ticket = _ticket_for(db, submit(user))

    with pytest.raises(ResourceNotFoundError):
        TicketService(db).assign_ticket(ticket.id, "nobody")


def test_propagation_mirrors_status_and_notifies_owner(db, user, submit):
    complaint_id = submit(user)
    ticket = _ticket_for(db, complaint_id)
    service = TicketService(db)
    service.update_ticket_status(ticket.id, TicketStatus.IN_PROGRESS)

    complaint = service.propagate_ticket_status(ticket.id)

    assert complaint.status is ComplaintStatus.IN_PROGRESS
    status_notes = db.scalars(
        select(Notification).where(
            Notification.user_id == user.user_id,
            Notification.type == NotificationType.STATUS_UPDATED,
        )
    ).all()
    assert len(status_notes) == 1
    assert status_notes[0].meta["new_status"] == "In Progress"


def test_synchronizer_creates_tickets_for_new_complaints(db, session_factory, feed, user, insert_complaint):
    backlog_id = insert_complaint(user)

    synchronizer = TicketSynchronizer(session_factory, feed)
    report = synchronizer.start()
    assert report.created == 1
    assert synchronizer.is_running

    new_id = insert_complaint(user)

    assert _ticket_for(db, backlog_id) is not None
    assert _ticket_for(db, new_id) is not None

    synchronizer.stop()
    assert not synchronizer.is_running
    db.commit()

    unsynced_id = insert_complaint(user)
    assert _ticket_for(db, unsynced_id) is None
