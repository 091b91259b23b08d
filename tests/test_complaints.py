import pytest
from sqlalchemy import select

from helpdesk.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    OwnershipError,
    ResourceNotFoundError,
)
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import (
    AdminNotificationType,
    ComplaintStatus,
    NotificationType,
    TicketStatus,
)
from helpdesk.models.notification import AdminNotification, Notification
from helpdesk.models.ticket import Ticket
from helpdesk.models.user import EmployeeRecord
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.schemas.complaint import ComplaintFilter, ComplaintUpdate
from helpdesk.services.complaint_service import ComplaintService
from helpdesk.utils.date_utils import to_utc


def test_submission_writes_complaint_record_and_notifications(db, user, submit):
    complaint_id = submit(user, employee_id="E-1001", department="Finance")

    complaint = db.get(Complaint, complaint_id)
    assert complaint.status is ComplaintStatus.PENDING
    assert complaint.user_id == user.user_id

    record = db.scalar(select(EmployeeRecord).where(EmployeeRecord.user_id == user.user_id))
    assert record.employee_id == "E-1001"
    assert record.department == "Finance"
    assert record.total_complaints == 1

    notes = db.scalars(select(Notification).where(Notification.user_id == user.user_id)).all()
    assert [n.type for n in notes] == [NotificationType.COMPLAINT_SUBMITTED]
    assert notes[0].meta["complaint_id"] == complaint_id

    admin_notes = db.scalars(select(AdminNotification)).all()
    assert [n.notification_type for n in admin_notes] == [AdminNotificationType.NEW_COMPLAINT]


def test_second_submission_increments_employee_counter(db, user, submit):
    submit(user)
    submit(user, title="Printer jam")

    record = db.scalar(select(EmployeeRecord).where(EmployeeRecord.user_id == user.user_id))
    assert record.total_complaints == 2
    assert record.employee_id.startswith("EMP-")


def test_status_update_sets_status_and_advances_updated_at(db, user, admin, submit):
    complaint_id = submit(user)
    before = to_utc(db.get(Complaint, complaint_id).updated_at)

    for status in (ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED, ComplaintStatus.ACCEPTED):
        complaint = ComplaintService(db).update_complaint_status(admin, complaint_id, status)
        assert complaint.status is status
        after = to_utc(complaint.updated_at)
        assert after >= before
        before = after


def test_status_update_notifies_owner_only_on_change(db, user, admin, submit):
    complaint_id = submit(user)
    service = ComplaintService(db)

    service.update_complaint_status(admin, complaint_id, ComplaintStatus.IN_PROGRESS)
    service.update_complaint_status(admin, complaint_id, ComplaintStatus.IN_PROGRESS)

    updates = db.scalars(
        select(Notification).where(Notification.type == NotificationType.STATUS_UPDATED)
    ).all()
    assert len(updates) == 1
    assert updates[0].meta == {
        "complaint_id": complaint_id,
        "old_status": "Pending",
        "new_status": "In Progress",
    }


def test_status_update_requires_admin(db, user, submit):
    complaint_id = submit(user)
    with pytest.raises(AuthorizationError):
        ComplaintService(db).update_complaint_status(user, complaint_id, ComplaintStatus.RESOLVED)


def test_status_update_does_not_touch_ticket(db, user, admin, submit):
    complaint_id = submit(user)

    ComplaintService(db).accept_complaint(admin, complaint_id)

    assert db.get(Complaint, complaint_id).status is ComplaintStatus.ACCEPTED
    assert TicketRepository(db).find_by_complaint_id(complaint_id).status is TicketStatus.OPEN


def test_accept_only_from_pending(db, user, admin, submit):
    complaint_id = submit(user)
    service = ComplaintService(db)
    service.accept_complaint(admin, complaint_id)

    with pytest.raises(InvalidStateError, match="already accepted"):
        service.accept_complaint(admin, complaint_id)


def test_owner_edit_allowed_while_editable(db, user, admin, submit):
    complaint_id = submit(user)
    service = ComplaintService(db)

    updated = service.update_complaint(user, complaint_id, ComplaintUpdate(title="VPN still down"))
    assert updated.title == "VPN still down"

    service.update_complaint_status(admin, complaint_id, ComplaintStatus.IN_PROGRESS)
    with pytest.raises(InvalidStateError):
        service.update_complaint(user, complaint_id, ComplaintUpdate(title="Again"))


def test_admin_cannot_edit_someone_elses_content(db, user, admin, submit):
    complaint_id = submit(user)
    with pytest.raises(OwnershipError):
        ComplaintService(db).update_complaint(admin, complaint_id, ComplaintUpdate(title="Edited"))


def test_other_users_complaint_is_not_found(db, user, other_user, submit):
    complaint_id = submit(user)
    with pytest.raises(ResourceNotFoundError):
        ComplaintService(db).get_complaint(other_user, complaint_id)


def test_listing_is_scoped_for_users(db, user, other_user, admin, submit):
    submit(user)
    submit(other_user, title="Email bouncing")
    service = ComplaintService(db)

    assert {c.user_id for c in service.list_complaints(user)} == {user.user_id}
    assert len(service.list_complaints(admin)) == 2
    # A user cannot widen the listing through the filter
    scoped = service.list_complaints(user, ComplaintFilter(user_id=other_user.user_id))
    assert {c.user_id for c in scoped} == {user.user_id}


def test_listing_search_and_status_filter(db, user, admin, submit):
    vpn_id = submit(user)
    submit(user, title="Printer jam", description="Tray 2 keeps jamming")
    service = ComplaintService(db)
    service.update_complaint_status(admin, vpn_id, ComplaintStatus.RESOLVED)

    assert [c.id for c in service.list_complaints(admin, ComplaintFilter(search="vpn"))] == [vpn_id]
    resolved = service.list_complaints(admin, ComplaintFilter(status=ComplaintStatus.RESOLVED))
    assert [c.id for c in resolved] == [vpn_id]


def test_owner_deletes_pending_complaint_with_its_ticket(db, user, submit):
    complaint_id = submit(user)

    ComplaintService(db).delete_complaint(user, complaint_id)

    assert db.get(Complaint, complaint_id) is None
    assert db.scalar(select(Ticket).where(Ticket.complaint_id == complaint_id)) is None


def test_owner_cannot_delete_after_pending(db, user, admin, submit):
    complaint_id = submit(user)
    service = ComplaintService(db)
    service.accept_complaint(admin, complaint_id)

    with pytest.raises(InvalidStateError):
        service.delete_complaint(user, complaint_id)

    service.delete_complaint(admin, complaint_id)
    assert db.get(Complaint, complaint_id) is None
