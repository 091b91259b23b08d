from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from helpdesk.core.exceptions import AuthorizationError, ValidationError
from helpdesk.models.enums import (
    AdminNotificationType,
    ComplaintCategory,
    ComplaintPriority,
    NotificationType,
)
from helpdesk.models.notification import Notification
from helpdesk.schemas.notification import (
    ComplaintSubmittedMetadata,
    MeetingScheduledMetadata,
    validate_notification_metadata,
)
from helpdesk.services.notification_service import NotificationService


def _send(service, actor, title="Hello"):
    return service.send(
        actor.user_id,
        NotificationType.COMPLAINT_SUBMITTED,
        title,
        "Body",
        ComplaintSubmittedMetadata(
            complaint_id="c-1",
            priority=ComplaintPriority.LOW,
            category=ComplaintCategory.OTHER,
        ),
    )


def test_metadata_must_match_type():
    with pytest.raises(ValidationError):
        validate_notification_metadata(
            NotificationType.COMPLAINT_SUBMITTED,
            MeetingScheduledMetadata(
                meeting_id="m-1",
                meet_link="https://meet.example/x",
                schedule_time=datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
            ),
        )


def test_metadata_rejects_unknown_and_missing_keys():
    with pytest.raises(ValidationError):
        validate_notification_metadata(
            NotificationType.STATUS_UPDATED,
            {"complaint_id": "c-1", "old_status": "Pending", "new_status": "Closed", "extra": 1},
        )
    with pytest.raises(ValidationError):
        validate_notification_metadata(AdminNotificationType.FEEDBACK_RECEIVED, {"complaint_id": "c-1"})


def test_metadata_mapping_is_normalized_to_json():
    payload = validate_notification_metadata(
        NotificationType.MEETING_SCHEDULED,
        {
            "meeting_id": "m-1",
            "meet_link": "https://meet.example/x",
            "schedule_time": datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
        },
    )
    assert payload["meet_link"] == "https://meet.example/x"
    assert isinstance(payload["schedule_time"], str)
    assert payload["complaint_id"] is None


def test_mismatched_metadata_is_not_swallowed_by_best_effort(db, user):
    service = NotificationService(db)
    with pytest.raises(ValidationError):
        service.send(
            user.user_id,
            NotificationType.STATUS_UPDATED,
            "Status",
            "Body",
            {"complaint_id": "c-1"},
        )
    db.commit()
    assert db.scalar(select(func.count()).select_from(Notification)) == 0


def test_best_effort_insert_failure_is_swallowed(db):
    service = NotificationService(db)
    with service.transaction():
        # Unknown recipient violates the profiles foreign key
        created = service.send(
            "no-such-profile",
            NotificationType.COMPLAINT_SUBMITTED,
            "Hello",
            "Body",
            {"complaint_id": "c-1", "priority": "low", "category": "other"},
        )
    assert created is None
    assert db.scalar(select(func.count()).select_from(Notification)) == 0


def test_stats_and_mark_read(db, user):
    service = NotificationService(db)
    with service.transaction():
        first = _send(service, user, "First")
        _send(service, user, "Second")
    first_id = first.id

    assert service.get_stats(user).model_dump() == {"unread_count": 2, "total_count": 2}

    assert service.mark_as_read(user, [first_id]) == 1
    assert service.get_stats(user).unread_count == 1
    assert [n.title for n in service.list_notifications(user, unread_only=True)] == ["Second"]

    assert service.mark_all_as_read(user) == 1
    assert service.get_stats(user).unread_count == 0


def test_marking_another_users_notification_has_no_effect(db, user, other_user):
    service = NotificationService(db)
    with service.transaction():
        theirs = _send(service, other_user)
    theirs_id = theirs.id

    assert service.mark_as_read(user, [theirs_id]) == 0
    assert service.get_stats(other_user).unread_count == 1
    assert db.get(Notification, theirs_id).read is False


def test_admin_surface(db, user, admin, submit):
    submit(user)
    service = NotificationService(db)

    with pytest.raises(AuthorizationError):
        service.list_admin_notifications(user)

    notes = service.list_admin_notifications(admin)
    assert [n.notification_type for n in notes] == [AdminNotificationType.NEW_COMPLAINT]
    assert service.get_admin_stats(admin).unread_count == 1

    assert service.mark_admin_as_read(admin) == 1
    assert service.get_admin_stats(admin).model_dump() == {"unread_count": 0, "total_count": 1}
