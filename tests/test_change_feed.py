import pytest
from sqlalchemy import select

from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintStatus, NotificationType
from helpdesk.models.notification import Notification
from helpdesk.realtime.change_feed import ChangeFeed, parse_filter
from helpdesk.realtime.events import ChangeEvent, ChangeType
from helpdesk.realtime.reconciler import ChangeReconciler, IndexedCollection
from helpdesk.services.complaint_service import ComplaintService
from helpdesk.services.notification_service import NotificationService


def test_parse_filter():
    assert parse_filter("user_id=eq.abc") == {"user_id": "abc"}
    assert parse_filter(None) == {}
    for bad in ("user_id", "user_id=gt.5", "=eq.x"):
        with pytest.raises(ValueError):
            parse_filter(bad)


def test_publish_respects_table_filter_and_event_type():
    feed = ChangeFeed()
    everything, inserts, mine = [], [], []
    feed.subscribe("all", "complaints", everything.append)
    feed.subscribe("inserts", "complaints", inserts.append, events=["INSERT"])
    feed.subscribe("mine", "complaints", mine.append, filter="user_id=eq.u1")

    feed.publish(ChangeEvent("complaints", ChangeType.INSERT, new={"id": "1", "user_id": "u1"}))
    feed.publish(ChangeEvent("complaints", ChangeType.UPDATE, new={"id": "2", "user_id": "u2"}))
    feed.publish(ChangeEvent("tickets", ChangeType.INSERT, new={"id": "3"}))

    assert [c.record_id for c in everything] == ["1", "2"]
    assert [c.record_id for c in inserts] == ["1"]
    assert [c.record_id for c in mine] == ["1"]


def test_failing_subscriber_does_not_block_others():
    feed = ChangeFeed()
    received = []

    def broken(change):
        raise RuntimeError("boom")

    feed.subscribe("a", "tickets", broken)
    feed.subscribe("b", "tickets", received.append)

    delivered = feed.publish(ChangeEvent("tickets", ChangeType.INSERT, new={"id": "1"}))

    assert delivered == 1
    assert len(received) == 1


def test_unsubscribe_and_remove_channel():
    feed = ChangeFeed()
    first = feed.subscribe("meetings-integration", "meetings", lambda c: None)
    feed.subscribe("meetings-integration", "complaints", lambda c: None)

    assert feed.unsubscribe(first) is True
    assert feed.unsubscribe(first.id) is False
    assert feed.remove_channel("meetings-integration") == 1
    assert feed.subscriptions == []


def test_events_are_published_only_on_commit(db, feed, user, submit):
    received = []
    feed.subscribe("watch", "complaints", received.append)

    complaint_id = submit(user)

    assert [(c.type, c.record_id) for c in received] == [(ChangeType.INSERT, complaint_id)]
    assert received[0].new["status"] == "Pending"


def test_rolled_back_transaction_publishes_nothing(db, feed, user, insert_complaint):
    complaint_id = insert_complaint(user)
    received = []
    feed.subscribe("watch", "complaints", received.append)

    complaint = db.get(Complaint, complaint_id)
    complaint.status = ComplaintStatus.CLOSED
    db.flush()
    db.rollback()

    assert received == []
    assert db.get(Complaint, complaint_id).status is ComplaintStatus.PENDING


def test_rolled_back_savepoint_events_are_dropped(db, feed, user):
    received = []
    feed.subscribe("watch", "notifications", received.append)
    service = NotificationService(db)

    with service.transaction():
        kept = service.send(
            user.user_id,
            NotificationType.COMPLAINT_SUBMITTED,
            "Kept",
            "Body",
            {"complaint_id": "c-1", "priority": "low", "category": "other"},
        )
        savepoint = db.begin_nested()
        db.add(Notification(
            user_id=user.user_id,
            type=NotificationType.COMPLAINT_SUBMITTED,
            title="Dropped",
            message="Body",
            meta={"complaint_id": "c-2", "priority": "low", "category": "other"},
        ))
        db.flush()
        savepoint.rollback()

    assert [c.new["title"] for c in received] == ["Kept"]
    assert received[0].record_id == kept.id


def test_update_event_carries_old_values(db, feed, user, admin, submit):
    complaint_id = submit(user)
    received = []
    feed.subscribe("watch", "complaints", received.append, events=["UPDATE"])

    ComplaintService(db).update_complaint_status(admin, complaint_id, ComplaintStatus.RESOLVED)

    assert len(received) == 1
    assert received[0].new["status"] == "Resolved"
    assert received[0].old["status"] == "Pending"
    assert received[0].old["id"] == complaint_id


def test_delete_event_carries_row(db, feed, user, submit):
    complaint_id = submit(user)
    received = []
    feed.subscribe("watch", "complaints", received.append, events=["DELETE"])

    ComplaintService(db).delete_complaint(user, complaint_id)

    assert [c.record_id for c in received] == [complaint_id]
    assert received[0].new == {}
    assert received[0].old["title"] == "VPN down"


def test_indexed_collection_merges_rows():
    rows = IndexedCollection([{"id": "1", "read": False, "title": "a"}])
    rows.upsert({"id": "1", "read": True})
    rows.upsert({"id": "2", "read": False})

    assert rows.get("1") == {"id": "1", "read": True, "title": "a"}
    assert len(rows) == 2
    assert rows.remove("2") == {"id": "2", "read": False}
    assert "2" not in rows


def test_reconciler_applies_changes_and_reloads_on_reconnect(db, feed, user):
    def load():
        stmt = select(Notification).where(Notification.user_id == user.user_id)
        rows = [n.to_dict() for n in db.scalars(stmt)]
        db.commit()
        return rows

    reconciler = ChangeReconciler(
        feed, "notifications-badge", "notifications", load, filter=f"user_id=eq.{user.user_id}"
    )
    reconciler.start()
    assert reconciler.rows() == []
    assert reconciler.reload_count == 1

    service = NotificationService(db)
    with service.transaction():
        note = service.send(
            user.user_id,
            NotificationType.COMPLAINT_SUBMITTED,
            "Hello",
            "Body",
            {"complaint_id": "c-1", "priority": "low", "category": "other"},
        )
    note_id = note.id
    assert [r["id"] for r in reconciler.rows()] == [note_id]
    assert reconciler.collection.get(note_id)["read"] is False

    service.mark_all_as_read(user)
    assert reconciler.collection.get(note_id)["read"] is True
    # Incremental merges never refetch
    assert reconciler.reload_count == 1

    with service.transaction():
        db.delete(db.get(Notification, note_id))
    assert reconciler.rows() == []

    reconciler.reconnect()
    assert reconciler.reload_count == 2
    assert reconciler.is_connected

    reconciler.stop()
    assert feed.subscriptions == []
