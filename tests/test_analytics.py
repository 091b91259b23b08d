from helpdesk.models.enums import ComplaintStatus, TicketStatus
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.services.analytics_service import AnalyticsService
from helpdesk.services.complaint_service import ComplaintService
from helpdesk.services.ticket_service import TicketService
from helpdesk.utils.date_utils import today_utc


def test_dashboard_metrics(db, user, other_user, admin, submit):
    first = submit(user)
    submit(user, title="Printer jam")
    submit(other_user, title="Email bouncing")
    submit(other_user, title="Slow laptop")

    tickets = TicketService(db)
    tickets.update_ticket_status(TicketRepository(db).find_by_complaint_id(first).id, TicketStatus.RESOLVED)

    metrics = AnalyticsService(db).dashboard_metrics()

    assert metrics.total_complaints == 4
    assert metrics.resolved_tickets == 1
    assert metrics.active_tickets == 3
    assert metrics.pending_tickets == 3
    assert metrics.resolution_rate == 25.0


def test_dashboard_metrics_on_empty_database(db):
    metrics = AnalyticsService(db).dashboard_metrics()
    assert metrics.total_complaints == 0
    assert metrics.resolution_rate == 0.0


def test_breakdowns_are_zero_filled_in_enum_order(db, user, admin, submit):
    complaint_id = submit(user)
    submit(user, title="Login loop", category="login_issue", priority="urgent")
    ComplaintService(db).update_complaint_status(admin, complaint_id, ComplaintStatus.RESOLVED)

    breakdown = AnalyticsService(db).breakdown()

    by_status = {item.name: item.value for item in breakdown.by_status}
    assert list(by_status) == ["Pending", "Accepted", "In Progress", "Resolved", "Closed"]
    assert by_status == {"Pending": 1, "Accepted": 0, "In Progress": 0, "Resolved": 1, "Closed": 0}

    by_category = {item.name: item.value for item in breakdown.by_category}
    assert by_category["network"] == 1
    assert by_category["login_issue"] == 1
    assert by_category["other"] == 0

    by_priority = {item.name: item.value for item in breakdown.by_priority}
    assert by_priority == {"low": 0, "medium": 0, "high": 1, "urgent": 1}


def test_trend_counts_today(db, user, submit):
    submit(user)
    submit(user, title="Second")

    trend = AnalyticsService(db).complaint_trend(days=7)

    assert len(trend) == 7
    assert trend[-1].date == today_utc()
    assert trend[-1].count == 2
    assert sum(point.count for point in trend) == 2


def test_user_stats_are_scoped(db, user, other_user, admin, submit):
    complaint_id = submit(user)
    submit(other_user, title="Theirs")
    ComplaintService(db).accept_complaint(admin, complaint_id)
    service = AnalyticsService(db)

    mine = service.user_complaint_stats(user)
    assert (mine.total, mine.pending, mine.accepted) == (1, 0, 1)

    # A user asking for someone else's numbers still gets their own
    assert service.user_complaint_stats(user, other_user.user_id).accepted == 1

    theirs = service.user_complaint_stats(admin, other_user.user_id)
    assert (theirs.total, theirs.pending) == (1, 1)
    assert service.pending_complaints_count() == 1
