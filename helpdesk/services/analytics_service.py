"""
Dashboard and analytics aggregates.
"""

import logging
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Dict, List, Type

from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import (
    ACTIVE_TICKET_STATUSES,
    RESOLVED_TICKET_STATUSES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    TicketStatus,
)
from helpdesk.repositories.complaint_repository import ComplaintRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.schemas.analytics import (
    ComplaintBreakdown,
    DashboardMetrics,
    NameValue,
    TrendPoint,
    UserComplaintStats,
)
from helpdesk.services.base_service import BaseService
from helpdesk.utils.date_utils import UTC, daterange, to_utc, today_utc

logger = logging.getLogger(__name__)


def _buckets(counts: Dict[str, int], enum_cls: Type) -> List[NameValue]:
    """Every enum member in declaration order, zero-filled."""
    return [NameValue(name=member.value, value=counts.get(member.value, 0)) for member in enum_cls]


class AnalyticsService(BaseService[Complaint, ComplaintRepository]):
    """Read-only aggregates for the admin dashboard and user widgets."""

    def __init__(self, db_session: Session):
        super().__init__(ComplaintRepository(db_session), db_session)
        self.ticket_repository = TicketRepository(db_session)
        self._logger = logger

    def dashboard_metrics(self) -> DashboardMetrics:
        ticket_counts = self.ticket_repository.count_by_status()
        active = sum(ticket_counts.get(s.value, 0) for s in ACTIVE_TICKET_STATUSES)
        resolved = sum(ticket_counts.get(s.value, 0) for s in RESOLVED_TICKET_STATUSES)
        total_tickets = sum(ticket_counts.values())

        return DashboardMetrics(
            total_complaints=self.repository.count(),
            active_tickets=active,
            resolved_tickets=resolved,
            pending_tickets=ticket_counts.get(TicketStatus.OPEN.value, 0),
            ai_resolved_complaints=self.repository.count_ai_resolved(),
            resolution_rate=round(resolved * 100.0 / total_tickets, 1) if total_tickets else 0.0,
        )

    def pending_complaints_count(self) -> int:
        return self.repository.count({"status": ComplaintStatus.PENDING})

    def complaints_by_category(self) -> List[NameValue]:
        return _buckets(self.repository.count_by_category(), ComplaintCategory)

    def complaints_by_priority(self) -> List[NameValue]:
        return _buckets(self.repository.count_by_priority(), ComplaintPriority)

    def complaints_by_status(self) -> List[NameValue]:
        return _buckets(self.repository.count_by_status(), ComplaintStatus)

    def breakdown(self) -> ComplaintBreakdown:
        return ComplaintBreakdown(
            by_category=self.complaints_by_category(),
            by_priority=self.complaints_by_priority(),
            by_status=self.complaints_by_status(),
        )

    def complaint_trend(self, days: int = 7) -> List[TrendPoint]:
        """
        Complaints filed per day over the last `days` days, oldest first.

        Days without complaints are included with a zero count.
        """
        days = max(days, 1)
        end = today_utc()
        start = end - timedelta(days=days - 1)
        since = datetime.combine(start, time.min, tzinfo=UTC)

        per_day = Counter(to_utc(ts).date() for ts in self.repository.created_since(since))
        return [TrendPoint(date=day, count=per_day.get(day, 0)) for day in daterange(start, end)]

    def user_complaint_stats(self, actor: ActorContext, user_id: str = None) -> UserComplaintStats:
        """Status counts for one user's complaints; non-admins only see their own."""
        target = user_id if (user_id and actor.is_admin) else actor.user_id
        counts = self.repository.count_by_status(user_id=target)
        return UserComplaintStats(
            total=sum(counts.values()),
            pending=counts.get(ComplaintStatus.PENDING.value, 0),
            accepted=counts.get(ComplaintStatus.ACCEPTED.value, 0),
            in_progress=counts.get(ComplaintStatus.IN_PROGRESS.value, 0),
            resolved=counts.get(ComplaintStatus.RESOLVED.value, 0),
            closed=counts.get(ComplaintStatus.CLOSED.value, 0),
        )
