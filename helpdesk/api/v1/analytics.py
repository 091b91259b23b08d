"""
Dashboard analytics endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from helpdesk.api.deps import get_actor, get_analytics_service, require_admin
from helpdesk.core.context import ActorContext
from helpdesk.schemas.analytics import (
    ComplaintBreakdown,
    DashboardMetrics,
    TrendPoint,
    UserComplaintStats,
)
from helpdesk.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics")


@router.get("/dashboard", response_model=DashboardMetrics)
def dashboard_metrics(
    actor: ActorContext = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DashboardMetrics:
    return service.dashboard_metrics()


@router.get("/breakdown", response_model=ComplaintBreakdown)
def complaint_breakdown(
    actor: ActorContext = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> ComplaintBreakdown:
    return service.breakdown()


@router.get("/trend", response_model=List[TrendPoint])
def complaint_trend(
    days: int = Query(default=7, ge=1, le=90),
    actor: ActorContext = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> List[TrendPoint]:
    return service.complaint_trend(days)


@router.get("/me", response_model=UserComplaintStats)
def my_complaint_stats(
    user_id: Optional[str] = None,
    actor: ActorContext = Depends(get_actor),
    service: AnalyticsService = Depends(get_analytics_service),
) -> UserComplaintStats:
    """The caller's complaint counts; admins may pass another user's id."""
    return service.user_complaint_stats(actor, user_id)
