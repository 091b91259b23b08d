"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the helpdesk service.
"""
from fastapi import APIRouter

from helpdesk.api.v1 import (
    analytics,
    complaints,
    feedback,
    health,
    meetings,
    notifications,
    realtime,
    tickets,
    users,
)
from helpdesk.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(health.router, tags=["Health"])
router.include_router(complaints.router, tags=["Complaint Management"])
router.include_router(tickets.router, tags=["Ticket Management"])
router.include_router(meetings.router, tags=["Meetings"])
router.include_router(notifications.router, tags=["Notifications"])
router.include_router(feedback.router, tags=["Feedback"])
router.include_router(analytics.router, tags=["Analytics & Reporting"])
router.include_router(users.router, tags=["User Management"])
router.include_router(users.chat_router, tags=["Assistant"])
router.include_router(realtime.router, tags=["Realtime"])

logger.debug(f"API v1 router assembled with {len(router.routes)} routes")
