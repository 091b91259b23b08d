"""
Notification endpoints for the per-user inbox and the shared admin inbox.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from helpdesk.api.deps import get_actor, get_notification_service
from helpdesk.core.context import ActorContext
from helpdesk.schemas.base import MessageResponse
from helpdesk.schemas.notification import (
    AdminNotificationResponse,
    MarkReadRequest,
    NotificationResponse,
    NotificationStats,
)
from helpdesk.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications")


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    unread_only: bool = False,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> List[NotificationResponse]:
    notifications = service.list_notifications(actor, unread_only=unread_only, limit=limit)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/stats", response_model=NotificationStats)
def notification_stats(
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationStats:
    return service.get_stats(actor)


@router.post("/read", response_model=MessageResponse)
def mark_notifications_read(
    payload: MarkReadRequest,
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    updated = service.mark_as_read(actor, payload.notification_ids)
    return MessageResponse(message="Notifications marked as read", count=updated)


@router.post("/read-all", response_model=MessageResponse)
def mark_all_notifications_read(
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    updated = service.mark_all_as_read(actor)
    return MessageResponse(message="All notifications marked as read", count=updated)


@router.get("/admin", response_model=List[AdminNotificationResponse])
def list_admin_notifications(
    unread_only: bool = False,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> List[AdminNotificationResponse]:
    notifications = service.list_admin_notifications(actor, unread_only=unread_only, limit=limit)
    return [AdminNotificationResponse.model_validate(n) for n in notifications]


@router.get("/admin/stats", response_model=NotificationStats)
def admin_notification_stats(
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationStats:
    return service.get_admin_stats(actor)


@router.post("/admin/read", response_model=MessageResponse)
def mark_admin_notifications_read(
    payload: Optional[MarkReadRequest] = Body(default=None),
    actor: ActorContext = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    """Mark the given admin notifications read, or all of them without a body."""
    ids = payload.notification_ids if payload is not None else None
    updated = service.mark_admin_as_read(actor, ids)
    return MessageResponse(message="Admin notifications marked as read", count=updated)
