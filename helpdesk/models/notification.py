"""
Notification models for the per-user and admin-wide surfaces.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.models.base import BaseModel, TimestampMixin
from helpdesk.models.enums import AdminNotificationType, NotificationType, enum_column
from helpdesk.utils.date_utils import now_utc

__all__ = ["Notification", "AdminNotification"]


class Notification(BaseModel, TimestampMixin):
    """
    Notification addressed to a single user.

    The metadata payload is validated against the schema bound to the
    notification type before it is written.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        enum_column(NotificationType, "notification_type"),
        nullable=False,
        index=True,
    )
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    complaint_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    ticket_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)


class AdminNotification(BaseModel):
    """Notification visible to every administrator."""

    __tablename__ = "admin_notifications"

    notification_type: Mapped[AdminNotificationType] = mapped_column(
        enum_column(AdminNotificationType, "admin_notification_type"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        index=True,
    )
