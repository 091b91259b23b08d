"""
Notification repositories for the per-user and admin surfaces.

Read flags are updated through the ORM rather than bulk UPDATE statements so
realtime subscribers see each change.
"""

from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from helpdesk.models.notification import AdminNotification, Notification
from helpdesk.repositories.base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, session: Session):
        super().__init__(Notification, session)

    def list_for_user(
        self,
        user_id: str,
        limit: int = 50,
        unread_only: bool = False,
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return list(self.db.scalars(stmt))

    def count_for_user(self, user_id: str, unread_only: bool = False) -> int:
        stmt = select(func.count(Notification.id)).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        return self.db.scalar(stmt) or 0

    def mark_read(self, user_id: str, notification_ids: Optional[Iterable[str]] = None) -> int:
        """
        Mark the user's unread notifications read.

        Rows belonging to other users are never touched, even if their ids
        are passed.

        Returns:
            Number of rows changed
        """
        stmt = select(Notification).where(
            Notification.user_id == user_id,
            Notification.read.is_(False),
        )
        if notification_ids is not None:
            stmt = stmt.where(Notification.id.in_(list(notification_ids)))
        rows = list(self.db.scalars(stmt))
        for row in rows:
            row.read = True
        self.db.flush()
        return len(rows)


class AdminNotificationRepository(BaseRepository[AdminNotification]):

    def __init__(self, session: Session):
        super().__init__(AdminNotification, session)

    def list_recent(self, limit: int = 50, unread_only: bool = False) -> List[AdminNotification]:
        stmt = select(AdminNotification)
        if unread_only:
            stmt = stmt.where(AdminNotification.read.is_(False))
        stmt = stmt.order_by(AdminNotification.created_at.desc()).limit(limit)
        return list(self.db.scalars(stmt))

    def count_unread(self) -> int:
        return self.count({"read": False})

    def mark_read(self, notification_ids: Optional[Iterable[str]] = None) -> int:
        stmt = select(AdminNotification).where(AdminNotification.read.is_(False))
        if notification_ids is not None:
            stmt = stmt.where(AdminNotification.id.in_(list(notification_ids)))
        rows = list(self.db.scalars(stmt))
        for row in rows:
            row.read = True
        self.db.flush()
        return len(rows)
