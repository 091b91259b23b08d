"""
Complaint repository: filtered listing and aggregate counts.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.exceptions import DatabaseError
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus
from helpdesk.repositories.base_repository import BaseRepository


class ComplaintRepository(BaseRepository[Complaint]):
    """Data access for complaints."""

    def __init__(self, session: Session):
        super().__init__(Complaint, session)

    # ==================== Queries ====================

    def search(
        self,
        status: Optional[ComplaintStatus] = None,
        priority: Optional[ComplaintPriority] = None,
        category: Optional[ComplaintCategory] = None,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Complaint]:
        """
        List complaints newest first.

        Args:
            status: Filter by status
            priority: Filter by priority
            category: Filter by category
            user_id: Restrict to one owner
            search: Case-insensitive match on title or description
            skip: Number of records to skip
            limit: Maximum number of records
        """
        stmt = select(Complaint)
        if status is not None:
            stmt = stmt.where(Complaint.status == status)
        if priority is not None:
            stmt = stmt.where(Complaint.priority == priority)
        if category is not None:
            stmt = stmt.where(Complaint.category == category)
        if user_id is not None:
            stmt = stmt.where(Complaint.user_id == user_id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Complaint.title.ilike(pattern), Complaint.description.ilike(pattern))
            )
        stmt = stmt.order_by(Complaint.created_at.desc()).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            return list(self.db.scalars(stmt).unique())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Complaint search failed: {str(e)}") from e

    def all_ids(self) -> List[str]:
        return list(self.db.scalars(select(Complaint.id).order_by(Complaint.created_at)))

    # ==================== Aggregates ====================

    def _count_by(self, column, user_id: Optional[str] = None) -> Dict[str, int]:
        stmt = select(column, func.count(Complaint.id)).group_by(column)
        if user_id is not None:
            stmt = stmt.where(Complaint.user_id == user_id)
        try:
            return {
                (key.value if hasattr(key, "value") else key): count
                for key, count in self.db.execute(stmt)
            }
        except SQLAlchemyError as e:
            raise DatabaseError(f"Complaint aggregation failed: {str(e)}") from e

    def count_by_status(self, user_id: Optional[str] = None) -> Dict[str, int]:
        return self._count_by(Complaint.status, user_id)

    def count_by_category(self) -> Dict[str, int]:
        return self._count_by(Complaint.category)

    def count_by_priority(self) -> Dict[str, int]:
        return self._count_by(Complaint.priority)

    def count_ai_resolved(self) -> int:
        return self.count({"ai_resolved": True})

    def created_since(self, since: datetime) -> List[datetime]:
        """Creation timestamps of complaints filed at or after `since`."""
        stmt = select(Complaint.created_at).where(Complaint.created_at >= since)
        return list(self.db.scalars(stmt))
