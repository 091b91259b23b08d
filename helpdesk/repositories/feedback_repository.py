"""
Feedback repository.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from helpdesk.models.feedback import Feedback
from helpdesk.repositories.base_repository import BaseRepository


class FeedbackRepository(BaseRepository[Feedback]):

    def __init__(self, session: Session):
        super().__init__(Feedback, session)

    def find_for(self, complaint_id: str, user_id: str) -> Optional[Feedback]:
        return self.find_one_by_criteria({"complaint_id": complaint_id, "user_id": user_id})

    def find_by_complaint_id(self, complaint_id: str) -> List[Feedback]:
        return self.find_by_criteria({"complaint_id": complaint_id})

    def list_enriched(self) -> List[Feedback]:
        """All feedback newest first, with complaint and user preloaded."""
        stmt = (
            select(Feedback)
            .options(selectinload(Feedback.complaint), selectinload(Feedback.user))
            .order_by(Feedback.submitted_at.desc())
        )
        return list(self.db.scalars(stmt))
