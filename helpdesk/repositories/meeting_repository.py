"""
Meeting repository.

Every read goes through a visibility predicate: administrators see all
meetings, anyone else only meetings they are invited to.
"""

from typing import List, Optional

from sqlalchemy import select, true
from sqlalchemy.orm import Session, selectinload

from helpdesk.core.context import ActorContext
from helpdesk.models.meeting import Meeting
from helpdesk.repositories.base_repository import BaseRepository


class MeetingRepository(BaseRepository[Meeting]):

    def __init__(self, session: Session):
        super().__init__(Meeting, session)

    @staticmethod
    def visible_to(actor: ActorContext):
        """Row filter restricting meetings to those the actor may see."""
        if actor.is_admin:
            return true()
        return Meeting.invited_user_id == actor.user_id

    def list_visible(self, actor: ActorContext) -> List[Meeting]:
        stmt = (
            select(Meeting)
            .where(self.visible_to(actor))
            .options(selectinload(Meeting.invitee), selectinload(Meeting.complaint))
            .order_by(Meeting.schedule_time.desc())
        )
        return list(self.db.scalars(stmt))

    def find_visible(self, actor: ActorContext, meeting_id: str) -> Optional[Meeting]:
        stmt = select(Meeting).where(Meeting.id == meeting_id, self.visible_to(actor))
        return self.db.scalar(stmt)

    def find_by_complaint_id(self, complaint_id: str) -> List[Meeting]:
        return self.find_by_criteria({"complaint_id": complaint_id})
