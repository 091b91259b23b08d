"""
Ticket repository.
"""

from typing import Dict, List, Optional, Set

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from helpdesk.core.exceptions import DatabaseError
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import ComplaintCategory, ComplaintPriority, TicketStatus
from helpdesk.models.ticket import Ticket
from helpdesk.repositories.base_repository import BaseRepository


class TicketRepository(BaseRepository[Ticket]):
    """Data access for tickets and the ticket/complaint join."""

    def __init__(self, session: Session):
        super().__init__(Ticket, session)

    def find_by_complaint_id(self, complaint_id: str) -> Optional[Ticket]:
        return self.db.scalar(select(Ticket).where(Ticket.complaint_id == complaint_id))

    def find_by_number(self, ticket_number: str) -> Optional[Ticket]:
        return self.db.scalar(select(Ticket).where(Ticket.ticket_number == ticket_number))

    def complaint_ids_with_tickets(self) -> Set[str]:
        return set(self.db.scalars(select(Ticket.complaint_id)))

    def search(
        self,
        status: Optional[TicketStatus] = None,
        priority: Optional[ComplaintPriority] = None,
        category: Optional[ComplaintCategory] = None,
        search: Optional[str] = None,
    ) -> List[Ticket]:
        """
        Tickets joined with their complaint, newest first.

        Args:
            status: Ticket status
            priority: Complaint priority
            category: Complaint category
            search: Case-insensitive match on ticket number or complaint title
        """
        stmt = (
            select(Ticket)
            .join(Ticket.complaint)
            .options(contains_eager(Ticket.complaint))
        )
        if status is not None:
            stmt = stmt.where(Ticket.status == status)
        if priority is not None:
            stmt = stmt.where(Complaint.priority == priority)
        if category is not None:
            stmt = stmt.where(Complaint.category == category)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Ticket.ticket_number.ilike(pattern), Complaint.title.ilike(pattern))
            )
        stmt = stmt.order_by(Ticket.created_at.desc())

        try:
            return list(self.db.scalars(stmt).unique())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Ticket search failed: {str(e)}") from e

    def count_by_status(self) -> Dict[str, int]:
        stmt = select(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status)
        return {status.value: count for status, count in self.db.execute(stmt)}
