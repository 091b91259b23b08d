"""
Ticket model: the administrative tracking record for a complaint.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import BaseModel, TimestampMixin
from helpdesk.models.enums import TicketStatus, enum_column

if TYPE_CHECKING:
    from helpdesk.models.complaint import Complaint

__all__ = ["Ticket"]


class Ticket(BaseModel, TimestampMixin):
    """
    Exactly one ticket exists per complaint; both the complaint reference and
    the human-readable number are unique at the database level.
    """

    __tablename__ = "tickets"
    __table_args__ = {"comment": "Administrative tracking records for complaints"}

    ticket_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        comment="Human-readable number, TKT-YYYYMMDD-NNNN",
    )
    complaint_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    status: Mapped[TicketStatus] = mapped_column(
        enum_column(TicketStatus, "ticket_status"),
        nullable=False,
        default=TicketStatus.OPEN,
        index=True,
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="ticket")

    def __repr__(self) -> str:
        return f"<Ticket(number={self.ticket_number}, status={self.status.value})>"
