"""
Core complaint model.

Handles complaint content, classification and lifecycle status, and links to
the ticket that tracks it administratively.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import BaseModel, TimestampMixin
from helpdesk.models.enums import (
    EDITABLE_COMPLAINT_STATUSES,
    FEEDBACK_ELIGIBLE_STATUSES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    enum_column,
)

if TYPE_CHECKING:
    from helpdesk.models.ticket import Ticket
    from helpdesk.models.user import Profile

__all__ = ["Complaint"]


class Complaint(BaseModel, TimestampMixin):
    """
    User-submitted issue report.

    Attributes:
        user_id: Owner (submitting user)
        title: Brief complaint summary
        description: Detailed complaint description
        category: Primary complaint category
        priority: Complaint priority level
        status: Current lifecycle status
        attachment: Opaque reference to an uploaded file
        ai_resolved: Whether the AI assistant resolved the issue
    """

    __tablename__ = "complaints"
    __table_args__ = (
        Index("ix_complaints_user_status", "user_id", "status"),
        {"comment": "User-submitted complaints"},
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owner user id",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[ComplaintCategory] = mapped_column(
        enum_column(ComplaintCategory, "complaint_category"),
        nullable=False,
        index=True,
    )
    priority: Mapped[ComplaintPriority] = mapped_column(
        enum_column(ComplaintPriority, "complaint_priority"),
        nullable=False,
        default=ComplaintPriority.MEDIUM,
        index=True,
    )
    status: Mapped[ComplaintStatus] = mapped_column(
        enum_column(ComplaintStatus, "complaint_status"),
        nullable=False,
        default=ComplaintStatus.PENDING,
        index=True,
    )

    attachment: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        comment="Opaque attachment reference",
    )
    ai_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    ticket: Mapped[Optional["Ticket"]] = relationship(
        "Ticket",
        back_populates="complaint",
        uselist=False,
        cascade="save-update, merge, delete",
    )
    owner: Mapped["Profile"] = relationship("Profile", lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<Complaint(id={self.id}, "
            f"status={self.status.value}, "
            f"priority={self.priority.value})>"
        )

    @property
    def ticket_number(self) -> Optional[str]:
        return self.ticket.ticket_number if self.ticket is not None else None

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_COMPLAINT_STATUSES

    @property
    def accepts_feedback(self) -> bool:
        return self.status in FEEDBACK_ELIGIBLE_STATUSES
