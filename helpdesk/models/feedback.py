"""
Complaint feedback model.

Collects the owner's rating once a complaint is resolved.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import BaseModel
from helpdesk.utils.date_utils import now_utc

if TYPE_CHECKING:
    from helpdesk.models.complaint import Complaint
    from helpdesk.models.user import Profile

__all__ = ["Feedback"]


class Feedback(BaseModel):
    """
    Attributes:
        complaint_id: Associated complaint identifier
        user_id: User who submitted feedback
        rating: Overall rating (1-5 stars)
        comments: Free-text comments
        submitted_at: Feedback submission timestamp
    """

    __tablename__ = "feedback"
    __table_args__ = (
        UniqueConstraint("complaint_id", "user_id", name="uq_feedback_complaint_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        {"comment": "Complaint feedback"},
    )

    complaint_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        index=True,
    )

    complaint: Mapped["Complaint"] = relationship("Complaint")
    user: Mapped["Profile"] = relationship("Profile")

    @property
    def complaint_title(self) -> Optional[str]:
        return self.complaint.title if self.complaint is not None else None

    @property
    def user_name(self) -> Optional[str]:
        return self.user.full_name if self.user is not None else None
