"""
Meeting model: admin-scheduled session, optionally linked to a complaint.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import BaseModel, TimestampMixin
from helpdesk.models.enums import MeetingStatus, enum_column

if TYPE_CHECKING:
    from helpdesk.models.complaint import Complaint
    from helpdesk.models.user import Profile

__all__ = ["Meeting"]


class Meeting(BaseModel, TimestampMixin):
    """
    Attributes:
        complaint_id: Optional associated complaint
        admin_id: Scheduling admin
        invited_user_id: The only non-admin party allowed to see the meeting
        schedule_time: When the meeting takes place
        meet_link: Opaque external meeting URL
        status: scheduled, completed or cancelled
    """

    __tablename__ = "meetings"
    __table_args__ = (
        Index("ix_meetings_invitee_time", "invited_user_id", "schedule_time"),
    )

    complaint_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    admin_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    invited_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    schedule_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    meet_link: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[MeetingStatus] = mapped_column(
        enum_column(MeetingStatus, "meeting_status"),
        nullable=False,
        default=MeetingStatus.SCHEDULED,
        index=True,
    )

    complaint: Mapped[Optional["Complaint"]] = relationship("Complaint")
    invitee: Mapped["Profile"] = relationship("Profile", foreign_keys=[invited_user_id])

    @property
    def invitee_name(self) -> Optional[str]:
        return self.invitee.full_name if self.invitee is not None else None

    @property
    def invitee_email(self) -> Optional[str]:
        return self.invitee.email if self.invitee is not None else None

    @property
    def complaint_title(self) -> Optional[str]:
        return self.complaint.title if self.complaint is not None else None
