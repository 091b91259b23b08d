"""
Notification schemas.

Each notification type is bound to exactly one metadata model. Metadata is
validated against that model before a notification row is written, so the
payload shape is a function of the type.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from helpdesk.core.exceptions import ValidationError
from helpdesk.models.enums import (
    AdminNotificationType,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    NotificationType,
)
from helpdesk.schemas.base import BaseResponseSchema, BaseSchema

__all__ = [
    "NotificationMetadata",
    "ComplaintSubmittedMetadata",
    "StatusUpdatedMetadata",
    "MeetingScheduledMetadata",
    "MeetingCancelledMetadata",
    "NewComplaintMetadata",
    "FeedbackReceivedMetadata",
    "NOTIFICATION_METADATA",
    "ADMIN_NOTIFICATION_METADATA",
    "validate_notification_metadata",
    "NotificationResponse",
    "AdminNotificationResponse",
    "NotificationStats",
    "MarkReadRequest",
]


# ---------------------------------------------------------------------------
# Per-type metadata
# ---------------------------------------------------------------------------

class NotificationMetadata(BaseModel):
    """Base for metadata payloads; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ComplaintSubmittedMetadata(NotificationMetadata):
    complaint_id: str
    priority: ComplaintPriority
    category: ComplaintCategory


class StatusUpdatedMetadata(NotificationMetadata):
    complaint_id: str
    old_status: ComplaintStatus
    new_status: ComplaintStatus


class MeetingScheduledMetadata(NotificationMetadata):
    meeting_id: str
    meet_link: str
    schedule_time: datetime
    complaint_id: Optional[str] = None


class MeetingCancelledMetadata(NotificationMetadata):
    meeting_id: str
    schedule_time: datetime
    complaint_id: Optional[str] = None


class NewComplaintMetadata(NotificationMetadata):
    complaint_id: str
    user_id: str
    priority: ComplaintPriority
    category: ComplaintCategory


class FeedbackReceivedMetadata(NotificationMetadata):
    complaint_id: str
    rating: int = Field(..., ge=1, le=5)
    has_comments: bool


NOTIFICATION_METADATA: Dict[NotificationType, Type[NotificationMetadata]] = {
    NotificationType.COMPLAINT_SUBMITTED: ComplaintSubmittedMetadata,
    NotificationType.STATUS_UPDATED: StatusUpdatedMetadata,
    NotificationType.MEETING_SCHEDULED: MeetingScheduledMetadata,
    NotificationType.MEETING_CANCELLED: MeetingCancelledMetadata,
}

ADMIN_NOTIFICATION_METADATA: Dict[AdminNotificationType, Type[NotificationMetadata]] = {
    AdminNotificationType.NEW_COMPLAINT: NewComplaintMetadata,
    AdminNotificationType.FEEDBACK_RECEIVED: FeedbackReceivedMetadata,
}


def validate_notification_metadata(
    notification_type: Union[NotificationType, AdminNotificationType],
    metadata: Union[NotificationMetadata, Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Check a metadata payload against the model bound to its type.

    Args:
        notification_type: User or admin notification type
        metadata: Metadata model instance or mapping

    Returns:
        JSON-ready metadata dict

    Raises:
        ValidationError: If the payload does not match the type's model
    """
    if isinstance(notification_type, AdminNotificationType):
        model = ADMIN_NOTIFICATION_METADATA[notification_type]
    else:
        model = NOTIFICATION_METADATA[NotificationType(notification_type)]

    if isinstance(metadata, NotificationMetadata) and not isinstance(metadata, model):
        raise ValidationError(
            f"{type(metadata).__name__} is not valid metadata for "
            f"'{notification_type.value}' notifications"
        )

    try:
        if isinstance(metadata, model):
            payload = metadata
        else:
            payload = model.model_validate(dict(metadata))
    except PydanticValidationError as e:
        field_errors: Dict[str, List[str]] = {}
        for error in e.errors():
            key = ".".join(str(part) for part in error["loc"]) or "metadata"
            field_errors.setdefault(key, []).append(error["msg"])
        raise ValidationError(
            f"Invalid metadata for '{notification_type.value}' notification",
            field_errors=field_errors,
        ) from e

    return payload.model_dump(mode="json")


# ---------------------------------------------------------------------------
# API schemas
# ---------------------------------------------------------------------------

class NotificationResponse(BaseResponseSchema):
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    complaint_id: Optional[str] = None
    ticket_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta", "metadata"),
    )


class AdminNotificationResponse(BaseSchema):
    id: str
    notification_type: AdminNotificationType
    title: str
    message: str
    read: bool
    user_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta", "metadata"),
    )
    created_at: datetime


class NotificationStats(BaseSchema):
    unread_count: int = 0
    total_count: int = 0


class MarkReadRequest(BaseSchema):
    notification_ids: List[str] = Field(..., min_length=1)
