"""
Profile, chat proxy and verification-email schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from helpdesk.models.enums import AccountStatus, UserRole
from helpdesk.schemas.base import BaseSchema, BaseUpdateSchema

__all__ = [
    "ProfileResponse",
    "ProfileUpdate",
    "AccountStatusUpdate",
    "ChatMessage",
    "ChatRequest",
    "FunctionResponse",
]


class ProfileResponse(BaseSchema):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role_type: UserRole
    account_status: AccountStatus
    avatar_url: Optional[str] = None
    created_at: datetime


class ProfileUpdate(BaseUpdateSchema):
    """Self-service profile edits."""

    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    avatar_url: Optional[str] = Field(default=None, max_length=500)


class AccountStatusUpdate(BaseSchema):
    account_status: AccountStatus


class ChatMessage(BaseSchema):
    role: str = Field(..., description="user or assistant")
    content: str


class ChatRequest(BaseSchema):
    message: str = Field(..., min_length=1, max_length=4000)
    chat_history: List[ChatMessage] = Field(default_factory=list)


class FunctionResponse(BaseSchema):
    """Opaque JSON returned by a serverless function."""

    function: str
    data: Dict[str, Any] = Field(default_factory=dict)
