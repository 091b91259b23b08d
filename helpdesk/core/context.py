"""
Per-request actor context.

The caller's identity and role travel explicitly through every service call
instead of living in a module-level session singleton. A context is built by
the API dependency layer at the start of a request and discarded with it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from helpdesk.models.enums import UserRole
from helpdesk.utils.date_utils import now_utc


@dataclass(frozen=True)
class ActorContext:
    """Who is acting, and with which role."""

    user_id: str
    role: UserRole = UserRole.USER
    email: Optional[str] = None
    full_name: Optional[str] = None
    request_id: Optional[str] = None
    started_at: datetime = field(default_factory=now_utc)

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)

    def owns(self, owner_id: Optional[str]) -> bool:
        return owner_id is not None and owner_id == self.user_id

    @classmethod
    def system(cls) -> "ActorContext":
        """Context for background work such as startup reconciliation."""
        return cls(user_id="system", role=UserRole.SUPER_ADMIN)


__all__ = ["ActorContext"]
