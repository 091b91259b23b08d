"""
FastAPI dependencies: database session, caller identity, services.

Identity is asserted by the fronting auth provider and forwarded in the
``X-User-Id`` header; the profile row decides the caller's role.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from helpdesk.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(actor = Depends(deps.get_actor)):
        return actor
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import AuthenticationError, AuthorizationError
from helpdesk.core.logging import get_logger, user_id as user_id_var
from helpdesk.db.session import get_db
from helpdesk.integrations.functions_client import FunctionsClient
from helpdesk.models.enums import AccountStatus
from helpdesk.models.user import Profile
from helpdesk.realtime.change_feed import ChangeFeed, change_feed
from helpdesk.services import (
    AnalyticsService,
    ComplaintService,
    FeedbackService,
    MeetingService,
    NotificationService,
    TicketService,
    UserService,
)

logger = get_logger(__name__)

USER_ID_HEADER = "X-User-Id"


def build_actor(db: Session, user_id: Optional[str], request_id: Optional[str] = None) -> ActorContext:
    """
    Resolve an identity into an ActorContext.

    Raises:
        AuthenticationError: If the identity is missing, unknown or not active
    """
    if not user_id:
        raise AuthenticationError("Authentication required")

    profile = db.get(Profile, user_id)
    if profile is None:
        logger.info(f"Rejected unknown identity {user_id}")
        raise AuthenticationError("Unknown user")
    if profile.account_status is not AccountStatus.ACTIVE:
        raise AuthenticationError(f"Account is {profile.account_status.value}")

    user_id_var.set(profile.id)
    return ActorContext(
        user_id=profile.id,
        role=profile.role_type,
        email=profile.email,
        full_name=profile.full_name,
        request_id=request_id,
    )


# --- Database & identity -------------------------------------------------------

def get_actor(
    request: Request,
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
    db: Session = Depends(get_db),
) -> ActorContext:
    return build_actor(db, x_user_id, getattr(request.state, "request_id", None))


def require_admin(actor: ActorContext = Depends(get_actor)) -> ActorContext:
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor


# --- Realtime ------------------------------------------------------------------

def get_change_feed() -> ChangeFeed:
    return change_feed


# --- Services ------------------------------------------------------------------

def get_functions_client() -> FunctionsClient:
    return FunctionsClient.from_settings()


def get_ticket_service(db: Session = Depends(get_db)) -> TicketService:
    return TicketService(db)


def get_complaint_service(db: Session = Depends(get_db)) -> ComplaintService:
    return ComplaintService(db)


def get_meeting_service(db: Session = Depends(get_db)) -> MeetingService:
    return MeetingService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_user_service(
    db: Session = Depends(get_db),
    functions: FunctionsClient = Depends(get_functions_client),
) -> UserService:
    return UserService(db, functions=functions)


__all__ = [
    "USER_ID_HEADER",
    "build_actor",
    "get_actor",
    "get_db",
    "require_admin",
    "get_change_feed",
    "get_functions_client",
    "get_ticket_service",
    "get_complaint_service",
    "get_meeting_service",
    "get_notification_service",
    "get_feedback_service",
    "get_analytics_service",
    "get_user_service",
]
