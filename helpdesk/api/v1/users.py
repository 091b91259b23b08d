"""
Profile endpoints and the assistant chat.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from helpdesk.api.deps import get_actor, get_user_service
from helpdesk.core.context import ActorContext
from helpdesk.integrations.functions_client import CHAT_FUNCTION, VERIFICATION_EMAIL_FUNCTION
from helpdesk.models.enums import AccountStatus
from helpdesk.schemas.user import (
    AccountStatusUpdate,
    ChatRequest,
    FunctionResponse,
    ProfileResponse,
    ProfileUpdate,
)
from helpdesk.services.user_service import UserService

router = APIRouter(prefix="/users")
chat_router = APIRouter(prefix="/chat")


@router.get("/me", response_model=ProfileResponse)
def read_me(
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    return ProfileResponse.model_validate(service.get_profile(actor))


@router.patch("/me", response_model=ProfileResponse)
def update_me(
    payload: ProfileUpdate,
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    return ProfileResponse.model_validate(service.update_profile(actor, payload))


@router.get("", response_model=List[ProfileResponse])
def list_users(
    account_status: Optional[AccountStatus] = Query(default=None, alias="status"),
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> List[ProfileResponse]:
    return [ProfileResponse.model_validate(p) for p in service.list_users(actor, account_status)]


@router.put("/{profile_id}/status", response_model=ProfileResponse)
def set_account_status(
    profile_id: str,
    payload: AccountStatusUpdate,
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    """Activate, suspend or deactivate an account (admin only)."""
    profile = service.set_account_status(actor, profile_id, payload.account_status)
    return ProfileResponse.model_validate(profile)


@router.post("/me/verification-email", response_model=FunctionResponse)
def send_verification_email(
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> FunctionResponse:
    data = service.send_verification_email(actor)
    return FunctionResponse(function=VERIFICATION_EMAIL_FUNCTION, data=data)


@chat_router.post("", response_model=FunctionResponse)
def chat(
    payload: ChatRequest,
    actor: ActorContext = Depends(get_actor),
    service: UserService = Depends(get_user_service),
) -> FunctionResponse:
    return FunctionResponse(function=CHAT_FUNCTION, data=service.chat(actor, payload))
