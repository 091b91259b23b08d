"""
Meeting endpoints. Scheduling and lifecycle changes are admin-only; reads are
narrowed to the meetings the caller may see.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from helpdesk.api.deps import get_actor, get_meeting_service
from helpdesk.core.context import ActorContext
from helpdesk.schemas.base import MessageResponse
from helpdesk.schemas.meeting import MeetingCreate, MeetingResponse, MeetingStatusUpdate
from helpdesk.services.meeting_service import MeetingService

router = APIRouter(prefix="/meetings")


@router.post("", response_model=MeetingResponse, status_code=status.HTTP_201_CREATED)
def schedule_meeting(
    payload: MeetingCreate,
    actor: ActorContext = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    return MeetingResponse.model_validate(service.schedule_meeting(actor, payload))


@router.get("", response_model=List[MeetingResponse])
def list_meetings(
    actor: ActorContext = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
) -> List[MeetingResponse]:
    return [MeetingResponse.model_validate(m) for m in service.list_meetings(actor)]


@router.get("/{meeting_id}", response_model=MeetingResponse)
def get_meeting(
    meeting_id: str,
    actor: ActorContext = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    return MeetingResponse.model_validate(service.get_meeting(actor, meeting_id))


@router.put("/{meeting_id}/status", response_model=MeetingResponse)
def update_meeting_status(
    meeting_id: str,
    payload: MeetingStatusUpdate,
    actor: ActorContext = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    meeting = service.update_meeting_status(actor, meeting_id, payload.status)
    return MeetingResponse.model_validate(meeting)


@router.delete("/{meeting_id}", response_model=MessageResponse)
def delete_meeting(
    meeting_id: str,
    actor: ActorContext = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
) -> MessageResponse:
    service.delete_meeting(actor, meeting_id)
    return MessageResponse(message="Meeting deleted")
