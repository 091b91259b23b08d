"""
Complaint endpoints: submission, listing, owner edits and admin lifecycle.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from helpdesk.api.deps import get_actor, get_complaint_service
from helpdesk.core.context import ActorContext
from helpdesk.models.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus
from helpdesk.schemas.base import MessageResponse
from helpdesk.schemas.complaint import (
    ComplaintCreate,
    ComplaintFilter,
    ComplaintResponse,
    ComplaintStatusUpdate,
    ComplaintUpdate,
)
from helpdesk.services.complaint_service import ComplaintService

router = APIRouter(prefix="/complaints")


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
def submit_complaint(
    payload: ComplaintCreate,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> ComplaintResponse:
    complaint = service.submit_complaint(actor, payload)
    return ComplaintResponse.model_validate(complaint)


@router.get("", response_model=List[ComplaintResponse])
def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(default=None, alias="status"),
    priority: Optional[ComplaintPriority] = None,
    category: Optional[ComplaintCategory] = None,
    user_id: Optional[str] = None,
    search: Optional[str] = Query(default=None, max_length=255),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> List[ComplaintResponse]:
    filters = ComplaintFilter(
        status=status_filter,
        priority=priority,
        category=category,
        user_id=user_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [ComplaintResponse.model_validate(c) for c in service.list_complaints(actor, filters)]


@router.get("/{complaint_id}", response_model=ComplaintResponse)
def get_complaint(
    complaint_id: str,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> ComplaintResponse:
    return ComplaintResponse.model_validate(service.get_complaint(actor, complaint_id))


@router.patch("/{complaint_id}", response_model=ComplaintResponse)
def update_complaint(
    complaint_id: str,
    payload: ComplaintUpdate,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> ComplaintResponse:
    complaint = service.update_complaint(actor, complaint_id, payload)
    return ComplaintResponse.model_validate(complaint)


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> ComplaintResponse:
    complaint = service.update_complaint_status(actor, complaint_id, payload.status)
    return ComplaintResponse.model_validate(complaint)


@router.post("/{complaint_id}/accept", response_model=ComplaintResponse)
def accept_complaint(
    complaint_id: str,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> ComplaintResponse:
    return ComplaintResponse.model_validate(service.accept_complaint(actor, complaint_id))


@router.delete("/{complaint_id}", response_model=MessageResponse)
def delete_complaint(
    complaint_id: str,
    actor: ActorContext = Depends(get_actor),
    service: ComplaintService = Depends(get_complaint_service),
) -> MessageResponse:
    service.delete_complaint(actor, complaint_id)
    return MessageResponse(message="Complaint deleted")
