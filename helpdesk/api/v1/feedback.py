"""
Feedback endpoints. Submitting feedback closes the complaint and its ticket.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from helpdesk.api.deps import get_actor, get_feedback_service
from helpdesk.core.context import ActorContext
from helpdesk.schemas.feedback import FeedbackCreate, FeedbackEligibility, FeedbackResponse
from helpdesk.services.feedback_service import FeedbackService

router = APIRouter(prefix="/feedback")


@router.get("/eligibility/{complaint_id}", response_model=FeedbackEligibility)
def check_feedback_eligibility(
    complaint_id: str,
    actor: ActorContext = Depends(get_actor),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackEligibility:
    return service.check_feedback_eligibility(actor, complaint_id)


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    payload: FeedbackCreate,
    actor: ActorContext = Depends(get_actor),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    return FeedbackResponse.model_validate(service.submit_feedback(actor, payload))


@router.get("", response_model=List[FeedbackResponse])
def list_feedback(
    actor: ActorContext = Depends(get_actor),
    service: FeedbackService = Depends(get_feedback_service),
) -> List[FeedbackResponse]:
    return [FeedbackResponse.model_validate(f) for f in service.list_feedback(actor)]
