"""
Ticket endpoints. Tickets are an admin tool; every route requires the admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from helpdesk.api.deps import get_ticket_service, require_admin
from helpdesk.core.context import ActorContext
from helpdesk.models.enums import ComplaintCategory, ComplaintPriority, TicketStatus
from helpdesk.schemas.complaint import ComplaintResponse
from helpdesk.schemas.ticket import (
    TicketAssign,
    TicketDetail,
    TicketFilter,
    TicketStatusUpdate,
    TicketSyncReport,
)
from helpdesk.services.ticket_service import TicketService

router = APIRouter(prefix="/tickets")


@router.get("", response_model=List[TicketDetail])
def list_tickets(
    status_filter: Optional[TicketStatus] = Query(default=None, alias="status"),
    priority: Optional[ComplaintPriority] = None,
    category: Optional[ComplaintCategory] = None,
    search: Optional[str] = Query(default=None, max_length=255),
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> List[TicketDetail]:
    filters = TicketFilter(status=status_filter, priority=priority, category=category, search=search)
    return [TicketDetail.model_validate(t) for t in service.list_tickets(filters)]


@router.post("/sync", response_model=TicketSyncReport)
def sync_tickets(
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> TicketSyncReport:
    """Create the missing ticket of every complaint that lacks one."""
    return service.ensure_tickets_for_all_complaints()


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> TicketDetail:
    return TicketDetail.model_validate(service.get_ticket(ticket_id))


@router.put("/{ticket_id}/status", response_model=TicketDetail)
def update_ticket_status(
    ticket_id: str,
    payload: TicketStatusUpdate,
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> TicketDetail:
    return TicketDetail.model_validate(service.update_ticket_status(ticket_id, payload.status))


@router.put("/{ticket_id}/assignee", response_model=TicketDetail)
def assign_ticket(
    ticket_id: str,
    payload: TicketAssign,
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> TicketDetail:
    return TicketDetail.model_validate(service.assign_ticket(ticket_id, payload.assignee_id))


@router.post("/{ticket_id}/propagate", response_model=ComplaintResponse)
def propagate_ticket_status(
    ticket_id: str,
    actor: ActorContext = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> ComplaintResponse:
    """Mirror the ticket's status onto its complaint."""
    return ComplaintResponse.model_validate(service.propagate_ticket_status(ticket_id))
