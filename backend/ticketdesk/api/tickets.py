"""
Ticket management API endpoints.

WHAT: RESTful API for the support ticket lifecycle.

WHY: Members raise tickets for themselves or on behalf of a requester;
admins triage, assign and resolve them.

HOW: FastAPI router with:
- Org-scoped queries (multi-tenancy); other organizations' tickets are 404
- Ownership for non-admins (403 on tickets they didn't create)
- Admin-only assignment and deletion
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal, require_admin
from ticketdesk.core.principal import Principal
from ticketdesk.dao.ticket import TicketQuery, TicketSortField, SortOrder
from ticketdesk.db.session import get_db
from ticketdesk.models.ticket import Ticket, TicketPriority, TicketStatus, TicketType
from ticketdesk.schemas.ticket import (
    TicketCreate,
    TicketUpdate,
    TicketStatusUpdate,
    TicketAssign,
    TicketResponse,
    TicketDetailResponse,
    TicketListResponse,
    TicketDeletedResponse,
    AttachmentResponse,
    PageMeta,
)
from ticketdesk.services.ticket_service import TicketService


router = APIRouter(prefix="/tickets", tags=["tickets"])


def _ticket_to_response(ticket: Ticket) -> TicketResponse:
    """Column data only; relationships are never touched here."""
    return TicketResponse.model_validate(ticket)


# ============================================================================
# Ticket CRUD Endpoints
# ============================================================================


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create ticket",
    description="Create a ticket with the next key of the organization (TCK-0001, ...)",
)
async def create_ticket(
    data: TicketCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Create a support ticket.

    Raises:
        ValidationError (400): If assigned_admin_id is not an active admin of the org
        ResourceAlreadyExistsError (409): If no ticket number could be allocated
    """
    service = TicketService(db)
    ticket = await service.create(
        principal,
        title=data.title,
        description=data.description,
        type=data.type,
        priority=data.priority,
        requester_first_name=data.requester_first_name,
        requester_last_name=data.requester_last_name,
        requester_email=data.requester_email,
        assigned_admin_id=data.assigned_admin_id,
    )
    return _ticket_to_response(ticket)


@router.get(
    "",
    response_model=TicketListResponse,
    status_code=status.HTTP_200_OK,
    summary="List tickets",
    description="Paginated, filterable and sortable list of tickets",
)
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(default=None, alias="status"),
    priority_filter: Optional[TicketPriority] = Query(default=None, alias="priority"),
    type_filter: Optional[TicketType] = Query(default=None, alias="type"),
    assigned_admin_id: Optional[int] = Query(default=None),
    search: Optional[str] = Query(
        default=None,
        max_length=200,
        description="Matches key, title and requester name or email",
    ),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort_by: Optional[str] = Query(
        default=None,
        description="created_at, updated_at, priority, status or key",
    ),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketListResponse:
    """
    List tickets.

    Admins see every ticket of the organization; other members only the
    tickets they created.
    """
    query = TicketQuery(
        status=status_filter,
        priority=priority_filter,
        type=type_filter,
        assigned_admin_id=assigned_admin_id,
        search=search.strip() if search and search.strip() else None,
        page=page,
        limit=limit,
        sort_by=TicketSortField.parse(sort_by),
        sort_order=sort_order,
    )
    service = TicketService(db)
    tickets, total, total_pages = await service.find_all(principal, query)

    return TicketListResponse(
        data=[_ticket_to_response(t) for t in tickets],
        meta=PageMeta(total=total, page=page, limit=limit, total_pages=total_pages),
    )


@router.get(
    "/{ticket_id}",
    response_model=TicketDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get ticket",
    description="Ticket with its messages and attachments",
)
async def get_ticket(
    ticket_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketDetailResponse:
    service = TicketService(db)
    ticket = await service.find_one(ticket_id, principal)
    return TicketDetailResponse.model_validate(ticket)


@router.patch(
    "/{ticket_id}",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Update ticket",
)
async def update_ticket(
    ticket_id: int,
    data: TicketUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = TicketService(db)
    ticket = await service.update(ticket_id, principal, **data.model_dump(exclude_unset=True))
    return _ticket_to_response(ticket)


@router.delete(
    "/{ticket_id}",
    response_model=TicketDeletedResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete ticket",
    description="Delete a ticket with its messages, attachments and notifications (admin only)",
)
async def delete_ticket(
    ticket_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TicketDeletedResponse:
    service = TicketService(db)
    await service.remove(ticket_id, principal)
    return TicketDeletedResponse(deleted=True)


# ============================================================================
# Workflow Endpoints
# ============================================================================


@router.patch(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Change ticket status",
)
async def change_ticket_status(
    ticket_id: int,
    data: TicketStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Change the status of a ticket.

    RESOLVED and CLOSED record their timestamp the first time; going back
    to NEW or IN_PROGRESS clears both.
    """
    service = TicketService(db)
    ticket = await service.update_status(ticket_id, data.status, principal)
    return _ticket_to_response(ticket)


@router.patch(
    "/{ticket_id}/assign",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Assign ticket",
    description="Assign to an admin of the organization, or null to unassign (admin only)",
)
async def assign_ticket(
    ticket_id: int,
    data: TicketAssign,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = TicketService(db)
    ticket = await service.assign(ticket_id, data.assigned_admin_id, principal)
    return _ticket_to_response(ticket)


# ============================================================================
# Attachment Endpoints
# ============================================================================


@router.post(
    "/{ticket_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload attachment",
    description="Attach a file (10 MB maximum) to a ticket",
)
async def upload_attachment(
    ticket_id: int,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> AttachmentResponse:
    content = await file.read()
    service = TicketService(db)
    attachment = await service.add_attachment(
        ticket_id,
        principal,
        filename=file.filename,
        mime_type=file.content_type,
        content=content,
    )
    return AttachmentResponse.model_validate(attachment)
