"""
Ticket messages API Routes.

WHAT: The message thread of a ticket.

HOW: Access follows the ticket detail rules: other organizations' tickets
are 404, and non-admins may only use the thread of their own tickets.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.schemas.ticket import MessageCreate, MessageResponse
from ticketdesk.services.message_service import MessageService


router = APIRouter(prefix="/tickets/{ticket_id}/messages", tags=["messages"])


@router.get(
    "",
    response_model=List[MessageResponse],
    status_code=status.HTTP_200_OK,
    summary="List ticket messages",
    description="Messages of a ticket, oldest first",
)
async def list_messages(
    ticket_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> List[MessageResponse]:
    service = MessageService(db)
    messages = await service.list_messages(ticket_id, principal)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post message",
)
async def create_message(
    ticket_id: int,
    data: MessageCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Post a message on a ticket.

    The other side of the conversation is notified: the assigned admin when
    the creator writes, the creator otherwise.
    """
    service = MessageService(db)
    message = await service.create_message(ticket_id, data.content, principal)
    return MessageResponse.model_validate(message)
