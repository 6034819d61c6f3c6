"""
Message Service.

WHAT: Business logic for the message thread of a ticket.

WHY: Requesters and admins discuss a ticket through its messages; each new
message notifies the other side of the conversation.

HOW: Ticket access follows the same rules as the ticket detail. The author
name is copied onto the message so the thread stays readable if the author
account is removed later.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import UserNotFoundError, ValidationError
from ticketdesk.core.principal import Principal
from ticketdesk.dao.ticket import MessageDAO
from ticketdesk.dao.user import UserDAO
from ticketdesk.models.ticket import Message, Ticket
from ticketdesk.services.notification_service import NotificationService
from ticketdesk.services.ticket_service import TicketService

logger = logging.getLogger(__name__)


def message_recipient(ticket: Ticket, author_id: int) -> Optional[int]:
    """
    Who should hear about a new message on a ticket.

    A message from the creator goes to the assigned admin; any other
    message goes to the creator. The author is never notified.
    """
    if author_id == ticket.created_by_user_id:
        recipient = ticket.assigned_admin_id
    else:
        recipient = ticket.created_by_user_id
    if recipient == author_id:
        return None
    return recipient


class MessageService:
    """Service for ticket messages."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.message_dao = MessageDAO(session)
        self.user_dao = UserDAO(session)
        self.tickets = TicketService(session)
        self.notifications = NotificationService(session)

    async def list_messages(self, ticket_id: int, principal: Principal) -> List[Message]:
        """Messages of an accessible ticket, oldest first."""
        ticket = await self.tickets.get_accessible(ticket_id, principal)
        return await self.message_dao.list_for_ticket(ticket.id)

    async def create_message(
        self, ticket_id: int, content: str, principal: Principal
    ) -> Message:
        """
        Post a message on a ticket.

        Raises:
            TicketNotFoundError: Ticket not in the caller's organization
            ValidationError: If the content is blank
            AuthorizationError: Non-admin caller who didn't create the ticket
        """
        if not content or not content.strip():
            raise ValidationError(message="Le message ne peut pas être vide")

        ticket = await self.tickets.get_accessible(ticket_id, principal)

        author = await self.user_dao.get_by_id_and_org(principal.id, principal.org_id)
        if not author:
            raise UserNotFoundError(user_id=principal.id)

        message = await self.message_dao.create(
            ticket_id=ticket.id,
            author_user_id=author.id,
            author_name=author.full_name,
            content=content.strip(),
        )
        # Bump the ticket so "recently updated" sorting reflects the activity
        ticket.updated_at = message.created_at
        await self.session.commit()
        logger.info(f"Message {message.id} posted on ticket {ticket.key} by user {author.id}")

        await self.notifications.notify_new_message(
            ticket, message_recipient(ticket, author.id), author.full_name
        )
        return message
