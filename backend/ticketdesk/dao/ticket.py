"""
Ticket Data Access Object.

WHAT: DAO for tickets, their messages and their attachments.

WHY: Encapsulates all ticket database operations with:
1. Org-scoped queries for multi-tenancy
2. Search, filtering, sorting and pagination from an explicit query object
3. Child-row cleanup when a ticket is removed

HOW: Uses SQLAlchemy 2.0 async; relationships are never lazy-loaded, the
detail query eager-loads messages and attachments explicitly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Tuple

from sqlalchemy import select, delete, func, or_, case
from sqlalchemy.orm import selectinload

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.notification import Notification
from ticketdesk.models.ticket import (
    Ticket,
    TicketStatus,
    TicketPriority,
    TicketType,
    Message,
    Attachment,
    PRIORITY_ORDER,
    STATUS_ORDER,
)


class TicketSortField(str, Enum):
    """Columns a ticket list may be sorted by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    PRIORITY = "priority"
    STATUS = "status"
    KEY = "key"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TicketSortField":
        """
        Map a client-supplied sort key to a field.

        Both snake_case and camelCase spellings are accepted; anything
        unknown sorts by creation date.
        """
        if not value:
            return cls.CREATED_AT
        normalized = value.strip()
        aliases = {"createdAt": "created_at", "updatedAt": "updated_at"}
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.CREATED_AT


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class TicketQuery:
    """
    Filters, search, sort and page for a ticket list.

    created_by_user_id is not client-controlled: the service sets it for
    non-admin callers so they only ever see their own tickets.
    """

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    type: Optional[TicketType] = None
    assigned_admin_id: Optional[int] = None
    created_by_user_id: Optional[int] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 20
    sort_by: TicketSortField = TicketSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _sort_expression(field: TicketSortField):
    if field == TicketSortField.PRIORITY:
        return case(PRIORITY_ORDER, value=Ticket.priority)
    if field == TicketSortField.STATUS:
        return case(STATUS_ORDER, value=Ticket.status)
    if field == TicketSortField.KEY:
        return Ticket.number
    if field == TicketSortField.UPDATED_AT:
        return Ticket.updated_at
    return Ticket.created_at


class TicketDAO(BaseDAO[Ticket]):
    """Data Access Object for Ticket operations."""

    model = Ticket

    async def get_with_relations(self, ticket_id: int, org_id: int) -> Optional[Ticket]:
        """
        Get a ticket of the organization with messages and attachments loaded.

        Args:
            ticket_id: Ticket ID
            org_id: Organization ID for scoping

        Returns:
            Ticket with relations or None
        """
        query = (
            select(Ticket)
            .options(
                selectinload(Ticket.messages),
                selectinload(Ticket.attachments),
            )
            .where(Ticket.id == ticket_id, Ticket.org_id == org_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(self, org_id: int, query: TicketQuery) -> Tuple[List[Ticket], int]:
        """
        List tickets with filtering, search, sorting and pagination.

        Args:
            org_id: Organization ID for scoping
            query: Filters, search, sort and page

        Returns:
            Tuple of (tickets list, total count)
        """
        base_query = select(Ticket).where(Ticket.org_id == org_id)

        if query.created_by_user_id is not None:
            base_query = base_query.where(Ticket.created_by_user_id == query.created_by_user_id)
        if query.status is not None:
            base_query = base_query.where(Ticket.status == query.status)
        if query.priority is not None:
            base_query = base_query.where(Ticket.priority == query.priority)
        if query.type is not None:
            base_query = base_query.where(Ticket.type == query.type)
        if query.assigned_admin_id is not None:
            base_query = base_query.where(Ticket.assigned_admin_id == query.assigned_admin_id)

        if query.search:
            pattern = f"%{query.search.strip()}%"
            base_query = base_query.where(
                or_(
                    Ticket.key.ilike(pattern),
                    Ticket.title.ilike(pattern),
                    Ticket.requester_email.ilike(pattern),
                    Ticket.requester_first_name.ilike(pattern),
                    Ticket.requester_last_name.ilike(pattern),
                )
            )

        count_result = await self.session.execute(
            select(func.count()).select_from(base_query.subquery())
        )
        total = count_result.scalar_one()

        sort_column = _sort_expression(query.sort_by)
        if query.sort_order == SortOrder.ASC:
            ordering = [sort_column.asc(), Ticket.id.asc()]
        else:
            ordering = [sort_column.desc(), Ticket.id.desc()]

        result = await self.session.execute(
            base_query.order_by(*ordering).offset(query.offset).limit(query.limit)
        )
        return list(result.scalars().all()), total

    async def delete_with_children(self, ticket_id: int) -> bool:
        """
        Delete a ticket together with its messages, attachments and notifications.

        Child rows are removed explicitly so the result doesn't depend on the
        backend enforcing ON DELETE CASCADE.
        """
        await self.session.execute(delete(Message).where(Message.ticket_id == ticket_id))
        await self.session.execute(delete(Attachment).where(Attachment.ticket_id == ticket_id))
        await self.session.execute(delete(Notification).where(Notification.ticket_id == ticket_id))
        return await self.delete(ticket_id)


class MessageDAO(BaseDAO[Message]):
    model = Message

    async def list_for_ticket(self, ticket_id: int) -> List[Message]:
        """Messages of a ticket, oldest first."""
        result = await self.session.execute(
            select(Message)
            .where(Message.ticket_id == ticket_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list(result.scalars().all())


class AttachmentDAO(BaseDAO[Attachment]):
    model = Attachment
