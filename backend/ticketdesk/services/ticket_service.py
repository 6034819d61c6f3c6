"""
Ticket Service.

WHAT: Business logic for the ticket lifecycle: creation with per-org
numbering, listing, detail, updates, status changes, assignment, deletion
and attachments.

WHY: Keeps the access rules in one place:
1. Tickets of another organization don't exist for the caller (404)
2. Non-admin users only see and act on tickets they created (403)
3. Assignment targets must be admins of the same organization

HOW: Every method receives the caller's Principal explicitly. Writes are
committed here; notifications are sent after the commit and never fail the
operation.
"""

import logging
import math
import secrets
from pathlib import Path
from typing import Optional, Tuple, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import (
    AuthorizationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    TicketNotFoundError,
    ValidationError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.dao.organization import OrganizationDAO
from ticketdesk.dao.ticket import TicketDAO, AttachmentDAO, TicketQuery
from ticketdesk.dao.user import UserDAO
from ticketdesk.models.ticket import (
    Ticket,
    TicketPriority,
    TicketStatus,
    TicketType,
    Attachment,
    format_ticket_key,
)
from ticketdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


# Fields a ticket update may touch; status and assignment have their own operations
UPDATABLE_FIELDS = (
    "title",
    "description",
    "type",
    "priority",
    "requester_first_name",
    "requester_last_name",
    "requester_email",
)


class TicketService:
    """
    Service for ticket operations.

    Attributes:
        session: Request database session
        notifications: Side-effect notifications
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ticket_dao = TicketDAO(session)
        self.attachment_dao = AttachmentDAO(session)
        self.user_dao = UserDAO(session)
        self.org_dao = OrganizationDAO(session)
        self.notifications = NotificationService(session)

    # =========================================================================
    # Access checks
    # =========================================================================

    @staticmethod
    def ensure_can_access(ticket: Ticket, principal: Principal) -> None:
        """
        Ownership rule for a ticket already known to be in the caller's org.

        Raises:
            AuthorizationError: If a non-admin caller didn't create the ticket
        """
        if not principal.is_admin and ticket.created_by_user_id != principal.id:
            raise AuthorizationError(
                message="Accès non autorisé à ce ticket",
                ticket_id=ticket.id,
                user_id=principal.id,
            )

    async def get_accessible(self, ticket_id: int, principal: Principal) -> Ticket:
        """
        Load a ticket the caller may act on.

        Raises:
            TicketNotFoundError: If it doesn't exist in the caller's organization
            AuthorizationError: If the caller may not access it
        """
        ticket = await self.ticket_dao.get_by_id_and_org(ticket_id, principal.org_id)
        if not ticket:
            raise TicketNotFoundError(ticket_id=ticket_id)
        self.ensure_can_access(ticket, principal)
        return ticket

    # =========================================================================
    # Create
    # =========================================================================

    async def create(
        self,
        principal: Principal,
        title: str,
        description: str,
        requester_first_name: str,
        requester_last_name: str,
        requester_email: str,
        type: TicketType = TicketType.OTHER,
        priority: TicketPriority = TicketPriority.MEDIUM,
        assigned_admin_id: Optional[int] = None,
    ) -> Ticket:
        """
        Create a ticket with the next number of the organization.

        Numbers come from the organization's ticket sequence, which only grows.
        The reservation is made outside the insert savepoint, so a number
        rejected by the (org_id, number) unique constraint stays consumed and
        the retry reserves the next one.

        Raises:
            ValidationError: If assigned_admin_id is not an active admin of the org
            ResourceAlreadyExistsError: If no number could be allocated
        """
        if assigned_admin_id is not None:
            admin = await self.user_dao.get_admin_in_org(
                assigned_admin_id, principal.org_id, active_only=True
            )
            if not admin:
                raise ValidationError(
                    message="Administrateur non trouvé dans cette organisation",
                    assigned_admin_id=assigned_admin_id,
                )

        ticket = None
        for attempt in range(1, settings.TICKET_NUMBER_MAX_RETRIES + 1):
            number = await self.org_dao.next_ticket_number(principal.org_id)
            try:
                async with self.session.begin_nested():
                    ticket = await self.ticket_dao.create(
                        org_id=principal.org_id,
                        number=number,
                        key=format_ticket_key(number),
                        title=title.strip(),
                        description=description.strip(),
                        type=type,
                        priority=priority,
                        status=TicketStatus.NEW,
                        requester_first_name=requester_first_name.strip(),
                        requester_last_name=requester_last_name.strip(),
                        requester_email=requester_email.strip().lower(),
                        created_by_user_id=principal.id,
                        assigned_admin_id=assigned_admin_id,
                    )
                break
            except IntegrityError:
                logger.warning(
                    f"Ticket number {number} taken in org {principal.org_id} "
                    f"(attempt {attempt}/{settings.TICKET_NUMBER_MAX_RETRIES})"
                )

        if ticket is None:
            raise ResourceAlreadyExistsError(
                message="Impossible d'attribuer un numéro de ticket, veuillez réessayer"
            )

        await self.session.commit()
        logger.info(f"Ticket {ticket.key} created in org {ticket.org_id} by user {principal.id}")

        await self.notifications.notify_ticket_created(ticket)
        if assigned_admin_id is not None and assigned_admin_id != principal.id:
            await self.notifications.notify_ticket_assigned(ticket, assigned_admin_id)
        return ticket

    # =========================================================================
    # Read
    # =========================================================================

    async def find_all(
        self, principal: Principal, query: TicketQuery
    ) -> Tuple[List[Ticket], int, int]:
        """
        List tickets visible to the caller.

        Non-admin callers are restricted to their own tickets whatever the
        filters say.

        Returns:
            Tuple of (tickets, total, total_pages)
        """
        if not principal.is_admin:
            query = TicketQuery(
                status=query.status,
                priority=query.priority,
                type=query.type,
                assigned_admin_id=query.assigned_admin_id,
                created_by_user_id=principal.id,
                search=query.search,
                page=query.page,
                limit=query.limit,
                sort_by=query.sort_by,
                sort_order=query.sort_order,
            )

        tickets, total = await self.ticket_dao.list(principal.org_id, query)
        total_pages = math.ceil(total / query.limit) if total else 0
        return tickets, total, total_pages

    async def find_one(self, ticket_id: int, principal: Principal) -> Ticket:
        """
        Ticket detail with messages (oldest first) and attachments.

        Raises:
            TicketNotFoundError: Not in the caller's organization
            AuthorizationError: Not the caller's ticket (non-admin)
        """
        ticket = await self.ticket_dao.get_with_relations(ticket_id, principal.org_id)
        if not ticket:
            raise TicketNotFoundError(ticket_id=ticket_id)
        self.ensure_can_access(ticket, principal)
        return ticket

    # =========================================================================
    # Update
    # =========================================================================

    async def update(self, ticket_id: int, principal: Principal, **fields) -> Ticket:
        """Update business fields of a ticket (owner or admin)."""
        ticket = await self.get_accessible(ticket_id, principal)

        changes = {
            name: value
            for name, value in fields.items()
            if name in UPDATABLE_FIELDS and value is not None
        }
        if "requester_email" in changes:
            changes["requester_email"] = changes["requester_email"].strip().lower()
        if not changes:
            return ticket

        ticket = await self.ticket_dao.update(ticket, **changes)
        await self.session.commit()
        return ticket

    async def update_status(
        self, ticket_id: int, new_status: TicketStatus, principal: Principal
    ) -> Ticket:
        """
        Change the status of a ticket (owner or admin).

        See Ticket.apply_status for the resolved_at/closed_at rules. The
        creator is notified when someone else changes the status.
        """
        ticket = await self.get_accessible(ticket_id, principal)
        previous = ticket.status

        ticket.apply_status(new_status)
        await self.session.flush()
        await self.session.refresh(ticket)
        await self.session.commit()
        logger.info(
            f"Ticket {ticket.key} status {previous.value} -> {new_status.value} by user {principal.id}"
        )

        if ticket.created_by_user_id != principal.id:
            await self.notifications.notify_ticket_updated(
                ticket, ticket.created_by_user_id, new_status
            )
        return ticket

    async def assign(
        self, ticket_id: int, assigned_admin_id: Optional[int], principal: Principal
    ) -> Ticket:
        """
        Assign a ticket to an admin of the organization, or unassign it.

        Only the role of the target is checked here, not its status.

        Raises:
            AuthorizationError: If the caller is not an admin
            TicketNotFoundError: Not in the caller's organization
            ResourceNotFoundError: If the target is not an admin of the organization
        """
        if not principal.is_admin:
            raise AuthorizationError(message="Accès réservé aux administrateurs")

        ticket = await self.ticket_dao.get_by_id_and_org(ticket_id, principal.org_id)
        if not ticket:
            raise TicketNotFoundError(ticket_id=ticket_id)

        if assigned_admin_id is not None:
            admin = await self.user_dao.get_admin_in_org(assigned_admin_id, principal.org_id)
            if not admin:
                raise ResourceNotFoundError(
                    message="Admin non trouvé dans cette organisation",
                    assigned_admin_id=assigned_admin_id,
                )

        ticket = await self.ticket_dao.update(ticket, assigned_admin_id=assigned_admin_id)
        await self.session.commit()

        if assigned_admin_id is not None and assigned_admin_id != principal.id:
            await self.notifications.notify_ticket_assigned(ticket, assigned_admin_id)
        return ticket

    # =========================================================================
    # Delete
    # =========================================================================

    async def remove(self, ticket_id: int, principal: Principal) -> None:
        """
        Delete a ticket with its messages, attachments and notifications (admin only).

        The organization's ticket sequence is left untouched, so the deleted
        number is never handed out again.
        """
        if not principal.is_admin:
            raise AuthorizationError(message="Accès réservé aux administrateurs")

        ticket = await self.ticket_dao.get_by_id_and_org(ticket_id, principal.org_id)
        if not ticket:
            raise TicketNotFoundError(ticket_id=ticket_id)

        key = ticket.key
        await self.ticket_dao.delete_with_children(ticket.id)
        await self.session.commit()
        logger.info(f"Ticket {key} deleted from org {principal.org_id} by user {principal.id}")

    # =========================================================================
    # Attachments
    # =========================================================================

    async def add_attachment(
        self,
        ticket_id: int,
        principal: Principal,
        filename: str,
        mime_type: Optional[str],
        content: bytes,
    ) -> Attachment:
        """
        Store an uploaded file and attach it to a ticket.

        Raises:
            ValidationError: If the file is empty or exceeds MAX_UPLOAD_SIZE
        """
        ticket = await self.get_accessible(ticket_id, principal)

        size = len(content)
        if size == 0:
            raise ValidationError(message="Fichier vide")
        if size > settings.MAX_UPLOAD_SIZE:
            raise ValidationError(
                message="Fichier trop volumineux (10 Mo maximum)",
                size=size,
                max_size=settings.MAX_UPLOAD_SIZE,
            )

        original_name = Path(filename or "fichier").name
        stored_name = f"{secrets.token_hex(16)}{Path(original_name).suffix.lower()}"
        upload_dir = Path(settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / stored_name).write_bytes(content)

        attachment = await self.attachment_dao.create(
            ticket_id=ticket.id,
            filename=original_name,
            mime_type=mime_type or "application/octet-stream",
            size=size,
            url=f"{settings.uploads_url_prefix}/{stored_name}",
        )
        await self.session.commit()
        logger.info(f"Attachment {attachment.id} ({size} bytes) added to ticket {ticket.key}")
        return attachment
