"""
Notification Service.

WHAT: Stores in-app notifications for ticket and account events, and serves
the caller's own notification inbox.

WHY: Users need to learn about new tickets, assignments, status changes,
new messages and account approval without polling every ticket.

HOW: The notify_* helpers are called by other services after their own
transaction has committed. Each write runs inside a SAVEPOINT; a failure is
logged and rolled back to the savepoint, and never propagates to the
operation that triggered it.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import NotificationNotFoundError
from ticketdesk.core.principal import Principal
from ticketdesk.dao.notification import NotificationDAO
from ticketdesk.dao.user import UserDAO
from ticketdesk.models.notification import Notification, NotificationType
from ticketdesk.models.ticket import Ticket, TicketStatus

logger = logging.getLogger(__name__)


class NotificationService:
    """
    In-app notifications.

    Attributes:
        session: Request database session
        notification_dao: Notification queries
        user_dao: Used to find the admins of an organization
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notification_dao = NotificationDAO(session)
        self.user_dao = UserDAO(session)

    # =========================================================================
    # Inbox
    # =========================================================================

    async def list_for_user(
        self,
        principal: Principal,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Notification], int]:
        """
        List the caller's notifications, newest first.

        Returns:
            Tuple of (page of notifications, total matching)
        """
        items = await self.notification_dao.list_for_user(
            principal.id, principal.org_id, unread_only=unread_only, limit=limit, offset=offset
        )
        if unread_only:
            total = await self.notification_dao.count_unread(principal.id, principal.org_id)
        else:
            total = await self.notification_dao.count(user_id=principal.id, org_id=principal.org_id)
        return items, total

    async def count_unread(self, principal: Principal) -> int:
        return await self.notification_dao.count_unread(principal.id, principal.org_id)

    async def mark_read(self, notification_id: int, principal: Principal) -> Notification:
        notification = await self.notification_dao.get_for_user(
            notification_id, principal.id, principal.org_id
        )
        if not notification:
            raise NotificationNotFoundError(notification_id=notification_id)
        notification = await self.notification_dao.update(notification, read=True)
        await self.session.commit()
        return notification

    async def mark_all_read(self, principal: Principal) -> int:
        updated = await self.notification_dao.mark_all_read(principal.id, principal.org_id)
        await self.session.commit()
        return updated

    async def delete(self, notification_id: int, principal: Principal) -> None:
        notification = await self.notification_dao.get_for_user(
            notification_id, principal.id, principal.org_id
        )
        if not notification:
            raise NotificationNotFoundError(notification_id=notification_id)
        await self.notification_dao.delete(notification.id)
        await self.session.commit()

    # =========================================================================
    # Event helpers
    # =========================================================================

    async def _store(self, kind: NotificationType, rows: List[dict]) -> int:
        """
        Write notification rows inside a savepoint.

        Returns:
            Number of notifications stored (0 when the write failed)
        """
        if not rows:
            return 0
        try:
            async with self.session.begin_nested():
                await self.notification_dao.create_many(rows)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store {kind.value} notification(s): {e}")
            return 0
        logger.debug(f"Stored {len(rows)} {kind.value} notification(s)")
        return len(rows)

    async def notify_ticket_created(self, ticket: Ticket) -> int:
        """Tell every active admin of the organization about a new ticket."""
        try:
            admins = await self.user_dao.list_active_admins(ticket.org_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load admins for ticket {ticket.key}: {e}")
            return 0

        return await self._store(
            NotificationType.TICKET_CREATED,
            [
                {
                    "type": NotificationType.TICKET_CREATED,
                    "title": f"Nouveau ticket {ticket.key}",
                    "content": ticket.title,
                    "user_id": admin.id,
                    "org_id": ticket.org_id,
                    "ticket_id": ticket.id,
                }
                for admin in admins
            ],
        )

    async def notify_ticket_assigned(self, ticket: Ticket, admin_id: int) -> int:
        return await self._store(
            NotificationType.TICKET_ASSIGNED,
            [
                {
                    "type": NotificationType.TICKET_ASSIGNED,
                    "title": f"Ticket {ticket.key} assigné",
                    "content": ticket.title,
                    "user_id": admin_id,
                    "org_id": ticket.org_id,
                    "ticket_id": ticket.id,
                }
            ],
        )

    async def notify_ticket_updated(
        self, ticket: Ticket, user_id: int, new_status: TicketStatus
    ) -> int:
        return await self._store(
            NotificationType.TICKET_UPDATED,
            [
                {
                    "type": NotificationType.TICKET_UPDATED,
                    "title": f"Ticket {ticket.key} mis à jour",
                    "content": f"Statut changé en {new_status.value}",
                    "user_id": user_id,
                    "org_id": ticket.org_id,
                    "ticket_id": ticket.id,
                }
            ],
        )

    async def notify_new_message(
        self, ticket: Ticket, recipient_id: Optional[int], author_name: str
    ) -> int:
        if recipient_id is None:
            return 0
        return await self._store(
            NotificationType.TICKET_MESSAGE,
            [
                {
                    "type": NotificationType.TICKET_MESSAGE,
                    "title": f"Nouveau message sur {ticket.key}",
                    "content": f"Message de {author_name}",
                    "user_id": recipient_id,
                    "org_id": ticket.org_id,
                    "ticket_id": ticket.id,
                }
            ],
        )

    async def notify_user_approved(self, user_id: int, org_id: int) -> int:
        return await self._store(
            NotificationType.USER_APPROVED,
            [
                {
                    "type": NotificationType.USER_APPROVED,
                    "title": "Compte approuvé",
                    "content": "Votre compte a été validé par un administrateur.",
                    "user_id": user_id,
                    "org_id": org_id,
                    "ticket_id": None,
                }
            ],
        )
