"""
Notification Data Access Object.

Every query is scoped by both user_id and org_id of the recipient.
"""

from typing import Optional, List
from sqlalchemy import select, update, func

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.notification import Notification


class NotificationDAO(BaseDAO[Notification]):
    model = Notification

    async def list_for_user(
        self,
        user_id: int,
        org_id: int,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Notification]:
        query = select(Notification).where(
            Notification.user_id == user_id,
            Notification.org_id == org_id,
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())

    async def count_unread(self, user_id: int, org_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Notification).where(
                Notification.user_id == user_id,
                Notification.org_id == org_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar_one()

    async def get_for_user(
        self, notification_id: int, user_id: int, org_id: int
    ) -> Optional[Notification]:
        result = await self.session.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
                Notification.org_id == org_id,
            )
        )
        return result.scalar_one_or_none()

    async def mark_all_read(self, user_id: int, org_id: int) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.org_id == org_id,
                Notification.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def create_many(self, rows: List[dict]) -> List[Notification]:
        """Insert one notification per row dict (fan-out to several recipients)."""
        instances = [Notification(**row) for row in rows]
        self.session.add_all(instances)
        await self.session.flush()
        return instances
