"""Ticket category Data Access Object."""

from typing import Optional, List
from sqlalchemy import select, func

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.ticket_category import TicketCategory


class TicketCategoryDAO(BaseDAO[TicketCategory]):
    model = TicketCategory

    async def list_for_org(self, org_id: int) -> List[TicketCategory]:
        result = await self.session.execute(
            select(TicketCategory)
            .where(TicketCategory.org_id == org_id)
            .order_by(TicketCategory.sort_order.asc(), TicketCategory.id.asc())
        )
        return list(result.scalars().all())

    async def get_max_sort_order(self, org_id: int) -> Optional[int]:
        result = await self.session.execute(
            select(func.max(TicketCategory.sort_order)).where(TicketCategory.org_id == org_id)
        )
        return result.scalar_one_or_none()
