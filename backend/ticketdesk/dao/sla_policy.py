"""SLA policy Data Access Object."""

from typing import Optional, List
from sqlalchemy import select, case

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.sla_policy import SlaPolicy
from ticketdesk.models.ticket import TicketPriority, PRIORITY_ORDER


class SlaPolicyDAO(BaseDAO[SlaPolicy]):
    model = SlaPolicy

    async def list_for_org(self, org_id: int) -> List[SlaPolicy]:
        """Policies of the organization, from LOW to CRITICAL."""
        result = await self.session.execute(
            select(SlaPolicy)
            .where(SlaPolicy.org_id == org_id)
            .order_by(case(PRIORITY_ORDER, value=SlaPolicy.priority))
        )
        return list(result.scalars().all())

    async def get_by_priority(self, org_id: int, priority: TicketPriority) -> Optional[SlaPolicy]:
        result = await self.session.execute(
            select(SlaPolicy).where(
                SlaPolicy.org_id == org_id,
                SlaPolicy.priority == priority,
            )
        )
        return result.scalar_one_or_none()
