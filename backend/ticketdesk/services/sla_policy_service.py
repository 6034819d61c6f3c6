"""
SLA policy service.

WHAT: CRUD for the per-priority response and resolution targets of an
organization.

WHY: Each priority has at most one policy per organization; the unique
constraint on (priority, org_id) is reported as a conflict, not a 500.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import ResourceAlreadyExistsError, SlaPolicyNotFoundError
from ticketdesk.core.principal import Principal
from ticketdesk.dao.sla_policy import SlaPolicyDAO
from ticketdesk.models.sla_policy import SlaPolicy
from ticketdesk.models.ticket import TicketPriority

logger = logging.getLogger(__name__)


def _duplicate_priority(priority: TicketPriority) -> ResourceAlreadyExistsError:
    return ResourceAlreadyExistsError(
        message=f"Une politique SLA existe déjà pour la priorité {priority.value}",
        priority=priority.value,
    )


class SlaPolicyService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.sla_dao = SlaPolicyDAO(session)

    async def list_policies(self, principal: Principal) -> List[SlaPolicy]:
        return await self.sla_dao.list_for_org(principal.org_id)

    async def get_policy(self, policy_id: int, principal: Principal) -> SlaPolicy:
        policy = await self.sla_dao.get_by_id_and_org(policy_id, principal.org_id)
        if not policy:
            raise SlaPolicyNotFoundError(policy_id=policy_id)
        return policy

    async def create_policy(
        self,
        principal: Principal,
        priority: TicketPriority,
        response_time: int,
        resolution_time: int,
    ) -> SlaPolicy:
        """
        Raises:
            ResourceAlreadyExistsError: If the priority already has a policy
        """
        if await self.sla_dao.get_by_priority(principal.org_id, priority):
            raise _duplicate_priority(priority)

        try:
            policy = await self.sla_dao.create(
                org_id=principal.org_id,
                priority=priority,
                response_time=response_time,
                resolution_time=resolution_time,
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise _duplicate_priority(priority)

        logger.info(f"SLA policy {priority.value} created in org {principal.org_id}")
        return policy

    async def update_policy(
        self,
        policy_id: int,
        principal: Principal,
        response_time: Optional[int] = None,
        resolution_time: Optional[int] = None,
    ) -> SlaPolicy:
        policy = await self.get_policy(policy_id, principal)
        changes = {}
        if response_time is not None:
            changes["response_time"] = response_time
        if resolution_time is not None:
            changes["resolution_time"] = resolution_time
        if changes:
            policy = await self.sla_dao.update(policy, **changes)
            await self.session.commit()
        return policy

    async def delete_policy(self, policy_id: int, principal: Principal) -> None:
        policy = await self.get_policy(policy_id, principal)
        await self.sla_dao.delete(policy.id)
        await self.session.commit()
        logger.info(f"SLA policy {policy_id} deleted from org {principal.org_id}")
