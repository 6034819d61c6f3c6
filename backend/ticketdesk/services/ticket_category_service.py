"""
Ticket category service.

WHAT: CRUD for the ordered category list of an organization.

HOW: An organization without categories gets DEFAULT_CATEGORIES the first
time it lists them. New categories go last unless a sort_order is given.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import TicketCategoryNotFoundError
from ticketdesk.core.principal import Principal
from ticketdesk.dao.ticket_category import TicketCategoryDAO
from ticketdesk.models.ticket_category import TicketCategory, DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)


class TicketCategoryService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.category_dao = TicketCategoryDAO(session)

    async def list_categories(self, principal: Principal) -> List[TicketCategory]:
        categories = await self.category_dao.list_for_org(principal.org_id)
        if categories:
            return categories

        for position, default in enumerate(DEFAULT_CATEGORIES):
            await self.category_dao.create(
                org_id=principal.org_id,
                name=default["name"],
                color=default["color"],
                is_active=True,
                sort_order=position,
            )
        await self.session.commit()
        logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories for org {principal.org_id}")
        return await self.category_dao.list_for_org(principal.org_id)

    async def get_category(self, category_id: int, principal: Principal) -> TicketCategory:
        category = await self.category_dao.get_by_id_and_org(category_id, principal.org_id)
        if not category:
            raise TicketCategoryNotFoundError(category_id=category_id)
        return category

    async def create_category(
        self,
        principal: Principal,
        name: str,
        color: str,
        is_active: bool = True,
        sort_order: Optional[int] = None,
    ) -> TicketCategory:
        if sort_order is None:
            current_max = await self.category_dao.get_max_sort_order(principal.org_id)
            sort_order = 0 if current_max is None else current_max + 1

        category = await self.category_dao.create(
            org_id=principal.org_id,
            name=name.strip(),
            color=color,
            is_active=is_active,
            sort_order=sort_order,
        )
        await self.session.commit()
        return category

    async def update_category(
        self, category_id: int, principal: Principal, **fields
    ) -> TicketCategory:
        category = await self.get_category(category_id, principal)
        changes = {name: value for name, value in fields.items() if value is not None}
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if changes:
            category = await self.category_dao.update(category, **changes)
            await self.session.commit()
        return category

    async def delete_category(self, category_id: int, principal: Principal) -> None:
        category = await self.get_category(category_id, principal)
        await self.category_dao.delete(category.id)
        await self.session.commit()
