"""Organization Data Access Object."""

from typing import Optional
from sqlalchemy import select, update

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.organization import Organization


class OrganizationDAO(BaseDAO[Organization]):
    model = Organization

    async def get_by_slug(self, slug: str) -> Optional[Organization]:
        """Look up an organization by slug, ignoring case."""
        result = await self.session.execute(
            select(Organization).where(Organization.slug == slug.strip().lower())
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        return await self.exists(slug=slug)

    async def next_ticket_number(self, org_id: int) -> int:
        """
        Reserve the next ticket number of the organization.

        The increment is a single UPDATE ... RETURNING, so the row lock it
        takes serializes concurrent creations in the same organization. The
        reservation belongs to the caller's transaction: a rollback hands the
        number back, a commit consumes it for good.

        Args:
            org_id: Organization ID

        Returns:
            The reserved number (1 for the first ticket)
        """
        result = await self.session.execute(
            update(Organization)
            .where(Organization.id == org_id)
            .values(ticket_sequence=Organization.ticket_sequence + 1)
            .returning(Organization.ticket_sequence)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()
