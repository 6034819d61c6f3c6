"""Asset inventory Data Access Object."""

from typing import Optional, List
from sqlalchemy import select, or_

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.asset import Asset, AssetType, AssetStatus


class AssetDAO(BaseDAO[Asset]):
    model = Asset

    async def list_for_org(
        self,
        org_id: int,
        type: Optional[AssetType] = None,
        status: Optional[AssetStatus] = None,
        assigned_to_email: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Asset]:
        """
        List assets of an organization.

        search matches name, serial number, brand or model (case-insensitive).
        """
        query = select(Asset).where(Asset.org_id == org_id)

        if type is not None:
            query = query.where(Asset.type == type)
        if status is not None:
            query = query.where(Asset.status == status)
        if assigned_to_email:
            query = query.where(Asset.assigned_to_email == assigned_to_email.strip().lower())
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Asset.name.ilike(pattern),
                    Asset.serial_number.ilike(pattern),
                    Asset.brand.ilike(pattern),
                    Asset.model.ilike(pattern),
                )
            )

        result = await self.session.execute(
            query.order_by(Asset.created_at.desc(), Asset.id.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all())
