"""
Asset inventory service.

WHAT: CRUD for the IT equipment of an organization.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import AssetNotFoundError
from ticketdesk.core.principal import Principal
from ticketdesk.dao.asset import AssetDAO
from ticketdesk.models.asset import Asset, AssetStatus, AssetType

logger = logging.getLogger(__name__)


def _normalize(fields: dict) -> dict:
    """Strip text fields and lower-case the attributed email."""
    normalized = {}
    for name, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
            if name == "assigned_to_email":
                value = value.lower()
        normalized[name] = value
    return normalized


class AssetService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.asset_dao = AssetDAO(session)

    async def list_assets(
        self,
        principal: Principal,
        type: Optional[AssetType] = None,
        status: Optional[AssetStatus] = None,
        assigned_to_email: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Asset]:
        return await self.asset_dao.list_for_org(
            principal.org_id,
            type=type,
            status=status,
            assigned_to_email=assigned_to_email,
            search=search,
            limit=limit,
            offset=offset,
        )

    async def get_asset(self, asset_id: int, principal: Principal) -> Asset:
        asset = await self.asset_dao.get_by_id_and_org(asset_id, principal.org_id)
        if not asset:
            raise AssetNotFoundError(asset_id=asset_id)
        return asset

    async def create_asset(self, principal: Principal, **fields) -> Asset:
        asset = await self.asset_dao.create(org_id=principal.org_id, **_normalize(fields))
        await self.session.commit()
        logger.info(f"Asset {asset.id} ({asset.type.value}) created in org {principal.org_id}")
        return asset

    async def update_asset(self, asset_id: int, principal: Principal, **fields) -> Asset:
        """Apply the provided fields; None values are left unchanged."""
        asset = await self.get_asset(asset_id, principal)
        changes = _normalize({k: v for k, v in fields.items() if v is not None})
        if changes:
            asset = await self.asset_dao.update(asset, **changes)
            await self.session.commit()
        return asset

    async def delete_asset(self, asset_id: int, principal: Principal) -> None:
        asset = await self.get_asset(asset_id, principal)
        await self.asset_dao.delete(asset.id)
        await self.session.commit()
        logger.info(f"Asset {asset_id} deleted from org {principal.org_id}")
