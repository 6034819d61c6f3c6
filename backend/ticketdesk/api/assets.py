"""
Asset inventory API endpoints.

Members can browse the inventory of their organization; admins maintain it.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal, require_admin
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.models.asset import AssetType, AssetStatus
from ticketdesk.schemas.auth import MessageResponse
from ticketdesk.schemas.catalog import AssetCreate, AssetUpdate, AssetResponse
from ticketdesk.services.asset_service import AssetService


router = APIRouter(prefix="/assets", tags=["assets"])


@router.get(
    "",
    response_model=List[AssetResponse],
    status_code=status.HTTP_200_OK,
    summary="List assets",
)
async def list_assets(
    type_filter: Optional[AssetType] = Query(default=None, alias="type"),
    status_filter: Optional[AssetStatus] = Query(default=None, alias="status"),
    assigned_to_email: Optional[str] = Query(default=None, max_length=255),
    search: Optional[str] = Query(
        default=None, max_length=200, description="Matches name, serial number, brand and model"
    ),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> List[AssetResponse]:
    service = AssetService(db)
    assets = await service.list_assets(
        principal,
        type=type_filter,
        status=status_filter,
        assigned_to_email=assigned_to_email,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [AssetResponse.model_validate(a) for a in assets]


@router.post(
    "",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create asset",
)
async def create_asset(
    data: AssetCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    service = AssetService(db)
    asset = await service.create_asset(principal, **data.model_dump())
    return AssetResponse.model_validate(asset)


@router.get(
    "/{asset_id}",
    response_model=AssetResponse,
    status_code=status.HTTP_200_OK,
    summary="Get asset",
)
async def get_asset(
    asset_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    service = AssetService(db)
    return AssetResponse.model_validate(await service.get_asset(asset_id, principal))


@router.patch(
    "/{asset_id}",
    response_model=AssetResponse,
    status_code=status.HTTP_200_OK,
    summary="Update asset",
)
async def update_asset(
    asset_id: int,
    data: AssetUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    service = AssetService(db)
    asset = await service.update_asset(asset_id, principal, **data.model_dump(exclude_unset=True))
    return AssetResponse.model_validate(asset)


@router.delete(
    "/{asset_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete asset",
)
async def delete_asset(
    asset_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = AssetService(db)
    await service.delete_asset(asset_id, principal)
    return MessageResponse(message="Asset supprimé")
