"""
Ticket category API endpoints.

The first listing of an organization without categories creates the
default set.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal, require_admin
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.schemas.auth import MessageResponse
from ticketdesk.schemas.catalog import (
    TicketCategoryCreate,
    TicketCategoryUpdate,
    TicketCategoryResponse,
)
from ticketdesk.services.ticket_category_service import TicketCategoryService


router = APIRouter(prefix="/ticket-categories", tags=["ticket-categories"])


@router.get(
    "",
    response_model=List[TicketCategoryResponse],
    status_code=status.HTTP_200_OK,
    summary="List ticket categories",
    description="Ordered by sort_order",
)
async def list_ticket_categories(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> List[TicketCategoryResponse]:
    service = TicketCategoryService(db)
    categories = await service.list_categories(principal)
    return [TicketCategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=TicketCategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create ticket category",
)
async def create_ticket_category(
    data: TicketCategoryCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TicketCategoryResponse:
    service = TicketCategoryService(db)
    category = await service.create_category(
        principal,
        name=data.name,
        color=data.color,
        is_active=data.is_active,
        sort_order=data.sort_order,
    )
    return TicketCategoryResponse.model_validate(category)


@router.get(
    "/{category_id}",
    response_model=TicketCategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Get ticket category",
)
async def get_ticket_category(
    category_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> TicketCategoryResponse:
    service = TicketCategoryService(db)
    return TicketCategoryResponse.model_validate(
        await service.get_category(category_id, principal)
    )


@router.patch(
    "/{category_id}",
    response_model=TicketCategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Update ticket category",
)
async def update_ticket_category(
    category_id: int,
    data: TicketCategoryUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TicketCategoryResponse:
    service = TicketCategoryService(db)
    category = await service.update_category(
        category_id, principal, **data.model_dump(exclude_unset=True)
    )
    return TicketCategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete ticket category",
)
async def delete_ticket_category(
    category_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = TicketCategoryService(db)
    await service.delete_category(category_id, principal)
    return MessageResponse(message="Catégorie supprimée")
