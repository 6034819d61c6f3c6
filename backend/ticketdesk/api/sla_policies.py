"""
SLA policy API endpoints.

Every member can read the policies of their organization; only admins
change them.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal, require_admin
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.schemas.auth import MessageResponse
from ticketdesk.schemas.catalog import SlaPolicyCreate, SlaPolicyUpdate, SlaPolicyResponse
from ticketdesk.services.sla_policy_service import SlaPolicyService


router = APIRouter(prefix="/sla-policies", tags=["sla-policies"])


@router.get(
    "",
    response_model=List[SlaPolicyResponse],
    status_code=status.HTTP_200_OK,
    summary="List SLA policies",
)
async def list_sla_policies(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> List[SlaPolicyResponse]:
    service = SlaPolicyService(db)
    return [SlaPolicyResponse.model_validate(p) for p in await service.list_policies(principal)]


@router.post(
    "",
    response_model=SlaPolicyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create SLA policy",
    description="One policy per priority; a second one for the same priority is a conflict",
)
async def create_sla_policy(
    data: SlaPolicyCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SlaPolicyResponse:
    service = SlaPolicyService(db)
    policy = await service.create_policy(
        principal,
        priority=data.priority,
        response_time=data.response_time,
        resolution_time=data.resolution_time,
    )
    return SlaPolicyResponse.model_validate(policy)


@router.get(
    "/{policy_id}",
    response_model=SlaPolicyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get SLA policy",
)
async def get_sla_policy(
    policy_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> SlaPolicyResponse:
    service = SlaPolicyService(db)
    return SlaPolicyResponse.model_validate(await service.get_policy(policy_id, principal))


@router.patch(
    "/{policy_id}",
    response_model=SlaPolicyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update SLA policy",
)
async def update_sla_policy(
    policy_id: int,
    data: SlaPolicyUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SlaPolicyResponse:
    service = SlaPolicyService(db)
    policy = await service.update_policy(
        policy_id,
        principal,
        response_time=data.response_time,
        resolution_time=data.resolution_time,
    )
    return SlaPolicyResponse.model_validate(policy)


@router.delete(
    "/{policy_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete SLA policy",
)
async def delete_sla_policy(
    policy_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = SlaPolicyService(db)
    await service.delete_policy(policy_id, principal)
    return MessageResponse(message="Politique SLA supprimée")
