"""
User administration API endpoints.

WHAT: Admin views of the organization's members and the approval of join
requests.

HOW: FastAPI router with require_admin on every endpoint. Lookups are
scoped to the admin's organization.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import require_admin
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.models.user import UserRole, UserStatus
from ticketdesk.schemas.auth import UserResponse
from ticketdesk.schemas.ticket import PageMeta
from ticketdesk.schemas.user import UpdateUserRole, UpdateUserStatus, UserListResponse
from ticketdesk.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=UserListResponse,
    status_code=status.HTTP_200_OK,
    summary="List users",
)
async def list_users(
    role: Optional[UserRole] = Query(default=None),
    status_filter: Optional[UserStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    service = UserService(db)
    users, total, total_pages = await service.list_users(
        principal,
        role=role,
        status=status_filter,
        search=search,
        page=page,
        limit=limit,
    )
    return UserListResponse(
        data=[UserResponse.model_validate(u) for u in users],
        meta=PageMeta(total=total, page=page, limit=limit, total_pages=total_pages),
    )


@router.get(
    "/pending",
    response_model=List[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List join requests",
    description="PENDING accounts, oldest request first",
)
async def list_pending_users(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    service = UserService(db)
    users = await service.list_pending(principal)
    return [UserResponse.model_validate(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user",
)
async def get_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = UserService(db)
    user = await service.get_user(user_id, principal)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}/approve",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve join request",
)
async def approve_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = UserService(db)
    user = await service.approve(user_id, principal)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}/role",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Change user role",
)
async def update_user_role(
    user_id: int,
    data: UpdateUserRole,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = UserService(db)
    user = await service.update_role(user_id, data.role, principal)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}/status",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Change user status",
    description="SUSPENDED and DELETED revoke every refresh token of the user",
)
async def update_user_status(
    user_id: int,
    data: UpdateUserStatus,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = UserService(db)
    user = await service.update_status(user_id, data.status, principal)
    return UserResponse.model_validate(user)
