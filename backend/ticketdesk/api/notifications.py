"""
Notification API endpoints.

WHAT: The caller's in-app notification inbox.

HOW: Every query is scoped to the caller's user id and organization; a
notification of someone else is reported as not found.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.schemas.auth import MessageResponse
from ticketdesk.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
)
from ticketdesk.services.notification_service import NotificationService


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    status_code=status.HTTP_200_OK,
    summary="List notifications",
    description="Newest first",
)
async def list_notifications(
    unread: bool = Query(default=False, description="Only unread notifications"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    service = NotificationService(db)
    items, total = await service.list_for_user(
        principal, unread_only=unread, limit=limit, offset=offset
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in items],
        total=total,
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    status_code=status.HTTP_200_OK,
    summary="Count unread notifications",
)
async def unread_count(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    service = NotificationService(db)
    return UnreadCountResponse(count=await service.count_unread(principal))


@router.patch(
    "/read-all",
    response_model=MarkAllReadResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark all notifications as read",
)
async def mark_all_read(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MarkAllReadResponse:
    service = NotificationService(db)
    return MarkAllReadResponse(updated=await service.mark_all_read(principal))


@router.patch(
    "/{notification_id}/read",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark notification as read",
)
async def mark_read(
    notification_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = NotificationService(db)
    await service.mark_read(notification_id, principal)
    return MessageResponse(message="Notification marquée comme lue")


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete notification",
)
async def delete_notification(
    notification_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = NotificationService(db)
    await service.delete(notification_id, principal)
    return MessageResponse(message="Notification supprimée")
