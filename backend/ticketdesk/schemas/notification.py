"""
Pydantic schemas for notification endpoints.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from ticketdesk.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    title: str
    content: str
    read: bool
    ticket_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    data: List[NotificationResponse]
    total: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
