"""
Pydantic schemas for user administration endpoints.
"""

from typing import List
from pydantic import BaseModel

from ticketdesk.models.user import UserRole, UserStatus
from ticketdesk.schemas.auth import UserResponse
from ticketdesk.schemas.ticket import PageMeta


class UpdateUserRole(BaseModel):
    role: UserRole


class UpdateUserStatus(BaseModel):
    """Target status; PENDING can't be set through this endpoint."""

    status: UserStatus


class UserListResponse(BaseModel):
    data: List[UserResponse]
    meta: PageMeta
