"""
Pydantic schemas for ticket endpoints.

WHAT: Request/response schemas for tickets, their messages and attachments.

WHY: Schemas define the API contract:
1. Validate incoming request data (lengths, enums, emails)
2. Document the API for OpenAPI/Swagger
3. Control which fields are exposed

HOW: Pydantic v2 models; enums are shared with the SQLAlchemy models so the
API and the database can't drift apart.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field

from ticketdesk.models.ticket import TicketType, TicketPriority, TicketStatus


# ============================================================================
# Requests
# ============================================================================


class TicketCreate(BaseModel):
    """
    Ticket creation request.

    The requester is the person the ticket is raised for, which may differ
    from the account filing it.
    """

    title: str = Field(..., min_length=1, max_length=200, description="Short summary")
    description: str = Field(..., min_length=1, max_length=5000)
    type: TicketType = Field(TicketType.OTHER)
    priority: TicketPriority = Field(TicketPriority.MEDIUM)
    requester_first_name: str = Field(..., min_length=1, max_length=50)
    requester_last_name: str = Field(..., min_length=1, max_length=50)
    requester_email: EmailStr
    assigned_admin_id: Optional[int] = Field(
        None, description="Active admin of the organization to assign at creation"
    )


class TicketUpdate(BaseModel):
    """Business-field update; status and assignment have their own endpoints."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    type: Optional[TicketType] = None
    priority: Optional[TicketPriority] = None
    requester_first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    requester_last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    requester_email: Optional[EmailStr] = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketAssign(BaseModel):
    """null unassigns the ticket."""

    assigned_admin_id: Optional[int] = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)


# ============================================================================
# Responses
# ============================================================================


class MessageResponse(BaseModel):
    id: int
    ticket_id: int
    author_user_id: Optional[int] = None
    author_name: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class AttachmentResponse(BaseModel):
    id: int
    ticket_id: int
    filename: str
    mime_type: str
    size: int
    url: str
    created_at: datetime

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    id: int
    org_id: int
    number: int
    key: str
    title: str
    description: str
    type: TicketType
    priority: TicketPriority
    status: TicketStatus
    requester_first_name: str
    requester_last_name: str
    requester_email: str
    created_by_user_id: int
    assigned_admin_id: Optional[int] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TicketDetailResponse(TicketResponse):
    """Ticket with its message thread (oldest first) and attachments."""

    messages: List[MessageResponse] = []
    attachments: List[AttachmentResponse] = []


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class TicketListResponse(BaseModel):
    data: List[TicketResponse]
    meta: PageMeta


class TicketDeletedResponse(BaseModel):
    deleted: bool = True
