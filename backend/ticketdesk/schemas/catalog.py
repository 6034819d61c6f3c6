"""
Pydantic schemas for organization reference data: SLA policies, ticket
categories and assets.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from ticketdesk.models.asset import AssetType, AssetStatus
from ticketdesk.models.ticket import TicketPriority


COLOR_PATTERN = r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$"


# ============================================================================
# SLA Policies
# ============================================================================


class SlaPolicyCreate(BaseModel):
    priority: TicketPriority
    response_time: int = Field(..., ge=1, description="Minutes until first response")
    resolution_time: int = Field(..., ge=1, description="Minutes until resolution")


class SlaPolicyUpdate(BaseModel):
    response_time: Optional[int] = Field(None, ge=1)
    resolution_time: Optional[int] = Field(None, ge=1)


class SlaPolicyResponse(BaseModel):
    id: int
    priority: TicketPriority
    response_time: int
    resolution_time: int
    org_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Ticket Categories
# ============================================================================


class TicketCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field("#6366f1", max_length=9, pattern=COLOR_PATTERN)
    is_active: bool = True
    sort_order: Optional[int] = Field(None, ge=0, description="Appended last when omitted")


class TicketCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=9, pattern=COLOR_PATTERN)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class TicketCategoryResponse(BaseModel):
    id: int
    name: str
    color: str
    is_active: bool
    sort_order: int
    org_id: int

    class Config:
        from_attributes = True


# ============================================================================
# Assets
# ============================================================================


class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: AssetType
    status: AssetStatus = AssetStatus.ACTIVE
    serial_number: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)
    assigned_to_email: Optional[EmailStr] = None


class AssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[AssetType] = None
    status: Optional[AssetStatus] = None
    serial_number: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)
    assigned_to_email: Optional[EmailStr] = None


class AssetResponse(BaseModel):
    id: int
    name: str
    type: AssetType
    status: AssetStatus
    serial_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    purchase_date: Optional[date] = None
    notes: Optional[str] = None
    assigned_to_email: Optional[str] = None
    org_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
