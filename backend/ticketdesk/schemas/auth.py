"""
Pydantic schemas for authentication and profile endpoints.
"""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from ticketdesk.models.user import UserRole, UserStatus


PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100


def check_password_strength(value: str) -> str:
    """
    Password policy shared by registration, join and password change.

    At least one lowercase letter, one uppercase letter and one digit;
    length is enforced by the field definition.
    """
    if not re.search(r"[a-z]", value) or not re.search(r"[A-Z]", value) or not re.search(r"\d", value):
        raise ValueError(
            "Le mot de passe doit contenir au moins une minuscule, une majuscule et un chiffre"
        )
    return value


# ============================================================================
# Requests
# ============================================================================


class RegisterRequest(BaseModel):
    """Create an organization together with its first (admin) user."""

    organization_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("organization_name", "first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Ce champ ne peut pas être vide")
        return v


class JoinRequest(BaseModel):
    """Ask to join an existing organization; the account starts PENDING."""

    organization_slug: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    organization_slug: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """
    Partial profile update.

    new_password requires current_password; the check happens in the
    service so the error message can say which of the two is wrong.
    """

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    current_password: Optional[str] = Field(None, max_length=PASSWORD_MAX_LENGTH)
    new_password: Optional[str] = Field(
        None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH
    )

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_password_strength(v)


# ============================================================================
# Responses
# ============================================================================


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    org_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class OrganizationSummary(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenPairResponse):
    """Tokens plus the signed-in user and their organization."""

    user: UserResponse
    organization: OrganizationSummary


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
