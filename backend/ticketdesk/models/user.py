"""
User and refresh-token models.

Users belong to exactly one organization. The same email address may be
registered in several organizations, but only once per organization.
"""

import enum
from sqlalchemy import Column, Integer, String, Enum, ForeignKey, DateTime, UniqueConstraint

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin, CreatedAtMixin


class UserRole(str, enum.Enum):
    """User role enumeration."""

    ADMIN = "ADMIN"  # Manages tickets, users and configuration of the organization
    USER = "USER"  # Raises tickets and follows their own requests


class UserStatus(str, enum.Enum):
    """
    Account lifecycle.

    PENDING accounts come from the join flow and wait for an admin. Only
    ACTIVE accounts can log in or use an access token.
    """

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """User account scoped to one organization."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", "org_id", name="uq_users_email_org"),)

    # Stored lower-cased
    email = Column(String(255), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    role = Column(Enum(UserRole, name="userrole"), nullable=False, default=UserRole.USER)
    status = Column(Enum(UserStatus, name="userstatus"), nullable=False, default=UserStatus.PENDING)

    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role}, status={self.status})>"


class RefreshToken(Base, PrimaryKeyMixin, CreatedAtMixin):
    """
    Server-side record of an issued refresh token.

    Only the SHA-256 hash of the token is stored. A row is deleted when the
    token is rotated, on logout, and when the owner is suspended or deleted.
    """

    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id})>"
