"""
Database models package.

Importing this package registers every table on Base.metadata, which both
Alembic and the test suite rely on.
"""

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin, CreatedAtMixin
from ticketdesk.models.organization import Organization
from ticketdesk.models.user import User, UserRole, UserStatus, RefreshToken
from ticketdesk.models.ticket import (
    Ticket,
    TicketType,
    TicketPriority,
    TicketStatus,
    Message,
    Attachment,
    format_ticket_key,
)
from ticketdesk.models.notification import Notification, NotificationType
from ticketdesk.models.sla_policy import SlaPolicy
from ticketdesk.models.ticket_category import TicketCategory, DEFAULT_CATEGORIES
from ticketdesk.models.asset import Asset, AssetType, AssetStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "CreatedAtMixin",
    "Organization",
    "User",
    "UserRole",
    "UserStatus",
    "RefreshToken",
    "Ticket",
    "TicketType",
    "TicketPriority",
    "TicketStatus",
    "Message",
    "Attachment",
    "format_ticket_key",
    "Notification",
    "NotificationType",
    "SlaPolicy",
    "TicketCategory",
    "DEFAULT_CATEGORIES",
    "Asset",
    "AssetType",
    "AssetStatus",
]
