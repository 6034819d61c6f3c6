"""
In-app notification model.

Notifications are written as side effects of ticket and account events and
are only ever visible to the user they are addressed to.
"""

import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, ForeignKey, Index

from ticketdesk.models.base import Base, PrimaryKeyMixin, CreatedAtMixin


class NotificationType(str, enum.Enum):
    TICKET_CREATED = "TICKET_CREATED"
    TICKET_ASSIGNED = "TICKET_ASSIGNED"
    TICKET_UPDATED = "TICKET_UPDATED"
    TICKET_MESSAGE = "TICKET_MESSAGE"
    USER_APPROVED = "USER_APPROVED"


class Notification(Base, PrimaryKeyMixin, CreatedAtMixin):
    """Message addressed to one user of an organization."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
    )

    type = Column(Enum(NotificationType, name="notificationtype"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, user_id={self.user_id})>"
