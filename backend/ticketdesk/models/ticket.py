"""
Ticket models.

WHAT: SQLAlchemy models for tickets, their message thread and attachments.

WHY: Tickets are the core record of the help desk:
1. Numbered per organization (TCK-0001, TCK-0002, ...)
2. Status workflow with resolved/closed timestamps
3. Requester identity captured on the ticket itself
4. Threaded messages and file attachments

HOW: Uses SQLAlchemy 2.0 Mapped columns with:
- Enums for type, priority and status
- A (org_id, number) unique constraint backing the per-org numbering
- Database-level cascades from a ticket to its messages and attachments
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ticketdesk.models.base import Base, utcnow


TICKET_KEY_PREFIX = "TCK"


def format_ticket_key(number: int) -> str:
    """
    Human-readable key for a ticket number.

    Example:
        >>> format_ticket_key(7)
        'TCK-0007'
    """
    return f"{TICKET_KEY_PREFIX}-{number:04d}"


# ============================================================================
# Enums
# ============================================================================


class TicketType(str, Enum):
    """Kind of IT request."""

    SOFTWARE = "SOFTWARE"
    HARDWARE = "HARDWARE"
    ACCESS = "ACCESS"
    ONBOARDING = "ONBOARDING"
    OFFBOARDING = "OFFBOARDING"
    OTHER = "OTHER"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TicketStatus(str, Enum):
    """
    Ticket status values.

    Any status may follow any other. Moving to RESOLVED or CLOSED stamps
    resolved_at/closed_at the first time; moving back to NEW or IN_PROGRESS
    clears both.
    """

    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


# Order used when sorting by priority/status; the enum's declaration order
# is the business order.
PRIORITY_ORDER = {priority: index for index, priority in enumerate(TicketPriority)}
STATUS_ORDER = {status: index for index, status in enumerate(TicketStatus)}


# ============================================================================
# Ticket Model
# ============================================================================


class Ticket(Base):
    """
    IT support ticket.

    Security: Org-scoped; non-admin users only see the tickets they created.
    """

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    key: Mapped[str] = mapped_column(String(20), nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    type: Mapped[TicketType] = mapped_column(
        SQLEnum(TicketType, name="tickettype"),
        default=TicketType.OTHER,
        nullable=False,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        SQLEnum(TicketPriority, name="ticketpriority"),
        default=TicketPriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[TicketStatus] = mapped_column(
        SQLEnum(TicketStatus, name="ticketstatus"),
        default=TicketStatus.NEW,
        nullable=False,
    )

    # Requester identity, which may differ from the account that filed the ticket
    requester_first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    requester_last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    requester_email: Mapped[str] = mapped_column(String(255), nullable=False)

    created_by_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    assigned_admin_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    messages: Mapped[List["Message"]] = relationship(
        back_populates="ticket",
        order_by=lambda: [Message.created_at, Message.id],
        passive_deletes=True,
        lazy="raise",
    )
    attachments: Mapped[List["Attachment"]] = relationship(
        back_populates="ticket",
        order_by=lambda: [Attachment.created_at, Attachment.id],
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("org_id", "number", name="uq_tickets_org_number"),
        UniqueConstraint("org_id", "key", name="uq_tickets_org_key"),
        Index("ix_tickets_org_status", "org_id", "status"),
        Index("ix_tickets_org_created_by", "org_id", "created_by_user_id"),
        Index("ix_tickets_org_assigned", "org_id", "assigned_admin_id"),
    )

    def apply_status(self, new_status: TicketStatus, now: Optional[datetime] = None) -> None:
        """
        Move the ticket to ``new_status`` and maintain the lifecycle timestamps.

        - RESOLVED: set resolved_at unless it is already set
        - CLOSED: set closed_at unless it is already set
        - NEW / IN_PROGRESS: clear resolved_at and closed_at
        - ON_HOLD: timestamps untouched
        """
        now = now or utcnow()
        if new_status == TicketStatus.RESOLVED and self.resolved_at is None:
            self.resolved_at = now
        elif new_status == TicketStatus.CLOSED and self.closed_at is None:
            self.closed_at = now
        elif new_status in (TicketStatus.NEW, TicketStatus.IN_PROGRESS):
            self.resolved_at = None
            self.closed_at = None
        self.status = new_status

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, key={self.key}, status={self.status})>"


# ============================================================================
# Message Model
# ============================================================================


class Message(Base):
    """
    One entry in a ticket's conversation thread.

    author_name is copied at posting time so the thread still reads
    correctly after the author account is removed.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    author_name: Mapped[str] = mapped_column(String(101), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    ticket: Mapped["Ticket"] = relationship(back_populates="messages", lazy="raise")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, ticket_id={self.ticket_id})>"


# ============================================================================
# Attachment Model
# ============================================================================


class Attachment(Base):
    """File uploaded against a ticket; ``url`` is where the API serves it."""

    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    ticket: Mapped["Ticket"] = relationship(back_populates="attachments", lazy="raise")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, filename={self.filename})>"
