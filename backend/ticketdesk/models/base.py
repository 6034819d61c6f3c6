"""
Base model class and shared column mixins.

Timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.utcnow()


class Base(DeclarativeBase):
    """Declarative base shared by every ticketdesk table."""

    pass


class CreatedAtMixin:
    """Adds an immutable creation timestamp (messages, attachments, notifications)."""

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class TimestampMixin:
    """Adds created_at and updated_at timestamps to mutable entities."""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class PrimaryKeyMixin:
    """Adds an auto-incrementing integer primary key."""

    id = Column(Integer, primary_key=True, index=True)
