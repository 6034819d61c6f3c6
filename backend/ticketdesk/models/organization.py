"""
Organization model.

An organization is the tenant boundary: every other row carries the org_id
of the organization that owns it.
"""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin


class Organization(Base, PrimaryKeyMixin, TimestampMixin):
    """
    Tenant owning users, tickets and configuration.

    The slug is derived from the name at registration and is the public
    identifier users type when joining or logging in. Its uniqueness is
    enforced by the storage layer, not only by the registration pre-check.

    ticket_sequence is the last ticket number handed out. It only grows, so
    a deleted ticket never gives its number back.
    """

    __tablename__ = "organizations"
    __table_args__ = (UniqueConstraint("slug", name="uq_organizations_slug"),)

    name = Column(String(100), nullable=False)
    slug = Column(String(50), nullable=False)
    ticket_sequence = Column(Integer, nullable=False, default=0, server_default="0")

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug})>"
