"""
SLA policy model.

Each organization may define at most one policy per ticket priority, giving
the target first-response and resolution times in minutes.
"""

from sqlalchemy import Column, Integer, Enum, ForeignKey, UniqueConstraint

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin
from ticketdesk.models.ticket import TicketPriority


class SlaPolicy(Base, PrimaryKeyMixin, TimestampMixin):
    __tablename__ = "sla_policies"
    __table_args__ = (
        UniqueConstraint("priority", "org_id", name="uq_sla_policies_priority_org"),
    )

    priority = Column(Enum(TicketPriority, name="ticketpriority"), nullable=False)
    response_time = Column(Integer, nullable=False)  # minutes
    resolution_time = Column(Integer, nullable=False)  # minutes
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<SlaPolicy(id={self.id}, priority={self.priority}, org_id={self.org_id})>"
