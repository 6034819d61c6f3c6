"""
Ticket category model.

Categories are an organization-defined, ordered list of labels with a
display color. A default set is created the first time an organization
lists its categories.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin


DEFAULT_CATEGORIES = [
    {"name": "Logiciel", "color": "#6366f1"},
    {"name": "Matériel", "color": "#f97316"},
    {"name": "Accès", "color": "#10b981"},
    {"name": "Intégration", "color": "#3b82f6"},
    {"name": "Départ", "color": "#ef4444"},
    {"name": "Autre", "color": "#8b5cf6"},
]


class TicketCategory(Base, PrimaryKeyMixin, TimestampMixin):
    __tablename__ = "ticket_categories"

    name = Column(String(50), nullable=False)
    color = Column(String(9), nullable=False, default="#6366f1")
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<TicketCategory(id={self.id}, name={self.name})>"
