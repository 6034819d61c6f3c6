"""
Data Access Object (DAO) package.

DAOs are the only place queries are written; services compose them.
"""

from ticketdesk.dao.base import BaseDAO
from ticketdesk.dao.organization import OrganizationDAO
from ticketdesk.dao.user import UserDAO, RefreshTokenDAO
from ticketdesk.dao.ticket import (
    TicketDAO,
    MessageDAO,
    AttachmentDAO,
    TicketQuery,
    TicketSortField,
    SortOrder,
)
from ticketdesk.dao.notification import NotificationDAO
from ticketdesk.dao.sla_policy import SlaPolicyDAO
from ticketdesk.dao.ticket_category import TicketCategoryDAO
from ticketdesk.dao.asset import AssetDAO

__all__ = [
    "BaseDAO",
    "OrganizationDAO",
    "UserDAO",
    "RefreshTokenDAO",
    "TicketDAO",
    "MessageDAO",
    "AttachmentDAO",
    "TicketQuery",
    "TicketSortField",
    "SortOrder",
    "NotificationDAO",
    "SlaPolicyDAO",
    "TicketCategoryDAO",
    "AssetDAO",
]
