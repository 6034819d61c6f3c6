"""
Business logic services package.

Services hold the business rules and transaction boundaries, between the API
routers and the DAOs (API → Service → DAO). Every operation receives the
caller's Principal explicitly.
"""

from ticketdesk.services.auth_service import AuthService
from ticketdesk.services.ticket_service import TicketService
from ticketdesk.services.message_service import MessageService
from ticketdesk.services.notification_service import NotificationService
from ticketdesk.services.user_service import UserService
from ticketdesk.services.sla_policy_service import SlaPolicyService
from ticketdesk.services.ticket_category_service import TicketCategoryService
from ticketdesk.services.asset_service import AssetService

__all__ = [
    "AuthService",
    "TicketService",
    "MessageService",
    "NotificationService",
    "UserService",
    "SlaPolicyService",
    "TicketCategoryService",
    "AssetService",
]
