"""
Middleware package.

Cross-cutting request handling shared by every route.
"""

from ticketdesk.middleware.request_context import (
    RequestContextMiddleware,
    RequestContext,
    get_request_context,
    get_client_ip,
)

__all__ = [
    "RequestContextMiddleware",
    "RequestContext",
    "get_request_context",
    "get_client_ip",
]
