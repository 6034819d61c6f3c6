"""
Request context middleware.

WHAT: Gives every request an id, records the client address, and logs one
line per request with its status and duration.

WHY: Errors logged deep in a service can be tied back to the request that
caused them through the request id, which is also returned to the client in
the X-Request-ID header.

HOW: The context is stored on request.state for handlers and in a ContextVar
for code that has no access to the request (exception handlers, services).
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class RequestContext:
    """Request-scoped data available to logs."""

    request_id: str
    client_ip: str
    method: str
    path: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """Context of the request being handled, or None outside a request."""
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Client address, preferring proxy headers.

    X-Forwarded-For may hold a chain "client, proxy1, proxy2"; the first
    entry is the client. These headers are only trustworthy behind a proxy
    that overwrites them.
    """
    x_real_ip = request.headers.get("X-Real-IP")
    if x_real_ip:
        return x_real_ip.strip()

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _incoming_request_id(request: Request) -> Optional[str]:
    """Reuse a caller-supplied id when it is a reasonable token."""
    value = request.headers.get(REQUEST_ID_HEADER)
    if value and len(value) <= 64 and value.replace("-", "").isalnum():
        return value
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = RequestContext(
            request_id=_incoming_request_id(request) or str(uuid.uuid4()),
            client_ip=get_client_ip(request),
            method=request.method,
            path=request.url.path,
        )
        request.state.context = context
        token = _request_context.set(context)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = context.request_id
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{context.method} {context.path} -> {response.status_code} "
                f"({elapsed_ms:.1f} ms) [{context.request_id}]"
            )
            return response
        finally:
            _request_context.reset(token)
