"""
FastAPI exception handlers for custom exceptions.

Exception handlers convert application exceptions into JSON responses with
the correct HTTP status code, so every error body has the same shape.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketdesk.core.exceptions import AppException
from ticketdesk.middleware.request_context import get_request_context

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException and its subclasses.

    Args:
        request: The FastAPI request object
        exc: The custom exception instance

    Returns:
        JSONResponse with error details
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Request bodies and query parameters that fail validation are reported
    as 400 with one entry per offending field.

    Args:
        request: The FastAPI request object
        exc: The Pydantic validation error

    Returns:
        JSONResponse with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Données invalides",
            "status_code": 400,
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions (unknown routes, wrong methods, missing bearer).

    A missing Authorization header is reported by HTTPBearer as 403 (401 in
    recent FastAPI releases); either way it becomes our 401 body.
    """
    status_code = exc.status_code
    message = exc.detail
    if status_code in (401, 403) and exc.detail == "Not authenticated":
        status_code = 401
        message = "Token invalide ou expiré"

    return JSONResponse(
        status_code=status_code,
        content={
            "error": "HTTPException",
            "message": message,
            "status_code": status_code,
            "details": None,
        },
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    The full traceback is logged together with the request id; the client
    only receives a generic message.
    """
    context = get_request_context()
    request_id = context.request_id if context else "-"
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path} "
        f"(request_id={request_id})"
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "details": None,
        },
    )
