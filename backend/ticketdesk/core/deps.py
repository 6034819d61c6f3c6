"""
FastAPI dependencies for authentication and authorization.

Routes declare what they need:
    principal: Principal = Depends(get_current_principal)   # any active member
    principal: Principal = Depends(require_admin)           # ADMIN only

Tenant isolation and ticket ownership are enforced in the services, which
receive the principal explicitly.

WHY: Services take a Principal argument instead of reading request state, so
they can be called and tested without an HTTP request.
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ticketdesk.core.auth import verify_token
from ticketdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.models.user import UserStatus


logger = logging.getLogger(__name__)

# WHY: HTTPBearer extracts the token from the Authorization header
# Format: "Authorization: Bearer <token>"
security = HTTPBearer()


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """
    Resolve the caller from the bearer access token.

    WHY: The status checked here is the one embedded in the token when it was
    issued, which keeps every request free of a user lookup. Suspension
    revokes refresh tokens immediately, so a suspended account loses access
    once its current access token expires.

    Args:
        credentials: JWT token from Authorization header

    Returns:
        The authenticated Principal

    Raises:
        AuthenticationError: If the token is invalid, expired or the account not active
    """
    try:
        payload = verify_token(credentials.credentials)
    except (TokenExpiredError, TokenInvalidError) as e:
        raise AuthenticationError(message=e.message)

    try:
        principal = Principal.from_claims(payload)
    except (KeyError, ValueError, TypeError):
        logger.warning("Rejected access token with malformed claims")
        raise AuthenticationError(message="Token invalide ou expiré")

    if principal.status != UserStatus.ACTIVE:
        raise AuthenticationError(message="Compte non actif", user_id=principal.id)

    return principal


async def require_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """
    Require the caller to have the ADMIN role.

    Raises:
        AuthorizationError: If the caller is not ADMIN
    """
    if not principal.is_admin:
        raise AuthorizationError(
            message="Accès réservé aux administrateurs",
            user_id=principal.id,
            user_role=principal.role.value,
        )
    return principal
