"""
Tests for principal resolution and the admin guard.
"""

import pytest
from dataclasses import FrozenInstanceError
from datetime import timedelta
from fastapi.security import HTTPAuthorizationCredentials

from ticketdesk.core.auth import create_access_token
from ticketdesk.core.deps import get_current_principal, require_admin
from ticketdesk.core.exceptions import AuthenticationError, AuthorizationError
from ticketdesk.core.principal import Principal
from ticketdesk.models.user import UserRole, UserStatus


def _credentials(claims: dict, **kwargs) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(
        scheme="Bearer", credentials=create_access_token(claims, **kwargs)
    )


def _claims(**overrides) -> dict:
    claims = {
        "sub": "5",
        "email": "bob@example.com",
        "role": "USER",
        "status": "ACTIVE",
        "org_id": 2,
    }
    claims.update(overrides)
    return claims


class TestGetCurrentPrincipal:
    @pytest.mark.asyncio
    async def test_valid_token_yields_principal(self):
        principal = await get_current_principal(_credentials(_claims()))

        assert principal == Principal(
            id=5,
            email="bob@example.com",
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
            org_id=2,
        )

    @pytest.mark.asyncio
    async def test_expired_token_is_unauthenticated(self):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_principal(
                _credentials(_claims(), expires_delta=timedelta(seconds=-5))
            )
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Token invalide ou expiré"

    @pytest.mark.asyncio
    async def test_missing_claim_is_unauthenticated(self):
        claims = _claims()
        del claims["org_id"]

        with pytest.raises(AuthenticationError):
            await get_current_principal(_credentials(claims))

    @pytest.mark.asyncio
    async def test_unknown_role_is_unauthenticated(self):
        with pytest.raises(AuthenticationError):
            await get_current_principal(_credentials(_claims(role="ROOT")))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["PENDING", "SUSPENDED", "DELETED"])
    async def test_non_active_status_is_rejected(self, status):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_principal(_credentials(_claims(status=status)))
        assert exc_info.value.message == "Compte non actif"


class TestRequireAdmin:
    @pytest.mark.asyncio
    async def test_admin_passes(self):
        admin = Principal(1, "a@example.com", UserRole.ADMIN, UserStatus.ACTIVE, 1)
        assert await require_admin(admin) is admin

    @pytest.mark.asyncio
    async def test_user_is_forbidden(self):
        user = Principal(2, "u@example.com", UserRole.USER, UserStatus.ACTIVE, 1)
        with pytest.raises(AuthorizationError) as exc_info:
            await require_admin(user)
        assert exc_info.value.status_code == 403


class TestPrincipalClaims:
    def test_claims_round_trip(self):
        principal = Principal(9, "c@example.com", UserRole.ADMIN, UserStatus.ACTIVE, 4)

        claims = principal.to_claims()

        assert claims["sub"] == "9"
        assert Principal.from_claims(claims) == principal

    def test_principal_is_immutable(self):
        principal = Principal(9, "c@example.com", UserRole.ADMIN, UserStatus.ACTIVE, 4)
        with pytest.raises(FrozenInstanceError):
            principal.org_id = 5
