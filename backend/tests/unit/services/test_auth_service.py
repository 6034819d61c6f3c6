"""
Unit tests for AuthService: registration, join, login, refresh rotation,
logout and profile updates.
"""

import pytest
from unittest.mock import AsyncMock

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.auth import verify_password, verify_token
from ticketdesk.core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
    ValidationError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.dao.user import RefreshTokenDAO, UserDAO
from ticketdesk.models.user import UserRole, UserStatus
from ticketdesk.services.auth_service import AuthService, JOIN_REQUEST_MESSAGE
from tests.factories import (
    DEFAULT_PASSWORD,
    OrganizationFactory,
    UserFactory,
    RefreshTokenFactory,
)


class TestRegister:
    @pytest.mark.asyncio
    async def test_first_user_is_active_admin(self, db_session: AsyncSession):
        user, org, access_token, refresh_token = await AuthService(db_session).register(
            "Acme Corp", "Alice@Example.com", "Password123", " Alice ", "Martin"
        )

        assert org.slug == "acme-corp"
        assert user.email == "alice@example.com"
        assert user.first_name == "Alice"
        assert user.role == UserRole.ADMIN
        assert user.status == UserStatus.ACTIVE
        claims = verify_token(access_token)
        assert Principal.from_claims(claims) == Principal.from_user(user)
        assert len(refresh_token) == 128

    @pytest.mark.asyncio
    async def test_taken_slug_conflicts(self, db_session: AsyncSession):
        await OrganizationFactory.create(db_session, name="Acme Corp")

        with pytest.raises(ResourceAlreadyExistsError):
            await AuthService(db_session).register(
                "ACME corp!", "bob@example.com", "Password123", "Bob", "Durand"
            )

    @pytest.mark.asyncio
    async def test_name_without_slug_rejected(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await AuthService(db_session).register(
                "!!", "bob@example.com", "Password123", "Bob", "Durand"
            )


class TestJoin:
    @pytest.mark.asyncio
    async def test_join_creates_pending_user(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")

        message = await AuthService(db_session).join(
            "acme-corp", "new@example.com", "Password123", "Nina", "Petit"
        )

        assert message == JOIN_REQUEST_MESSAGE
        user = await UserDAO(db_session).get_by_email_and_org("new@example.com", org.id)
        assert user.status == UserStatus.PENDING
        assert user.role == UserRole.USER

    @pytest.mark.asyncio
    async def test_unknown_organization(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await AuthService(db_session).join(
                "nowhere", "new@example.com", "Password123", "Nina", "Petit"
            )

    @pytest.mark.asyncio
    async def test_duplicate_email_in_organization(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")
        await UserFactory.create(db_session, email="taken@example.com", org_id=org.id)

        with pytest.raises(ResourceAlreadyExistsError):
            await AuthService(db_session).join(
                "acme-corp", "TAKEN@example.com", "Password123", "Nina", "Petit"
            )


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")
        user = await UserFactory.create(db_session, email="alice@example.com", org_id=org.id)

        logged_in, organization, access_token, refresh_token = await AuthService(
            db_session
        ).login("acme-corp", "Alice@example.com", DEFAULT_PASSWORD)

        assert logged_in.id == user.id
        assert organization.id == org.id
        assert verify_token(access_token)["org_id"] == org.id
        assert await RefreshTokenDAO(db_session).count(user_id=user.id) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "slug,email,password",
        [
            ("nowhere", "alice@example.com", DEFAULT_PASSWORD),
            ("acme-corp", "nobody@example.com", DEFAULT_PASSWORD),
            ("acme-corp", "alice@example.com", "WrongPassword1"),
        ],
    )
    async def test_failures_are_indistinguishable(self, db_session, slug, email, password):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")
        await UserFactory.create(db_session, email="alice@example.com", org_id=org.id)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db_session).login(slug, email, password)
        assert exc_info.value.message == "Identifiants invalides"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,message",
        [
            (UserStatus.PENDING, "Compte en attente de validation"),
            (UserStatus.SUSPENDED, "Compte suspendu"),
            (UserStatus.DELETED, "Compte supprimé"),
        ],
    )
    async def test_non_active_account(self, db_session, status, message):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")
        await UserFactory.create(db_session, email="alice@example.com", status=status, org_id=org.id)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db_session).login("acme-corp", "alice@example.com", DEFAULT_PASSWORD)
        assert exc_info.value.message == message

    @pytest.mark.asyncio
    async def test_wrong_password_on_pending_account_hides_status(self, db_session):
        org = await OrganizationFactory.create(db_session, name="Acme Corp")
        await UserFactory.create_pending(db_session, email="alice@example.com", org_id=org.id)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db_session).login("acme-corp", "alice@example.com", "WrongPassword1")
        assert exc_info.value.message == "Identifiants invalides"


class TestRefresh:
    @pytest.mark.asyncio
    async def test_rotation_consumes_presented_token(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        raw = await RefreshTokenFactory.create(db_session, user)
        service = AuthService(db_session)

        access_token, new_refresh = await service.refresh(raw)

        assert new_refresh != raw
        assert verify_token(access_token)["sub"] == str(user.id)
        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(raw)
        assert exc_info.value.message == "Refresh token invalide"
        assert await RefreshTokenDAO(db_session).count(user_id=user.id) == 1

    @pytest.mark.asyncio
    async def test_expired_token_is_removed(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        raw = await RefreshTokenFactory.create_expired(db_session, user)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db_session).refresh(raw)

        assert exc_info.value.message == "Refresh token expiré"
        assert await RefreshTokenDAO(db_session).count(user_id=user.id) == 0

    @pytest.mark.asyncio
    async def test_inactive_owner_cannot_refresh(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session, status=UserStatus.SUSPENDED)
        raw = await RefreshTokenFactory.create(db_session, user)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db_session).refresh(raw)
        assert exc_info.value.message == "Compte non actif"

    @pytest.mark.asyncio
    async def test_unknown_token(self, db_session: AsyncSession):
        with pytest.raises(AuthenticationError):
            await AuthService(db_session).refresh("f" * 128)

    @pytest.mark.asyncio
    async def test_token_consumed_by_concurrent_refresh(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        raw = await RefreshTokenFactory.create(db_session, user)
        service = AuthService(db_session)
        # Another request deleted the row between our lookup and our delete
        service.token_dao.delete_by_id = AsyncMock(return_value=False)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(raw)

        assert exc_info.value.message == "Refresh token invalide"
        assert await RefreshTokenDAO(db_session).count(user_id=user.id) == 1


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_revokes_one_token(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        kept = await RefreshTokenFactory.create(db_session, user)
        revoked = await RefreshTokenFactory.create(db_session, user)
        service = AuthService(db_session)

        await service.logout(revoked)
        await service.logout("unknown-token")

        assert await RefreshTokenDAO(db_session).count(user_id=user.id) == 1
        with pytest.raises(AuthenticationError):
            await service.refresh(revoked)
        await service.refresh(kept)

    @pytest.mark.asyncio
    async def test_logout_all(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        for _ in range(3):
            await RefreshTokenFactory.create(db_session, user)

        revoked = await AuthService(db_session).logout_all(Principal.from_user(user))

        assert revoked == 3


class TestProfile:
    @pytest.mark.asyncio
    async def test_update_names(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        updated = await AuthService(db_session).update_profile(
            Principal.from_user(user), first_name=" Camille ", last_name="Roux"
        )

        assert updated.full_name == "Camille Roux"

    @pytest.mark.asyncio
    async def test_password_change_requires_current_password(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        principal = Principal.from_user(user)
        service = AuthService(db_session)

        with pytest.raises(ValidationError) as missing:
            await service.update_profile(principal, new_password="NewPassword1")
        assert missing.value.message == "Le mot de passe actuel est requis"

        with pytest.raises(ValidationError) as wrong:
            await service.update_profile(
                principal, current_password="Nope12345", new_password="NewPassword1"
            )
        assert wrong.value.message == "Mot de passe actuel incorrect"

        updated = await service.update_profile(
            principal, current_password=DEFAULT_PASSWORD, new_password="NewPassword1"
        )
        assert verify_password("NewPassword1", updated.hashed_password)

    @pytest.mark.asyncio
    async def test_nothing_provided_rejected(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        service = AuthService(db_session)

        for fields in ({}, {"first_name": "   "}):
            with pytest.raises(ValidationError) as exc_info:
                await service.update_profile(Principal.from_user(user), **fields)
            assert exc_info.value.message == "Aucune modification fournie"

    @pytest.mark.asyncio
    async def test_resubmitting_current_name_is_accepted(self, db_session: AsyncSession):
        user = await UserFactory.create(db_session, first_name="Test", last_name="User")

        updated = await AuthService(db_session).update_profile(
            Principal.from_user(user), first_name="Test"
        )

        assert updated.full_name == "Test User"
