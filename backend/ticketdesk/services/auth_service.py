"""
Authentication Service.

WHAT: Registration, join requests, login, refresh-token rotation, logout and
profile updates.

WHY: Accounts are scoped to an organization. A user identifies with the
organization slug, an email and a password; the same email may exist in
several organizations.

HOW: Access tokens are short-lived JWTs carrying the principal's claims.
Refresh tokens are opaque random strings; only their SHA-256 hash is
stored and every refresh consumes the presented token.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.auth import (
    create_access_token,
    generate_refresh_token,
    generate_slug,
    hash_password,
    hash_refresh_token,
    verify_password,
)
from ticketdesk.core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
    UserNotFoundError,
    ValidationError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.dao.organization import OrganizationDAO
from ticketdesk.dao.user import UserDAO, RefreshTokenDAO
from ticketdesk.models.base import utcnow
from ticketdesk.models.organization import Organization
from ticketdesk.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)


JOIN_REQUEST_MESSAGE = (
    "Votre demande a été envoyée. Un administrateur doit valider votre accès."
)
INVALID_CREDENTIALS = "Identifiants invalides"
INVALID_REFRESH_TOKEN = "Refresh token invalide"

# Login rejection message per non-active status
STATUS_LOGIN_MESSAGES = {
    UserStatus.DELETED: "Compte supprimé",
    UserStatus.SUSPENDED: "Compte suspendu",
    UserStatus.PENDING: "Compte en attente de validation",
}


class AuthService:
    """
    Service for account and session operations.

    Attributes:
        session: Request database session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.org_dao = OrganizationDAO(session)
        self.user_dao = UserDAO(session)
        self.token_dao = RefreshTokenDAO(session)

    # =========================================================================
    # Token issuance
    # =========================================================================

    async def _issue_tokens(self, user: User) -> Tuple[str, str]:
        """
        Create an access token and persist a new refresh token for a user.

        Returns:
            Tuple of (access token, raw refresh token)
        """
        access_token = create_access_token(Principal.from_user(user).to_claims())
        raw_refresh, refresh_hash, expires_at = generate_refresh_token()
        await self.token_dao.store(user.id, refresh_hash, expires_at)
        return access_token, raw_refresh

    # =========================================================================
    # Registration & join
    # =========================================================================

    async def register(
        self,
        organization_name: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> Tuple[User, Organization, str, str]:
        """
        Create an organization and its first user (ADMIN, ACTIVE).

        Both rows are written in one transaction together with the first
        refresh token.

        Returns:
            Tuple of (user, organization, access token, refresh token)

        Raises:
            ValidationError: If the name produces an empty slug
            ResourceAlreadyExistsError: If the slug is taken
        """
        slug = generate_slug(organization_name)
        if not slug:
            raise ValidationError(message="Nom d'organisation invalide")

        if await self.org_dao.slug_exists(slug):
            raise ResourceAlreadyExistsError(
                message="Une organisation avec ce nom existe déjà", slug=slug
            )

        try:
            organization = await self.org_dao.create(name=organization_name.strip(), slug=slug)
            user = await self.user_dao.create_user(
                email=email,
                hashed_password=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                org_id=organization.id,
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
            )
            access_token, refresh_token = await self._issue_tokens(user)
            await self.session.commit()
        except IntegrityError:
            # A concurrent registration claimed the slug between check and insert
            await self.session.rollback()
            logger.info(f"Registration conflict on slug '{slug}'")
            raise ResourceAlreadyExistsError(
                message="Une organisation avec ce nom existe déjà", slug=slug
            )

        logger.info(f"Organization '{slug}' registered by user {user.id}")
        return user, organization, access_token, refresh_token

    async def join(
        self,
        organization_slug: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> str:
        """
        Create a PENDING account in an existing organization.

        No tokens are issued; an admin must approve the account first.

        Returns:
            Confirmation message

        Raises:
            ValidationError: If no organization has this slug
            ResourceAlreadyExistsError: If the email is already used in that organization
        """
        organization = await self.org_dao.get_by_slug(organization_slug)
        if not organization:
            raise ValidationError(message="Organisation introuvable")

        if await self.user_dao.email_exists_in_org(email, organization.id):
            raise ResourceAlreadyExistsError(
                message="Un compte avec cet email existe déjà dans cette organisation"
            )

        try:
            user = await self.user_dao.create_user(
                email=email,
                hashed_password=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                org_id=organization.id,
                role=UserRole.USER,
                status=UserStatus.PENDING,
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ResourceAlreadyExistsError(
                message="Un compte avec cet email existe déjà dans cette organisation"
            )

        logger.info(f"Join request from user {user.id} for organization '{organization.slug}'")
        return JOIN_REQUEST_MESSAGE

    # =========================================================================
    # Sessions
    # =========================================================================

    async def login(
        self, organization_slug: str, email: str, password: str
    ) -> Tuple[User, Organization, str, str]:
        """
        Authenticate a user of an organization.

        An unknown organization, an unknown email and a wrong password all
        produce the same error. Only once the password is verified does the
        account status decide the outcome.

        Returns:
            Tuple of (user, organization, access token, refresh token)

        Raises:
            AuthenticationError: On any failure
        """
        organization = await self.org_dao.get_by_slug(organization_slug)
        if not organization:
            logger.info("Login failed: unknown organization")
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        user = await self.user_dao.get_by_email_and_org(email, organization.id)
        if not user or not verify_password(password, user.hashed_password):
            logger.info(f"Login failed: bad credentials for organization '{organization.slug}'")
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        if user.status != UserStatus.ACTIVE:
            logger.info(f"Login refused for user {user.id}: status {user.status.value}")
            raise AuthenticationError(message=STATUS_LOGIN_MESSAGES[user.status])

        access_token, refresh_token = await self._issue_tokens(user)
        await self.session.commit()
        return user, organization, access_token, refresh_token

    async def refresh(self, raw_token: str) -> Tuple[str, str]:
        """
        Exchange a refresh token for a new token pair.

        The presented token is deleted before the new pair is stored. When
        two requests race with the same token, only the one whose delete
        removed the row gets new tokens.

        Returns:
            Tuple of (access token, refresh token)

        Raises:
            AuthenticationError: If the token is unknown, expired, already used,
                or its owner is no longer active
        """
        stored = await self.token_dao.get_by_hash(hash_refresh_token(raw_token))
        if not stored:
            raise AuthenticationError(message=INVALID_REFRESH_TOKEN)

        if stored.expires_at <= utcnow():
            await self.token_dao.delete_by_id(stored.id)
            await self.session.commit()
            raise AuthenticationError(message="Refresh token expiré")

        user = await self.user_dao.get_by_id(stored.user_id)
        if not user or user.status != UserStatus.ACTIVE:
            raise AuthenticationError(message="Compte non actif")

        if not await self.token_dao.delete_by_id(stored.id):
            logger.warning(f"Refresh token for user {user.id} was already consumed")
            await self.session.rollback()
            raise AuthenticationError(message=INVALID_REFRESH_TOKEN)

        access_token, refresh_token = await self._issue_tokens(user)
        await self.session.commit()
        return access_token, refresh_token

    async def logout(self, raw_token: str) -> None:
        """Revoke one refresh token. Unknown tokens are ignored."""
        await self.token_dao.delete_by_hash(hash_refresh_token(raw_token))
        await self.session.commit()

    async def logout_all(self, principal: Principal) -> int:
        """Revoke every refresh token of the caller."""
        revoked = await self.token_dao.delete_for_user(principal.id)
        await self.session.commit()
        logger.info(f"Revoked {revoked} refresh token(s) for user {principal.id}")
        return revoked

    # =========================================================================
    # Profile
    # =========================================================================

    async def get_profile(self, principal: Principal) -> Tuple[User, Organization]:
        user = await self.user_dao.get_by_id_and_org(principal.id, principal.org_id)
        if not user:
            raise UserNotFoundError(user_id=principal.id)
        organization = await self.org_dao.get_by_id(user.org_id)
        return user, organization

    async def update_profile(
        self,
        principal: Principal,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> User:
        """
        Update the caller's name and/or password.

        Raises:
            ValidationError: If no field is provided, or the password change is
                not backed by the correct current password
        """
        user = await self.user_dao.get_by_id_and_org(principal.id, principal.org_id)
        if not user:
            raise UserNotFoundError(user_id=principal.id)

        changes = {}
        if first_name is not None and first_name.strip():
            changes["first_name"] = first_name.strip()
        if last_name is not None and last_name.strip():
            changes["last_name"] = last_name.strip()

        if new_password:
            if not current_password:
                raise ValidationError(message="Le mot de passe actuel est requis")
            if not verify_password(current_password, user.hashed_password):
                raise ValidationError(message="Mot de passe actuel incorrect")
            changes["hashed_password"] = hash_password(new_password)

        if not changes:
            raise ValidationError(message="Aucune modification fournie")

        user = await self.user_dao.update(user, **changes)
        await self.session.commit()
        logger.info(f"User {user.id} updated profile fields: {sorted(changes)}")
        return user
