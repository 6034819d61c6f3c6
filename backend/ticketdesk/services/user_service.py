"""
User Administration Service.

WHAT: Admin operations on the members of an organization: listing, join
request approval, role and status changes.

WHY: Joining an organization only creates a PENDING account. Admins decide
who gets in, who administrates, and who is locked out.

HOW: All lookups are scoped to the admin's organization. Suspending or
deleting an account revokes its refresh tokens; access tokens already issued
stay valid until they expire.
"""

import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.exceptions import (
    AuthorizationError,
    UserNotFoundError,
    ValidationError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.dao.user import UserDAO, RefreshTokenDAO
from ticketdesk.models.user import User, UserRole, UserStatus
from ticketdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


# Statuses that end every session of the account
REVOKING_STATUSES = frozenset({UserStatus.SUSPENDED, UserStatus.DELETED})


class UserService:
    """
    Service for user administration.

    Callers are expected to be admins; the routers enforce it with
    require_admin.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_dao = UserDAO(session)
        self.token_dao = RefreshTokenDAO(session)
        self.notifications = NotificationService(session)

    async def list_users(
        self,
        principal: Principal,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[User], int, int]:
        """
        Returns:
            Tuple of (users, total, total_pages)
        """
        users, total = await self.user_dao.list_users(
            principal.org_id,
            role=role,
            status=status,
            search=search.strip() if search else None,
            skip=(page - 1) * limit,
            limit=limit,
        )
        total_pages = math.ceil(total / limit) if total else 0
        return users, total, total_pages

    async def list_pending(self, principal: Principal) -> List[User]:
        return await self.user_dao.list_pending(principal.org_id)

    async def get_user(self, user_id: int, principal: Principal) -> User:
        user = await self.user_dao.get_by_id_and_org(user_id, principal.org_id)
        if not user:
            raise UserNotFoundError(user_id=user_id)
        return user

    async def approve(self, user_id: int, principal: Principal) -> User:
        """
        Activate a PENDING account and notify its owner.

        Raises:
            UserNotFoundError: If the user is not in the organization
            ValidationError: If the user is not PENDING
        """
        user = await self.get_user(user_id, principal)
        if user.status != UserStatus.PENDING:
            raise ValidationError(
                message="Cet utilisateur n'est pas en attente d'approbation",
                user_id=user_id,
                status=user.status.value,
            )

        user = await self.user_dao.update(user, status=UserStatus.ACTIVE)
        await self.session.commit()
        logger.info(f"User {user.id} approved by admin {principal.id}")

        await self.notifications.notify_user_approved(user.id, user.org_id)
        return user

    async def update_role(self, user_id: int, role: UserRole, principal: Principal) -> User:
        """
        Raises:
            AuthorizationError: If an admin targets their own account
        """
        if user_id == principal.id:
            raise AuthorizationError(message="Vous ne pouvez pas modifier votre propre rôle")

        user = await self.get_user(user_id, principal)
        user = await self.user_dao.update(user, role=role)
        await self.session.commit()
        logger.info(f"User {user.id} role set to {role.value} by admin {principal.id}")
        return user

    async def update_status(
        self, user_id: int, status: UserStatus, principal: Principal
    ) -> User:
        """
        Change the status of an account.

        Raises:
            AuthorizationError: If an admin targets their own account
            ValidationError: If the target status is PENDING
        """
        if user_id == principal.id:
            raise AuthorizationError(message="Vous ne pouvez pas modifier votre propre statut")
        if status == UserStatus.PENDING:
            raise ValidationError(message="Impossible de remettre un utilisateur en statut PENDING")

        user = await self.get_user(user_id, principal)
        user = await self.user_dao.update(user, status=status)

        revoked = 0
        if status in REVOKING_STATUSES:
            revoked = await self.token_dao.delete_for_user(user.id)

        await self.session.commit()
        logger.info(
            f"User {user.id} status set to {status.value} by admin {principal.id}"
            f" ({revoked} refresh token(s) revoked)"
        )
        return user
