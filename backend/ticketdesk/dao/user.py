"""
User Data Access Object.

Every lookup is scoped to an organization: an email address identifies a
user only together with the organization it was registered in.
"""

from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import select, delete, func, or_

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models.user import User, UserRole, UserStatus, RefreshToken


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    model = User

    async def get_by_email_and_org(self, email: str, org_id: int) -> Optional[User]:
        """
        Retrieve a user by email address within one organization.

        Args:
            email: Email address (compared lower-cased)
            org_id: Organization ID

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(
                User.email == email.strip().lower(),
                User.org_id == org_id,
            )
        )
        return result.scalar_one_or_none()

    async def email_exists_in_org(self, email: str, org_id: int) -> bool:
        result = await self.session.execute(
            select(User.id)
            .where(User.email == email.strip().lower(), User.org_id == org_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        first_name: str,
        last_name: str,
        org_id: int,
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.PENDING,
    ) -> User:
        """
        Create a new user.

        The (email, org_id) unique constraint is the source of truth for
        duplicates; callers pre-check with email_exists_in_org and translate
        an IntegrityError into a conflict.

        Args:
            email: User's email address (stored lower-cased)
            hashed_password: Already hashed password (use hash_password())
            first_name: Given name
            last_name: Family name
            org_id: Organization ID
            role: ADMIN or USER
            status: Initial account status

        Returns:
            Created User instance
        """
        return await self.create(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            org_id=org_id,
            role=role,
            status=status,
        )

    async def list_active_admins(self, org_id: int) -> List[User]:
        result = await self.session.execute(
            select(User).where(
                User.org_id == org_id,
                User.role == UserRole.ADMIN,
                User.status == UserStatus.ACTIVE,
            )
        )
        return list(result.scalars().all())

    async def get_admin_in_org(
        self,
        user_id: int,
        org_id: int,
        active_only: bool = False,
    ) -> Optional[User]:
        """
        Retrieve a user only if it is an ADMIN of the organization.

        Args:
            user_id: Candidate admin id
            org_id: Organization ID
            active_only: Also require status ACTIVE

        Returns:
            The admin, or None
        """
        query = select(User).where(
            User.id == user_id,
            User.org_id == org_id,
            User.role == UserRole.ADMIN,
        )
        if active_only:
            query = query.where(User.status == UserStatus.ACTIVE)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_users(
        self,
        org_id: int,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        """
        List users of an organization with filtering and pagination.

        Returns:
            Tuple of (users list, total count)
        """
        base_query = select(User).where(User.org_id == org_id)

        if role is not None:
            base_query = base_query.where(User.role == role)
        if status is not None:
            base_query = base_query.where(User.status == status)
        if search:
            pattern = f"%{search}%"
            base_query = base_query.where(
                or_(
                    User.email.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )

        count_result = await self.session.execute(
            select(func.count()).select_from(base_query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            base_query.order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_pending(self, org_id: int) -> List[User]:
        result = await self.session.execute(
            select(User)
            .where(User.org_id == org_id, User.status == UserStatus.PENDING)
            .order_by(User.created_at.asc(), User.id.asc())
        )
        return list(result.scalars().all())


class RefreshTokenDAO(BaseDAO[RefreshToken]):
    """
    Storage for refresh-token hashes.

    Rotation relies on delete_by_id reporting whether this caller actually
    removed the row: of two concurrent refreshes of the same token only one
    delete affects a row.
    """

    model = RefreshToken

    async def store(self, user_id: int, token_hash: str, expires_at: datetime) -> RefreshToken:
        return await self.create(user_id=user_id, token_hash=token_hash, expires_at=expires_at)

    async def get_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, token_id: int) -> bool:
        """Delete one token row; False when it was already gone."""
        return await self.delete(token_id)

    async def delete_by_hash(self, token_hash: str) -> int:
        result = await self.session.execute(
            delete(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.rowcount

    async def delete_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(RefreshToken).where(RefreshToken.user_id == user_id)
        )
        return result.rowcount
