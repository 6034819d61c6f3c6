"""
Test factories for creating test data.

WHY: Factories provide a consistent, reusable way to create test objects,
reducing duplication and making tests more maintainable. Using factories
instead of manual object creation ensures tests stay consistent when models change.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.auth import (
    create_access_token,
    generate_refresh_token,
    generate_slug,
    hash_password,
)
from ticketdesk.core.principal import Principal
from ticketdesk.models.organization import Organization
from ticketdesk.models.user import User, UserRole, UserStatus, RefreshToken
from ticketdesk.models.ticket import (
    Ticket,
    TicketPriority,
    TicketStatus,
    TicketType,
    Message,
    format_ticket_key,
)
from ticketdesk.models.notification import Notification, NotificationType


DEFAULT_PASSWORD = "Password123"


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header carrying a fresh access token for ``user``."""
    token = create_access_token(Principal.from_user(user).to_claims())
    return {"Authorization": f"Bearer {token}"}


class OrganizationFactory:
    """Factory for creating Organization test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Test Organization",
        slug: Optional[str] = None,
    ) -> Organization:
        org = Organization(name=name, slug=slug or generate_slug(name))
        session.add(org)
        await session.commit()
        await session.refresh(org)
        return org


class UserFactory:
    """
    Factory for creating User test instances.

    WHY: Provides consistent user creation with proper password hashing
    and organization membership for testing authentication and authorization.
    """

    @staticmethod
    async def create(
        session: AsyncSession,
        email: str = "user@example.com",
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.ACTIVE,
        org_id: Optional[int] = None,
        organization: Optional[Organization] = None,
    ) -> User:
        """
        Create a user for testing.

        Args:
            session: Database session
            email: User email (unique per organization)
            password: Plain text password (will be hashed)
            role: ADMIN or USER
            status: Account status (ACTIVE by default)
            org_id: Organization ID
            organization: Organization instance (one is created if neither is given)

        Returns:
            Created User instance
        """
        if org_id is None:
            if organization is None:
                organization = await OrganizationFactory.create(session)
            org_id = organization.id

        user = User(
            email=email.lower(),
            hashed_password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=status,
            org_id=org_id,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    @staticmethod
    async def create_admin(
        session: AsyncSession,
        email: str = "admin@example.com",
        **kwargs,
    ) -> User:
        return await UserFactory.create(session, email=email, role=UserRole.ADMIN, **kwargs)

    @staticmethod
    async def create_member(
        session: AsyncSession,
        email: str = "member@example.com",
        **kwargs,
    ) -> User:
        return await UserFactory.create(session, email=email, role=UserRole.USER, **kwargs)

    @staticmethod
    async def create_pending(
        session: AsyncSession,
        email: str = "pending@example.com",
        **kwargs,
    ) -> User:
        return await UserFactory.create(
            session, email=email, role=UserRole.USER, status=UserStatus.PENDING, **kwargs
        )


class RefreshTokenFactory:
    """Stores a refresh token and hands back the raw value."""

    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        expires_at: Optional[datetime] = None,
    ) -> str:
        raw, token_hash, default_expiry = generate_refresh_token()
        session.add(
            RefreshToken(
                user_id=user.id,
                token_hash=token_hash,
                expires_at=expires_at or default_expiry,
            )
        )
        await session.commit()
        return raw

    @staticmethod
    async def create_expired(session: AsyncSession, user: User) -> str:
        return await RefreshTokenFactory.create(
            session, user, expires_at=datetime.utcnow() - timedelta(minutes=1)
        )


class TicketFactory:
    """
    Factory for creating Ticket test instances with explicit numbers.

    The organization's ticket sequence is moved up to the number used, as
    the service would have done.
    """

    @staticmethod
    async def create(
        session: AsyncSession,
        created_by: User,
        number: int = 1,
        title: str = "Imprimante en panne",
        description: str = "L'imprimante du 2e étage n'imprime plus.",
        type: TicketType = TicketType.HARDWARE,
        priority: TicketPriority = TicketPriority.MEDIUM,
        status: TicketStatus = TicketStatus.NEW,
        assigned_admin_id: Optional[int] = None,
        requester_email: str = "requester@example.com",
    ) -> Ticket:
        ticket = Ticket(
            org_id=created_by.org_id,
            number=number,
            key=format_ticket_key(number),
            title=title,
            description=description,
            type=type,
            priority=priority,
            status=status,
            requester_first_name="Jean",
            requester_last_name="Dupont",
            requester_email=requester_email,
            created_by_user_id=created_by.id,
            assigned_admin_id=assigned_admin_id,
        )
        session.add(ticket)
        org = await session.get(Organization, created_by.org_id, populate_existing=True)
        org.ticket_sequence = max(org.ticket_sequence or 0, number)
        await session.commit()
        await session.refresh(ticket)
        return ticket


class MessageFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        ticket: Ticket,
        author: User,
        content: str = "Avez-vous essayé de la redémarrer ?",
    ) -> Message:
        message = Message(
            ticket_id=ticket.id,
            author_user_id=author.id,
            author_name=author.full_name,
            content=content,
        )
        session.add(message)
        await session.commit()
        await session.refresh(message)
        return message


class NotificationFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        type: NotificationType = NotificationType.TICKET_CREATED,
        title: str = "Nouveau ticket TCK-0001",
        content: str = "Imprimante en panne",
        read: bool = False,
        ticket_id: Optional[int] = None,
    ) -> Notification:
        notification = Notification(
            type=type,
            title=title,
            content=content,
            read=read,
            user_id=user.id,
            org_id=user.org_id,
            ticket_id=ticket_id,
        )
        session.add(notification)
        await session.commit()
        await session.refresh(notification)
        return notification
