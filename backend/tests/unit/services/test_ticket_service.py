"""
Unit tests for TicketService and the ticket status lifecycle.
"""

import pytest
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import (
    AuthorizationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    TicketNotFoundError,
    ValidationError,
)
from ticketdesk.core.principal import Principal
from ticketdesk.dao.notification import NotificationDAO
from ticketdesk.dao.ticket import TicketQuery
from ticketdesk.models.notification import NotificationType
from ticketdesk.models.organization import Organization
from ticketdesk.models.ticket import Ticket, TicketStatus, TicketPriority
from ticketdesk.models.user import UserRole, UserStatus
from ticketdesk.services.ticket_service import TicketService
from tests.factories import OrganizationFactory, UserFactory, TicketFactory


def _ticket_fields(**overrides) -> dict:
    fields = {
        "title": "  Accès VPN  ",
        "description": "Impossible de se connecter au VPN",
        "requester_first_name": "Jean",
        "requester_last_name": "Dupont",
        "requester_email": "Jean.Dupont@Example.com",
    }
    fields.update(overrides)
    return fields


class TestApplyStatus:
    """Lifecycle timestamps maintained by Ticket.apply_status."""

    T1 = datetime(2024, 3, 1, 9, 0)
    T2 = datetime(2024, 3, 2, 9, 0)

    def test_resolved_sets_resolved_at_once(self):
        ticket = Ticket(status=TicketStatus.IN_PROGRESS)

        ticket.apply_status(TicketStatus.RESOLVED, now=self.T1)
        ticket.apply_status(TicketStatus.RESOLVED, now=self.T2)

        assert ticket.status == TicketStatus.RESOLVED
        assert ticket.resolved_at == self.T1
        assert ticket.closed_at is None

    def test_closed_keeps_resolved_at(self):
        ticket = Ticket(status=TicketStatus.NEW)

        ticket.apply_status(TicketStatus.RESOLVED, now=self.T1)
        ticket.apply_status(TicketStatus.CLOSED, now=self.T2)

        assert ticket.resolved_at == self.T1
        assert ticket.closed_at == self.T2

    def test_on_hold_leaves_timestamps(self):
        ticket = Ticket(status=TicketStatus.RESOLVED, resolved_at=self.T1)

        ticket.apply_status(TicketStatus.ON_HOLD, now=self.T2)

        assert ticket.status == TicketStatus.ON_HOLD
        assert ticket.resolved_at == self.T1

    @pytest.mark.parametrize("reopened", [TicketStatus.NEW, TicketStatus.IN_PROGRESS])
    def test_reopening_clears_timestamps(self, reopened):
        ticket = Ticket(status=TicketStatus.CLOSED, resolved_at=self.T1, closed_at=self.T2)

        ticket.apply_status(reopened)

        assert ticket.resolved_at is None
        assert ticket.closed_at is None


class TestCreate:
    @pytest.mark.asyncio
    async def test_sequential_keys_and_normalized_fields(self, db_session: AsyncSession):
        user = await UserFactory.create_member(db_session)
        principal = Principal.from_user(user)
        service = TicketService(db_session)

        first = await service.create(principal, **_ticket_fields())
        second = await service.create(principal, **_ticket_fields())

        assert (first.number, first.key) == (1, "TCK-0001")
        assert (second.number, second.key) == (2, "TCK-0002")
        assert first.title == "Accès VPN"
        assert first.requester_email == "jean.dupont@example.com"
        assert first.status == TicketStatus.NEW
        assert first.priority == TicketPriority.MEDIUM
        assert first.created_by_user_id == user.id

    @pytest.mark.asyncio
    async def test_numbering_is_independent_per_organization(self, db_session: AsyncSession):
        org_a = await OrganizationFactory.create(db_session, name="Org A")
        org_b = await OrganizationFactory.create(db_session, name="Org B")
        user_a = await UserFactory.create(db_session, email="a@example.com", org_id=org_a.id)
        user_b = await UserFactory.create(db_session, email="b@example.com", org_id=org_b.id)
        service = TicketService(db_session)

        await service.create(Principal.from_user(user_a), **_ticket_fields())
        await service.create(Principal.from_user(user_a), **_ticket_fields())
        ticket_b = await service.create(Principal.from_user(user_b), **_ticket_fields())

        assert ticket_b.key == "TCK-0001"

    @pytest.mark.asyncio
    async def test_taken_number_is_retried(self, db_session: AsyncSession):
        user = await UserFactory.create_member(db_session)
        await TicketFactory.create(db_session, user, number=1)
        # Sequence behind the stored tickets, as after a restore from an older dump
        await db_session.execute(
            update(Organization).where(Organization.id == user.org_id).values(ticket_sequence=0)
        )
        await db_session.commit()
        service = TicketService(db_session)

        ticket = await service.create(Principal.from_user(user), **_ticket_fields())

        assert ticket.key == "TCK-0002"

    @pytest.mark.asyncio
    async def test_exhausted_retries_conflict(self, db_session: AsyncSession):
        user = await UserFactory.create_member(db_session)
        await TicketFactory.create(db_session, user, number=1)
        service = TicketService(db_session)
        service.org_dao.next_ticket_number = AsyncMock(return_value=1)

        with pytest.raises(ResourceAlreadyExistsError) as exc_info:
            await service.create(Principal.from_user(user), **_ticket_fields())

        assert exc_info.value.status_code == 409
        assert service.org_dao.next_ticket_number.await_count == settings.TICKET_NUMBER_MAX_RETRIES

    @pytest.mark.asyncio
    async def test_deleted_newest_number_is_not_reused(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        principal = Principal.from_user(admin)
        service = TicketService(db_session)

        await service.create(principal, **_ticket_fields())
        newest = await service.create(principal, **_ticket_fields())
        await service.remove(newest.id, principal)
        third = await service.create(principal, **_ticket_fields())

        assert third.key == "TCK-0003"

    @pytest.mark.asyncio
    async def test_active_admins_are_notified(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        await UserFactory.create(
            db_session,
            email="gone@example.com",
            role=UserRole.ADMIN,
            status=UserStatus.SUSPENDED,
            org_id=org.id,
        )
        member = await UserFactory.create_member(db_session, org_id=org.id)

        await TicketService(db_session).create(Principal.from_user(member), **_ticket_fields())

        notifications = await NotificationDAO(db_session).get_all()
        assert [(n.user_id, n.type) for n in notifications] == [
            (admin.id, NotificationType.TICKET_CREATED)
        ]
        assert notifications[0].title == "Nouveau ticket TCK-0001"

    @pytest.mark.asyncio
    async def test_assigned_admin_must_be_active_admin(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        member = await UserFactory.create_member(db_session, org_id=org.id)
        other = await UserFactory.create_member(db_session, email="other@example.com", org_id=org.id)

        with pytest.raises(ValidationError) as exc_info:
            await TicketService(db_session).create(
                Principal.from_user(member), **_ticket_fields(assigned_admin_id=other.id)
            )
        assert exc_info.value.message == "Administrateur non trouvé dans cette organisation"

    @pytest.mark.asyncio
    async def test_assignment_at_creation_notifies_assignee(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        member = await UserFactory.create_member(db_session, org_id=org.id)

        ticket = await TicketService(db_session).create(
            Principal.from_user(member), **_ticket_fields(assigned_admin_id=admin.id)
        )

        assert ticket.assigned_admin_id == admin.id
        types = sorted(n.type.value for n in await NotificationDAO(db_session).get_all())
        assert types == ["TICKET_ASSIGNED", "TICKET_CREATED"]


class TestAccess:
    @pytest.mark.asyncio
    async def test_other_organization_is_not_found(self, db_session: AsyncSession):
        owner = await UserFactory.create_admin(db_session)
        ticket = await TicketFactory.create(db_session, owner)
        other_org = await OrganizationFactory.create(db_session, name="Elsewhere")
        outsider = await UserFactory.create_admin(db_session, org_id=other_org.id)

        with pytest.raises(TicketNotFoundError):
            await TicketService(db_session).find_one(ticket.id, Principal.from_user(outsider))

    @pytest.mark.asyncio
    async def test_member_cannot_open_colleague_ticket(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        alice = await UserFactory.create_member(db_session, email="alice@example.com", org_id=org.id)
        bob = await UserFactory.create_member(db_session, email="bob@example.com", org_id=org.id)
        ticket = await TicketFactory.create(db_session, alice)

        with pytest.raises(AuthorizationError) as exc_info:
            await TicketService(db_session).get_accessible(ticket.id, Principal.from_user(bob))
        assert exc_info.value.message == "Accès non autorisé à ce ticket"

    @pytest.mark.asyncio
    async def test_member_list_ignores_filters_that_would_widen_it(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        member = await UserFactory.create_member(db_session, org_id=org.id)
        await TicketFactory.create(db_session, admin, number=1, assigned_admin_id=admin.id)
        await TicketFactory.create(db_session, member, number=2, assigned_admin_id=admin.id)

        service = TicketService(db_session)
        tickets, total, pages = await service.find_all(
            Principal.from_user(member), TicketQuery(assigned_admin_id=admin.id)
        )

        assert total == 1
        assert pages == 1
        assert tickets[0].created_by_user_id == member.id

        _, admin_total, _ = await service.find_all(Principal.from_user(admin), TicketQuery())
        assert admin_total == 2

    @pytest.mark.asyncio
    async def test_total_pages(self, db_session: AsyncSession):
        admin = await UserFactory.create_admin(db_session)
        for number in range(1, 6):
            await TicketFactory.create(db_session, admin, number=number)

        _, total, pages = await TicketService(db_session).find_all(
            Principal.from_user(admin), TicketQuery(limit=2)
        )

        assert (total, pages) == (5, 3)


class TestStatusAndAssignment:
    @pytest.mark.asyncio
    async def test_admin_status_change_notifies_creator(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        member = await UserFactory.create_member(db_session, org_id=org.id)
        ticket = await TicketFactory.create(db_session, member)

        updated = await TicketService(db_session).update_status(
            ticket.id, TicketStatus.RESOLVED, Principal.from_user(admin)
        )

        assert updated.resolved_at is not None
        notifications = await NotificationDAO(db_session).get_all(user_id=member.id)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.TICKET_UPDATED
        assert notifications[0].content == "Statut changé en RESOLVED"

    @pytest.mark.asyncio
    async def test_own_status_change_is_silent(self, db_session: AsyncSession):
        member = await UserFactory.create_member(db_session)
        ticket = await TicketFactory.create(db_session, member)

        await TicketService(db_session).update_status(
            ticket.id, TicketStatus.CLOSED, Principal.from_user(member)
        )

        assert await NotificationDAO(db_session).count() == 0

    @pytest.mark.asyncio
    async def test_assign_requires_admin_caller(self, db_session: AsyncSession):
        member = await UserFactory.create_member(db_session)
        ticket = await TicketFactory.create(db_session, member)

        with pytest.raises(AuthorizationError):
            await TicketService(db_session).assign(ticket.id, member.id, Principal.from_user(member))

    @pytest.mark.asyncio
    async def test_assign_to_non_admin_is_not_found(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        member = await UserFactory.create_member(db_session, org_id=org.id)
        ticket = await TicketFactory.create(db_session, member)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await TicketService(db_session).assign(ticket.id, member.id, Principal.from_user(admin))
        assert exc_info.value.message == "Admin non trouvé dans cette organisation"

    @pytest.mark.asyncio
    async def test_assign_accepts_suspended_admin_and_unassign(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create_admin(db_session, org_id=org.id)
        suspended = await UserFactory.create(
            db_session,
            email="away@example.com",
            role=UserRole.ADMIN,
            status=UserStatus.SUSPENDED,
            org_id=org.id,
        )
        ticket = await TicketFactory.create(db_session, admin)
        service = TicketService(db_session)

        assigned = await service.assign(ticket.id, suspended.id, Principal.from_user(admin))
        assert assigned.assigned_admin_id == suspended.id

        unassigned = await service.assign(ticket.id, None, Principal.from_user(admin))
        assert unassigned.assigned_admin_id is None


class TestAttachments:
    @pytest.mark.asyncio
    async def test_file_is_stored_and_served_under_uploads(self, db_session: AsyncSession):
        member = await UserFactory.create_member(db_session)
        ticket = await TicketFactory.create(db_session, member)

        attachment = await TicketService(db_session).add_attachment(
            ticket.id, Principal.from_user(member), "../../etc/Report.PDF", "application/pdf", b"%PDF"
        )

        assert attachment.filename == "Report.PDF"
        assert attachment.size == 4
        assert attachment.url.startswith(f"{settings.uploads_url_prefix}/")
        assert attachment.url.endswith(".pdf")
        stored = Path(settings.UPLOAD_DIR) / attachment.url.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"%PDF"

    @pytest.mark.asyncio
    async def test_empty_file_rejected(self, db_session: AsyncSession):
        member = await UserFactory.create_member(db_session)
        ticket = await TicketFactory.create(db_session, member)

        with pytest.raises(ValidationError) as exc_info:
            await TicketService(db_session).add_attachment(
                ticket.id, Principal.from_user(member), "empty.txt", "text/plain", b""
            )
        assert exc_info.value.message == "Fichier vide"

    @pytest.mark.asyncio
    async def test_oversized_file_rejected(self, db_session: AsyncSession, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 8)
        member = await UserFactory.create_member(db_session)
        ticket = await TicketFactory.create(db_session, member)

        with pytest.raises(ValidationError) as exc_info:
            await TicketService(db_session).add_attachment(
                ticket.id, Principal.from_user(member), "big.bin", None, b"0123456789"
            )
        assert exc_info.value.message == "Fichier trop volumineux (10 Mo maximum)"
