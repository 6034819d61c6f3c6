"""
Integration tests for the notification inbox endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import UserFactory, NotificationFactory, auth_headers


class TestNotificationsApi:
    @pytest.mark.asyncio
    async def test_inbox_flow(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        first = await NotificationFactory.create(db_session, user)
        await NotificationFactory.create(db_session, user)
        await NotificationFactory.create(db_session, user, read=True)
        headers = auth_headers(user)

        listed = await client.get("/api/notifications", headers=headers)
        assert listed.status_code == 200
        assert listed.json()["total"] == 3

        unread = await client.get("/api/notifications", params={"unread": "true"}, headers=headers)
        assert unread.json()["total"] == 2

        count = await client.get("/api/notifications/unread-count", headers=headers)
        assert count.json() == {"count": 2}

        marked = await client.patch(f"/api/notifications/{first.id}/read", headers=headers)
        assert marked.json()["message"] == "Notification marquée comme lue"

        all_read = await client.patch("/api/notifications/read-all", headers=headers)
        assert all_read.json() == {"updated": 1}

        deleted = await client.delete(f"/api/notifications/{first.id}", headers=headers)
        assert deleted.status_code == 200
        assert (await client.get("/api/notifications", headers=headers)).json()["total"] == 2

    @pytest.mark.asyncio
    async def test_other_users_notification_is_404(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        owner = await UserFactory.create(db_session)
        other = await UserFactory.create(db_session, email="other@example.com", org_id=owner.org_id)
        notification = await NotificationFactory.create(db_session, owner)

        response = await client.patch(
            f"/api/notifications/{notification.id}/read", headers=auth_headers(other)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/notifications")

        assert response.status_code == 401
