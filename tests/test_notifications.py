"""알림 API 테스트.

Notification API tests — Listing, unread count and read state for the
current user's in-app notifications.
"""

import uuid

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header

NOTIFY = "/api/v1/admin/notifications"


@pytest_asyncio.fixture
async def notifications(db: AsyncSession, org, admin_user, rep_user):
    """관리자 알림 3건과 영업 담당자 알림 1건을 생성합니다."""
    from app.models.notification import Notification
    notifs = []
    for i in range(3):
        n = Notification(
            organization_id=org.id,
            user_id=admin_user.id,
            type="tasks_generated",
            message=f"Test notification {i}",
            is_read=False,
        )
        db.add(n)
        notifs.append(n)
    other = Notification(
        organization_id=org.id,
        user_id=rep_user.id,
        type="sync_failed",
        message="Mailbox sync failed",
    )
    db.add(other)
    notifs.append(other)
    await db.flush()
    for n in notifs:
        await db.refresh(n)
    return notifs


class TestNotifications:
    """알림 API 테스트."""

    async def test_list_only_own(self, client: AsyncClient, admin_token, notifications):
        """본인 알림만 조회."""
        res = await client.get(NOTIFY, headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert {n["message"] for n in data["items"]} == {f"Test notification {i}" for i in range(3)}

    async def test_unread_count(self, client: AsyncClient, admin_token, notifications):
        """미읽음 알림 수."""
        res = await client.get(f"{NOTIFY}/unread-count", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json() == {"unread_count": 3}

    async def test_mark_read(self, client: AsyncClient, admin_token, notifications):
        """단건 읽음 처리 후 unread_only 목록에서 제외."""
        notif_id = str(notifications[0].id)
        res = await client.patch(f"{NOTIFY}/{notif_id}/read", headers=auth_header(admin_token))
        assert res.status_code == 200

        res = await client.get(NOTIFY, params={"unread_only": True}, headers=auth_header(admin_token))
        ids = {n["id"] for n in res.json()["items"]}
        assert notif_id not in ids
        assert len(ids) == 2

    async def test_mark_read_other_users_notification(self, client: AsyncClient, admin_token, notifications):
        """다른 사용자의 알림은 404."""
        res = await client.patch(
            f"{NOTIFY}/{notifications[3].id}/read",
            headers=auth_header(admin_token),
        )
        assert res.status_code == 404

    async def test_mark_read_unknown(self, client: AsyncClient, admin_token):
        res = await client.patch(f"{NOTIFY}/{uuid.uuid4()}/read", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_mark_all_read(self, client: AsyncClient, admin_token, notifications):
        """전체 읽음 처리 — 처리 건수 메시지."""
        res = await client.patch(f"{NOTIFY}/read-all", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["message"] == "3 notifications marked as read"

        res = await client.get(f"{NOTIFY}/unread-count", headers=auth_header(admin_token))
        assert res.json()["unread_count"] == 0

    async def test_rep_can_read_own(self, client: AsyncClient, rep_token, notifications):
        res = await client.get(NOTIFY, headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json()["items"][0]["type"] == "sync_failed"

    async def test_notifications_no_auth(self, client: AsyncClient):
        """인증 없이 알림 조회 시 거부."""
        res = await client.get(NOTIFY)
        assert res.status_code in (401, 403)
