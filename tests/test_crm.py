"""CRM API 테스트 — 연락처, 딜, 파이프라인 단계, 활동.

CRM API tests — Contacts, deals, pipeline stages and activities,
including the sales_rep ownership scope.
"""

from decimal import Decimal

from httpx import AsyncClient

from tests.conftest import auth_header

ADMIN = "/api/v1/admin"


async def _create_contact(client: AsyncClient, token: str, **overrides) -> dict:
    payload = {"first_name": "Jane", "last_name": "Doe", "email": "jane@client.com", "company": "Client Inc"}
    payload.update(overrides)
    res = await client.post(f"{ADMIN}/contacts", json=payload, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


# ===== Contacts =====

class TestContacts:
    """연락처 CRUD 및 소유 범위 테스트."""

    async def test_create_contact_defaults(self, client: AsyncClient, rep_user, rep_token):
        """생성자가 소유자, 기본 상태는 lead."""
        data = await _create_contact(client, rep_token)
        assert data["owner_id"] == str(rep_user.id)
        assert data["status"] == "lead"
        assert data["tags"] == []

    async def test_search_and_status_filter(self, client: AsyncClient, admin_token):
        """이름/회사 검색과 상태 필터."""
        await _create_contact(client, admin_token, first_name="Alice", company="Globex")
        await _create_contact(client, admin_token, first_name="Bob", company="Initech", status="active")

        res = await client.get(
            f"{ADMIN}/contacts", params={"search": "glob"}, headers=auth_header(admin_token)
        )
        assert [c["first_name"] for c in res.json()["items"]] == ["Alice"]

        res = await client.get(
            f"{ADMIN}/contacts", params={"status": "active"}, headers=auth_header(admin_token)
        )
        assert res.json()["total"] == 1

    async def test_rep_sees_only_own_contacts(
        self, client: AsyncClient, admin_token, rep_token, manager_token
    ):
        """영업 담당자는 자기 연락처만, 매니저는 전체."""
        await _create_contact(client, admin_token, first_name="AdminOwned")
        mine = await _create_contact(client, rep_token, first_name="RepOwned")

        res = await client.get(f"{ADMIN}/contacts", headers=auth_header(rep_token))
        assert [c["id"] for c in res.json()["items"]] == [mine["id"]]

        res = await client.get(f"{ADMIN}/contacts", headers=auth_header(manager_token))
        assert res.json()["total"] == 2

    async def test_rep_cannot_read_foreign_contact(self, client: AsyncClient, admin_token, rep_token):
        """다른 사람의 연락처는 404."""
        other = await _create_contact(client, admin_token)
        res = await client.get(f"{ADMIN}/contacts/{other['id']}", headers=auth_header(rep_token))
        assert res.status_code == 404

    async def test_update_and_delete(self, client: AsyncClient, admin_token):
        """부분 수정 후 삭제."""
        contact = await _create_contact(client, admin_token)
        res = await client.patch(
            f"{ADMIN}/contacts/{contact['id']}",
            json={"status": "active", "tags": ["vip"]},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "active"
        assert res.json()["last_name"] == "Doe"

        res = await client.delete(f"{ADMIN}/contacts/{contact['id']}", headers=auth_header(admin_token))
        assert res.status_code == 204
        res = await client.get(f"{ADMIN}/contacts/{contact['id']}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_invalid_status_rejected(self, client: AsyncClient, admin_token):
        """허용되지 않은 상태값은 422."""
        res = await client.post(f"{ADMIN}/contacts", json={
            "first_name": "A", "last_name": "B", "status": "prospect",
        }, headers=auth_header(admin_token))
        assert res.status_code == 422


# ===== Deal stages =====

class TestDealStages:
    """파이프라인 단계 테스트."""

    async def test_list_in_order(self, client: AsyncClient, stages, rep_token):
        """단계는 순서대로 반환."""
        res = await client.get(f"{ADMIN}/deal-stages", headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json()[0]["name"] == "Lead"
        assert res.json()[-1]["name"] == "Lost"

    async def test_create_requires_admin(self, client: AsyncClient, stages, manager_token):
        """매니저는 단계 생성 불가."""
        res = await client.post(
            f"{ADMIN}/deal-stages", json={"name": "Demo", "order": 6}, headers=auth_header(manager_token)
        )
        assert res.status_code == 403

    async def test_duplicate_name_case_insensitive(self, client: AsyncClient, stages, admin_token):
        """대소문자만 다른 단계 이름은 중복."""
        res = await client.post(
            f"{ADMIN}/deal-stages", json={"name": "lead", "order": 9}, headers=auth_header(admin_token)
        )
        assert res.status_code == 409


# ===== Deals =====

class TestDeals:
    """딜 테스트."""

    async def test_create_deal_with_contact(self, client: AsyncClient, stages, admin_token):
        """연락처가 연결된 딜 생성."""
        contact = await _create_contact(client, admin_token)
        res = await client.post(f"{ADMIN}/deals", json={
            "title": "Annual plan",
            "value": "1500.00",
            "stage": "Qualified",
            "contact_id": contact["id"],
        }, headers=auth_header(admin_token))
        assert res.status_code == 201
        data = res.json()
        assert Decimal(str(data["value"])) == Decimal("1500.00")
        assert data["contact_id"] == contact["id"]
        assert data["actual_close_date"] is None

    async def test_unknown_contact(self, client: AsyncClient, stages, admin_token):
        """존재하지 않는 연락처 연결 시 404, 잘못된 형식은 400."""
        res = await client.post(f"{ADMIN}/deals", json={
            "title": "X", "contact_id": "00000000-0000-0000-0000-000000000000",
        }, headers=auth_header(admin_token))
        assert res.status_code == 404

        res = await client.post(f"{ADMIN}/deals", json={
            "title": "X", "contact_id": "not-a-uuid",
        }, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_moving_to_won_stamps_close_date(self, client: AsyncClient, stages, admin_token):
        """Won 단계로 이동하면 종료일 기록."""
        res = await client.post(f"{ADMIN}/deals", json={"title": "Big"}, headers=auth_header(admin_token))
        deal = res.json()

        res = await client.patch(
            f"{ADMIN}/deals/{deal['id']}", json={"stage": "WON"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        assert res.json()["actual_close_date"] is not None

    async def test_stage_filter_case_insensitive(self, client: AsyncClient, stages, admin_token):
        """단계 필터는 대소문자 무시."""
        await client.post(f"{ADMIN}/deals", json={"title": "A", "stage": "Proposal"}, headers=auth_header(admin_token))
        await client.post(f"{ADMIN}/deals", json={"title": "B", "stage": "Lead"}, headers=auth_header(admin_token))

        res = await client.get(f"{ADMIN}/deals", params={"stage": "proposal"}, headers=auth_header(admin_token))
        assert [d["title"] for d in res.json()["items"]] == ["A"]

    async def test_rep_cannot_delete_foreign_deal(self, client: AsyncClient, stages, admin_token, rep_token):
        """다른 사람의 딜 삭제 시 404."""
        res = await client.post(f"{ADMIN}/deals", json={"title": "Mine"}, headers=auth_header(admin_token))
        res = await client.delete(f"{ADMIN}/deals/{res.json()['id']}", headers=auth_header(rep_token))
        assert res.status_code == 404


# ===== Activities =====

class TestActivities:
    """활동 테스트."""

    async def test_complete_and_reopen(self, client: AsyncClient, rep_token):
        """완료 처리 시 completed_at 기록, 재오픈 시 해제."""
        res = await client.post(f"{ADMIN}/activities", json={
            "type": "call", "subject": "Intro call",
        }, headers=auth_header(rep_token))
        assert res.status_code == 201
        activity = res.json()
        assert activity["completed"] is False

        res = await client.patch(
            f"{ADMIN}/activities/{activity['id']}/complete", json={}, headers=auth_header(rep_token)
        )
        assert res.json()["completed"] is True
        assert res.json()["completed_at"] is not None

        res = await client.patch(
            f"{ADMIN}/activities/{activity['id']}/complete",
            json={"completed": False},
            headers=auth_header(rep_token),
        )
        assert res.json()["completed"] is False
        assert res.json()["completed_at"] is None

    async def test_filter_by_completed(self, client: AsyncClient, admin_token):
        """완료 여부 필터."""
        for subject in ("One", "Two"):
            await client.post(f"{ADMIN}/activities", json={
                "type": "task", "subject": subject,
            }, headers=auth_header(admin_token))
        res = await client.get(f"{ADMIN}/activities", headers=auth_header(admin_token))
        first_id = res.json()["items"][0]["id"]
        await client.patch(f"{ADMIN}/activities/{first_id}/complete", json={}, headers=auth_header(admin_token))

        res = await client.get(
            f"{ADMIN}/activities", params={"completed": True}, headers=auth_header(admin_token)
        )
        assert res.json()["total"] == 1

    async def test_invalid_type(self, client: AsyncClient, admin_token):
        """허용되지 않은 활동 유형은 422."""
        res = await client.post(f"{ADMIN}/activities", json={
            "type": "lunch", "subject": "x",
        }, headers=auth_header(admin_token))
        assert res.status_code == 422

    async def test_link_to_deal(self, client: AsyncClient, stages, admin_token):
        """딜 연결 활동 및 딜 필터."""
        deal = (await client.post(f"{ADMIN}/deals", json={"title": "D"}, headers=auth_header(admin_token))).json()
        await client.post(f"{ADMIN}/activities", json={
            "type": "meeting", "subject": "Demo", "deal_id": deal["id"],
        }, headers=auth_header(admin_token))
        await client.post(f"{ADMIN}/activities", json={
            "type": "note", "subject": "Unlinked",
        }, headers=auth_header(admin_token))

        res = await client.get(
            f"{ADMIN}/activities", params={"deal_id": deal["id"]}, headers=auth_header(admin_token)
        )
        assert [a["subject"] for a in res.json()["items"]] == ["Demo"]
