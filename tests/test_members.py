"""조직 및 멤버 API 테스트.

Organization and member API tests — seat limit, last-admin protection,
self-removal and role checks.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

ADMIN = "/api/v1/admin"


class TestOrganization:
    """내 조직 조회/수정 테스트."""

    async def test_get_my_organization(self, client: AsyncClient, rep_token):
        """멤버 누구나 조직 조회 가능."""
        res = await client.get(f"{ADMIN}/organization", headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json()["slug"] == "test-corp"

    async def test_update_requires_admin(self, client: AsyncClient, manager_token):
        """매니저는 조직 수정 불가."""
        res = await client.patch(
            f"{ADMIN}/organization", json={"name": "New"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 403

    async def test_update_slug_conflict(self, client: AsyncClient, db, admin_token):
        """다른 조직이 쓰는 슬러그로 변경 시 409."""
        from app.models.organization import Organization
        db.add(Organization(name="Other", slug="taken"))
        await db.flush()

        res = await client.patch(
            f"{ADMIN}/organization", json={"slug": "taken"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 409

    async def test_update_name(self, client: AsyncClient, admin_token):
        """관리자가 조직 이름 변경."""
        res = await client.patch(
            f"{ADMIN}/organization", json={"name": "Renamed Corp"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        assert res.json()["name"] == "Renamed Corp"


class TestMembers:
    """멤버 관리 테스트."""

    async def test_list_roles(self, client: AsyncClient, manager_token):
        """역할 목록은 레벨 순."""
        res = await client.get(f"{ADMIN}/roles", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert [r["name"] for r in res.json()] == ["admin", "manager", "sales_rep"]

    async def test_sales_rep_cannot_list_members(self, client: AsyncClient, rep_token):
        """영업 담당자는 멤버 목록 접근 불가."""
        res = await client.get(f"{ADMIN}/members", headers=auth_header(rep_token))
        assert res.status_code == 403

    async def test_create_member(self, client: AsyncClient, admin_token):
        """멤버 추가 — 기본 역할은 sales_rep."""
        res = await client.post(f"{ADMIN}/members", json={
            "email": "new@test.com",
            "password": "password123",
            "full_name": "New Rep",
        }, headers=auth_header(admin_token))
        assert res.status_code == 201
        assert res.json()["role_name"] == "sales_rep"

    async def test_create_member_duplicate_email(self, client: AsyncClient, admin_token, rep_user):
        """중복 이메일은 409."""
        res = await client.post(f"{ADMIN}/members", json={
            "email": "rep@test.com",
            "password": "password123",
            "full_name": "Dup",
        }, headers=auth_header(admin_token))
        assert res.status_code == 409

    async def test_create_member_seat_limit(self, client: AsyncClient, db, org, admin_token):
        """활성 사용자 수가 max_users에 도달하면 400."""
        org.max_users = 1
        await db.flush()

        res = await client.post(f"{ADMIN}/members", json={
            "email": "overflow@test.com",
            "password": "password123",
            "full_name": "Overflow",
        }, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_cannot_demote_last_admin(self, client: AsyncClient, admin_user, admin_token):
        """마지막 관리자 강등 불가."""
        res = await client.put(
            f"{ADMIN}/members/{admin_user.id}/role",
            json={"role": "manager"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 400

    async def test_change_role(self, client: AsyncClient, rep_user, admin_token):
        """영업 담당자를 매니저로 승격."""
        res = await client.put(
            f"{ADMIN}/members/{rep_user.id}/role",
            json={"role": "manager"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["role_level"] == 2

    async def test_cannot_remove_self(self, client: AsyncClient, admin_user, admin_token):
        """자기 자신 제거 불가."""
        res = await client.delete(f"{ADMIN}/members/{admin_user.id}", headers=auth_header(admin_token))
        assert res.status_code == 403

    async def test_remove_member_deactivates(self, client: AsyncClient, rep_user, admin_token):
        """멤버 제거는 비활성화 — 목록 필터로 확인."""
        res = await client.delete(f"{ADMIN}/members/{rep_user.id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        inactive = await client.get(
            f"{ADMIN}/members", params={"is_active": False}, headers=auth_header(admin_token)
        )
        assert [m["email"] for m in inactive.json()] == ["rep@test.com"]
