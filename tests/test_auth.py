"""인증 API 테스트 — 가입, 로그인, 토큰 갱신, 로그아웃, /me 엔드포인트.

Auth API tests — Registration, login, token refresh, logout, and /me.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

AUTH = "/api/v1/auth"


# ===== Register =====

class TestRegister:
    """워크스페이스 가입 테스트."""

    async def test_register_creates_workspace(self, client: AsyncClient):
        """가입 시 조직, 관리자, 기본 단계가 생성됨."""
        res = await client.post(f"{AUTH}/register", json={
            "org_name": "Acme Sales",
            "email": "Owner@Acme.com",
            "password": "password123",
            "full_name": "Acme Owner",
        })
        assert res.status_code == 201
        token = res.json()["access_token"]

        me = await client.get(f"{AUTH}/me", headers=auth_header(token))
        assert me.status_code == 200
        data = me.json()
        assert data["email"] == "owner@acme.com"
        assert data["role_name"] == "admin"
        assert data["role_level"] == 1
        assert data["organization_slug"] == "acme-sales"

        stages = await client.get("/api/v1/admin/deal-stages", headers=auth_header(token))
        assert [s["name"] for s in stages.json()] == [
            "Lead", "Qualified", "Proposal", "Negotiation", "Won", "Lost",
        ]

    async def test_register_duplicate_email(self, client: AsyncClient, admin_user):
        """이미 사용 중인 이메일로 가입 시 409."""
        res = await client.post(f"{AUTH}/register", json={
            "org_name": "Other",
            "email": "admin@test.com",
            "password": "password123",
            "full_name": "Someone",
        })
        assert res.status_code == 409

    async def test_register_slug_collision_suffixed(self, client: AsyncClient, org):
        """같은 이름의 조직은 -2 접미사 슬러그."""
        res = await client.post(f"{AUTH}/register", json={
            "org_name": "Test Corp",
            "email": "second@test.com",
            "password": "password123",
            "full_name": "Second Owner",
        })
        token = res.json()["access_token"]
        me = await client.get(f"{AUTH}/me", headers=auth_header(token))
        assert me.json()["organization_slug"] == "test-corp-2"

    async def test_register_short_password(self, client: AsyncClient):
        """8자 미만 비밀번호는 422."""
        res = await client.post(f"{AUTH}/register", json={
            "org_name": "Acme",
            "email": "a@acme.com",
            "password": "short",
            "full_name": "A",
        })
        assert res.status_code == 422


# ===== Login =====

class TestLogin:
    """로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, admin_user):
        """올바른 이메일/비밀번호로 로그인."""
        res = await client.post(f"{AUTH}/login", json={
            "email": "admin@test.com",
            "password": "admin123!",
        })
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"] != data["refresh_token"]

    async def test_login_wrong_password(self, client: AsyncClient, admin_user):
        """잘못된 비밀번호로 로그인 실패."""
        res = await client.post(f"{AUTH}/login", json={
            "email": "admin@test.com",
            "password": "wrong",
        })
        assert res.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient, org, roles):
        """존재하지 않는 이메일로 로그인 실패."""
        res = await client.post(f"{AUTH}/login", json={
            "email": "nobody@test.com",
            "password": "whatever",
        })
        assert res.status_code == 401

    async def test_login_inactive_user(self, client: AsyncClient, db, admin_user):
        """비활성 계정 로그인 실패."""
        admin_user.is_active = False
        await db.flush()

        res = await client.post(f"{AUTH}/login", json={
            "email": "admin@test.com",
            "password": "admin123!",
        })
        assert res.status_code == 401


# ===== Token Refresh / Logout =====

class TestTokenRefresh:
    """토큰 갱신 및 로그아웃 테스트."""

    async def _login(self, client: AsyncClient) -> dict:
        res = await client.post(f"{AUTH}/login", json={
            "email": "admin@test.com",
            "password": "admin123!",
        })
        return res.json()

    async def test_refresh_rotates_token(self, client: AsyncClient, admin_user):
        """갱신 후 이전 리프레시 토큰은 재사용 불가."""
        tokens = await self._login(client)

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        assert res.json()["refresh_token"] != tokens["refresh_token"]

        reused = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert reused.status_code == 401

    async def test_refresh_invalid_token(self, client: AsyncClient, org, roles):
        """유효하지 않은 리프레시 토큰으로 갱신 실패."""
        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": "invalid.token.here"})
        assert res.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, admin_user):
        """로그아웃 후 리프레시 토큰 무효."""
        tokens = await self._login(client)

        res = await client.post(f"{AUTH}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 204

        again = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert again.status_code == 401

    async def test_refresh_token_rejected_as_access(self, client: AsyncClient, admin_user):
        """리프레시 토큰으로 API 호출 시 401."""
        tokens = await self._login(client)
        res = await client.get(f"{AUTH}/me", headers=auth_header(tokens["refresh_token"]))
        assert res.status_code == 401


# ===== Me =====

class TestMe:
    """/me 엔드포인트 테스트."""

    async def test_me_requires_token(self, client: AsyncClient):
        """토큰 없이 호출 시 인증 실패."""
        res = await client.get(f"{AUTH}/me")
        assert res.status_code in (401, 403)

    async def test_me_sales_rep(self, client: AsyncClient, rep_token):
        """영업 담당자 프로필 조회."""
        res = await client.get(f"{AUTH}/me", headers=auth_header(rep_token))
        assert res.status_code == 200
        data = res.json()
        assert data["role_name"] == "sales_rep"
        assert data["organization_name"] == "Test Corp"
