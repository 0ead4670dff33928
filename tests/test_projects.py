"""프로젝트 API 테스트 — 프로젝트, 작업, 메모, 진행률.

Project API tests — Projects, tasks, notes and progress calculation.
"""

from httpx import AsyncClient

from app.services.project_service import calculate_progress
from tests.conftest import auth_header

PROJECTS = "/api/v1/admin/projects"


async def _create_project(client: AsyncClient, token: str, **overrides) -> dict:
    payload = {"name": "Website Redesign"}
    payload.update(overrides)
    res = await client.post(PROJECTS, json=payload, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


class TestProgress:
    """진행률 계산 테스트."""

    def test_calculate_progress(self):
        """완료 비율 반올림, 작업이 없으면 0."""
        assert calculate_progress(0, 0) == 0
        assert calculate_progress(1, 3) == 33
        assert calculate_progress(2, 3) == 67
        assert calculate_progress(4, 4) == 100


class TestProjects:
    """프로젝트 CRUD 테스트."""

    async def test_sales_rep_forbidden(self, client: AsyncClient, rep_token):
        """영업 담당자는 프로젝트 접근 불가."""
        res = await client.get(PROJECTS, headers=auth_header(rep_token))
        assert res.status_code == 403

    async def test_create_defaults(self, client: AsyncClient, manager_token):
        """기본 상태 planning, 우선순위 medium, 진행률 0."""
        data = await _create_project(client, manager_token)
        assert data["status"] == "planning"
        assert data["priority"] == "medium"
        assert data["progress"] == 0

    async def test_status_filter(self, client: AsyncClient, manager_token):
        """상태 필터."""
        await _create_project(client, manager_token, name="A", status="active")
        await _create_project(client, manager_token, name="B")
        res = await client.get(PROJECTS, params={"status": "active"}, headers=auth_header(manager_token))
        assert [p["name"] for p in res.json()["items"]] == ["A"]

    async def test_unknown_assignee(self, client: AsyncClient, manager_token):
        """존재하지 않는 담당자는 404."""
        res = await client.post(PROJECTS, json={
            "name": "X", "assigned_to": "00000000-0000-0000-0000-000000000000",
        }, headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_delete(self, client: AsyncClient, manager_token):
        """삭제 후 조회 시 404."""
        project = await _create_project(client, manager_token)
        res = await client.delete(f"{PROJECTS}/{project['id']}", headers=auth_header(manager_token))
        assert res.status_code == 204
        res = await client.get(f"{PROJECTS}/{project['id']}", headers=auth_header(manager_token))
        assert res.status_code == 404


class TestProjectTasks:
    """프로젝트 작업 및 자동 진행률 테스트."""

    async def test_task_changes_recalculate_progress(self, client: AsyncClient, manager_token):
        """작업 추가/완료/삭제 시 자동 진행률 갱신."""
        project = await _create_project(client, manager_token)
        base = f"{PROJECTS}/{project['id']}/tasks"

        t1 = (await client.post(base, json={"title": "Wireframes"}, headers=auth_header(manager_token))).json()
        t2 = (await client.post(base, json={"title": "Copy"}, headers=auth_header(manager_token))).json()
        assert t1["source_type"] == "manual"

        await client.patch(f"{base}/{t1['id']}", json={"status": "done"}, headers=auth_header(manager_token))
        res = await client.get(f"{PROJECTS}/{project['id']}", headers=auth_header(manager_token))
        assert res.json()["auto_calculated_progress"] == 50

        await client.delete(f"{base}/{t2['id']}", headers=auth_header(manager_token))
        res = await client.get(f"{PROJECTS}/{project['id']}", headers=auth_header(manager_token))
        assert res.json()["progress"] == 100

    async def test_manual_override(self, client: AsyncClient, manager_token):
        """수동 진행률이 우선, null로 해제."""
        project = await _create_project(client, manager_token)
        res = await client.patch(
            f"{PROJECTS}/{project['id']}", json={"progress_percentage": 40}, headers=auth_header(manager_token)
        )
        assert res.json()["progress"] == 40

        res = await client.patch(
            f"{PROJECTS}/{project['id']}", json={"progress_percentage": None}, headers=auth_header(manager_token)
        )
        assert res.json()["progress_percentage"] is None
        assert res.json()["progress"] == 0

    async def test_task_status_filter(self, client: AsyncClient, manager_token):
        """작업 상태 필터."""
        project = await _create_project(client, manager_token)
        base = f"{PROJECTS}/{project['id']}/tasks"
        await client.post(base, json={"title": "A", "status": "done"}, headers=auth_header(manager_token))
        await client.post(base, json={"title": "B"}, headers=auth_header(manager_token))

        res = await client.get(base, params={"status": "todo"}, headers=auth_header(manager_token))
        assert [t["title"] for t in res.json()] == ["B"]

    async def test_invalid_task_status(self, client: AsyncClient, manager_token):
        """허용되지 않은 작업 상태는 422."""
        project = await _create_project(client, manager_token)
        res = await client.post(
            f"{PROJECTS}/{project['id']}/tasks",
            json={"title": "A", "status": "blocked"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422


class TestProjectNotes:
    """프로젝트 메모 테스트."""

    async def test_add_list_delete(self, client: AsyncClient, manager_user, manager_token):
        """메모 작성자는 호출자."""
        project = await _create_project(client, manager_token)
        base = f"{PROJECTS}/{project['id']}/notes"

        res = await client.post(base, json={"content": "Kickoff done"}, headers=auth_header(manager_token))
        assert res.status_code == 201
        note = res.json()
        assert note["author_id"] == str(manager_user.id)

        res = await client.get(base, headers=auth_header(manager_token))
        assert len(res.json()) == 1

        res = await client.delete(f"{base}/{note['id']}", headers=auth_header(manager_token))
        assert res.status_code == 204
        res = await client.delete(f"{base}/{note['id']}", headers=auth_header(manager_token))
        assert res.status_code == 404
