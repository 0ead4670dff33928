"""온보딩 API 테스트 — 관리자 세션, 클라이언트 포털, 리마인더, 작업 생성, 크론.

Onboarding API tests — Admin session management, the public client portal,
reminders, task generation and the reminder cron job.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from httpx import AsyncClient

from app.config import settings
from tests.conftest import auth_header

ONBOARDING = "/api/v1/admin/onboarding"
CLIENT = "/api/v1/client/onboarding"
PROJECTS = "/api/v1/admin/projects"
CRON = "/api/v1/cron"


async def _create_session(client: AsyncClient, token: str, **overrides) -> dict:
    project = (await client.post(PROJECTS, json={"name": "Acme Site"}, headers=auth_header(token))).json()
    payload = {
        "project_id": project["id"],
        "onboarding_type": "other",
        "client_email": "Client@Example.com",
        "client_name": "Casey Client",
    }
    payload.update(overrides)
    res = await client.post(f"{ONBOARDING}/sessions", json=payload, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


async def _complete(client: AsyncClient, token: str) -> None:
    await client.put(f"{CLIENT}/{token}/steps/1", json={"data": {
        "project_name": "Acme Site",
        "budget_range": "$5k - $15k",
    }})
    res = await client.post(f"{CLIENT}/{token}/complete", json={})
    assert res.status_code == 200


# ===== Admin sessions =====

class TestOnboardingSessions:
    """관리자 세션 관리 테스트."""

    async def test_create_session(self, client: AsyncClient, manager_token):
        """세션 생성 — 일반 템플릿, 추천 스케줄, 리마인더 예약."""
        session = await _create_session(client, manager_token)
        assert session["status"] == "pending"
        assert session["total_steps"] == 5
        assert session["client_email"] == "client@example.com"
        assert session["reminder_schedule"] == "standard"
        assert len(session["access_token"]) == 32
        assert session["onboarding_url"].endswith(f"/onboarding/{session['access_token']}")

        res = await client.get(
            f"{ONBOARDING}/sessions/{session['id']}/reminders", headers=auth_header(manager_token)
        )
        assert [r["reminder_type"] for r in res.json()] == ["gentle", "encouragement", "final"]

    async def test_high_priority_project_gets_aggressive_schedule(self, client: AsyncClient, manager_token):
        """고우선순위 프로젝트는 aggressive 스케줄."""
        project = (await client.post(PROJECTS, json={"name": "Rush", "priority": "critical"},
                                     headers=auth_header(manager_token))).json()
        res = await client.post(f"{ONBOARDING}/sessions", json={"project_id": project["id"]},
                                headers=auth_header(manager_token))
        assert res.json()["reminder_schedule"] == "aggressive"

    async def test_unknown_project(self, client: AsyncClient, manager_token):
        """존재하지 않는 프로젝트는 404."""
        res = await client.post(f"{ONBOARDING}/sessions", json={
            "project_id": "00000000-0000-0000-0000-000000000000",
        }, headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_regenerate_token_invalidates_link(self, client: AsyncClient, manager_token):
        """토큰 재발급 후 이전 링크는 404."""
        session = await _create_session(client, manager_token)
        res = await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/regenerate-token", headers=auth_header(manager_token)
        )
        new_token = res.json()["access_token"]
        assert new_token != session["access_token"]

        assert (await client.get(f"{CLIENT}/{session['access_token']}")).status_code == 404
        assert (await client.get(f"{CLIENT}/{new_token}")).status_code == 200

    async def test_reset_creates_fresh_session(self, client: AsyncClient, manager_token):
        """초기화 시 새 세션과 새 토큰."""
        session = await _create_session(client, manager_token)
        await client.post(f"{CLIENT}/{session['access_token']}/start")

        res = await client.post(f"{ONBOARDING}/sessions/{session['id']}/reset", headers=auth_header(manager_token))
        assert res.status_code == 200
        fresh = res.json()
        assert fresh["id"] != session["id"]
        assert fresh["status"] == "pending"
        assert fresh["client_name"] == "Casey Client"

        res = await client.get(f"{ONBOARDING}/sessions/{session['id']}", headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_analytics(self, client: AsyncClient, manager_token):
        """상태별 집계와 완료율."""
        first = await _create_session(client, manager_token)
        await _create_session(client, manager_token)
        await _complete(client, first["access_token"])

        res = await client.get(f"{ONBOARDING}/analytics", headers=auth_header(manager_token))
        data = res.json()
        assert data["total"] == 2
        assert data["completed"] == 1
        assert data["pending"] == 1
        assert data["completion_rate"] == 50.0

    async def test_sales_rep_forbidden(self, client: AsyncClient, rep_token):
        """영업 담당자는 온보딩 관리 불가."""
        res = await client.get(f"{ONBOARDING}/sessions", headers=auth_header(rep_token))
        assert res.status_code == 403


class TestInvitation:
    """초대 이메일 테스트."""

    async def test_send_invitation(self, client: AsyncClient, manager_token):
        """초대 메일에 포털 링크 포함."""
        session = await _create_session(client, manager_token)
        with patch("app.services.onboarding_service.send_email", new=AsyncMock(return_value=True)) as sender:
            res = await client.post(
                f"{ONBOARDING}/sessions/{session['id']}/send-invitation", headers=auth_header(manager_token)
            )
        assert res.status_code == 200
        to, subject, html, text = sender.await_args.args
        assert to == "client@example.com"
        assert session["access_token"] in html

    async def test_smtp_not_configured(self, client: AsyncClient, manager_token):
        """SMTP 미설정 시 502."""
        session = await _create_session(client, manager_token)
        with patch("app.services.onboarding_service.send_email", new=AsyncMock(return_value=False)):
            res = await client.post(
                f"{ONBOARDING}/sessions/{session['id']}/send-invitation", headers=auth_header(manager_token)
            )
        assert res.status_code == 502

    async def test_no_client_email(self, client: AsyncClient, manager_token):
        """클라이언트 이메일이 없으면 400."""
        session = await _create_session(client, manager_token, client_email=None)
        res = await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/send-invitation", headers=auth_header(manager_token)
        )
        assert res.status_code == 400


# ===== Client portal =====

class TestClientPortal:
    """클라이언트 포털 흐름 테스트."""

    async def test_full_flow(self, client: AsyncClient, manager_user, manager_token):
        """시작 → 저장 → 제출 → 완료, 완료 시 관리자 알림."""
        session = await _create_session(client, manager_token)
        token = session["access_token"]

        res = await client.get(f"{CLIENT}/{token}")
        assert res.status_code == 200
        assert res.json()["project_name"] == "Acme Site"

        res = await client.post(f"{CLIENT}/{token}/start")
        assert res.json()["status"] == "in_progress"

        res = await client.put(f"{CLIENT}/{token}/steps/1", json={"data": {"project_name": "Acme Site"}})
        assert res.json()["completion_percentage"] == 20
        assert res.json()["current_step"] == 1

        res = await client.post(f"{CLIENT}/{token}/steps/1/submit", json={
            "data": {"project_name": "Acme Site", "budget_range": "$50k+"}, "time_spent": 42,
        })
        assert res.json()["current_step"] == 2
        assert res.json()["completion_percentage"] == 40

        res = await client.post(f"{CLIENT}/{token}/complete", json={})
        assert res.json()["status"] == "completed"
        assert res.json()["completion_percentage"] == 100

        res = await client.get(
            "/api/v1/admin/notifications", headers=auth_header(manager_token)
        )
        items = res.json()["items"]
        assert items[0]["type"] == "onboarding_completed"
        assert items[0]["reference_id"] == session["id"]

        res = await client.get(
            f"{ONBOARDING}/sessions/{session['id']}/reminders/stats", headers=auth_header(manager_token)
        )
        assert res.json()["by_status"] == {"cancelled": 3}

    async def test_save_moves_pending_to_in_progress(self, client: AsyncClient, manager_token):
        """시작 없이 저장해도 in_progress로 전환."""
        session = await _create_session(client, manager_token)
        res = await client.put(f"{CLIENT}/{session['access_token']}/steps/0", json={"data": {}})
        assert res.json()["status"] == "in_progress"

    async def test_completed_session_is_read_only(self, client: AsyncClient, manager_token):
        """완료된 세션은 수정 불가."""
        session = await _create_session(client, manager_token)
        await _complete(client, session["access_token"])

        res = await client.put(f"{CLIENT}/{session['access_token']}/steps/0", json={"data": {"a": 1}})
        assert res.status_code == 400

    async def test_repeat_completion_is_idempotent(self, client: AsyncClient, manager_token):
        """재완료는 변경 없이 200, 빈 final_data는 저장하지 않음."""
        session = await _create_session(client, manager_token)
        token = session["access_token"]
        await client.put(f"{CLIENT}/{token}/steps/1", json={"data": {"project_name": "Acme Site"}})
        res = await client.post(f"{CLIENT}/{token}/complete", json={"final_data": {}})
        assert set(res.json()["responses"]) == {"1"}

        res = await client.post(f"{CLIENT}/{token}/complete", json={"final_data": {"late": True}})
        assert res.status_code == 200
        assert res.json()["status"] == "completed"
        assert set(res.json()["responses"]) == {"1"}

        res = await client.get("/api/v1/admin/notifications", headers=auth_header(manager_token))
        assert [n["type"] for n in res.json()["items"]] == ["onboarding_completed"]

    async def test_invalid_step_index(self, client: AsyncClient, manager_token):
        """범위를 벗어난 단계 인덱스는 400."""
        session = await _create_session(client, manager_token)
        res = await client.put(f"{CLIENT}/{session['access_token']}/steps/9", json={"data": {}})
        assert res.status_code == 400

    async def test_expired_session(self, client: AsyncClient, db, manager_token):
        """만료된 세션은 조회 400, 진행 상황은 만료 표시."""
        from uuid import UUID

        from app.models.onboarding import OnboardingSession

        session = await _create_session(client, manager_token)
        model = await db.get(OnboardingSession, UUID(session["id"]))
        model.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
        await db.flush()

        res = await client.get(f"{CLIENT}/{session['access_token']}")
        assert res.status_code == 400

        res = await client.get(f"{CLIENT}/{session['access_token']}/progress")
        assert res.status_code == 200
        assert res.json()["is_expired"] is True
        assert res.json()["days_until_expiration"] == 0

    async def test_unknown_token(self, client: AsyncClient):
        """알 수 없는 토큰은 404."""
        res = await client.get(f"{CLIENT}/{'0' * 32}")
        assert res.status_code == 404


# ===== Reminders =====

class TestReminders:
    """리마인더 설정 및 크론 발송 테스트."""

    async def test_change_schedule_rebuilds_pending(self, client: AsyncClient, manager_token):
        """스케줄 변경 시 기존 대기분 취소, 새 일정 예약."""
        session = await _create_session(client, manager_token)
        res = await client.put(
            f"{ONBOARDING}/sessions/{session['id']}/reminders/settings",
            json={"reminder_schedule": "gentle"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        statuses = [r["status"] for r in res.json()]
        assert statuses.count("cancelled") == 3
        assert statuses.count("pending") == 3

    async def test_disable_cancels_pending(self, client: AsyncClient, manager_token):
        """비활성화 시 대기분 취소."""
        session = await _create_session(client, manager_token)
        res = await client.put(
            f"{ONBOARDING}/sessions/{session['id']}/reminders/settings",
            json={"reminder_enabled": False},
            headers=auth_header(manager_token),
        )
        assert {r["status"] for r in res.json()} == {"cancelled"}

    async def test_reenable_reschedules(self, client: AsyncClient, manager_token):
        """재활성화 시 새 리마인더 예약."""
        session = await _create_session(client, manager_token)
        url = f"{ONBOARDING}/sessions/{session['id']}/reminders/settings"
        await client.put(url, json={"reminder_enabled": False}, headers=auth_header(manager_token))
        res = await client.put(url, json={"reminder_enabled": True}, headers=auth_header(manager_token))
        assert res.status_code == 200
        statuses = [r["status"] for r in res.json()]
        assert statuses.count("cancelled") == 3
        assert statuses.count("pending") == 3

        res = await client.put(url, json={"reminder_enabled": True}, headers=auth_header(manager_token))
        assert [r["status"] for r in res.json()].count("pending") == 3

    async def test_cron_sends_due_custom_reminder(self, client: AsyncClient, manager_token):
        """즉시 발송 사용자 정의 리마인더를 크론이 발송."""
        session = await _create_session(client, manager_token)
        res = await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/reminders",
            json={"subject": "Quick nudge", "message": "We need your logo."},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        assert res.json()["reminder_label"] == "Custom Reminder"

        with patch("app.services.reminder_service.send_email", new=AsyncMock(return_value=True)):
            res = await client.post(f"{CRON}/send-reminders")
        assert res.status_code == 200
        assert res.json()["processed"] == 1
        assert res.json()["sent"] == 1

        res = await client.get(
            f"{ONBOARDING}/sessions/{session['id']}", headers=auth_header(manager_token)
        )
        assert res.json()["reminder_count"] == 1

    async def test_cron_marks_failed_without_smtp(self, client: AsyncClient, manager_token):
        """SMTP 미설정 시 실패로 기록."""
        session = await _create_session(client, manager_token)
        await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/reminders",
            json={"subject": "Nudge", "message": "Hi"},
            headers=auth_header(manager_token),
        )
        with patch("app.services.reminder_service.send_email", new=AsyncMock(return_value=False)):
            res = await client.get(f"{CRON}/send-reminders")
        assert res.json()["failed"] == 1

    async def test_cron_skips_recently_active_session(self, client: AsyncClient, manager_token):
        """최근 활동한 세션은 건너뛰고 대기 유지."""
        session = await _create_session(client, manager_token)
        await client.post(f"{CLIENT}/{session['access_token']}/start")
        await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/reminders",
            json={"subject": "Nudge", "message": "Hi"},
            headers=auth_header(manager_token),
        )
        sender = AsyncMock(return_value=True)
        with patch("app.services.reminder_service.send_email", new=sender):
            res = await client.post(f"{CRON}/send-reminders")
        assert res.json()["skipped"] == 1
        sender.assert_not_awaited()

    async def test_cron_secret(self, client: AsyncClient, monkeypatch):
        """비밀값 설정 시 Bearer 필요."""
        monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
        res = await client.post(f"{CRON}/send-reminders")
        assert res.status_code == 401
        res = await client.post(f"{CRON}/send-reminders", headers={"Authorization": "Bearer s3cret"})
        assert res.status_code == 200


# ===== Task generation =====

class TestTaskGeneration:
    """응답 기반 작업 생성 테스트."""

    async def test_generate_requires_completed(self, client: AsyncClient, manager_token):
        """미완료 세션은 생성 불가."""
        session = await _create_session(client, manager_token)
        res = await client.post(
            f"{ONBOARDING}/sessions/{session['id']}/tasks/generate", headers=auth_header(manager_token)
        )
        assert res.status_code == 400

    async def test_preview_does_not_persist(self, client: AsyncClient, manager_token):
        """미리보기는 우선순위별 그룹, 저장하지 않음."""
        session = await _create_session(client, manager_token)
        await _complete(client, session["access_token"])

        res = await client.get(
            f"{ONBOARDING}/sessions/{session['id']}/tasks/preview", headers=auth_header(manager_token)
        )
        data = res.json()
        assert data["valid"] is True
        assert data["total"] > 0
        titles = [t["title"] for t in data["by_priority"]["high"]]
        assert "Schedule project kickoff meeting" in titles

        res = await client.get(f"{PROJECTS}/{session['project_id']}/tasks", headers=auth_header(manager_token))
        assert res.json() == []

    async def test_generate_then_regenerate(self, client: AsyncClient, manager_token):
        """생성 후 재호출은 400, 재생성은 이전 작업 교체."""
        session = await _create_session(client, manager_token)
        await _complete(client, session["access_token"])
        base = f"{ONBOARDING}/sessions/{session['id']}/tasks"

        res = await client.post(f"{base}/generate", headers=auth_header(manager_token))
        assert res.status_code == 200
        first = res.json()
        assert first["task_count"] > 0
        assert first["deleted_count"] == 0

        tasks = (await client.get(f"{PROJECTS}/{session['project_id']}/tasks",
                                  headers=auth_header(manager_token))).json()
        assert len(tasks) == first["task_count"]
        assert {t["source_type"] for t in tasks} == {"onboarding_response"}
        assert {t["source_id"] for t in tasks} == {session["id"]}

        res = await client.post(f"{base}/generate", headers=auth_header(manager_token))
        assert res.status_code == 400

        res = await client.post(f"{base}/regenerate", headers=auth_header(manager_token))
        assert res.json()["deleted_count"] == first["task_count"]

        tasks = (await client.get(f"{PROJECTS}/{session['project_id']}/tasks",
                                  headers=auth_header(manager_token))).json()
        assert len(tasks) == first["task_count"]

    async def test_manual_tasks_survive_regeneration(self, client: AsyncClient, manager_token):
        """재생성은 수동 작업을 건드리지 않음."""
        session = await _create_session(client, manager_token)
        await _complete(client, session["access_token"])
        await client.post(f"{PROJECTS}/{session['project_id']}/tasks", json={"title": "Manual"},
                          headers=auth_header(manager_token))
        base = f"{ONBOARDING}/sessions/{session['id']}/tasks"
        await client.post(f"{base}/generate", headers=auth_header(manager_token))
        await client.post(f"{base}/regenerate", headers=auth_header(manager_token))

        res = await client.get(f"{PROJECTS}/{session['project_id']}/tasks", headers=auth_header(manager_token))
        assert sum(1 for t in res.json() if t["source_type"] == "manual") == 1
