"""음성 캠페인 테스트 — CRUD, 상태 전환, 요금제 한도, 통화 기록, 분석.

Voice campaign tests — CRUD, lifecycle, the plan's active-campaign limit,
call recording with metered usage and per-project analytics.
"""

from types import SimpleNamespace
from uuid import uuid4

from httpx import AsyncClient

from app.services.voice_campaign_service import running_average, summarize_campaigns
from tests.conftest import auth_header

CAMPAIGNS = "/api/v1/admin/voice-campaigns"
BILLING = "/api/v1/admin/billing"
PROJECTS = "/api/v1/admin/projects"


async def _subscribe(client: AsyncClient, token: str, plan_slug: str = "free") -> None:
    await client.post(f"{BILLING}/plans/seed", headers=auth_header(token))
    res = await client.post(f"{BILLING}/subscription", json={"plan_slug": plan_slug}, headers=auth_header(token))
    assert res.status_code == 201


async def _project(client: AsyncClient, token: str) -> str:
    res = await client.post(PROJECTS, json={"name": "Dental Outreach"}, headers=auth_header(token))
    return res.json()["id"]


async def _campaign(client: AsyncClient, token: str, project_id: str, **overrides) -> dict:
    payload = {"project_id": project_id, "name": "Spring Reactivation"}
    payload.update(overrides)
    res = await client.post(CAMPAIGNS, json=payload, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()


def _campaign_stub(**kwargs) -> SimpleNamespace:
    values = {
        "status": "draft",
        "provider": "vapi",
        "total_calls": 0,
        "completed_calls": 0,
        "average_call_duration": 0.0,
        "average_call_quality": None,
        "total_cost": 0,
    }
    values.update(kwargs)
    return SimpleNamespace(**values)


class TestCampaignMath:
    """집계 계산 (순수 함수)."""

    def test_running_average(self):
        assert running_average(None, 1, 90) == 90.0
        assert running_average(90.0, 2, 30) == 60.0
        assert running_average(60.0, 3, 120) == 80.0

    def test_summarize_weights_by_calls(self):
        campaigns = [
            _campaign_stub(status="active", total_calls=3, completed_calls=2,
                           average_call_duration=100.0, average_call_quality=8.0, total_cost=150),
            _campaign_stub(provider="retell", total_calls=1, completed_calls=1,
                           average_call_duration=20.0, average_call_quality=7.0, total_cost=50),
            _campaign_stub(provider="vapi"),
        ]
        summary = summarize_campaigns(campaigns)
        assert summary["total_campaigns"] == 3
        assert summary["active_campaigns"] == 1
        assert summary["total_calls"] == 4
        assert summary["completed_calls"] == 3
        assert summary["success_rate"] == 75
        assert summary["avg_call_duration"] == 80.0
        assert summary["avg_call_quality"] == 7.5
        assert summary["total_cost"] == 200
        assert summary["provider_distribution"] == {"vapi": 2, "retell": 1}

    def test_summarize_empty(self):
        summary = summarize_campaigns([])
        assert summary["success_rate"] == 0
        assert summary["avg_call_duration"] == 0.0
        assert summary["provider_distribution"] == {}


class TestCampaignCrud:
    """캠페인 CRUD 테스트."""

    async def test_create_defaults(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token)
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id)
        assert campaign["status"] == "draft"
        assert campaign["is_active"] is False
        assert campaign["campaign_type"] == "outbound"
        assert campaign["billing_type"] == "billable"
        assert campaign["provider"] == "vapi"
        assert campaign["total_calls"] == 0

    async def test_billable_requires_subscription(self, client: AsyncClient, manager_token):
        project_id = await _project(client, manager_token)
        res = await client.post(
            CAMPAIGNS,
            json={"project_id": project_id, "name": "No Plan"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400

    async def test_admin_free_skips_subscription(self, client: AsyncClient, manager_token):
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id, billing_type="admin_free")
        assert campaign["billing_type"] == "admin_free"

    async def test_unknown_project(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token)
        res = await client.post(
            CAMPAIGNS,
            json={"project_id": str(uuid4()), "name": "Orphan"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404

        res = await client.post(
            CAMPAIGNS,
            json={"project_id": "not-a-uuid", "name": "Orphan"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400

    async def test_invalid_provider(self, client: AsyncClient, manager_token):
        project_id = await _project(client, manager_token)
        res = await client.post(
            CAMPAIGNS,
            json={"project_id": project_id, "name": "X", "provider": "twilio"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422

    async def test_list_update_delete(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "starter")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id)
        await _campaign(client, manager_token, project_id, name="Second")

        res = await client.get(CAMPAIGNS, params={"project_id": project_id}, headers=auth_header(manager_token))
        assert len(res.json()) == 2

        res = await client.patch(
            f"{CAMPAIGNS}/{campaign['id']}",
            json={"name": "Renamed", "campaign_goal": "Book cleanings"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["name"] == "Renamed"
        assert res.json()["campaign_goal"] == "Book cleanings"

        res = await client.delete(f"{CAMPAIGNS}/{campaign['id']}", headers=auth_header(manager_token))
        assert res.status_code == 204
        res = await client.get(f"{CAMPAIGNS}/{campaign['id']}", headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_rep_forbidden(self, client: AsyncClient, rep_token):
        res = await client.get(CAMPAIGNS, headers=auth_header(rep_token))
        assert res.status_code == 403


class TestCampaignLifecycle:
    """상태 전환 및 요금제 한도 테스트."""

    async def test_launch_pause_resume(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "starter")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id)
        url = f"{CAMPAIGNS}/{campaign['id']}"

        res = await client.post(f"{url}/launch", headers=auth_header(manager_token))
        assert res.json()["status"] == "active"
        assert res.json()["is_active"] is True

        res = await client.post(f"{url}/launch", headers=auth_header(manager_token))
        assert res.status_code == 400

        res = await client.post(f"{url}/pause", headers=auth_header(manager_token))
        assert res.json()["status"] == "paused"
        assert res.json()["is_active"] is False

        res = await client.post(f"{url}/resume", headers=auth_header(manager_token))
        assert res.json()["status"] == "active"

    async def test_plan_campaign_limit(self, client: AsyncClient, admin_token, manager_token):
        """무료 요금제는 활성 캠페인 1개."""
        await _subscribe(client, admin_token, "free")
        project_id = await _project(client, manager_token)
        first = await _campaign(client, manager_token, project_id)
        second = await _campaign(client, manager_token, project_id, name="Second")

        res = await client.post(f"{CAMPAIGNS}/{first['id']}/launch", headers=auth_header(manager_token))
        assert res.status_code == 200

        res = await client.post(f"{CAMPAIGNS}/{second['id']}/launch", headers=auth_header(manager_token))
        assert res.status_code == 400
        assert "Campaign limit reached" in res.json()["detail"]

        res = await client.post(
            CAMPAIGNS,
            json={"project_id": project_id, "name": "Third"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400

        await client.post(f"{CAMPAIGNS}/{first['id']}/pause", headers=auth_header(manager_token))
        res = await client.post(f"{CAMPAIGNS}/{second['id']}/launch", headers=auth_header(manager_token))
        assert res.status_code == 200

    async def test_unlimited_plan(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "professional")
        project_id = await _project(client, manager_token)
        for i in range(3):
            campaign = await _campaign(client, manager_token, project_id, name=f"Campaign {i}")
            res = await client.post(f"{CAMPAIGNS}/{campaign['id']}/launch", headers=auth_header(manager_token))
            assert res.status_code == 200

    async def test_duplicate_resets_stats(self, client: AsyncClient, admin_token, manager_token):
        """복제본은 draft 상태, 통계 초기화."""
        await _subscribe(client, admin_token, "starter")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id, provider="retell", campaign_goal="Renewals")
        url = f"{CAMPAIGNS}/{campaign['id']}"
        await client.post(f"{url}/launch", headers=auth_header(manager_token))
        await client.post(f"{url}/calls", json={"success": True, "duration_seconds": 60}, headers=auth_header(manager_token))

        res = await client.post(f"{url}/duplicate", headers=auth_header(manager_token))
        assert res.status_code == 201
        copy = res.json()
        assert copy["id"] != campaign["id"]
        assert copy["name"] == "Spring Reactivation (Copy)"
        assert copy["status"] == "draft"
        assert copy["provider"] == "retell"
        assert copy["campaign_goal"] == "Renewals"
        assert copy["total_calls"] == 0

    async def test_bulk_actions_count_failures(self, client: AsyncClient, admin_token, manager_token):
        """일괄 작업 — 실패 항목은 건너뛰고 집계."""
        await _subscribe(client, admin_token, "professional")
        project_id = await _project(client, manager_token)
        first = await _campaign(client, manager_token, project_id)
        second = await _campaign(client, manager_token, project_id, name="Second")
        ids = [first["id"], second["id"]]

        res = await client.post(
            f"{CAMPAIGNS}/bulk/pause",
            json={"campaign_ids": [*ids, str(uuid4()), "not-a-uuid"]},
            headers=auth_header(manager_token),
        )
        assert res.json() == {"successful": 2, "failed": 2}

        res = await client.post(f"{CAMPAIGNS}/bulk/resume", json={"campaign_ids": ids}, headers=auth_header(manager_token))
        assert res.json()["successful"] == 2
        res = await client.get(CAMPAIGNS, params={"status": "active"}, headers=auth_header(manager_token))
        assert len(res.json()) == 2

        res = await client.post(f"{CAMPAIGNS}/bulk/delete", json={"campaign_ids": ids}, headers=auth_header(manager_token))
        assert res.json() == {"successful": 2, "failed": 0}
        res = await client.get(CAMPAIGNS, headers=auth_header(manager_token))
        assert res.json() == []

    async def test_bulk_requires_ids(self, client: AsyncClient, manager_token):
        res = await client.post(f"{CAMPAIGNS}/bulk/pause", json={"campaign_ids": []}, headers=auth_header(manager_token))
        assert res.status_code == 422


class TestCampaignCalls:
    """통화 기록 및 분석 테스트."""

    async def test_record_calls_updates_stats_and_usage(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "free")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id)
        url = f"{CAMPAIGNS}/{campaign['id']}"

        res = await client.post(
            f"{url}/calls",
            json={"success": True, "duration_seconds": 90, "quality": 8},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["total_calls"] == 1
        assert data["completed_calls"] == 1
        assert data["average_call_duration"] == 90.0
        assert data["average_call_quality"] == 8.0
        assert data["last_call_at"] is not None

        res = await client.post(
            f"{url}/calls",
            json={"success": False, "duration_seconds": 30},
            headers=auth_header(manager_token),
        )
        data = res.json()
        assert data["total_calls"] == 2
        assert data["failed_calls"] == 1
        assert data["average_call_duration"] == 60.0
        assert data["average_call_quality"] == 8.0
        assert data["total_cost"] == 0

        # 품질 평균은 점수가 있는 통화만 반영
        res = await client.post(
            f"{url}/calls",
            json={"success": True, "duration_seconds": 60, "quality": 4},
            headers=auth_header(manager_token),
        )
        data = res.json()
        assert data["total_calls"] == 3
        assert data["average_call_duration"] == 60.0
        assert data["average_call_quality"] == 6.0

        res = await client.get(
            f"{BILLING}/usage/records",
            params={"campaign_id": campaign["id"]},
            headers=auth_header(manager_token),
        )
        records = res.json()["items"]
        assert len(records) == 3
        assert sorted(r["minutes_used"] for r in records) == [1, 1, 2]

        res = await client.get(f"{BILLING}/usage", headers=auth_header(manager_token))
        assert res.json()["minutes_used"] == 4

    async def test_overage_cost_added_to_campaign(self, client: AsyncClient, admin_token, manager_token):
        """포함 분 초과 통화 비용이 캠페인 총액에 누적."""
        await _subscribe(client, admin_token, "free")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id)

        res = await client.post(
            f"{CAMPAIGNS}/{campaign['id']}/calls",
            json={"success": True, "duration_seconds": 6300},
            headers=auth_header(manager_token),
        )
        assert res.json()["total_cost"] == 75

    async def test_admin_free_calls_not_metered(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "free")
        project_id = await _project(client, manager_token)
        campaign = await _campaign(client, manager_token, project_id, billing_type="admin_free")

        res = await client.post(
            f"{CAMPAIGNS}/{campaign['id']}/calls",
            json={"success": True, "duration_seconds": 600},
            headers=auth_header(manager_token),
        )
        assert res.json()["total_calls"] == 1
        assert res.json()["total_cost"] == 0

        res = await client.get(f"{BILLING}/usage", headers=auth_header(manager_token))
        assert res.json()["minutes_used"] == 0

    async def test_analytics(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "starter")
        project_id = await _project(client, manager_token)
        first = await _campaign(client, manager_token, project_id)
        await _campaign(client, manager_token, project_id, name="Inbound", provider="synthflow")
        await client.post(f"{CAMPAIGNS}/{first['id']}/launch", headers=auth_header(manager_token))
        for success, seconds in ((True, 120), (False, 60)):
            await client.post(
                f"{CAMPAIGNS}/{first['id']}/calls",
                json={"success": success, "duration_seconds": seconds, "quality": 9},
                headers=auth_header(manager_token),
            )

        res = await client.get(
            f"{CAMPAIGNS}/analytics",
            params={"project_id": project_id},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["total_campaigns"] == 2
        assert data["active_campaigns"] == 1
        assert data["total_calls"] == 2
        assert data["success_rate"] == 50
        assert data["avg_call_duration"] == 90.0
        assert data["avg_call_quality"] == 9.0
        assert data["provider_distribution"] == {"vapi": 1, "synthflow": 1}

    async def test_analytics_unknown_project(self, client: AsyncClient, manager_token):
        res = await client.get(
            f"{CAMPAIGNS}/analytics",
            params={"project_id": str(uuid4())},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
