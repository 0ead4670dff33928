"""영업 분석 테스트 — 지표 계산 함수 및 API.

Analytics tests — Pure metric functions plus the scoped API endpoints.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from httpx import AsyncClient

from app.services.analytics_service import (
    calculate_activity_metrics,
    calculate_deal_velocity,
    calculate_pipeline_metrics,
    calculate_sales_metrics,
)
from tests.conftest import auth_header

ADMIN = "/api/v1/admin"
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def _deal(stage: str, value: str = "0", created_days_ago: int = 0, closed_days_ago: int | None = None):
    return SimpleNamespace(
        stage=stage,
        value=Decimal(value),
        created_at=NOW - timedelta(days=created_days_ago),
        actual_close_date=NOW - timedelta(days=closed_days_ago) if closed_days_ago is not None else None,
    )


def _activity(type_: str, completed: bool = False, due_in_days: int | None = None):
    return SimpleNamespace(
        type=type_,
        completed=completed,
        due_date=NOW + timedelta(days=due_in_days) if due_in_days is not None else None,
    )


class TestSalesMetrics:
    """영업 지표 계산 테스트."""

    def test_rates(self):
        """성사율과 전환율 계산."""
        deals = [
            _deal("Won", "1000"), _deal("won", "500"), _deal("Lost", "200"), _deal("Lead", "300"),
        ]
        m = calculate_sales_metrics(deals, total_contacts=8)
        assert m.total_deals == 4
        assert m.total_value == 2000.0
        assert m.won_deals == 2
        assert m.won_value == 1500.0
        assert m.average_deal_size == 500.0
        assert m.win_rate == 66.67
        assert m.conversion_rate == 50.0

    def test_empty(self):
        """분모가 0이면 비율은 0."""
        m = calculate_sales_metrics([], total_contacts=0)
        assert m.win_rate == 0.0
        assert m.conversion_rate == 0.0
        assert m.average_deal_size == 0.0


class TestActivityMetrics:
    """활동 지표 계산 테스트."""

    def test_overdue_and_types(self):
        """미완료이고 기한이 지난 활동만 overdue."""
        activities = [
            _activity("call", completed=True, due_in_days=-3),
            _activity("call", due_in_days=-1),
            _activity("email", due_in_days=2),
            _activity("note"),
        ]
        m = calculate_activity_metrics(activities, now=NOW)
        assert m.completed_activities == 1
        assert m.overdue_activities == 1
        assert m.completion_rate == 25.0
        assert m.by_type == {"call": 2, "email": 1, "note": 1}


class TestPipelineMetrics:
    """파이프라인 지표 계산 테스트."""

    def test_velocity_uses_closed_deals_only(self):
        """종료된 딜만 속도 계산에 포함."""
        deals = [
            _deal("Won", created_days_ago=10, closed_days_ago=0),
            _deal("Lost", created_days_ago=5, closed_days_ago=1),
            _deal("Lead", created_days_ago=3),
        ]
        assert calculate_deal_velocity(deals) == 7.0
        assert calculate_deal_velocity([_deal("Lead")]) == 0.0

    def test_stages_and_timeline(self):
        """단계 순서 집계와 최근 30일 일자별 생성 수."""
        stages = [
            SimpleNamespace(name="Won", order=1, color="#22c55e"),
            SimpleNamespace(name="Lead", order=0, color="#6b7280"),
        ]
        deals = [
            _deal("lead", "100", created_days_ago=1),
            _deal("Lead", "50", created_days_ago=1),
            _deal("Won", "400", created_days_ago=2),
            _deal("Won", "10", created_days_ago=45),
        ]
        m = calculate_pipeline_metrics(stages, deals, now=NOW)
        assert [(s.stage, s.count, s.value) for s in m.stages] == [("Lead", 2, 150.0), ("Won", 2, 410.0)]
        assert [(d.date, d.count) for d in m.deals_over_time] == [("2025-06-13", 1), ("2025-06-14", 2)]
        assert m.total_pipeline_value == 560.0


class TestAnalyticsAPI:
    """분석 API 테스트."""

    async def test_sales_scoped_to_rep(self, client: AsyncClient, stages, admin_token, rep_token):
        """영업 담당자는 자기 딜만 집계."""
        await client.post(f"{ADMIN}/deals", json={"title": "A", "value": "100", "stage": "Won"},
                          headers=auth_header(admin_token))
        await client.post(f"{ADMIN}/deals", json={"title": "B", "value": "50", "stage": "Lost"},
                          headers=auth_header(rep_token))

        res = await client.get(f"{ADMIN}/analytics/sales", headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json()["total_deals"] == 1
        assert res.json()["win_rate"] == 0.0

        res = await client.get(f"{ADMIN}/analytics/sales", headers=auth_header(admin_token))
        assert res.json()["total_deals"] == 2
        assert res.json()["win_rate"] == 50.0

    async def test_pipeline_lists_all_stages(self, client: AsyncClient, stages, admin_token):
        """딜이 없어도 모든 단계가 포함됨."""
        res = await client.get(f"{ADMIN}/analytics/pipeline", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert len(res.json()["stages"]) == 6
        assert all(s["count"] == 0 for s in res.json()["stages"])

    async def test_activity_metrics(self, client: AsyncClient, admin_token):
        """활동 지표 API."""
        await client.post(f"{ADMIN}/activities", json={"type": "call", "subject": "x"},
                          headers=auth_header(admin_token))
        res = await client.get(f"{ADMIN}/analytics/activities", headers=auth_header(admin_token))
        assert res.json()["total_activities"] == 1
        assert res.json()["by_type"] == {"call": 1}
