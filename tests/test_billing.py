"""과금 테스트 — 사용량 계산기, 요금제/구독 API, 사용량 계측, 청구 주기 크론.

Billing tests — Minute metering math, plan and subscription endpoints,
usage recording with threshold notifications and the billing cycle job.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from httpx import AsyncClient

from app.config import settings
from app.services.billing_service import generate_invoice_number
from app.services.usage_calculator import (
    build_usage_status,
    calculate_call_usage,
    estimate_call_cost,
    get_usage_threshold,
    seconds_to_minutes,
)
from tests.conftest import auth_header

BILLING = "/api/v1/admin/billing"
NOTIFY = "/api/v1/admin/notifications"
CRON = "/api/v1/cron"


async def _subscribe(client: AsyncClient, token: str, plan_slug: str = "free") -> dict:
    await client.post(f"{BILLING}/plans/seed", headers=auth_header(token))
    res = await client.post(f"{BILLING}/subscription", json={"plan_slug": plan_slug}, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


class TestUsageCalculator:
    """분 단위 과금 계산 (순수 함수)."""

    def test_seconds_round_up(self):
        assert seconds_to_minutes(0) == 0
        assert seconds_to_minutes(60) == 1
        assert seconds_to_minutes(61) == 2

    def test_call_within_allowance(self):
        usage = calculate_call_usage(90, 10, 100, 15)
        assert usage["minutes"] == 2
        assert usage["is_overage"] is False
        assert usage["cost_in_cents"] == 0
        assert usage["rate_per_minute"] == 0
        assert usage["remaining_minutes"] == 88

    def test_call_crossing_allowance_pays_excess_only(self):
        """주기 한도를 넘는 통화는 초과분만 과금."""
        usage = calculate_call_usage(600, 95, 100, 15)
        assert usage["minutes"] == 10
        assert usage["is_overage"] is False
        assert usage["overage_minutes"] == 5
        assert usage["cost_in_cents"] == 75
        assert usage["rate_per_minute"] == 15
        assert usage["remaining_minutes"] == 0

    def test_call_after_allowance_is_overage(self):
        usage = calculate_call_usage(120, 100, 100, 10)
        assert usage["is_overage"] is True
        assert usage["overage_minutes"] == 2
        assert usage["cost_in_cents"] == 20

    def test_usage_status(self):
        status = build_usage_status(130, 100, 450, "active")
        assert status["minutes_remaining"] == 0
        assert status["overage_minutes"] == 30
        assert status["is_in_overage"] is True
        assert status["percentage_used"] == 100
        assert status["can_make_calls"] is True

    def test_usage_status_zero_allowance(self):
        """포함 분이 0이면 1로 간주."""
        status = build_usage_status(0, 0, 0, "none")
        assert status["minutes_included"] == 1
        assert status["percentage_used"] == 0
        assert status["can_make_calls"] is False

    def test_thresholds(self):
        assert get_usage_threshold(10)["threshold"] == 50
        assert get_usage_threshold(50) | {"message": ""} == {
            "threshold": 75, "status": "safe", "color": "green", "message": "",
        }
        assert get_usage_threshold(80)["status"] == "warning"
        assert get_usage_threshold(90)["status"] == "critical"
        exceeded = get_usage_threshold(100)
        assert exceeded["status"] == "exceeded"
        assert exceeded["color"] == "red"

    def test_estimate(self):
        estimate = estimate_call_cost(300, 97, 100, 8)
        assert estimate["minutes"] == 5
        assert estimate["remaining_included_minutes"] == 3
        assert estimate["overage_minutes"] == 2
        assert estimate["estimated_cost"] == 16
        assert estimate["is_overage"] is True

    def test_invoice_number(self):
        org_id = UUID("12345678-1234-5678-1234-567812345678")
        moment = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert generate_invoice_number(org_id, moment) == "INV-1735689600000-12345678"


class TestPlans:
    """요금제 API 테스트."""

    async def test_seed_is_idempotent(self, client: AsyncClient, admin_token):
        res = await client.post(f"{BILLING}/plans/seed", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["message"] == "4 plans created"

        res = await client.post(f"{BILLING}/plans/seed", headers=auth_header(admin_token))
        assert res.json()["message"] == "0 plans created"

    async def test_list_plans_in_display_order(self, client: AsyncClient, admin_token, rep_token):
        await client.post(f"{BILLING}/plans/seed", headers=auth_header(admin_token))
        res = await client.get(f"{BILLING}/plans", headers=auth_header(rep_token))
        assert res.status_code == 200
        plans = res.json()
        assert [p["slug"] for p in plans] == ["free", "starter", "professional", "enterprise"]
        assert plans[1]["monthly_price"] == 9900
        assert plans[2]["max_active_campaigns"] == -1

    async def test_seed_requires_admin(self, client: AsyncClient, manager_token):
        res = await client.post(f"{BILLING}/plans/seed", headers=auth_header(manager_token))
        assert res.status_code == 403


class TestSubscription:
    """구독 API 테스트."""

    async def test_no_subscription(self, client: AsyncClient, manager_token):
        res = await client.get(f"{BILLING}/subscription", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json() is None

        res = await client.get(f"{BILLING}/usage", headers=auth_header(manager_token))
        assert res.json()["can_make_calls"] is False

    async def test_subscribe(self, client: AsyncClient, admin_token):
        sub = await _subscribe(client, admin_token, "starter")
        assert sub["status"] == "active"
        assert sub["plan"]["slug"] == "starter"
        assert sub["minutes_included_this_cycle"] == 1000
        assert sub["minutes_used_this_cycle"] == 0
        assert sub["payment_provider"] == "manual"

    async def test_change_plan_cancels_previous(self, client: AsyncClient, admin_token, manager_token):
        """플랜 변경 시 기존 구독 취소."""
        first = await _subscribe(client, admin_token, "free")
        second = await _subscribe(client, admin_token, "professional")
        assert first["id"] != second["id"]

        res = await client.get(f"{BILLING}/subscription", headers=auth_header(manager_token))
        assert res.json()["id"] == second["id"]
        assert res.json()["plan"]["slug"] == "professional"

    async def test_unknown_plan(self, client: AsyncClient, admin_token):
        res = await client.post(f"{BILLING}/subscription", json={"plan_slug": "platinum"}, headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_subscribe_requires_admin(self, client: AsyncClient, manager_token):
        res = await client.post(f"{BILLING}/subscription", json={"plan_slug": "free"}, headers=auth_header(manager_token))
        assert res.status_code == 403


class TestUsage:
    """사용량 계측 테스트."""

    async def test_record_without_subscription(self, client: AsyncClient, manager_token):
        res = await client.post(f"{BILLING}/usage", json={"duration_seconds": 60}, headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["success"] is False
        assert data["message"] == "No active subscription"

    async def test_record_unknown_campaign(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token)
        res = await client.post(
            f"{BILLING}/usage",
            json={"campaign_id": str(uuid4()), "duration_seconds": 60},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404

    async def test_usage_accumulates_into_overage(self, client: AsyncClient, admin_token, manager_token):
        """포함 분을 넘어서면 초과 비용이 누적."""
        await _subscribe(client, admin_token, "free")

        res = await client.post(f"{BILLING}/usage", json={"duration_seconds": 4800}, headers=auth_header(manager_token))
        assert res.json() == {
            "success": True, "cost_in_cents": 0, "minutes_used": 80, "was_overage": False, "message": None,
        }

        res = await client.post(f"{BILLING}/usage", json={"duration_seconds": 3000}, headers=auth_header(manager_token))
        data = res.json()
        assert data["minutes_used"] == 50
        assert data["cost_in_cents"] == 450
        assert data["was_overage"] is False

        res = await client.get(f"{BILLING}/usage", headers=auth_header(manager_token))
        usage = res.json()
        assert usage["minutes_used"] == 130
        assert usage["overage_minutes"] == 30
        assert usage["overage_cost"] == 450
        assert usage["is_in_overage"] is True
        assert usage["percentage_used"] == 100
        assert usage["current_period_end"] is not None

        res = await client.get(f"{BILLING}/usage/threshold", headers=auth_header(manager_token))
        assert res.json()["status"] == "exceeded"
        assert res.json()["percentage_used"] == 100

        res = await client.get(f"{BILLING}/usage/records", headers=auth_header(manager_token))
        assert res.json()["total"] == 2

    async def test_threshold_crossing_notifies_admins(
        self, client: AsyncClient, admin_token, manager_token, rep_user,
    ):
        """임계치 상승 시 관리자/매니저에게 알림, 같은 구간에서는 재알림 없음."""
        await _subscribe(client, admin_token, "free")
        await client.post(f"{BILLING}/usage", json={"duration_seconds": 600}, headers=auth_header(manager_token))

        res = await client.get(NOTIFY, headers=auth_header(admin_token))
        assert res.json()["total"] == 0

        await client.post(f"{BILLING}/usage", json={"duration_seconds": 4200}, headers=auth_header(manager_token))
        await client.post(f"{BILLING}/usage", json={"duration_seconds": 60}, headers=auth_header(manager_token))

        for token in (admin_token, manager_token):
            res = await client.get(NOTIFY, headers=auth_header(token))
            items = res.json()["items"]
            assert len(items) == 1
            assert items[0]["type"] == "usage_threshold"
            assert items[0]["reference_type"] == "subscription"

    async def test_estimate(self, client: AsyncClient, admin_token, manager_token):
        await _subscribe(client, admin_token, "free")
        res = await client.get(
            f"{BILLING}/usage/estimate",
            params={"duration_seconds": 125},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json() == {
            "minutes": 3,
            "is_overage": False,
            "overage_minutes": 0,
            "estimated_cost": 0,
            "rate_per_minute": 15,
            "remaining_included_minutes": 100,
        }

    async def test_estimate_without_subscription(self, client: AsyncClient, manager_token):
        res = await client.get(
            f"{BILLING}/usage/estimate",
            params={"duration_seconds": 60},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400


class TestBillingCycle:
    """청구 주기 크론 테스트."""

    async def test_cycle_issues_invoice_and_resets(self, client: AsyncClient, db, admin_token, manager_token):
        from app.models.billing import Subscription

        sub = await _subscribe(client, admin_token, "starter")
        await client.post(f"{BILLING}/usage", json={"duration_seconds": 120}, headers=auth_header(manager_token))

        model = await db.get(Subscription, UUID(sub["id"]))
        model.current_period_end = datetime.now(timezone.utc) - timedelta(hours=1)
        await db.flush()

        res = await client.post(f"{CRON}/reset-billing-cycles")
        assert res.status_code == 200
        assert res.json() == {
            "subscriptions_processed": 1, "invoices_generated": 1, "errors": 0, "error_details": [],
        }

        res = await client.get(f"{BILLING}/invoices", headers=auth_header(admin_token))
        invoices = res.json()["items"]
        assert len(invoices) == 1
        invoice = invoices[0]
        assert invoice["invoice_number"].startswith("INV-")
        assert invoice["status"] == "open"
        assert invoice["subscription_amount"] == 9900
        assert invoice["usage_amount"] == 0
        assert invoice["tax_amount"] == 0
        assert invoice["total_amount"] == 9900
        assert invoice["minutes_used"] == 2

        res = await client.get(f"{BILLING}/usage", headers=auth_header(manager_token))
        assert res.json()["minutes_used"] == 0
        assert res.json()["minutes_included"] == 1000

    async def test_cycle_skips_current_subscriptions(self, client: AsyncClient, admin_token):
        await _subscribe(client, admin_token, "free")
        res = await client.post(f"{CRON}/reset-billing-cycles")
        assert res.json()["subscriptions_processed"] == 0

    async def test_cycle_requires_secret(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
        res = await client.post(f"{CRON}/reset-billing-cycles")
        assert res.status_code == 401

        res = await client.post(f"{CRON}/reset-billing-cycles", headers={"Authorization": "Bearer s3cret"})
        assert res.status_code == 200
