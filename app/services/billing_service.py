"""과금 서비스 — 요금제, 구독, 통화 사용량 계측, 청구 주기.

Billing Service — Plans, subscriptions, per-call minute metering and the
30-day billing cycle job. Rates and counters are integer cents / whole
minutes; the math lives in ``usage_calculator``.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.billing import DEFAULT_PLANS, BillingPlan, Invoice, Subscription, UsageRecord
from app.models.voice_campaign import VoiceCampaign
from app.repositories.billing_repository import (
    billing_plan_repository,
    invoice_repository,
    subscription_repository,
    usage_record_repository,
)
from app.repositories.voice_campaign_repository import voice_campaign_repository
from app.schemas.billing import (
    BillingCycleRunResponse,
    BillingPlanResponse,
    CallCostEstimateResponse,
    InvoiceResponse,
    RecordUsageResponse,
    SubscribeRequest,
    SubscriptionResponse,
    UsageRecordResponse,
    UsageStatusResponse,
    UsageThresholdResponse,
)
from app.schemas.common import PaginatedResponse
from app.services.notification_service import notification_service
from app.services.usage_calculator import (
    build_usage_status,
    calculate_call_usage,
    estimate_call_cost,
    get_usage_threshold,
)
from app.utils.exceptions import BadRequestError, NotFoundError

logger = structlog.get_logger(__name__)

BILLING_PERIOD: timedelta = timedelta(days=30)
INVOICE_DUE: timedelta = timedelta(days=14)

PLAN_FEATURES: dict[str, list[str]] = {
    "free": ["100 included minutes", "1 active campaign", "Email support"],
    "starter": ["1,000 included minutes", "5 active campaigns", "Call analytics"],
    "professional": ["5,000 included minutes", "Unlimited campaigns", "Priority support"],
    "enterprise": ["20,000 included minutes", "Unlimited campaigns and users", "Dedicated support"],
}


def generate_invoice_number(organization_id: UUID, now: datetime | None = None) -> str:
    """청구서 번호 — ``INV-{epoch_ms}-{org_id[:8]}``."""
    moment: datetime = now or datetime.now(timezone.utc)
    return f"INV-{int(moment.timestamp() * 1000)}-{str(organization_id)[:8]}"


class BillingService:
    """과금 비즈니스 로직을 처리하는 서비스."""

    def _plan_response(self, plan: BillingPlan) -> BillingPlanResponse:
        return BillingPlanResponse(
            id=str(plan.id),
            name=plan.name,
            slug=plan.slug,
            description=plan.description,
            monthly_price=plan.monthly_price,
            included_minutes=plan.included_minutes,
            overage_rate_per_minute=plan.overage_rate_per_minute,
            max_active_campaigns=plan.max_active_campaigns,
            max_users=plan.max_users,
            features=plan.features or [],
        )

    def _subscription_response(self, subscription: Subscription) -> SubscriptionResponse:
        return SubscriptionResponse(
            id=str(subscription.id),
            plan=self._plan_response(subscription.plan),
            status=subscription.status,
            payment_provider=subscription.payment_provider,
            current_period_start=subscription.current_period_start,
            current_period_end=subscription.current_period_end,
            minutes_used_this_cycle=subscription.minutes_used_this_cycle,
            minutes_included_this_cycle=subscription.minutes_included_this_cycle,
            overage_minutes_this_cycle=subscription.overage_minutes_this_cycle,
            overage_cost_this_cycle=subscription.overage_cost_this_cycle,
            cancel_at_period_end=subscription.cancel_at_period_end,
        )

    def _invoice_response(self, invoice: Invoice) -> InvoiceResponse:
        return InvoiceResponse(
            id=str(invoice.id),
            invoice_number=invoice.invoice_number,
            subscription_amount=invoice.subscription_amount,
            usage_amount=invoice.usage_amount,
            subtotal=invoice.subtotal,
            tax_amount=invoice.tax_amount,
            total_amount=invoice.total_amount,
            minutes_included=invoice.minutes_included,
            minutes_used=invoice.minutes_used,
            overage_minutes=invoice.overage_minutes,
            status=invoice.status,
            period_start=invoice.period_start,
            period_end=invoice.period_end,
            due_date=invoice.due_date,
            paid_at=invoice.paid_at,
            created_at=invoice.created_at,
        )

    # --- 요금제 (Plans) ---

    async def list_plans(self, db: AsyncSession) -> list[BillingPlanResponse]:
        plans: list[BillingPlan] = await billing_plan_repository.get_active(db)
        return [self._plan_response(p) for p in plans]

    async def seed_default_plans(self, db: AsyncSession) -> int:
        """기본 요금제를 생성합니다 — slug 기준으로 멱등.

        Returns:
            int: 새로 생성된 요금제 수 (Plans created by this call)
        """
        created: int = 0
        for order, (name, slug, price, minutes, rate, campaigns, users) in enumerate(DEFAULT_PLANS):
            if await billing_plan_repository.get_by_slug(db, slug) is not None:
                continue
            await billing_plan_repository.create(db, {
                "name": name,
                "slug": slug,
                "monthly_price": price,
                "included_minutes": minutes,
                "overage_rate_per_minute": rate,
                "max_active_campaigns": campaigns,
                "max_users": users,
                "features": PLAN_FEATURES.get(slug, []),
                "is_active": True,
                "display_order": order,
            })
            created += 1
        if created:
            logger.info("billing_plans_seeded", created=created)
        return created

    # --- 구독 (Subscriptions) ---

    async def subscribe(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: SubscribeRequest,
    ) -> SubscriptionResponse:
        """요금제를 구독합니다.

        Cancel the organization's active subscription, if any, and start a
        new 30-day period on the chosen plan with fresh counters.

        Raises:
            NotFoundError: 알 수 없거나 비활성인 요금제 (Unknown or inactive plan)
        """
        plan: BillingPlan | None = await billing_plan_repository.get_by_slug(db, data.plan_slug)
        if plan is None or not plan.is_active:
            raise NotFoundError("Billing plan not found")

        now: datetime = datetime.now(timezone.utc)
        current: Subscription | None = await subscription_repository.get_active(db, organization_id)
        if current is not None:
            current.status = "canceled"
            current.canceled_at = now

        subscription: Subscription = await subscription_repository.create(db, {
            "organization_id": organization_id,
            "plan_id": plan.id,
            "payment_provider": data.payment_provider,
            "current_period_start": now,
            "current_period_end": now + BILLING_PERIOD,
            "minutes_used_this_cycle": 0,
            "minutes_included_this_cycle": plan.included_minutes,
            "overage_minutes_this_cycle": 0,
            "overage_cost_this_cycle": 0,
            "status": "active",
        })
        subscription.plan = plan
        logger.info("subscription_started", organization_id=str(organization_id), plan=plan.slug)
        return self._subscription_response(subscription)

    async def get_subscription(self, db: AsyncSession, organization_id: UUID) -> SubscriptionResponse | None:
        subscription: Subscription | None = await subscription_repository.get_active(db, organization_id)
        return self._subscription_response(subscription) if subscription is not None else None

    async def get_active_plan(self, db: AsyncSession, organization_id: UUID) -> BillingPlan | None:
        subscription: Subscription | None = await subscription_repository.get_active(db, organization_id)
        return subscription.plan if subscription is not None else None

    # --- 사용량 (Usage) ---

    async def record_call_usage(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID | None,
        duration_seconds: int,
    ) -> RecordUsageResponse:
        """통화 사용량을 기록합니다.

        Record the minutes of one call against the active subscription and
        bump the cycle counters. Calls of an ``admin_free`` campaign are not
        metered. Crossing into a higher usage threshold notifies the
        organization's admins.
        """
        if campaign_id is not None:
            campaign: VoiceCampaign | None = await voice_campaign_repository.get_by_id(
                db, campaign_id, organization_id
            )
            if campaign is None:
                raise NotFoundError("Voice campaign not found")
            if campaign.billing_type == "admin_free":
                return RecordUsageResponse(success=True, cost_in_cents=0, message="Admin free campaign")

        subscription: Subscription | None = await subscription_repository.get_active(db, organization_id)
        if subscription is None:
            return RecordUsageResponse(success=False, cost_in_cents=0, message="No active subscription")

        usage: dict[str, Any] = calculate_call_usage(
            duration_seconds,
            subscription.minutes_used_this_cycle,
            subscription.minutes_included_this_cycle,
            subscription.plan.overage_rate_per_minute,
        )
        previous_pct: int = self._percentage_used(subscription)

        await usage_record_repository.create(db, {
            "organization_id": organization_id,
            "subscription_id": subscription.id,
            "campaign_id": campaign_id,
            "duration_in_seconds": duration_seconds,
            "minutes_used": usage["minutes"],
            "cost_in_cents": usage["cost_in_cents"],
            "was_overage": usage["is_overage"],
            "rate_per_minute": usage["rate_per_minute"],
            "billing_period_start": subscription.current_period_start,
            "billing_period_end": subscription.current_period_end,
        })
        subscription.minutes_used_this_cycle += usage["minutes"]
        subscription.overage_minutes_this_cycle += usage["overage_minutes"]
        subscription.overage_cost_this_cycle += usage["cost_in_cents"]
        await db.flush()

        await self._notify_threshold(db, subscription, previous_pct)
        return RecordUsageResponse(
            success=True,
            cost_in_cents=usage["cost_in_cents"],
            minutes_used=usage["minutes"],
            was_overage=usage["is_overage"],
        )

    def _percentage_used(self, subscription: Subscription) -> int:
        return build_usage_status(
            subscription.minutes_used_this_cycle,
            subscription.minutes_included_this_cycle,
            subscription.overage_cost_this_cycle,
            subscription.status,
        )["percentage_used"]

    async def _notify_threshold(self, db: AsyncSession, subscription: Subscription, previous_pct: int) -> None:
        before: dict[str, Any] = get_usage_threshold(previous_pct)
        after: dict[str, Any] = get_usage_threshold(self._percentage_used(subscription))
        if after["status"] == "safe" or after["status"] == before["status"]:
            return
        await notification_service.notify_admins(
            db,
            subscription.organization_id,
            "usage_threshold",
            after["message"],
            reference_type="subscription",
            reference_id=subscription.id,
        )

    async def check_usage_limit(self, db: AsyncSession, organization_id: UUID) -> UsageStatusResponse:
        """이번 주기 사용량 상태 — 구독이 없으면 통화 불가 상태."""
        subscription: Subscription | None = await subscription_repository.get_active(db, organization_id)
        if subscription is None:
            return UsageStatusResponse(**build_usage_status(0, 0, 0, "none"))
        return UsageStatusResponse(
            **build_usage_status(
                subscription.minutes_used_this_cycle,
                subscription.minutes_included_this_cycle,
                subscription.overage_cost_this_cycle,
                subscription.status,
            ),
            current_period_end=subscription.current_period_end,
        )

    async def usage_threshold(self, db: AsyncSession, organization_id: UUID) -> UsageThresholdResponse:
        status: UsageStatusResponse = await self.check_usage_limit(db, organization_id)
        return UsageThresholdResponse(
            **get_usage_threshold(status.percentage_used),
            percentage_used=status.percentage_used,
        )

    async def estimate_call_cost(
        self,
        db: AsyncSession,
        organization_id: UUID,
        duration_seconds: int,
    ) -> CallCostEstimateResponse:
        """통화 비용 추정.

        Raises:
            BadRequestError: 활성 구독이 없을 때 (No active subscription)
        """
        subscription: Subscription | None = await subscription_repository.get_active(db, organization_id)
        if subscription is None:
            raise BadRequestError("No active subscription")
        return CallCostEstimateResponse(**estimate_call_cost(
            duration_seconds,
            subscription.minutes_used_this_cycle,
            subscription.minutes_included_this_cycle,
            subscription.plan.overage_rate_per_minute,
        ))

    async def list_usage_records(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[UsageRecord]
        total: int
        items, total = await usage_record_repository.get_filtered(db, organization_id, campaign_id, page, per_page)
        return PaginatedResponse(
            items=[
                UsageRecordResponse(
                    id=str(r.id),
                    campaign_id=str(r.campaign_id) if r.campaign_id else None,
                    duration_in_seconds=r.duration_in_seconds,
                    minutes_used=r.minutes_used,
                    cost_in_cents=r.cost_in_cents,
                    was_overage=r.was_overage,
                    rate_per_minute=r.rate_per_minute,
                    created_at=r.created_at,
                )
                for r in items
            ],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def list_invoices(
        self,
        db: AsyncSession,
        organization_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[Invoice]
        total: int
        items, total = await invoice_repository.get_filtered(db, organization_id, page, per_page)
        return PaginatedResponse(
            items=[self._invoice_response(i) for i in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    # --- 청구 주기 (Billing cycle) ---

    async def _close_cycle(self, db: AsyncSession, subscription: Subscription, now: datetime) -> Invoice:
        """주기를 마감합니다 — 청구서를 만들고 다음 주기로 넘깁니다."""
        plan: BillingPlan = subscription.plan
        subscription_amount: int = plan.monthly_price
        usage_amount: int = subscription.overage_cost_this_cycle
        subtotal: int = subscription_amount + usage_amount

        invoice: Invoice = await invoice_repository.create(db, {
            "organization_id": subscription.organization_id,
            "subscription_id": subscription.id,
            "invoice_number": generate_invoice_number(subscription.organization_id, now),
            "subscription_amount": subscription_amount,
            "usage_amount": usage_amount,
            "subtotal": subtotal,
            "tax_amount": 0,
            "total_amount": subtotal,
            "minutes_included": subscription.minutes_included_this_cycle,
            "minutes_used": subscription.minutes_used_this_cycle,
            "overage_minutes": subscription.overage_minutes_this_cycle,
            "payment_provider": subscription.payment_provider,
            "status": "open",
            "period_start": subscription.current_period_start,
            "period_end": subscription.current_period_end,
            "due_date": now + INVOICE_DUE,
        })

        period_start: datetime = subscription.current_period_end
        subscription.current_period_start = period_start
        subscription.current_period_end = period_start + BILLING_PERIOD
        subscription.minutes_used_this_cycle = 0
        subscription.minutes_included_this_cycle = plan.included_minutes
        subscription.overage_minutes_this_cycle = 0
        subscription.overage_cost_this_cycle = 0
        await db.flush()
        return invoice

    async def process_billing_cycles(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> BillingCycleRunResponse:
        """주기가 끝난 구독을 마감합니다 (크론).

        For each active subscription whose period has ended, issue an open
        invoice (plan price plus overage, due in 14 days) and roll the
        subscription into the next 30-day period with zeroed counters.
        A failing subscription is rolled back on its own and counted.
        """
        started: float = time.monotonic()
        now = now or datetime.now(timezone.utc)
        processed = generated = errors = 0
        details: list[str] = []

        for subscription in await subscription_repository.get_due_for_renewal(db, now):
            processed += 1
            subscription_id: str = str(subscription.id)
            try:
                async with db.begin_nested():
                    invoice: Invoice = await self._close_cycle(db, subscription, now)
                generated += 1
                logger.info("billing_cycle_closed", subscription_id=subscription_id, invoice=invoice.invoice_number)
            except Exception as exc:
                errors += 1
                details.append(f"{subscription_id}: {exc}")
                logger.error("billing_cycle_failed", subscription_id=subscription_id, error=str(exc))

        logger.info(
            "billing_cycles_processed",
            processed=processed,
            invoices=generated,
            errors=errors,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return BillingCycleRunResponse(
            subscriptions_processed=processed,
            invoices_generated=generated,
            errors=errors,
            error_details=details,
        )


# 싱글턴 인스턴스 — Singleton instance
billing_service: BillingService = BillingService()
