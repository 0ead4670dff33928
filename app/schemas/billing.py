"""과금 관련 Pydantic 요청/응답 스키마 정의.

Billing Pydantic request/response schema definitions.
All money amounts are integer cents.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class BillingPlanResponse(BaseModel):
    """요금제 응답 스키마."""

    id: str
    name: str
    slug: str
    description: str | None
    monthly_price: int  # 센트 (Cents)
    included_minutes: int
    overage_rate_per_minute: int  # 센트 (Cents)
    max_active_campaigns: int  # -1 = 무제한 (Unlimited)
    max_users: int  # -1 = 무제한 (Unlimited)
    features: list[str]


class SubscribeRequest(BaseModel):
    """구독 요청 스키마. 기존 활성 구독은 취소됩니다."""

    plan_slug: str
    payment_provider: Literal["stripe", "square", "paypal", "manual"] = "manual"


class SubscriptionResponse(BaseModel):
    """구독 응답 스키마."""

    id: str
    plan: BillingPlanResponse
    status: str
    payment_provider: str
    current_period_start: datetime
    current_period_end: datetime
    minutes_used_this_cycle: int
    minutes_included_this_cycle: int
    overage_minutes_this_cycle: int
    overage_cost_this_cycle: int
    cancel_at_period_end: bool


class UsageStatusResponse(BaseModel):
    """이번 주기 사용량 상태 응답 스키마.

    Attributes:
        minutes_used / minutes_included / minutes_remaining: 분 단위 사용량 (Minute counters)
        overage_minutes / overage_cost: 초과 사용량 (Overage usage and cost in cents)
        is_in_overage: 초과 구간 여부 (Whether usage exceeds the allowance)
        percentage_used: 사용률 0-100 (Capped at 100)
        can_make_calls: 통화 가능 여부 (Subscription is active)
    """

    minutes_used: int
    minutes_included: int
    minutes_remaining: int
    overage_minutes: int
    overage_cost: int
    is_in_overage: bool
    percentage_used: int
    can_make_calls: bool
    current_period_end: datetime | None = None


class UsageThresholdResponse(BaseModel):
    """사용량 임계치 응답 스키마."""

    threshold: int
    status: str  # safe | warning | critical | exceeded
    color: str  # green | yellow | orange | red
    message: str
    percentage_used: int


class CallCostEstimateResponse(BaseModel):
    """통화 비용 추정 응답 스키마."""

    minutes: int
    is_overage: bool
    overage_minutes: int
    estimated_cost: int  # 센트 (Cents)
    rate_per_minute: int
    remaining_included_minutes: int


class RecordUsageRequest(BaseModel):
    """통화 사용량 기록 요청 스키마."""

    campaign_id: UUID | None = None
    duration_seconds: int = Field(..., ge=0)


class RecordUsageResponse(BaseModel):
    """통화 사용량 기록 결과."""

    success: bool
    cost_in_cents: int
    minutes_used: int = 0
    was_overage: bool = False
    message: str | None = None


class UsageRecordResponse(BaseModel):
    id: str
    campaign_id: str | None
    duration_in_seconds: int
    minutes_used: int
    cost_in_cents: int
    was_overage: bool
    rate_per_minute: int
    created_at: datetime


class InvoiceResponse(BaseModel):
    """청구서 응답 스키마."""

    id: str
    invoice_number: str
    subscription_amount: int
    usage_amount: int
    subtotal: int
    tax_amount: int
    total_amount: int
    minutes_included: int
    minutes_used: int
    overage_minutes: int
    status: str  # draft | open | paid | void | uncollectible
    period_start: datetime
    period_end: datetime
    due_date: datetime | None
    paid_at: datetime | None
    created_at: datetime


class BillingCycleRunResponse(BaseModel):
    """과금 주기 갱신 크론 결과."""

    subscriptions_processed: int
    invoices_generated: int
    errors: int
    error_details: list[str]
