"""과금 관련 SQLAlchemy ORM 모델 정의.

Billing SQLAlchemy ORM model definitions for voice-minute metering.
All money amounts are integer cents.

Tables:
    - billing_plans: 요금제 (Plan catalog)
    - subscriptions: 조직 구독 (Organization subscriptions with cycle counters)
    - usage_records: 통화 사용 기록 (Per-call usage rows)
    - invoices: 청구서 (Invoices generated at cycle end)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 무제한 표시값 — Sentinel for unlimited campaigns/users
UNLIMITED: int = -1

# 기본 요금제 — (name, slug, monthly_price, included_minutes, overage_rate, max_active_campaigns, max_users)
DEFAULT_PLANS: list[tuple[str, str, int, int, int, int, int]] = [
    ("Free", "free", 0, 100, 15, 1, 2),
    ("Starter", "starter", 9900, 1000, 10, 5, 5),
    ("Professional", "professional", 29900, 5000, 8, UNLIMITED, 15),
    ("Enterprise", "enterprise", 99900, 20000, 6, UNLIMITED, UNLIMITED),
]

SUBSCRIPTION_STATUSES: tuple[str, ...] = ("active", "past_due", "canceled", "trialing", "paused")
INVOICE_STATUSES: tuple[str, ...] = ("draft", "open", "paid", "void", "uncollectible")


class BillingPlan(Base):
    """요금제 모델.

    Billing plan model.

    Attributes:
        name / slug: 이름, 고유 슬러그 (Display name, unique slug)
        monthly_price: 월 요금 센트 (Monthly price in cents)
        included_minutes: 포함 통화 분 (Minutes included per cycle)
        overage_rate_per_minute: 초과 분당 요금 센트 (Overage rate in cents)
        max_active_campaigns: 최대 활성 캠페인 수 (-1 = unlimited)
        max_users: 최대 사용자 수 (-1 = unlimited)
        features: 기능 목록 (Feature bullet list)
    """

    __tablename__ = "billing_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    monthly_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    included_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overage_rate_per_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_active_campaigns: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    features: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class Subscription(Base):
    """구독 모델 — 조직의 현재 요금제와 이번 주기 사용량.

    Organization subscription with the running counters of the current
    30-day cycle.
    """

    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("billing_plans.id"), nullable=False)
    # 결제 제공자 — stripe | square | paypal | manual
    payment_provider: Mapped[str] = mapped_column(String(20), nullable=False, default="manual")
    external_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    current_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    # 이번 주기 사용량 — Current cycle counters
    minutes_used_this_cycle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minutes_included_this_cycle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overage_minutes_this_cycle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overage_cost_this_cycle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, default=False)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    plan = relationship("BillingPlan")


class UsageRecord(Base):
    """통화 사용 기록 모델."""

    __tablename__ = "usage_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False)
    campaign_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("voice_campaigns.id", ondelete="SET NULL"), nullable=True)
    duration_in_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    minutes_used: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_in_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    was_overage: Mapped[bool] = mapped_column(Boolean, default=False)
    rate_per_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    billing_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    billing_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Invoice(Base):
    """청구서 모델.

    Invoice generated when a billing cycle closes.
    invoice_number format: INV-{epoch_ms}-{organization_id[:8]}
    """

    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False)
    invoice_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    subscription_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    usage_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minutes_included: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minutes_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overage_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_provider: Mapped[str] = mapped_column(String(20), nullable=False, default="manual")
    # 상태 — draft | open | paid | void | uncollectible
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
