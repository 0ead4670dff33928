"""과금 레포지토리 — 요금제, 구독, 사용 기록, 청구서 쿼리.

Billing Repository — Plan, subscription, usage record and invoice queries.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.billing import BillingPlan, Invoice, Subscription, UsageRecord
from app.repositories.base import BaseRepository


class BillingPlanRepository(BaseRepository[BillingPlan]):
    """요금제 레포지토리."""

    def __init__(self) -> None:
        super().__init__(BillingPlan)

    async def get_active(self, db: AsyncSession) -> list[BillingPlan]:
        result = await db.execute(
            select(BillingPlan)
            .where(BillingPlan.is_active.is_(True))
            .order_by(BillingPlan.display_order)
        )
        return list(result.scalars().all())

    async def get_by_slug(self, db: AsyncSession, slug: str) -> BillingPlan | None:
        result = await db.execute(select(BillingPlan).where(BillingPlan.slug == slug))
        return result.scalar_one_or_none()


class SubscriptionRepository(BaseRepository[Subscription]):
    """구독 레포지토리.

    Subscription repository. The plan is always loaded with the
    subscription since every billing computation needs its rates.
    """

    def __init__(self) -> None:
        super().__init__(Subscription)

    async def get_active(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> Subscription | None:
        """조직의 활성 구독을 조회합니다.

        Retrieve the organization's active subscription with its plan.
        """
        result = await db.execute(
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(
                Subscription.organization_id == organization_id,
                Subscription.status == "active",
            )
            .order_by(Subscription.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_due_for_renewal(
        self,
        db: AsyncSession,
        now: datetime,
    ) -> list[Subscription]:
        """주기가 끝난 활성 구독 목록 — Active subscriptions whose period has ended."""
        result = await db.execute(
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(
                Subscription.status == "active",
                Subscription.current_period_end <= now,
            )
            .order_by(Subscription.current_period_end)
        )
        return list(result.scalars().all())


class UsageRecordRepository(BaseRepository[UsageRecord]):
    """사용 기록 레포지토리."""

    def __init__(self) -> None:
        super().__init__(UsageRecord)

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[UsageRecord], int]:
        query: Select = select(UsageRecord).where(UsageRecord.organization_id == organization_id)
        if campaign_id is not None:
            query = query.where(UsageRecord.campaign_id == campaign_id)
        query = query.order_by(UsageRecord.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)


class InvoiceRepository(BaseRepository[Invoice]):
    """청구서 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Invoice)

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Invoice], int]:
        query: Select = (
            select(Invoice)
            .where(Invoice.organization_id == organization_id)
            .order_by(Invoice.created_at.desc())
        )
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instances
billing_plan_repository: BillingPlanRepository = BillingPlanRepository()
subscription_repository: SubscriptionRepository = SubscriptionRepository()
usage_record_repository: UsageRecordRepository = UsageRecordRepository()
invoice_repository: InvoiceRepository = InvoiceRepository()
