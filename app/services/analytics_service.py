"""영업 분석 서비스 — 영업, 활동, 파이프라인 지표.

Analytics Service — Sales, activity and pipeline metrics.
The metric math lives in module-level functions that take plain model
lists so it can be reused and tested without a database; the service
class only loads rows and applies the sales_rep ownership scope.
"""

import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Activity, Deal, DealStage
from app.repositories.activity_repository import activity_repository
from app.repositories.contact_repository import contact_repository
from app.repositories.deal_repository import deal_repository, deal_stage_repository
from app.schemas.analytics import (
    ActivityMetricsResponse,
    DailyDealCount,
    PipelineMetricsResponse,
    SalesMetricsResponse,
    StageMetric,
)

DEALS_OVER_TIME_DAYS: int = 30


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def total_deal_value(deals: Iterable[Deal]) -> float:
    """딜 금액 합계 — Sum of deal values."""
    return float(sum((d.value or Decimal("0") for d in deals), Decimal("0")))


def deal_value_by_stage(deals: Iterable[Deal]) -> dict[str, float]:
    """단계별 딜 금액 합계 — Deal value per lowercased stage name."""
    totals: dict[str, Decimal] = {}
    for deal in deals:
        key: str = deal.stage.lower()
        totals[key] = totals.get(key, Decimal("0")) + (deal.value or Decimal("0"))
    return {stage: float(value) for stage, value in totals.items()}


def calculate_sales_metrics(deals: list[Deal], total_contacts: int) -> SalesMetricsResponse:
    """영업 지표를 계산합니다.

    Won and Lost are recognised by stage name, case-insensitively.
    Rates are 0 when their denominator is 0.
    """
    won: list[Deal] = [d for d in deals if d.stage.lower() == "won"]
    lost: list[Deal] = [d for d in deals if d.stage.lower() == "lost"]
    total_value: float = total_deal_value(deals)
    return SalesMetricsResponse(
        total_deals=len(deals),
        total_value=total_value,
        won_deals=len(won),
        lost_deals=len(lost),
        won_value=total_deal_value(won),
        average_deal_size=round(total_value / len(deals), 2) if deals else 0.0,
        win_rate=_pct(len(won), len(won) + len(lost)),
        total_contacts=total_contacts,
        conversion_rate=_pct(len(deals), total_contacts),
    )


def calculate_activity_metrics(
    activities: list[Activity],
    now: datetime | None = None,
) -> ActivityMetricsResponse:
    """활동 지표를 계산합니다 — overdue = 미완료이고 기한이 지난 활동."""
    now = now or datetime.now(timezone.utc)
    completed: int = sum(1 for a in activities if a.completed)
    overdue: int = sum(
        1 for a in activities
        if not a.completed and a.due_date is not None and _utc(a.due_date) < now
    )
    return ActivityMetricsResponse(
        total_activities=len(activities),
        completed_activities=completed,
        overdue_activities=overdue,
        completion_rate=_pct(completed, len(activities)),
        by_type=dict(Counter(a.type for a in activities)),
    )


def calculate_deal_velocity(deals: Iterable[Deal]) -> float:
    """평균 딜 속도 — Mean whole days from creation to actual close."""
    days: list[int] = [
        math.floor((_utc(d.actual_close_date) - _utc(d.created_at)).total_seconds() / 86400)
        for d in deals
        if d.actual_close_date is not None
    ]
    return round(sum(days) / len(days), 2) if days else 0.0


def calculate_pipeline_metrics(
    stages: list[DealStage],
    deals: list[Deal],
    now: datetime | None = None,
) -> PipelineMetricsResponse:
    """파이프라인 지표를 계산합니다.

    Per-stage aggregates follow the stage order. Deals created in the last
    30 days are counted per calendar date, ascending.
    """
    now = now or datetime.now(timezone.utc)
    by_stage: dict[str, list[Deal]] = {}
    for deal in deals:
        by_stage.setdefault(deal.stage.lower(), []).append(deal)

    stage_metrics: list[StageMetric] = []
    for stage in sorted(stages, key=lambda s: s.order):
        stage_deals: list[Deal] = by_stage.get(stage.name.lower(), [])
        stage_metrics.append(StageMetric(
            stage=stage.name,
            color=stage.color,
            count=len(stage_deals),
            value=total_deal_value(stage_deals),
        ))

    cutoff: datetime = now - timedelta(days=DEALS_OVER_TIME_DAYS)
    per_day: Counter = Counter(
        _utc(d.created_at).date().isoformat() for d in deals if _utc(d.created_at) >= cutoff
    )
    return PipelineMetricsResponse(
        stages=stage_metrics,
        deals_over_time=[DailyDealCount(date=day, count=per_day[day]) for day in sorted(per_day)],
        avg_deal_velocity=calculate_deal_velocity(deals),
        total_pipeline_value=total_deal_value(deals),
    )


class AnalyticsService:
    """영업 분석 지표를 조회하는 서비스."""

    async def get_sales_metrics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> SalesMetricsResponse:
        """영업 지표 — 기간 필터는 딜 생성일 기준 (Date range applies to deal created_at)."""
        deals: list[Deal] = await deal_repository.get_for_metrics(
            db, organization_id, owner_scope, start_date, end_date
        )
        contact_filters: dict[str, UUID] = {"owner_id": owner_scope} if owner_scope else {}
        total_contacts: int = await contact_repository.count(db, organization_id, contact_filters)
        return calculate_sales_metrics(deals, total_contacts)

    async def get_activity_metrics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
    ) -> ActivityMetricsResponse:
        activities: list[Activity] = await activity_repository.get_for_metrics(db, organization_id, owner_scope)
        return calculate_activity_metrics(activities)

    async def get_pipeline_metrics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
    ) -> PipelineMetricsResponse:
        stages: list[DealStage] = await deal_stage_repository.get_by_org(db, organization_id)
        deals: list[Deal] = await deal_repository.get_for_metrics(db, organization_id, owner_scope)
        return calculate_pipeline_metrics(stages, deals)


# 싱글턴 인스턴스 — Singleton instance
analytics_service: AnalyticsService = AnalyticsService()
