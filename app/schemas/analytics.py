"""영업 분석 응답 스키마 정의.

Sales analytics response schema definitions.
"""

from pydantic import BaseModel


class SalesMetricsResponse(BaseModel):
    """영업 지표 응답 스키마.

    Attributes:
        total_deals: 전체 딜 수 (All deals in range)
        total_value: 전체 딜 금액 (Sum of deal values)
        won_deals / lost_deals: 성사/실패 딜 수 (Deals in Won/Lost stage)
        won_value: 성사 금액 (Sum of won deal values)
        average_deal_size: 평균 딜 금액 (total_value / total_deals)
        win_rate: 성사율 % (won / (won + lost) * 100)
        total_contacts: 연락처 수 (Contacts in scope)
        conversion_rate: 전환율 % (total_deals / total_contacts * 100)
    """

    total_deals: int
    total_value: float
    won_deals: int
    lost_deals: int
    won_value: float
    average_deal_size: float
    win_rate: float
    total_contacts: int
    conversion_rate: float


class ActivityMetricsResponse(BaseModel):
    """활동 지표 응답 스키마."""

    total_activities: int
    completed_activities: int
    overdue_activities: int
    completion_rate: float
    by_type: dict[str, int]  # 유형별 건수 (Count per activity type)


class StageMetric(BaseModel):
    """단계별 집계 — Per-stage count and value."""

    stage: str
    color: str
    count: int
    value: float


class DailyDealCount(BaseModel):
    """일자별 생성 딜 수 — Deals created per day."""

    date: str  # YYYY-MM-DD
    count: int


class PipelineMetricsResponse(BaseModel):
    """파이프라인 지표 응답 스키마.

    Attributes:
        stages: 단계 순서대로의 집계 (Per-stage aggregates in pipeline order)
        deals_over_time: 최근 30일 일자별 생성 수 (Deals created per day, ascending)
        avg_deal_velocity: 평균 종료 소요 일수 (Mean whole days from creation to close)
    """

    stages: list[StageMetric]
    deals_over_time: list[DailyDealCount]
    avg_deal_velocity: float
    total_pipeline_value: float
