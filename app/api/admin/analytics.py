"""분석 라우터 — 매출, 활동, 파이프라인 지표.

Analytics Router — Sales, activity and pipeline metrics, scoped to the
caller's own records for sales reps.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import owner_scope, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.analytics import ActivityMetricsResponse, PipelineMetricsResponse, SalesMetricsResponse
from app.services.analytics_service import analytics_service

router: APIRouter = APIRouter()


@router.get("/sales", response_model=SalesMetricsResponse)
async def get_sales_metrics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    start_date: Annotated[datetime | None, Query()] = None,
    end_date: Annotated[datetime | None, Query()] = None,
) -> SalesMetricsResponse:
    """매출 지표를 조회합니다.

    Sales metrics over deals created within the optional date range.

    Args:
        start_date: 시작일 (Inclusive lower bound on created_at)
        end_date: 종료일 (Inclusive upper bound on created_at)

    Returns:
        SalesMetricsResponse: 딜 수, 파이프라인 금액, 승률 등
    """
    return await analytics_service.get_sales_metrics(
        db, current_user.organization_id, owner_scope(current_user), start_date, end_date
    )


@router.get("/activities", response_model=ActivityMetricsResponse)
async def get_activity_metrics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ActivityMetricsResponse:
    return await analytics_service.get_activity_metrics(
        db, current_user.organization_id, owner_scope(current_user)
    )


@router.get("/pipeline", response_model=PipelineMetricsResponse)
async def get_pipeline_metrics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> PipelineMetricsResponse:
    return await analytics_service.get_pipeline_metrics(
        db, current_user.organization_id, owner_scope(current_user)
    )
