"""과금 라우터 — 요금제, 구독, 사용량, 청구서.

Billing Router — Plans, the organization's subscription, voice minute
usage and invoices. Money amounts are integer cents.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin, require_manager, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.billing import (
    BillingPlanResponse,
    CallCostEstimateResponse,
    RecordUsageRequest,
    RecordUsageResponse,
    SubscribeRequest,
    SubscriptionResponse,
    UsageStatusResponse,
    UsageThresholdResponse,
)
from app.schemas.common import MessageResponse, PaginatedResponse
from app.services.billing_service import billing_service

router: APIRouter = APIRouter()


# === 요금제 (Plans) ===

@router.get("/plans", response_model=list[BillingPlanResponse])
async def list_plans(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> list[BillingPlanResponse]:
    return await billing_service.list_plans(db)


@router.post("/plans/seed", response_model=MessageResponse)
async def seed_default_plans(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MessageResponse:
    """기본 요금제 등록 — 이미 있는 slug는 건너뜁니다 (Idempotent)."""
    created: int = await billing_service.seed_default_plans(db)
    await db.commit()
    return MessageResponse(message=f"{created} plans created")


# === 구독 (Subscription) ===

@router.get("/subscription", response_model=SubscriptionResponse | None)
async def get_subscription(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SubscriptionResponse | None:
    """활성 구독 조회 — 없으면 null (null when not subscribed)."""
    return await billing_service.get_subscription(db, current_user.organization_id)


@router.post("/subscription", response_model=SubscriptionResponse, status_code=201)
async def subscribe(
    data: SubscribeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> SubscriptionResponse:
    """요금제를 구독합니다.

    Subscribe the organization to a plan. Any active subscription is
    cancelled first and a new 30-day cycle starts now.

    Args:
        data: 요금제 slug 및 결제 수단 (Plan slug and payment provider)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 관리자 (Authenticated admin)

    Returns:
        SubscriptionResponse: 새 구독 (The new subscription)
    """
    result: SubscriptionResponse = await billing_service.subscribe(db, current_user.organization_id, data)
    await db.commit()
    return result


# === 사용량 (Usage) ===

@router.get("/usage", response_model=UsageStatusResponse)
async def check_usage_limit(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> UsageStatusResponse:
    return await billing_service.check_usage_limit(db, current_user.organization_id)


@router.get("/usage/threshold", response_model=UsageThresholdResponse)
async def usage_threshold(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> UsageThresholdResponse:
    return await billing_service.usage_threshold(db, current_user.organization_id)


@router.get("/usage/estimate", response_model=CallCostEstimateResponse)
async def estimate_call_cost(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    duration_seconds: Annotated[int, Query(ge=0)],
) -> CallCostEstimateResponse:
    """통화 비용 추정 — 현재 주기의 잔여 포함 분 기준."""
    return await billing_service.estimate_call_cost(db, current_user.organization_id, duration_seconds)


@router.post("/usage", response_model=RecordUsageResponse)
async def record_call_usage(
    data: RecordUsageRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> RecordUsageResponse:
    result: RecordUsageResponse = await billing_service.record_call_usage(
        db, current_user.organization_id, data.campaign_id, data.duration_seconds
    )
    await db.commit()
    return result


@router.get("/usage/records", response_model=PaginatedResponse)
async def list_usage_records(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    campaign_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await billing_service.list_usage_records(
        db, current_user.organization_id, campaign_id, page, per_page
    )


# === 청구서 (Invoices) ===

@router.get("/invoices", response_model=PaginatedResponse)
async def list_invoices(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await billing_service.list_invoices(db, current_user.organization_id, page, per_page)
