"""음성 캠페인 라우터 — 캠페인 CRUD, 상태 전이, 일괄 작업, 통화 기록.

Voice Campaigns Router — AI voice campaigns attached to projects: CRUD,
launch / pause / resume, duplication, bulk operations, call recording and
per-project analytics. Managed by admins and managers.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.common import BulkResultResponse
from app.schemas.voice_campaign import (
    BulkCampaignRequest,
    CampaignAnalyticsResponse,
    RecordCallRequest,
    VoiceCampaignCreate,
    VoiceCampaignResponse,
    VoiceCampaignUpdate,
)
from app.services.voice_campaign_service import voice_campaign_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[VoiceCampaignResponse])
async def list_campaigns(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    project_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
) -> list[VoiceCampaignResponse]:
    return await voice_campaign_service.list_campaigns(db, current_user.organization_id, project_id, status)


@router.post("", response_model=VoiceCampaignResponse, status_code=201)
async def create_campaign(
    data: VoiceCampaignCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    """캠페인을 생성합니다 (draft 상태).

    Create a draft campaign. Billable campaigns need an active
    subscription with room under the plan's campaign limit.

    Args:
        data: 캠페인 생성 데이터 (Campaign creation data)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 매니저 이상 사용자 (Authenticated manager+ user)

    Returns:
        VoiceCampaignResponse: 생성된 캠페인 (Created campaign)
    """
    result: VoiceCampaignResponse = await voice_campaign_service.create_campaign(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.get("/analytics", response_model=CampaignAnalyticsResponse)
async def get_campaign_analytics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    project_id: Annotated[UUID, Query()],
) -> CampaignAnalyticsResponse:
    """프로젝트별 캠페인 통계 — Aggregated metrics for one project."""
    return await voice_campaign_service.get_campaign_analytics(db, current_user.organization_id, project_id)


# === 일괄 작업 (Bulk operations) ===

@router.post("/bulk/pause", response_model=BulkResultResponse)
async def bulk_pause(
    data: BulkCampaignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> BulkResultResponse:
    result: BulkResultResponse = await voice_campaign_service.bulk_pause(
        db, current_user.organization_id, data.campaign_ids
    )
    await db.commit()
    return result


@router.post("/bulk/resume", response_model=BulkResultResponse)
async def bulk_resume(
    data: BulkCampaignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> BulkResultResponse:
    result: BulkResultResponse = await voice_campaign_service.bulk_resume(
        db, current_user.organization_id, data.campaign_ids
    )
    await db.commit()
    return result


@router.post("/bulk/delete", response_model=BulkResultResponse)
async def bulk_delete(
    data: BulkCampaignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> BulkResultResponse:
    """일괄 삭제 — 실패한 항목은 건너뛰고 집계합니다."""
    result: BulkResultResponse = await voice_campaign_service.bulk_delete(
        db, current_user.organization_id, data.campaign_ids
    )
    await db.commit()
    return result


# === 단건 (Single campaign) ===

@router.get("/{campaign_id}", response_model=VoiceCampaignResponse)
async def get_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    return await voice_campaign_service.get_campaign(db, current_user.organization_id, campaign_id)


@router.patch("/{campaign_id}", response_model=VoiceCampaignResponse)
async def update_campaign(
    campaign_id: UUID,
    data: VoiceCampaignUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    result: VoiceCampaignResponse = await voice_campaign_service.update_campaign(
        db, current_user.organization_id, campaign_id, data
    )
    await db.commit()
    return result


@router.delete("/{campaign_id}", status_code=204)
async def delete_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> None:
    await voice_campaign_service.delete_campaign(db, current_user.organization_id, campaign_id)
    await db.commit()


@router.post("/{campaign_id}/launch", response_model=VoiceCampaignResponse)
async def launch_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    """캠페인 시작 — draft/pending 상태에서만 가능."""
    result: VoiceCampaignResponse = await voice_campaign_service.launch_campaign(
        db, current_user.organization_id, campaign_id
    )
    await db.commit()
    return result


@router.post("/{campaign_id}/pause", response_model=VoiceCampaignResponse)
async def pause_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    result: VoiceCampaignResponse = await voice_campaign_service.pause_campaign(
        db, current_user.organization_id, campaign_id
    )
    await db.commit()
    return result


@router.post("/{campaign_id}/resume", response_model=VoiceCampaignResponse)
async def resume_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    result: VoiceCampaignResponse = await voice_campaign_service.resume_campaign(
        db, current_user.organization_id, campaign_id
    )
    await db.commit()
    return result


@router.post("/{campaign_id}/duplicate", response_model=VoiceCampaignResponse, status_code=201)
async def duplicate_campaign(
    campaign_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    result: VoiceCampaignResponse = await voice_campaign_service.duplicate_campaign(
        db, current_user.organization_id, campaign_id, current_user.id
    )
    await db.commit()
    return result


@router.post("/{campaign_id}/calls", response_model=VoiceCampaignResponse)
async def record_call(
    campaign_id: UUID,
    data: RecordCallRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VoiceCampaignResponse:
    """통화 결과 기록.

    Record one call: counters and running averages on the campaign, plus
    minute usage on the organization's subscription.
    """
    result: VoiceCampaignResponse = await voice_campaign_service.record_call(
        db, current_user.organization_id, campaign_id, data
    )
    await db.commit()
    return result
