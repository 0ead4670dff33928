"""음성 캠페인 서비스 — 캠페인 관리, 상태 전환, 통화 기록, 분석.

Voice Campaign Service — CRUD and lifecycle (launch, pause, resume,
duplicate) of voice campaigns, call result recording with billing usage,
and per-project campaign analytics. Billable campaigns are subject to the
subscription plan's active-campaign limit.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.billing import UNLIMITED, BillingPlan
from app.models.voice_campaign import VoiceCampaign
from app.repositories.voice_campaign_repository import voice_campaign_repository
from app.schemas.billing import RecordUsageResponse
from app.schemas.common import BulkResultResponse
from app.schemas.voice_campaign import (
    CampaignAnalyticsResponse,
    RecordCallRequest,
    VoiceCampaignCreate,
    VoiceCampaignResponse,
    VoiceCampaignUpdate,
)
from app.services.billing_service import billing_service
from app.services.project_service import project_service
from app.utils.exceptions import BadRequestError, NotFoundError

logger = structlog.get_logger(__name__)

LAUNCHABLE_STATUSES: tuple[str, ...] = ("draft", "pending")

# 복제 시 복사하는 설정 필드 — Configuration copied by duplicate
COPIED_FIELDS: tuple[str, ...] = (
    "project_id", "organization_id", "description", "campaign_type", "billing_type",
    "provider", "setup_answers", "schedule_config", "campaign_goal", "agent_personality",
    "system_prompt", "first_message", "voicemail_message",
)


def running_average(current: float | None, count: int, value: float) -> float:
    """누적 평균 갱신 — ``count`` is the number of samples including ``value``."""
    if count <= 1 or current is None:
        return float(value)
    return (current * (count - 1) + value) / count


def summarize_campaigns(campaigns: list[VoiceCampaign]) -> dict[str, Any]:
    """캠페인 목록의 집계 지표를 계산합니다.

    Averages are weighted by each campaign's call count; quality is the
    mean over campaigns that have a quality score.
    """
    total_calls: int = sum(c.total_calls for c in campaigns)
    completed: int = sum(c.completed_calls for c in campaigns)
    duration_sum: float = sum(c.average_call_duration * c.total_calls for c in campaigns)
    qualities: list[float] = [c.average_call_quality for c in campaigns if c.average_call_quality is not None]
    return {
        "total_campaigns": len(campaigns),
        "active_campaigns": sum(1 for c in campaigns if c.status == "active"),
        "total_calls": total_calls,
        "completed_calls": completed,
        "success_rate": round(completed / total_calls * 100) if total_calls else 0,
        "avg_call_duration": round(duration_sum / total_calls, 1) if total_calls else 0.0,
        "avg_call_quality": round(sum(qualities) / len(qualities), 1) if qualities else 0.0,
        "total_cost": sum(c.total_cost for c in campaigns),
        "provider_distribution": dict(Counter(c.provider for c in campaigns)),
    }


class VoiceCampaignService:
    """음성 캠페인 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, campaign: VoiceCampaign) -> VoiceCampaignResponse:
        return VoiceCampaignResponse(
            id=str(campaign.id),
            project_id=str(campaign.project_id),
            name=campaign.name,
            description=campaign.description,
            campaign_type=campaign.campaign_type,
            status=campaign.status,
            billing_type=campaign.billing_type,
            provider=campaign.provider,
            phone_number=campaign.phone_number,
            campaign_goal=campaign.campaign_goal,
            total_calls=campaign.total_calls,
            completed_calls=campaign.completed_calls,
            failed_calls=campaign.failed_calls,
            average_call_duration=campaign.average_call_duration,
            average_call_quality=campaign.average_call_quality,
            total_cost=campaign.total_cost,
            is_active=campaign.is_active,
            last_call_at=campaign.last_call_at,
            created_at=campaign.created_at,
        )

    async def _get(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> VoiceCampaign:
        campaign: VoiceCampaign | None = await voice_campaign_repository.get_by_id(db, campaign_id, organization_id)
        if campaign is None:
            raise NotFoundError("Voice campaign not found")
        return campaign

    async def _ensure_campaign_capacity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        exclude_id: UUID | None = None,
    ) -> None:
        """요금제의 활성 캠페인 한도를 확인합니다.

        Raises:
            BadRequestError: 활성 구독이 없거나 한도에 도달 (No subscription or limit reached)
        """
        plan: BillingPlan | None = await billing_service.get_active_plan(db, organization_id)
        if plan is None:
            raise BadRequestError("No active subscription. Subscribe to a plan to run campaigns")
        if plan.max_active_campaigns == UNLIMITED:
            return
        active: int = await voice_campaign_repository.count_active(db, organization_id, exclude_id)
        if active >= plan.max_active_campaigns:
            raise BadRequestError(
                f"Campaign limit reached ({plan.max_active_campaigns} active campaigns). Upgrade your plan"
            )

    async def create_campaign(
        self,
        db: AsyncSession,
        organization_id: UUID,
        created_by: UUID,
        data: VoiceCampaignCreate,
    ) -> VoiceCampaignResponse:
        """캠페인을 생성합니다 (draft).

        Billable campaigns need an active subscription whose plan still has
        room for another active campaign; ``admin_free`` campaigns skip the
        check.

        Raises:
            NotFoundError: 프로젝트를 찾을 수 없을 때 (Project not found)
            BadRequestError: 구독 없음 또는 캠페인 한도 (No subscription / limit)
        """
        try:
            project_id: UUID = UUID(data.project_id)
        except ValueError:
            raise BadRequestError("Invalid project_id")
        await project_service.get_project_model(db, organization_id, project_id)
        if data.billing_type == "billable":
            await self._ensure_campaign_capacity(db, organization_id)

        values: dict[str, Any] = data.model_dump()
        values.update({
            "project_id": project_id,
            "organization_id": organization_id,
            "status": "draft",
            "is_active": False,
            "created_by": created_by,
        })
        campaign: VoiceCampaign = await voice_campaign_repository.create(db, values)
        logger.info("voice_campaign_created", campaign_id=str(campaign.id), project_id=str(project_id))
        return self._to_response(campaign)

    async def list_campaigns(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID | None = None,
        status: str | None = None,
    ) -> list[VoiceCampaignResponse]:
        campaigns: list[VoiceCampaign] = await voice_campaign_repository.get_by_project(
            db, organization_id, project_id, status
        )
        return [self._to_response(c) for c in campaigns]

    async def get_campaign(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> VoiceCampaignResponse:
        return self._to_response(await self._get(db, organization_id, campaign_id))

    async def update_campaign(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID,
        data: VoiceCampaignUpdate,
    ) -> VoiceCampaignResponse:
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(campaign, field, value)
        await db.flush()
        return self._to_response(campaign)

    async def delete_campaign(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> None:
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        await db.delete(campaign)
        await db.flush()
        logger.info("voice_campaign_deleted", campaign_id=str(campaign_id))

    # --- 상태 전환 (Lifecycle) ---

    async def launch_campaign(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> VoiceCampaignResponse:
        """캠페인을 시작합니다 — draft/pending → active.

        Raises:
            BadRequestError: 시작할 수 없는 상태이거나 캠페인 한도 초과
        """
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        if campaign.status not in LAUNCHABLE_STATUSES:
            raise BadRequestError(f"Cannot launch a campaign in status '{campaign.status}'")
        if campaign.billing_type == "billable":
            await self._ensure_campaign_capacity(db, organization_id, exclude_id=campaign.id)
        campaign.status = "active"
        campaign.is_active = True
        await db.flush()
        logger.info("voice_campaign_launched", campaign_id=str(campaign.id))
        return self._to_response(campaign)

    async def pause_campaign(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> VoiceCampaignResponse:
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        campaign.status = "paused"
        campaign.is_active = False
        await db.flush()
        return self._to_response(campaign)

    async def resume_campaign(self, db: AsyncSession, organization_id: UUID, campaign_id: UUID) -> VoiceCampaignResponse:
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        campaign.status = "active"
        campaign.is_active = True
        await db.flush()
        return self._to_response(campaign)

    async def duplicate_campaign(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID,
        created_by: UUID,
    ) -> VoiceCampaignResponse:
        """캠페인을 복제합니다 — 설정만 복사, 상태는 draft, 통계 초기화."""
        source: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        values: dict[str, Any] = {field: getattr(source, field) for field in COPIED_FIELDS}
        values.update({
            "name": f"{source.name} (Copy)",
            "status": "draft",
            "is_active": False,
            "created_by": created_by,
        })
        copy: VoiceCampaign = await voice_campaign_repository.create(db, values)
        return self._to_response(copy)

    async def _bulk(
        self,
        db: AsyncSession,
        campaign_ids: list[str],
        action: Callable[[UUID], Awaitable[Any]],
        label: str,
    ) -> BulkResultResponse:
        """일괄 작업 — 캠페인마다 savepoint, 실패는 건너뛰고 집계."""
        successful = failed = 0
        for raw_id in campaign_ids:
            try:
                async with db.begin_nested():
                    await action(UUID(raw_id))
                successful += 1
            except Exception as exc:
                failed += 1
                logger.warning("voice_campaign_bulk_failed", action=label, campaign_id=raw_id, error=str(exc))
        return BulkResultResponse(successful=successful, failed=failed)

    async def bulk_pause(self, db: AsyncSession, organization_id: UUID, campaign_ids: list[str]) -> BulkResultResponse:
        return await self._bulk(db, campaign_ids, lambda cid: self.pause_campaign(db, organization_id, cid), "pause")

    async def bulk_resume(self, db: AsyncSession, organization_id: UUID, campaign_ids: list[str]) -> BulkResultResponse:
        return await self._bulk(db, campaign_ids, lambda cid: self.resume_campaign(db, organization_id, cid), "resume")

    async def bulk_delete(self, db: AsyncSession, organization_id: UUID, campaign_ids: list[str]) -> BulkResultResponse:
        return await self._bulk(db, campaign_ids, lambda cid: self.delete_campaign(db, organization_id, cid), "delete")

    # --- 통화 기록 / 분석 (Calls and analytics) ---

    async def record_call(
        self,
        db: AsyncSession,
        organization_id: UUID,
        campaign_id: UUID,
        data: RecordCallRequest,
    ) -> VoiceCampaignResponse:
        """통화 결과를 기록합니다.

        Bump the call counters, fold the duration and quality into the
        running averages, meter the minutes against the subscription and
        add the metered cost to the campaign's total.
        """
        campaign: VoiceCampaign = await self._get(db, organization_id, campaign_id)
        campaign.total_calls += 1
        if data.success:
            campaign.completed_calls += 1
        else:
            campaign.failed_calls += 1
        campaign.average_call_duration = running_average(
            campaign.average_call_duration, campaign.total_calls, data.duration_seconds
        )
        if data.quality is not None:
            campaign.rated_calls += 1
            campaign.average_call_quality = running_average(
                campaign.average_call_quality, campaign.rated_calls, data.quality
            )
        campaign.last_call_at = datetime.now(timezone.utc)
        await db.flush()

        usage: RecordUsageResponse = await billing_service.record_call_usage(
            db, organization_id, campaign.id, data.duration_seconds
        )
        if usage.success:
            campaign.total_cost += usage.cost_in_cents
            await db.flush()
        return self._to_response(campaign)

    async def get_campaign_analytics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
    ) -> CampaignAnalyticsResponse:
        await project_service.get_project_model(db, organization_id, project_id)
        campaigns: list[VoiceCampaign] = await voice_campaign_repository.get_by_project(db, organization_id, project_id)
        return CampaignAnalyticsResponse(**summarize_campaigns(campaigns))


# 싱글턴 인스턴스 — Singleton instance
voice_campaign_service: VoiceCampaignService = VoiceCampaignService()
