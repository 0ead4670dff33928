"""음성 캠페인 레포지토리.

Voice Campaign Repository — Project-scoped listing and the active-campaign
count used for plan limit checks.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.voice_campaign import VoiceCampaign
from app.repositories.base import BaseRepository


class VoiceCampaignRepository(BaseRepository[VoiceCampaign]):
    """음성 캠페인 레포지토리.

    Extends:
        BaseRepository[VoiceCampaign]
    """

    def __init__(self) -> None:
        super().__init__(VoiceCampaign)

    async def get_by_project(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID | None = None,
        status: str | None = None,
    ) -> list[VoiceCampaign]:
        """프로젝트의 캠페인 목록을 최신순으로 조회합니다.

        Retrieve campaigns of the organization, optionally for one project.
        """
        query: Select = select(VoiceCampaign).where(VoiceCampaign.organization_id == organization_id)
        if project_id is not None:
            query = query.where(VoiceCampaign.project_id == project_id)
        if status is not None:
            query = query.where(VoiceCampaign.status == status)
        result = await db.execute(query.order_by(VoiceCampaign.created_at.desc()))
        return list(result.scalars().all())

    async def count_active(
        self,
        db: AsyncSession,
        organization_id: UUID,
        exclude_id: UUID | None = None,
    ) -> int:
        """조직의 활성 캠페인 수를 반환합니다.

        Count active campaigns of an organization (plan limit check).
        """
        query: Select = (
            select(func.count())
            .select_from(VoiceCampaign)
            .where(
                VoiceCampaign.organization_id == organization_id,
                VoiceCampaign.status == "active",
            )
        )
        if exclude_id is not None:
            query = query.where(VoiceCampaign.id != exclude_id)
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
voice_campaign_repository: VoiceCampaignRepository = VoiceCampaignRepository()
