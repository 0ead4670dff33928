"""딜 레포지토리 — 딜 및 파이프라인 단계 쿼리.

Deal Repository — Deal and pipeline stage queries.
Also provides the aggregate queries used by analytics.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Deal, DealStage
from app.repositories.base import BaseRepository


class DealStageRepository(BaseRepository[DealStage]):
    """파이프라인 단계 레포지토리."""

    def __init__(self) -> None:
        super().__init__(DealStage)

    async def get_by_org(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> list[DealStage]:
        """조직의 파이프라인 단계를 순서대로 조회합니다.

        Retrieve the organization's stages in pipeline order.
        """
        result = await db.execute(
            select(DealStage)
            .where(DealStage.organization_id == organization_id)
            .order_by(DealStage.order, DealStage.name)
        )
        return list(result.scalars().all())

    async def get_by_name(
        self,
        db: AsyncSession,
        organization_id: UUID,
        name: str,
    ) -> DealStage | None:
        """단계 이름으로 조회합니다 (대소문자 무시).

        Retrieve a stage by name, case-insensitively.
        """
        result = await db.execute(
            select(DealStage).where(
                DealStage.organization_id == organization_id,
                func.lower(DealStage.name) == name.strip().lower(),
            )
        )
        return result.scalar_one_or_none()


class DealRepository(BaseRepository[Deal]):
    """딜 레포지토리.

    Deal repository with owner-scoped listing and date-ranged fetches
    for analytics.

    Extends:
        BaseRepository[Deal]
    """

    def __init__(self) -> None:
        super().__init__(Deal)

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_id: UUID | None = None,
        stage: str | None = None,
        contact_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Deal], int]:
        """필터 조건으로 딜 목록을 페이지네이션하여 조회합니다.

        Retrieve a paginated deal list filtered by owner, stage and contact.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            owner_id: 담당자 필터 (Owner filter for sales_rep scoping)
            stage: 단계 이름 필터, 대소문자 무시 (Stage name filter, case-insensitive)
            contact_id: 연락처 필터 (Contact filter)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Deal], int]: (딜 목록, 전체 개수)
        """
        query: Select = select(Deal).where(Deal.organization_id == organization_id)
        if owner_id is not None:
            query = query.where(Deal.owner_id == owner_id)
        if stage is not None:
            query = query.where(func.lower(Deal.stage) == stage.lower())
        if contact_id is not None:
            query = query.where(Deal.contact_id == contact_id)
        query = query.order_by(Deal.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_for_metrics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_id: UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[Deal]:
        """분석용 딜 목록을 조회합니다.

        Retrieve deals for analytics, filtered on created_at.
        """
        query: Select = select(Deal).where(Deal.organization_id == organization_id)
        if owner_id is not None:
            query = query.where(Deal.owner_id == owner_id)
        if start_date is not None:
            query = query.where(Deal.created_at >= start_date)
        if end_date is not None:
            query = query.where(Deal.created_at <= end_date)
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instances
deal_stage_repository: DealStageRepository = DealStageRepository()
deal_repository: DealRepository = DealRepository()
