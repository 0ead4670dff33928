"""활동 레포지토리 — 영업 활동 목록 쿼리.

Activity Repository — Filtered activity listing.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Activity
from app.repositories.base import BaseRepository


class ActivityRepository(BaseRepository[Activity]):
    """활동 레포지토리.

    Extends:
        BaseRepository[Activity]
    """

    def __init__(self) -> None:
        super().__init__(Activity)

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID | None = None,
        contact_id: UUID | None = None,
        deal_id: UUID | None = None,
        completed: bool | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Activity], int]:
        """필터 조건으로 활동 목록을 페이지네이션하여 조회합니다.

        Retrieve a paginated activity list. Open activities with the nearest
        due date come first.
        """
        query: Select = select(Activity).where(Activity.organization_id == organization_id)
        if user_id is not None:
            query = query.where(Activity.user_id == user_id)
        if contact_id is not None:
            query = query.where(Activity.contact_id == contact_id)
        if deal_id is not None:
            query = query.where(Activity.deal_id == deal_id)
        if completed is not None:
            query = query.where(Activity.completed == completed)
        query = query.order_by(
            Activity.completed,
            Activity.due_date.asc().nulls_last(),
            Activity.created_at.desc(),
        )
        return await self.get_paginated(db, query, page, per_page)

    async def get_for_metrics(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID | None = None,
    ) -> list[Activity]:
        """분석용 활동 목록 — Activities for analytics."""
        query: Select = select(Activity).where(Activity.organization_id == organization_id)
        if user_id is not None:
            query = query.where(Activity.user_id == user_id)
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
activity_repository: ActivityRepository = ActivityRepository()
