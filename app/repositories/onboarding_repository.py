"""온보딩 레포지토리 — 세션, 응답 기록, 리마인더 쿼리.

Onboarding Repository — Session, response-analytics and reminder queries.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.onboarding import OnboardingReminder, OnboardingResponse, OnboardingSession
from app.repositories.base import BaseRepository


class OnboardingSessionRepository(BaseRepository[OnboardingSession]):
    """온보딩 세션 레포지토리.

    Extends:
        BaseRepository[OnboardingSession]
    """

    def __init__(self) -> None:
        super().__init__(OnboardingSession)

    async def get_by_token(
        self,
        db: AsyncSession,
        access_token: str,
    ) -> OnboardingSession | None:
        """접근 토큰으로 세션을 조회합니다.

        Retrieve a session by its public access token.
        """
        result = await db.execute(
            select(OnboardingSession)
            .options(selectinload(OnboardingSession.project))
            .where(OnboardingSession.access_token == access_token)
        )
        return result.scalar_one_or_none()

    async def get_with_project(
        self,
        db: AsyncSession,
        session_id: UUID,
        organization_id: UUID | None = None,
    ) -> OnboardingSession | None:
        """세션을 프로젝트와 함께 조회합니다.

        Retrieve a session with its project eagerly loaded (email templates
        and notifications need the project name).
        """
        query: Select = (
            select(OnboardingSession)
            .options(selectinload(OnboardingSession.project))
            .where(OnboardingSession.id == session_id)
        )
        if organization_id is not None:
            query = query.where(OnboardingSession.organization_id == organization_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        status: str | None = None,
        project_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[OnboardingSession], int]:
        """상태/프로젝트 필터로 세션 목록을 조회합니다.

        Retrieve a paginated session list, newest first.
        """
        query: Select = select(OnboardingSession).where(OnboardingSession.organization_id == organization_id)
        if status is not None:
            query = query.where(OnboardingSession.status == status)
        if project_id is not None:
            query = query.where(OnboardingSession.project_id == project_id)
        query = query.order_by(OnboardingSession.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_status_summary(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> tuple[dict[str, int], float]:
        """상태별 세션 수와 평균 완료율을 반환합니다.

        Return ({status: count}, average completion_percentage).
        """
        rows = await db.execute(
            select(OnboardingSession.status, func.count())
            .where(OnboardingSession.organization_id == organization_id)
            .group_by(OnboardingSession.status)
        )
        by_status: dict[str, int] = {status: count for status, count in rows.all()}

        avg = await db.execute(
            select(func.avg(OnboardingSession.completion_percentage)).where(
                OnboardingSession.organization_id == organization_id
            )
        )
        return by_status, float(avg.scalar() or 0)


class OnboardingResponseRepository(BaseRepository[OnboardingResponse]):
    """단계 제출 기록 레포지토리."""

    def __init__(self) -> None:
        super().__init__(OnboardingResponse)

    async def get_by_session(self, db: AsyncSession, session_id: UUID) -> list[OnboardingResponse]:
        result = await db.execute(
            select(OnboardingResponse)
            .where(OnboardingResponse.session_id == session_id)
            .order_by(OnboardingResponse.step_index, OnboardingResponse.created_at)
        )
        return list(result.scalars().all())


class OnboardingReminderRepository(BaseRepository[OnboardingReminder]):
    """온보딩 리마인더 레포지토리.

    Reminder repository. Due reminders are read in scheduled order so the
    cron job drains the oldest first.
    """

    def __init__(self) -> None:
        super().__init__(OnboardingReminder)

    async def get_by_session(self, db: AsyncSession, session_id: UUID) -> list[OnboardingReminder]:
        result = await db.execute(
            select(OnboardingReminder)
            .where(OnboardingReminder.session_id == session_id)
            .order_by(OnboardingReminder.scheduled_at)
        )
        return list(result.scalars().all())

    async def get_due(
        self,
        db: AsyncSession,
        now: datetime,
        limit: int = 100,
    ) -> list[OnboardingReminder]:
        """발송 대상 리마인더를 조회합니다.

        Retrieve pending reminders whose scheduled time has passed and
        that were never sent.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            now: 기준 시각 (Reference time)
            limit: 최대 건수 (Batch size)

        Returns:
            list[OnboardingReminder]: scheduled_at 오름차순 (Oldest first)
        """
        result = await db.execute(
            select(OnboardingReminder)
            .where(
                OnboardingReminder.status == "pending",
                OnboardingReminder.scheduled_at < now,
                OnboardingReminder.sent_at.is_(None),
            )
            .order_by(OnboardingReminder.scheduled_at)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def cancel_pending(self, db: AsyncSession, session_id: UUID) -> int:
        """세션의 대기 중 리마인더를 취소합니다.

        Mark every pending reminder of the session cancelled.

        Returns:
            int: 취소된 건수 (Number of cancelled reminders)
        """
        result = await db.execute(
            update(OnboardingReminder)
            .where(
                OnboardingReminder.session_id == session_id,
                OnboardingReminder.status == "pending",
            )
            .values(status="cancelled")
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0


# 싱글턴 인스턴스 — Singleton instances
onboarding_session_repository: OnboardingSessionRepository = OnboardingSessionRepository()
onboarding_response_repository: OnboardingResponseRepository = OnboardingResponseRepository()
onboarding_reminder_repository: OnboardingReminderRepository = OnboardingReminderRepository()
