"""알림 레포지토리 — 인앱 알림 쿼리.

Notification Repository — In-app notification queries: per-user listing,
unread counts, read marking and fan-out creation for system events
(onboarding completed, tasks generated, usage threshold, sync failed).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리.

    Extends:
        BaseRepository[Notification]
    """

    def __init__(self) -> None:
        super().__init__(Notification)

    async def get_user_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """사용자의 알림 목록을 최신순으로 조회합니다.

        Retrieve paginated notifications for a user, newest first.
        """
        query: Select = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        query: Select = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
        return (await db.execute(query)).scalar() or 0

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """단일 알림을 읽음 처리합니다. 본인 알림만 가능합니다.

        Mark one of the user's notifications read.

        Returns:
            bool: 대상 알림 존재 여부 (Whether the notification was found)
        """
        result = await db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await db.flush()
        return result.rowcount

    async def create_for_users(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_ids: list[UUID],
        notification_type: str,
        message: str,
        reference_type: str | None = None,
        reference_id: UUID | None = None,
    ) -> list[Notification]:
        """여러 사용자에게 같은 알림을 생성합니다.

        Create the same notification for each recipient. Duplicate ids
        are collapsed.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            user_ids: 수신자 목록 (Recipients)
            notification_type: 알림 유형 (onboarding_completed | tasks_generated | usage_threshold | sync_failed)
            message: 알림 메시지 (Message)
            reference_type: 참조 유형 (onboarding_session | subscription | email_account)
            reference_id: 참조 ID (Referenced record)

        Returns:
            list[Notification]: 생성된 알림 목록 (Created notifications)
        """
        notifications: list[Notification] = [
            Notification(
                organization_id=organization_id,
                user_id=user_id,
                type=notification_type,
                message=message,
                reference_type=reference_type,
                reference_id=reference_id,
            )
            for user_id in dict.fromkeys(user_ids)
        ]
        db.add_all(notifications)
        await db.flush()
        return notifications


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
