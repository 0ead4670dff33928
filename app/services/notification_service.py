"""알림 서비스 — 인앱 알림 비즈니스 로직.

Notification Service — Business logic for in-app notifications.
Handles per-user listing and read state, and fan-out creation for system
events (onboarding completed, tasks generated, usage threshold, sync
failed).
"""

from typing import Sequence
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.notification_repository import notification_repository
from app.repositories.user_repository import user_repository
from app.schemas.common import NotificationResponse, PaginatedResponse
from app.utils.exceptions import NotFoundError

logger = structlog.get_logger(__name__)

# 관리자 레벨 이하 수신 — admins and managers receive org-wide alerts
ALERT_MAX_LEVEL: int = 2


class NotificationService:
    """알림 서비스.

    Notification service providing shared read/unread operations
    and fan-out creation for system events.
    """

    def _to_response(self, notification: Notification) -> NotificationResponse:
        return NotificationResponse(
            id=str(notification.id),
            type=notification.type,
            message=notification.message,
            reference_type=notification.reference_type,
            reference_id=str(notification.reference_id) if notification.reference_id else None,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )

    # --- 공통 조회/읽음 처리 (Shared read/unread operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다.

        List paginated notifications for a user, newest first.
        """
        items: Sequence[Notification]
        total: int
        items, total = await notification_repository.get_user_notifications(
            db, user_id, unread_only, page, per_page
        )
        return PaginatedResponse(
            items=[self._to_response(n) for n in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        return await notification_repository.get_unread_count(db, user_id)

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> None:
        """단일 알림을 읽음 처리합니다.

        Raises:
            NotFoundError: 본인 알림이 아닐 때 (Not one of the user's notifications)
        """
        if not await notification_repository.mark_read(db, notification_id, user_id):
            raise NotFoundError("Notification not found")

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        return await notification_repository.mark_all_read(db, user_id)

    # --- 시스템 이벤트 알림 생성 (System event fan-out) ---

    async def notify_admins(
        self,
        db: AsyncSession,
        organization_id: UUID,
        notification_type: str,
        message: str,
        reference_type: str | None = None,
        reference_id: UUID | None = None,
        extra_user_ids: list[UUID] | None = None,
    ) -> int:
        """조직의 관리자/매니저(및 추가 수신자)에게 알림을 생성합니다.

        Notify the organization's admins and managers, plus any extra
        recipients such as a project assignee.

        Returns:
            int: 생성된 알림 수 (Number of notifications created)
        """
        recipients: list[UUID] = [
            *(extra_user_ids or []),
            *await user_repository.get_ids_with_max_level(db, organization_id, ALERT_MAX_LEVEL),
        ]
        if not recipients:
            return 0
        created: list[Notification] = await notification_repository.create_for_users(
            db,
            organization_id,
            recipients,
            notification_type,
            message,
            reference_type,
            reference_id,
        )
        logger.info(
            "notifications_created",
            organization_id=str(organization_id),
            type=notification_type,
            count=len(created),
        )
        return len(created)


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
