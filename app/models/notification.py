"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Implements a polymorphic notification system where each notification
can reference different entity types via reference_type and reference_id.

Tables:
    - notifications: 사용자 알림 (User notifications with polymorphic references)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Notification(Base):
    """알림 모델 — 사용자에게 전달되는 시스템 알림.

    Notification model — System notifications delivered to users.
    Uses a polymorphic reference pattern (reference_type + reference_id)
    to link back to the source entity that triggered the notification.

    Notification Types (type 필드 값):
        - "onboarding_completed": 클라이언트 온보딩 완료 (Client finished onboarding)
        - "tasks_generated": 온보딩 응답으로 작업 생성됨 (Tasks generated from responses)
        - "usage_threshold": 통화 사용량 임계치 도달 (Voice usage crossed a threshold)
        - "sync_failed": 메일 동기화 실패 (Mailbox sync failed)

    Reference Types (reference_type 필드 값):
        - "onboarding_session": OnboardingSession 참조
        - "subscription": Subscription 참조
        - "email_account": EmailAccount 참조

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        organization_id: 소속 조직 FK (Organization scope)
        user_id: 수신자 FK (Recipient user foreign key)
        type: 알림 유형 (Notification type, see above)
        message: 알림 메시지 (Human-readable notification message)
        reference_type: 참조 엔티티 유형 (Referenced entity table name)
        reference_id: 참조 엔티티 ID (Referenced entity UUID)
        is_read: 읽음 여부 (Whether the user has read this notification)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "notifications"

    # 알림 고유 식별자 — Notification unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization scope for multi-tenant isolation
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 수신자 FK — Target user who receives this notification
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # 알림 유형 — Notification type (onboarding_completed | tasks_generated | usage_threshold | sync_failed)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    # 알림 메시지 — Human-readable message displayed to the user
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    # 참조 엔티티 유형 — Polymorphic reference: entity name (onboarding_session | subscription | email_account)
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 참조 엔티티 ID — Polymorphic reference: UUID of the source entity
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 읽음 여부 — False=미읽음, True=읽음 (Unread by default)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    # 생성 일시 — Notification creation timestamp (UTC, immutable)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
