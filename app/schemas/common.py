"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions shared across API
domains: notifications, pagination wrappers and generic messages.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


# === 알림 (Notification) 스키마 ===

class NotificationResponse(BaseModel):
    """알림 응답 스키마.

    Notification response schema.
    Uses polymorphic reference_type + reference_id for deep-linking
    to the source entity in the dashboard.

    Attributes:
        id: 알림 UUID (Notification unique identifier)
        type: 알림 유형 (Notification type)
        message: 알림 메시지 (Human-readable message)
        reference_type: 참조 엔티티 유형 (Source entity type, nullable)
        reference_id: 참조 엔티티 UUID (Source entity UUID, nullable)
        is_read: 읽음 여부 (Read status flag)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str  # 알림 UUID 문자열 (Notification UUID as string)
    type: str  # 알림 유형 — "onboarding_completed"|"tasks_generated"|"usage_threshold"|"sync_failed"
    message: str  # 알림 메시지 (Display message)
    reference_type: str | None  # 참조 엔티티 유형 — 딥링크용 (Entity type for deep-linking)
    reference_id: str | None  # 참조 엔티티 UUID — 딥링크용 (Entity UUID for deep-linking)
    is_read: bool  # 읽음 여부 (Read flag)
    created_at: datetime  # 생성 일시 UTC (Creation timestamp)


# === 공통 (Common) 스키마 ===

class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마.

    Paginated response wrapper schema.

    Attributes:
        items: 항목 목록 (List of result items)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[Any]  # 결과 항목 목록 (List of items for the current page)
    total: int  # 전체 항목 수 (Total item count)
    page: int  # 현재 페이지 — 1부터 시작 (Current page, 1-indexed)
    per_page: int  # 페이지당 항목 수 (Items per page)


class MessageResponse(BaseModel):
    """범용 메시지 응답 스키마.

    Generic confirmation message for deletes and state changes.
    """

    message: str  # 응답 메시지 (Human-readable confirmation message)


class BulkResultResponse(BaseModel):
    """일괄 작업 결과 스키마.

    Result of a continue-and-count bulk operation.
    """

    successful: int  # 성공 건수 (Items processed successfully)
    failed: int  # 실패 건수 (Items that failed)
