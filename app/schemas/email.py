"""이메일 관련 Pydantic 요청/응답 스키마 정의.

Email Pydantic request/response schema definitions.
Covers mailbox accounts, sync results, messages, threads and sender screening.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

HeyView = Literal["imbox", "feed", "paper_trail", "screener"]
ScreeningDecision = Literal["imbox", "feed", "paper_trail", "blocked"]


# === 계정 (Account) 스키마 ===

class EmailAccountConnect(BaseModel):
    """메일 계정 연결 요청 스키마.

    Registers a mailbox already authorized with the email provider.

    Attributes:
        email_address: 메일 주소 (Mailbox address)
        nylas_grant_id: Nylas grant ID (Grant obtained from the hosted auth flow)
    """

    email_address: str
    nylas_grant_id: str = Field(..., min_length=1)


class EmailAccountResponse(BaseModel):
    """메일 계정 응답 스키마."""

    id: str
    email_address: str
    provider: str
    status: str  # active | syncing | error | disconnected
    last_sync_at: datetime | None
    sync_error: str | None
    created_at: datetime


class SyncRequest(BaseModel):
    """동기화 옵션."""

    skip_classification: bool = False  # True이면 자동 분류 생략 (Skip auto-classification)


class SyncResultResponse(BaseModel):
    """동기화 결과 응답 스키마."""

    synced: int  # 새로 저장된 메시지 수 (New messages stored)
    skipped: int  # 기존 메시지 수 (Already-known messages refreshed)
    errors: int  # 실패한 메시지 수 (Messages that failed)


# === 메시지 (Email) 스키마 ===

class EmailResponse(BaseModel):
    """이메일 목록 응답 스키마."""

    id: str
    account_id: str
    thread_id: str | None
    from_address: dict[str, Any]
    to_addresses: list[Any]
    subject: str | None
    snippet: str | None
    received_at: datetime
    is_read: bool
    is_starred: bool
    is_archived: bool
    has_attachments: bool
    hey_view: str | None
    hey_category: str | None
    ai_category: str | None
    screening_status: str


class EmailDetailResponse(EmailResponse):
    """이메일 상세 응답 스키마 — 본문 포함 (Includes bodies)."""

    cc_addresses: list[Any] | None
    body_text: str | None
    body_html: str | None
    ai_category_confidence: int | None
    hey_confidence: float | None


class EmailFlagsUpdate(BaseModel):
    """이메일 플래그 변경 요청 스키마 (부분 업데이트)."""

    is_read: bool | None = None
    is_starred: bool | None = None
    is_archived: bool | None = None
    is_trash: bool | None = None


# === 스레드 (Thread) 스키마 ===

class EmailThreadResponse(BaseModel):
    """스레드 응답 스키마."""

    id: str
    account_id: str
    subject: str | None
    snippet: str | None
    participants: list[Any]
    message_count: int
    unread_count: int
    first_message_at: datetime | None
    last_message_at: datetime | None
    importance_score: int | None
    importance_reason: str | None


class ThreadScoreResponse(BaseModel):
    """스레드 중요도 점수 응답 스키마."""

    thread_id: str
    score: int
    reason: str
    factors: dict[str, int]  # sender / keyword / engagement / time 세부 점수


class CategorizeResponse(BaseModel):
    """휴리스틱 분류 결과."""

    email_id: str
    category: str | None
    confidence: int


# === 스크리닝 (Screening) 스키마 ===

class ScreenSenderRequest(BaseModel):
    """발신자 스크리닝 결정 요청 스키마.

    Attributes:
        email_address: 발신자 주소 (Sender address)
        decision: 결정 (imbox | feed | paper_trail | blocked)
        name: 발신자 이름 (Sender display name, optional)
        notes: 메모 (Notes, optional)
    """

    email_address: str = Field(..., min_length=3)
    decision: ScreeningDecision
    name: str | None = None
    notes: str | None = None


class ScreeningDecisionResponse(BaseModel):
    """스크리닝 결정 응답 스키마."""

    id: str
    email_address: str
    name: str | None
    decision: str
    decided_at: datetime
    notes: str | None


class ScreenSenderResponse(ScreeningDecisionResponse):
    """스크리닝 결과 — 재분류된 이메일 수 포함."""

    emails_updated: int


class UnscreenedSenderResponse(BaseModel):
    """미분류 발신자 응답 스키마.

    Attributes:
        email_address: 발신자 주소 (Sender address)
        name: 발신자 이름 (Sender name)
        first_email: 가장 최근 이메일 요약 (Newest pending email from the sender)
        count: 대기 이메일 수 (Pending emails from the sender)
        classification: 분류기 제안 (Classifier suggestion)
    """

    email_address: str
    name: str
    first_email: dict[str, Any]
    count: int
    classification: dict[str, Any]


class BlockedSenderResponse(BaseModel):
    id: str
    email_address: str
    reason: str | None
    created_at: datetime
