"""이메일 관련 SQLAlchemy ORM 모델 정의.

Email SQLAlchemy ORM model definitions.
Mailboxes are synced from Nylas; every email carries both provider flags
and the Hey-style classification (imbox / feed / paper_trail / screener).

Tables:
    - email_accounts: 연결된 메일 계정 (Connected mailboxes)
    - email_threads: 대화 스레드 (Conversation threads with importance score)
    - emails: 개별 메시지 (Individual messages)
    - contact_screenings: 발신자 스크리닝 결정 (Per-user sender decisions)
    - blocked_senders: 차단된 발신자 (Per-user blocked senders)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

ACCOUNT_STATUSES: tuple[str, ...] = ("active", "syncing", "error", "disconnected")
HEY_VIEWS: tuple[str, ...] = ("imbox", "feed", "paper_trail", "screener")
SCREENING_DECISIONS: tuple[str, ...] = ("imbox", "feed", "paper_trail", "blocked")
SCREENING_STATUSES: tuple[str, ...] = ("pending", "screened", "auto_classified")


class EmailAccount(Base):
    """메일 계정 모델 — Nylas grant로 연결된 사용자 메일함.

    Connected mailbox. Sync reads messages through the Nylas grant.

    Attributes:
        user_id: 소유 사용자 FK (Owning user)
        email_address: 메일 주소 (Mailbox address)
        provider: 제공자 (Always "nylas")
        nylas_grant_id: Nylas grant ID
        status: 상태 (active | syncing | error | disconnected)
        last_sync_at: 마지막 동기화 일시 (Last successful sync)
        sync_error: 마지막 동기화 오류 (Last sync error message)
    """

    __tablename__ = "email_accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    email_address: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="nylas")
    nylas_grant_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sync_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class EmailThread(Base):
    """이메일 스레드 모델.

    Conversation thread. importance_score / importance_reason are written
    by the thread scorer.
    """

    __tablename__ = "email_threads"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("email_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    nylas_thread_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    subject: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    snippet: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 참여자 — [{name, email}, ...]
    participants: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unread_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_message_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_message_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 중요도 점수 0-100 — Importance score written by the scorer
    importance_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    importance_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    emails = relationship("Email", back_populates="thread")


class Email(Base):
    """이메일 메시지 모델.

    Email message model.

    Attributes:
        account_id / user_id / thread_id: 소속 계정, 사용자, 스레드 (Owning account, user, thread)
        nylas_message_id: Nylas 메시지 ID (Unique per account)
        from_address: 발신자 {name, email} (Sender)
        to_addresses / cc_addresses: 수신자 목록 (Recipient lists)
        is_read ... has_attachments: 플래그 (Provider flags)
        ai_category / ai_category_confidence: 휴리스틱 분류 (Heuristic category)
        hey_view / hey_category: Hey 스타일 분류 (Hey-style view and category)
        screening_status: 스크리닝 상태 (pending | screened | auto_classified)
        raw_headers: 원본 헤더 (Raw headers, used by the classifier)
    """

    __tablename__ = "emails"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("email_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    thread_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("email_threads.id", ondelete="SET NULL"), nullable=True, index=True)
    message_id: Mapped[str | None] = mapped_column(String(500), nullable=True)
    nylas_message_id: Mapped[str] = mapped_column(String(255), nullable=False)
    from_address: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    to_addresses: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    cc_addresses: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    subject: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    snippet: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    is_starred: Mapped[bool] = mapped_column(Boolean, default=False)
    is_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False)
    is_trash: Mapped[bool] = mapped_column(Boolean, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    has_attachments: Mapped[bool] = mapped_column(Boolean, default=False)

    # 분류 결과 — Classification
    ai_category: Mapped[str | None] = mapped_column(String(30), nullable=True)
    ai_category_confidence: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hey_view: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    hey_category: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # 분류 신뢰도 0-1 — Classifier confidence
    hey_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    screening_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    raw_headers: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("account_id", "nylas_message_id", name="uq_email_account_message"),
    )

    thread = relationship("EmailThread", back_populates="emails")


class ContactScreening(Base):
    """발신자 스크리닝 결정 모델.

    A user's decision about where a sender's mail belongs.
    """

    __tablename__ = "contact_screenings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 발신자 주소 — 소문자로 저장 (Stored lowercased)
    email_address: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 결정 — imbox | feed | paper_trail | blocked
    decision: Mapped[str] = mapped_column(String(20), nullable=False)
    decided_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "email_address", name="uq_screening_user_email"),
    )


class BlockedSender(Base):
    """차단된 발신자 모델."""

    __tablename__ = "blocked_senders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email_address: Mapped[str] = mapped_column(String(255), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "email_address", name="uq_blocked_user_email"),
    )
