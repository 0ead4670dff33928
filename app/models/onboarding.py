"""온보딩 관련 SQLAlchemy ORM 모델 정의.

Client onboarding SQLAlchemy ORM model definitions.
A session is addressed by an unguessable access token and walks the client
through a list of steps whose visibility may depend on earlier answers.

Tables:
    - onboarding_sessions: 온보딩 세션 (Token-addressed client sessions)
    - onboarding_responses: 단계별 제출 기록 (Per-step submission analytics)
    - onboarding_reminders: 예약된 리마인더 이메일 (Scheduled reminder emails)
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.config import settings
from app.database import Base

ONBOARDING_TYPES: tuple[str, ...] = ("web_design", "voice_ai", "software_dev", "marketing", "custom", "other")
SESSION_STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed", "abandoned")
STEP_TYPES: tuple[str, ...] = ("welcome", "form", "upload", "choice", "approval", "review", "complete")
REMINDER_SCHEDULES: tuple[str, ...] = ("standard", "aggressive", "gentle", "custom")
REMINDER_TYPES: tuple[str, ...] = ("initial", "gentle", "encouragement", "final", "custom")
REMINDER_STATUSES: tuple[str, ...] = ("pending", "sent", "failed", "cancelled")


def _generate_access_token() -> str:
    return uuid.uuid4().hex


def _default_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.ONBOARDING_EXPIRY_DAYS)


class OnboardingSession(Base):
    """온보딩 세션 모델.

    Onboarding session model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        project_id: 대상 프로젝트 FK (Target project)
        organization_id: 소속 조직 FK (Organization scope)
        access_token: 클라이언트 접근 토큰 (Public access token, uuid4 hex)
        onboarding_type: 온보딩 유형 (web_design | voice_ai | software_dev | marketing | custom | other)
        status: 상태 (pending | in_progress | completed | abandoned)
        steps: 단계 정의 목록 (Step definitions, JSON list)
        responses: 단계별 응답 (Responses keyed by step index string)
        current_step: 현재 단계 인덱스 (Current step index)
        completion_percentage: 완료율 0-100 (Completion percentage)
        visible_steps / skipped_steps: 조건 평가 결과 (Evaluated step indices)
        expires_at: 만료 일시 (Expiry, created + ONBOARDING_EXPIRY_DAYS)
        reminder_schedule: 리마인더 스케줄 (standard | aggressive | gentle | custom)
        tasks_generated: 작업 생성 여부 (Whether tasks were generated)
    """

    __tablename__ = "onboarding_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    # 접근 토큰 — 클라이언트 URL에 포함되는 비공개 토큰 (Unguessable token in the client URL)
    access_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, default=_generate_access_token)
    onboarding_type: Mapped[str] = mapped_column(String(30), nullable=False, default="other")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    # 단계 정의 — [{type, title, estimated_minutes, fields, condition?}, ...]
    steps: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    # 응답 — {"0": {...}, "1": {...}} 단계 인덱스 문자열 키 (Keyed by step index string)
    responses: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completion_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visible_steps: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    skipped_steps: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    client_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 마지막 활동 — 최근 1시간 내 활동 시 리마인더 발송 보류 (Reminders hold off within an hour of activity)
    last_activity_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=_default_expiry)

    # 리마인더 설정 — Reminder settings
    reminder_schedule: Mapped[str] = mapped_column(String(20), nullable=False, default="standard")
    reminder_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    reminder_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reminder_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 작업 생성 상태 — Task generation state
    tasks_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    tasks_generated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    task_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    project = relationship("Project")
    step_responses = relationship("OnboardingResponse", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)
    reminders = relationship("OnboardingReminder", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)


class OnboardingResponse(Base):
    """단계 제출 분석 레코드.

    Analytics row written on every submitted step.
    """

    __tablename__ = "onboarding_responses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("onboarding_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    step_index: Mapped[int] = mapped_column(Integer, nullable=False)
    # 단계 유형 — welcome | form | upload | choice | approval | review | complete
    step_type: Mapped[str] = mapped_column(String(20), nullable=False, default="form")
    response_data: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    # 소요 시간(초) — Seconds spent on the step
    time_spent: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    session = relationship("OnboardingSession", back_populates="step_responses")


class OnboardingReminder(Base):
    """온보딩 리마인더 모델 — 예약된 리마인더 이메일.

    Scheduled onboarding reminder. Rows are created when a session is
    created and picked up by the send-reminders cron once due.

    Attributes:
        session_id: 대상 세션 FK (Target session)
        reminder_type: 유형 (initial | gentle | encouragement | final | custom)
        scheduled_at: 발송 예정 일시 (When the reminder becomes due)
        status: 상태 (pending | sent | failed | cancelled)
        email_subject / email_body: 발송된 이메일 내용 (Rendered email, filled on send)
        sent_at: 발송 일시 (Send timestamp)
        extra: 부가 정보 (Metadata such as the failure reason)
    """

    __tablename__ = "onboarding_reminders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("onboarding_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    reminder_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    email_subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    email_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # "metadata"는 DeclarativeBase 예약어 — column is named "metadata" in the table
    extra: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    session = relationship("OnboardingSession", back_populates="reminders")
