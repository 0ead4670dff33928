"""음성 캠페인 SQLAlchemy ORM 모델 정의.

Voice campaign SQLAlchemy ORM model definitions.
Campaigns belong to a project and accumulate call statistics; billable
campaigns feed minute usage into the billing module.

Tables:
    - voice_campaigns: AI 음성 캠페인 (AI voice calling campaigns)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

CAMPAIGN_TYPES: tuple[str, ...] = ("inbound", "outbound", "both")
CAMPAIGN_STATUSES: tuple[str, ...] = ("draft", "pending", "active", "paused", "completed", "failed")
BILLING_TYPES: tuple[str, ...] = ("billable", "admin_free")
PROVIDERS: tuple[str, ...] = ("vapi", "autocalls", "synthflow", "retell")


class VoiceCampaign(Base):
    """음성 캠페인 모델.

    Voice campaign model.

    Attributes:
        project_id / organization_id: 소속 프로젝트, 조직 (Owning project and org)
        name / description: 이름, 설명 (Name and description)
        campaign_type: 유형 (inbound | outbound | both)
        status: 상태 (draft | pending | active | paused | completed | failed)
        billing_type: 과금 유형 (billable | admin_free)
        provider: 음성 제공자 (vapi | autocalls | synthflow | retell)
        setup_answers / schedule_config: 설정 JSON (Setup answers and schedule)
        total_calls ... total_cost: 통화 통계 (Call statistics, total_cost in cents)
        rated_calls: 품질 점수가 있는 통화 수 (Calls that reported a quality score)
        is_active: 활성 여부 (Active flag, follows pause/resume)
    """

    __tablename__ = "voice_campaigns"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_type: Mapped[str] = mapped_column(String(20), nullable=False, default="outbound")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    # 과금 유형 — admin_free이면 사용량 기록 생략 (admin_free skips usage metering)
    billing_type: Mapped[str] = mapped_column(String(20), nullable=False, default="billable")
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="vapi")
    provider_assistant_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    setup_answers: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    schedule_config: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    campaign_goal: Mapped[str | None] = mapped_column(Text, nullable=True)
    agent_personality: Mapped[str | None] = mapped_column(String(50), nullable=True)
    system_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    voicemail_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 통화 통계 — Call statistics
    total_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 평균 통화 시간(초) — Running mean over all calls
    average_call_duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # 평균 통화 품질 — Running mean over calls that reported a quality score
    average_call_quality: Mapped[float | None] = mapped_column(Float, nullable=True)
    rated_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    last_call_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
