"""CRM 관련 SQLAlchemy ORM 모델 정의.

CRM SQLAlchemy ORM model definitions: contacts, pipeline stages,
deals, and activities. All tables are organization-scoped; records that
belong to a single sales rep carry an owner column used for RBAC filtering.

Tables:
    - contacts: 고객 연락처 (Customer contacts)
    - deal_stages: 조직별 파이프라인 단계 (Per-org pipeline stages)
    - deals: 영업 기회 (Sales opportunities)
    - activities: 영업 활동 (Calls, emails, meetings, tasks, notes)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 기본 파이프라인 단계 — Default stages seeded for every organization (name, order, color)
DEFAULT_DEAL_STAGES: list[tuple[str, int, str]] = [
    ("Lead", 1, "#6b7280"),
    ("Qualified", 2, "#3b82f6"),
    ("Proposal", 3, "#8b5cf6"),
    ("Negotiation", 4, "#f59e0b"),
    ("Won", 5, "#10b981"),
    ("Lost", 6, "#ef4444"),
]

CONTACT_STATUSES: tuple[str, ...] = ("lead", "active", "inactive", "archived")
ACTIVITY_TYPES: tuple[str, ...] = ("call", "email", "meeting", "task", "note")


class Contact(Base):
    """연락처 모델 — 고객 및 잠재 고객.

    Contact model — A customer or prospect tracked in the CRM.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        organization_id: 소속 조직 FK (Organization scope)
        owner_id: 담당 영업 사원 FK (Owning sales rep)
        first_name / last_name: 이름 (Name parts)
        email, phone, company, job_title: 연락 정보 (Contact details)
        status: 상태 (lead | active | inactive | archived)
        tags: 태그 목록 (List of free-form tags)
        notes: 메모 (Free-form notes)
    """

    __tablename__ = "contacts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization scope
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    # 담당자 FK — Owning user (sales_rep은 본인 소유만 조회 가능)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    job_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 상태 — lead | active | inactive | archived
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="lead")
    # 태그 — JSONB list of strings
    tags: Mapped[list | None] = mapped_column(JSONB, nullable=True, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    deals = relationship("Deal", back_populates="contact")


class DealStage(Base):
    """파이프라인 단계 모델 — 조직별 딜 진행 단계.

    Pipeline stage model. Stage names are unique per organization;
    deals refer to a stage by name.
    """

    __tablename__ = "deal_stages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 단계 이름 — Stage display name (e.g. "Qualified")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 정렬 순서 — Display order in the pipeline (1 = first)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 색상 — Hex color used by the pipeline board
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#6b7280")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_deal_stage_org_name"),
    )


class Deal(Base):
    """딜 모델 — 영업 기회.

    Deal (sales opportunity) model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        organization_id: 소속 조직 FK (Organization scope)
        owner_id: 담당 영업 사원 FK (Owning sales rep)
        contact_id: 관련 연락처 FK (Related contact, optional)
        title: 딜 제목 (Deal title)
        value: 금액 (Deal value, 12 digits / 2 decimals)
        stage: 단계 이름 (Stage name, default "lead")
        probability: 성사 확률 0-100 (Win probability percentage)
        expected_close_date: 예상 마감일 (Expected close date)
        actual_close_date: 실제 마감일 (Actual close date, set on Won/Lost)
        notes: 메모 (Free-form notes)
    """

    __tablename__ = "deals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 관련 연락처 — Contact deletion leaves the deal without a contact
    contact_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    stage: Mapped[str] = mapped_column(String(100), nullable=False, default="lead")
    probability: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expected_close_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_close_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    contact = relationship("Contact", back_populates="deals")


class Activity(Base):
    """영업 활동 모델 — 통화, 이메일, 미팅, 할 일, 메모.

    Activity model — A logged or scheduled sales activity.
    Optionally linked to a contact and/or a deal.
    """

    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    # 작성자 — Owning user (sales_rep RBAC 기준)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    contact_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=True)
    deal_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("deals.id", ondelete="CASCADE"), nullable=True)
    # 활동 유형 — call | email | meeting | task | note
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
