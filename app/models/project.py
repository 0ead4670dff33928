"""프로젝트 관련 SQLAlchemy ORM 모델 정의.

Project SQLAlchemy ORM model definitions.
A project is the unit of client work; onboarding sessions, generated
tasks and voice campaigns hang off a project.

Tables:
    - projects: 프로젝트 (Client projects)
    - project_tasks: 프로젝트 작업 (Tasks, manual or generated from onboarding)
    - project_notes: 프로젝트 메모 (Free-form notes)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

PROJECT_STATUSES: tuple[str, ...] = ("planning", "active", "on_hold", "completed", "cancelled")
PROJECT_PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "critical")
TASK_STATUSES: tuple[str, ...] = ("todo", "in_progress", "done")
TASK_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
TASK_SOURCE_TYPES: tuple[str, ...] = ("manual", "ai_generated", "onboarding_response")


class Project(Base):
    """프로젝트 모델.

    Project model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        organization_id: 소속 조직 FK (Organization scope)
        name: 프로젝트 이름 (Project name)
        description: 설명 (Description)
        status: 상태 (planning | active | on_hold | completed | cancelled)
        priority: 우선순위 (low | medium | high | critical)
        budget: 예산 (Budget amount)
        start_date / end_date: 기간 (Planned period)
        assigned_to: 담당자 FK (Assigned user)
        contact_id / deal_id: 연결된 CRM 레코드 (Linked CRM records)
        progress_percentage: 수동 진행률 (Manual progress override, nullable)
        auto_calculated_progress: 자동 진행률 (Progress computed from tasks)
        created_by: 생성자 FK (Creator)

    Relationships:
        tasks: 프로젝트 작업 목록 (Tasks, cascade delete)
        notes: 프로젝트 메모 목록 (Notes, cascade delete)
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 상태 — planning | active | on_hold | completed | cancelled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="planning")
    # 우선순위 — low | medium | high | critical (리마인더 스케줄 추천에 사용)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    contact_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True)
    deal_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("deals.id", ondelete="SET NULL"), nullable=True)
    # 수동 진행률 — Manual override; None이면 자동 진행률 사용 (falls back to auto value)
    progress_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 자동 진행률 — round(done / total * 100) over project tasks
    auto_calculated_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    tasks = relationship("ProjectTask", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
    notes = relationship("ProjectNote", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)


class ProjectTask(Base):
    """프로젝트 작업 모델.

    Project task. Generated tasks carry their origin in source_type /
    source_id / source_metadata so that regeneration can replace them.
    """

    __tablename__ = "project_tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 상태 — todo | in_progress | done
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo")
    # 우선순위 — low | medium | high
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # 생성 출처 — manual | ai_generated | onboarding_response
    source_type: Mapped[str] = mapped_column(String(30), nullable=False, default="manual")
    # 출처 ID — 온보딩 세션 ID 등 (Originating onboarding session id)
    source_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    # 출처 메타데이터 — JSON string {rule_id, rule_name, response_keys, timestamp}
    source_metadata: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    project = relationship("Project", back_populates="tasks")


class ProjectNote(Base):
    """프로젝트 메모 모델."""

    __tablename__ = "project_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # 부가 정보 — Optional structured payload (e.g. linked onboarding step)
    extra: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    project = relationship("Project", back_populates="notes")
