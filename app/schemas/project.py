"""프로젝트 관련 Pydantic 요청/응답 스키마 정의.

Project Pydantic request/response schema definitions.
Covers projects, project tasks and project notes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ProjectStatus = Literal["planning", "active", "on_hold", "completed", "cancelled"]
ProjectPriority = Literal["low", "medium", "high", "critical"]
TaskStatus = Literal["todo", "in_progress", "done"]
TaskPriority = Literal["low", "medium", "high"]


# === 프로젝트 (Project) 스키마 ===

class ProjectCreate(BaseModel):
    """프로젝트 생성 요청 스키마.

    Attributes:
        name: 프로젝트 이름 (Project name)
        description: 설명 (Description, optional)
        status: 상태 (planning | active | on_hold | completed | cancelled)
        priority: 우선순위 (low | medium | high | critical)
        budget: 예산 (Budget, optional)
        start_date / end_date: 기간 (Planned period, optional)
        assigned_to: 담당자 UUID (Assigned user, optional)
        contact_id / deal_id: 연결 CRM 레코드 (Linked CRM records, optional)
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus = "planning"
    priority: ProjectPriority = "medium"
    budget: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    start_date: datetime | None = None
    end_date: datetime | None = None
    assigned_to: str | None = None
    contact_id: str | None = None
    deal_id: str | None = None


class ProjectUpdate(BaseModel):
    """프로젝트 수정 요청 스키마 (부분 업데이트).

    progress_percentage overrides the task-derived progress; null restores it.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None
    priority: ProjectPriority | None = None
    budget: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    start_date: datetime | None = None
    end_date: datetime | None = None
    assigned_to: str | None = None
    contact_id: str | None = None
    deal_id: str | None = None
    progress_percentage: int | None = Field(default=None, ge=0, le=100)


class ProjectResponse(BaseModel):
    """프로젝트 응답 스키마.

    progress is the manual override when set, else the auto value.
    """

    id: str
    name: str
    description: str | None
    status: str
    priority: str
    budget: Decimal | None
    start_date: datetime | None
    end_date: datetime | None
    assigned_to: str | None
    contact_id: str | None
    deal_id: str | None
    progress_percentage: int | None
    auto_calculated_progress: int
    progress: int  # 표시 진행률 (Effective progress)
    created_at: datetime


# === 프로젝트 작업 (Project Task) 스키마 ===

class ProjectTaskCreate(BaseModel):
    """프로젝트 작업 생성 요청 스키마."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    due_date: datetime | None = None
    assigned_to: str | None = None


class ProjectTaskUpdate(BaseModel):
    """프로젝트 작업 수정 요청 스키마 (부분 업데이트)."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assigned_to: str | None = None


class ProjectTaskResponse(BaseModel):
    """프로젝트 작업 응답 스키마."""

    id: str
    project_id: str
    title: str
    description: str | None
    status: str
    priority: str
    due_date: datetime | None
    assigned_to: str | None
    source_type: str  # manual | ai_generated | onboarding_response
    source_id: str | None
    created_at: datetime


# === 프로젝트 메모 (Project Note) 스키마 ===

class ProjectNoteCreate(BaseModel):
    content: str = Field(..., min_length=1)


class ProjectNoteResponse(BaseModel):
    id: str
    project_id: str
    author_id: str | None
    content: str
    created_at: datetime
