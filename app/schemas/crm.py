"""CRM 관련 Pydantic 요청/응답 스키마 정의.

CRM Pydantic request/response schema definitions.
Covers contacts, deal pipeline stages, deals and activities.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ContactStatus = Literal["lead", "active", "inactive", "archived"]
ActivityType = Literal["call", "email", "meeting", "task", "note"]


# === 연락처 (Contact) 스키마 ===

class ContactCreate(BaseModel):
    """연락처 생성 요청 스키마.

    Contact creation request schema. The owner defaults to the caller.

    Attributes:
        first_name / last_name: 이름 (Name parts)
        email / phone: 연락 수단 (Contact channels, optional)
        company / job_title: 소속 정보 (Company info, optional)
        status: 상태 (lead | active | inactive | archived)
        tags: 태그 목록 (Free-form tags)
        notes: 메모 (Notes, optional)
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    status: ContactStatus = "lead"
    tags: list[str] = []
    notes: str | None = None


class ContactUpdate(BaseModel):
    """연락처 수정 요청 스키마 (부분 업데이트)."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    status: ContactStatus | None = None
    tags: list[str] | None = None
    notes: str | None = None


class ContactResponse(BaseModel):
    """연락처 응답 스키마."""

    id: str
    owner_id: str
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    company: str | None
    job_title: str | None
    status: str
    tags: list[str]
    notes: str | None
    created_at: datetime
    updated_at: datetime


# === 파이프라인 단계 (Deal Stage) 스키마 ===

class DealStageCreate(BaseModel):
    """파이프라인 단계 생성 요청 스키마 (관리자 전용)."""

    name: str = Field(..., min_length=1, max_length=100)
    order: int = Field(..., ge=0)  # 표시 순서 (Display order)
    color: str = Field(default="#6b7280", pattern=r"^#[0-9a-fA-F]{6}$")  # HEX 색상 (Hex color)


class DealStageResponse(BaseModel):
    """파이프라인 단계 응답 스키마."""

    id: str
    name: str
    order: int
    color: str


# === 딜 (Deal) 스키마 ===

class DealCreate(BaseModel):
    """딜 생성 요청 스키마.

    Deal creation request schema.

    Attributes:
        title: 딜 제목 (Deal title)
        value: 금액 (Deal value, 2 decimal places)
        stage: 단계 이름 (Stage name, default "lead")
        probability: 성사 확률 0-100 (Win probability)
        contact_id: 연결 연락처 UUID (Linked contact, optional)
        expected_close_date: 예상 종료일 (Expected close date, optional)
        notes: 메모 (Notes, optional)
    """

    title: str = Field(..., min_length=1, max_length=255)
    value: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    stage: str = "lead"
    probability: int = Field(default=0, ge=0, le=100)
    contact_id: str | None = None
    expected_close_date: datetime | None = None
    notes: str | None = None


class DealUpdate(BaseModel):
    """딜 수정 요청 스키마 (부분 업데이트).

    Moving to the Won or Lost stage stamps actual_close_date when absent.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    value: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stage: str | None = None
    probability: int | None = Field(default=None, ge=0, le=100)
    contact_id: str | None = None
    expected_close_date: datetime | None = None
    actual_close_date: datetime | None = None
    notes: str | None = None


class DealResponse(BaseModel):
    """딜 응답 스키마."""

    id: str
    owner_id: str
    contact_id: str | None
    title: str
    value: Decimal
    stage: str
    probability: int
    expected_close_date: datetime | None
    actual_close_date: datetime | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


# === 활동 (Activity) 스키마 ===

class ActivityCreate(BaseModel):
    """활동 생성 요청 스키마."""

    type: ActivityType  # 활동 유형 — call | email | meeting | task | note
    subject: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    due_date: datetime | None = None
    contact_id: str | None = None
    deal_id: str | None = None


class ActivityUpdate(BaseModel):
    """활동 수정 요청 스키마 (부분 업데이트)."""

    type: ActivityType | None = None
    subject: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    due_date: datetime | None = None
    contact_id: str | None = None
    deal_id: str | None = None


class ActivityComplete(BaseModel):
    """활동 완료 토글 요청 스키마.

    completed=False clears completed_at.
    """

    completed: bool = True


class ActivityResponse(BaseModel):
    """활동 응답 스키마."""

    id: str
    user_id: str
    contact_id: str | None
    deal_id: str | None
    type: str
    subject: str
    description: str | None
    due_date: datetime | None
    completed: bool
    completed_at: datetime | None
    created_at: datetime
