"""온보딩 관련 Pydantic 요청/응답 스키마 정의.

Onboarding Pydantic request/response schema definitions.
Admin-side session management, the public client portal, reminders and
task generation.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

OnboardingType = Literal["web_design", "voice_ai", "software_dev", "marketing", "custom", "other"]
ReminderSchedule = Literal["standard", "aggressive", "gentle", "custom"]


# === 관리자 세션 (Admin session) 스키마 ===

class SessionCreate(BaseModel):
    """온보딩 세션 생성 요청 스키마.

    Onboarding session creation request schema.
    Steps are copied from the template for the onboarding type. The
    reminder schedule defaults to one recommended from the project's
    priority and budget.

    Attributes:
        project_id: 대상 프로젝트 UUID (Target project)
        onboarding_type: 온보딩 유형 (Template to use)
        client_email: 클라이언트 이메일 (Client email, needed for invitations and reminders)
        client_name: 클라이언트 이름 (Client name, optional)
        reminder_schedule: 리마인더 스케줄 (Optional override)
    """

    project_id: str
    onboarding_type: OnboardingType = "other"
    client_email: str | None = None
    client_name: str | None = None
    reminder_schedule: ReminderSchedule | None = None


class SessionResponse(BaseModel):
    """온보딩 세션 응답 스키마 (관리자용)."""

    id: str
    project_id: str
    access_token: str
    onboarding_url: str  # 클라이언트 링크 (Client portal link)
    onboarding_type: str
    status: str
    current_step: int
    total_steps: int
    completion_percentage: int
    client_email: str | None
    client_name: str | None
    started_at: datetime | None
    completed_at: datetime | None
    last_activity_at: datetime | None
    expires_at: datetime | None
    reminder_schedule: str
    reminder_enabled: bool
    reminder_count: int
    tasks_generated: bool
    task_count: int
    created_at: datetime


class SessionDetailResponse(SessionResponse):
    """세션 상세 — 단계 정의와 응답 포함 (Includes steps and responses)."""

    steps: list[dict[str, Any]]
    responses: dict[str, Any]
    visible_steps: list[int] | None
    skipped_steps: list[int] | None


class OnboardingAnalyticsResponse(BaseModel):
    """온보딩 분석 응답 스키마."""

    total: int
    completed: int
    in_progress: int
    pending: int
    abandoned: int
    completion_rate: float  # 완료율 % (Completed / total * 100)
    average_completion: float  # 평균 완료율 (Mean completion_percentage)


# === 클라이언트 포털 (Client portal) 스키마 ===

class ClientSessionResponse(BaseModel):
    """클라이언트용 세션 응답 스키마.

    Session view returned to the client portal. Internal fields such as
    reminder settings and task generation state are omitted.
    """

    id: str
    onboarding_type: str
    status: str
    client_name: str | None
    project_name: str
    steps: list[dict[str, Any]]
    responses: dict[str, Any]
    current_step: int
    completion_percentage: int
    visible_steps: list[int]
    expires_at: datetime | None


class StepSaveRequest(BaseModel):
    """단계 임시 저장 요청 스키마 (Autosave)."""

    data: dict[str, Any]


class StepSubmitRequest(BaseModel):
    """단계 제출 요청 스키마.

    Attributes:
        data: 응답 데이터 (Step response data)
        time_spent: 소요 시간 초 (Seconds spent on the step, optional)
    """

    data: dict[str, Any]
    time_spent: int | None = Field(default=None, ge=0)


class CompleteRequest(BaseModel):
    """온보딩 완료 요청 스키마. final_data는 마지막 단계 응답으로 저장됩니다."""

    final_data: dict[str, Any] | None = None


class ProgressResponse(BaseModel):
    """진행 상황 응답 스키마."""

    status: str
    current_step: int
    total_steps: int
    visible_steps: list[int]
    completion_percentage: int
    is_expired: bool
    days_until_expiration: int | None


# === 리마인더 (Reminder) 스키마 ===

class ReminderSettingsUpdate(BaseModel):
    """리마인더 설정 변경 요청 스키마.

    Changing the schedule cancels pending reminders and schedules anew.
    """

    reminder_enabled: bool | None = None
    reminder_schedule: ReminderSchedule | None = None


class ReminderResponse(BaseModel):
    """리마인더 응답 스키마."""

    id: str
    reminder_type: str
    reminder_label: str  # 표시용 이름 (Display label)
    scheduled_at: datetime
    status: str
    email_subject: str | None
    sent_at: datetime | None


class ReminderStatsResponse(BaseModel):
    """리마인더 통계 응답 스키마."""

    total: int
    by_status: dict[str, int]  # 상태별 건수 (pending | sent | failed | cancelled)
    by_type: dict[str, int]  # 유형별 건수 (gentle | encouragement | final | custom)


class ReminderRunResponse(BaseModel):
    """크론 리마인더 발송 결과 스키마.

    Summary of one send-reminders run.
    """

    processed: int
    sent: int
    skipped: int
    failed: int
    duration_ms: int


class CustomReminderRequest(BaseModel):
    """사용자 정의 리마인더 요청 스키마."""

    subject: str = Field(..., min_length=1, max_length=500)
    message: str = Field(..., min_length=1)
    scheduled_at: datetime | None = None  # None이면 즉시 발송 대상 (Due immediately when omitted)


# === 작업 생성 (Task generation) 스키마 ===

class GeneratedTaskPreview(BaseModel):
    """생성 예정 작업 미리보기 항목."""

    title: str
    description: str | None
    priority: str
    status: str
    due_date: datetime | None
    rule_id: str | None = None


class TaskPreviewResponse(BaseModel):
    """작업 미리보기 응답 스키마.

    Attributes:
        total: 생성될 작업 수 (Number of tasks that would be created)
        by_priority: 우선순위별 작업 (Tasks grouped by priority)
        valid: 검증 통과 여부 (Whether validation passed)
        errors: 검증 오류 (Validation errors)
    """

    total: int
    by_priority: dict[str, list[GeneratedTaskPreview]]
    valid: bool
    errors: list[str]


class TaskGenerationResponse(BaseModel):
    """작업 생성 결과 응답 스키마."""

    session_id: str
    project_id: str
    task_count: int
    deleted_count: int  # 재생성 시 교체된 작업 수 (Tasks replaced on regeneration)
    generated_at: datetime
