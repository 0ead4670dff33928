"""음성 캠페인 관련 Pydantic 요청/응답 스키마 정의.

Voice campaign Pydantic request/response schema definitions.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

CampaignType = Literal["inbound", "outbound", "both"]
BillingType = Literal["billable", "admin_free"]
Provider = Literal["vapi", "autocalls", "synthflow", "retell"]


class VoiceCampaignCreate(BaseModel):
    """음성 캠페인 생성 요청 스키마.

    Attributes:
        project_id: 소속 프로젝트 UUID (Owning project)
        name: 캠페인 이름 (Campaign name)
        campaign_type: 유형 (inbound | outbound | both)
        billing_type: 과금 유형 (billable | admin_free)
        provider: 음성 제공자 (vapi | autocalls | synthflow | retell)
        setup_answers / schedule_config: 설정 JSON (Setup answers and schedule)
    """

    project_id: str
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    campaign_type: CampaignType = "outbound"
    billing_type: BillingType = "billable"
    provider: Provider = "vapi"
    phone_number: str | None = None
    setup_answers: dict[str, Any] | None = None
    schedule_config: dict[str, Any] | None = None
    campaign_goal: str | None = None
    agent_personality: str | None = None
    system_prompt: str | None = None
    first_message: str | None = None
    voicemail_message: str | None = None


class VoiceCampaignUpdate(BaseModel):
    """음성 캠페인 수정 요청 스키마 (부분 업데이트).

    Status changes go through launch/pause/resume.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    campaign_type: CampaignType | None = None
    billing_type: BillingType | None = None
    provider: Provider | None = None
    provider_assistant_id: str | None = None
    phone_number: str | None = None
    setup_answers: dict[str, Any] | None = None
    schedule_config: dict[str, Any] | None = None
    campaign_goal: str | None = None
    agent_personality: str | None = None
    system_prompt: str | None = None
    first_message: str | None = None
    voicemail_message: str | None = None


class VoiceCampaignResponse(BaseModel):
    """음성 캠페인 응답 스키마."""

    id: str
    project_id: str
    name: str
    description: str | None
    campaign_type: str
    status: str
    billing_type: str
    provider: str
    phone_number: str | None
    campaign_goal: str | None
    total_calls: int
    completed_calls: int
    failed_calls: int
    average_call_duration: float
    average_call_quality: float | None
    total_cost: int  # 센트 (Cents)
    is_active: bool
    last_call_at: datetime | None
    created_at: datetime


class BulkCampaignRequest(BaseModel):
    """일괄 작업 요청 스키마."""

    campaign_ids: list[str] = Field(..., min_length=1)


class RecordCallRequest(BaseModel):
    """통화 결과 기록 요청 스키마.

    Attributes:
        success: 통화 성공 여부 (Whether the call completed)
        duration_seconds: 통화 시간 초 (Call duration)
        quality: 통화 품질 점수 (Quality score, optional)
    """

    success: bool
    duration_seconds: int = Field(..., ge=0)
    quality: float | None = Field(default=None, ge=0, le=10)


class CampaignAnalyticsResponse(BaseModel):
    """캠페인 분석 응답 스키마."""

    total_campaigns: int
    active_campaigns: int
    total_calls: int
    completed_calls: int
    success_rate: int  # % 반올림 (Rounded percent)
    avg_call_duration: float
    avg_call_quality: float  # 소수 1자리 (One decimal place)
    total_cost: int
    provider_distribution: dict[str, int]
