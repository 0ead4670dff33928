"""조직 관련 Pydantic 요청/응답 스키마 정의.

Organization (tenant) Pydantic request/response schema definitions.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class OrganizationUpdate(BaseModel):
    """조직 수정 요청 스키마 (부분 업데이트, 관리자 전용).

    Organization update request schema (partial update, admin only).

    Attributes:
        name: 조직 이름 (New name, optional)
        slug: 슬러그 (New slug, must stay unique)
        max_users: 최대 사용자 수 (Seat limit)
    """

    name: str | None = None  # 변경할 조직 이름 (New name, optional)
    slug: str | None = Field(default=None, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")  # 소문자, 숫자, 하이픈 (Lowercase, digits, hyphens)
    plan: Literal["free", "pro", "enterprise"] | None = None
    max_users: int | None = Field(default=None, ge=1)


class OrganizationResponse(BaseModel):
    """조직 응답 스키마.

    Organization response schema returned from API.
    """

    id: str  # 조직 UUID 문자열 (Organization UUID as string)
    name: str  # 조직 이름 (Organization name)
    slug: str  # 고유 슬러그 (Unique slug)
    plan: str  # 요금제 — free | pro | enterprise
    status: str  # 상태 — active | trial | suspended | cancelled
    max_users: int  # 최대 사용자 수 (Seat limit)
    is_active: bool  # 활성 상태 (Active flag)
    created_at: datetime  # 생성 일시 UTC (Creation timestamp)
