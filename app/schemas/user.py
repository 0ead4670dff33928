"""조직 멤버 및 역할 관련 Pydantic 요청/응답 스키마 정의.

Member and Role Pydantic request/response schema definitions.
Roles are fixed per organization (admin, manager, sales_rep); members are
users of the organization managed by admins.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

RoleName = Literal["admin", "manager", "sales_rep"]


class RoleResponse(BaseModel):
    """역할 응답 스키마."""

    id: str
    name: str
    level: int  # 권한 레벨 — 1=admin, 2=manager, 3=sales_rep


class MemberCreate(BaseModel):
    """멤버 생성 요청 스키마 (관리자용).

    Member creation request schema (admin-only operation).
    Rejected when the organization's seat limit is reached.

    Attributes:
        email: 로그인 이메일 (Login email, globally unique)
        password: 초기 비밀번호 (Initial password, bcrypt-hashed)
        full_name: 실명 (Full display name)
        role: 역할 이름 (admin | manager | sales_rep)
    """

    email: str  # 로그인 이메일 — 전역 고유 (Login email, unique)
    password: str = Field(..., min_length=8)  # 초기 비밀번호 (Initial password)
    full_name: str  # 실명 (Full display name)
    role: RoleName = "sales_rep"  # 역할 — 기본 sales_rep (Default role)


class MemberRoleUpdate(BaseModel):
    """멤버 역할 변경 요청 스키마.

    The last remaining admin cannot be demoted.
    """

    role: RoleName


class MemberUpdate(BaseModel):
    """멤버 정보 수정 요청 스키마 (부분 업데이트)."""

    full_name: str | None = None
    is_active: bool | None = None


class MemberResponse(BaseModel):
    """멤버 응답 스키마.

    Attributes:
        id: 사용자 UUID (User identifier)
        email: 이메일 (Login email)
        full_name: 실명 (Full name)
        role_name: 역할 이름 (Role name)
        role_level: 역할 레벨 (Role level)
        is_active: 활성 상태 (Active flag)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str  # 사용자 UUID 문자열 (User UUID as string)
    email: str
    full_name: str
    role_name: str
    role_level: int
    is_active: bool
    created_at: datetime
