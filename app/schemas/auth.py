"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers workspace registration, email login, token refresh and current user info.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema. Email is the global login identifier.

    Attributes:
        email: 로그인 이메일 (Login email, case-insensitive)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class RegisterRequest(BaseModel):
    """워크스페이스 가입 요청 스키마.

    Workspace registration request schema.
    Creates a new organization and its first admin user.

    Attributes:
        org_name: 조직 이름 (Organization name, slug is derived from it)
        email: 관리자 이메일 (Admin login email)
        password: 비밀번호 (Plain text, will be bcrypt-hashed on server)
        full_name: 실명 (Full display name)
    """

    org_name: str = Field(..., min_length=1, max_length=255)  # 조직 이름 (Organization name)
    email: str  # 관리자 이메일 — 전역 고유 (Admin email, globally unique)
    password: str = Field(..., min_length=8)  # 비밀번호 — 8자 이상 (At least 8 characters)
    full_name: str  # 실명 (Full display name)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful registration, login or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 30분 기본 (Access token, default TTL: 30min)
    refresh_token: str  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)


class RefreshRequest(BaseModel):
    """토큰 갱신 요청 스키마.

    Exchanges a valid refresh token for a new access/refresh token pair.
    """

    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Current user info response schema for the /me endpoint.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        email: 로그인 이메일 (Login email)
        full_name: 실명 (Full display name)
        role_name: 역할 이름 (admin | manager | sales_rep)
        role_level: 역할 레벨 (1=admin, 3=sales_rep)
        organization_id: 소속 조직 UUID (Organization identifier)
        organization_name: 소속 조직 이름 (Organization name)
        organization_slug: 조직 슬러그 (Organization slug)
        is_active: 활성 상태 (Account active status)
    """

    id: str
    email: str
    full_name: str
    role_name: str
    role_level: int  # 역할 레벨 — 1=admin, 2=manager, 3=sales_rep (낮을수록 높은 권한)
    organization_id: str
    organization_name: str
    organization_slug: str
    is_active: bool
