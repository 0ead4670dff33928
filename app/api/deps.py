"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns its payload)
    3. 페이로드의 "sub"로 사용자와 역할을 조회하고 활성 상태를 확인
       (The user and role are loaded by "sub" and must be active)

Authorization (require_level):
    Lower level = higher authority. 1 = admin, 2 = manager, 3 = sales_rep.
    Sales reps only see the CRM records they own (``owner_scope``).
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.utils.jwt import decode_token

ADMIN_LEVEL: int = 1
MANAGER_LEVEL: int = 2
SALES_REP_LEVEL: int = 3

# HTTP Bearer 토큰 추출기 — Extracts the JWT from the Authorization header
security: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨, 또는 비활성 사용자
                            (Invalid/expired token, refresh token used, or inactive user)
    """
    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id: UUID = UUID(payload["sub"])
    except HTTPException:
        raise
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    result = await db.execute(
        select(User).options(selectinload(User.role)).where(User.id == user_id)
    )
    user: User | None = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Args:
        max_level: 허용되는 최대 역할 레벨 (Maximum allowed role level, inclusive)

    Returns:
        FastAPI 의존성 — 인증된 사용자 반환 또는 403
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        role = current_user.role
        if role is None or role.level > max_level:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured level dependencies
require_admin = require_level(ADMIN_LEVEL)
require_manager = require_level(MANAGER_LEVEL)
require_member = require_level(SALES_REP_LEVEL)


def owner_scope(user: User) -> UUID | None:
    """CRM 레코드 소유자 범위.

    Sales reps are limited to records they own; admins and managers see
    the whole organization (None).
    """
    if user.role is not None and user.role.level >= SALES_REP_LEVEL:
        return user.id
    return None


async def verify_cron_secret(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """크론 엔드포인트 인증 — ``Authorization: Bearer <CRON_SECRET>``.

    Open when CRON_SECRET is not configured (local development).

    Raises:
        HTTPException(401): 비밀값 불일치 (Missing or wrong secret)
    """
    if not settings.CRON_SECRET:
        return
    if authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid cron secret")
