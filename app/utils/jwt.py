"""JWT 토큰 생성 및 검증 유틸리티 모듈 (PyJWT).

Access/refresh token helpers for the local workspace login.

JWT Payload Structure:
    {
        "sub": "user_uuid",         # 사용자 ID (User identifier)
        "org": "organization_uuid", # 조직 ID (Workspace identifier)
        "role": "sales_rep",        # 역할 이름 (admin | manager | sales_rep)
        "level": 3,                 # 역할 레벨 (1 = admin, 3 = sales rep)
        "jti": "hex",               # 토큰 고유 ID (Unique per issued token)
        "exp": 1234567890,          # 만료 시간 (Expiration)
        "type": "access"|"refresh"  # 토큰 유형 (Token type discriminator)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from app.config import settings


def _encode(data: dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    # jti keeps two tokens issued in the same second distinct
    claims: dict[str, Any] = {
        **data,
        "jti": uuid4().hex,
        "exp": datetime.now(timezone.utc) + lifetime,
        "type": token_type,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: dict[str, Any]) -> str:
    """액세스 토큰 — JWT_ACCESS_TOKEN_EXPIRE_MINUTES 동안 유효."""
    return _encode(data, timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES), "access")


def create_refresh_token(data: dict[str, Any]) -> str:
    """리프레시 토큰 — JWT_REFRESH_TOKEN_EXPIRE_DAYS 동안 유효, DB에 저장됨."""
    return _encode(data, timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (Expired token)
        jwt.InvalidTokenError: 서명 또는 형식이 잘못된 토큰 (Bad signature or format)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
