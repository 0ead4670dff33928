"""인증 서비스 — 워크스페이스 가입, 로그인, 토큰 갱신 비즈니스 로직.

Auth Service — Business logic for workspace registration, email login
and token refresh. Registration bootstraps a whole tenant: organization,
default roles, default pipeline stages and the first admin user.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.models.crm import DEFAULT_DEAL_STAGES, DealStage
from app.models.organization import Organization, slugify
from app.models.user import DEFAULT_ROLES, Role, User
from app.repositories.auth_repository import auth_repository
from app.repositories.organization_repository import organization_repository
from app.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserMeResponse,
)
from app.utils.exceptions import DuplicateError, NotFoundError, UnauthorizedError
from app.utils.jwt import create_access_token, create_refresh_token, decode_token
from app.utils.password import hash_password, verify_password

logger = structlog.get_logger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages registration, email login, token refresh and logout.
    """

    async def _unique_slug(self, db: AsyncSession, name: str) -> str:
        """조직 이름에서 고유 슬러그를 생성합니다.

        Derive a unique slug from the organization name, suffixing -2, -3...
        on collision.
        """
        base: str = slugify(name)
        slug: str = base
        suffix: int = 2
        while await organization_repository.slug_exists(db, slug):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def _build_jwt_payload(self, user: User, role: Role) -> dict[str, str | int]:
        """JWT 토큰 페이로드를 생성합니다.

        Build the JWT token payload from user and role data.
        """
        return {
            "sub": str(user.id),
            "org": str(user.organization_id),
            "role": role.name,
            "level": role.level,
        }

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
        role: Role,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate access and refresh token pair for a user.
        Previous refresh tokens of the user are revoked.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 사용자 모델 (User model instance)
            role: 역할 모델 (Role model instance)

        Returns:
            TokenResponse: 토큰 응답 (Token response with access and refresh tokens)
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user, role)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 기존 리프레시 토큰 정리 — Clean up old refresh tokens to prevent accumulation
        await auth_repository.delete_user_refresh_tokens(db, user.id)

        # 리프레시 토큰을 DB에 저장 — Persist refresh token to database
        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.create_refresh_token(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def register(
        self,
        db: AsyncSession,
        data: RegisterRequest,
    ) -> TokenResponse:
        """새 워크스페이스를 가입 처리합니다.

        Register a new workspace. Creates the organization (plan free,
        status trial), the default roles, the default deal stages and the
        admin user, then issues a token pair.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 가입 요청 데이터 (Registration request data)

        Returns:
            TokenResponse: 토큰 응답 (Token response)

        Raises:
            DuplicateError: 이메일이 이미 사용 중일 때 (Email already registered)
        """
        email: str = data.email.strip().lower()
        if await auth_repository.get_user_by_email(db, email) is not None:
            raise DuplicateError("Email already registered")

        org: Organization = Organization(
            name=data.org_name.strip(),
            slug=await self._unique_slug(db, data.org_name),
            plan="free",
            status="trial",
        )
        db.add(org)
        await db.flush()

        # 기본 역할 생성 — Default roles (admin, manager, sales_rep)
        roles: dict[str, Role] = {}
        for name, level in DEFAULT_ROLES:
            role: Role = Role(organization_id=org.id, name=name, level=level)
            db.add(role)
            roles[name] = role

        # 기본 파이프라인 단계 — Default deal stages
        for name, order, color in DEFAULT_DEAL_STAGES:
            db.add(DealStage(organization_id=org.id, name=name, order=order, color=color))
        await db.flush()

        admin_role: Role = roles["admin"]
        user: User = User(
            organization_id=org.id,
            role_id=admin_role.id,
            email=email,
            full_name=data.full_name,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info("workspace_registered", organization_id=str(org.id), slug=org.slug)
        return await self._generate_tokens(db, user, admin_role)

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """이메일 로그인을 처리합니다.

        Process email login.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or deactivated account)
        """
        user: User | None = await auth_repository.get_user_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        return await self._generate_tokens(db, user, user.role)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Issue a new token pair using a refresh token. The presented token
        is consumed.

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        # DB에서 리프레시 토큰 확인 — Verify refresh token in database
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        # 만료 확인 — Check expiration
        if db_token.expires_at < datetime.now(timezone.utc):
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        # JWT 디코딩으로 사용자 정보 추출 — Extract user info from JWT
        try:
            payload: dict = decode_token(data.refresh_token)
        except Exception:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        user_id: str | None = payload.get("sub")
        if user_id is None or payload.get("type") != "refresh":
            raise UnauthorizedError("Invalid refresh token payload")

        result = await db.execute(
            select(User).options(selectinload(User.role)).where(User.id == UUID(user_id))
        )
        user: User | None = result.scalar_one_or_none()

        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        # 기존 리프레시 토큰 삭제 후 새 토큰 발급 — Delete old token and issue new pair
        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user, user.role)

    async def logout(
        self,
        db: AsyncSession,
        refresh_token: str,
    ) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제합니다."""
        await auth_repository.delete_refresh_token(db, refresh_token)

    async def get_me(
        self,
        db: AsyncSession,
        user: User,
    ) -> UserMeResponse:
        """현재 로그인한 사용자 프로필을 반환합니다.

        Return the profile of the currently authenticated user.
        """
        result = await db.execute(
            select(User)
            .options(selectinload(User.role), selectinload(User.organization))
            .where(User.id == user.id)
        )
        loaded_user: User | None = result.scalar_one_or_none()
        if loaded_user is None:
            raise NotFoundError("User not found")

        role: Role = loaded_user.role
        org: Organization = loaded_user.organization
        return UserMeResponse(
            id=str(loaded_user.id),
            email=loaded_user.email,
            full_name=loaded_user.full_name,
            role_name=role.name,
            role_level=role.level,
            organization_id=str(loaded_user.organization_id),
            organization_name=org.name,
            organization_slug=org.slug,
            is_active=loaded_user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
