"""멤버 서비스 — 조직 사용자 관리 비즈니스 로직.

Member Service — Business logic for managing the users of an organization.
Enforces the seat limit, global email uniqueness and the rule that an
organization always keeps at least one active admin.
"""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Organization
from app.models.user import Role, User
from app.repositories.auth_repository import auth_repository
from app.repositories.organization_repository import organization_repository
from app.repositories.role_repository import role_repository
from app.repositories.user_repository import user_repository
from app.schemas.user import (
    MemberCreate,
    MemberResponse,
    MemberRoleUpdate,
    MemberUpdate,
    RoleResponse,
)
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, NotFoundError
from app.utils.password import hash_password

logger = structlog.get_logger(__name__)

ADMIN_LEVEL: int = 1


class MemberService:
    """조직 멤버 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, user: User) -> MemberResponse:
        return MemberResponse(
            id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            role_name=user.role.name,
            role_level=user.role.level,
            is_active=user.is_active,
            created_at=user.created_at,
        )

    async def _get_member(self, db: AsyncSession, organization_id: UUID, user_id: UUID) -> User:
        user: User | None = await user_repository.get_detail(db, user_id, organization_id)
        if user is None:
            raise NotFoundError("Member not found")
        return user

    async def _get_role(self, db: AsyncSession, organization_id: UUID, name: str) -> Role:
        role: Role | None = await role_repository.get_by_name(db, organization_id, name)
        if role is None:
            raise BadRequestError(f"Role '{name}' is not configured for this organization")
        return role

    async def _ensure_not_last_admin(self, db: AsyncSession, organization_id: UUID, user: User) -> None:
        """마지막 활성 관리자를 보호합니다 — Keep at least one active admin."""
        if user.role.level != ADMIN_LEVEL or not user.is_active:
            return
        admins: int = await user_repository.count_active_with_level(db, organization_id, ADMIN_LEVEL)
        if admins <= 1:
            raise BadRequestError("Cannot remove the last admin of the organization")

    async def list_roles(self, db: AsyncSession, organization_id: UUID) -> list[RoleResponse]:
        roles: list[Role] = await role_repository.get_by_org(db, organization_id)
        return [RoleResponse(id=str(r.id), name=r.name, level=r.level) for r in roles]

    async def list_members(
        self,
        db: AsyncSession,
        organization_id: UUID,
        is_active: bool | None = None,
    ) -> list[MemberResponse]:
        users: list[User] = await user_repository.get_by_org(db, organization_id, is_active)
        return [self._to_response(u) for u in users]

    async def create_member(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: MemberCreate,
    ) -> MemberResponse:
        """새 멤버를 생성합니다.

        Create a member of the organization.

        Raises:
            BadRequestError: 좌석 한도 초과 (Active member count reached max_users)
            DuplicateError: 이메일 중복 (Email already registered)
        """
        org: Organization | None = await organization_repository.get_by_id(db, organization_id)
        if org is None:
            raise NotFoundError("Organization not found")

        active: int = await user_repository.count_active(db, organization_id)
        if active >= org.max_users:
            raise BadRequestError(f"Member limit reached ({org.max_users} users)")

        email: str = data.email.strip().lower()
        if await auth_repository.get_user_by_email(db, email) is not None:
            raise DuplicateError("Email already registered")

        role: Role = await self._get_role(db, organization_id, data.role)
        user: User = await user_repository.create(db, {
            "organization_id": organization_id,
            "role_id": role.id,
            "email": email,
            "full_name": data.full_name,
            "password_hash": hash_password(data.password),
        })
        logger.info("member_created", organization_id=str(organization_id), user_id=str(user.id), role=role.name)
        return self._to_response(await self._get_member(db, organization_id, user.id))

    async def change_role(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        data: MemberRoleUpdate,
    ) -> MemberResponse:
        """멤버의 역할을 변경합니다.

        Change a member's role. The last active admin cannot be demoted.
        """
        user: User = await self._get_member(db, organization_id, user_id)
        role: Role = await self._get_role(db, organization_id, data.role)
        if role.level != ADMIN_LEVEL:
            await self._ensure_not_last_admin(db, organization_id, user)

        user.role = role
        await db.flush()
        # 역할 변경 시 기존 토큰 무효화 — Old tokens carry the previous role
        await auth_repository.delete_user_refresh_tokens(db, user.id)
        return self._to_response(user)

    async def update_member(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        current_user_id: UUID,
        data: MemberUpdate,
    ) -> MemberResponse:
        """멤버 정보를 수정합니다 (이름, 활성 상태).

        Update a member's name or active flag. Deactivation follows the same
        rules as removal.
        """
        user: User = await self._get_member(db, organization_id, user_id)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)

        if update_data.get("is_active") is False:
            if user.id == current_user_id:
                raise ForbiddenError("You cannot deactivate yourself")
            await self._ensure_not_last_admin(db, organization_id, user)
            await auth_repository.delete_user_refresh_tokens(db, user.id)
        elif update_data.get("is_active") is True and not user.is_active:
            org: Organization | None = await organization_repository.get_by_id(db, organization_id)
            active: int = await user_repository.count_active(db, organization_id)
            if org is not None and active >= org.max_users:
                raise BadRequestError(f"Member limit reached ({org.max_users} users)")

        for field, value in update_data.items():
            setattr(user, field, value)
        await db.flush()
        return self._to_response(user)

    async def remove_member(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        current_user_id: UUID,
    ) -> None:
        """멤버를 비활성화합니다 (소프트 삭제).

        Remove a member by deactivating the account and revoking its tokens.

        Raises:
            ForbiddenError: 자기 자신을 제거하려 할 때 (Cannot remove self)
        """
        if user_id == current_user_id:
            raise ForbiddenError("You cannot remove yourself")
        user: User = await self._get_member(db, organization_id, user_id)
        await self._ensure_not_last_admin(db, organization_id, user)

        user.is_active = False
        await auth_repository.delete_user_refresh_tokens(db, user.id)
        await db.flush()
        logger.info("member_removed", organization_id=str(organization_id), user_id=str(user_id))


# 싱글턴 인스턴스 — Singleton instance
member_service: MemberService = MemberService()
