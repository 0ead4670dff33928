"""사용자 레포지토리 — 조직 멤버 조회 및 집계 쿼리.

User Repository — Member listing and counting queries.
Extends BaseRepository with role-aware lookups used by member management
(seat limits, last-admin protection) and notification fan-out.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.user import Role, User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    Provides organization-scoped user retrieval with eager-loaded roles.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_org(
        self,
        db: AsyncSession,
        organization_id: UUID,
        is_active: bool | None = None,
    ) -> list[User]:
        """조직에 속한 사용자 목록을 조회합니다.

        Retrieve users belonging to an organization, role loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            is_active: 활성 상태 필터 (Optional active filter)

        Returns:
            list[User]: 사용자 목록 (List of users ordered by creation)
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.organization_id == organization_id)
        )
        if is_active is not None:
            query = query.where(User.is_active == is_active)

        result = await db.execute(query.order_by(User.created_at))
        return list(result.scalars().all())

    async def get_detail(
        self,
        db: AsyncSession,
        user_id: UUID,
        organization_id: UUID,
    ) -> User | None:
        """사용자 상세 정보를 역할과 함께 조회합니다.

        Retrieve a member with role eagerly loaded.
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.id == user_id, User.organization_id == organization_id)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def count_active(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> int:
        """조직의 활성 사용자 수를 반환합니다.

        Count active members of an organization (seat limit check).
        """
        return await self.count(db, organization_id, {"is_active": True})

    async def count_active_with_level(
        self,
        db: AsyncSession,
        organization_id: UUID,
        level: int,
    ) -> int:
        """특정 역할 레벨의 활성 사용자 수를 반환합니다.

        Count active members holding the role at the given level.
        Used to protect the last remaining admin.
        """
        query: Select = (
            select(func.count())
            .select_from(User)
            .join(Role, Role.id == User.role_id)
            .where(
                User.organization_id == organization_id,
                User.is_active.is_(True),
                Role.level == level,
            )
        )
        return (await db.execute(query)).scalar() or 0

    async def get_ids_with_max_level(
        self,
        db: AsyncSession,
        organization_id: UUID,
        max_level: int,
    ) -> list[UUID]:
        """레벨이 max_level 이하인 활성 사용자 ID 목록을 반환합니다.

        Return ids of active members at or above an authority level.
        """
        query: Select = (
            select(User.id)
            .join(Role, Role.id == User.role_id)
            .where(
                User.organization_id == organization_id,
                User.is_active.is_(True),
                Role.level <= max_level,
            )
        )
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
