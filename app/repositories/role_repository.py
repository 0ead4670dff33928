"""역할 레포지토리 — 조직별 역할 조회.

Role Repository — Organization-scoped role queries.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role
from app.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """역할 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the roles table.
    """

    def __init__(self) -> None:
        super().__init__(Role)

    async def get_by_org(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> list[Role]:
        """조직에 속한 모든 역할을 레벨 순으로 조회합니다.

        Retrieve all roles belonging to an organization, ordered by level.
        """
        query: Select = (
            select(Role)
            .where(Role.organization_id == organization_id)
            .order_by(Role.level)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_name(
        self,
        db: AsyncSession,
        organization_id: UUID,
        name: str,
    ) -> Role | None:
        """조직 내 역할 이름으로 역할을 조회합니다.

        Retrieve a role by name within an organization.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            name: 역할 이름 (admin | manager | sales_rep)

        Returns:
            Role | None: 조회된 역할 또는 None (Found role or None)
        """
        result = await db.execute(
            select(Role).where(Role.organization_id == organization_id, Role.name == name)
        )
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
role_repository: RoleRepository = RoleRepository()
