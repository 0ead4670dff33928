"""조직 레포지토리 — 조직 CRUD 및 슬러그 조회.

Organization Repository — CRUD queries for organizations.
Extends BaseRepository with slug lookups used for unique slug generation.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Organization
from app.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """조직 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the organizations table.
    """

    def __init__(self) -> None:
        super().__init__(Organization)

    async def slug_exists(
        self,
        db: AsyncSession,
        slug: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """슬러그 사용 여부를 확인합니다.

        Check whether a slug is taken, optionally ignoring one organization.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            slug: 확인할 슬러그 (Slug to check)
            exclude_id: 제외할 조직 ID (Organization to ignore, e.g. the one being updated)

        Returns:
            bool: 사용 중이면 True (True when the slug is taken)
        """
        query: Select = select(func.count()).select_from(Organization).where(Organization.slug == slug)
        if exclude_id is not None:
            query = query.where(Organization.id != exclude_id)
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0


# 싱글턴 인스턴스 — Singleton instance
organization_repository: OrganizationRepository = OrganizationRepository()
