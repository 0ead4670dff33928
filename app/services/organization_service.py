"""조직 서비스 — 현재 조직 조회 및 수정 비즈니스 로직.

Organization Service — Business logic for the caller's own organization.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Organization
from app.repositories.organization_repository import organization_repository
from app.schemas.organization import OrganizationResponse, OrganizationUpdate
from app.utils.exceptions import DuplicateError, NotFoundError


class OrganizationService:
    """조직 관련 비즈니스 로직을 처리하는 서비스.

    Service handling organization business logic.
    Provides read and update operations scoped to the current organization.
    """

    def _to_response(self, org: Organization) -> OrganizationResponse:
        return OrganizationResponse(
            id=str(org.id),
            name=org.name,
            slug=org.slug,
            plan=org.plan,
            status=org.status,
            max_users=org.max_users,
            is_active=org.is_active,
            created_at=org.created_at,
        )

    async def get_my_organization(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> OrganizationResponse:
        """현재 조직 정보를 조회합니다.

        Retrieve the current organization's details.

        Raises:
            NotFoundError: 조직을 찾을 수 없을 때 (Organization not found)
        """
        org: Organization | None = await organization_repository.get_by_id(db, organization_id)
        if org is None:
            raise NotFoundError("Organization not found")
        return self._to_response(org)

    async def update_my_organization(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: OrganizationUpdate,
    ) -> OrganizationResponse:
        """현재 조직 정보를 수정합니다.

        Update the current organization. A new slug must not be used by any
        other organization.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID from JWT)
            data: 수정할 데이터 (Update data)

        Returns:
            OrganizationResponse: 수정된 조직 응답 (Updated organization response)

        Raises:
            DuplicateError: 슬러그가 이미 사용 중일 때 (Slug already taken)
            NotFoundError: 조직을 찾을 수 없을 때 (Organization not found)
        """
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        slug: str | None = update_data.get("slug")
        if slug is not None and await organization_repository.slug_exists(db, slug, exclude_id=organization_id):
            raise DuplicateError("Organization slug already in use")

        org: Organization | None = await organization_repository.update(db, organization_id, update_data)
        if org is None:
            raise NotFoundError("Organization not found")
        return self._to_response(org)


# 싱글턴 인스턴스 — Singleton instance
organization_service: OrganizationService = OrganizationService()
