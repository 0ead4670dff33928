"""연락처 레포지토리 — 연락처 검색 및 페이지네이션 쿼리.

Contact Repository — Filtered, paginated contact queries.
The owner filter implements sales_rep record scoping.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Contact
from app.repositories.base import BaseRepository


class ContactRepository(BaseRepository[Contact]):
    """연락처 레포지토리.

    Contact repository.

    Extends:
        BaseRepository[Contact]
    """

    def __init__(self) -> None:
        super().__init__(Contact)

    def _build_query(
        self,
        organization_id: UUID,
        owner_id: UUID | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> Select:
        query: Select = select(Contact).where(Contact.organization_id == organization_id)
        if owner_id is not None:
            query = query.where(Contact.owner_id == owner_id)
        if status is not None:
            query = query.where(Contact.status == status)
        if search:
            # 이름/이메일/회사 부분 일치 — Partial match on name, email or company
            pattern: str = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Contact.first_name.ilike(pattern),
                    Contact.last_name.ilike(pattern),
                    Contact.email.ilike(pattern),
                    Contact.company.ilike(pattern),
                )
            )
        return query

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_id: UUID | None = None,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Contact], int]:
        """필터 조건으로 연락처 목록을 페이지네이션하여 조회합니다.

        Retrieve a paginated, filtered contact list (newest first).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            owner_id: 담당자 필터, sales_rep 범위 제한 (Owner filter for sales_rep scoping)
            status: 상태 필터 (Status filter)
            search: 검색어 (Search term for name/email/company)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Contact], int]: (연락처 목록, 전체 개수)
        """
        query: Select = self._build_query(organization_id, owner_id, status, search)
        query = query.order_by(Contact.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
contact_repository: ContactRepository = ContactRepository()
