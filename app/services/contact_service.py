"""연락처 서비스 — 연락처 CRUD 비즈니스 로직.

Contact Service — Business logic for CRM contacts.
A sales_rep only sees contacts they own; callers pass ``owner_scope``
(the caller's id for sales reps, None for admins and managers).
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Contact
from app.repositories.contact_repository import contact_repository
from app.schemas.common import PaginatedResponse
from app.schemas.crm import ContactCreate, ContactResponse, ContactUpdate
from app.utils.exceptions import NotFoundError


class ContactService:
    """연락처 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, contact: Contact) -> ContactResponse:
        return ContactResponse(
            id=str(contact.id),
            owner_id=str(contact.owner_id),
            first_name=contact.first_name,
            last_name=contact.last_name,
            email=contact.email,
            phone=contact.phone,
            company=contact.company,
            job_title=contact.job_title,
            status=contact.status,
            tags=contact.tags or [],
            notes=contact.notes,
            created_at=contact.created_at,
            updated_at=contact.updated_at,
        )

    async def _get_scoped(
        self,
        db: AsyncSession,
        organization_id: UUID,
        contact_id: UUID,
        owner_scope: UUID | None,
    ) -> Contact:
        """조직 및 담당자 범위 내의 연락처를 조회합니다.

        Fetch a contact inside the org; a sales rep gets 404 for contacts
        owned by someone else.
        """
        contact: Contact | None = await contact_repository.get_by_id(db, contact_id, organization_id)
        if contact is None or (owner_scope is not None and contact.owner_id != owner_scope):
            raise NotFoundError("Contact not found")
        return contact

    async def list_contacts(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        """연락처 목록을 조회합니다.

        List contacts with status and free-text search filters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 ID (Organization UUID)
            owner_scope: 담당자 범위 (Owner restriction for sales reps)
            status: 상태 필터 (Status filter)
            search: 이름/이메일/회사 검색어 (Name, email or company search)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)
        """
        items: Sequence[Contact]
        total: int
        items, total = await contact_repository.get_filtered(
            db, organization_id, owner_scope, status, search, page, per_page
        )
        return PaginatedResponse(
            items=[self._to_response(c) for c in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_contact(
        self,
        db: AsyncSession,
        organization_id: UUID,
        contact_id: UUID,
        owner_scope: UUID | None = None,
    ) -> ContactResponse:
        contact: Contact = await self._get_scoped(db, organization_id, contact_id, owner_scope)
        return self._to_response(contact)

    async def create_contact(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_id: UUID,
        data: ContactCreate,
    ) -> ContactResponse:
        """연락처를 생성합니다 — 담당자는 요청자 (Owner is the caller)."""
        contact: Contact = await contact_repository.create(db, {
            "organization_id": organization_id,
            "owner_id": owner_id,
            **data.model_dump(),
        })
        return self._to_response(contact)

    async def update_contact(
        self,
        db: AsyncSession,
        organization_id: UUID,
        contact_id: UUID,
        data: ContactUpdate,
        owner_scope: UUID | None = None,
    ) -> ContactResponse:
        contact: Contact = await self._get_scoped(db, organization_id, contact_id, owner_scope)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(contact, field, value)
        await db.flush()
        await db.refresh(contact)
        return self._to_response(contact)

    async def delete_contact(
        self,
        db: AsyncSession,
        organization_id: UUID,
        contact_id: UUID,
        owner_scope: UUID | None = None,
    ) -> None:
        contact: Contact = await self._get_scoped(db, organization_id, contact_id, owner_scope)
        await db.delete(contact)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
contact_service: ContactService = ContactService()
