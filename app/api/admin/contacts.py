"""연락처 라우터 — CRM 연락처 CRUD.

Contacts Router — CRUD for CRM contacts. Sales reps only reach the
contacts they own; admins and managers see the whole organization.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import owner_scope, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.crm import ContactCreate, ContactResponse, ContactUpdate
from app.services.contact_service import contact_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_contacts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    status: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """연락처 목록을 조회합니다.

    List contacts, optionally filtered by status and a name/email/company
    search term.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)
        status: 상태 필터 (Status filter)
        search: 검색어 (Search term)
        page: 페이지 번호 (Page number)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        PaginatedResponse: 페이지네이션된 연락처 목록 (Paginated contacts)
    """
    return await contact_service.list_contacts(
        db, current_user.organization_id, owner_scope(current_user), status, search, page, per_page
    )


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ContactResponse:
    return await contact_service.get_contact(
        db, current_user.organization_id, contact_id, owner_scope(current_user)
    )


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    data: ContactCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ContactResponse:
    """연락처 생성 — 호출자가 소유자가 됩니다 (The caller becomes the owner)."""
    result: ContactResponse = await contact_service.create_contact(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: UUID,
    data: ContactUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ContactResponse:
    result: ContactResponse = await contact_service.update_contact(
        db, current_user.organization_id, contact_id, data, owner_scope(current_user)
    )
    await db.commit()
    return result


@router.delete("/{contact_id}", status_code=204)
async def delete_contact(
    contact_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    await contact_service.delete_contact(
        db, current_user.organization_id, contact_id, owner_scope(current_user)
    )
    await db.commit()
