"""딜 라우터 — 파이프라인 단계 및 딜 CRUD.

Deals Router — Pipeline stages and deals.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import owner_scope, require_admin, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.crm import DealCreate, DealResponse, DealStageCreate, DealStageResponse, DealUpdate
from app.services.deal_service import deal_service

router: APIRouter = APIRouter()


# === 파이프라인 단계 (Deal stages) ===

@router.get("/deal-stages", response_model=list[DealStageResponse])
async def list_stages(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> list[DealStageResponse]:
    """파이프라인 단계 목록 — 순서대로 (Ordered by position)."""
    return await deal_service.list_stages(db, current_user.organization_id)


@router.post("/deal-stages", response_model=DealStageResponse, status_code=201)
async def create_stage(
    data: DealStageCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> DealStageResponse:
    result: DealStageResponse = await deal_service.create_stage(db, current_user.organization_id, data)
    await db.commit()
    return result


# === 딜 (Deals) ===

@router.get("/deals", response_model=PaginatedResponse)
async def list_deals(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    stage: Annotated[str | None, Query()] = None,
    contact_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """딜 목록을 조회합니다.

    List deals, optionally filtered by stage name and contact.

    Args:
        stage: 단계 이름 필터 (Stage name filter)
        contact_id: 연락처 필터 (Contact filter)
        page: 페이지 번호 (Page number)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        PaginatedResponse: 페이지네이션된 딜 목록 (Paginated deals)
    """
    return await deal_service.list_deals(
        db, current_user.organization_id, owner_scope(current_user), stage, contact_id, page, per_page
    )


@router.get("/deals/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> DealResponse:
    return await deal_service.get_deal(db, current_user.organization_id, deal_id, owner_scope(current_user))


@router.post("/deals", response_model=DealResponse, status_code=201)
async def create_deal(
    data: DealCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> DealResponse:
    """딜 생성 — 단계 이름은 조직의 파이프라인 단계와 일치해야 합니다.

    Create a deal owned by the caller. The stage must name one of the
    organization's pipeline stages (case-insensitive).
    """
    result: DealResponse = await deal_service.create_deal(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.patch("/deals/{deal_id}", response_model=DealResponse)
async def update_deal(
    deal_id: UUID,
    data: DealUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> DealResponse:
    result: DealResponse = await deal_service.update_deal(
        db, current_user.organization_id, deal_id, data, owner_scope(current_user)
    )
    await db.commit()
    return result


@router.delete("/deals/{deal_id}", status_code=204)
async def delete_deal(
    deal_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    await deal_service.delete_deal(db, current_user.organization_id, deal_id, owner_scope(current_user))
    await db.commit()
