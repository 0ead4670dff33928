"""활동 라우터 — 통화/메일/미팅/할일/메모 기록.

Activities Router — Calls, emails, meetings, tasks and notes logged
against contacts and deals.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import owner_scope, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.crm import ActivityComplete, ActivityCreate, ActivityResponse, ActivityUpdate
from app.services.activity_service import activity_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_activities(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    contact_id: Annotated[UUID | None, Query()] = None,
    deal_id: Annotated[UUID | None, Query()] = None,
    completed: Annotated[bool | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await activity_service.list_activities(
        db,
        current_user.organization_id,
        owner_scope(current_user),
        contact_id,
        deal_id,
        completed,
        page,
        per_page,
    )


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ActivityResponse:
    return await activity_service.get_activity(
        db, current_user.organization_id, activity_id, owner_scope(current_user)
    )


@router.post("", response_model=ActivityResponse, status_code=201)
async def create_activity(
    data: ActivityCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ActivityResponse:
    """활동을 기록합니다.

    Log an activity. Linked contact and deal must belong to the
    organization.

    Args:
        data: 활동 생성 데이터 (Activity creation data)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)

    Returns:
        ActivityResponse: 생성된 활동 (Created activity)
    """
    result: ActivityResponse = await activity_service.create_activity(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: UUID,
    data: ActivityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ActivityResponse:
    result: ActivityResponse = await activity_service.update_activity(
        db, current_user.organization_id, activity_id, data, owner_scope(current_user)
    )
    await db.commit()
    return result


@router.patch("/{activity_id}/complete", response_model=ActivityResponse)
async def set_completed(
    activity_id: UUID,
    data: ActivityComplete,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ActivityResponse:
    """완료 상태 토글 — Toggle completion and stamp/clear completed_at."""
    result: ActivityResponse = await activity_service.set_completed(
        db, current_user.organization_id, activity_id, data.completed, owner_scope(current_user)
    )
    await db.commit()
    return result


@router.delete("/{activity_id}", status_code=204)
async def delete_activity(
    activity_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    await activity_service.delete_activity(
        db, current_user.organization_id, activity_id, owner_scope(current_user)
    )
    await db.commit()
