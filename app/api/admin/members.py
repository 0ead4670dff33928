"""멤버 라우터 — 조직 멤버 및 역할 관리.

Members Router — Organization members and roles. Mutations are admin-only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin, require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.user import MemberCreate, MemberResponse, MemberRoleUpdate, MemberUpdate, RoleResponse
from app.services.member_service import member_service

router: APIRouter = APIRouter()


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[RoleResponse]:
    return await member_service.list_roles(db, current_user.organization_id)


@router.get("/members", response_model=list[MemberResponse])
async def list_members(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    is_active: bool | None = None,
) -> list[MemberResponse]:
    """멤버 목록 조회 — ``is_active`` 필터 선택."""
    return await member_service.list_members(db, current_user.organization_id, is_active)


@router.post("/members", response_model=MemberResponse, status_code=201)
async def create_member(
    data: MemberCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MemberResponse:
    """멤버를 추가합니다.

    Add a member. Rejected with 400 when the organization's seat limit
    (``max_users``) is reached, 409 when the email is taken.
    """
    result: MemberResponse = await member_service.create_member(db, current_user.organization_id, data)
    await db.commit()
    return result


@router.put("/members/{user_id}/role", response_model=MemberResponse)
async def change_role(
    user_id: UUID,
    data: MemberRoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MemberResponse:
    """역할 변경 — 마지막 관리자는 강등할 수 없습니다."""
    result: MemberResponse = await member_service.change_role(db, current_user.organization_id, user_id, data)
    await db.commit()
    return result


@router.patch("/members/{user_id}", response_model=MemberResponse)
async def update_member(
    user_id: UUID,
    data: MemberUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MemberResponse:
    result: MemberResponse = await member_service.update_member(
        db, current_user.organization_id, user_id, current_user.id, data
    )
    await db.commit()
    return result


@router.delete("/members/{user_id}", status_code=204)
async def remove_member(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    """멤버 제거 (비활성화) — 자기 자신은 제거할 수 없습니다."""
    await member_service.remove_member(db, current_user.organization_id, user_id, current_user.id)
    await db.commit()
