"""조직 라우터 — 내 워크스페이스 조회/수정.

Organization Router — Read and update the caller's own organization.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.organization import OrganizationResponse, OrganizationUpdate
from app.services.organization_service import organization_service

router: APIRouter = APIRouter()


@router.get("", response_model=OrganizationResponse)
async def get_my_organization(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> OrganizationResponse:
    return await organization_service.get_my_organization(db, current_user.organization_id)


@router.patch("", response_model=OrganizationResponse)
async def update_my_organization(
    data: OrganizationUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> OrganizationResponse:
    """조직 정보 수정 (관리자 전용).

    Update the organization. The slug must stay unique.

    Args:
        data: 수정할 필드 (Fields to update)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 관리자 (Authenticated admin)

    Returns:
        OrganizationResponse: 수정된 조직 (Updated organization)
    """
    result: OrganizationResponse = await organization_service.update_my_organization(
        db, current_user.organization_id, data
    )
    await db.commit()
    return result
