"""발신자 스크리닝 라우터.

Screening Router — Hey-style sender screening: first-time senders wait in
the screener until the user routes them to imbox, feed, paper trail, or
blocks them.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_member
from app.database import get_db
from app.models.user import User
from app.schemas.email import (
    BlockedSenderResponse,
    ScreeningDecisionResponse,
    ScreenSenderRequest,
    ScreenSenderResponse,
    UnscreenedSenderResponse,
)
from app.services.screening_service import screening_service

router: APIRouter = APIRouter()


@router.get("/unscreened", response_model=list[UnscreenedSenderResponse])
async def get_unscreened_senders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> list[UnscreenedSenderResponse]:
    """스크리너 대기 발신자 — 발신자별로 묶은 대기 메일 목록."""
    return await screening_service.get_unscreened_senders(db, current_user.id)


@router.post("", response_model=ScreenSenderResponse)
async def screen_sender(
    data: ScreenSenderRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ScreenSenderResponse:
    """발신자를 분류합니다.

    Record a screening decision for a sender and relabel every stored
    email from that address. ``blocked`` also adds the sender to the
    block list.

    Args:
        data: 발신자 주소와 결정 (Sender address and decision)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)

    Returns:
        ScreenSenderResponse: 저장된 결정과 갱신된 메일 수
                              (Stored decision and relabelled email count)
    """
    result: ScreenSenderResponse = await screening_service.screen_sender(db, current_user.id, data)
    await db.commit()
    return result


@router.get("/decisions", response_model=list[ScreeningDecisionResponse])
async def list_screening_decisions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    decision: Annotated[str | None, Query()] = None,
) -> list[ScreeningDecisionResponse]:
    return await screening_service.list_screening_decisions(db, current_user.id, decision)


@router.delete("/decisions/{screening_id}", status_code=204)
async def delete_screening_decision(
    screening_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    await screening_service.delete_screening_decision(db, current_user.id, screening_id)
    await db.commit()


@router.get("/blocked", response_model=list[BlockedSenderResponse])
async def list_blocked_senders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> list[BlockedSenderResponse]:
    return await screening_service.list_blocked_senders(db, current_user.id)


@router.delete("/blocked/{email_address}", status_code=204)
async def unblock_sender(
    email_address: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    """차단 해제 — 해당 발신자의 메일은 다시 스크리너로 돌아갑니다."""
    await screening_service.unblock_sender(db, current_user.id, email_address)
    await db.commit()
