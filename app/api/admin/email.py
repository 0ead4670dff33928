"""이메일 라우터 — 메일 계정, 동기화, 메일함, 스레드, 분류.

Email Router — Connected mailboxes, provider sync, the Hey-style views
(imbox / feed / paper_trail / screener), thread scoring and heuristic
categorization. Every endpoint is scoped to the caller's own mailboxes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_member
from app.database import get_db
from app.models.user import User
from app.schemas.common import BulkResultResponse, PaginatedResponse
from app.schemas.email import (
    CategorizeResponse,
    EmailAccountConnect,
    EmailAccountResponse,
    EmailDetailResponse,
    EmailFlagsUpdate,
    SyncRequest,
    SyncResultResponse,
    ThreadScoreResponse,
)
from app.services.email_service import email_service
from app.services.email_sync_service import email_sync_service

router: APIRouter = APIRouter()


# === 계정 (Accounts) ===

@router.get("/accounts", response_model=list[EmailAccountResponse])
async def list_accounts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> list[EmailAccountResponse]:
    return await email_service.list_accounts(db, current_user.id)


@router.post("/accounts", response_model=EmailAccountResponse, status_code=201)
async def connect_account(
    data: EmailAccountConnect,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> EmailAccountResponse:
    """메일 계정 연결.

    Register a mailbox already authorized with the provider (grant id).

    Args:
        data: 주소 및 grant ID (Address and provider grant id)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)

    Returns:
        EmailAccountResponse: 연결된 계정 (Connected account)
    """
    result: EmailAccountResponse = await email_service.connect_account(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.delete("/accounts/{account_id}", status_code=204)
async def disconnect_account(
    account_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> None:
    await email_service.disconnect_account(db, current_user.id, account_id)
    await db.commit()


@router.post("/accounts/{account_id}/sync", response_model=SyncResultResponse)
async def sync_account(
    account_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    data: Annotated[SyncRequest | None, Body()] = None,
) -> SyncResultResponse:
    """메일 동기화.

    Pull every message from the provider, storing new ones and refreshing
    the flags of known ones. A provider failure marks the account as
    errored and answers 502.
    """
    result: SyncResultResponse = await email_sync_service.sync_account(
        db, current_user.id, account_id, data.skip_classification if data else False
    )
    await db.commit()
    return result


# === 메일 (Emails) ===

@router.get("/messages", response_model=PaginatedResponse)
async def list_emails(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    view: Annotated[str | None, Query()] = None,
    account_id: Annotated[UUID | None, Query()] = None,
    unread_only: Annotated[bool, Query()] = False,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await email_service.list_emails(
        db, current_user.id, view, account_id, unread_only, page, per_page
    )


@router.post("/messages/categorize", response_model=BulkResultResponse)
async def categorize_all(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> BulkResultResponse:
    """미분류 메일 일괄 분류 (최대 500건)."""
    result: BulkResultResponse = await email_service.categorize_all(db, current_user.id)
    await db.commit()
    return result


@router.get("/messages/{email_id}", response_model=EmailDetailResponse)
async def get_email(
    email_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> EmailDetailResponse:
    """메일 상세 — 조회 시 읽음 처리 (Opening marks the email read)."""
    result: EmailDetailResponse = await email_service.get_email(db, current_user.id, email_id)
    await db.commit()
    return result


@router.patch("/messages/{email_id}", response_model=EmailDetailResponse)
async def update_flags(
    email_id: UUID,
    data: EmailFlagsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> EmailDetailResponse:
    result: EmailDetailResponse = await email_service.update_flags(db, current_user.id, email_id, data)
    await db.commit()
    return result


@router.post("/messages/{email_id}/categorize", response_model=CategorizeResponse)
async def categorize_email(
    email_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> CategorizeResponse:
    result: CategorizeResponse = await email_service.categorize_email_by_id(db, current_user.id, email_id)
    await db.commit()
    return result


# === 스레드 (Threads) ===

@router.get("/threads", response_model=PaginatedResponse)
async def list_threads(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    account_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await email_service.list_threads(db, current_user.id, account_id, page, per_page)


@router.post("/threads/score", response_model=BulkResultResponse)
async def score_all_threads(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> BulkResultResponse:
    result: BulkResultResponse = await email_service.score_all_threads(db, current_user.id)
    await db.commit()
    return result


@router.post("/threads/{thread_id}/score", response_model=ThreadScoreResponse)
async def score_thread(
    thread_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ThreadScoreResponse:
    """스레드 중요도 계산 — Score a thread (0-100) and store the result."""
    result: ThreadScoreResponse = await email_service.score_thread(db, current_user.id, thread_id)
    await db.commit()
    return result
