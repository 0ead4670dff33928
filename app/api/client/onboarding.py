"""클라이언트 온보딩 라우터 — 토큰 기반 단계별 진행.

Client Onboarding Router — The client walks the template's steps using the
access token from their invitation link. Unknown tokens answer 404 and
completed sessions reject further edits with 400.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.onboarding import (
    ClientSessionResponse,
    CompleteRequest,
    ProgressResponse,
    StepSaveRequest,
    StepSubmitRequest,
)
from app.services.onboarding_client_service import onboarding_client_service

router: APIRouter = APIRouter()


@router.get("/{token}", response_model=ClientSessionResponse)
async def get_session(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientSessionResponse:
    """세션 조회 — 템플릿, 응답, 현재 보이는 단계 포함."""
    return await onboarding_client_service.get_by_token(db, token)


@router.post("/{token}/start", response_model=ClientSessionResponse)
async def start(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientSessionResponse:
    result: ClientSessionResponse = await onboarding_client_service.start(db, token)
    await db.commit()
    return result


@router.put("/{token}/steps/{step_index}", response_model=ClientSessionResponse)
async def save_step(
    token: str,
    step_index: int,
    data: StepSaveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientSessionResponse:
    """단계 임시 저장 — 검증 없이 응답을 병합합니다 (Draft save, no validation)."""
    result: ClientSessionResponse = await onboarding_client_service.save_step(db, token, step_index, data.data)
    await db.commit()
    return result


@router.post("/{token}/steps/{step_index}/submit", response_model=ClientSessionResponse)
async def submit_step(
    token: str,
    step_index: int,
    data: StepSubmitRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientSessionResponse:
    """단계를 제출합니다.

    Validate the step's required fields, store the answers and advance to
    the next visible step. Conditional steps are re-evaluated against the
    merged responses.

    Args:
        token: 세션 접근 토큰 (Session access token)
        step_index: 단계 인덱스 (Step index in the template)
        data: 응답 및 소요 시간 (Answers and time spent)
        db: 비동기 데이터베이스 세션 (Async database session)

    Returns:
        ClientSessionResponse: 갱신된 세션 (Updated session)
    """
    result: ClientSessionResponse = await onboarding_client_service.submit_step(
        db, token, step_index, data.data, data.time_spent
    )
    await db.commit()
    return result


@router.post("/{token}/complete", response_model=ClientSessionResponse)
async def complete(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: CompleteRequest | None = None,
) -> ClientSessionResponse:
    """온보딩 완료 — 대기 중인 리마인더를 취소하고 담당자에게 알립니다."""
    result: ClientSessionResponse = await onboarding_client_service.complete(
        db, token, data.final_data if data else None
    )
    await db.commit()
    return result


@router.get("/{token}/progress", response_model=ProgressResponse)
async def get_progress(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgressResponse:
    return await onboarding_client_service.get_progress(db, token)
