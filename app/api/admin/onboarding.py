"""온보딩 관리 라우터 — 세션, 초대, 리마인더, 작업 생성.

Onboarding Admin Router — Client onboarding sessions and everything
managed around them: invitation emails, reminder schedules and
post-completion task generation. Admins and managers only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.onboarding import (
    CustomReminderRequest,
    OnboardingAnalyticsResponse,
    ReminderResponse,
    ReminderSettingsUpdate,
    ReminderStatsResponse,
    SessionCreate,
    SessionDetailResponse,
    SessionResponse,
    TaskGenerationResponse,
    TaskPreviewResponse,
)
from app.services.onboarding_service import onboarding_service
from app.services.reminder_service import reminder_service
from app.services.task_generation_service import task_generation_service

router: APIRouter = APIRouter()


# === 세션 (Sessions) ===

@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(
    data: SessionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SessionResponse:
    """온보딩 세션을 생성합니다.

    Create an onboarding session from a template for a client. A fresh
    access token is issued and the default reminder schedule is laid out.

    Args:
        data: 세션 생성 데이터 (Template, client and optional project)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 매니저 이상 사용자 (Authenticated manager+ user)

    Returns:
        SessionResponse: 생성된 세션 (Created session with its client link)
    """
    result: SessionResponse = await onboarding_service.create_session(db, current_user.organization_id, data)
    await db.commit()
    return result


@router.get("/sessions", response_model=PaginatedResponse)
async def list_sessions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    status: Annotated[str | None, Query()] = None,
    project_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await onboarding_service.list_sessions(
        db, current_user.organization_id, status, project_id, page, per_page
    )


@router.get("/analytics", response_model=OnboardingAnalyticsResponse)
async def get_analytics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> OnboardingAnalyticsResponse:
    """세션 통계 — 상태별 건수, 완료율, 평균 완료 시간."""
    return await onboarding_service.get_analytics(db, current_user.organization_id)


@router.get("/sessions/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SessionDetailResponse:
    return await onboarding_service.get_session(db, current_user.organization_id, session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> None:
    await onboarding_service.delete_session(db, current_user.organization_id, session_id)
    await db.commit()


@router.post("/sessions/{session_id}/regenerate-token", response_model=SessionResponse)
async def regenerate_token(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SessionResponse:
    """접근 토큰 재발급 — 이전 클라이언트 링크는 즉시 무효화됩니다."""
    result: SessionResponse = await onboarding_service.regenerate_token(
        db, current_user.organization_id, session_id
    )
    await db.commit()
    return result


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SessionResponse:
    result: SessionResponse = await onboarding_service.reset_session(
        db, current_user.organization_id, session_id
    )
    await db.commit()
    return result


@router.post("/sessions/{session_id}/send-invitation", response_model=SessionResponse)
async def send_invitation(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SessionResponse:
    """초대 메일 발송.

    Email the client their onboarding link. Returns 502 when the mail
    server is unavailable.
    """
    result: SessionResponse = await onboarding_service.send_invitation(
        db, current_user.organization_id, session_id
    )
    await db.commit()
    return result


# === 리마인더 (Reminders) ===

@router.get("/sessions/{session_id}/reminders", response_model=list[ReminderResponse])
async def list_session_reminders(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[ReminderResponse]:
    return await reminder_service.list_session_reminders(db, current_user.organization_id, session_id)


@router.put("/sessions/{session_id}/reminders/settings", response_model=list[ReminderResponse])
async def update_reminder_settings(
    session_id: UUID,
    data: ReminderSettingsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[ReminderResponse]:
    """리마인더 설정 변경.

    Toggle reminders for the session. Disabling cancels every pending
    reminder and a schedule change rebuilds the pending set.

    Returns:
        list[ReminderResponse]: 갱신된 리마인더 목록 (Reminders after the change)
    """
    result: list[ReminderResponse] = await reminder_service.update_reminder_settings(
        db, current_user.organization_id, session_id, data
    )
    await db.commit()
    return result


@router.post("/sessions/{session_id}/reminders", response_model=ReminderResponse, status_code=201)
async def create_custom_reminder(
    session_id: UUID,
    data: CustomReminderRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ReminderResponse:
    result: ReminderResponse = await reminder_service.create_custom_reminder(
        db, current_user.organization_id, session_id, data
    )
    await db.commit()
    return result


@router.get("/sessions/{session_id}/reminders/stats", response_model=ReminderStatsResponse)
async def get_reminder_stats(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ReminderStatsResponse:
    return await reminder_service.get_reminder_stats(db, current_user.organization_id, session_id)


# === 작업 생성 (Task generation) ===

@router.get("/sessions/{session_id}/tasks/preview", response_model=TaskPreviewResponse)
async def preview_tasks(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TaskPreviewResponse:
    """생성될 작업 미리보기 — 저장하지 않습니다 (Nothing is persisted)."""
    return await task_generation_service.preview_tasks(db, current_user.organization_id, session_id)


@router.post("/sessions/{session_id}/tasks/generate", response_model=TaskGenerationResponse)
async def generate_tasks(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TaskGenerationResponse:
    """완료된 세션에서 프로젝트 작업을 생성합니다.

    Generate project tasks from a completed session's responses. Rejected
    when tasks were already generated; use regenerate instead.
    """
    result: TaskGenerationResponse = await task_generation_service.generate_tasks(
        db, current_user.organization_id, session_id
    )
    await db.commit()
    return result


@router.post("/sessions/{session_id}/tasks/regenerate", response_model=TaskGenerationResponse)
async def regenerate_tasks(
    session_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TaskGenerationResponse:
    result: TaskGenerationResponse = await task_generation_service.regenerate_tasks(
        db, current_user.organization_id, session_id
    )
    await db.commit()
    return result
