"""온보딩 클라이언트 포털 서비스 — 토큰 기반 공개 API.

Onboarding Client Service — Business logic behind the public, token
addressed onboarding portal: loading the session, autosaving and
submitting steps, completing and reporting progress.

Responses are stored keyed by the step index as a string ("0", "1", ...).
Step and field conditions are evaluated against the flattened responses.
"""

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.onboarding import OnboardingResponse, OnboardingSession
from app.repositories.onboarding_repository import (
    onboarding_response_repository,
    onboarding_session_repository,
)
from app.schemas.onboarding import ClientSessionResponse, ProgressResponse
from app.services.condition_evaluator import get_skipped_steps, get_visible_steps
from app.services.notification_service import notification_service
from app.services.onboarding_templates import flatten_responses
from app.services.reminder_scheduler import days_until_expiration
from app.services.reminder_service import reminder_service
from app.services.reminder_templates import build_completion_notice
from app.utils.email import send_email
from app.utils.exceptions import BadRequestError, NotFoundError

logger = structlog.get_logger(__name__)


def _utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def is_expired(session: OnboardingSession, now: datetime | None = None) -> bool:
    if session.expires_at is None:
        return False
    return (now or datetime.now(timezone.utc)) > _utc(session.expires_at)


def completion_from_saved(responses: dict[str, Any], total_steps: int) -> int:
    """임시 저장 기준 진행률 — round(saved steps / total * 100)."""
    if total_steps <= 0:
        return 0
    return min(100, round(len(responses) / total_steps * 100))


def completion_from_submitted(step_index: int, total_steps: int) -> int:
    """제출 기준 진행률 — round(min(idx + 1, total) / total * 100)."""
    if total_steps <= 0:
        return 0
    return round(min(step_index + 1, total_steps) / total_steps * 100)


class OnboardingClientService:
    """클라이언트 온보딩 포털 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, session: OnboardingSession) -> ClientSessionResponse:
        return ClientSessionResponse(
            id=str(session.id),
            onboarding_type=session.onboarding_type,
            status=session.status,
            client_name=session.client_name,
            project_name=session.project.name if session.project is not None else "",
            steps=session.steps or [],
            responses=session.responses or {},
            current_step=session.current_step,
            completion_percentage=session.completion_percentage,
            visible_steps=session.visible_steps or [],
            expires_at=session.expires_at,
        )

    async def _load(self, db: AsyncSession, access_token: str) -> OnboardingSession:
        session: OnboardingSession | None = await onboarding_session_repository.get_by_token(db, access_token)
        if session is None:
            raise NotFoundError("Onboarding session not found")
        return session

    async def _load_writable(self, db: AsyncSession, access_token: str) -> OnboardingSession:
        """수정 가능한 세션 — 만료되었거나 완료된 세션은 거부합니다."""
        session: OnboardingSession = await self._load(db, access_token)
        if is_expired(session):
            raise BadRequestError("Onboarding session has expired")
        if session.status == "completed":
            raise BadRequestError("Onboarding session is already completed")
        return session

    def _check_step_index(self, session: OnboardingSession, step_index: int) -> None:
        if step_index < 0 or step_index >= len(session.steps or []):
            raise BadRequestError("Invalid step index")

    def _apply_response(
        self,
        session: OnboardingSession,
        step_index: int,
        data: dict[str, Any],
        now: datetime,
    ) -> None:
        """응답을 병합하고 표시 단계를 다시 계산합니다.

        JSONB columns are reassigned rather than mutated in place so the
        change is tracked.
        """
        responses: dict[str, Any] = dict(session.responses or {})
        responses[str(step_index)] = data
        session.responses = responses

        flat: dict[str, Any] = flatten_responses(responses)
        steps: list[dict[str, Any]] = session.steps or []
        session.visible_steps = get_visible_steps(steps, flat)
        session.skipped_steps = get_skipped_steps(steps, flat)
        session.last_activity_at = now
        if session.status == "pending":
            session.status = "in_progress"
            session.started_at = session.started_at or now

    async def get_by_token(self, db: AsyncSession, access_token: str) -> ClientSessionResponse:
        """토큰으로 세션을 조회합니다.

        Raises:
            NotFoundError: 알 수 없는 토큰 (Unknown token)
            BadRequestError: 만료된 세션 (Expired session)
        """
        session: OnboardingSession = await self._load(db, access_token)
        if is_expired(session):
            raise BadRequestError("Onboarding session has expired")
        return self._to_response(session)

    async def start(self, db: AsyncSession, access_token: str) -> ClientSessionResponse:
        """온보딩을 시작합니다 — pending → in_progress. 그 외 상태는 그대로."""
        session: OnboardingSession = await self._load(db, access_token)
        if is_expired(session):
            raise BadRequestError("Onboarding session has expired")
        if session.status == "pending":
            now: datetime = datetime.now(timezone.utc)
            session.status = "in_progress"
            session.started_at = now
            session.last_activity_at = now
            await db.flush()
            logger.info("onboarding_started", session_id=str(session.id))
        return self._to_response(session)

    async def save_step(
        self,
        db: AsyncSession,
        access_token: str,
        step_index: int,
        data: dict[str, Any],
    ) -> ClientSessionResponse:
        """단계 응답을 임시 저장합니다 (Autosave).

        Progress is the share of steps with a saved response;
        ``current_step`` only moves forward.
        """
        session: OnboardingSession = await self._load_writable(db, access_token)
        self._check_step_index(session, step_index)
        now: datetime = datetime.now(timezone.utc)

        self._apply_response(session, step_index, data, now)
        session.completion_percentage = completion_from_saved(session.responses, len(session.steps or []))
        if step_index > session.current_step:
            session.current_step = step_index
        await db.flush()
        return self._to_response(session)

    async def submit_step(
        self,
        db: AsyncSession,
        access_token: str,
        step_index: int,
        data: dict[str, Any],
        time_spent: int | None = None,
    ) -> ClientSessionResponse:
        """단계를 제출합니다.

        Record an analytics row for the step, merge the response and move
        ``current_step`` past it.
        """
        session: OnboardingSession = await self._load_writable(db, access_token)
        self._check_step_index(session, step_index)
        now: datetime = datetime.now(timezone.utc)
        total: int = len(session.steps or [])

        await onboarding_response_repository.create(db, {
            "session_id": session.id,
            "step_index": step_index,
            "step_type": session.steps[step_index].get("type", "form"),
            "response_data": data,
            "time_spent": time_spent,
        })
        self._apply_response(session, step_index, data, now)
        session.current_step = step_index + 1
        session.completion_percentage = completion_from_submitted(step_index, total)
        await db.flush()
        return self._to_response(session)

    async def complete(
        self,
        db: AsyncSession,
        access_token: str,
        final_data: dict[str, Any] | None = None,
    ) -> ClientSessionResponse:
        """온보딩을 완료합니다.

        Mark the session completed, cancel its pending reminders, notify the
        project assignee and the organization's admins and managers in-app,
        and email ``ADMIN_NOTIFICATION_EMAIL`` when configured. Email
        failures are logged, never raised. Completing an already completed
        session returns it unchanged.
        """
        session: OnboardingSession = await self._load(db, access_token)
        if session.status == "completed":
            return self._to_response(session)
        if is_expired(session):
            raise BadRequestError("Onboarding session has expired")
        now: datetime = datetime.now(timezone.utc)
        total: int = len(session.steps or [])

        if final_data and total > 0:
            self._apply_response(session, total - 1, final_data, now)

        session.status = "completed"
        session.completion_percentage = 100
        session.completed_at = now
        session.last_activity_at = now
        session.started_at = session.started_at or now
        await db.flush()

        await reminder_service.cancel_session_reminders(db, session.id)

        project_name: str = session.project.name if session.project is not None else "a project"
        client: str = session.client_name or session.client_email or "A client"
        assignee = session.project.assigned_to if session.project is not None else None
        await notification_service.notify_admins(
            db,
            session.organization_id,
            "onboarding_completed",
            f"{client} completed onboarding for {project_name}",
            reference_type="onboarding_session",
            reference_id=session.id,
            extra_user_ids=[assignee] if assignee else None,
        )
        logger.info("onboarding_completed", session_id=str(session.id), project=project_name)

        await self._notify_admin_email(session, project_name)
        return self._to_response(session)

    async def _notify_admin_email(self, session: OnboardingSession, project_name: str) -> None:
        if not settings.ADMIN_NOTIFICATION_EMAIL:
            return
        notice: dict[str, str] = build_completion_notice(
            project_name,
            session.client_name,
            session.client_email,
            f"{settings.APP_URL.rstrip('/')}/dashboard/onboarding/{session.id}",
        )
        try:
            await send_email(settings.ADMIN_NOTIFICATION_EMAIL, notice["subject"], notice["html"], notice["text"])
        except Exception as exc:
            logger.error("completion_email_failed", session_id=str(session.id), error=str(exc))

    async def get_progress(self, db: AsyncSession, access_token: str) -> ProgressResponse:
        """진행 상황을 조회합니다 (만료 여부 포함)."""
        session: OnboardingSession = await self._load(db, access_token)
        steps: list[dict[str, Any]] = session.steps or []
        visible: list[int] = session.visible_steps
        if visible is None:
            visible = get_visible_steps(steps, flatten_responses(session.responses or {}))
        return ProgressResponse(
            status=session.status,
            current_step=session.current_step,
            total_steps=len(steps),
            visible_steps=visible,
            completion_percentage=session.completion_percentage,
            is_expired=is_expired(session),
            days_until_expiration=days_until_expiration(session.expires_at),
        )


# 싱글턴 인스턴스 — Singleton instance
onboarding_client_service: OnboardingClientService = OnboardingClientService()
