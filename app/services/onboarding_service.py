"""온보딩 세션 서비스 (관리자) — 세션 생성, 조회, 초대, 분석.

Onboarding Session Service (admin side) — Creates sessions from the
code-defined templates, manages access tokens, sends invitations and
reports analytics. The public client portal lives in
``onboarding_client_service``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Sequence
from uuid import UUID, uuid4

import aiosmtplib
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.onboarding import OnboardingSession
from app.models.project import Project
from app.repositories.onboarding_repository import onboarding_session_repository
from app.schemas.common import PaginatedResponse
from app.schemas.onboarding import (
    OnboardingAnalyticsResponse,
    SessionCreate,
    SessionDetailResponse,
    SessionResponse,
)
from app.services.condition_evaluator import get_skipped_steps, get_visible_steps
from app.services.onboarding_templates import estimate_total_minutes, get_template_steps
from app.services.project_service import project_service
from app.services.reminder_scheduler import get_recommended_schedule
from app.services.reminder_service import reminder_service, session_email_context
from app.services.reminder_templates import build_invitation_email, get_onboarding_url
from app.utils.email import send_email
from app.utils.exceptions import BadRequestError, ExternalServiceError, NotFoundError

logger = structlog.get_logger(__name__)


def generate_access_token() -> str:
    """클라이언트 접근 토큰 — 32자 hex (uuid4)."""
    return uuid4().hex


def new_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.now(timezone.utc)) + timedelta(days=settings.ONBOARDING_EXPIRY_DAYS)


class OnboardingService:
    """온보딩 세션 관리 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, session: OnboardingSession) -> SessionResponse:
        return SessionResponse(**self._base_fields(session))

    def _base_fields(self, session: OnboardingSession) -> dict[str, Any]:
        return {
            "id": str(session.id),
            "project_id": str(session.project_id),
            "access_token": session.access_token,
            "onboarding_url": get_onboarding_url(session.access_token),
            "onboarding_type": session.onboarding_type,
            "status": session.status,
            "current_step": session.current_step,
            "total_steps": len(session.steps or []),
            "completion_percentage": session.completion_percentage,
            "client_email": session.client_email,
            "client_name": session.client_name,
            "started_at": session.started_at,
            "completed_at": session.completed_at,
            "last_activity_at": session.last_activity_at,
            "expires_at": session.expires_at,
            "reminder_schedule": session.reminder_schedule,
            "reminder_enabled": session.reminder_enabled,
            "reminder_count": session.reminder_count,
            "tasks_generated": session.tasks_generated,
            "task_count": session.task_count,
            "created_at": session.created_at,
        }

    def _to_detail(self, session: OnboardingSession) -> SessionDetailResponse:
        return SessionDetailResponse(
            **self._base_fields(session),
            steps=session.steps or [],
            responses=session.responses or {},
            visible_steps=session.visible_steps,
            skipped_steps=session.skipped_steps,
        )

    async def get_session_model(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> OnboardingSession:
        session: OnboardingSession | None = await onboarding_session_repository.get_with_project(
            db, session_id, organization_id
        )
        if session is None:
            raise NotFoundError("Onboarding session not found")
        return session

    async def _create(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project: Project,
        onboarding_type: str,
        client_email: str | None,
        client_name: str | None,
        reminder_schedule: str | None,
    ) -> OnboardingSession:
        steps: list[dict[str, Any]] = get_template_steps(onboarding_type)
        schedule: str = reminder_schedule or get_recommended_schedule(project.priority, project.budget)
        now: datetime = datetime.now(timezone.utc)

        session: OnboardingSession = await onboarding_session_repository.create(db, {
            "project_id": project.id,
            "organization_id": organization_id,
            "access_token": generate_access_token(),
            "onboarding_type": onboarding_type,
            "status": "pending",
            "steps": steps,
            "responses": {},
            "current_step": 0,
            "completion_percentage": 0,
            "visible_steps": get_visible_steps(steps, {}),
            "skipped_steps": get_skipped_steps(steps, {}),
            "client_email": client_email.strip().lower() if client_email else None,
            "client_name": client_name,
            "expires_at": new_expiry(now),
            "reminder_schedule": schedule,
            "reminder_enabled": True,
        })
        await reminder_service.schedule_session_reminders(db, session)
        logger.info(
            "onboarding_session_created",
            session_id=str(session.id),
            project_id=str(project.id),
            onboarding_type=onboarding_type,
            reminder_schedule=schedule,
        )
        return session

    async def create_session(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: SessionCreate,
    ) -> SessionResponse:
        """온보딩 세션을 생성합니다.

        Create a session for a project. Steps come from the template for
        the onboarding type (generic when there is none). Without an
        explicit reminder schedule one is recommended from the project's
        priority and budget; the schedule's reminders are queued right away.

        Raises:
            NotFoundError: 프로젝트를 찾을 수 없을 때 (Project not found)
        """
        try:
            project_id: UUID = UUID(data.project_id)
        except ValueError:
            raise BadRequestError("Invalid project_id")
        project: Project = await project_service.get_project_model(db, organization_id, project_id)
        session: OnboardingSession = await self._create(
            db,
            organization_id,
            project,
            data.onboarding_type,
            data.client_email,
            data.client_name,
            data.reminder_schedule,
        )
        return self._to_response(session)

    async def list_sessions(
        self,
        db: AsyncSession,
        organization_id: UUID,
        status: str | None = None,
        project_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[OnboardingSession]
        total: int
        items, total = await onboarding_session_repository.get_filtered(
            db, organization_id, status, project_id, page, per_page
        )
        return PaginatedResponse(
            items=[self._to_response(s) for s in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_session(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> SessionDetailResponse:
        return self._to_detail(await self.get_session_model(db, organization_id, session_id))

    async def regenerate_token(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> SessionResponse:
        """접근 토큰을 재발급합니다 — 기존 링크는 무효, 만료일 재설정."""
        session: OnboardingSession = await self.get_session_model(db, organization_id, session_id)
        session.access_token = generate_access_token()
        session.expires_at = new_expiry()
        await db.flush()
        logger.info("onboarding_token_regenerated", session_id=str(session.id))
        return self._to_response(session)

    async def delete_session(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> None:
        session: OnboardingSession = await self.get_session_model(db, organization_id, session_id)
        await db.delete(session)
        await db.flush()

    async def reset_session(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> SessionResponse:
        """세션을 초기화합니다.

        Delete the session and create a fresh one for the same project,
        onboarding type and client. The new session gets a new token.
        """
        old: OnboardingSession = await self.get_session_model(db, organization_id, session_id)
        project: Project = old.project
        onboarding_type: str = old.onboarding_type
        client_email: str | None = old.client_email
        client_name: str | None = old.client_name
        reminder_schedule: str = old.reminder_schedule

        await db.delete(old)
        await db.flush()

        session: OnboardingSession = await self._create(
            db, organization_id, project, onboarding_type, client_email, client_name, reminder_schedule
        )
        logger.info("onboarding_session_reset", old_session_id=str(session_id), session_id=str(session.id))
        return self._to_response(session)

    async def get_analytics(
        self,
        db: AsyncSession,
        organization_id: UUID,
    ) -> OnboardingAnalyticsResponse:
        """온보딩 분석 — 상태별 건수, 완료율, 평균 진행률."""
        by_status: dict[str, int]
        average: float
        by_status, average = await onboarding_session_repository.get_status_summary(db, organization_id)
        total: int = sum(by_status.values())
        completed: int = by_status.get("completed", 0)
        return OnboardingAnalyticsResponse(
            total=total,
            completed=completed,
            in_progress=by_status.get("in_progress", 0),
            pending=by_status.get("pending", 0),
            abandoned=by_status.get("abandoned", 0),
            completion_rate=round(completed / total * 100, 2) if total else 0.0,
            average_completion=round(average, 2),
        )

    async def send_invitation(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> SessionResponse:
        """클라이언트에게 온보딩 초대 이메일을 보냅니다.

        Email the client the portal link with the step count and the
        estimated completion time.

        Raises:
            BadRequestError: 클라이언트 이메일이 없거나 세션이 완료됨
            ExternalServiceError: SMTP 미설정 또는 발송 실패
        """
        session: OnboardingSession = await self.get_session_model(db, organization_id, session_id)
        if not session.client_email:
            raise BadRequestError("Session has no client email")
        if session.status == "completed":
            raise BadRequestError("Onboarding session is already completed")

        email: dict[str, str] = build_invitation_email(
            session_email_context(session),
            recipient_name=session.client_name or "there",
            estimated_minutes=estimate_total_minutes(session.steps or []),
        )
        try:
            sent: bool = await send_email(session.client_email, email["subject"], email["html"], email["text"])
        except aiosmtplib.SMTPException as exc:
            logger.error("invitation_send_failed", session_id=str(session.id), error=str(exc))
            raise ExternalServiceError("Failed to send invitation email")
        if not sent:
            raise ExternalServiceError("Email delivery is not configured")

        logger.info("invitation_sent", session_id=str(session.id), to=session.client_email)
        return self._to_response(session)


# 싱글턴 인스턴스 — Singleton instance
onboarding_service: OnboardingService = OnboardingService()
