"""온보딩 리마인더 서비스 — 예약, 취소, 설정 변경 및 크론 발송.

Onboarding Reminder Service — Schedules, cancels and sends onboarding
reminder emails. The cron job drains due reminders in scheduled order and
reports a continue-and-count summary.
"""

import time
from collections import Counter
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.onboarding import OnboardingReminder, OnboardingSession
from app.repositories.onboarding_repository import (
    onboarding_reminder_repository,
    onboarding_session_repository,
)
from app.schemas.onboarding import (
    CustomReminderRequest,
    ReminderResponse,
    ReminderRunResponse,
    ReminderSettingsUpdate,
    ReminderStatsResponse,
)
from app.services.reminder_scheduler import (
    format_reminder_type,
    generate_reminder_schedule,
    should_send_reminder,
)
from app.services.reminder_templates import get_reminder_email
from app.utils.email import send_email
from app.utils.exceptions import BadRequestError, NotFoundError

logger = structlog.get_logger(__name__)

# 한 번의 크론 실행에서 처리할 최대 건수 — Batch size per cron run
DUE_BATCH_SIZE: int = 100


def session_email_context(session: OnboardingSession) -> dict[str, Any]:
    """이메일 템플릿에 넘길 세션 값 — Template values for a session."""
    return {
        "access_token": session.access_token,
        "project_name": session.project.name if session.project is not None else None,
        "completion_percentage": session.completion_percentage,
        "current_step": session.current_step,
        "total_steps": len(session.steps or []),
        "expires_at": session.expires_at,
    }


class ReminderService:
    """온보딩 리마인더 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, reminder: OnboardingReminder) -> ReminderResponse:
        return ReminderResponse(
            id=str(reminder.id),
            reminder_type=reminder.reminder_type,
            reminder_label=format_reminder_type(reminder.reminder_type),
            scheduled_at=reminder.scheduled_at,
            status=reminder.status,
            email_subject=reminder.email_subject,
            sent_at=reminder.sent_at,
        )

    async def _get_session(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> OnboardingSession:
        session: OnboardingSession | None = await onboarding_session_repository.get_by_id(
            db, session_id, organization_id
        )
        if session is None:
            raise NotFoundError("Onboarding session not found")
        return session

    async def schedule_session_reminders(
        self,
        db: AsyncSession,
        session: OnboardingSession,
    ) -> list[OnboardingReminder]:
        """세션의 리마인더 스케줄에 따라 리마인더를 예약합니다.

        Create pending reminders for the session's schedule, timed from the
        session's creation. The custom schedule creates none.
        """
        created_at: datetime = session.created_at or datetime.now(timezone.utc)
        reminders: list[OnboardingReminder] = [
            OnboardingReminder(
                session_id=session.id,
                reminder_type=item["type"],
                scheduled_at=item["scheduled_at"],
                status="pending",
            )
            for item in generate_reminder_schedule(created_at, session.reminder_schedule)
        ]
        db.add_all(reminders)
        await db.flush()
        logger.info(
            "reminders_scheduled",
            session_id=str(session.id),
            schedule=session.reminder_schedule,
            count=len(reminders),
        )
        return reminders

    async def list_session_reminders(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> list[ReminderResponse]:
        await self._get_session(db, organization_id, session_id)
        reminders: list[OnboardingReminder] = await onboarding_reminder_repository.get_by_session(db, session_id)
        return [self._to_response(r) for r in reminders]

    async def cancel_session_reminders(self, db: AsyncSession, session_id: UUID) -> int:
        """대기 중 리마인더를 모두 취소합니다 — pending → cancelled."""
        cancelled: int = await onboarding_reminder_repository.cancel_pending(db, session_id)
        if cancelled:
            logger.info("reminders_cancelled", session_id=str(session_id), count=cancelled)
        return cancelled

    async def update_reminder_settings(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
        data: ReminderSettingsUpdate,
    ) -> list[ReminderResponse]:
        """리마인더 설정을 변경합니다.

        Toggle reminders or switch schedule. Disabling cancels the pending
        reminders; re-enabling or changing the schedule replaces them with
        a fresh set for an unfinished session.
        """
        session: OnboardingSession = await self._get_session(db, organization_id, session_id)
        reschedule: bool = False

        if data.reminder_enabled is not None:
            if data.reminder_enabled and not session.reminder_enabled:
                reschedule = True
            session.reminder_enabled = data.reminder_enabled
            if not data.reminder_enabled:
                await self.cancel_session_reminders(db, session.id)

        if data.reminder_schedule is not None and data.reminder_schedule != session.reminder_schedule:
            session.reminder_schedule = data.reminder_schedule
            reschedule = True

        if reschedule:
            await self.cancel_session_reminders(db, session.id)
            if session.reminder_enabled and session.status != "completed":
                await self.schedule_session_reminders(db, session)

        await db.flush()
        reminders: list[OnboardingReminder] = await onboarding_reminder_repository.get_by_session(db, session.id)
        return [self._to_response(r) for r in reminders]

    async def create_custom_reminder(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
        data: CustomReminderRequest,
    ) -> ReminderResponse:
        """사용자 정의 리마인더를 예약합니다.

        Queue a team-written reminder. Without ``scheduled_at`` it is due on
        the next cron run.
        """
        session: OnboardingSession = await self._get_session(db, organization_id, session_id)
        if session.status == "completed":
            raise BadRequestError("Onboarding session is already completed")

        reminder: OnboardingReminder = await onboarding_reminder_repository.create(db, {
            "session_id": session.id,
            "reminder_type": "custom",
            "scheduled_at": data.scheduled_at or datetime.now(timezone.utc),
            "status": "pending",
            "email_subject": data.subject,
            "email_body": data.message,
        })
        return self._to_response(reminder)

    async def get_reminder_stats(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> ReminderStatsResponse:
        await self._get_session(db, organization_id, session_id)
        reminders: list[OnboardingReminder] = await onboarding_reminder_repository.get_by_session(db, session_id)
        return ReminderStatsResponse(
            total=len(reminders),
            by_status=dict(Counter(r.status for r in reminders)),
            by_type=dict(Counter(r.reminder_type for r in reminders)),
        )

    async def _send_reminder(
        self,
        db: AsyncSession,
        reminder: OnboardingReminder,
        session: OnboardingSession,
        now: datetime,
    ) -> None:
        """리마인더 이메일을 발송하고 상태를 기록합니다.

        Raises:
            RuntimeError: SMTP가 설정되지 않아 발송하지 못했을 때
        """
        email: dict[str, str] = get_reminder_email(
            reminder.reminder_type,
            session_email_context(session),
            recipient_name=session.client_name or "there",
            custom_subject=reminder.email_subject,
            custom_message=reminder.email_body,
        )
        if not await send_email(session.client_email, email["subject"], email["html"], email["text"]):
            raise RuntimeError("Email delivery is not configured")

        reminder.status = "sent"
        reminder.sent_at = now
        reminder.email_subject = email["subject"]
        reminder.email_body = email["text"]
        session.reminder_count = (session.reminder_count or 0) + 1
        session.last_reminder_sent_at = now

    async def process_due_reminders(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> ReminderRunResponse:
        """발송 시각이 지난 리마인더를 처리합니다 (크론).

        Drain due reminders, oldest first, up to the batch size.

        - A missing session or one without a client email marks the
          reminder failed and counts it as skipped.
        - A session that should not be reminded right now (completed,
          expired, recently active, reminders disabled) is skipped and the
          reminder left pending.
        - A send error marks the reminder failed and counts it as failed.

        Returns:
            ReminderRunResponse: {processed, sent, skipped, failed, duration_ms}
        """
        started: float = time.monotonic()
        now = now or datetime.now(timezone.utc)
        counts: Counter = Counter()

        due: list[OnboardingReminder] = await onboarding_reminder_repository.get_due(db, now, DUE_BATCH_SIZE)
        for reminder in due:
            counts["processed"] += 1
            session: OnboardingSession | None = await onboarding_session_repository.get_with_project(
                db, reminder.session_id
            )
            if session is None or not session.client_email:
                reminder.status = "failed"
                reminder.extra = {"error": "Session not found or no client email"}
                counts["skipped"] += 1
                continue

            if not session.reminder_enabled or not should_send_reminder(
                session.status, session.last_activity_at, session.expires_at, now
            ):
                counts["skipped"] += 1
                continue

            try:
                await self._send_reminder(db, reminder, session, now)
                counts["sent"] += 1
                logger.info("reminder_sent", reminder_id=str(reminder.id), session_id=str(session.id))
            except Exception as exc:
                reminder.status = "failed"
                reminder.extra = {"error": str(exc)}
                counts["failed"] += 1
                logger.error("reminder_send_failed", reminder_id=str(reminder.id), error=str(exc))

        await db.flush()
        result = ReminderRunResponse(
            processed=counts["processed"],
            sent=counts["sent"],
            skipped=counts["skipped"],
            failed=counts["failed"],
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        logger.info("reminder_run_finished", **result.model_dump())
        return result


# 싱글턴 인스턴스 — Singleton instance
reminder_service: ReminderService = ReminderService()
