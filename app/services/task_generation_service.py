"""온보딩 응답 기반 작업 생성 서비스.

Task Generation Service — Turns a completed onboarding session's responses
into project tasks using the rule sets in ``app.services.task_rules``.
Generation replaces the tasks a previous run produced for the same session
inside one nested transaction, then refreshes the project's progress.
"""

import json
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.onboarding import OnboardingSession
from app.models.project import Project, ProjectTask
from app.repositories.project_repository import project_task_repository
from app.schemas.onboarding import GeneratedTaskPreview, TaskGenerationResponse, TaskPreviewResponse
from app.services.notification_service import notification_service
from app.services.onboarding_service import onboarding_service
from app.services.onboarding_templates import flatten_responses
from app.services.project_service import project_service
from app.services.task_mapper import (
    TaskContext,
    deduplicate_tasks,
    generate_tasks_from_responses,
    validate_tasks,
)
from app.services.task_rules import get_rules_for_type
from app.utils.exceptions import BadRequestError

logger = structlog.get_logger(__name__)

PRIORITY_ORDER: tuple[str, ...] = ("high", "medium", "low")
TASK_FIELDS: tuple[str, ...] = ("title", "description", "status", "priority", "due_date", "source_type", "source_metadata")


def build_tasks_for_session(session: OnboardingSession, now: datetime | None = None) -> list[dict[str, Any]]:
    """세션 응답으로부터 중복 제거된 작업 목록을 생성합니다.

    Due dates count from ``now`` (the generation time), so regenerating
    tasks for an old session never yields past due dates.
    """
    now = now or datetime.now(timezone.utc)
    project: Project | None = session.project
    context = TaskContext(
        project_id=str(session.project_id),
        project_name=project.name if project is not None else "",
        project_type=session.onboarding_type,
        organization_id=str(session.organization_id),
        session_id=str(session.id),
        completion_date=now,
    )
    responses: dict[str, Any] = flatten_responses(session.responses or {})
    tasks: list[dict[str, Any]] = generate_tasks_from_responses(
        responses, get_rules_for_type(session.onboarding_type), context
    )
    return deduplicate_tasks(tasks)


def _rule_id(task: dict[str, Any]) -> str | None:
    try:
        return json.loads(task.get("source_metadata") or "{}").get("rule_id")
    except ValueError:
        return None


class TaskGenerationService:
    """온보딩 작업 생성 비즈니스 로직을 처리하는 서비스."""

    async def preview_tasks(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> TaskPreviewResponse:
        """생성될 작업을 미리 봅니다 (저장하지 않음).

        Preview the tasks a generation would create, grouped by priority,
        with the validation result.
        """
        session: OnboardingSession = await onboarding_service.get_session_model(db, organization_id, session_id)
        tasks: list[dict[str, Any]] = build_tasks_for_session(session)
        valid, errors = validate_tasks(tasks)

        by_priority: dict[str, list[GeneratedTaskPreview]] = {p: [] for p in PRIORITY_ORDER}
        for task in tasks:
            by_priority.setdefault(task.get("priority", "medium"), []).append(GeneratedTaskPreview(
                title=task["title"],
                description=task.get("description"),
                priority=task.get("priority", "medium"),
                status=task.get("status", "todo"),
                due_date=task.get("due_date"),
                rule_id=_rule_id(task),
            ))
        return TaskPreviewResponse(total=len(tasks), by_priority=by_priority, valid=valid, errors=errors)

    async def generate_tasks(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
        regenerate: bool = False,
    ) -> TaskGenerationResponse:
        """완료된 세션의 응답으로 프로젝트 작업을 생성합니다.

        Generate project tasks from a completed session. Without
        ``regenerate`` a session whose tasks were already generated is
        rejected. Tasks from a previous run for the same session are
        deleted and the new ones inserted in one nested transaction.

        Raises:
            BadRequestError: 미완료 세션, 이미 생성됨, 또는 검증 실패
                             (Session not completed, already generated, or invalid tasks)
        """
        session: OnboardingSession = await onboarding_service.get_session_model(db, organization_id, session_id)
        if session.status != "completed":
            raise BadRequestError("Onboarding session is not completed")
        if session.tasks_generated and not regenerate:
            raise BadRequestError("Tasks were already generated for this session")

        now: datetime = datetime.now(timezone.utc)
        tasks: list[dict[str, Any]] = build_tasks_for_session(session, now)
        valid, errors = validate_tasks(tasks, now)
        if not valid:
            raise BadRequestError("; ".join(errors))

        async with db.begin_nested():
            deleted: int = await project_task_repository.delete_by_source(db, session.project_id, session.id)
            db.add_all([
                ProjectTask(
                    project_id=session.project_id,
                    source_id=session.id,
                    **{name: task[name] for name in TASK_FIELDS if name in task},
                )
                for task in tasks
            ])
            session.tasks_generated = True
            session.tasks_generated_at = now
            session.task_count = len(tasks)
            await db.flush()

        await project_service.refresh_progress(db, session.project)
        await notification_service.notify_admins(
            db,
            organization_id,
            "tasks_generated",
            f"{len(tasks)} tasks generated for {session.project.name}",
            reference_type="onboarding_session",
            reference_id=session.id,
        )
        logger.info(
            "onboarding_tasks_generated",
            session_id=str(session.id),
            task_count=len(tasks),
            deleted_count=deleted,
            regenerate=regenerate,
        )
        return TaskGenerationResponse(
            session_id=str(session.id),
            project_id=str(session.project_id),
            task_count=len(tasks),
            deleted_count=deleted,
            generated_at=now,
        )

    async def regenerate_tasks(
        self,
        db: AsyncSession,
        organization_id: UUID,
        session_id: UUID,
    ) -> TaskGenerationResponse:
        """작업을 재생성합니다 — 기존 생성 여부와 무관."""
        return await self.generate_tasks(db, organization_id, session_id, regenerate=True)


# 싱글턴 인스턴스 — Singleton instance
task_generation_service: TaskGenerationService = TaskGenerationService()
