"""프로젝트 서비스 — 프로젝트, 작업, 메모 비즈니스 로직.

Project Service — Business logic for projects, project tasks and notes.
Every task change recalculates the project's ``auto_calculated_progress``;
the effective progress shown to users is the manual override when set.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Contact, Deal
from app.models.project import Project, ProjectNote, ProjectTask
from app.models.user import User
from app.repositories.contact_repository import contact_repository
from app.repositories.deal_repository import deal_repository
from app.repositories.project_repository import (
    project_note_repository,
    project_repository,
    project_task_repository,
)
from app.repositories.user_repository import user_repository
from app.schemas.common import PaginatedResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectNoteCreate,
    ProjectNoteResponse,
    ProjectResponse,
    ProjectTaskCreate,
    ProjectTaskResponse,
    ProjectTaskUpdate,
    ProjectUpdate,
)
from app.utils.exceptions import BadRequestError, NotFoundError


def calculate_progress(done: int, total: int) -> int:
    """완료 작업 비율 — round(done / total * 100), 작업이 없으면 0."""
    return round(done / total * 100) if total else 0


def effective_progress(project: Project) -> int:
    """표시 진행률 — Manual override when set, else the auto value."""
    if project.progress_percentage is not None:
        return project.progress_percentage
    return project.auto_calculated_progress or 0


def _parse_uuid(value: str | None, field: str) -> UUID | None:
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise BadRequestError(f"Invalid {field}")


class ProjectService:
    """프로젝트 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, project: Project) -> ProjectResponse:
        return ProjectResponse(
            id=str(project.id),
            name=project.name,
            description=project.description,
            status=project.status,
            priority=project.priority,
            budget=project.budget,
            start_date=project.start_date,
            end_date=project.end_date,
            assigned_to=str(project.assigned_to) if project.assigned_to else None,
            contact_id=str(project.contact_id) if project.contact_id else None,
            deal_id=str(project.deal_id) if project.deal_id else None,
            progress_percentage=project.progress_percentage,
            auto_calculated_progress=project.auto_calculated_progress or 0,
            progress=effective_progress(project),
            created_at=project.created_at,
        )

    def _task_to_response(self, task: ProjectTask) -> ProjectTaskResponse:
        return ProjectTaskResponse(
            id=str(task.id),
            project_id=str(task.project_id),
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            assigned_to=str(task.assigned_to) if task.assigned_to else None,
            source_type=task.source_type,
            source_id=str(task.source_id) if task.source_id else None,
            created_at=task.created_at,
        )

    async def _resolve_links(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: dict[str, Any],
    ) -> None:
        """담당자/연락처/딜 ID를 조직 범위 내에서 검증하고 UUID로 변환합니다."""
        if "assigned_to" in data:
            data["assigned_to"] = _parse_uuid(data["assigned_to"], "assigned_to")
            if data["assigned_to"] is not None:
                user: User | None = await user_repository.get_by_id(db, data["assigned_to"], organization_id)
                if user is None:
                    raise NotFoundError("Assignee not found")
        if "contact_id" in data:
            data["contact_id"] = _parse_uuid(data["contact_id"], "contact_id")
            if data["contact_id"] is not None:
                contact: Contact | None = await contact_repository.get_by_id(db, data["contact_id"], organization_id)
                if contact is None:
                    raise NotFoundError("Contact not found")
        if "deal_id" in data:
            data["deal_id"] = _parse_uuid(data["deal_id"], "deal_id")
            if data["deal_id"] is not None:
                deal: Deal | None = await deal_repository.get_by_id(db, data["deal_id"], organization_id)
                if deal is None:
                    raise NotFoundError("Deal not found")

    async def get_project_model(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
    ) -> Project:
        """조직 범위 내 프로젝트 모델을 조회합니다 (다른 서비스에서도 사용)."""
        project: Project | None = await project_repository.get_by_id(db, project_id, organization_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def refresh_progress(self, db: AsyncSession, project: Project) -> int:
        """작업 상태로부터 자동 진행률을 다시 계산합니다.

        Recalculate ``auto_calculated_progress`` from the project's tasks.

        Returns:
            int: 새 자동 진행률 (New auto progress)
        """
        done, total = await project_task_repository.count_progress(db, project.id)
        project.auto_calculated_progress = calculate_progress(done, total)
        await db.flush()
        return project.auto_calculated_progress

    # === 프로젝트 (Projects) ===

    async def list_projects(
        self,
        db: AsyncSession,
        organization_id: UUID,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[Project]
        total: int
        items, total = await project_repository.get_filtered(db, organization_id, status, page, per_page)
        return PaginatedResponse(
            items=[self._to_response(p) for p in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_project(self, db: AsyncSession, organization_id: UUID, project_id: UUID) -> ProjectResponse:
        return self._to_response(await self.get_project_model(db, organization_id, project_id))

    async def create_project(
        self,
        db: AsyncSession,
        organization_id: UUID,
        created_by: UUID,
        data: ProjectCreate,
    ) -> ProjectResponse:
        project_data: dict[str, Any] = data.model_dump()
        await self._resolve_links(db, organization_id, project_data)
        project: Project = await project_repository.create(db, {
            "organization_id": organization_id,
            "created_by": created_by,
            **project_data,
        })
        return self._to_response(project)

    async def update_project(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        data: ProjectUpdate,
    ) -> ProjectResponse:
        """프로젝트를 수정합니다.

        Partially update a project. Sending ``progress_percentage: null``
        removes the manual override.
        """
        project: Project = await self.get_project_model(db, organization_id, project_id)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        await self._resolve_links(db, organization_id, update_data)
        for field, value in update_data.items():
            setattr(project, field, value)
        await db.flush()
        await db.refresh(project)
        return self._to_response(project)

    async def delete_project(self, db: AsyncSession, organization_id: UUID, project_id: UUID) -> None:
        project: Project = await self.get_project_model(db, organization_id, project_id)
        await db.delete(project)
        await db.flush()

    # === 작업 (Tasks) ===

    async def list_tasks(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        status: str | None = None,
    ) -> list[ProjectTaskResponse]:
        await self.get_project_model(db, organization_id, project_id)
        tasks: list[ProjectTask] = await project_task_repository.get_by_project(db, project_id, status)
        return [self._task_to_response(t) for t in tasks]

    async def create_task(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        data: ProjectTaskCreate,
    ) -> ProjectTaskResponse:
        """수동 작업을 생성하고 진행률을 갱신합니다."""
        project: Project = await self.get_project_model(db, organization_id, project_id)
        task_data: dict[str, Any] = data.model_dump()
        await self._resolve_links(db, organization_id, task_data)
        task: ProjectTask = await project_task_repository.create(db, {
            "project_id": project.id,
            "source_type": "manual",
            **task_data,
        })
        await self.refresh_progress(db, project)
        return self._task_to_response(task)

    async def update_task(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        task_id: UUID,
        data: ProjectTaskUpdate,
    ) -> ProjectTaskResponse:
        project: Project = await self.get_project_model(db, organization_id, project_id)
        task: ProjectTask | None = await project_task_repository.get_in_project(db, task_id, project.id)
        if task is None:
            raise NotFoundError("Task not found")

        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        await self._resolve_links(db, organization_id, update_data)
        for field, value in update_data.items():
            setattr(task, field, value)
        await db.flush()
        await self.refresh_progress(db, project)
        await db.refresh(task)
        return self._task_to_response(task)

    async def delete_task(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        task_id: UUID,
    ) -> None:
        project: Project = await self.get_project_model(db, organization_id, project_id)
        task: ProjectTask | None = await project_task_repository.get_in_project(db, task_id, project.id)
        if task is None:
            raise NotFoundError("Task not found")
        await db.delete(task)
        await db.flush()
        await self.refresh_progress(db, project)

    # === 메모 (Notes) ===

    async def list_notes(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
    ) -> list[ProjectNoteResponse]:
        await self.get_project_model(db, organization_id, project_id)
        notes: list[ProjectNote] = await project_note_repository.get_by_project(db, project_id)
        return [
            ProjectNoteResponse(
                id=str(n.id),
                project_id=str(n.project_id),
                author_id=str(n.author_id) if n.author_id else None,
                content=n.content,
                created_at=n.created_at,
            )
            for n in notes
        ]

    async def add_note(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        author_id: UUID,
        data: ProjectNoteCreate,
    ) -> ProjectNoteResponse:
        project: Project = await self.get_project_model(db, organization_id, project_id)
        note: ProjectNote = await project_note_repository.create(db, {
            "project_id": project.id,
            "author_id": author_id,
            "content": data.content,
        })
        return ProjectNoteResponse(
            id=str(note.id),
            project_id=str(note.project_id),
            author_id=str(note.author_id) if note.author_id else None,
            content=note.content,
            created_at=note.created_at,
        )

    async def delete_note(
        self,
        db: AsyncSession,
        organization_id: UUID,
        project_id: UUID,
        note_id: UUID,
    ) -> None:
        project: Project = await self.get_project_model(db, organization_id, project_id)
        note: ProjectNote | None = await project_note_repository.get_by_id(db, note_id)
        if note is None or note.project_id != project.id:
            raise NotFoundError("Note not found")
        await db.delete(note)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
project_service: ProjectService = ProjectService()
