"""프로젝트 레포지토리 — 프로젝트, 작업, 메모 쿼리.

Project Repository — Project, task and note queries, including the task
counts behind auto-calculated progress and source-scoped task deletion
used by onboarding task regeneration.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectNote, ProjectTask
from app.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """프로젝트 레포지토리.

    Extends:
        BaseRepository[Project]
    """

    def __init__(self) -> None:
        super().__init__(Project)

    async def get_filtered(
        self,
        db: AsyncSession,
        organization_id: UUID,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Project], int]:
        """상태 필터로 프로젝트 목록을 조회합니다.

        Retrieve a paginated project list, newest first.
        """
        query: Select = select(Project).where(Project.organization_id == organization_id)
        if status is not None:
            query = query.where(Project.status == status)
        query = query.order_by(Project.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)


class ProjectTaskRepository(BaseRepository[ProjectTask]):
    """프로젝트 작업 레포지토리.

    Project task repository. Tasks have no organization_id of their own;
    callers resolve the project within the organization first.
    """

    def __init__(self) -> None:
        super().__init__(ProjectTask)

    async def get_by_project(
        self,
        db: AsyncSession,
        project_id: UUID,
        status: str | None = None,
    ) -> list[ProjectTask]:
        """프로젝트의 작업 목록 — Tasks of a project, oldest first."""
        query: Select = select(ProjectTask).where(ProjectTask.project_id == project_id)
        if status is not None:
            query = query.where(ProjectTask.status == status)
        result = await db.execute(query.order_by(ProjectTask.created_at))
        return list(result.scalars().all())

    async def get_in_project(
        self,
        db: AsyncSession,
        task_id: UUID,
        project_id: UUID,
    ) -> ProjectTask | None:
        result = await db.execute(
            select(ProjectTask).where(ProjectTask.id == task_id, ProjectTask.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def count_progress(
        self,
        db: AsyncSession,
        project_id: UUID,
    ) -> tuple[int, int]:
        """진행률 계산용 (완료 수, 전체 수)를 반환합니다.

        Return (done_count, total_count) for the project's tasks.
        """
        query: Select = select(
            func.count(ProjectTask.id),
            func.count(ProjectTask.id).filter(ProjectTask.status == "done"),
        ).where(ProjectTask.project_id == project_id)
        row = (await db.execute(query)).one()
        total, done = row[0] or 0, row[1] or 0
        return done, total

    async def delete_by_source(
        self,
        db: AsyncSession,
        project_id: UUID,
        source_id: UUID,
    ) -> int:
        """특정 출처(온보딩 세션)로 생성된 작업을 삭제합니다.

        Delete tasks generated from the given source (onboarding session).

        Returns:
            int: 삭제된 행 수 (Number of deleted rows)
        """
        result = await db.execute(
            delete(ProjectTask).where(
                ProjectTask.project_id == project_id,
                ProjectTask.source_id == source_id,
            )
        )
        await db.flush()
        return result.rowcount or 0


class ProjectNoteRepository(BaseRepository[ProjectNote]):
    """프로젝트 메모 레포지토리."""

    def __init__(self) -> None:
        super().__init__(ProjectNote)

    async def get_by_project(self, db: AsyncSession, project_id: UUID) -> list[ProjectNote]:
        result = await db.execute(
            select(ProjectNote)
            .where(ProjectNote.project_id == project_id)
            .order_by(ProjectNote.created_at.desc())
        )
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instances
project_repository: ProjectRepository = ProjectRepository()
project_task_repository: ProjectTaskRepository = ProjectTaskRepository()
project_note_repository: ProjectNoteRepository = ProjectNoteRepository()
