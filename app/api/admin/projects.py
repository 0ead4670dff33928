"""프로젝트 라우터 — 프로젝트, 하위 작업, 메모.

Projects Router — Client projects with their nested tasks and notes.
Managed by admins and managers.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
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
from app.services.project_service import project_service

router: APIRouter = APIRouter()


# === 프로젝트 (Projects) ===

@router.get("", response_model=PaginatedResponse)
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await project_service.list_projects(db, current_user.organization_id, status, page, per_page)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectResponse:
    return await project_service.get_project(db, current_user.organization_id, project_id)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectResponse:
    """프로젝트를 생성합니다.

    Create a project. The linked contact and assignee must belong to the
    organization.

    Args:
        data: 프로젝트 생성 데이터 (Project creation data)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 매니저 이상 사용자 (Authenticated manager+ user)

    Returns:
        ProjectResponse: 생성된 프로젝트 (Created project)
    """
    result: ProjectResponse = await project_service.create_project(
        db, current_user.organization_id, current_user.id, data
    )
    await db.commit()
    return result


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectResponse:
    result: ProjectResponse = await project_service.update_project(
        db, current_user.organization_id, project_id, data
    )
    await db.commit()
    return result


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> None:
    await project_service.delete_project(db, current_user.organization_id, project_id)
    await db.commit()


# === 작업 (Tasks) ===

@router.get("/{project_id}/tasks", response_model=list[ProjectTaskResponse])
async def list_tasks(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    status: Annotated[str | None, Query()] = None,
) -> list[ProjectTaskResponse]:
    return await project_service.list_tasks(db, current_user.organization_id, project_id, status)


@router.post("/{project_id}/tasks", response_model=ProjectTaskResponse, status_code=201)
async def create_task(
    project_id: UUID,
    data: ProjectTaskCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectTaskResponse:
    """작업 추가 — 프로젝트 진행률이 다시 계산됩니다 (Recomputes progress)."""
    result: ProjectTaskResponse = await project_service.create_task(
        db, current_user.organization_id, project_id, data
    )
    await db.commit()
    return result


@router.patch("/{project_id}/tasks/{task_id}", response_model=ProjectTaskResponse)
async def update_task(
    project_id: UUID,
    task_id: UUID,
    data: ProjectTaskUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectTaskResponse:
    result: ProjectTaskResponse = await project_service.update_task(
        db, current_user.organization_id, project_id, task_id, data
    )
    await db.commit()
    return result


@router.delete("/{project_id}/tasks/{task_id}", status_code=204)
async def delete_task(
    project_id: UUID,
    task_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> None:
    await project_service.delete_task(db, current_user.organization_id, project_id, task_id)
    await db.commit()


# === 메모 (Notes) ===

@router.get("/{project_id}/notes", response_model=list[ProjectNoteResponse])
async def list_notes(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[ProjectNoteResponse]:
    return await project_service.list_notes(db, current_user.organization_id, project_id)


@router.post("/{project_id}/notes", response_model=ProjectNoteResponse, status_code=201)
async def add_note(
    project_id: UUID,
    data: ProjectNoteCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ProjectNoteResponse:
    result: ProjectNoteResponse = await project_service.add_note(
        db, current_user.organization_id, project_id, current_user.id, data
    )
    await db.commit()
    return result


@router.delete("/{project_id}/notes/{note_id}", status_code=204)
async def delete_note(
    project_id: UUID,
    note_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> None:
    await project_service.delete_note(db, current_user.organization_id, project_id, note_id)
    await db.commit()
