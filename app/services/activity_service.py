"""활동 서비스 — 통화, 이메일, 미팅 등 영업 활동 CRUD.

Activity Service — Business logic for sales activities (calls, emails,
meetings, tasks, notes) linked to contacts and deals.
"""

from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Activity, Contact, Deal
from app.repositories.activity_repository import activity_repository
from app.repositories.contact_repository import contact_repository
from app.repositories.deal_repository import deal_repository
from app.schemas.common import PaginatedResponse
from app.schemas.crm import ActivityCreate, ActivityResponse, ActivityUpdate
from app.utils.exceptions import BadRequestError, NotFoundError


def _parse_uuid(value: str | None, field: str) -> UUID | None:
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise BadRequestError(f"Invalid {field}")


class ActivityService:
    """활동 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, activity: Activity) -> ActivityResponse:
        return ActivityResponse(
            id=str(activity.id),
            user_id=str(activity.user_id),
            contact_id=str(activity.contact_id) if activity.contact_id else None,
            deal_id=str(activity.deal_id) if activity.deal_id else None,
            type=activity.type,
            subject=activity.subject,
            description=activity.description,
            due_date=activity.due_date,
            completed=activity.completed,
            completed_at=activity.completed_at,
            created_at=activity.created_at,
        )

    async def _validate_links(
        self,
        db: AsyncSession,
        organization_id: UUID,
        update_data: dict[str, Any],
    ) -> None:
        """연락처/딜 링크를 조직 범위 내에서 검증합니다."""
        if "contact_id" in update_data:
            contact_id: UUID | None = _parse_uuid(update_data["contact_id"], "contact_id")
            if contact_id is not None:
                contact: Contact | None = await contact_repository.get_by_id(db, contact_id, organization_id)
                if contact is None:
                    raise NotFoundError("Contact not found")
            update_data["contact_id"] = contact_id
        if "deal_id" in update_data:
            deal_id: UUID | None = _parse_uuid(update_data["deal_id"], "deal_id")
            if deal_id is not None:
                deal: Deal | None = await deal_repository.get_by_id(db, deal_id, organization_id)
                if deal is None:
                    raise NotFoundError("Deal not found")
            update_data["deal_id"] = deal_id

    async def _get_scoped(
        self,
        db: AsyncSession,
        organization_id: UUID,
        activity_id: UUID,
        owner_scope: UUID | None,
    ) -> Activity:
        activity: Activity | None = await activity_repository.get_by_id(db, activity_id, organization_id)
        if activity is None or (owner_scope is not None and activity.user_id != owner_scope):
            raise NotFoundError("Activity not found")
        return activity

    async def list_activities(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
        contact_id: UUID | None = None,
        deal_id: UUID | None = None,
        completed: bool | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[Activity]
        total: int
        items, total = await activity_repository.get_filtered(
            db, organization_id, owner_scope, contact_id, deal_id, completed, page, per_page
        )
        return PaginatedResponse(
            items=[self._to_response(a) for a in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_activity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        activity_id: UUID,
        owner_scope: UUID | None = None,
    ) -> ActivityResponse:
        return self._to_response(await self._get_scoped(db, organization_id, activity_id, owner_scope))

    async def create_activity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        data: ActivityCreate,
    ) -> ActivityResponse:
        activity_data: dict[str, Any] = data.model_dump()
        await self._validate_links(db, organization_id, activity_data)
        activity: Activity = await activity_repository.create(db, {
            "organization_id": organization_id,
            "user_id": user_id,
            **activity_data,
        })
        return self._to_response(activity)

    async def update_activity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        activity_id: UUID,
        data: ActivityUpdate,
        owner_scope: UUID | None = None,
    ) -> ActivityResponse:
        activity: Activity = await self._get_scoped(db, organization_id, activity_id, owner_scope)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        await self._validate_links(db, organization_id, update_data)
        for field, value in update_data.items():
            setattr(activity, field, value)
        await db.flush()
        await db.refresh(activity)
        return self._to_response(activity)

    async def set_completed(
        self,
        db: AsyncSession,
        organization_id: UUID,
        activity_id: UUID,
        completed: bool = True,
        owner_scope: UUID | None = None,
    ) -> ActivityResponse:
        """활동 완료 상태를 토글합니다.

        Mark an activity complete (stamps completed_at) or reopen it
        (clears completed_at).
        """
        activity: Activity = await self._get_scoped(db, organization_id, activity_id, owner_scope)
        activity.completed = completed
        activity.completed_at = datetime.now(timezone.utc) if completed else None
        await db.flush()
        await db.refresh(activity)
        return self._to_response(activity)

    async def delete_activity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        activity_id: UUID,
        owner_scope: UUID | None = None,
    ) -> None:
        activity: Activity = await self._get_scoped(db, organization_id, activity_id, owner_scope)
        await db.delete(activity)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
activity_service: ActivityService = ActivityService()
