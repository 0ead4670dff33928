"""딜 서비스 — 파이프라인 단계 및 딜 CRUD 비즈니스 로직.

Deal Service — Business logic for pipeline stages and deals.
Stage names are matched case-insensitively; moving a deal into the Won or
Lost stage stamps ``actual_close_date`` when it is not set yet.
"""

from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.crm import Contact, Deal, DealStage
from app.repositories.contact_repository import contact_repository
from app.repositories.deal_repository import deal_repository, deal_stage_repository
from app.schemas.common import PaginatedResponse
from app.schemas.crm import (
    DealCreate,
    DealResponse,
    DealStageCreate,
    DealStageResponse,
    DealUpdate,
)
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

# 종료 단계 — Closing stages (lowercase)
CLOSED_STAGES: tuple[str, ...] = ("won", "lost")


def is_closed_stage(stage: str | None) -> bool:
    return stage is not None and stage.strip().lower() in CLOSED_STAGES


class DealService:
    """딜 및 파이프라인 단계 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, deal: Deal) -> DealResponse:
        return DealResponse(
            id=str(deal.id),
            owner_id=str(deal.owner_id),
            contact_id=str(deal.contact_id) if deal.contact_id else None,
            title=deal.title,
            value=deal.value,
            stage=deal.stage,
            probability=deal.probability,
            expected_close_date=deal.expected_close_date,
            actual_close_date=deal.actual_close_date,
            notes=deal.notes,
            created_at=deal.created_at,
            updated_at=deal.updated_at,
        )

    async def _resolve_contact(
        self,
        db: AsyncSession,
        organization_id: UUID,
        contact_id: str | None,
    ) -> UUID | None:
        """연락처 ID 문자열을 검증하여 UUID로 변환합니다."""
        if contact_id is None:
            return None
        try:
            contact_uuid: UUID = UUID(contact_id)
        except ValueError:
            raise BadRequestError("Invalid contact_id")
        contact: Contact | None = await contact_repository.get_by_id(db, contact_uuid, organization_id)
        if contact is None:
            raise NotFoundError("Contact not found")
        return contact_uuid

    async def _get_scoped(
        self,
        db: AsyncSession,
        organization_id: UUID,
        deal_id: UUID,
        owner_scope: UUID | None,
    ) -> Deal:
        deal: Deal | None = await deal_repository.get_by_id(db, deal_id, organization_id)
        if deal is None or (owner_scope is not None and deal.owner_id != owner_scope):
            raise NotFoundError("Deal not found")
        return deal

    # === 파이프라인 단계 (Deal stages) ===

    async def list_stages(self, db: AsyncSession, organization_id: UUID) -> list[DealStageResponse]:
        stages: list[DealStage] = await deal_stage_repository.get_by_org(db, organization_id)
        return [
            DealStageResponse(id=str(s.id), name=s.name, order=s.order, color=s.color)
            for s in stages
        ]

    async def create_stage(
        self,
        db: AsyncSession,
        organization_id: UUID,
        data: DealStageCreate,
    ) -> DealStageResponse:
        """파이프라인 단계를 생성합니다 (관리자 전용).

        Raises:
            DuplicateError: 같은 이름의 단계가 있을 때 (Stage name already exists)
        """
        if await deal_stage_repository.get_by_name(db, organization_id, data.name) is not None:
            raise DuplicateError(f"Stage '{data.name}' already exists")
        stage: DealStage = await deal_stage_repository.create(db, {
            "organization_id": organization_id,
            **data.model_dump(),
        })
        return DealStageResponse(id=str(stage.id), name=stage.name, order=stage.order, color=stage.color)

    # === 딜 (Deals) ===

    async def list_deals(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_scope: UUID | None = None,
        stage: str | None = None,
        contact_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[Deal]
        total: int
        items, total = await deal_repository.get_filtered(
            db, organization_id, owner_scope, stage, contact_id, page, per_page
        )
        return PaginatedResponse(
            items=[self._to_response(d) for d in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_deal(
        self,
        db: AsyncSession,
        organization_id: UUID,
        deal_id: UUID,
        owner_scope: UUID | None = None,
    ) -> DealResponse:
        return self._to_response(await self._get_scoped(db, organization_id, deal_id, owner_scope))

    async def create_deal(
        self,
        db: AsyncSession,
        organization_id: UUID,
        owner_id: UUID,
        data: DealCreate,
    ) -> DealResponse:
        """딜을 생성합니다.

        Create a deal owned by the caller. A deal created directly in a
        closing stage gets its close date stamped.
        """
        deal_data: dict[str, Any] = data.model_dump()
        deal_data["contact_id"] = await self._resolve_contact(db, organization_id, data.contact_id)
        if is_closed_stage(data.stage):
            deal_data["actual_close_date"] = datetime.now(timezone.utc)

        deal: Deal = await deal_repository.create(db, {
            "organization_id": organization_id,
            "owner_id": owner_id,
            **deal_data,
        })
        return self._to_response(deal)

    async def update_deal(
        self,
        db: AsyncSession,
        organization_id: UUID,
        deal_id: UUID,
        data: DealUpdate,
        owner_scope: UUID | None = None,
    ) -> DealResponse:
        """딜을 수정합니다.

        Partially update a deal. Moving into Won/Lost stamps
        ``actual_close_date`` unless the deal already has one or the
        request sets it explicitly.
        """
        deal: Deal = await self._get_scoped(db, organization_id, deal_id, owner_scope)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        if "contact_id" in update_data:
            update_data["contact_id"] = await self._resolve_contact(db, organization_id, data.contact_id)

        for field, value in update_data.items():
            setattr(deal, field, value)

        if is_closed_stage(deal.stage) and deal.actual_close_date is None:
            deal.actual_close_date = datetime.now(timezone.utc)

        await db.flush()
        await db.refresh(deal)
        return self._to_response(deal)

    async def delete_deal(
        self,
        db: AsyncSession,
        organization_id: UUID,
        deal_id: UUID,
        owner_scope: UUID | None = None,
    ) -> None:
        deal: Deal = await self._get_scoped(db, organization_id, deal_id, owner_scope)
        await db.delete(deal)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
deal_service: DealService = DealService()
