"""발신자 스크리닝 서비스 — Hey 스타일 메일함 분류.

Screening Service — Stores per-sender screening decisions, re-labels a
sender's emails when a decision is made, keeps the blocked-sender list in
step with "blocked" decisions, and auto-classifies newly synced emails.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.email import BlockedSender, ContactScreening, Email
from app.repositories.email_repository import (
    blocked_sender_repository,
    email_message_repository,
    screening_repository,
)
from app.schemas.email import (
    BlockedSenderResponse,
    ScreeningDecisionResponse,
    ScreenSenderRequest,
    ScreenSenderResponse,
    UnscreenedSenderResponse,
)
from app.services.email_classifier import classify_email, get_email_address, get_email_name
from app.utils.exceptions import NotFoundError

logger = structlog.get_logger(__name__)

# 미분류 발신자 조회 시 검사할 대기 이메일 수 — Pending emails scanned for senders
UNSCREENED_SCAN_LIMIT: int = 50


def _decision_fields(decision: ContactScreening) -> dict[str, Any]:
    return {
        "id": str(decision.id),
        "email_address": decision.email_address,
        "name": decision.name,
        "decision": decision.decision,
        "decided_at": decision.decided_at,
        "notes": decision.notes,
    }


class ScreeningService:
    """발신자 스크리닝 비즈니스 로직을 처리하는 서비스."""

    async def screen_sender(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: ScreenSenderRequest,
    ) -> ScreenSenderResponse:
        """발신자에 대한 스크리닝 결정을 저장합니다.

        Upsert the decision for the sender, then re-label every email the
        user received from that address: ``hey_view`` becomes the decision
        (None when blocked) and the emails are marked screened. A "blocked"
        decision also adds the sender to the blocked list; any other
        decision removes it from there.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 메일함 사용자 ID (Mailbox owner)
            data: 발신자 주소, 결정, 이름, 메모

        Returns:
            ScreenSenderResponse: 저장된 결정과 재분류된 이메일 수
        """
        address: str = data.email_address.strip().lower()
        now: datetime = datetime.now(timezone.utc)

        decision: ContactScreening | None = await screening_repository.get_decision(db, user_id, address)
        if decision is None:
            decision = await screening_repository.create(db, {
                "user_id": user_id,
                "email_address": address,
                "name": data.name,
                "decision": data.decision,
                "decided_at": now,
                "notes": data.notes,
            })
        else:
            decision.decision = data.decision
            decision.decided_at = now
            if data.name is not None:
                decision.name = data.name
            if data.notes is not None:
                decision.notes = data.notes
            await db.flush()

        hey_view: str | None = None if data.decision == "blocked" else data.decision
        updated: int = await email_message_repository.relabel_sender(db, user_id, address, hey_view)

        blocked: BlockedSender | None = await blocked_sender_repository.get_by_address(db, user_id, address)
        if data.decision == "blocked" and blocked is None:
            await blocked_sender_repository.create(db, {
                "user_id": user_id,
                "email_address": address,
                "reason": data.notes,
            })
        elif data.decision != "blocked" and blocked is not None:
            await db.delete(blocked)
            await db.flush()

        logger.info("sender_screened", user_id=str(user_id), sender=address, decision=data.decision, emails_updated=updated)
        return ScreenSenderResponse(**_decision_fields(decision), emails_updated=updated)

    async def get_unscreened_senders(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[UnscreenedSenderResponse]:
        """스크리닝 대기 중인 발신자 목록.

        Group the newest pending emails by sender. ``first_email`` is the
        newest pending email of each sender and ``classification`` the
        classifier's suggestion for it.
        """
        pending: list[Email] = await email_message_repository.get_pending_screening(
            db, user_id, UNSCREENED_SCAN_LIMIT
        )
        senders: dict[str, dict[str, Any]] = {}
        for email in pending:
            address: str = get_email_address(email.from_address).lower()
            if not address:
                continue
            entry: dict[str, Any] | None = senders.get(address)
            if entry is None:
                senders[address] = {
                    "email_address": address,
                    "name": get_email_name(email.from_address),
                    "first_email": {
                        "id": str(email.id),
                        "subject": email.subject,
                        "snippet": email.snippet,
                        "received_at": email.received_at.isoformat() if email.received_at else None,
                    },
                    "count": 1,
                    "classification": classify_email(email),
                }
            else:
                entry["count"] += 1
        return [UnscreenedSenderResponse(**entry) for entry in senders.values()]

    async def auto_classify_email(self, db: AsyncSession, email: Email) -> Email:
        """이메일을 자동 분류합니다.

        A stored decision for the sender wins, marks the email screened and
        clears any earlier classifier category and confidence. Otherwise the
        classifier picks the view and category; a screener view leaves the
        email pending, anything else is auto-classified.
        """
        address: str = get_email_address(email.from_address).lower()
        decision: ContactScreening | None = None
        if address:
            decision = await screening_repository.get_decision(db, email.user_id, address)

        if decision is not None:
            email.hey_view = None if decision.decision == "blocked" else decision.decision
            email.hey_category = None
            email.hey_confidence = None
            email.screening_status = "screened"
        else:
            result: dict[str, Any] = classify_email(email)
            email.hey_view = result["view"]
            email.hey_category = result["category"]
            email.hey_confidence = result["confidence"]
            email.screening_status = "pending" if result["view"] == "screener" else "auto_classified"
        return email

    async def list_screening_decisions(
        self,
        db: AsyncSession,
        user_id: UUID,
        decision: str | None = None,
    ) -> list[ScreeningDecisionResponse]:
        decisions: list[ContactScreening] = await screening_repository.get_by_user(db, user_id, decision)
        return [ScreeningDecisionResponse(**_decision_fields(d)) for d in decisions]

    async def delete_screening_decision(
        self,
        db: AsyncSession,
        user_id: UUID,
        screening_id: UUID,
    ) -> None:
        decision: ContactScreening | None = await screening_repository.get_for_user(db, screening_id, user_id)
        if decision is None:
            raise NotFoundError("Screening decision not found")
        await db.delete(decision)
        await db.flush()

    async def list_blocked_senders(self, db: AsyncSession, user_id: UUID) -> list[BlockedSenderResponse]:
        blocked: list[BlockedSender] = await blocked_sender_repository.get_by_user(db, user_id)
        return [
            BlockedSenderResponse(
                id=str(b.id),
                email_address=b.email_address,
                reason=b.reason,
                created_at=b.created_at,
            )
            for b in blocked
        ]

    async def unblock_sender(self, db: AsyncSession, user_id: UUID, email_address: str) -> None:
        """차단 해제 — 차단 목록과 "blocked" 결정을 함께 삭제합니다.

        Emails from the sender go back to the screener.
        """
        address: str = email_address.strip().lower()
        blocked: BlockedSender | None = await blocked_sender_repository.get_by_address(db, user_id, address)
        if blocked is None:
            raise NotFoundError("Blocked sender not found")
        await db.delete(blocked)

        decision: ContactScreening | None = await screening_repository.get_decision(db, user_id, address)
        if decision is not None and decision.decision == "blocked":
            await db.delete(decision)
        await db.flush()

        await email_message_repository.relabel_sender(db, user_id, address, "screener", "pending")
        logger.info("sender_unblocked", user_id=str(user_id), sender=address)


# 싱글턴 인스턴스 — Singleton instance
screening_service: ScreeningService = ScreeningService()
