"""메일함 동기화 서비스 — Nylas 메시지를 로컬 이메일/스레드로 저장.

Email Sync Service — Pages through a mailbox's messages on Nylas, stores
new ones with their threads, refreshes flags on known ones and runs the
screening classifier on what was stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.email import Email, EmailAccount, EmailThread
from app.repositories.email_repository import (
    email_account_repository,
    email_message_repository,
    email_thread_repository,
)
from app.repositories.notification_repository import notification_repository
from app.schemas.email import SyncResultResponse
from app.services.nylas_client import NylasAPIError, NylasClient, nylas_client
from app.services.screening_service import screening_service
from app.utils.exceptions import BadRequestError, ExternalServiceError, NotFoundError

logger = structlog.get_logger(__name__)

TRASH_FOLDERS: tuple[str, ...] = ("trash", "deleted", "bin")
ARCHIVE_FOLDERS: tuple[str, ...] = ("archive", "all mail")


def _address(participant: Any) -> dict[str, str] | None:
    if not isinstance(participant, dict) or not participant.get("email"):
        return None
    return {"name": participant.get("name") or "", "email": participant["email"]}


def _addresses(participants: Any) -> list[dict[str, str]]:
    return [a for a in (_address(p) for p in participants or []) if a is not None]


def message_received_at(message: dict[str, Any]) -> datetime:
    """Nylas ``date``(epoch 초)를 UTC datetime으로 변환합니다."""
    return datetime.fromtimestamp(message.get("date") or 0, tz=timezone.utc)


def folder_flags(folders: list[str] | None) -> dict[str, bool]:
    """폴더 이름으로 플래그를 결정합니다 — Flags derived from folder names."""
    names: list[str] = [f.lower() for f in folders or []]
    return {
        "is_sent": "sent" in names,
        "is_draft": "draft" in names or "drafts" in names,
        "is_trash": any(name in TRASH_FOLDERS for name in names),
        "is_archived": any(name in ARCHIVE_FOLDERS for name in names),
    }


def message_participants(message: dict[str, Any], fallback_address: str) -> list[str]:
    """메시지의 참여자 주소 목록 (from, to, cc 순서, 중복 제거).

    Falls back to the account address when the message names nobody.
    """
    addresses: list[str] = [
        a["email"]
        for field in ("from", "to", "cc")
        for a in _addresses(message.get(field))
    ]
    return list(dict.fromkeys(addresses)) or [fallback_address]


def _headers(message: dict[str, Any]) -> dict[str, Any] | None:
    headers = message.get("headers")
    if isinstance(headers, list):
        return {h["name"].lower(): h.get("value") for h in headers if isinstance(h, dict) and h.get("name")}
    if isinstance(headers, dict):
        return {str(k).lower(): v for k, v in headers.items()}
    return None


def build_email_fields(message: dict[str, Any]) -> dict[str, Any]:
    """Nylas 메시지를 Email 컬럼 값으로 변환합니다."""
    senders: list[dict[str, str]] = _addresses(message.get("from"))
    cc: list[dict[str, str]] = _addresses(message.get("cc"))
    return {
        "nylas_message_id": message["id"],
        "message_id": message.get("message_id"),
        "from_address": senders[0] if senders else {},
        "to_addresses": _addresses(message.get("to")),
        "cc_addresses": cc or None,
        "subject": message.get("subject"),
        "snippet": message.get("snippet"),
        "body_html": message.get("body"),
        "received_at": message_received_at(message),
        "is_read": not message.get("unread", False),
        "is_starred": bool(message.get("starred", False)),
        "has_attachments": bool(message.get("attachments")),
        "raw_headers": _headers(message),
        **folder_flags(message.get("folders")),
    }


class EmailSyncService:
    """메일함 동기화 비즈니스 로직을 처리하는 서비스.

    Args:
        client: Nylas 클라이언트 (Swappable in tests)
    """

    def __init__(self, client: NylasClient | None = None) -> None:
        self.client: NylasClient = client or nylas_client

    async def _get_thread(
        self,
        db: AsyncSession,
        account: EmailAccount,
        message: dict[str, Any],
        received_at: datetime,
    ) -> EmailThread:
        nylas_thread_id: str = message.get("thread_id") or message["id"]
        thread: EmailThread | None = await email_thread_repository.get_by_nylas_id(db, account.id, nylas_thread_id)
        if thread is None:
            thread = await email_thread_repository.create(db, {
                "account_id": account.id,
                "user_id": account.user_id,
                "nylas_thread_id": nylas_thread_id,
                "subject": message.get("subject"),
                "snippet": message.get("snippet"),
                "participants": [],
                "message_count": 0,
                "unread_count": 0,
                "first_message_at": received_at,
                "last_message_at": received_at,
            })
        return thread

    def _add_to_thread(
        self,
        thread: EmailThread,
        email: Email,
        participants: list[str],
    ) -> None:
        thread.participants = list(dict.fromkeys([*(thread.participants or []), *participants]))
        thread.message_count = (thread.message_count or 0) + 1
        if not email.is_read:
            thread.unread_count = (thread.unread_count or 0) + 1
        if thread.first_message_at is None or email.received_at < thread.first_message_at:
            thread.first_message_at = email.received_at
        if thread.last_message_at is None or email.received_at >= thread.last_message_at:
            thread.last_message_at = email.received_at
            thread.subject = email.subject or thread.subject
            thread.snippet = email.snippet

    async def _store_message(
        self,
        db: AsyncSession,
        account: EmailAccount,
        message: dict[str, Any],
    ) -> Email | None:
        """메시지 하나를 저장합니다. 이미 있으면 플래그와 스레드 미읽음 수만 갱신하고 None."""
        existing: Email | None = await email_message_repository.get_by_nylas_id(db, account.id, message["id"])
        if existing is not None:
            is_read: bool = not message.get("unread", False)
            if is_read != existing.is_read and existing.thread_id is not None:
                parent: EmailThread | None = await email_thread_repository.get_by_id(db, existing.thread_id)
                if parent is not None:
                    parent.unread_count = max(0, (parent.unread_count or 0) + (-1 if is_read else 1))
            existing.is_read = is_read
            existing.is_starred = bool(message.get("starred", False))
            return None

        fields: dict[str, Any] = build_email_fields(message)
        thread: EmailThread = await self._get_thread(db, account, message, fields["received_at"])
        email: Email = await email_message_repository.create(db, {
            **fields,
            "account_id": account.id,
            "user_id": account.user_id,
            "thread_id": thread.id,
            "screening_status": "pending",
        })
        self._add_to_thread(thread, email, message_participants(message, account.email_address))
        return email

    async def sync_account(
        self,
        db: AsyncSession,
        user_id: UUID,
        account_id: UUID,
        skip_classification: bool = False,
    ) -> SyncResultResponse:
        """메일 계정을 동기화합니다.

        Page through the mailbox (50 per page, following ``next_cursor``)
        until exhausted. Known messages get their read/starred flags
        refreshed and count as skipped; per-message failures are counted
        and logged. Stored emails are auto-classified unless
        ``skip_classification``; emails older than
        ``AUTO_CLASSIFY_MAX_AGE_DAYS`` are classified regardless.

        On a provider failure the account is left in the ``error`` status
        with the message in ``sync_error`` and the owner is notified.

        Raises:
            NotFoundError: 계정을 찾을 수 없을 때 (Account not found)
            BadRequestError: 연결 해제되었거나 grant가 없는 계정
            ExternalServiceError: Nylas 호출 실패 (Provider failure)
        """
        account: EmailAccount | None = await email_account_repository.get_for_user(db, account_id, user_id)
        if account is None:
            raise NotFoundError("Email account not found")
        if account.status == "disconnected" or not account.nylas_grant_id:
            raise BadRequestError("Email account is not connected")

        account.status = "syncing"
        account.sync_error = None
        await db.flush()

        now: datetime = datetime.now(timezone.utc)
        classify_before: datetime = now - timedelta(days=settings.AUTO_CLASSIFY_MAX_AGE_DAYS)
        synced = skipped = errors = 0
        page_token: str | None = None
        log = logger.bind(account_id=str(account.id))

        try:
            while True:
                messages, page_token = await self.client.list_messages(account.nylas_grant_id, page_token)
                for message in messages:
                    try:
                        async with db.begin_nested():
                            email: Email | None = await self._store_message(db, account, message)
                            if email is None:
                                skipped += 1
                                continue
                            if not skip_classification or email.received_at < classify_before:
                                await screening_service.auto_classify_email(db, email)
                            await db.flush()
                        synced += 1
                    except Exception as exc:
                        errors += 1
                        log.error("email_sync_message_failed", message_id=message.get("id"), error=str(exc))
                if not page_token:
                    break
        except NylasAPIError as exc:
            await self._mark_failed(db, account, str(exc))
            raise ExternalServiceError("Email provider sync failed")

        account.status = "active"
        account.last_sync_at = datetime.now(timezone.utc)
        await db.flush()
        log.info("email_sync_finished", synced=synced, skipped=skipped, errors=errors)
        return SyncResultResponse(synced=synced, skipped=skipped, errors=errors)

    async def _mark_failed(self, db: AsyncSession, account: EmailAccount, error: str) -> None:
        """동기화 실패 상태를 커밋합니다 — the request itself fails afterwards."""
        account_id, user_id, organization_id, address = (
            account.id, account.user_id, account.organization_id, account.email_address,
        )
        await db.rollback()
        await db.execute(
            update(EmailAccount)
            .where(EmailAccount.id == account_id)
            .values(status="error", sync_error=error)
        )
        await notification_repository.create_for_users(
            db,
            organization_id,
            [user_id],
            "sync_failed",
            f"Email sync failed for {address}",
            reference_type="email_account",
            reference_id=account_id,
        )
        await db.commit()
        logger.error("email_sync_failed", account_id=str(account_id), error=error)


# 싱글턴 인스턴스 — Singleton instance
email_sync_service: EmailSyncService = EmailSyncService()
