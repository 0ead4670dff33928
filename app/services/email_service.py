"""이메일 서비스 — 계정, 메일 목록, 스레드, 휴리스틱 분류.

Email Service — Mailbox accounts, the Hey-style email views, thread
importance scoring and Gmail-style heuristic categorization. Sync lives in
``email_sync_service`` and sender screening in ``screening_service``.
"""

from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.email import Email, EmailAccount, EmailThread
from app.repositories.email_repository import (
    email_account_repository,
    email_message_repository,
    email_thread_repository,
)
from app.schemas.common import BulkResultResponse, PaginatedResponse
from app.schemas.email import (
    CategorizeResponse,
    EmailAccountConnect,
    EmailAccountResponse,
    EmailDetailResponse,
    EmailFlagsUpdate,
    EmailResponse,
    EmailThreadResponse,
    ThreadScoreResponse,
)
from app.services.thread_scoring import calculate_thread_importance, categorize_email
from app.utils.exceptions import DuplicateError, NotFoundError

logger = structlog.get_logger(__name__)

# 일괄 분류 최대 건수 — Emails categorized per bulk run
CATEGORIZE_BATCH_SIZE: int = 500


class EmailService:
    """이메일 조회/관리 비즈니스 로직을 처리하는 서비스."""

    # --- 변환 (Converters) ---

    def _account_response(self, account: EmailAccount) -> EmailAccountResponse:
        return EmailAccountResponse(
            id=str(account.id),
            email_address=account.email_address,
            provider=account.provider,
            status=account.status,
            last_sync_at=account.last_sync_at,
            sync_error=account.sync_error,
            created_at=account.created_at,
        )

    def _email_fields(self, email: Email) -> dict[str, Any]:
        return {
            "id": str(email.id),
            "account_id": str(email.account_id),
            "thread_id": str(email.thread_id) if email.thread_id else None,
            "from_address": email.from_address or {},
            "to_addresses": email.to_addresses or [],
            "subject": email.subject,
            "snippet": email.snippet,
            "received_at": email.received_at,
            "is_read": email.is_read,
            "is_starred": email.is_starred,
            "is_archived": email.is_archived,
            "has_attachments": email.has_attachments,
            "hey_view": email.hey_view,
            "hey_category": email.hey_category,
            "ai_category": email.ai_category,
            "screening_status": email.screening_status,
        }

    def _to_detail(self, email: Email) -> EmailDetailResponse:
        return EmailDetailResponse(
            **self._email_fields(email),
            cc_addresses=email.cc_addresses,
            body_text=email.body_text,
            body_html=email.body_html,
            ai_category_confidence=email.ai_category_confidence,
            hey_confidence=email.hey_confidence,
        )

    def _thread_response(self, thread: EmailThread) -> EmailThreadResponse:
        return EmailThreadResponse(
            id=str(thread.id),
            account_id=str(thread.account_id),
            subject=thread.subject,
            snippet=thread.snippet,
            participants=thread.participants or [],
            message_count=thread.message_count,
            unread_count=thread.unread_count,
            first_message_at=thread.first_message_at,
            last_message_at=thread.last_message_at,
            importance_score=thread.importance_score,
            importance_reason=thread.importance_reason,
        )

    # --- 계정 (Accounts) ---

    async def connect_account(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        data: EmailAccountConnect,
    ) -> EmailAccountResponse:
        """메일 계정을 연결합니다.

        Register a mailbox authorized with the provider. Reconnecting a
        previously disconnected address reactivates it with the new grant.

        Raises:
            DuplicateError: 이미 연결된 주소 (Address already connected)
        """
        address: str = data.email_address.strip().lower()
        account: EmailAccount | None = await email_account_repository.get_by_address(db, user_id, address)
        if account is not None and account.status != "disconnected":
            raise DuplicateError("Email account is already connected")

        if account is not None:
            account.nylas_grant_id = data.nylas_grant_id
            account.status = "active"
            account.sync_error = None
            await db.flush()
        else:
            account = await email_account_repository.create(db, {
                "user_id": user_id,
                "organization_id": organization_id,
                "email_address": address,
                "provider": "nylas",
                "nylas_grant_id": data.nylas_grant_id,
                "status": "active",
            })
        logger.info("email_account_connected", account_id=str(account.id), user_id=str(user_id))
        return self._account_response(account)

    async def list_accounts(self, db: AsyncSession, user_id: UUID) -> list[EmailAccountResponse]:
        accounts: list[EmailAccount] = await email_account_repository.get_by_user(db, user_id)
        return [self._account_response(a) for a in accounts]

    async def disconnect_account(self, db: AsyncSession, user_id: UUID, account_id: UUID) -> None:
        """계정 연결을 해제합니다 — grant를 지우고 저장된 메일은 유지."""
        account: EmailAccount | None = await email_account_repository.get_for_user(db, account_id, user_id)
        if account is None:
            raise NotFoundError("Email account not found")
        account.status = "disconnected"
        account.nylas_grant_id = None
        await db.flush()
        logger.info("email_account_disconnected", account_id=str(account.id))

    # --- 이메일 (Emails) ---

    async def list_emails(
        self,
        db: AsyncSession,
        user_id: UUID,
        view: str | None = None,
        account_id: UUID | None = None,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        """뷰별 이메일 목록 — ``view=screener`` lists emails awaiting screening."""
        items: Sequence[Email]
        total: int
        items, total = await email_message_repository.get_filtered(
            db, user_id, view, account_id, unread_only, page, per_page
        )
        return PaginatedResponse(
            items=[EmailResponse(**self._email_fields(e)) for e in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def _get_email(self, db: AsyncSession, user_id: UUID, email_id: UUID) -> Email:
        email: Email | None = await email_message_repository.get_for_user(db, email_id, user_id)
        if email is None:
            raise NotFoundError("Email not found")
        return email

    async def get_email(self, db: AsyncSession, user_id: UUID, email_id: UUID) -> EmailDetailResponse:
        """이메일 상세 조회 — 조회 시 읽음 처리 (Opening marks it read)."""
        email: Email = await self._get_email(db, user_id, email_id)
        if not email.is_read:
            email.is_read = True
            if email.thread_id is not None:
                thread: EmailThread | None = await email_thread_repository.get_by_id(db, email.thread_id)
                if thread is not None and thread.unread_count > 0:
                    thread.unread_count -= 1
            await db.flush()
        return self._to_detail(email)

    async def update_flags(
        self,
        db: AsyncSession,
        user_id: UUID,
        email_id: UUID,
        data: EmailFlagsUpdate,
    ) -> EmailDetailResponse:
        email: Email = await self._get_email(db, user_id, email_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(email, field, value)
        await db.flush()
        return self._to_detail(email)

    # --- 스레드 (Threads) ---

    async def list_threads(
        self,
        db: AsyncSession,
        user_id: UUID,
        account_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items: Sequence[EmailThread]
        total: int
        items, total = await email_thread_repository.get_filtered(db, user_id, account_id, page, per_page)
        return PaginatedResponse(
            items=[self._thread_response(t) for t in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def _score(self, db: AsyncSession, thread: EmailThread, now: datetime) -> ThreadScoreResponse:
        account: EmailAccount | None = await email_account_repository.get_by_id(db, thread.account_id)
        user_email: str = account.email_address if account is not None else ""
        emails: list[Email] = sorted(thread.emails, key=lambda e: e.received_at)
        result: dict[str, Any] = calculate_thread_importance(thread, emails, user_email, now)
        thread.importance_score = result["score"]
        thread.importance_reason = result["reason"]
        return ThreadScoreResponse(thread_id=str(thread.id), **result)

    async def score_thread(self, db: AsyncSession, user_id: UUID, thread_id: UUID) -> ThreadScoreResponse:
        """스레드 중요도를 계산하고 저장합니다."""
        thread: EmailThread | None = await email_thread_repository.get_for_user(db, thread_id, user_id)
        if thread is None:
            raise NotFoundError("Email thread not found")
        result: ThreadScoreResponse = await self._score(db, thread, datetime.now(timezone.utc))
        await db.flush()
        return result

    async def score_all_threads(self, db: AsyncSession, user_id: UUID) -> BulkResultResponse:
        """사용자의 모든 스레드를 채점합니다 — 실패는 건너뛰고 집계."""
        now: datetime = datetime.now(timezone.utc)
        successful = failed = 0
        for thread in await email_thread_repository.get_all_for_user(db, user_id):
            try:
                await self._score(db, thread, now)
                successful += 1
            except Exception as exc:
                failed += 1
                logger.error("thread_scoring_failed", thread_id=str(thread.id), error=str(exc))
        await db.flush()
        logger.info("threads_scored", user_id=str(user_id), successful=successful, failed=failed)
        return BulkResultResponse(successful=successful, failed=failed)

    # --- 분류 (Categorization) ---

    def _categorize(self, email: Email) -> CategorizeResponse:
        category, confidence = categorize_email(email)
        email.ai_category = category
        email.ai_category_confidence = confidence
        return CategorizeResponse(email_id=str(email.id), category=category, confidence=confidence)

    async def categorize_email_by_id(self, db: AsyncSession, user_id: UUID, email_id: UUID) -> CategorizeResponse:
        email: Email = await self._get_email(db, user_id, email_id)
        result: CategorizeResponse = self._categorize(email)
        await db.flush()
        return result

    async def categorize_all(self, db: AsyncSession, user_id: UUID) -> BulkResultResponse:
        """미분류 이메일을 일괄 분류합니다 (최대 500건)."""
        successful = failed = 0
        for email in await email_message_repository.get_uncategorized(db, user_id, CATEGORIZE_BATCH_SIZE):
            try:
                self._categorize(email)
                successful += 1
            except Exception as exc:
                failed += 1
                logger.error("email_categorize_failed", email_id=str(email.id), error=str(exc))
        await db.flush()
        return BulkResultResponse(successful=successful, failed=failed)


# 싱글턴 인스턴스 — Singleton instance
email_service: EmailService = EmailService()
