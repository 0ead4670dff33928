"""이메일 레포지토리 — 계정, 스레드, 메시지, 스크리닝 쿼리.

Email Repository — Account, thread, message and screening queries.
Every query is scoped to the owning user; mailboxes are private even
inside an organization.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.email import BlockedSender, ContactScreening, Email, EmailAccount, EmailThread
from app.repositories.base import BaseRepository


class EmailAccountRepository(BaseRepository[EmailAccount]):
    """메일 계정 레포지토리."""

    def __init__(self) -> None:
        super().__init__(EmailAccount)

    async def get_by_user(self, db: AsyncSession, user_id: UUID) -> list[EmailAccount]:
        """사용자의 연결된 계정 목록 — Connected accounts of a user."""
        result = await db.execute(
            select(EmailAccount)
            .where(EmailAccount.user_id == user_id, EmailAccount.status != "disconnected")
            .order_by(EmailAccount.created_at)
        )
        return list(result.scalars().all())

    async def get_for_user(
        self,
        db: AsyncSession,
        account_id: UUID,
        user_id: UUID,
    ) -> EmailAccount | None:
        result = await db.execute(
            select(EmailAccount).where(EmailAccount.id == account_id, EmailAccount.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_address(
        self,
        db: AsyncSession,
        user_id: UUID,
        email_address: str,
    ) -> EmailAccount | None:
        result = await db.execute(
            select(EmailAccount).where(
                EmailAccount.user_id == user_id,
                func.lower(EmailAccount.email_address) == email_address.lower(),
            )
        )
        return result.scalar_one_or_none()


class EmailThreadRepository(BaseRepository[EmailThread]):
    """이메일 스레드 레포지토리."""

    def __init__(self) -> None:
        super().__init__(EmailThread)

    async def get_by_nylas_id(
        self,
        db: AsyncSession,
        account_id: UUID,
        nylas_thread_id: str,
    ) -> EmailThread | None:
        result = await db.execute(
            select(EmailThread).where(
                EmailThread.account_id == account_id,
                EmailThread.nylas_thread_id == nylas_thread_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_for_user(
        self,
        db: AsyncSession,
        thread_id: UUID,
        user_id: UUID,
    ) -> EmailThread | None:
        """스레드를 메시지와 함께 조회합니다.

        Retrieve a thread with its emails eagerly loaded.
        """
        result = await db.execute(
            select(EmailThread)
            .options(selectinload(EmailThread.emails))
            .where(EmailThread.id == thread_id, EmailThread.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        user_id: UUID,
        account_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[EmailThread], int]:
        """스레드 목록을 중요도, 최신순으로 조회합니다.

        Retrieve threads ordered by importance score, then recency.
        Unscored threads sort last.
        """
        query: Select = select(EmailThread).where(EmailThread.user_id == user_id)
        if account_id is not None:
            query = query.where(EmailThread.account_id == account_id)
        query = query.order_by(
            EmailThread.importance_score.desc().nulls_last(),
            EmailThread.last_message_at.desc().nulls_last(),
        )
        return await self.get_paginated(db, query, page, per_page)

    async def get_all_for_user(self, db: AsyncSession, user_id: UUID) -> list[EmailThread]:
        result = await db.execute(
            select(EmailThread)
            .options(selectinload(EmailThread.emails))
            .where(EmailThread.user_id == user_id)
        )
        return list(result.scalars().all())


class EmailMessageRepository(BaseRepository[Email]):
    """이메일 메시지 레포지토리.

    Email message repository.

    Extends:
        BaseRepository[Email]
    """

    def __init__(self) -> None:
        super().__init__(Email)

    async def get_by_nylas_id(
        self,
        db: AsyncSession,
        account_id: UUID,
        nylas_message_id: str,
    ) -> Email | None:
        result = await db.execute(
            select(Email).where(
                Email.account_id == account_id,
                Email.nylas_message_id == nylas_message_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_for_user(
        self,
        db: AsyncSession,
        email_id: UUID,
        user_id: UUID,
    ) -> Email | None:
        result = await db.execute(select(Email).where(Email.id == email_id, Email.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        user_id: UUID,
        view: str | None = None,
        account_id: UUID | None = None,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Email], int]:
        """뷰/계정/읽음 필터로 이메일 목록을 조회합니다.

        Retrieve a paginated email list, newest first. The "screener" view
        lists emails still awaiting a screening decision; other views match
        hey_view. Trashed emails are excluded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 ID (Owning user)
            view: imbox | feed | paper_trail | screener
            account_id: 계정 필터 (Account filter)
            unread_only: 읽지 않은 메일만 (Unread only)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Email], int]: (이메일 목록, 전체 개수)
        """
        query: Select = select(Email).where(Email.user_id == user_id, Email.is_trash.is_(False))
        if view == "screener":
            query = query.where(Email.screening_status == "pending")
        elif view is not None:
            query = query.where(Email.hey_view == view)
        if account_id is not None:
            query = query.where(Email.account_id == account_id)
        if unread_only:
            query = query.where(Email.is_read.is_(False))
        query = query.order_by(Email.received_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_pending_screening(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 50,
    ) -> list[Email]:
        """스크리닝 대기 중인 이메일 — Pending-screening emails, newest first."""
        result = await db.execute(
            select(Email)
            .where(Email.user_id == user_id, Email.screening_status == "pending")
            .order_by(Email.received_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_uncategorized(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 500,
    ) -> list[Email]:
        result = await db.execute(
            select(Email)
            .where(Email.user_id == user_id, Email.ai_category.is_(None))
            .order_by(Email.received_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def relabel_sender(
        self,
        db: AsyncSession,
        user_id: UUID,
        sender_address: str,
        hey_view: str | None,
        screening_status: str = "screened",
    ) -> int:
        """발신자의 모든 이메일 분류를 갱신합니다.

        Re-label every email of the user sent from the given address and
        drop the classifier's category and confidence.
        from_address is JSON, so the address is compared lowercased.

        Returns:
            int: 갱신된 이메일 수 (Number of updated emails)
        """
        result = await db.execute(
            update(Email)
            .where(
                Email.user_id == user_id,
                func.lower(Email.from_address["email"].astext) == sender_address.lower(),
            )
            .values(hey_view=hey_view, hey_category=None, hey_confidence=None, screening_status=screening_status)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0

    async def get_in_thread(self, db: AsyncSession, thread_id: UUID) -> list[Email]:
        result = await db.execute(
            select(Email).where(Email.thread_id == thread_id).order_by(Email.received_at)
        )
        return list(result.scalars().all())

    async def get_older_than(
        self,
        db: AsyncSession,
        account_id: UUID,
        cutoff: datetime,
    ) -> list[Email]:
        result = await db.execute(
            select(Email).where(Email.account_id == account_id, Email.received_at < cutoff)
        )
        return list(result.scalars().all())


class ScreeningRepository(BaseRepository[ContactScreening]):
    """발신자 스크리닝 결정 레포지토리."""

    def __init__(self) -> None:
        super().__init__(ContactScreening)

    async def get_decision(
        self,
        db: AsyncSession,
        user_id: UUID,
        email_address: str,
    ) -> ContactScreening | None:
        result = await db.execute(
            select(ContactScreening).where(
                ContactScreening.user_id == user_id,
                ContactScreening.email_address == email_address.lower(),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        decision: str | None = None,
    ) -> list[ContactScreening]:
        query: Select = select(ContactScreening).where(ContactScreening.user_id == user_id)
        if decision is not None:
            query = query.where(ContactScreening.decision == decision)
        result = await db.execute(query.order_by(ContactScreening.decided_at.desc()))
        return list(result.scalars().all())

    async def get_for_user(
        self,
        db: AsyncSession,
        screening_id: UUID,
        user_id: UUID,
    ) -> ContactScreening | None:
        result = await db.execute(
            select(ContactScreening).where(
                ContactScreening.id == screening_id,
                ContactScreening.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()


class BlockedSenderRepository(BaseRepository[BlockedSender]):
    """차단 발신자 레포지토리."""

    def __init__(self) -> None:
        super().__init__(BlockedSender)

    async def get_by_address(
        self,
        db: AsyncSession,
        user_id: UUID,
        email_address: str,
    ) -> BlockedSender | None:
        result = await db.execute(
            select(BlockedSender).where(
                BlockedSender.user_id == user_id,
                BlockedSender.email_address == email_address.lower(),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_user(self, db: AsyncSession, user_id: UUID) -> list[BlockedSender]:
        result = await db.execute(
            select(BlockedSender)
            .where(BlockedSender.user_id == user_id)
            .order_by(BlockedSender.created_at.desc())
        )
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instances
email_account_repository: EmailAccountRepository = EmailAccountRepository()
email_thread_repository: EmailThreadRepository = EmailThreadRepository()
email_message_repository: EmailMessageRepository = EmailMessageRepository()
screening_repository: ScreeningRepository = ScreeningRepository()
blocked_sender_repository: BlockedSenderRepository = BlockedSenderRepository()
