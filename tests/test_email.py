"""이메일 테스트 — 분류기, 스레드 점수, 계정, 동기화, 스크리닝.

Email tests — Hey-style classifier, thread scoring, mailbox accounts,
Nylas sync against a mocked transport, and sender screening.
"""

import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import AsyncClient

from app.models.email import Email
from app.services.email_classifier import classify_email, get_email_address, get_email_name
from app.services.email_sync_service import email_sync_service, folder_flags
from app.services.nylas_client import NylasClient
from app.services.screening_service import screening_service
from app.services.thread_scoring import calculate_thread_importance, categorize_email
from tests.conftest import auth_header

EMAIL = "/api/v1/admin/email"
SCREENING = "/api/v1/admin/email/screening"
NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def _message(mid: str, sender: str, subject: str, thread_id: str | None = None, **extra) -> dict:
    return {
        "id": mid,
        "thread_id": thread_id or mid,
        "subject": subject,
        "snippet": subject[:20],
        "from": [{"name": sender.split("@")[0].title(), "email": sender}],
        "to": [{"name": "Me", "email": "me@acme.com"}],
        "date": int(time.time()) - 3600,
        "unread": True,
        "folders": ["INBOX"],
        "body": extra.pop("body", "Hello there"),
        **extra,
    }


def _nylas(pages: list[list[dict]], status_code: int = 200) -> NylasClient:
    """페이지 커서를 따라가는 Nylas 목 클라이언트."""
    def handler(request: httpx.Request) -> httpx.Response:
        if status_code != 200:
            return httpx.Response(status_code, json={"error": "nope"})
        index = int(request.url.params.get("page_token") or 0)
        next_cursor = str(index + 1) if index + 1 < len(pages) else None
        return httpx.Response(200, json={"data": pages[index], "next_cursor": next_cursor})

    return NylasClient(api_key="test", base_url="https://nylas.test", transport=httpx.MockTransport(handler))


@pytest.fixture
def mailbox(monkeypatch):
    """동기화 서비스의 Nylas 클라이언트를 교체하는 헬퍼."""
    def _install(pages: list[list[dict]], status_code: int = 200) -> None:
        monkeypatch.setattr(email_sync_service, "client", _nylas(pages, status_code))
    return _install


async def _connect(client: AsyncClient, token: str) -> dict:
    res = await client.post(f"{EMAIL}/accounts", json={
        "email_address": "Me@Acme.com", "nylas_grant_id": "grant-1",
    }, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


# ===== Pure logic =====

class TestClassifier:
    """Hey 스타일 분류 테스트."""

    def test_receipt_goes_to_paper_trail(self):
        """영수증 키워드는 paper_trail."""
        result = classify_email({"subject": "Your receipt from Acme", "from_address": {"email": "billing@acme.com"}})
        assert result["view"] == "paper_trail"
        assert result["category"] == "receipt"
        assert result["confidence"] == 0.9

    def test_bulk_headers_go_to_feed(self):
        """List-Unsubscribe 헤더는 feed."""
        result = classify_email({
            "subject": "Thoughts on Q3",
            "from_address": {"email": "jane@corp.com"},
            "raw_headers": {"list-unsubscribe": "<mailto:x@y>"},
        })
        assert result["view"] == "feed"

    def test_personal_goes_to_imbox(self):
        """일반 메일은 imbox."""
        result = classify_email({"subject": "Lunch tomorrow?", "body_text": "Are you free?",
                                 "from_address": {"email": "jane@corp.com"}})
        assert result == {
            "view": "imbox", "category": "important", "confidence": 0.7,
            "reasoning": "Personal or important email",
        }

    def test_address_helpers(self):
        """주소/이름 추출."""
        assert get_email_address({"name": "Jane", "email": "jane@corp.com"}) == "jane@corp.com"
        assert get_email_address(None) == ""
        assert get_email_name({"email": "jane@corp.com"}) == "jane"
        assert get_email_name("bob@corp.com") == "bob"


class TestThreadScoring:
    """스레드 중요도 및 카테고리 테스트."""

    def test_urgent_active_thread_scores_high(self):
        """긴급 키워드와 최근 활동이 있는 스레드는 높은 점수."""
        thread = {
            "subject": "URGENT: contract approval needed",
            "participants": ["me@acme.com", "ceo@acme.com", "legal@client.io"],
            "message_count": 6,
            "unread_count": 3,
            "last_message_at": NOW - timedelta(minutes=30),
        }
        emails = [{"subject": thread["subject"], "body_text": "Please review by Friday, deadline is firm."}]
        result = calculate_thread_importance(thread, emails, "me@acme.com", now=NOW)
        assert result["score"] >= 80
        assert result["reason"].startswith("High priority")
        assert set(result["factors"]) == {
            "sender_importance", "keyword_relevance", "thread_engagement", "time_sensitivity",
        }

    def test_stale_thread_scores_low(self):
        """오래되고 조용한 스레드는 낮은 점수."""
        thread = {
            "subject": "hi",
            "participants": ["friend@gmail.com"],
            "message_count": 1,
            "unread_count": 0,
            "last_message_at": NOW - timedelta(days=30),
        }
        result = calculate_thread_importance(thread, [{"subject": "hi", "body_text": "hey"}], "me@acme.com", now=NOW)
        assert result["score"] < 40
        assert result["reason"] == "Low priority"

    def test_categorize_email(self):
        """Gmail 스타일 카테고리 순서."""
        assert categorize_email({"subject": "Weekly digest", "from_address": {"email": "a@b.com"}}) == ("newsletters", 85)
        assert categorize_email({"subject": "50% off today", "from_address": {"email": "a@b.com"}}) == ("promotions", 80)
        assert categorize_email({"subject": "Security alert", "from_address": {"email": "a@b.com"}}) == ("updates", 75)
        assert categorize_email({"subject": "You were mentioned", "from_address": {"email": "a@b.com"}}) == ("social", 90)
        assert categorize_email({"subject": "Action required", "from_address": {"email": "a@b.com"}}) == ("important", 85)
        assert categorize_email({"subject": "hello", "from_address": {"email": "a@b.com"}}) == (None, 0)

    def test_folder_flags(self):
        """폴더 이름으로 플래그 결정."""
        assert folder_flags(["SENT"])["is_sent"] is True
        assert folder_flags(["Trash"])["is_trash"] is True
        assert folder_flags(None) == {"is_sent": False, "is_draft": False, "is_trash": False, "is_archived": False}


# ===== Accounts =====

class TestEmailAccounts:
    """메일 계정 테스트."""

    async def test_connect_and_duplicate(self, client: AsyncClient, rep_token):
        """계정 연결, 같은 주소 재연결은 409."""
        account = await _connect(client, rep_token)
        assert account["email_address"] == "me@acme.com"
        assert account["status"] == "active"

        res = await client.post(f"{EMAIL}/accounts", json={
            "email_address": "me@acme.com", "nylas_grant_id": "grant-2",
        }, headers=auth_header(rep_token))
        assert res.status_code == 409

    async def test_reconnect_after_disconnect(self, client: AsyncClient, rep_token):
        """연결 해제 후 재연결은 같은 계정을 재활성화."""
        account = await _connect(client, rep_token)
        res = await client.delete(f"{EMAIL}/accounts/{account['id']}", headers=auth_header(rep_token))
        assert res.status_code == 204

        again = await _connect(client, rep_token)
        assert again["id"] == account["id"]
        assert again["status"] == "active"

    async def test_accounts_are_per_user(self, client: AsyncClient, rep_token, manager_token):
        """다른 사용자의 계정은 보이지 않음."""
        await _connect(client, rep_token)
        res = await client.get(f"{EMAIL}/accounts", headers=auth_header(manager_token))
        assert res.json() == []


# ===== Sync =====

class TestEmailSync:
    """Nylas 동기화 테스트."""

    async def test_sync_pages_and_threads(self, client: AsyncClient, rep_token, mailbox):
        """페이지를 따라가며 저장, 같은 스레드는 묶음."""
        mailbox([
            [
                _message("m1", "jane@client.io", "Project kickoff", thread_id="t1"),
                _message("m2", "jane@client.io", "Re: Project kickoff", thread_id="t1"),
            ],
            [_message("m3", "billing@vendor.com", "Your invoice #42")],
        ])
        account = await _connect(client, rep_token)

        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json() == {"synced": 3, "skipped": 0, "errors": 0}

        threads = (await client.get(f"{EMAIL}/threads", headers=auth_header(rep_token))).json()
        counts = sorted(t["message_count"] for t in threads["items"])
        assert counts == [1, 2]

        res = await client.get(f"{EMAIL}/messages", params={"view": "paper_trail"}, headers=auth_header(rep_token))
        assert [m["subject"] for m in res.json()["items"]] == ["Your invoice #42"]

        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        assert res.json() == {"synced": 0, "skipped": 3, "errors": 0}

    async def test_resync_adjusts_thread_unread_count(self, client: AsyncClient, rep_token, mailbox):
        """재동기화로 읽음 상태가 바뀌면 스레드 미읽음 수를 조정."""
        mailbox([[
            _message("m1", "jane@client.io", "Kickoff", thread_id="t1"),
            _message("m2", "jane@client.io", "Re: Kickoff", thread_id="t1"),
        ]])
        account = await _connect(client, rep_token)
        await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        threads = (await client.get(f"{EMAIL}/threads", headers=auth_header(rep_token))).json()["items"]
        assert threads[0]["unread_count"] == 2

        mailbox([[
            _message("m1", "jane@client.io", "Kickoff", thread_id="t1", unread=False),
            _message("m2", "jane@client.io", "Re: Kickoff", thread_id="t1"),
        ]])
        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        assert res.json()["skipped"] == 2
        threads = (await client.get(f"{EMAIL}/threads", headers=auth_header(rep_token))).json()["items"]
        assert threads[0]["unread_count"] == 1

        mailbox([[
            _message("m1", "jane@client.io", "Kickoff", thread_id="t1"),
            _message("m2", "jane@client.io", "Re: Kickoff", thread_id="t1"),
        ]])
        await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        threads = (await client.get(f"{EMAIL}/threads", headers=auth_header(rep_token))).json()["items"]
        assert threads[0]["unread_count"] == 2

    async def test_sync_failure_marks_account(self, client: AsyncClient, rep_token, mailbox):
        """공급자 오류 시 502, 계정 error 상태 및 알림."""
        mailbox([], status_code=401)
        account = await _connect(client, rep_token)

        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        assert res.status_code == 502

        accounts = (await client.get(f"{EMAIL}/accounts", headers=auth_header(rep_token))).json()
        assert accounts[0]["status"] == "error"
        assert "401" in accounts[0]["sync_error"]

        notes = (await client.get("/api/v1/admin/notifications", headers=auth_header(rep_token))).json()
        assert notes["items"][0]["type"] == "sync_failed"

    async def test_sync_disconnected_account(self, client: AsyncClient, rep_token):
        """연결 해제된 계정 동기화는 400."""
        account = await _connect(client, rep_token)
        await client.delete(f"{EMAIL}/accounts/{account['id']}", headers=auth_header(rep_token))
        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))
        assert res.status_code == 400

    async def test_open_marks_read_and_flags(self, client: AsyncClient, rep_token, mailbox):
        """상세 조회 시 읽음 처리, 플래그 수정."""
        mailbox([[_message("m1", "jane@client.io", "Hello")]])
        account = await _connect(client, rep_token)
        await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))

        email = (await client.get(f"{EMAIL}/messages", headers=auth_header(rep_token))).json()["items"][0]
        assert email["is_read"] is False

        res = await client.get(f"{EMAIL}/messages/{email['id']}", headers=auth_header(rep_token))
        assert res.json()["is_read"] is True

        res = await client.get(f"{EMAIL}/messages", params={"unread_only": True}, headers=auth_header(rep_token))
        assert res.json()["total"] == 0

        res = await client.patch(f"{EMAIL}/messages/{email['id']}", json={"is_starred": True},
                                 headers=auth_header(rep_token))
        assert res.json()["is_starred"] is True

    async def test_categorize_and_score(self, client: AsyncClient, rep_token, mailbox):
        """일괄 분류와 스레드 채점."""
        mailbox([[
            _message("m1", "news@shop.com", "Weekly newsletter"),
            _message("m2", "boss@acme.com", "Urgent: budget review"),
        ]])
        account = await _connect(client, rep_token)
        await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))

        res = await client.post(f"{EMAIL}/messages/categorize", headers=auth_header(rep_token))
        assert res.json() == {"successful": 2, "failed": 0}

        res = await client.post(f"{EMAIL}/threads/score", headers=auth_header(rep_token))
        assert res.json()["successful"] == 2

        threads = (await client.get(f"{EMAIL}/threads", headers=auth_header(rep_token))).json()["items"]
        assert all(t["importance_score"] is not None for t in threads)


# ===== Screening =====

class TestScreening:
    """발신자 스크리닝 테스트."""

    async def _sync_pending(self, client: AsyncClient, token: str, mailbox) -> dict:
        mailbox([[
            _message("m1", "Jane@Client.io", "Intro"),
            _message("m2", "jane@client.io", "Follow up"),
            _message("m3", "spam@junk.biz", "Hey"),
        ]])
        account = await _connect(client, token)
        res = await client.post(f"{EMAIL}/accounts/{account['id']}/sync", json={"skip_classification": True},
                                headers=auth_header(token))
        assert res.json()["synced"] == 3
        return account

    async def test_unscreened_senders_grouped(self, client: AsyncClient, rep_token, mailbox):
        """대기 메일은 발신자별로 묶임."""
        await self._sync_pending(client, rep_token, mailbox)
        res = await client.get(f"{SCREENING}/unscreened", headers=auth_header(rep_token))
        senders = {s["email_address"]: s["count"] for s in res.json()}
        assert senders == {"jane@client.io": 2, "spam@junk.biz": 1}

    async def test_screen_in_relabels_emails(self, client: AsyncClient, rep_token, mailbox):
        """imbox 결정 시 해당 발신자 메일 재분류."""
        await self._sync_pending(client, rep_token, mailbox)
        res = await client.post(SCREENING, json={"email_address": "JANE@client.io", "decision": "imbox"},
                                headers=auth_header(rep_token))
        assert res.status_code == 200
        assert res.json()["emails_updated"] == 2

        res = await client.get(f"{EMAIL}/messages", params={"view": "imbox"}, headers=auth_header(rep_token))
        assert res.json()["total"] == 2
        res = await client.get(f"{EMAIL}/messages", params={"view": "screener"}, headers=auth_header(rep_token))
        assert res.json()["total"] == 1

    async def test_block_and_unblock(self, client: AsyncClient, rep_token, mailbox):
        """차단 시 차단 목록 추가, 해제 시 스크리너로 복귀."""
        await self._sync_pending(client, rep_token, mailbox)
        await client.post(SCREENING, json={"email_address": "spam@junk.biz", "decision": "blocked"},
                          headers=auth_header(rep_token))

        blocked = (await client.get(f"{SCREENING}/blocked", headers=auth_header(rep_token))).json()
        assert [b["email_address"] for b in blocked] == ["spam@junk.biz"]
        decisions = (await client.get(f"{SCREENING}/decisions", params={"decision": "blocked"},
                                      headers=auth_header(rep_token))).json()
        assert len(decisions) == 1

        res = await client.delete(f"{SCREENING}/blocked/spam@junk.biz", headers=auth_header(rep_token))
        assert res.status_code == 204
        assert (await client.get(f"{SCREENING}/blocked", headers=auth_header(rep_token))).json() == []
        assert (await client.get(f"{SCREENING}/decisions", headers=auth_header(rep_token))).json() == []

        res = await client.get(f"{EMAIL}/messages", params={"view": "screener"}, headers=auth_header(rep_token))
        assert res.json()["total"] == 1

    async def test_changing_decision_unblocks(self, client: AsyncClient, rep_token, mailbox):
        """차단 후 다른 결정으로 바꾸면 차단 목록에서 제거."""
        await self._sync_pending(client, rep_token, mailbox)
        for decision in ("blocked", "feed"):
            await client.post(SCREENING, json={"email_address": "spam@junk.biz", "decision": decision},
                              headers=auth_header(rep_token))
        assert (await client.get(f"{SCREENING}/blocked", headers=auth_header(rep_token))).json() == []

    async def test_decision_overrides_classifier_on_sync(self, client: AsyncClient, rep_token, mailbox):
        """저장된 결정이 있는 발신자의 새 메일은 결정대로 분류."""
        await client.post(SCREENING, json={"email_address": "jane@client.io", "decision": "feed"},
                          headers=auth_header(rep_token))
        mailbox([[_message("m9", "jane@client.io", "Your receipt")]])
        account = await _connect(client, rep_token)
        await client.post(f"{EMAIL}/accounts/{account['id']}/sync", headers=auth_header(rep_token))

        res = await client.get(f"{EMAIL}/messages", params={"view": "feed"}, headers=auth_header(rep_token))
        assert [m["screening_status"] for m in res.json()["items"]] == ["screened"]

    async def test_decision_clears_classifier_labels(self, db, client: AsyncClient, rep_token, rep_user):
        """결정으로 분류하면 이전 분류기 카테고리와 신뢰도를 지움."""
        await client.post(SCREENING, json={"email_address": "jane@client.io", "decision": "imbox"},
                          headers=auth_header(rep_token))
        email = Email(
            user_id=rep_user.id,
            from_address={"name": "Jane", "email": "Jane@client.io"},
            hey_view="paper_trail",
            hey_category="receipt",
            hey_confidence=0.9,
            screening_status="auto_classified",
        )

        await screening_service.auto_classify_email(db, email)
        assert email.hey_view == "imbox"
        assert email.screening_status == "screened"
        assert email.hey_category is None
        assert email.hey_confidence is None
