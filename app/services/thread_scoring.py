"""스레드 중요도 점수 및 휴리스틱 분류.

Thread importance scoring and heuristic email categorization.
Pure functions; callers persist the results.

score = round(0.3 * sender + 0.3 * keyword + 0.2 * engagement + 0.2 * time)
Each factor is capped at 100 and the final score is clamped to 0..100.
"""

from datetime import datetime, timezone
from typing import Any

from app.services.email_classifier import get_email_address

FREE_MAIL_DOMAINS: tuple[str, ...] = ("gmail.com", "outlook.com", "yahoo.com", "hotmail.com")
URGENT_KEYWORDS: tuple[str, ...] = ("urgent", "asap", "important", "deadline", "critical", "emergency")
BUSINESS_KEYWORDS: tuple[str, ...] = (
    "meeting", "project", "proposal", "contract", "invoice",
    "payment", "budget", "review", "approval", "decision",
)
ACTION_KEYWORDS: tuple[str, ...] = ("please", "need", "request", "can you", "could you", "would you")
IMPORTANT_KEYWORDS: tuple[str, ...] = ("urgent", "important", "action required", "deadline", "asap", "critical")

WEIGHTS: dict[str, float] = {
    "sender_importance": 0.3,
    "keyword_relevance": 0.3,
    "thread_engagement": 0.2,
    "time_sensitivity": 0.2,
}


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _email_text(email: Any) -> str:
    return f"{_get(email, 'subject') or ''} {_get(email, 'body_text') or ''}".lower()


def _hours_since(moment: datetime | None, now: datetime) -> float | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (now - moment).total_seconds() / 3600


def _participant_addresses(thread: Any) -> list[str]:
    return [get_email_address(p).lower() for p in (_get(thread, "participants") or [])]


def _sender_importance(thread: Any, user_email: str) -> int:
    score: int = 50
    addresses: list[str] = _participant_addresses(thread)
    user_domain: str = user_email.split("@")[-1].lower() if "@" in user_email else ""

    if user_domain and any(f"@{user_domain}" in address for address in addresses):
        score += 15
    if len(addresses) > 2:
        score += 10
    # 무료 메일이 아닌 도메인은 업무 메일일 가능성이 높음 — Custom domains suggest business mail
    if any(address.split("@")[-1] not in FREE_MAIL_DOMAINS for address in addresses if address):
        score += 10
    return min(100, score)


def _keyword_relevance(thread: Any, emails: list[Any]) -> int:
    score: int = 30
    subject: str = (_get(thread, "subject") or "").lower()
    all_text: str = " ".join(_email_text(email) for email in emails)

    score += 15 * sum(1 for kw in URGENT_KEYWORDS if kw in subject or kw in all_text)
    score += 8 * sum(1 for kw in BUSINESS_KEYWORDS if kw in subject or kw in all_text)
    score += 5 * sum(1 for kw in ACTION_KEYWORDS if kw in all_text)
    return min(100, score)


def _thread_engagement(thread: Any, emails: list[Any], now: datetime) -> int:
    score: int = 20
    message_count: int = _get(thread, "message_count") or len(emails)

    if message_count >= 10:
        score += 40
    elif message_count >= 5:
        score += 30
    elif message_count >= 3:
        score += 20
    elif message_count >= 2:
        score += 10

    hours: float | None = _hours_since(_get(thread, "last_message_at"), now)
    if hours is not None:
        if hours < 24:
            score += 20
        elif hours < 72:
            score += 10

    score += min((_get(thread, "unread_count") or 0) * 5, 20)
    return min(100, score)


def _time_sensitivity(thread: Any, emails: list[Any], now: datetime) -> int:
    score: int = 40
    hours: float | None = _hours_since(_get(thread, "last_message_at"), now)
    if hours is not None:
        if hours < 1:
            score += 40
        elif hours < 6:
            score += 30
        elif hours < 24:
            score += 20
        elif hours < 72:
            score += 10

    if emails:
        text: str = _email_text(emails[0])
        if "deadline" in text or "by " in text or "due" in text:
            score += 20
    return min(100, score)


def _score_reason(score: int, factors: dict[str, int]) -> str:
    if score >= 80:
        parts: list[str] = ["High priority"]
    elif score >= 60:
        parts = ["Medium-high priority"]
    elif score >= 40:
        parts = ["Medium priority"]
    else:
        parts = ["Low priority"]

    if factors["keyword_relevance"] >= 70:
        parts.append("contains urgent or important keywords")
    if factors["time_sensitivity"] >= 70:
        parts.append("recent activity or time-sensitive")
    if factors["thread_engagement"] >= 70:
        parts.append("active conversation with multiple messages")
    if factors["sender_importance"] >= 70:
        parts.append("from important contact")
    return " - ".join(parts)


def calculate_thread_importance(
    thread: Any,
    emails: list[Any],
    user_email: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """스레드 중요도 점수를 계산합니다.

    Calculate the importance of an email thread.

    Args:
        thread: EmailThread 또는 dict (subject, participants, message_count,
                unread_count, last_message_at)
        emails: 스레드의 이메일 목록 (Emails of the thread; the first one is
                checked for deadline mentions)
        user_email: 메일함 주소 (Mailbox owner's address, for domain matching)
        now: 기준 시각 (Reference time, defaults to now)

    Returns:
        dict: {score, reason, factors}
    """
    now = now or datetime.now(timezone.utc)
    factors: dict[str, int] = {
        "sender_importance": _sender_importance(thread, user_email),
        "keyword_relevance": _keyword_relevance(thread, emails),
        "thread_engagement": _thread_engagement(thread, emails, now),
        "time_sensitivity": _time_sensitivity(thread, emails, now),
    }
    raw: int = round(sum(factors[name] * weight for name, weight in WEIGHTS.items()))
    score: int = min(100, max(0, raw))
    return {"score": score, "reason": _score_reason(score, factors), "factors": factors}


def categorize_email(email: Any) -> tuple[str | None, int]:
    """Gmail 스타일 카테고리로 휴리스틱 분류합니다.

    Categorize an email into newsletters / promotions / updates / social /
    important using keyword heuristics. Checked in that order.

    Returns:
        tuple[str | None, int]: (카테고리, 신뢰도 0-100), 해당 없음이면 (None, 0)
    """
    subject: str = (_get(email, "subject") or "").lower()
    sender: str = get_email_address(_get(email, "from_address")).lower()
    body: str = (_get(email, "body_text") or "").lower()

    if (
        any(kw in subject for kw in ("newsletter", "weekly", "monthly"))
        or any(kw in sender for kw in ("newsletter", "no-reply", "noreply"))
        or "unsubscribe" in body
    ):
        return "newsletters", 85

    if (
        any(kw in subject for kw in ("sale", "offer", "discount", "%", "deal", "limited time", "free"))
        or "shop now" in body
        or "buy now" in body
    ):
        return "promotions", 80

    if (
        any(kw in subject for kw in ("notification", "alert", "update", "reminder", "confirm", "verification"))
        or "notifications@" in sender
        or "alerts@" in sender
    ):
        return "updates", 75

    if (
        any(kw in sender for kw in ("facebook", "twitter", "linkedin", "instagram", "social"))
        or any(kw in subject for kw in ("tagged", "mentioned", "friend request"))
    ):
        return "social", 90

    if any(kw in subject or kw in body for kw in IMPORTANT_KEYWORDS):
        return "important", 85

    return None, 0
