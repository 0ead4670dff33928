"""이메일 분류기 — Hey 스타일 뷰 분류 (규칙 기반).

Email Classifier — Rule-based classification into Hey-style views.

Views:
    - paper_trail: 영수증, 청구서, 확인 메일 (Receipts, invoices, confirmations)
    - feed: 뉴스레터, 마케팅, 대량 발송 (Newsletters and bulk mail)
    - imbox: 개인적이거나 중요한 메일 (Personal or important mail)
    - screener: 아직 결정되지 않은 발신자 (Set by screening, never by the classifier)

Rules are checked in order; the first match wins.
"""

from typing import Any

RECEIPT_KEYWORDS: tuple[str, ...] = (
    "receipt", "invoice", "payment", "confirmation", "booking",
    "reservation", "order", "ticket", "shipped", "delivery",
    "transaction", "statement", "bill",
)

NEWSLETTER_KEYWORDS: tuple[str, ...] = (
    "newsletter", "digest", "weekly", "daily", "update", "news",
    "promo", "offer", "deal", "sale", "discount", "limited time",
    "subscribe", "manage preferences", "email preferences", "view in browser",
)

BULK_SENDER_PATTERNS: tuple[str, ...] = (
    "noreply", "no-reply", "newsletter", "marketing", "hello",
    "updates", "news", "notifications", "info@", "support@",
    "team@", "hi@", "hey@", "mail@",
)

MARKETING_PLATFORMS: tuple[str, ...] = (
    "sendgrid", "mailchimp", "constantcontact", "campaignmonitor",
    "hubspot", "marketo", "mailjet", "sendinblue", "mailgun",
)

UNSUBSCRIBE_MARKERS: tuple[str, ...] = ("unsubscribe", "opt out", "opt-out")

# 본문 키워드 검사 범위 — Only the start of the body is scanned for keywords
BODY_SCAN_LENGTH: int = 500


def _field(email: Any, name: str) -> Any:
    """ORM 객체와 dict 모두에서 필드를 읽습니다 — Read a field from a model or a dict."""
    if isinstance(email, dict):
        return email.get(name)
    return getattr(email, name, None)


def get_email_address(address: Any) -> str:
    """주소 값에서 이메일 주소를 추출합니다.

    Extract the address from a "user@host" string or a {name, email} dict.
    """
    if not address:
        return ""
    if isinstance(address, str):
        return address
    if isinstance(address, dict):
        return address.get("email") or ""
    return ""


def get_email_name(address: Any) -> str:
    """주소 값에서 표시 이름을 추출합니다.

    Display name of an address; falls back to the local part.
    """
    if not address:
        return ""
    if isinstance(address, str):
        return address.split("@")[0]
    if isinstance(address, dict):
        if address.get("name"):
            return address["name"]
        if address.get("email"):
            return address["email"].split("@")[0]
    return ""


def _is_paper_trail(subject: str, body: str) -> bool:
    head: str = body[:BODY_SCAN_LENGTH]
    return any(kw in subject or kw in head for kw in RECEIPT_KEYWORDS)


def _has_bulk_headers(headers: dict[str, Any] | None) -> bool:
    if not headers:
        return False
    if headers.get("list-unsubscribe") or headers.get("List-Unsubscribe"):
        return True
    for key in ("precedence", "Precedence"):
        value = headers.get(key)
        if isinstance(value, str) and value.lower() == "bulk":
            return True
    return bool(headers.get("x-campaign-id") or headers.get("X-Campaign-Id"))


def _is_newsletter(subject: str, body: str, sender: str, headers: dict[str, Any] | None) -> bool:
    if any(marker in body for marker in UNSUBSCRIBE_MARKERS):
        return True
    if _has_bulk_headers(headers):
        return True

    head: str = body[:BODY_SCAN_LENGTH]
    if any(kw in subject or kw in head for kw in NEWSLETTER_KEYWORDS):
        return True
    if any(pattern in sender for pattern in BULK_SENDER_PATTERNS):
        return True
    return any(platform in sender for platform in MARKETING_PLATFORMS)


def classify_email(email: Any) -> dict[str, Any]:
    """이메일을 Hey 스타일 뷰로 분류합니다.

    Classify an email into a Hey-style view.

    Args:
        email: Email 모델 또는 같은 필드를 가진 dict
               (Email model or a dict with subject, body_text, body_html,
               from_address and raw_headers)

    Returns:
        dict: {view, category, confidence, reasoning}
    """
    subject: str = (_field(email, "subject") or "").lower()
    body: str = (_field(email, "body_text") or _field(email, "body_html") or "").lower()
    sender: str = get_email_address(_field(email, "from_address")).lower()

    if _is_paper_trail(subject, body):
        category: str = "receipt" if ("receipt" in subject or "invoice" in subject) else "confirmation"
        return {
            "view": "paper_trail",
            "category": category,
            "confidence": 0.9,
            "reasoning": "Detected receipt/confirmation keywords",
        }

    if _is_newsletter(subject, body, sender, _field(email, "raw_headers")):
        return {
            "view": "feed",
            "category": "newsletter",
            "confidence": 0.85,
            "reasoning": "Detected bulk/marketing email patterns",
        }

    return {
        "view": "imbox",
        "category": "important",
        "confidence": 0.7,
        "reasoning": "Personal or important email",
    }
