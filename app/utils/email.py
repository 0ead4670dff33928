"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

Outbound mail for onboarding invitations, reminders and admin alerts.
SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import structlog

from app.config import settings

logger = structlog.get_logger(__name__)


def is_email_configured() -> bool:
    """SMTP 발송 가능 여부 — host and sender address are both set."""
    return bool(settings.SMTP_HOST and settings.SMTP_FROM_EMAIL)


def build_message(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> MIMEMultipart:
    """multipart/alternative 메시지를 구성합니다 (plain 먼저, html 나중)."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> bool:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (없으면 html만 발송)

    Returns:
        bool: 발송했으면 True, SMTP 미설정으로 건너뛰면 False

    Raises:
        aiosmtplib.SMTPException: SMTP 전송 실패
    """
    if not is_email_configured():
        logger.warning("email_skipped_not_configured", to=to, subject=subject)
        return False

    await aiosmtplib.send(
        build_message(to, subject, html, text),
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER or None,
        password=settings.SMTP_PASSWORD or None,
        start_tls=True,
    )
    logger.info("email_sent", to=to, subject=subject)
    return True
