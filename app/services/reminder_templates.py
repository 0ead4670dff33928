"""리마인더 이메일 템플릿 — 온보딩 리마인더 본문 생성.

Reminder email templates for onboarding sessions.
Each builder returns {"subject", "html", "text"}; the result is passed
straight to app.utils.email.send_email.
"""

from datetime import datetime
from html import escape
from typing import Any

from app.config import settings
from app.services.reminder_scheduler import days_until_expiration

# 만료일이 없을 때 안내하는 남은 일수 — Days shown when the session has no expiry
DEFAULT_DAYS_REMAINING: int = 30

_LAYOUT: str = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: {accent}; padding: 30px; text-align: center; border-radius: 8px 8px 0 0;">
    <h1 style="color: white; margin: 0; font-size: 28px;">{heading}</h1>
  </div>
  <div style="background: white; padding: 30px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 8px 8px;">
    <p style="font-size: 16px; margin-top: 0;">Hi {name},</p>
    {content}
    <div style="text-align: center; margin: 30px 0;">
      <a href="{url}" style="display: inline-block; background: {accent}; color: white; padding: 14px 32px; text-decoration: none; border-radius: 6px; font-weight: 600;">{cta}</a>
    </div>
    {footnote}
  </div>
  <div style="text-align: center; padding: 20px; color: #9ca3af; font-size: 12px;">
    <p>{signoff}</p>
  </div>
</body>
</html>"""

_PURPLE: str = "#667eea"
_RED: str = "#dc2626"


def get_onboarding_url(access_token: str) -> str:
    """클라이언트 온보딩 링크 — {APP_URL}/onboarding/{token}"""
    return f"{settings.APP_URL.rstrip('/')}/onboarding/{access_token}"


def _days_remaining(expires_at: datetime | None) -> int:
    days: int | None = days_until_expiration(expires_at)
    return DEFAULT_DAYS_REMAINING if days is None else days


def _session_fields(session: Any) -> dict[str, Any]:
    """세션/프로젝트에서 템플릿 값을 추출합니다.

    session is a dict with access_token, project_name, completion_percentage,
    current_step, total_steps and expires_at.
    """
    return {
        "url": get_onboarding_url(session["access_token"]),
        "project": escape(session.get("project_name") or "your project"),
        "project_text": session.get("project_name") or "your project",
        "percent": int(session.get("completion_percentage") or 0),
        "current_step": int(session.get("current_step") or 0),
        "total_steps": int(session.get("total_steps") or 0),
        "days": _days_remaining(session.get("expires_at")),
    }


def build_gentle_reminder(session: dict[str, Any], recipient_name: str = "there") -> dict[str, str]:
    """부드러운 리마인더 (2일차 기본).

    Gentle nudge showing progress when some has been made.
    """
    f: dict[str, Any] = _session_fields(session)
    subject: str = f"Quick reminder: Your {f['project_text']} onboarding awaits"

    progress_html: str = ""
    progress_text: str = ""
    if f["percent"] > 0:
        progress_html = (
            '<div style="background: #f3f4f6; padding: 15px; border-radius: 6px; margin: 20px 0;">'
            f'<p style="margin: 0; font-size: 14px; color: #6b7280;">Your Progress: {f["percent"]}% Complete '
            f'(Step {f["current_step"]} of {f["total_steps"]})</p></div>'
        )
        progress_text = f"Your Progress: {f['percent']}% Complete (Step {f['current_step']} of {f['total_steps']})\n\n"

    html: str = _LAYOUT.format(
        title=escape(subject),
        accent=_PURPLE,
        heading="Quick Reminder",
        name=escape(recipient_name),
        content=(
            f'<p style="font-size: 16px;">We noticed you started the onboarding for <strong>{f["project"]}</strong> '
            "but haven't finished yet.</p>"
            f"{progress_html}"
            '<p style="font-size: 16px;">It only takes a few more minutes to complete. Let\'s get your project started!</p>'
        ),
        url=f["url"],
        cta="Continue Onboarding",
        footnote=(
            '<p style="font-size: 14px; color: #6b7280;">'
            f'<strong>Note:</strong> This link expires in {f["days"]} days.</p>'
        ),
        signoff="Need help? Reply to this email and we'll get back to you right away.",
    )
    text: str = (
        f"Hi {recipient_name},\n\n"
        f"We noticed you started the onboarding for {f['project_text']} but haven't finished yet.\n\n"
        f"{progress_text}"
        "It only takes a few more minutes to complete. Let's get your project started!\n\n"
        f"Continue Onboarding: {f['url']}\n\n"
        f"Note: This link expires in {f['days']} days."
    )
    return {"subject": subject, "html": html, "text": text}


def build_encouragement_reminder(session: dict[str, Any], recipient_name: str = "there") -> dict[str, str]:
    """격려 리마인더 (5일차 기본) — Offers help."""
    f: dict[str, Any] = _session_fields(session)
    subject: str = f"Need help with your {f['project_text']} onboarding?"

    html: str = _LAYOUT.format(
        title=escape(subject),
        accent=_PURPLE,
        heading="We're Here to Help",
        name=escape(recipient_name),
        content=(
            f'<p style="font-size: 16px;">We wanted to check in on your onboarding for <strong>{f["project"]}</strong>.</p>'
            '<p style="font-size: 16px;">Completing your onboarding helps us understand your exact requirements '
            "and start your project faster.</p>"
            '<div style="background: #fef3c7; border-left: 4px solid #f59e0b; padding: 15px; margin: 20px 0;">'
            '<p style="margin: 0; font-size: 14px;"><strong>Stuck on something?</strong> '
            "Reply to this email and we'll help you through it.</p></div>"
        ),
        url=f["url"],
        cta="Complete Onboarding Now",
        footnote=f'<p style="font-size: 14px; color: #6b7280;"><strong>Expires in {f["days"]} days.</strong></p>',
        signoff="Questions? Just hit reply.",
    )
    text: str = (
        f"Hi {recipient_name},\n\n"
        f"We wanted to check in on your onboarding for {f['project_text']}.\n\n"
        "Completing your onboarding helps us understand your exact requirements and start your project faster.\n\n"
        "Stuck on something? Reply to this email and we'll help you through it.\n\n"
        f"Complete Onboarding Now: {f['url']}\n\n"
        f"Expires in {f['days']} days."
    )
    return {"subject": subject, "html": html, "text": text}


def build_final_reminder(session: dict[str, Any], recipient_name: str = "there") -> dict[str, str]:
    """마지막 리마인더 (7일차 기본) — Warns about expiry."""
    f: dict[str, Any] = _session_fields(session)
    subject: str = f"Final reminder: Complete your {f['project_text']} onboarding"
    # 남은 예상 시간(분) — 20분 기준에서 진행률만큼 차감 (Remaining minutes estimate)
    minutes_left: int = max(20 - f["percent"] // 5, 1)

    html: str = _LAYOUT.format(
        title=escape(subject),
        accent=_RED,
        heading="Final Reminder",
        name=escape(recipient_name),
        content=(
            f'<p style="font-size: 16px;">This is our final reminder about your onboarding for <strong>{f["project"]}</strong>.</p>'
            '<div style="background: #fee2e2; border-left: 4px solid #ef4444; padding: 15px; margin: 20px 0;">'
            f'<p style="margin: 0; font-size: 16px;"><strong>Your onboarding link expires in {f["days"]} days!</strong></p>'
            '<p style="margin: 10px 0 0 0; font-size: 14px;">After it expires, you\'ll need to request a new invitation.</p></div>'
            f'<p style="font-size: 16px; font-weight: 600;">Takes only {minutes_left} more minutes to complete.</p>'
        ),
        url=f["url"],
        cta="Complete Now",
        footnote="",
        signoff="This is our last reminder. We hope to hear from you soon!",
    )
    text: str = (
        f"Hi {recipient_name},\n\n"
        f"This is our final reminder about your onboarding for {f['project_text']}.\n\n"
        f"YOUR ONBOARDING LINK EXPIRES IN {f['days']} DAYS!\n"
        "After it expires, you'll need to request a new invitation.\n\n"
        f"Takes only {minutes_left} more minutes to complete.\n\n"
        f"Complete Now: {f['url']}"
    )
    return {"subject": subject, "html": html, "text": text}


def build_custom_reminder(
    session: dict[str, Any],
    recipient_name: str,
    subject: str,
    message: str,
) -> dict[str, str]:
    """사용자 정의 리마인더 — Team-written subject and message."""
    f: dict[str, Any] = _session_fields(session)
    html: str = _LAYOUT.format(
        title=escape(subject),
        accent=_PURPLE,
        heading="Message from Your Team",
        name=escape(recipient_name),
        content=f'<div style="font-size: 16px; white-space: pre-wrap;">{escape(message)}</div>',
        url=f["url"],
        cta="Continue to Onboarding",
        footnote="",
        signoff="Questions? Reply to this email anytime.",
    )
    text: str = f"Hi {recipient_name},\n\n{message}\n\nContinue to Onboarding: {f['url']}"
    return {"subject": subject, "html": html, "text": text}


def get_reminder_email(
    reminder_type: str,
    session: dict[str, Any],
    recipient_name: str = "there",
    custom_subject: str | None = None,
    custom_message: str | None = None,
) -> dict[str, str]:
    """리마인더 유형에 맞는 이메일을 생성합니다.

    Build the email for a reminder type. Unknown and "initial" types fall
    back to the gentle template.

    Raises:
        ValueError: custom 유형에 제목/메시지가 없을 때
                    (Custom reminder without subject and message)
    """
    if reminder_type == "encouragement":
        return build_encouragement_reminder(session, recipient_name)
    if reminder_type == "final":
        return build_final_reminder(session, recipient_name)
    if reminder_type == "custom":
        if not custom_subject or not custom_message:
            raise ValueError("Custom reminder requires subject and message")
        return build_custom_reminder(session, recipient_name, custom_subject, custom_message)
    return build_gentle_reminder(session, recipient_name)


def build_invitation_email(
    session: dict[str, Any],
    recipient_name: str = "there",
    estimated_minutes: int = 0,
) -> dict[str, str]:
    """온보딩 초대 이메일 — First email with the portal link."""
    f: dict[str, Any] = _session_fields(session)
    subject: str = f"Let's get started on {f['project_text']}"
    html: str = _LAYOUT.format(
        title=escape(subject),
        accent=_PURPLE,
        heading="Welcome Aboard",
        name=escape(recipient_name),
        content=(
            f'<p style="font-size: 16px;">We\'re excited to start working on <strong>{f["project"]}</strong>. '
            "To kick things off, please complete a short onboarding questionnaire.</p>"
            '<div style="background: #f3f4f6; padding: 15px; border-radius: 6px; margin: 20px 0;">'
            f'<p style="margin: 0; font-size: 14px; color: #6b7280;">{f["total_steps"]} steps, '
            f"about {estimated_minutes} minutes. Your answers are saved as you go.</p></div>"
        ),
        url=f["url"],
        cta="Start Onboarding",
        footnote=(
            '<p style="font-size: 14px; color: #6b7280;">'
            f'<strong>Note:</strong> This link expires in {f["days"]} days.</p>'
        ),
        signoff="Questions? Reply to this email and we'll help.",
    )
    text: str = (
        f"Hi {recipient_name},\n\n"
        f"We're excited to start working on {f['project_text']}. "
        "To kick things off, please complete a short onboarding questionnaire.\n\n"
        f"{f['total_steps']} steps, about {estimated_minutes} minutes. Your answers are saved as you go.\n\n"
        f"Start Onboarding: {f['url']}\n\n"
        f"Note: This link expires in {f['days']} days."
    )
    return {"subject": subject, "html": html, "text": text}


def build_completion_notice(
    project_name: str,
    client_name: str | None,
    client_email: str | None,
    dashboard_url: str,
) -> dict[str, str]:
    """관리자용 온보딩 완료 알림 — Admin notice that a client finished onboarding."""
    client: str = client_name or client_email or "A client"
    subject: str = f"Onboarding completed: {project_name}"
    html: str = _LAYOUT.format(
        title=escape(subject),
        accent="#10b981",
        heading="Onboarding Completed",
        name="team",
        content=(
            f'<p style="font-size: 16px;"><strong>{escape(client)}</strong> completed the onboarding '
            f"for <strong>{escape(project_name)}</strong>.</p>"
            '<p style="font-size: 16px;">Review the responses and generate the project tasks.</p>'
        ),
        url=dashboard_url,
        cta="View Responses",
        footnote="",
        signoff="Sent automatically when a client completes onboarding.",
    )
    text: str = (
        f"{client} completed the onboarding for {project_name}.\n\n"
        "Review the responses and generate the project tasks.\n\n"
        f"View Responses: {dashboard_url}"
    )
    return {"subject": subject, "html": html, "text": text}
