"""리마인더 스케줄러 — 온보딩 리마인더 일정 계산 (순수 함수).

Reminder Scheduler — Pure scheduling logic for onboarding reminder emails.

Schedules (days after session creation):
    standard:   gentle 2, encouragement 5, final 7
    aggressive: gentle 1, encouragement 3, final 5
    gentle:     gentle 3, encouragement 7, final 10
    custom:     none (reminders are added one by one)
"""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

REMINDER_SCHEDULES: dict[str, list[dict[str, Any]]] = {
    "standard": [
        {"type": "gentle", "days_after_creation": 2},
        {"type": "encouragement", "days_after_creation": 5},
        {"type": "final", "days_after_creation": 7},
    ],
    "aggressive": [
        {"type": "gentle", "days_after_creation": 1},
        {"type": "encouragement", "days_after_creation": 3},
        {"type": "final", "days_after_creation": 5},
    ],
    "gentle": [
        {"type": "gentle", "days_after_creation": 3},
        {"type": "encouragement", "days_after_creation": 7},
        {"type": "final", "days_after_creation": 10},
    ],
    "custom": [],
}

REMINDER_LABELS: dict[str, str] = {
    "initial": "Initial Invitation",
    "gentle": "Gentle Reminder",
    "encouragement": "Encouragement",
    "final": "Final Reminder",
    "custom": "Custom Reminder",
}

# 고예산 기준 — Projects above this budget get the aggressive schedule
HIGH_BUDGET_THRESHOLD: int = 50000

# 최근 활동 유예 — No reminder while the client was active within this window
ACTIVITY_GRACE: timedelta = timedelta(hours=1)


def _utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def get_reminder_schedule(schedule_type: str) -> list[dict[str, Any]]:
    """스케줄 유형의 리마인더 설정 목록 — Reminder configs for a schedule type."""
    return [dict(config) for config in REMINDER_SCHEDULES.get(schedule_type, [])]


def calculate_scheduled_time(session_created_at: datetime, config: dict[str, Any]) -> datetime:
    """생성 시각 기준 발송 예정 시각을 계산합니다.

    created + days_after_creation days (+ hours_after_creation hours).
    """
    scheduled_at: datetime = session_created_at + timedelta(days=config.get("days_after_creation", 0))
    if config.get("hours_after_creation"):
        scheduled_at += timedelta(hours=config["hours_after_creation"])
    return scheduled_at


def generate_reminder_schedule(
    session_created_at: datetime,
    schedule_type: str,
    custom_schedule: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """세션의 리마인더 일정을 생성합니다.

    Generate the reminder schedule for a session.

    Returns:
        list[dict]: [{type, scheduled_at}, ...]
    """
    configs: list[dict[str, Any]] = (
        custom_schedule if schedule_type == "custom" and custom_schedule else get_reminder_schedule(schedule_type)
    )
    return [
        {"type": config["type"], "scheduled_at": calculate_scheduled_time(session_created_at, config)}
        for config in configs
    ]


def should_send_reminder(
    session_status: str,
    last_activity_at: datetime | None,
    expires_at: datetime | None,
    now: datetime | None = None,
) -> bool:
    """리마인더를 보내야 하는지 판단합니다.

    False when the session is completed, expired, or the client was active
    within the last hour.
    """
    now = now or datetime.now(timezone.utc)
    if session_status == "completed":
        return False
    if expires_at is not None and now > _utc(expires_at):
        return False
    if last_activity_at is not None and _utc(last_activity_at) > now - ACTIVITY_GRACE:
        return False
    return True


def is_reminder_due(scheduled_at: datetime, now: datetime | None = None) -> bool:
    return _utc(scheduled_at) < (now or datetime.now(timezone.utc))


def get_next_reminder(
    session_created_at: datetime,
    schedule_type: str,
    sent_reminder_types: list[str],
    now: datetime | None = None,
) -> dict[str, Any] | None:
    """아직 보내지 않은 첫 번째 도래 리마인더 — First due reminder type not yet sent."""
    for reminder in generate_reminder_schedule(session_created_at, schedule_type):
        if reminder["type"] not in sent_reminder_types and is_reminder_due(reminder["scheduled_at"], now):
            return reminder
    return None


def days_until_expiration(expires_at: datetime | None, now: datetime | None = None) -> int | None:
    """만료까지 남은 일수 (올림, 최소 0). 만료일이 없으면 None."""
    if expires_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    days: int = math.ceil((_utc(expires_at) - now).total_seconds() / 86400)
    return max(days, 0)


def format_reminder_type(reminder_type: str) -> str:
    return REMINDER_LABELS.get(reminder_type, reminder_type)


def get_recommended_schedule(
    project_priority: str | None = None,
    project_budget: Decimal | float | int | None = None,
) -> str:
    """프로젝트 특성에 따른 추천 스케줄.

    Recommend a schedule: critical/high priority or a budget above 50,000
    is aggressive, low priority is gentle, everything else standard.
    """
    if project_priority in ("critical", "high"):
        return "aggressive"
    if project_budget and project_budget > HIGH_BUDGET_THRESHOLD:
        return "aggressive"
    if project_priority == "low":
        return "gentle"
    return "standard"
