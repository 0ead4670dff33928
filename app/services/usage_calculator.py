"""사용량 계산기 — 음성 통화 분 단위 과금 계산 (순수 함수).

Usage Calculator — Minute metering math for voice calls.
All money amounts are integer cents; call durations round up to whole
minutes.
"""

import math
from typing import Any

# (상한 미만 사용률, 임계치, 상태, 색상, 메시지) — Threshold table, first match wins
USAGE_THRESHOLDS: list[tuple[int, int, str, str, str]] = [
    (50, 50, "safe", "green", "You're well within your included minutes"),
    (75, 75, "safe", "green", "You've used about half your included minutes"),
    (90, 90, "warning", "yellow", "You're approaching your included minute limit"),
    (100, 100, "critical", "orange", "You're close to exceeding your included minutes"),
]
EXCEEDED_THRESHOLD: tuple[int, str, str, str] = (
    100, "exceeded", "red", "You're now using overage minutes - additional charges apply",
)


def seconds_to_minutes(duration_seconds: int) -> int:
    return math.ceil(duration_seconds / 60)


def calculate_call_usage(
    duration_seconds: int,
    current_minutes: int,
    included_minutes: int,
    overage_rate: int,
) -> dict[str, Any]:
    """단일 통화의 사용량과 비용을 계산합니다.

    Calculate minutes and cost for one call.

    The call is an overage call when the cycle allowance was already used
    up before it started; a call that crosses the allowance only pays for
    the minutes past it.

    Returns:
        dict: {minutes, is_overage, overage_minutes, cost_in_cents,
               rate_per_minute, remaining_minutes}
    """
    minutes: int = seconds_to_minutes(duration_seconds)
    is_overage: bool = current_minutes >= included_minutes
    overage_minutes: int = minutes if is_overage else max(0, current_minutes + minutes - included_minutes)
    rate: int = overage_rate if overage_minutes > 0 else 0
    return {
        "minutes": minutes,
        "is_overage": is_overage,
        "overage_minutes": overage_minutes,
        "cost_in_cents": overage_minutes * overage_rate,
        "rate_per_minute": rate,
        "remaining_minutes": max(0, included_minutes - (current_minutes + minutes)),
    }


def build_usage_status(
    minutes_used: int,
    minutes_included: int,
    overage_cost: int,
    subscription_status: str,
) -> dict[str, Any]:
    """이번 주기 사용량 상태를 계산합니다.

    An allowance of 0 is treated as 1 so percentages stay defined.
    Calls are allowed whenever the subscription is active; overage is
    billed rather than blocked.
    """
    included: int = minutes_included or 1
    return {
        "minutes_used": minutes_used,
        "minutes_included": included,
        "minutes_remaining": max(0, included - minutes_used),
        "overage_minutes": max(0, minutes_used - included),
        "overage_cost": overage_cost,
        "is_in_overage": minutes_used > included,
        "percentage_used": min(100, round(minutes_used / included * 100)),
        "can_make_calls": subscription_status == "active",
    }


def get_usage_threshold(percentage_used: int) -> dict[str, Any]:
    """사용률에 따른 알림 임계치 — Notification threshold for a usage percentage."""
    for upper, threshold, status, color, message in USAGE_THRESHOLDS:
        if percentage_used < upper:
            return {"threshold": threshold, "status": status, "color": color, "message": message}
    threshold, status, color, message = EXCEEDED_THRESHOLD
    return {"threshold": threshold, "status": status, "color": color, "message": message}


def estimate_call_cost(
    duration_seconds: int,
    current_minutes: int,
    included_minutes: int,
    overage_rate: int,
) -> dict[str, Any]:
    """예정된 통화의 비용을 추정합니다.

    Only the minutes beyond what is left of the allowance are charged.
    """
    minutes: int = seconds_to_minutes(duration_seconds)
    remaining: int = max(0, included_minutes - current_minutes)
    overage_minutes: int = max(0, minutes - remaining)
    return {
        "minutes": minutes,
        "is_overage": remaining < minutes,
        "overage_minutes": overage_minutes,
        "estimated_cost": overage_minutes * overage_rate,
        "rate_per_minute": overage_rate,
        "remaining_included_minutes": remaining,
    }
