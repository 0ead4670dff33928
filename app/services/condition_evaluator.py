"""조건 평가기 — 동적 온보딩 흐름의 조건부 로직 평가.

Condition Evaluator — Evaluates the conditional logic of dynamic onboarding
flows. Pure functions, no database access.

Condition shapes:
    simple:  {"field": "has_website", "operator": "equals", "value": "yes"}
    complex: {"all": [cond, ...]} (AND) / {"any": [cond, ...]} (OR), nestable

Responses are a flat dict of field name to answer.
"""

import re
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

OPERATORS: tuple[str, ...] = (
    "equals",
    "not_equals",
    "contains",
    "not_contains",
    "greater_than",
    "less_than",
    "greater_than_or_equal",
    "less_than_or_equal",
    "is_empty",
    "is_not_empty",
    "in_array",
    "not_in_array",
    "matches_regex",
)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, list) and len(value) == 0)


def _compare_numbers(left: Any, right: Any, operator: str) -> bool:
    """숫자 비교 — float 변환 실패 시 False.

    Numeric comparison via float coercion; False when either side fails
    to coerce.
    """
    try:
        a: float = float(left)
        b: float = float(right)
    except (TypeError, ValueError):
        return False

    if operator == "greater_than":
        return a > b
    if operator == "less_than":
        return a < b
    if operator == "greater_than_or_equal":
        return a >= b
    return a <= b


def evaluate_simple_condition(condition: dict[str, Any], responses: dict[str, Any]) -> bool:
    """단순 조건을 응답에 대해 평가합니다.

    Evaluate a single {field, operator, value} condition.

    Args:
        condition: 단순 조건 (Simple condition)
        responses: 필드별 응답 (Flat responses keyed by field)

    Returns:
        bool: 조건 충족 여부 (Whether the condition holds)
    """
    operator: str | None = condition.get("operator")
    expected: Any = condition.get("value")
    actual: Any = responses.get(condition.get("field", ""))

    if operator == "equals":
        return actual == expected
    if operator == "not_equals":
        return actual != expected
    if operator == "contains":
        if isinstance(actual, str):
            return str(expected) in actual
        if isinstance(actual, list):
            return expected in actual
        return False
    if operator == "not_contains":
        if isinstance(actual, str):
            return str(expected) not in actual
        if isinstance(actual, list):
            return expected not in actual
        return True
    if operator in ("greater_than", "less_than", "greater_than_or_equal", "less_than_or_equal"):
        return _compare_numbers(actual, expected, operator)
    if operator == "is_empty":
        return _is_empty(actual)
    if operator == "is_not_empty":
        return not _is_empty(actual)
    if operator == "in_array":
        return isinstance(expected, list) and actual in expected
    if operator == "not_in_array":
        return isinstance(expected, list) and actual not in expected
    if operator == "matches_regex":
        try:
            return re.search(str(expected), str(actual)) is not None
        except re.error:
            return False

    logger.warning("unknown_condition_operator", operator=operator)
    return False


def evaluate_condition(condition: dict[str, Any], responses: dict[str, Any]) -> bool:
    """단순/복합 조건을 재귀적으로 평가합니다.

    Evaluate a simple or complex condition. "all" takes precedence over
    "any" when both are present.
    """
    if condition.get("all") is not None:
        return all(evaluate_condition(sub, responses) for sub in condition["all"])
    if condition.get("any") is not None:
        return any(evaluate_condition(sub, responses) for sub in condition["any"])
    return evaluate_simple_condition(condition, responses)


def should_show_step(step: dict[str, Any], responses: dict[str, Any]) -> bool:
    """조건이 없는 단계는 항상 표시됩니다 — Steps without a condition are visible."""
    condition: dict[str, Any] | None = step.get("condition")
    if not condition:
        return True
    return evaluate_condition(condition, responses)


def get_visible_steps(steps: list[dict[str, Any]], responses: dict[str, Any]) -> list[int]:
    """표시되는 단계 인덱스 목록 — Indices of visible steps."""
    return [index for index, step in enumerate(steps) if should_show_step(step, responses)]


def get_skipped_steps(steps: list[dict[str, Any]], responses: dict[str, Any]) -> list[int]:
    """건너뛰는 단계 인덱스 목록 — Indices of conditional steps currently hidden."""
    return [
        index
        for index, step in enumerate(steps)
        if step.get("condition") and not evaluate_condition(step["condition"], responses)
    ]


def validate_condition(
    condition: dict[str, Any],
    max_depth: int = 10,
    current_depth: int = 0,
) -> tuple[bool, str | None]:
    """조건 구조를 검증합니다.

    Validate a condition's structure.

    Args:
        condition: 검증할 조건 (Condition to validate)
        max_depth: 최대 중첩 깊이 (Maximum nesting depth)
        current_depth: 현재 깊이, 재귀용 (Current depth, used by recursion)

    Returns:
        tuple[bool, str | None]: (유효 여부, 오류 메시지)
    """
    if current_depth > max_depth:
        return False, f"Condition nesting too deep (max {max_depth})"

    for key in ("all", "any"):
        if condition.get(key) is not None:
            for sub in condition[key]:
                valid, error = validate_condition(sub, max_depth, current_depth + 1)
                if not valid:
                    return False, error
            return True, None

    if not condition.get("field"):
        return False, "Condition must have a field"
    if not condition.get("operator"):
        return False, "Condition must have an operator"
    if condition["operator"] not in OPERATORS:
        return False, f"Invalid operator: {condition['operator']}"
    return True, None


def calculate_dynamic_progress(
    current_step: int,
    steps: list[dict[str, Any]],
    responses: dict[str, Any],
) -> int:
    """표시 단계 기준 진행률을 계산합니다.

    Progress relative to visible steps: position of the current step among
    the visible ones, 1-based, as a rounded percentage. 0 when the current
    step is hidden or nothing is visible.
    """
    visible: list[int] = get_visible_steps(steps, responses)
    if not visible or current_step not in visible:
        return 0
    return round((visible.index(current_step) + 1) / len(visible) * 100)


def get_next_visible_step(
    current_step: int,
    steps: list[dict[str, Any]],
    responses: dict[str, Any],
) -> int | None:
    """다음 표시 단계 인덱스 — Next visible step after current_step, or None."""
    for index in get_visible_steps(steps, responses):
        if index > current_step:
            return index
    return None


def get_previous_visible_step(
    current_step: int,
    steps: list[dict[str, Any]],
    responses: dict[str, Any],
) -> int | None:
    """이전 표시 단계 인덱스 — Previous visible step before current_step, or None."""
    previous: int | None = None
    for index in get_visible_steps(steps, responses):
        if index >= current_step:
            break
        previous = index
    return previous
