"""온보딩 태스크 매퍼 — 온보딩 응답을 프로젝트 태스크로 변환 (순수 함수).

Onboarding Task Mapper — Turns onboarding responses into project tasks.

A rule has a condition over the flattened responses and a generator that
returns task dicts. Rules run in priority order (higher first); a failing
rule is logged and contributes nothing.

Generated task dict keys:
    title, description, status, priority, due_date,
    source_type, source_id, source_metadata
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

VALID_STATUSES: tuple[str, ...] = ("todo", "in_progress", "done")
VALID_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
MAX_TITLE_LENGTH: int = 200

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "design": ("design", "logo", "brand", "ui", "ux"),
    "development": ("develop", "code", "implement", "integrate", "api"),
    "content": ("content", "copy", "write", "text"),
    "marketing": ("market", "seo", "analytics", "campaign"),
}


@dataclass
class TaskContext:
    """태스크 생성 컨텍스트 — Context passed to every rule generator."""

    project_id: str
    project_name: str
    project_type: str
    organization_id: str
    session_id: str
    completion_date: datetime


@dataclass
class TaskRule:
    """태스크 생성 규칙.

    Attributes:
        id: 규칙 식별자 (Rule identifier, recorded in source_metadata)
        name: 규칙 이름 (Human readable name)
        response_keys: 참조하는 응답 키 (Response keys the rule reads)
        condition: 응답 → bool (Whether the rule applies)
        generate: (응답, 컨텍스트) → 태스크 목록 (Task generator)
        priority: 높을수록 먼저 (Higher runs first)
    """

    id: str
    name: str
    response_keys: list[str]
    condition: Callable[[dict[str, Any]], bool]
    generate: Callable[[dict[str, Any], TaskContext], list[dict[str, Any]]]
    priority: int = 0
    description: str = field(default="")


def calculate_due_date(completion_date: datetime, days_from_completion: int) -> datetime:
    return completion_date + timedelta(days=days_from_completion)


def parse_date(value: Any) -> datetime | None:
    """응답의 날짜 값을 datetime으로 변환 — ISO strings and datetimes; None otherwise."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed: datetime = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def get_response_value(responses: dict[str, Any], key: str, default: Any = None) -> Any:
    value: Any = responses.get(key)
    return default if value is None else value


def has_text_response(responses: dict[str, Any], key: str) -> bool:
    value: Any = responses.get(key)
    return isinstance(value, str) and len(value.strip()) > 0


def _is_file(item: Any) -> bool:
    return isinstance(item, dict) and bool(item.get("url") or item.get("name") or item.get("file"))


def has_file_uploads(responses: dict[str, Any], key: str) -> bool:
    """파일 업로드 응답 여부 — A non-empty list holding at least one file-like item."""
    value: Any = responses.get(key)
    return isinstance(value, list) and any(_is_file(item) for item in value)


def get_file_count(responses: dict[str, Any], key: str) -> int:
    value: Any = responses.get(key)
    if not isinstance(value, list):
        return 0
    return sum(1 for item in value if _is_file(item))


def array_includes(responses: dict[str, Any], key: str, search_value: str) -> bool:
    value: Any = responses.get(key)
    return isinstance(value, list) and search_value in value


def apply_rule(rule: TaskRule, responses: dict[str, Any], context: TaskContext) -> list[dict[str, Any]]:
    """단일 규칙을 적용합니다.

    Apply one rule. Each produced task is stamped with
    source_type="onboarding_response", source_id=session id and a JSON
    source_metadata {rule_id, rule_name, response_keys, timestamp}.
    Errors inside the rule are logged and yield no tasks.
    """
    try:
        if not rule.condition(responses):
            return []
        tasks: list[dict[str, Any]] = rule.generate(responses, context)
    except Exception as exc:
        logger.warning("task_rule_failed", rule_id=rule.id, error=str(exc))
        return []

    metadata: str = json.dumps({
        "rule_id": rule.id,
        "rule_name": rule.name,
        "response_keys": list(rule.response_keys),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })
    return [
        {
            "status": "todo",
            "priority": "medium",
            **task,
            "source_type": "onboarding_response",
            "source_id": context.session_id,
            "source_metadata": metadata,
        }
        for task in tasks
    ]


def generate_tasks_from_responses(
    responses: dict[str, Any],
    rules: list[TaskRule],
    context: TaskContext,
) -> list[dict[str, Any]]:
    """모든 규칙을 우선순위 순으로 적용합니다 — Apply all rules, higher priority first."""
    tasks: list[dict[str, Any]] = []
    for rule in sorted(rules, key=lambda r: r.priority, reverse=True):
        tasks.extend(apply_rule(rule, responses, context))
    return tasks


def validate_tasks(tasks: list[dict[str, Any]], now: datetime | None = None) -> tuple[bool, list[str]]:
    """생성된 태스크를 검증합니다.

    Returns:
        tuple[bool, list[str]]: (유효 여부, "Task N: ..." 오류 목록)
    """
    now = now or datetime.now(timezone.utc)
    errors: list[str] = []
    for index, task in enumerate(tasks, start=1):
        title: str = task.get("title") or ""
        if not title.strip():
            errors.append(f"Task {index}: Title is required")
        if len(title) > MAX_TITLE_LENGTH:
            errors.append(f"Task {index}: Title too long (max {MAX_TITLE_LENGTH} characters)")
        due_date: datetime | None = task.get("due_date")
        if due_date is not None and due_date < now:
            errors.append(f"Task {index}: Due date cannot be in the past")
        if task.get("status") and task["status"] not in VALID_STATUSES:
            errors.append(f"Task {index}: Invalid status")
        if task.get("priority") and task["priority"] not in VALID_PRIORITIES:
            errors.append(f"Task {index}: Invalid priority")
    return len(errors) == 0, errors


def deduplicate_tasks(tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """제목 기준 중복 제거 (소문자, 공백 제거) — First occurrence wins."""
    seen: set[str] = set()
    unique: list[dict[str, Any]] = []
    for task in tasks:
        key: str = (task.get("title") or "").lower().strip()
        if key in seen:
            continue
        seen.add(key)
        unique.append(task)
    return unique


def group_tasks_by_category(tasks: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    groups: dict[str, list[dict[str, Any]]] = {name: [] for name in CATEGORY_KEYWORDS}
    groups["other"] = []
    for task in tasks:
        title: str = (task.get("title") or "").lower()
        category: str = next(
            (name for name, keywords in CATEGORY_KEYWORDS.items() if any(kw in title for kw in keywords)),
            "other",
        )
        groups[category].append(task)
    return groups


def get_task_stats(tasks: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "total": len(tasks),
        "by_status": {status: sum(1 for t in tasks if t.get("status") == status) for status in VALID_STATUSES},
        "by_priority": {
            priority: sum(1 for t in tasks if t.get("priority") == priority)
            for priority in ("high", "medium", "low")
        },
        "with_due_date": sum(1 for t in tasks if t.get("due_date")),
        "with_assignee": sum(1 for t in tasks if t.get("assigned_to")),
    }
