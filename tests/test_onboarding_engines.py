"""온보딩 순수 로직 테스트 — 조건 평가, 태스크 매핑, 리마인더 일정.

Onboarding pure-logic tests — Condition evaluation, task mapping rules and
reminder scheduling. No database required.
"""

import json
from datetime import datetime, timedelta, timezone

from app.services.condition_evaluator import (
    calculate_dynamic_progress,
    evaluate_condition,
    evaluate_simple_condition,
    get_next_visible_step,
    get_previous_visible_step,
    get_skipped_steps,
    get_visible_steps,
    should_show_step,
    validate_condition,
)
from app.services.reminder_scheduler import (
    days_until_expiration,
    format_reminder_type,
    generate_reminder_schedule,
    get_next_reminder,
    get_recommended_schedule,
    should_send_reminder,
)
from app.services.task_mapper import (
    TaskContext,
    TaskRule,
    deduplicate_tasks,
    generate_tasks_from_responses,
    get_task_stats,
    group_tasks_by_category,
    has_file_uploads,
    parse_date,
    validate_tasks,
)
from app.services.task_rules import GENERIC_RULES, get_rules_for_type

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

STEPS = [
    {"title": "Welcome"},
    {"title": "Website", "condition": {"field": "has_website", "operator": "equals", "value": "yes"}},
    {"title": "Budget"},
    {
        "title": "Enterprise",
        "condition": {"all": [
            {"field": "budget", "operator": "greater_than", "value": 10000},
            {"field": "team", "operator": "in_array", "value": ["large", "xl"]},
        ]},
    },
]


def _ctx() -> TaskContext:
    return TaskContext(
        project_id="p1",
        project_name="Acme Site",
        project_type="web_design",
        organization_id="o1",
        session_id="s1",
        completion_date=NOW,
    )


# ===== Condition evaluator =====

class TestConditionEvaluator:
    """조건 평가 테스트."""

    def test_contains_on_string_and_list(self):
        """문자열/리스트 contains."""
        cond = {"field": "tags", "operator": "contains", "value": "seo"}
        assert evaluate_simple_condition(cond, {"tags": ["seo", "ads"]}) is True
        assert evaluate_simple_condition(cond, {"tags": "local seo"}) is True
        assert evaluate_simple_condition(cond, {"tags": 5}) is False
        not_cond = {"field": "tags", "operator": "not_contains", "value": "seo"}
        assert evaluate_simple_condition(not_cond, {}) is True

    def test_numeric_coercion(self):
        """숫자 비교는 문자열도 변환, 실패 시 False."""
        cond = {"field": "budget", "operator": "greater_than_or_equal", "value": "5000"}
        assert evaluate_simple_condition(cond, {"budget": "5000"}) is True
        assert evaluate_simple_condition(cond, {"budget": "lots"}) is False

    def test_empty_checks(self):
        """빈 값 판단 — None, 빈 문자열, 빈 리스트."""
        cond = {"field": "x", "operator": "is_empty"}
        assert evaluate_simple_condition(cond, {}) is True
        assert evaluate_simple_condition(cond, {"x": []}) is True
        assert evaluate_simple_condition(cond, {"x": 0}) is False

    def test_regex_and_unknown_operator(self):
        """정규식 오류와 알 수 없는 연산자는 False."""
        assert evaluate_simple_condition(
            {"field": "email", "operator": "matches_regex", "value": r"@acme\.com$"}, {"email": "a@acme.com"}
        ) is True
        assert evaluate_simple_condition({"field": "a", "operator": "matches_regex", "value": "("}, {"a": "x"}) is False
        assert evaluate_simple_condition({"field": "a", "operator": "between", "value": 1}, {"a": 1}) is False

    def test_nested_any_all(self):
        """복합 조건 중첩."""
        cond = {"any": [
            {"field": "plan", "operator": "equals", "value": "pro"},
            {"all": [
                {"field": "seats", "operator": "greater_than", "value": 5},
                {"field": "trial", "operator": "equals", "value": False},
            ]},
        ]}
        assert evaluate_condition(cond, {"plan": "pro"}) is True
        assert evaluate_condition(cond, {"seats": 10, "trial": False}) is True
        assert evaluate_condition(cond, {"seats": 10, "trial": True}) is False

    def test_empty_group(self):
        """빈 all은 True, 빈 any는 False — 둘 다 유효한 구조."""
        assert evaluate_condition({"all": []}, {}) is True
        assert evaluate_condition({"any": []}, {}) is False
        assert validate_condition({"all": []}) == (True, None)
        assert validate_condition({"any": []}) == (True, None)
        assert should_show_step({"condition": {"any": []}}, {}) is False

    def test_visibility_and_navigation(self):
        """표시/건너뛰기 단계와 이전/다음 탐색."""
        responses = {"has_website": "no", "budget": 20000, "team": "large"}
        assert get_visible_steps(STEPS, responses) == [0, 2, 3]
        assert get_skipped_steps(STEPS, responses) == [1]
        assert get_next_visible_step(0, STEPS, responses) == 2
        assert get_previous_visible_step(2, STEPS, responses) == 0
        assert get_previous_visible_step(0, STEPS, responses) is None
        assert get_next_visible_step(3, STEPS, responses) is None

    def test_dynamic_progress(self):
        """표시 단계 기준 진행률, 숨겨진 단계는 0."""
        responses = {"has_website": "no"}
        assert calculate_dynamic_progress(2, STEPS, responses) == 100
        assert calculate_dynamic_progress(0, STEPS, responses) == 50
        assert calculate_dynamic_progress(1, STEPS, responses) == 0

    def test_validate_condition(self):
        """구조 검증 — 필드, 연산자, 깊이."""
        assert validate_condition({"field": "a", "operator": "equals", "value": 1}) == (True, None)
        assert validate_condition({"operator": "equals"}) == (False, "Condition must have a field")
        assert validate_condition({"field": "a", "operator": "like"}) == (False, "Invalid operator: like")

        deep: dict = {"field": "a", "operator": "equals", "value": 1}
        for _ in range(12):
            deep = {"all": [deep]}
        valid, error = validate_condition(deep)
        assert valid is False
        assert "too deep" in error


# ===== Task mapper =====

class TestTaskMapper:
    """태스크 매핑 테스트."""

    def test_web_design_rules(self):
        """로고 업로드와 디자인 스타일 응답에서 태스크 생성."""
        responses = {
            "logo_upload": [{"name": "logo.svg", "url": "https://cdn/logo.svg"}],
            "design_style": "minimal",
        }
        tasks = generate_tasks_from_responses(responses, get_rules_for_type("web_design"), _ctx())
        titles = [t["title"] for t in tasks]

        assert titles[0] == "Review and optimize logo files"
        assert "Create minimal design moodboard" in titles
        assert "Schedule project kickoff meeting" in titles
        first = tasks[0]
        assert first["source_type"] == "onboarding_response"
        assert first["source_id"] == "s1"
        assert first["due_date"] == NOW + timedelta(days=2)
        assert json.loads(first["source_metadata"])["rule_id"] == "web-design-logo-upload"

    def test_failing_rule_is_skipped(self):
        """규칙 내부 오류는 무시되고 다른 규칙은 계속 실행."""
        def _boom(responses, ctx):
            raise RuntimeError("boom")

        rules = [
            TaskRule(id="bad", name="Bad", response_keys=[], condition=lambda r: True, generate=_boom, priority=99),
            TaskRule(
                id="ok", name="Ok", response_keys=[], condition=lambda r: True,
                generate=lambda r, c: [{"title": "Fine"}],
            ),
        ]
        tasks = generate_tasks_from_responses({}, rules, _ctx())
        assert [t["title"] for t in tasks] == ["Fine"]
        assert tasks[0]["status"] == "todo"
        assert tasks[0]["priority"] == "medium"

    def test_unknown_type_uses_generic_rules(self):
        """알 수 없는 유형은 공통 규칙만."""
        assert get_rules_for_type("podcast") == GENERIC_RULES

    def test_validate_tasks(self):
        """제목, 기한, 상태, 우선순위 검증."""
        valid, errors = validate_tasks([
            {"title": "", "due_date": NOW - timedelta(days=1)},
            {"title": "x" * 201, "status": "blocked", "priority": "urgent"},
        ], now=NOW)
        assert valid is False
        assert errors == [
            "Task 1: Title is required",
            "Task 1: Due date cannot be in the past",
            "Task 2: Title too long (max 200 characters)",
            "Task 2: Invalid status",
            "Task 2: Invalid priority",
        ]

    def test_deduplicate_and_group(self):
        """제목 중복 제거 후 카테고리 분류."""
        tasks = deduplicate_tasks([
            {"title": "Design homepage"},
            {"title": "  design HOMEPAGE "},
            {"title": "Write copy"},
            {"title": "Call client"},
        ])
        assert len(tasks) == 3
        groups = group_tasks_by_category(tasks)
        assert [t["title"] for t in groups["design"]] == ["Design homepage"]
        assert [t["title"] for t in groups["content"]] == ["Write copy"]
        assert [t["title"] for t in groups["other"]] == ["Call client"]

    def test_stats(self):
        """태스크 통계."""
        stats = get_task_stats([
            {"title": "a", "status": "todo", "priority": "high", "due_date": NOW},
            {"title": "b", "status": "done", "priority": "low"},
        ])
        assert stats["total"] == 2
        assert stats["by_status"] == {"todo": 1, "in_progress": 0, "done": 1}
        assert stats["by_priority"]["high"] == 1
        assert stats["with_due_date"] == 1

    def test_helpers(self):
        """파일 업로드 판별 및 날짜 파싱."""
        assert has_file_uploads({"f": [{"url": "x"}]}, "f") is True
        assert has_file_uploads({"f": ["plain"]}, "f") is False
        assert parse_date("2025-04-01T00:00:00Z") == datetime(2025, 4, 1, tzinfo=timezone.utc)
        assert parse_date("next week") is None


# ===== Reminder scheduler =====

class TestReminderScheduler:
    """리마인더 일정 테스트."""

    def test_standard_schedule(self):
        """standard: 2, 5, 7일."""
        schedule = generate_reminder_schedule(NOW, "standard")
        assert [(r["type"], r["scheduled_at"]) for r in schedule] == [
            ("gentle", NOW + timedelta(days=2)),
            ("encouragement", NOW + timedelta(days=5)),
            ("final", NOW + timedelta(days=7)),
        ]

    def test_custom_schedule(self):
        """custom은 전달된 설정만, 없으면 빈 목록."""
        assert generate_reminder_schedule(NOW, "custom") == []
        schedule = generate_reminder_schedule(
            NOW, "custom", [{"type": "custom", "days_after_creation": 1, "hours_after_creation": 6}]
        )
        assert schedule[0]["scheduled_at"] == NOW + timedelta(days=1, hours=6)

    def test_should_send(self):
        """완료, 만료, 최근 활동 시 발송하지 않음."""
        assert should_send_reminder("in_progress", None, None, now=NOW) is True
        assert should_send_reminder("completed", None, None, now=NOW) is False
        assert should_send_reminder("in_progress", None, NOW - timedelta(minutes=1), now=NOW) is False
        assert should_send_reminder("in_progress", NOW - timedelta(minutes=30), None, now=NOW) is False
        assert should_send_reminder("in_progress", NOW - timedelta(hours=2), None, now=NOW) is True

    def test_next_reminder(self):
        """이미 보낸 유형은 건너뜀."""
        created = NOW - timedelta(days=6)
        assert get_next_reminder(created, "standard", [], now=NOW)["type"] == "gentle"
        assert get_next_reminder(created, "standard", ["gentle"], now=NOW)["type"] == "encouragement"
        assert get_next_reminder(created, "standard", ["gentle", "encouragement"], now=NOW) is None

    def test_days_until_expiration(self):
        """올림 계산, 지난 만료는 0."""
        assert days_until_expiration(None) is None
        assert days_until_expiration(NOW + timedelta(days=2, hours=1), now=NOW) == 3
        assert days_until_expiration(NOW - timedelta(days=1), now=NOW) == 0

    def test_recommendation_and_labels(self):
        """추천 스케줄과 표시 라벨."""
        assert get_recommended_schedule("high") == "aggressive"
        assert get_recommended_schedule("medium", 60000) == "aggressive"
        assert get_recommended_schedule("low") == "gentle"
        assert get_recommended_schedule() == "standard"
        assert format_reminder_type("final") == "Final Reminder"
        assert format_reminder_type("weird") == "weird"
