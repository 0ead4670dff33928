"""공통 태스크 생성 규칙 — 모든 온보딩 유형에 적용.

Generic task generation rules shared by every onboarding type.
"""

from typing import Any

from app.services.task_mapper import (
    TaskContext,
    TaskRule,
    calculate_due_date,
    get_response_value,
    has_text_response,
)


def _any_text(responses: dict[str, Any], *keys: str) -> bool:
    return any(has_text_response(responses, key) for key in keys)


def _first_value(responses: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value: Any = get_response_value(responses, key)
        if value:
            return value
    return ""


def _kickoff(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    return [
        {
            "title": "Schedule project kickoff meeting",
            "description": (
                "Organize kickoff meeting with stakeholders:\n\n"
                "- Review onboarding responses\n"
                "- Clarify any unclear requirements\n"
                "- Introduce team members\n"
                "- Review timeline and milestones\n\n"
                "Send calendar invite with agenda 48 hours in advance."
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 2),
        },
        {
            "title": "Set up project management workspace",
            "description": (
                "Create organized project workspace:\n"
                "- Create the project board and channels\n"
                "- Create shared file repository\n"
                "- Add all team members\n"
                "- Document communication protocols"
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 1),
        },
    ]


def _timeline(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    deadline: Any = _first_value(responses, "deadline", "launch_date")
    target: str = f"Target Date: {deadline}\n\n" if deadline else ""
    return [{
        "title": "Create detailed project timeline",
        "description": (
            f"Develop comprehensive timeline:\n\n{target}"
            "Include phases, milestones with dates, dependencies, client review "
            "periods and buffer time for revisions.\n\n"
            "Share timeline with client for approval."
        ),
        "priority": "high",
        "due_date": calculate_due_date(ctx.completion_date, 3),
    }]


def _budget(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    budget: Any = _first_value(responses, "budget", "budget_range", "investment")
    return [{
        "title": "Create project budget breakdown",
        "description": (
            f"Develop detailed budget allocation:\n\nTotal Budget: {budget}\n\n"
            "Break down by design/development, third-party services, hosting and "
            "a 10-15% contingency. Document assumptions and get approval."
        ),
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 4),
    }]


def _stakeholders(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    return [{
        "title": "Create stakeholder map and communication plan",
        "description": (
            "Document every stakeholder with role, decision-making authority, "
            "communication preferences and escalation path.\n\n"
            "Set up regular check-in schedule."
        ),
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 3),
    }]


def _risk(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    concerns: Any = get_response_value(responses, "concerns", "")
    challenges: Any = get_response_value(responses, "challenges", "")
    return [{
        "title": "Conduct risk assessment",
        "description": (
            f"Client Concerns: {concerns}\nChallenges: {challenges}\n\n"
            "Create a risk register with probability, impact, mitigation and "
            "owner for each risk. Update it weekly."
        ),
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 5),
    }]


def _qa(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    return [{
        "title": "Create quality assurance checklist",
        "description": (
            "Develop QA plan: acceptance criteria per deliverable, review and "
            "approval process, testing procedures and final delivery checklist.\n\n"
            "Schedule QA reviews at each milestone."
        ),
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 7),
    }]


def _communication(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    preference: Any = get_response_value(responses, "preferred_communication", "")
    frequency: Any = get_response_value(responses, "meeting_frequency", "")
    return [{
        "title": "Establish communication protocols",
        "description": (
            f"Preferences: {preference}\nMeeting Frequency: {frequency}\n\n"
            "Establish status update format, reporting schedule, escalation "
            "process and response time expectations.\n\n"
            "Send communication plan to client for agreement."
        ),
        "priority": "high",
        "due_date": calculate_due_date(ctx.completion_date, 2),
    }]


def _additional_notes(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    notes: Any = _first_value(responses, "additional_notes", "special_requests", "other_requirements")
    return [{
        "title": "Address special requirements and notes",
        "description": (
            f"Client Notes:\n{notes}\n\n"
            "Clarify ambiguous requirements, estimate additional effort and get "
            "approval for any scope changes."
        ),
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 4),
    }]


GENERIC_RULES: list[TaskRule] = [
    TaskRule(
        id="generic-kickoff",
        name="Project Kickoff",
        response_keys=["project_name"],
        priority=10,
        condition=lambda r: has_text_response(r, "project_name") or len(r) > 0,
        generate=_kickoff,
    ),
    TaskRule(
        id="generic-timeline",
        name="Project Timeline",
        response_keys=["deadline", "launch_date", "timeline", "expected_duration"],
        priority=9,
        condition=lambda r: bool(r.get("deadline") or r.get("launch_date"))
        or _any_text(r, "timeline", "expected_duration"),
        generate=_timeline,
    ),
    TaskRule(
        id="generic-communication-plan",
        name="Communication Plan",
        response_keys=["preferred_communication", "meeting_frequency"],
        priority=8,
        condition=lambda r: _any_text(r, "preferred_communication", "meeting_frequency") or len(r) > 0,
        generate=_communication,
    ),
    TaskRule(
        id="generic-budget",
        name="Budget Planning",
        response_keys=["budget", "budget_range", "investment"],
        priority=7,
        condition=lambda r: _any_text(r, "budget", "budget_range", "investment"),
        generate=_budget,
    ),
    TaskRule(
        id="generic-risk-management",
        name="Risk Assessment",
        response_keys=["concerns", "challenges", "constraints"],
        priority=7,
        condition=lambda r: _any_text(r, "concerns", "challenges", "constraints"),
        generate=_risk,
    ),
    TaskRule(
        id="generic-stakeholders",
        name="Stakeholder Management",
        response_keys=["decision_makers", "team_members", "key_contacts"],
        priority=6,
        condition=lambda r: _any_text(r, "decision_makers", "team_members", "key_contacts"),
        generate=_stakeholders,
    ),
    TaskRule(
        id="generic-qa-plan",
        name="Quality Assurance Plan",
        response_keys=["project_name"],
        priority=6,
        condition=lambda r: True,
        generate=_qa,
    ),
    TaskRule(
        id="generic-additional-notes",
        name="Review Additional Requirements",
        response_keys=["additional_notes", "special_requests", "other_requirements"],
        priority=5,
        condition=lambda r: _any_text(r, "additional_notes", "special_requests", "other_requirements"),
        generate=_additional_notes,
    ),
]
