"""소프트웨어 개발 프로젝트 태스크 규칙.

Software development task rules: requirements, tech stack, architecture,
API design, security, testing and performance.
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


def _requirements(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    features: str = get_response_value(responses, "core_features", "")
    return [
        {
            "title": "Create technical requirements document (TRD)",
            "description": f"Core Features:\n{features}\n\nDocument functional and non-functional requirements.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 5),
        },
        {
            "title": "Create user stories and acceptance criteria",
            "description": "Break features into user stories with acceptance criteria and estimates.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 6),
        },
    ]


def _tech_stack(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    preferences: str = (
        get_response_value(responses, "tech_preferences", "")
        or get_response_value(responses, "programming_language", "")
    )
    platform: str = get_response_value(responses, "platform", "")
    return [
        {
            "title": "Finalize technology stack",
            "description": f"Preferences: {preferences}\nPlatform: {platform}\n\nConfirm language, frameworks and hosting.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 4),
        },
        {
            "title": "Set up development environment",
            "description": "Repository, branching strategy, local tooling and shared environment variables.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 7),
        },
    ]


def _architecture(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    return [
        {
            "title": "Create system architecture diagram",
            "description": "Diagram components, data flow and deployment topology.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 7),
        },
        {
            "title": "Design database schema",
            "description": "Model entities, relationships and indexes; review migration strategy.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 8),
        },
    ]


def _api_design(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    third_party: str = get_response_value(responses, "third_party_apis", "")
    return [
        {
            "title": "Design REST/GraphQL API specification",
            "description": f"Third-party APIs: {third_party}\n\nDefine endpoints, payloads, auth and error format.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 9),
        },
        {
            "title": "Set up API documentation and testing tools",
            "description": "Publish interactive API docs and a shared request collection.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 10),
        },
    ]


def _security(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    compliance: str = get_response_value(responses, "compliance_needs", "")
    return [
        {
            "title": "Implement security measures",
            "description": f"Compliance: {compliance}\n\nAuthentication, encryption at rest and in transit, audit logging.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 12),
        },
        {
            "title": "Create security audit checklist",
            "description": "Checklist covering OWASP top ten, dependency scanning and access reviews.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 14),
        },
    ]


def _testing(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    target: str = get_response_value(responses, "test_coverage_target", "80%")
    return [
        {
            "title": "Set up testing framework",
            "description": f"Coverage target: {target}\n\nUnit, integration and end-to-end test setup.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 10),
        },
        {
            "title": "Implement CI/CD pipeline",
            "description": "Automate tests, builds and deployments on every merge.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 15),
        },
    ]


def _documentation(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    return [{
        "title": "Create technical documentation",
        "description": "Setup guide, architecture overview, API reference and runbooks.",
        "priority": "low",
        "due_date": calculate_due_date(ctx.completion_date, 20),
    }]


def _performance(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    load: str = get_response_value(responses, "expected_load", "")
    return [{
        "title": "Implement performance monitoring",
        "description": f"Expected load: {load}\n\nSet up metrics, tracing and load tests against the target.",
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 18),
    }]


SOFTWARE_DEV_RULES: list[TaskRule] = [
    TaskRule(
        id="software-requirements-analysis",
        name="Requirements Documentation",
        response_keys=["project_description", "core_features", "user_stories"],
        priority=10,
        condition=lambda r: _any_text(r, "project_description", "core_features", "user_stories"),
        generate=_requirements,
    ),
    TaskRule(
        id="software-security",
        name="Security Audit and Implementation",
        response_keys=["security_requirements", "compliance_needs", "user_data_handling"],
        priority=10,
        condition=lambda r: _any_text(r, "security_requirements", "compliance_needs", "user_data_handling"),
        generate=_security,
    ),
    TaskRule(
        id="software-tech-stack",
        name="Technology Stack Decision",
        response_keys=["tech_preferences", "platform", "programming_language"],
        priority=9,
        condition=lambda r: _any_text(r, "tech_preferences", "platform", "programming_language"),
        generate=_tech_stack,
    ),
    TaskRule(
        id="software-architecture",
        name="System Architecture Design",
        response_keys=["architecture_type", "scalability_requirements"],
        priority=9,
        condition=lambda r: _any_text(r, "architecture_type", "scalability_requirements", "core_features"),
        generate=_architecture,
    ),
    TaskRule(
        id="software-api-design",
        name="API Design and Documentation",
        response_keys=["integration_requirements", "third_party_apis"],
        priority=8,
        condition=lambda r: _any_text(r, "integration_requirements", "third_party_apis", "core_features"),
        generate=_api_design,
    ),
    TaskRule(
        id="software-testing",
        name="Testing Framework Setup",
        response_keys=["quality_requirements", "test_coverage_target"],
        priority=7,
        condition=lambda r: len(r) > 0,
        generate=_testing,
    ),
    TaskRule(
        id="software-performance",
        name="Performance Optimization",
        response_keys=["performance_requirements", "expected_load"],
        priority=6,
        condition=lambda r: _any_text(r, "performance_requirements", "expected_load"),
        generate=_performance,
    ),
    TaskRule(
        id="software-documentation",
        name="Documentation Creation",
        response_keys=["project_description"],
        priority=5,
        condition=lambda r: has_text_response(r, "project_description"),
        generate=_documentation,
    ),
]
