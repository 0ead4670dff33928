"""Voice AI 캠페인 태스크 규칙.

Voice AI task rules: script, voice, contact list, integrations,
compliance and launch.
"""

from typing import Any

from app.services.task_mapper import (
    TaskContext,
    TaskRule,
    calculate_due_date,
    get_file_count,
    get_response_value,
    has_file_uploads,
    has_text_response,
    parse_date,
)


def _any_text(responses: dict[str, Any], *keys: str) -> bool:
    return any(has_text_response(responses, key) for key in keys)


def _script(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    goal: str = get_response_value(responses, "campaign_goal", "")
    audience: str = get_response_value(responses, "target_audience", "")
    return [
        {
            "title": "Draft initial voice AI script",
            "description": (
                f"Campaign Goal: {goal}\nTarget Audience: {audience}\n\n"
                "Write opening, qualification questions, objection handling and closing."
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 3),
        },
        {
            "title": "Test and refine script with AI voice",
            "description": "Run test calls, review recordings and refine pacing and wording.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 7),
        },
    ]


def _voice(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    voice: str = get_response_value(responses, "voice_preference", "default")
    tone: str = get_response_value(responses, "tone_of_voice", "professional")
    return [{
        "title": f"Configure {voice} voice with {tone} tone",
        "description": "Select the voice model, tune speed and tone, and record sample calls for approval.",
        "priority": "medium",
        "due_date": calculate_due_date(ctx.completion_date, 5),
    }]


def _contact_list(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    files: int = get_file_count(responses, "contact_list") + get_file_count(responses, "list_upload")
    size: str = get_response_value(responses, "list_size", "")
    return [
        {
            "title": "Process and validate contact list",
            "description": (
                f"Files: {files}\nExpected size: {size}\n\n"
                "Deduplicate, validate phone numbers and scrub against do-not-call lists."
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 4),
        },
        {
            "title": "Create contact segmentation strategy",
            "description": "Segment contacts by priority, region and time zone for call scheduling.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 6),
        },
    ]


def _integrations(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    tasks: list[dict[str, Any]] = []
    crm: str = get_response_value(responses, "crm_system", "")
    calendar: str = get_response_value(responses, "calendar_integration", "")
    if crm:
        tasks.append({
            "title": f"Integrate with {crm} CRM",
            "description": "Map call outcomes to CRM fields and sync new leads automatically.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 5),
        })
    if calendar:
        tasks.append({
            "title": f"Set up {calendar} calendar integration",
            "description": "Allow the agent to book appointments into available slots.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 6),
        })
    if has_text_response(responses, "webhook_url"):
        tasks.append({
            "title": "Configure call outcome webhook",
            "description": f"Send call results to {responses['webhook_url']} and verify delivery.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 6),
        })
    return tasks


def _compliance(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    region: str = get_response_value(responses, "target_region", "")
    industry: str = get_response_value(responses, "industry", "")
    return [{
        "title": "Complete compliance audit",
        "description": (
            f"Region: {region}\nIndustry: {industry}\n\n"
            "Review calling-hour rules, consent and recording disclosures for the region."
        ),
        "priority": "high",
        "due_date": calculate_due_date(ctx.completion_date, 3),
    }]


def _launch(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    launch_date = parse_date(responses.get("launch_date"))
    return [
        {
            "title": "Run pilot campaign test",
            "description": "Call a small pilot segment and review outcomes before full launch.",
            "priority": "high",
            "due_date": (
                calculate_due_date(launch_date, -3) if launch_date else calculate_due_date(ctx.completion_date, 10)
            ),
        },
        {
            "title": "Create campaign monitoring protocol",
            "description": "Define daily metrics, alert thresholds and escalation for failed calls.",
            "priority": "medium",
            "due_date": (
                calculate_due_date(launch_date, -2) if launch_date else calculate_due_date(ctx.completion_date, 12)
            ),
        },
    ]


VOICE_AI_RULES: list[TaskRule] = [
    TaskRule(
        id="voice-ai-script-development",
        name="Campaign Script Development",
        response_keys=["campaign_goal", "target_audience", "key_message"],
        priority=10,
        condition=lambda r: _any_text(r, "campaign_goal", "target_audience", "key_message"),
        generate=_script,
    ),
    TaskRule(
        id="voice-ai-voice-setup",
        name="Voice Selection and Configuration",
        response_keys=["voice_preference", "tone_of_voice"],
        priority=9,
        condition=lambda r: _any_text(r, "voice_preference", "tone_of_voice"),
        generate=_voice,
    ),
    TaskRule(
        id="voice-ai-compliance",
        name="Compliance Setup",
        response_keys=["target_region", "industry"],
        priority=9,
        condition=lambda r: _any_text(r, "target_region", "industry"),
        generate=_compliance,
    ),
    TaskRule(
        id="voice-ai-contact-list",
        name="Contact List Setup",
        response_keys=["contact_list", "list_size", "list_upload"],
        priority=8,
        condition=lambda r: has_file_uploads(r, "contact_list")
        or has_file_uploads(r, "list_upload")
        or has_text_response(r, "list_size"),
        generate=_contact_list,
    ),
    TaskRule(
        id="voice-ai-launch",
        name="Campaign Launch Preparation",
        response_keys=["launch_date", "daily_call_volume"],
        priority=8,
        condition=lambda r: "launch_date" in r or has_text_response(r, "daily_call_volume"),
        generate=_launch,
    ),
    TaskRule(
        id="voice-ai-integrations",
        name="System Integrations",
        response_keys=["crm_system", "calendar_integration", "webhook_url"],
        priority=7,
        condition=lambda r: _any_text(r, "crm_system", "calendar_integration", "webhook_url"),
        generate=_integrations,
    ),
]
