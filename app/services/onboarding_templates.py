"""온보딩 템플릿 — 온보딩 유형별 단계 정의.

Onboarding templates — Code-defined step lists per onboarding type.

Each step has type, title, description, estimated_minutes and fields;
steps and fields may carry a condition evaluated by
app.services.condition_evaluator against the flattened responses.
Field names line up with the keys read by app.services.task_rules.
"""

import copy
from typing import Any

# 단계별 기본 소요 시간 — Minutes assumed for a step without an estimate
DEFAULT_STEP_MINUTES: int = 5


def _welcome(title: str, description: str) -> dict[str, Any]:
    return {
        "type": "welcome",
        "title": title,
        "description": description,
        "estimated_minutes": 1,
        "fields": [],
    }


def _review() -> dict[str, Any]:
    return {
        "type": "review",
        "title": "Review & Submit",
        "description": "Check your answers before submitting",
        "estimated_minutes": 2,
        "fields": [],
    }


def _project_basics() -> dict[str, Any]:
    return {
        "type": "form",
        "title": "Project Basics",
        "description": "Timeline, budget and the people involved",
        "estimated_minutes": 4,
        "fields": [
            {"name": "project_name", "label": "Project name", "type": "text", "required": True},
            {"name": "deadline", "label": "Target completion date", "type": "date", "required": False},
            {
                "name": "budget_range",
                "label": "Budget range",
                "type": "select",
                "options": ["< $5k", "$5k - $15k", "$15k - $50k", "$50k+"],
                "required": False,
            },
            {"name": "decision_makers", "label": "Who approves deliverables?", "type": "textarea", "required": False},
        ],
    }


def _communication() -> dict[str, Any]:
    return {
        "type": "form",
        "title": "Communication",
        "description": "How should we keep in touch?",
        "estimated_minutes": 2,
        "fields": [
            {
                "name": "preferred_communication",
                "label": "Preferred channel",
                "type": "select",
                "options": ["Email", "Phone", "Video call", "Chat"],
                "required": True,
            },
            {
                "name": "meeting_frequency",
                "label": "Meeting frequency",
                "type": "select",
                "options": ["Weekly", "Bi-weekly", "Monthly"],
                "required": False,
            },
            {"name": "additional_notes", "label": "Anything else we should know?", "type": "textarea", "required": False},
        ],
    }


WEB_DESIGN_STEPS: list[dict[str, Any]] = [
    _welcome("Welcome", "Let's gather what we need to design your website"),
    _project_basics(),
    {
        "type": "form",
        "title": "Your Website",
        "description": "Goals and structure",
        "estimated_minutes": 5,
        "fields": [
            {
                "name": "has_website",
                "label": "Do you have an existing website?",
                "type": "radio",
                "options": ["yes", "no"],
                "required": True,
            },
            {
                "name": "current_website_url",
                "label": "Current website URL",
                "type": "text",
                "required": False,
                "condition": {"field": "has_website", "operator": "equals", "value": "yes"},
            },
            {"name": "website_goal", "label": "Main goal of the website", "type": "textarea", "required": True},
            {
                "name": "required_pages",
                "label": "Which pages do you need?",
                "type": "checkbox",
                "options": ["Home", "About", "Services", "Portfolio", "Blog", "Shop", "Contact"],
                "required": True,
            },
            {"name": "target_audience", "label": "Who is your target audience?", "type": "textarea", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Design Preferences",
        "description": "Look and feel",
        "estimated_minutes": 4,
        "fields": [
            {
                "name": "design_style",
                "label": "Preferred design style",
                "type": "select",
                "options": ["Modern", "Minimal", "Bold", "Classic", "Playful"],
                "required": True,
            },
            {"name": "brand_personality", "label": "Describe your brand personality", "type": "textarea", "required": False},
        ],
    },
    {
        "type": "upload",
        "title": "Brand Assets",
        "description": "Upload your logo and brand files",
        "estimated_minutes": 3,
        "condition": {"field": "design_style", "operator": "is_not_empty"},
        "fields": [
            {"name": "logo_upload", "label": "Logo files", "type": "file", "required": False},
            {"name": "brand_assets", "label": "Other brand assets", "type": "file", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Technical Details",
        "description": "Domain, hosting and launch",
        "estimated_minutes": 3,
        "fields": [
            {"name": "domain_name", "label": "Domain name", "type": "text", "required": False},
            {"name": "hosting", "label": "Hosting preference", "type": "text", "required": False},
            {"name": "launch_date", "label": "Desired launch date", "type": "date", "required": False},
        ],
    },
    _communication(),
    _review(),
]

VOICE_AI_STEPS: list[dict[str, Any]] = [
    _welcome("Welcome", "Let's set up your AI voice campaign"),
    {
        "type": "form",
        "title": "Business Context",
        "description": "Tell us about your business and industry",
        "estimated_minutes": 3,
        "fields": [
            {
                "name": "industry",
                "label": "Industry",
                "type": "select",
                "options": ["Healthcare", "Real Estate", "Financial Services", "SaaS/Technology", "Insurance", "Other"],
                "required": True,
            },
            {
                "name": "industry_other",
                "label": "Please specify your industry",
                "type": "text",
                "required": False,
                "condition": {"field": "industry", "operator": "equals", "value": "Other"},
            },
            {"name": "target_region", "label": "Regions you will call", "type": "text", "required": True},
        ],
    },
    {
        "type": "form",
        "title": "Campaign Goals",
        "description": "What should the calls achieve?",
        "estimated_minutes": 4,
        "fields": [
            {"name": "campaign_goal", "label": "Main goal of the campaign", "type": "textarea", "required": True},
            {"name": "target_audience", "label": "Who will be called?", "type": "textarea", "required": True},
            {"name": "key_message", "label": "Key message", "type": "textarea", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Contact List",
        "description": "Who are we calling?",
        "estimated_minutes": 3,
        "fields": [
            {
                "name": "list_available",
                "label": "Do you have a contact list?",
                "type": "radio",
                "options": ["yes", "no"],
                "required": True,
            },
            {
                "name": "list_upload",
                "label": "Upload contact list",
                "type": "file",
                "required": False,
                "condition": {"field": "list_available", "operator": "equals", "value": "yes"},
            },
            {"name": "list_size", "label": "Approximate list size", "type": "text", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Voice & Tone",
        "description": "How should the agent sound?",
        "estimated_minutes": 2,
        "fields": [
            {
                "name": "voice_preference",
                "label": "Voice",
                "type": "select",
                "options": ["Female", "Male", "Neutral"],
                "required": True,
            },
            {
                "name": "tone_of_voice",
                "label": "Tone",
                "type": "select",
                "options": ["Professional", "Friendly", "Energetic", "Calm"],
                "required": True,
            },
        ],
    },
    {
        "type": "form",
        "title": "Integrations",
        "description": "Connect your tools",
        "estimated_minutes": 3,
        "fields": [
            {"name": "crm_system", "label": "CRM system", "type": "text", "required": False},
            {"name": "calendar_integration", "label": "Calendar to book appointments in", "type": "text", "required": False},
            {"name": "webhook_url", "label": "Webhook URL for call results", "type": "text", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Compliance",
        "description": "Healthcare calls need extra consent handling",
        "estimated_minutes": 2,
        "condition": {"field": "industry", "operator": "in_array", "value": ["Healthcare", "Financial Services", "Insurance"]},
        "fields": [
            {
                "name": "recording_consent",
                "label": "How is recording consent collected?",
                "type": "textarea",
                "required": True,
            },
        ],
    },
    {
        "type": "form",
        "title": "Launch",
        "description": "Schedule and volume",
        "estimated_minutes": 2,
        "fields": [
            {"name": "launch_date", "label": "Desired launch date", "type": "date", "required": False},
            {"name": "daily_call_volume", "label": "Calls per day", "type": "text", "required": False},
        ],
    },
    _review(),
]

SOFTWARE_DEV_STEPS: list[dict[str, Any]] = [
    _welcome("Welcome", "Let's scope your software project"),
    _project_basics(),
    {
        "type": "form",
        "title": "Product Requirements",
        "description": "What are we building?",
        "estimated_minutes": 6,
        "fields": [
            {"name": "project_description", "label": "Describe the product", "type": "textarea", "required": True},
            {"name": "core_features", "label": "Core features", "type": "textarea", "required": True},
            {"name": "user_stories", "label": "Key user stories", "type": "textarea", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Technology",
        "description": "Stack and architecture",
        "estimated_minutes": 4,
        "fields": [
            {
                "name": "platform",
                "label": "Target platform",
                "type": "select",
                "options": ["Web", "iOS", "Android", "Desktop", "API only"],
                "required": True,
            },
            {"name": "tech_preferences", "label": "Technology preferences", "type": "textarea", "required": False},
            {
                "name": "has_existing_system",
                "label": "Does this integrate with an existing system?",
                "type": "radio",
                "options": ["yes", "no"],
                "required": True,
            },
            {
                "name": "integration_requirements",
                "label": "Integration requirements",
                "type": "textarea",
                "required": False,
                "condition": {"field": "has_existing_system", "operator": "equals", "value": "yes"},
            },
            {"name": "third_party_apis", "label": "Third-party APIs", "type": "textarea", "required": False},
        ],
    },
    {
        "type": "form",
        "title": "Security & Performance",
        "description": "Data handling and scale",
        "estimated_minutes": 4,
        "fields": [
            {"name": "user_data_handling", "label": "What user data is stored?", "type": "textarea", "required": False},
            {"name": "compliance_needs", "label": "Compliance needs (GDPR, HIPAA, ...)", "type": "text", "required": False},
            {"name": "expected_load", "label": "Expected load", "type": "text", "required": False},
        ],
    },
    _communication(),
    _review(),
]

MARKETING_STEPS: list[dict[str, Any]] = [
    _welcome("Welcome", "Let's plan your marketing campaign"),
    _project_basics(),
    {
        "type": "form",
        "title": "Campaign",
        "description": "Audience and channels",
        "estimated_minutes": 5,
        "fields": [
            {"name": "target_audience", "label": "Target audience", "type": "textarea", "required": True},
            {
                "name": "channels",
                "label": "Channels",
                "type": "checkbox",
                "options": ["Email", "Social", "Search", "Display", "Events"],
                "required": True,
            },
            {
                "name": "ad_budget",
                "label": "Monthly ad spend",
                "type": "text",
                "required": False,
                "condition": {
                    "any": [
                        {"field": "channels", "operator": "contains", "value": "Search"},
                        {"field": "channels", "operator": "contains", "value": "Display"},
                    ]
                },
            },
            {"name": "concerns", "label": "Concerns or past challenges", "type": "textarea", "required": False},
        ],
    },
    _communication(),
    _review(),
]

GENERIC_STEPS: list[dict[str, Any]] = [
    _welcome("Welcome", "Let's get your project started"),
    _project_basics(),
    {
        "type": "form",
        "title": "Requirements",
        "description": "Tell us what you need",
        "estimated_minutes": 5,
        "fields": [
            {"name": "project_description", "label": "Describe the project", "type": "textarea", "required": True},
            {"name": "challenges", "label": "Known challenges", "type": "textarea", "required": False},
            {"name": "special_requests", "label": "Special requests", "type": "textarea", "required": False},
        ],
    },
    _communication(),
    _review(),
]

TEMPLATES: dict[str, list[dict[str, Any]]] = {
    "web_design": WEB_DESIGN_STEPS,
    "voice_ai": VOICE_AI_STEPS,
    "software_dev": SOFTWARE_DEV_STEPS,
    "marketing": MARKETING_STEPS,
}


def get_template_steps(onboarding_type: str) -> list[dict[str, Any]]:
    """온보딩 유형의 단계 목록 (없으면 일반 템플릿).

    Deep copy of the steps for an onboarding type, falling back to the
    generic template. Callers may mutate the result freely.
    """
    return copy.deepcopy(TEMPLATES.get(onboarding_type, GENERIC_STEPS))


def estimate_total_minutes(steps: list[dict[str, Any]]) -> int:
    """예상 소요 시간 합계 — Sum of estimated_minutes, 5 per step by default."""
    return sum(step.get("estimated_minutes") or DEFAULT_STEP_MINUTES for step in steps)


def flatten_responses(responses: dict[str, Any]) -> dict[str, Any]:
    """단계별 응답을 하나의 dict로 병합합니다.

    Merge step-keyed responses ({"0": {...}, "1": {...}}) into one flat
    dict. Later steps win on key collisions; non-dict step payloads are
    ignored.
    """
    flat: dict[str, Any] = {}
    for key in sorted(responses, key=lambda k: int(k) if str(k).isdigit() else 0):
        data: Any = responses[key]
        if isinstance(data, dict):
            flat.update(data)
    return flat
