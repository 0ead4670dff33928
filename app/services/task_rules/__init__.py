"""온보딩 유형별 태스크 생성 규칙 레지스트리.

Task rule registry keyed by onboarding type. Type-specific rule sets are
merged with the generic rules; unknown types get the generic rules only.
"""

from app.services.task_mapper import TaskRule
from app.services.task_rules.generic import GENERIC_RULES
from app.services.task_rules.software_dev import SOFTWARE_DEV_RULES
from app.services.task_rules.voice_ai import VOICE_AI_RULES
from app.services.task_rules.web_design import WEB_DESIGN_RULES

TYPE_RULES: dict[str, list[TaskRule]] = {
    "web_design": WEB_DESIGN_RULES,
    "voice_ai": VOICE_AI_RULES,
    "software_dev": SOFTWARE_DEV_RULES,
}


def get_rules_for_type(onboarding_type: str) -> list[TaskRule]:
    return [*TYPE_RULES.get(onboarding_type, []), *GENERIC_RULES]


__all__ = ["GENERIC_RULES", "TYPE_RULES", "get_rules_for_type"]
