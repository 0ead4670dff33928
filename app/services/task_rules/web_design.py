"""웹 디자인 프로젝트 태스크 규칙.

Web design task rules: brand assets, design direction, site goals,
page structure, technical setup and launch preparation.
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


def _brand_assets(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    tasks: list[dict[str, Any]] = []
    if has_file_uploads(responses, "logo_upload"):
        tasks.append({
            "title": "Review and optimize logo files",
            "description": (
                f"Review {get_file_count(responses, 'logo_upload')} uploaded logo file(s):\n"
                "- Check resolution and formats (SVG, PNG, favicon)\n"
                "- Create light and dark variations\n"
                "- Export web-optimized versions"
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 2),
        })
    if has_file_uploads(responses, "brand_assets"):
        tasks.append({
            "title": "Organize brand assets library",
            "description": (
                f"Catalog {get_file_count(responses, 'brand_assets')} brand asset(s) into a shared "
                "library with colors, fonts and imagery guidelines."
            ),
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 3),
        })
    return tasks


def _design_style(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    style: str = get_response_value(responses, "design_style", "")
    return [
        {
            "title": f"Create {style} design moodboard",
            "description": (
                f"Compile a moodboard for the {style} aesthetic: reference sites, "
                "color palette, typography and layout patterns."
            ),
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 3),
        },
        {
            "title": "Present design direction to client",
            "description": f"Present the {style} direction with 2-3 concept options and next steps.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 7),
        },
    ]


def _functionality(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    goal: str = get_response_value(responses, "website_goal", "").lower()
    tasks: list[dict[str, Any]] = []
    if "ecommerce" in goal or "sell" in goal:
        tasks.append({
            "title": "Research e-commerce platform options",
            "description": "Compare platforms, payment gateways, shipping and tax setup; prepare a recommendation.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 5),
        })
        tasks.append({
            "title": "Plan product catalog structure",
            "description": "Design categories, product attributes, filters and the checkout flow.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 7),
        })
    if "lead" in goal or "contact" in goal:
        tasks.append({
            "title": "Design lead capture strategy",
            "description": "Plan form placement, CTAs, lead magnets and CRM hand-off.",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 5),
        })
    if "portfolio" in goal or "showcase" in goal:
        tasks.append({
            "title": "Plan portfolio showcase layout",
            "description": "Design project cards, filtering and the case study page template.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 6),
        })
    return tasks


def _pages(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    pages: list[str] = get_response_value(responses, "required_pages", [])
    page_list: str = "\n".join(f"- {page}" for page in pages)
    return [
        {
            "title": "Create sitemap and information architecture",
            "description": f"Develop the site structure.\n\nRequired Pages:\n{page_list}",
            "priority": "high",
            "due_date": calculate_due_date(ctx.completion_date, 4),
        },
        {
            "title": "Plan content requirements for all pages",
            "description": f"List copy, imagery and calls to action needed for {len(pages)} page(s).",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 5),
        },
    ]


def _technical_setup(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    domain: str = get_response_value(responses, "domain_name", "")
    hosting: str = get_response_value(responses, "hosting", "")
    tasks: list[dict[str, Any]] = []
    if domain:
        tasks.append({
            "title": f"Set up domain: {domain}",
            "description": "Verify domain ownership, configure DNS records and SSL.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 3),
        })
    if hosting:
        tasks.append({
            "title": "Configure hosting environment",
            "description": f"Hosting preference: {hosting}\n\nSet up staging and production environments with backups.",
            "priority": "medium",
            "due_date": calculate_due_date(ctx.completion_date, 4),
        })
    return tasks


def _launch(responses: dict[str, Any], ctx: TaskContext) -> list[dict[str, Any]]:
    launch_date = parse_date(responses.get("launch_date"))
    due = calculate_due_date(launch_date, -7) if launch_date else calculate_due_date(ctx.completion_date, 14)
    return [{
        "title": "Create pre-launch checklist",
        "description": "Cross-browser and mobile testing, SEO basics, analytics, forms and backups before go-live.",
        "priority": "medium",
        "due_date": due,
    }]


WEB_DESIGN_RULES: list[TaskRule] = [
    TaskRule(
        id="web-design-logo-upload",
        name="Logo Upload Review",
        response_keys=["logo_upload", "brand_assets"],
        priority=10,
        condition=lambda r: has_file_uploads(r, "logo_upload") or has_file_uploads(r, "brand_assets"),
        generate=_brand_assets,
    ),
    TaskRule(
        id="web-design-style-research",
        name="Design Style Research",
        response_keys=["design_style"],
        priority=9,
        condition=lambda r: has_text_response(r, "design_style"),
        generate=_design_style,
    ),
    TaskRule(
        id="web-design-functionality",
        name="Functionality Planning",
        response_keys=["website_goal"],
        priority=8,
        condition=lambda r: has_text_response(r, "website_goal"),
        generate=_functionality,
    ),
    TaskRule(
        id="web-design-pages-planning",
        name="Page Structure Planning",
        response_keys=["required_pages"],
        priority=7,
        condition=lambda r: isinstance(r.get("required_pages"), list) and len(r["required_pages"]) > 0,
        generate=_pages,
    ),
    TaskRule(
        id="web-design-technical-setup",
        name="Technical Setup",
        response_keys=["hosting", "domain_name"],
        priority=7,
        condition=lambda r: has_text_response(r, "hosting") or has_text_response(r, "domain_name"),
        generate=_technical_setup,
    ),
    TaskRule(
        id="web-design-launch-prep",
        name="Launch Preparation",
        response_keys=["launch_date"],
        priority=5,
        condition=lambda r: "launch_date" in r,
        generate=_launch,
    ),
]
