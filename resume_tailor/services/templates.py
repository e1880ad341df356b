"""
Resume template catalogue.

Every template is ATS-safe: styling only changes fonts, colors, heading case
and bullet glyphs, never the plain-text structure of the document.
"""
from typing import Dict, List, Literal

from pydantic import BaseModel

from resume_tailor.core.exceptions import ValidationFailedError

DEFAULT_TEMPLATE_ID = "classic"

BULLET_GLYPHS = {
    "dash": "–",
    "dot": "•",
    "arrow": "→",
}

SPACING_MULTIPLIERS = {
    "compact": 0.5,
    "normal": 1.0,
    "spacious": 1.5,
}


class TemplateColors(BaseModel):
    heading: str
    text: str
    accent: str


class TemplateConfig(BaseModel):
    id: str
    name: str
    description: str
    layout: Literal["single", "sidebar"] = "single"
    section_spacing: Literal["compact", "normal", "spacious"] = "normal"
    font_family: Literal["sans-serif", "serif"] = "sans-serif"
    heading_style: Literal["bold", "bold-uppercase", "bold-underline"] = "bold"
    bullet_style: Literal["dash", "dot", "arrow"] = "dash"
    colors: TemplateColors
    ats_score: int


TEMPLATES: Dict[str, TemplateConfig] = {
    "modern": TemplateConfig(
        id="modern",
        name="Modern",
        description="Clean, contemporary design with subtle accents. Great for tech and creative roles.",
        section_spacing="normal",
        font_family="sans-serif",
        heading_style="bold-uppercase",
        bullet_style="dash",
        colors=TemplateColors(heading="#1e40af", text="#1f2937", accent="#3b82f6"),
        ats_score=92,
    ),
    "classic": TemplateConfig(
        id="classic",
        name="Classic",
        description="Traditional, professional format. Ideal for corporate and traditional industries.",
        section_spacing="normal",
        font_family="serif",
        heading_style="bold",
        bullet_style="dot",
        colors=TemplateColors(heading="#000000", text="#1f2937", accent="#374151"),
        ats_score=98,
    ),
    "technical": TemplateConfig(
        id="technical",
        name="Technical",
        description="Optimized for technical roles with prominent skills section. Perfect for engineers.",
        section_spacing="compact",
        font_family="sans-serif",
        heading_style="bold-uppercase",
        bullet_style="arrow",
        colors=TemplateColors(heading="#059669", text="#1f2937", accent="#10b981"),
        ats_score=95,
    ),
    "creative": TemplateConfig(
        id="creative",
        name="Creative",
        description="Modern with distinctive styling. Suitable for design, marketing, and creative fields.",
        section_spacing="spacious",
        font_family="sans-serif",
        heading_style="bold-uppercase",
        bullet_style="dash",
        colors=TemplateColors(heading="#7c3aed", text="#1f2937", accent="#a78bfa"),
        ats_score=88,
    ),
    "minimal": TemplateConfig(
        id="minimal",
        name="Minimal",
        description="Ultra-clean, text-focused format. Maximum ATS compatibility and readability.",
        section_spacing="compact",
        font_family="sans-serif",
        heading_style="bold",
        bullet_style="dash",
        colors=TemplateColors(heading="#000000", text="#000000", accent="#4b5563"),
        ats_score=100,
    ),
    "sidebar": TemplateConfig(
        id="sidebar",
        name="Professional Sidebar",
        description="Two-column layout with photo and grouped skills in a side panel.",
        layout="sidebar",
        section_spacing="normal",
        font_family="sans-serif",
        heading_style="bold-uppercase",
        bullet_style="dot",
        colors=TemplateColors(heading="#000000", text="#1f2937", accent="#f9fafb"),
        ats_score=85,
    ),
}


def list_templates() -> List[TemplateConfig]:
    return list(TEMPLATES.values())


def get_template(template_id: str = None) -> TemplateConfig:
    """Look up a template; None falls back to the default."""
    template = TEMPLATES.get(template_id or DEFAULT_TEMPLATE_ID)
    if template is None:
        raise ValidationFailedError(f"Unknown template: {template_id}")
    return template


def format_heading(text: str, template: TemplateConfig) -> str:
    upper = text.upper()
    if template.heading_style == "bold-uppercase":
        return upper
    if template.heading_style == "bold-underline":
        return f"{upper}\n{'=' * len(upper)}"
    return text


def format_bullet(text: str, template: TemplateConfig) -> str:
    return f"{BULLET_GLYPHS[template.bullet_style]} {text}"


def spacing_multiplier(template: TemplateConfig) -> float:
    return SPACING_MULTIPLIERS[template.section_spacing]


SKILL_CATEGORIES = {
    "Frontend": ["react", "vue", "angular", "next", "typescript", "javascript", "html", "css", "tailwind", "vite"],
    "Backend": ["python", "django", "node", "express", "java", "spring", "go", "rust", "php"],
    "Databases": ["postgresql", "mysql", "mongodb", "redis", "supabase", "firebase"],
    "AI/ML": ["tensorflow", "pytorch", "llm", "ollama", "langchain", "huggingface"],
    "DevOps": ["docker", "kubernetes", "github", "gitlab", "ci/cd", "aws", "gcp", "azure"],
}


def group_skills_by_category(skills: List[str]) -> Dict[str, List[str]]:
    """
    Bucket skills by substring match against SKILL_CATEGORIES.
    The first matching category wins; unmatched skills go to "Other".
    Empty categories are dropped, insertion order is kept.
    """
    groups: Dict[str, List[str]] = {name: [] for name in SKILL_CATEGORIES}
    groups["Other"] = []

    for skill in skills:
        lower = skill.lower()
        category = next(
            (name for name, keywords in SKILL_CATEGORIES.items() if any(k in lower for k in keywords)),
            "Other",
        )
        groups[category].append(skill)

    return {name: members for name, members in groups.items() if members}
