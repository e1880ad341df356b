"""
ATS (Applicant Tracking System) compatibility scanning.

The model scores the resume and proposes rewordings. Rewordings are checked
against a fixed vocabulary of technologies: a suggestion that names a
technology the resume never mentions is logged, not rejected, since the
check is a heuristic and the model may legitimately rephrase.
"""
import logging
import re
from typing import Dict, List

from pydantic import ValidationError

from resume_tailor.core import prompts
from resume_tailor.core.exceptions import AIError
from resume_tailor.schemas.customization import (
    ATSAnalysis, ATSSuggestion, AtsEducation, AtsExperience, AtsResume, CustomizedResume
)
from resume_tailor.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)

TECHNICAL_TERMS = [
    "python", "javascript", "typescript", "java", "c++", "react", "angular", "vue", "node",
    "express", "django", "flask", "spring", "kubernetes", "docker", "aws", "azure", "gcp",
    "sql", "mongodb", "postgresql", "redis", "elasticsearch", "kafka", "git", "jenkins",
    "terraform", "ansible", "ci/cd", "rest", "graphql", "microservices", "serverless",
    "lambda", "ec2", "s3", "rds", "dynamodb", "cloudformation", "prometheus", "grafana",
    "datadog", "new relic", "splunk",
]

# Word-ish boundaries that also work for terms ending in symbols (c++, ci/cd)
_TECHNICAL_PATTERN = re.compile(
    r"(?<![\w])(" + "|".join(re.escape(t) for t in sorted(TECHNICAL_TERMS, key=len, reverse=True)) + r")(?![\w])",
    re.IGNORECASE,
)

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

ATS_SCHEMA = {
    "type": "object",
    "properties": {
        "ats_score": {"type": "number", "description": "ATS compatibility score 0-100"},
        "keyword_analysis": {
            "type": "object",
            "properties": {
                "matched": {**_STRING_ARRAY, "description": "Keywords found in both resume and job description"},
                "missing": {**_STRING_ARRAY, "description": "Keywords in job description but not in resume"},
                "weak": {**_STRING_ARRAY, "description": "Keywords in resume but underemphasized"},
            },
            "required": ["matched", "missing", "weak"],
            "additionalProperties": False,
        },
        "formatting_warnings": {**_STRING_ARRAY, "description": "ATS-unfriendly formatting issues"},
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "original": {"type": "string", "description": "Original text from resume"},
                    "suggestion": {"type": "string", "description": "Improved wording (no new skills)"},
                    "reason": {"type": "string", "description": "Why this helps ATS compatibility"},
                },
                "required": ["original", "suggestion", "reason"],
                "additionalProperties": False,
            },
        },
        "risk_level": {"type": "string", "enum": ["low", "medium", "high"], "description": "Overall ATS risk level"},
    },
    "required": ["ats_score", "keyword_analysis", "formatting_warnings", "suggestions", "risk_level"],
    "additionalProperties": False,
}


def build_resume_text(resume: AtsResume) -> str:
    """Plain text rendering of a resume for analysis."""
    parts: List[str] = []

    if resume.summary:
        parts.append(f"PROFESSIONAL SUMMARY:\n{resume.summary}\n")

    if resume.skills:
        parts.append(f"SKILLS:\n{', '.join(resume.skills)}\n")

    if resume.experience:
        parts.append("EXPERIENCE:")
        for exp in resume.experience:
            parts.append(f"{exp.title} at {exp.company}")
            if exp.description:
                parts.append(exp.description)
            if exp.bullets:
                parts.append("\n".join(f"- {b}" for b in exp.bullets))
        parts.append("")

    if resume.education:
        parts.append("EDUCATION:")
        for edu in resume.education:
            parts.append(f"{edu.degree} in {edu.field} from {edu.school}")

    return "\n".join(parts)


def extract_technical_terms(text: str) -> List[str]:
    """Unique, lowercased technology names found in the text, in order of appearance."""
    seen: List[str] = []
    for match in _TECHNICAL_PATTERN.finditer(text):
        term = match.group(1).lower()
        if term not in seen:
            seen.append(term)
    return seen


def find_new_terms(suggestions: List[ATSSuggestion], resume: AtsResume) -> Dict[int, List[str]]:
    """Map suggestion index -> technical terms absent from the resume."""
    resume_content = build_resume_text(resume).lower()
    skills = [s.lower() for s in resume.skills]

    flagged: Dict[int, List[str]] = {}
    for index, suggestion in enumerate(suggestions):
        new_terms = [
            term for term in extract_technical_terms(suggestion.suggestion)
            if term not in resume_content and not any(term in skill for skill in skills)
        ]
        if new_terms:
            flagged[index] = new_terms
    return flagged


def validate_suggestions(suggestions: List[ATSSuggestion], resume: AtsResume) -> Dict[int, List[str]]:
    """Warn about suggestions that may introduce new skills. Never raises."""
    flagged = find_new_terms(suggestions, resume)
    for index, terms in flagged.items():
        logger.warning(f"[ATS] Suggestion {index} may introduce new terms: {', '.join(terms)}")
    return flagged


def ats_resume_from_customization(customized: CustomizedResume) -> AtsResume:
    """Flatten a customized resume, preferring revised wording over the original."""
    return AtsResume(
        summary=customized.summary.text or None,
        skills=list(customized.skills),
        experience=[
            AtsExperience(
                title=exp.role,
                company=exp.company,
                description=exp.duration or "",
                bullets=[b.text for b in exp.bullets],
            )
            for exp in customized.experience
        ],
        education=[
            AtsEducation(school=edu.institution or "", degree=edu.degree or "", field=edu.field or "")
            for edu in customized.education
        ],
    )


def analyze_ats_compatibility(resume: AtsResume, job_description: str) -> ATSAnalysis:
    """Score ATS compatibility and return keyword gaps, warnings and safe suggestions."""
    user_content = prompts.get_prompt(
        prompts.ATS_ANALYSIS_USER_TEMPLATE,
        resume_text=build_resume_text(resume),
        job_description=job_description
    )
    data = AIOrchestrator.analyze_text(
        prompts.ATS_ANALYSIS_SYSTEM,
        user_content,
        task="get ATS analysis",
        schema_name="ats_analysis",
        schema=ATS_SCHEMA,
        temperature=0.2,
        domain=AIDomain.ATS
    )
    try:
        analysis = ATSAnalysis.model_validate(data)
    except ValidationError as e:
        raise AIError("Failed to get ATS analysis: unexpected AI response shape") from e

    validate_suggestions(analysis.suggestions, resume)
    logger.info(f"ATS analysis: score={analysis.ats_score:.0f} risk={analysis.risk_level}")
    return analysis


def generate_safe_optimizations(resume: AtsResume, job_description: str) -> str:
    """Reworded plain-text resume; empty string when the model returns nothing."""
    user_content = prompts.get_prompt(
        prompts.ATS_REWORD_USER_TEMPLATE,
        resume_text=build_resume_text(resume),
        job_description=job_description
    )
    return AIOrchestrator.complete_text(
        prompts.ATS_REWORD_SYSTEM,
        user_content,
        temperature=0.4,
        domain=AIDomain.ATS
    )
