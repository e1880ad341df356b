import logging
from typing import Tuple

from pydantic import ValidationError

from resume_tailor.core import prompts
from resume_tailor.core.exceptions import AIError
from resume_tailor.schemas.customization import CustomizedResume, Explanation, CustomizedExperience, RevisedText
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)

_REVISED_TEXT = {
    "type": "object",
    "properties": {
        "original": {"type": "string"},
        "revised": {"type": "string"},
        "reason": {"type": "string"},
    },
    "required": ["original", "revised", "reason"],
    "additionalProperties": False,
}

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

CUSTOMIZER_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": _REVISED_TEXT,
        "experience": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "company": {"type": "string"},
                    "role": {"type": "string"},
                    "duration": {"type": "string"},
                    "bullets": {"type": "array", "items": _REVISED_TEXT},
                },
                "required": ["company", "role", "bullets"],
                "additionalProperties": False,
            },
        },
        "explanation": {
            "type": "object",
            "properties": {
                "skill_emphasis": {**_STRING_ARRAY, "description": "Which skills were emphasized and why"},
                "wording_changes": {**_STRING_ARRAY, "description": "Key wording improvements made"},
                "ats_improvements": {**_STRING_ARRAY, "description": "How changes improve ATS compatibility"},
            },
            "required": ["skill_emphasis", "wording_changes", "ats_improvements"],
            "additionalProperties": False,
        },
    },
    "required": ["summary", "experience", "explanation"],
    "additionalProperties": False,
}


def customize_resume(
    resume: ParsedResume,
    analysis: JobAnalysis,
    job_description: str
) -> Tuple[CustomizedResume, Explanation]:
    """
    Rewrite the summary and experience bullets for a specific job.

    Only wording is delegated to the model: skills, projects and education are
    copied from the parsed resume unchanged, whatever the model returns.
    """
    user_content = prompts.get_prompt(
        prompts.CUSTOMIZE_USER_TEMPLATE,
        resume_json=resume.model_dump_json(indent=2),
        analysis_json=analysis.model_dump_json(indent=2),
        job_description=job_description
    )
    data = AIOrchestrator.analyze_text(
        prompts.CUSTOMIZE_SYSTEM,
        user_content,
        task="customize resume",
        schema_name="resume_customizer",
        schema=CUSTOMIZER_SCHEMA,
        temperature=0.4,
        domain=AIDomain.CUSTOMIZATION
    )

    try:
        summary = RevisedText.model_validate(data.get("summary") or {"original": resume.summary})
        experience = [CustomizedExperience.model_validate(e) for e in data.get("experience") or []]
        explanation = Explanation.model_validate(data.get("explanation") or {})
    except ValidationError as e:
        raise AIError("Failed to customize resume: unexpected AI response shape") from e

    customized = CustomizedResume(
        summary=summary,
        experience=experience,
        skills=list(resume.skills),
        projects=[p.model_copy(deep=True) for p in resume.projects],
        education=[ed.model_copy(deep=True) for ed in resume.education],
    )
    logger.info(
        f"Customized resume: {sum(len(e.bullets) for e in experience)} bullets across {len(experience)} roles"
    )
    return customized, explanation


def generate_cover_letter(
    resume: ParsedResume,
    job_description: str,
    company_name: str,
    role_name: str
) -> str:
    """Write a job-specific cover letter using only resume content."""
    user_content = prompts.get_prompt(
        prompts.COVER_LETTER_USER_TEMPLATE,
        company_name=company_name,
        role_name=role_name,
        job_description=job_description,
        resume_json=resume.model_dump_json(indent=2)
    )
    letter = AIOrchestrator.complete_text(
        prompts.COVER_LETTER_SYSTEM,
        user_content,
        temperature=0.7,
        domain=AIDomain.COVER_LETTER
    )
    if not letter:
        raise AIError("Failed to generate cover letter: No response from AI")
    return letter
