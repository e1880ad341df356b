import logging

from pydantic import ValidationError

from resume_tailor.core import prompts
from resume_tailor.core.exceptions import AIError
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

JOB_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "required_skills": {**_STRING_ARRAY, "description": "Must-have technical skills"},
        "nice_to_have_skills": {**_STRING_ARRAY, "description": "Preferred or nice-to-have skills"},
        "responsibilities": {**_STRING_ARRAY, "description": "Key job responsibilities"},
        "keywords": {**_STRING_ARRAY, "description": "Important keywords for ATS"},
        "soft_skills": {**_STRING_ARRAY, "description": "Soft skills and personal qualities"},
    },
    "required": ["required_skills", "nice_to_have_skills", "responsibilities", "keywords", "soft_skills"],
    "additionalProperties": False,
}


def analyze_job_description(job_description: str) -> JobAnalysis:
    """Analyze a job description and extract its requirements."""
    logger.info(f"Analyzing job description ({len(job_description)} chars)")
    data = AIOrchestrator.analyze_text(
        prompts.JOB_ANALYSIS_SYSTEM,
        prompts.get_prompt(prompts.JOB_ANALYSIS_USER_TEMPLATE, job_description=job_description),
        task="analyze job description",
        schema_name="job_analyzer",
        schema=JOB_ANALYSIS_SCHEMA,
        temperature=0.2,
        domain=AIDomain.JOB
    )
    try:
        return JobAnalysis.model_validate(data)
    except ValidationError as e:
        raise AIError("Failed to analyze job description: unexpected AI response shape") from e
