import logging

from pydantic import ValidationError

from resume_tailor.core import prompts
from resume_tailor.core.exceptions import AIError
from resume_tailor.schemas.customization import MatchScore
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)

MATCH_SCORE_SCHEMA = {
    "type": "object",
    "properties": {
        "overall_match": {"type": "number", "description": "Overall match score 0-100"},
        "strengths": {"type": "array", "items": {"type": "string"}, "description": "Areas where resume is strong"},
        "gaps": {"type": "array", "items": {"type": "string"}, "description": "Skills or experience missing from resume"},
        "skill_overlap": {"type": "number", "description": "Skill overlap score 0-100"},
        "experience_relevance": {"type": "number", "description": "Experience relevance score 0-100"},
        "keyword_alignment": {"type": "number", "description": "Keyword alignment score 0-100"},
    },
    "required": [
        "overall_match",
        "strengths",
        "gaps",
        "skill_overlap",
        "experience_relevance",
        "keyword_alignment",
    ],
    "additionalProperties": False,
}


def calculate_match_score(resume: ParsedResume, analysis: JobAnalysis) -> MatchScore:
    """Score how well a parsed resume lines up with an analyzed job."""
    user_content = prompts.get_prompt(
        prompts.MATCH_SCORE_USER_TEMPLATE,
        resume_json=resume.model_dump_json(indent=2),
        analysis_json=analysis.model_dump_json(indent=2)
    )
    data = AIOrchestrator.analyze_text(
        prompts.MATCH_SCORE_SYSTEM,
        user_content,
        task="calculate match score",
        schema_name="match_scorer",
        schema=MATCH_SCORE_SCHEMA,
        temperature=0.2,
        domain=AIDomain.MATCH
    )
    try:
        score = MatchScore.model_validate(data)
    except ValidationError as e:
        raise AIError("Failed to calculate match score: unexpected AI response shape") from e

    logger.info(f"Match score computed: overall={score.overall_match:.0f}")
    return score
