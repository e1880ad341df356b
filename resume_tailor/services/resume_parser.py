import io
import json
import logging

import PyPDF2
import docx
from pydantic import ValidationError

from resume_tailor.core import prompts
from resume_tailor.core.exceptions import AIError, UnsupportedFileError
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {"application/pdf"}
DOCX_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}
MAX_RESUME_CHARS = 20000

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

RESUME_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "Professional summary or objective"},
        "skills": {**_STRING_ARRAY, "description": "List of skills mentioned in resume"},
        "experience": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "company": {"type": "string"},
                    "role": {"type": "string"},
                    "duration": {"type": "string"},
                    "bullets": _STRING_ARRAY,
                },
                "required": ["company", "role", "bullets"],
                "additionalProperties": False,
            },
        },
        "projects": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "technologies": _STRING_ARRAY,
                },
                "required": ["name", "description"],
                "additionalProperties": False,
            },
        },
        "education": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "institution": {"type": "string"},
                    "degree": {"type": "string"},
                    "field": {"type": "string"},
                    "year": {"type": "string"},
                },
                "required": ["institution", "degree"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["summary", "skills", "experience", "projects", "education"],
    "additionalProperties": False,
}


def _extract_pdf_text(data: bytes) -> str:
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def _extract_docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def extract_resume_text(data: bytes, mime_type: str) -> str:
    """Extract text from a resume file based on its mime type."""
    if mime_type in PDF_MIME_TYPES:
        extract = _extract_pdf_text
    elif mime_type in DOCX_MIME_TYPES:
        extract = _extract_docx_text
    else:
        raise UnsupportedFileError(f"Unsupported file type: {mime_type}")

    try:
        text = extract(data)
    except Exception as e:
        logger.warning(f"Could not extract text from {mime_type} resume: {e}")
        raise UnsupportedFileError(f"Could not read {mime_type} file: {e}") from e

    logger.info(f"Extracted {len(text)} chars from {mime_type} resume")
    return text.strip()


def parse_resume_with_ai(resume_text: str) -> ParsedResume:
    """Parse resume text into structured JSON using AI."""
    user_content = prompts.get_prompt(
        prompts.RESUME_PARSE_USER_TEMPLATE,
        resume_text=resume_text[:MAX_RESUME_CHARS]
    )
    data = AIOrchestrator.analyze_text(
        prompts.RESUME_PARSE_SYSTEM,
        user_content,
        task="parse resume",
        schema_name="resume_parser",
        schema=RESUME_SCHEMA,
        temperature=0.1,
        domain=AIDomain.RESUME
    )
    try:
        parsed = ParsedResume.model_validate(data)
    except ValidationError as e:
        logger.error(f"Parsed resume failed validation: {json.dumps(data)[:500]}")
        raise AIError("Failed to parse resume: AI response did not match the resume shape") from e

    logger.info(
        f"Parsed resume: {len(parsed.skills)} skills, {len(parsed.experience)} roles, "
        f"{len(parsed.projects)} projects, {len(parsed.education)} education entries"
    )
    return parsed
