import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from resume_tailor.schemas.resume import Education, Project


def clamp_score(value: Any) -> float:
    """Coerce a model-reported score into the 0-100 range."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return max(0.0, min(100.0, score))


# --- MATCH SCORE ---

class MatchScore(BaseModel):
    overall_match: float = 0
    strengths: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    skill_overlap: float = 0
    experience_relevance: float = 0
    keyword_alignment: float = 0

    @field_validator("overall_match", "skill_overlap", "experience_relevance", "keyword_alignment", mode="before")
    @classmethod
    def _clamp(cls, v):
        return clamp_score(v)

# --- CUSTOMIZED RESUME ---

class RevisedText(BaseModel):
    original: str = ""
    revised: str = ""
    reason: str = ""

    @property
    def text(self) -> str:
        """Revised wording, falling back to the original."""
        return self.revised or self.original

class CustomizedExperience(BaseModel):
    company: str = ""
    role: str = ""
    duration: Optional[str] = None
    bullets: List[RevisedText] = Field(default_factory=list)

    @field_validator("bullets", mode="before")
    @classmethod
    def _plain_bullets(cls, v):
        # Older rows stored bare strings
        if isinstance(v, list):
            return [{"original": b, "revised": b, "reason": ""} if isinstance(b, str) else b for b in v]
        return v

class CustomizedResume(BaseModel):
    summary: RevisedText = Field(default_factory=RevisedText)
    experience: List[CustomizedExperience] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)  # Preserved from original
    projects: List[Project] = Field(default_factory=list)  # Preserved from original
    education: List[Education] = Field(default_factory=list)  # Preserved from original

class Explanation(BaseModel):
    skill_emphasis: List[str] = Field(default_factory=list)
    wording_changes: List[str] = Field(default_factory=list)
    ats_improvements: List[str] = Field(default_factory=list)

# --- ATS ---

RiskLevel = Literal["low", "medium", "high"]

class KeywordAnalysis(BaseModel):
    matched: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    weak: List[str] = Field(default_factory=list)

class ATSSuggestion(BaseModel):
    original: str
    suggestion: str
    reason: str = ""

class ATSAnalysis(BaseModel):
    ats_score: float = 0
    keyword_analysis: KeywordAnalysis = Field(default_factory=KeywordAnalysis)
    formatting_warnings: List[str] = Field(default_factory=list)
    suggestions: List[ATSSuggestion] = Field(default_factory=list)
    risk_level: RiskLevel = "medium"

    @field_validator("ats_score", mode="before")
    @classmethod
    def _clamp(cls, v):
        return clamp_score(v)

    @model_validator(mode="before")
    @classmethod
    def _normalize_risk(cls, data):
        if not isinstance(data, dict):
            return data
        risk = str(data.get("risk_level") or "").strip().lower()
        if risk not in ("low", "medium", "high"):
            # Unknown label: derive it from the score
            score = clamp_score(data.get("ats_score"))
            risk = "low" if score >= 80 else "medium" if score >= 60 else "high"
        return {**data, "risk_level": risk}

class AtsExperience(BaseModel):
    title: str = ""
    company: str = ""
    description: str = ""
    bullets: List[str] = Field(default_factory=list)

class AtsEducation(BaseModel):
    school: str = ""
    degree: str = ""
    field: str = ""

class AtsResume(BaseModel):
    """Flattened resume view fed to the ATS scanner."""
    summary: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience: List[AtsExperience] = Field(default_factory=list)
    education: List[AtsEducation] = Field(default_factory=list)

# --- API SCHEMAS ---

class PhotoUpload(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_data: str = Field(min_length=1)  # base64 encoded
    mime_type: str

class PhotoUploadResponse(BaseModel):
    photo_url: str
    photo_key: str

class CustomizationCreate(BaseModel):
    resume_id: int
    job_id: int
    template_id: Optional[str] = None
    include_photo: Optional[bool] = False
    photo_url: Optional[str] = None
    photo_key: Optional[str] = None

class CustomizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    resume_id: int
    job_id: int
    template_id: str
    match_score: MatchScore
    customized_resume: CustomizedResume
    cover_letter: str
    explanation: Explanation
    include_photo: bool
    photo_url: Optional[str]
    photo_key: Optional[str]
    resume_pdf_url: Optional[str]
    resume_docx_url: Optional[str]
    cover_letter_pdf_url: Optional[str]
    cover_letter_docx_url: Optional[str]
    created_at: Optional[datetime] = None

class GeneratedFiles(BaseModel):
    resume_pdf_url: str
    resume_docx_url: str
    cover_letter_pdf_url: str
    cover_letter_docx_url: str

# --- BATCH ---

class BatchJob(BaseModel):
    id: str
    company_name: str = Field(min_length=1)
    role_name: str = Field(min_length=1)
    description: str = Field(min_length=1)

class BatchRequest(BaseModel):
    resume_id: int
    jobs: List[BatchJob] = Field(min_length=1)
    template_id: str = "classic"

class BatchResult(BaseModel):
    job_id: str
    company_name: str
    role_name: str
    match_score: float
    ats_score: float
    customized_resume: CustomizedResume
    explanation: Explanation
    cover_letter: str
    summary: str
    keywords: KeywordAnalysis

class ScoredRole(BaseModel):
    company: str
    role: str
    score: float

class BatchComparison(BaseModel):
    total_jobs: int
    average_match_score: float
    average_ats_score: float
    best_match: ScoredRole
    worst_match: ScoredRole
    score_range: Dict[str, float]

class CommonKeywords(BaseModel):
    universal: List[str] = Field(default_factory=list)
    frequent: List[str] = Field(default_factory=list)
    rare: List[str] = Field(default_factory=list)

class BatchResponse(BaseModel):
    results: List[BatchResult]
    comparison: Optional[BatchComparison]
    common_keywords: CommonKeywords

class SafeOptimization(BaseModel):
    content: str
