from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional
from resume_tailor.models.application import ApplicationStatus

class ApplicationCreate(BaseModel):
    customization_id: Optional[int] = None
    company_name: str = Field(min_length=1, max_length=255)
    role_name: str = Field(min_length=1, max_length=255)
    status: ApplicationStatus = ApplicationStatus.APPLIED
    notes: Optional[str] = None
    match_score: Optional[float] = Field(default=None, ge=0, le=100)
    ats_score: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("company_name", "role_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None
    outcome: Optional[str] = None
    interview_date: Optional[datetime] = None

class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    customization_id: Optional[int]
    company_name: str
    role_name: str
    status: ApplicationStatus
    notes: Optional[str]
    outcome: Optional[str]
    match_score: Optional[float]
    ats_score: Optional[float]
    applied_date: Optional[datetime]
    interview_date: Optional[datetime]
    updated_at: Optional[datetime] = None

class ApplicationStats(BaseModel):
    total: int = 0
    applied: int = 0
    interview: int = 0
    offer: int = 0
    rejected: int = 0
    withdrawn: int = 0
    success_rate: int = 0
