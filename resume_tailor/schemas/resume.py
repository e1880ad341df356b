from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

# --- PARSED RESUME CONTENT ---

class Experience(BaseModel):
    company: str = ""
    role: str = ""
    duration: Optional[str] = None
    bullets: List[str] = Field(default_factory=list)

class Project(BaseModel):
    name: str = ""
    description: str = ""
    technologies: Optional[List[str]] = None

class Education(BaseModel):
    institution: str = ""
    degree: str = ""
    field: Optional[str] = None
    year: Optional[str] = None

class ParsedResume(BaseModel):
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""

# --- API SCHEMAS ---

class ResumeUpload(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_data: str = Field(min_length=1)  # base64 encoded
    mime_type: str

class ResumeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    original_file_name: str
    file_url: str
    file_key: str
    parsed_content: ParsedResume
    created_at: Optional[datetime] = None
