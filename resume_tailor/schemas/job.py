from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime

class JobAnalysis(BaseModel):
    required_skills: List[str] = Field(default_factory=list)
    nice_to_have_skills: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    soft_skills: List[str] = Field(default_factory=list)

class JobCreate(BaseModel):
    description: str = Field(min_length=1)
    company_name: Optional[str] = None
    role_name: Optional[str] = None

class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    company_name: Optional[str]
    role_name: Optional[str]
    description: str
    analysis: Optional[JobAnalysis]
    created_at: Optional[datetime] = None
