import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import NotFoundError
from resume_tailor.core.limiter import limiter
from resume_tailor.database import get_db
from resume_tailor.models.user import User
from resume_tailor.routers.auth_deps import get_current_user
from resume_tailor.schemas.job import JobCreate, JobResponse
from resume_tailor.services import store
from resume_tailor.services.job_analyzer import analyze_job_description

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"]
)


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.ai_rate_limit)
def create_job(
    request: Request,
    job: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    analysis = analyze_job_description(job.description)
    record = store.create_job_description(
        db,
        user_id=current_user.id,
        description=job.description,
        analysis=analysis,
        company_name=job.company_name,
        role_name=job.role_name,
    )
    logger.info(f"Job description {record.id} analyzed: {len(analysis.required_skills)} required skills")
    return record


@router.get("", response_model=List[JobResponse])
def list_jobs(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return store.get_user_job_descriptions(db, current_user.id)


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    job = store.get_job_description(db, job_id, current_user.id)
    if not job:
        raise NotFoundError("Job description not found")
    return job
