import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import NotFoundError, ValidationFailedError
from resume_tailor.core.limiter import limiter
from resume_tailor.database import get_db
from resume_tailor.models.customization import Customization
from resume_tailor.models.user import User
from resume_tailor.routers.auth_deps import get_current_user
from resume_tailor.schemas.customization import (
    ATSAnalysis, BatchRequest, BatchResponse, CustomizationCreate, CustomizationResponse,
    CustomizedResume, GeneratedFiles, PhotoUpload, PhotoUploadResponse, SafeOptimization
)
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services import store
from resume_tailor.services.ats_scanner import (
    analyze_ats_compatibility, ats_resume_from_customization, generate_safe_optimizations
)
from resume_tailor.services.batch_processor import (
    extract_common_keywords, generate_batch_comparison, process_batch_optimization
)
from resume_tailor.services.customizer import customize_resume, generate_cover_letter
from resume_tailor.services.file_generator import generate_all_files
from resume_tailor.services.matcher import calculate_match_score
from resume_tailor.services.storage import decode_upload, make_upload_key, storage_put
from resume_tailor.services.templates import get_template

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/customizations",
    tags=["customizations"]
)

PHOTO_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png"}


def _owned_customization(db: Session, customization_id: int, user: User) -> Customization:
    customization = store.get_customization(db, customization_id, user.id)
    if not customization:
        raise NotFoundError("Customization not found")
    return customization


@router.post("/photo", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_photo(upload: PhotoUpload, current_user: User = Depends(get_current_user)):
    if upload.mime_type.lower() not in PHOTO_MIME_TYPES:
        raise ValidationFailedError("Only JPG and PNG images are supported")

    data = decode_upload(upload.file_data)
    if len(data) > settings.storage.max_photo_bytes:
        raise ValidationFailedError("Photo size must be less than 5MB")

    stored = storage_put(make_upload_key("photos", current_user.id, upload.file_name), data, upload.mime_type)
    return PhotoUploadResponse(photo_url=stored["url"], photo_key=stored["key"])


@router.post("", response_model=CustomizationResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.ai_rate_limit)
def create_customization(
    request: Request,
    data: CustomizationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Score the resume against the job, rewrite it and draft a cover letter."""
    resume = store.get_resume(db, data.resume_id, current_user.id)
    job = store.get_job_description(db, data.job_id, current_user.id)
    if not resume or not job:
        raise NotFoundError("Resume or job not found")
    if not job.analysis:
        raise ValidationFailedError("Job analysis not available")

    template = get_template(data.template_id)
    if data.include_photo and data.photo_key and not data.photo_key.startswith(f"photos/{current_user.id}/"):
        raise ValidationFailedError("Photo does not belong to the current user")

    parsed = ParsedResume.model_validate(resume.parsed_content)
    analysis = JobAnalysis.model_validate(job.analysis)

    match_score = calculate_match_score(parsed, analysis)
    customized, explanation = customize_resume(parsed, analysis, job.description)
    cover_letter = generate_cover_letter(
        parsed,
        job.description,
        job.company_name or "the company",
        job.role_name or "this position"
    )

    customization = store.create_customization(
        db,
        user_id=current_user.id,
        resume_id=resume.id,
        job_id=job.id,
        template_id=template.id,
        match_score=match_score,
        customized_resume=customized,
        cover_letter=cover_letter,
        explanation=explanation,
        include_photo=bool(data.include_photo),
        photo_url=data.photo_url,
        photo_key=data.photo_key,
    )
    logger.info(
        f"Customization {customization.id} created "
        f"(resume={resume.id}, job={job.id}, match={match_score.overall_match:.0f})"
    )
    return customization


@router.post("/batch", response_model=BatchResponse)
@limiter.limit(settings.ai_rate_limit)
async def batch_optimize(
    request: Request,
    batch: BatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Customize one resume for several jobs at once and compare the outcomes."""
    if len(batch.jobs) > settings.batch_max_jobs:
        raise ValidationFailedError(f"A batch may contain at most {settings.batch_max_jobs} jobs")
    template = get_template(batch.template_id)

    resume = await run_in_threadpool(store.get_resume, db, batch.resume_id, current_user.id)
    if not resume:
        raise NotFoundError("Resume not found")

    results = await process_batch_optimization(
        ParsedResume.model_validate(resume.parsed_content),
        batch.jobs,
        template.id
    )
    return BatchResponse(
        results=results,
        comparison=generate_batch_comparison(results),
        common_keywords=extract_common_keywords(results),
    )


@router.get("", response_model=List[CustomizationResponse])
def list_customizations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return store.get_user_customizations(db, current_user.id)


@router.get("/by-resume-and-job", response_model=Optional[CustomizationResponse])
def get_by_resume_and_job(
    resume_id: int = Query(...),
    job_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return store.get_customization_by_resume_and_job(db, current_user.id, resume_id, job_id)


@router.get("/{customization_id}", response_model=CustomizationResponse)
def get_customization(
    customization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _owned_customization(db, customization_id, current_user)


@router.delete("/{customization_id}")
def delete_customization(
    customization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    customization = _owned_customization(db, customization_id, current_user)
    store.delete_customization(db, customization)
    logger.info(f"Customization {customization_id} deleted by user {current_user.id}")
    return {"success": True}


@router.post("/{customization_id}/files", response_model=GeneratedFiles)
def generate_files(
    customization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Render resume and cover letter as PDF and DOCX and attach the URLs."""
    customization = _owned_customization(db, customization_id, current_user)
    job = store.get_job_description(db, customization.job_id, current_user.id)
    if not job:
        raise NotFoundError("Job not found")

    files = generate_all_files(
        CustomizedResume.model_validate(customization.customized_resume),
        customization.cover_letter,
        job.company_name or "Company",
        job.role_name or "Role",
        template_id=customization.template_id,
        photo_key=customization.photo_key if customization.include_photo else None,
    )
    store.update_customization_files(db, customization, files)
    return files


@router.get("/{customization_id}/ats", response_model=ATSAnalysis)
@limiter.limit(settings.ai_rate_limit)
def get_ats_analysis(
    request: Request,
    customization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    customization = _owned_customization(db, customization_id, current_user)
    job = store.get_job_description(db, customization.job_id, current_user.id)
    if not job:
        raise NotFoundError("Job not found")

    resume = ats_resume_from_customization(CustomizedResume.model_validate(customization.customized_resume))
    return analyze_ats_compatibility(resume, job.description)


@router.post("/{customization_id}/ats/optimize", response_model=SafeOptimization)
@limiter.limit(settings.ai_rate_limit)
def optimize_for_ats(
    request: Request,
    customization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Plain-text rewording of the customized resume for ATS parsing."""
    customization = _owned_customization(db, customization_id, current_user)
    job = store.get_job_description(db, customization.job_id, current_user.id)
    if not job:
        raise NotFoundError("Job not found")

    resume = ats_resume_from_customization(CustomizedResume.model_validate(customization.customized_resume))
    return SafeOptimization(content=generate_safe_optimizations(resume, job.description))
