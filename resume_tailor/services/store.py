"""
Persistence helpers for resumes, job descriptions, customizations and applications.

Every lookup is scoped to the owning user. List operations degrade to an empty
list when the database cannot be reached; writes always raise.
"""
import logging
import math
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_tailor.models.application import Application, ApplicationStatus
from resume_tailor.models.customization import Customization
from resume_tailor.models.job_description import JobDescription
from resume_tailor.models.resume import Resume
from resume_tailor.schemas.application import ApplicationCreate, ApplicationStats, ApplicationStatusUpdate
from resume_tailor.schemas.customization import CustomizedResume, Explanation, GeneratedFiles, MatchScore
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.schemas.resume import ParsedResume

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _safe_list(db: Session, what: str, query: Callable[[], List[T]]) -> List[T]:
    try:
        return query()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Cannot list {what}: database not available ({e.__class__.__name__})")
        return []


def _save(db: Session, obj: T) -> T:
    db.add(obj)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(obj)
    return obj


# --- Resumes ---

def create_resume(
    db: Session,
    user_id: int,
    original_file_name: str,
    file_url: str,
    file_key: str,
    parsed_content: ParsedResume
) -> Resume:
    return _save(db, Resume(
        user_id=user_id,
        original_file_name=original_file_name,
        file_url=file_url,
        file_key=file_key,
        parsed_content=parsed_content.model_dump(mode="json"),
    ))


def get_user_resumes(db: Session, user_id: int) -> List[Resume]:
    return _safe_list(db, "resumes", lambda: (
        db.query(Resume)
        .filter(Resume.user_id == user_id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    ))


def get_resume(db: Session, resume_id: int, user_id: int) -> Optional[Resume]:
    return db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == user_id).first()


# --- Job descriptions ---

def create_job_description(
    db: Session,
    user_id: int,
    description: str,
    analysis: Optional[JobAnalysis],
    company_name: Optional[str] = None,
    role_name: Optional[str] = None
) -> JobDescription:
    return _save(db, JobDescription(
        user_id=user_id,
        company_name=company_name,
        role_name=role_name,
        description=description,
        analysis=analysis.model_dump(mode="json") if analysis else None,
    ))


def get_user_job_descriptions(db: Session, user_id: int) -> List[JobDescription]:
    return _safe_list(db, "job descriptions", lambda: (
        db.query(JobDescription)
        .filter(JobDescription.user_id == user_id)
        .order_by(JobDescription.created_at.desc(), JobDescription.id.desc())
        .all()
    ))


def get_job_description(db: Session, job_id: int, user_id: int) -> Optional[JobDescription]:
    return db.query(JobDescription).filter(
        JobDescription.id == job_id, JobDescription.user_id == user_id
    ).first()


# --- Customizations ---

def create_customization(
    db: Session,
    user_id: int,
    resume_id: int,
    job_id: int,
    match_score: MatchScore,
    customized_resume: CustomizedResume,
    cover_letter: str,
    explanation: Explanation,
    template_id: str = "classic",
    include_photo: bool = False,
    photo_url: Optional[str] = None,
    photo_key: Optional[str] = None
) -> Customization:
    return _save(db, Customization(
        user_id=user_id,
        resume_id=resume_id,
        job_id=job_id,
        template_id=template_id,
        match_score=match_score.model_dump(mode="json"),
        customized_resume=customized_resume.model_dump(mode="json"),
        cover_letter=cover_letter,
        explanation=explanation.model_dump(mode="json"),
        include_photo=include_photo,
        photo_url=photo_url if include_photo else None,
        photo_key=photo_key if include_photo else None,
    ))


def get_user_customizations(db: Session, user_id: int) -> List[Customization]:
    return _safe_list(db, "customizations", lambda: (
        db.query(Customization)
        .filter(Customization.user_id == user_id)
        .order_by(Customization.created_at.desc(), Customization.id.desc())
        .all()
    ))


def get_customization(db: Session, customization_id: int, user_id: int) -> Optional[Customization]:
    return db.query(Customization).filter(
        Customization.id == customization_id, Customization.user_id == user_id
    ).first()


def get_customization_by_resume_and_job(
    db: Session, user_id: int, resume_id: int, job_id: int
) -> Optional[Customization]:
    """Newest customization of this resume for this job, if any."""
    return (
        db.query(Customization)
        .filter(
            Customization.user_id == user_id,
            Customization.resume_id == resume_id,
            Customization.job_id == job_id,
        )
        .order_by(Customization.created_at.desc(), Customization.id.desc())
        .first()
    )


def update_customization_files(db: Session, customization: Customization, files: GeneratedFiles) -> Customization:
    customization.resume_pdf_url = files.resume_pdf_url
    customization.resume_docx_url = files.resume_docx_url
    customization.cover_letter_pdf_url = files.cover_letter_pdf_url
    customization.cover_letter_docx_url = files.cover_letter_docx_url
    return _save(db, customization)


def delete_customization(db: Session, customization: Customization) -> None:
    # Applications keep their history; only the link is dropped
    db.query(Application).filter(
        Application.customization_id == customization.id
    ).update({Application.customization_id: None}, synchronize_session=False)
    db.delete(customization)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


# --- Applications ---

def create_application(db: Session, user_id: int, data: ApplicationCreate) -> Application:
    return _save(db, Application(
        user_id=user_id,
        customization_id=data.customization_id,
        company_name=data.company_name,
        role_name=data.role_name,
        status=data.status.value,
        notes=data.notes,
        match_score=data.match_score,
        ats_score=data.ats_score,
    ))


def get_user_applications(db: Session, user_id: int) -> List[Application]:
    return _safe_list(db, "applications", lambda: (
        db.query(Application)
        .filter(Application.user_id == user_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    ))


def get_application(db: Session, application_id: int, user_id: int) -> Optional[Application]:
    return db.query(Application).filter(
        Application.id == application_id, Application.user_id == user_id
    ).first()


def update_application_status(db: Session, application: Application, update: ApplicationStatusUpdate) -> Application:
    """Any status may follow any other; notes/outcome/interview_date are only overwritten when given."""
    application.status = update.status.value
    if update.notes is not None:
        application.notes = update.notes
    if update.outcome is not None:
        application.outcome = update.outcome
    if update.interview_date is not None:
        application.interview_date = update.interview_date
    return _save(db, application)


def delete_application(db: Session, application: Application) -> None:
    db.delete(application)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def get_application_stats(db: Session, user_id: int) -> ApplicationStats:
    rows = _safe_list(db, "application stats", lambda: (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.user_id == user_id)
        .group_by(Application.status)
        .all()
    ))
    counts = {status.value: 0 for status in ApplicationStatus}
    for status, count in rows:
        if status in counts:
            counts[status] = count

    total = sum(counts.values())
    # Half-up rounding: 1 offer in 8 is 13%, not 12%
    success_rate = math.floor(counts[ApplicationStatus.OFFER.value] / total * 100 + 0.5) if total else 0
    return ApplicationStats(total=total, success_rate=success_rate, **counts)
