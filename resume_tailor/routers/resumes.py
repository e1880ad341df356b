import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import NotFoundError, ValidationFailedError
from resume_tailor.core.limiter import limiter
from resume_tailor.database import get_db
from resume_tailor.models.user import User
from resume_tailor.routers.auth_deps import get_current_user
from resume_tailor.schemas.resume import ResumeResponse, ResumeUpload
from resume_tailor.services import store
from resume_tailor.services.resume_parser import extract_resume_text, parse_resume_with_ai
from resume_tailor.services.storage import decode_upload, make_upload_key, storage_put

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/resumes",
    tags=["resumes"]
)


@router.post("/upload", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.ai_rate_limit)
def upload_resume(
    request: Request,
    upload: ResumeUpload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Store the original file, extract its text and parse it into structured content."""
    data = decode_upload(upload.file_data)
    text = extract_resume_text(data, upload.mime_type)
    if not text.strip():
        raise ValidationFailedError("Could not extract any text from the uploaded resume")

    parsed = parse_resume_with_ai(text)
    stored = storage_put(
        make_upload_key("resumes", current_user.id, upload.file_name),
        data,
        upload.mime_type
    )
    resume = store.create_resume(
        db,
        user_id=current_user.id,
        original_file_name=upload.file_name,
        file_url=stored["url"],
        file_key=stored["key"],
        parsed_content=parsed,
    )
    logger.info(f"Resume {resume.id} uploaded by user {current_user.id}")
    return resume


@router.get("", response_model=List[ResumeResponse])
def list_resumes(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return store.get_user_resumes(db, current_user.id)


@router.get("/{resume_id}", response_model=ResumeResponse)
def get_resume(resume_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume = store.get_resume(db, resume_id, current_user.id)
    if not resume:
        raise NotFoundError("Resume not found")
    return resume
