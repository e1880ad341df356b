import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from resume_tailor.core.exceptions import NotFoundError
from resume_tailor.database import get_db
from resume_tailor.models.user import User
from resume_tailor.routers.auth_deps import get_current_user
from resume_tailor.schemas.application import (
    ApplicationCreate, ApplicationResponse, ApplicationStats, ApplicationStatusUpdate
)
from resume_tailor.services import store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/applications",
    tags=["applications"]
)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if data.customization_id is not None and not store.get_customization(db, data.customization_id, current_user.id):
        raise NotFoundError("Customization not found")
    return store.create_application(db, current_user.id, data)


@router.get("", response_model=List[ApplicationResponse])
def list_applications(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return store.get_user_applications(db, current_user.id)


@router.get("/stats", response_model=ApplicationStats)
def application_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return store.get_application_stats(db, current_user.id)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
def update_status(
    application_id: int,
    update: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = store.get_application(db, application_id, current_user.id)
    if not application:
        raise NotFoundError("Application not found")
    previous = application.status
    application = store.update_application_status(db, application, update)
    logger.info(f"Application {application_id}: {previous} -> {application.status}")
    return application


@router.delete("/{application_id}")
def delete_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = store.get_application(db, application_id, current_user.id)
    if not application:
        raise NotFoundError("Application not found")
    store.delete_application(db, application)
    return {"success": True}
