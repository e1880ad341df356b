from fastapi import APIRouter
from resume_tailor.routers import (
    auth, resumes, jobs, customizations, applications, templates
)

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(resumes.router, tags=["Resumes"])
api_router.include_router(jobs.router, tags=["Job Descriptions"])
api_router.include_router(customizations.router, tags=["Customizations"])
api_router.include_router(applications.router, tags=["Application Tracker"])
api_router.include_router(templates.router, tags=["Templates"])
