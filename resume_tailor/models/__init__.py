# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, resume, job_description, customization, application

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .resume import Resume
from .job_description import JobDescription
from .customization import Customization
from .application import Application, ApplicationStatus

__all__ = [
    "User",
    "UserRole",
    "Resume",
    "JobDescription",
    "Customization",
    "Application",
    "ApplicationStatus",
]
