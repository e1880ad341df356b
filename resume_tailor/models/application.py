from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from resume_tailor.database import Base
import enum

class ApplicationStatus(str, enum.Enum):
    APPLIED = "applied"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

class Application(Base):
    """User-logged job application. Any status may follow any status."""
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    customization_id = Column(Integer, ForeignKey("customizations.id", ondelete="SET NULL"), nullable=True)
    company_name = Column(String(255), nullable=False)
    role_name = Column(String(255), nullable=False)
    status = Column(String(20), default=ApplicationStatus.APPLIED.value, nullable=False, index=True)  # String for SQLite simplicity
    notes = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    match_score = Column(Float, nullable=True)
    ats_score = Column(Float, nullable=True)
    applied_date = Column(DateTime(timezone=True), server_default=func.now())
    interview_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="applications")
