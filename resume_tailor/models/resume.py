from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from resume_tailor.database import Base

class Resume(Base):
    """Uploaded resume file plus its AI-parsed structure. Immutable once created."""
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    original_file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    file_key = Column(Text, nullable=False)
    parsed_content = Column(JSON, nullable=False)  # ParsedResume
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="resumes")
