from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from resume_tailor.database import Base

class Customization(Base):
    """
    Links one Resume to one JobDescription.
    Written once by its owning request; only the generated file URLs are attached later.
    """
    __tablename__ = "customizations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resume_id = Column(Integer, ForeignKey("resumes.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_descriptions.id"), nullable=False, index=True)
    template_id = Column(String(32), default="classic", nullable=False)

    match_score = Column(JSON, nullable=False)  # MatchScore
    customized_resume = Column(JSON, nullable=False)  # CustomizedResume
    cover_letter = Column(Text, nullable=False)
    explanation = Column(JSON, nullable=False)  # Explanation

    include_photo = Column(Boolean, default=False, nullable=False)
    photo_url = Column(Text, nullable=True)
    photo_key = Column(Text, nullable=True)

    resume_pdf_url = Column(Text, nullable=True)
    resume_docx_url = Column(Text, nullable=True)
    cover_letter_pdf_url = Column(Text, nullable=True)
    cover_letter_docx_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="customizations")
    resume = relationship("Resume")
    job = relationship("JobDescription")
