from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(50), nullable=True)  # e.g. single / multiple
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    difficulty = Column(String(50), nullable=True)
    created_by = Column(String(255), nullable=True)
    options = Column(JSON, nullable=False, default=list)  # ordered choice strings
    answers = Column(JSON, nullable=False, default=list)  # ordered correct choice(s)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    job = relationship("Job", back_populates="questions")
