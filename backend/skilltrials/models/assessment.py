from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base

# Lifecycle: CREATED -> STARTED -> ENDED / Submitted
STATUS_CREATED = "CREATED"
STATUS_STARTED = "STARTED"
STATUS_ENDED = "ENDED"
STATUS_SUBMITTED = "Submitted"


class Test(Base):
    """One candidate's attempt at one job's question set."""

    __tablename__ = "tests"
    __table_args__ = (
        UniqueConstraint("job_post_id", "candidate_email", name="uq_tests_job_candidate_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_post_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null until a candidate account with candidate_email exists.
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="SET NULL"), nullable=True, index=True)
    candidate_email = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_CREATED)
    score = Column(Float, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    job = relationship("Job", back_populates="tests")
    candidate = relationship("Candidate", back_populates="tests")
    answers = relationship("Answer", back_populates="test", passive_deletes=True)
