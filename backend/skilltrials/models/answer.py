from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("test_id", "question_id", "candidate_id", name="uq_answers_test_question_candidate"),
    )

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True)
    answer_text = Column(JSON, nullable=False, default=list)  # options the candidate selected
    score = Column(Float, nullable=False, default=0)  # 0 or 100
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    test = relationship("Test", back_populates="answers")
