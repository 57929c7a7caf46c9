"""Question and LoopQuestion ORM models."""
import uuid
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base, utcnow


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    text = Column(Text, nullable=False)
    created_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())


class LoopQuestion(Base):
    """A question assigned to a loop for one (month, year) period."""

    __tablename__ = "loop_questions"
    __table_args__ = (
        UniqueConstraint("loop_id", "question_id", "month", "year", name="uq_loop_questions_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_loop_questions_month"),
        Index("ix_loop_questions_loop_period", "loop_id", "year", "month"),
    )

    loop_question_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    loop_id = Column(String(36), ForeignKey("loops.loop_id"), nullable=False)
    question_id = Column(String(36), ForeignKey("questions.question_id"), nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    question = relationship("Question")
    loop = relationship("Loop")
