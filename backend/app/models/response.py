"""Response ORM model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base, utcnow


class Response(Base):
    __tablename__ = "responses"
    __table_args__ = (UniqueConstraint("loop_question_id", "user_id", name="uq_responses_question_user"),)

    response_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    loop_question_id = Column(String(36), ForeignKey("loop_questions.loop_question_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    media_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    user = relationship("User")
    loop_question = relationship("LoopQuestion")
