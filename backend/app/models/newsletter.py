"""Newsletter ORM model — draft -> sent, never back."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from app.database import Base, utcnow


class NewsletterStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"


class Newsletter(Base):
    __tablename__ = "newsletters"
    __table_args__ = (
        UniqueConstraint("loop_id", "month", "year", name="uq_newsletters_loop_period"),
        CheckConstraint(
            "(status = 'sent' AND sent_at IS NOT NULL) OR (status = 'draft' AND sent_at IS NULL)",
            name="ck_newsletters_sent_at_matches_status",
        ),
    )

    newsletter_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    loop_id = Column(String(36), ForeignKey("loops.loop_id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    status = Column(SAEnum(NewsletterStatus), nullable=False, default=NewsletterStatus.draft)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
