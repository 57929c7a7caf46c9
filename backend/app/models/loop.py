"""Loop and LoopMember ORM models."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base, utcnow


class MemberStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"


class Loop(Base):
    __tablename__ = "loops"
    __table_args__ = (
        CheckConstraint("send_date BETWEEN 1 AND 28", name="ck_loops_send_date"),
        CheckConstraint("grace_period BETWEEN 1 AND 14", name="ck_loops_grace_period"),
    )

    loop_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    coordinator_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    send_date = Column(Integer, nullable=False, default=15)  # day of month, 1-28
    grace_period = Column(Integer, nullable=False, default=7)  # days, 1-14
    timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    members = relationship("LoopMember", back_populates="loop", order_by="LoopMember.created_at")


class LoopMember(Base):
    __tablename__ = "loop_members"
    __table_args__ = (UniqueConstraint("loop_id", "email", name="uq_loop_members_loop_email"),)

    member_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    loop_id = Column(String(36), ForeignKey("loops.loop_id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    name = Column(String(100), nullable=True)
    status = Column(SAEnum(MemberStatus), nullable=False, default=MemberStatus.active)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    loop = relationship("Loop", back_populates="members")
