"""Pydantic schemas for Loops and their members."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class LoopCreate(BaseModel):
    name: str
    description: Optional[str] = None
    send_date: int = 15
    grace_period: int = 7
    timezone: Optional[str] = None


class LoopUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    send_date: Optional[int] = None
    grace_period: Optional[int] = None
    timezone: Optional[str] = None


class LoopOut(BaseModel):
    loop_id: str
    name: str
    description: Optional[str] = None
    coordinator_id: str
    send_date: int
    grace_period: int
    timezone: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MemberAdd(BaseModel):
    email: str
    name: Optional[str] = None
    status: str = "active"  # active, inactive, pending


class MemberStatusUpdate(BaseModel):
    status: str


class MemberOut(BaseModel):
    member_id: str
    loop_id: str
    email: str
    name: Optional[str] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ScheduleOut(BaseModel):
    loop_id: str
    month: int
    year: int
    period_key: str
    opens_at: datetime
    closes_at: datetime
