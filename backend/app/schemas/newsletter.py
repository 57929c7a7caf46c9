"""Pydantic schemas for Newsletters and the coordinator dashboard."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.schemas.loop import LoopOut


class NewsletterCreate(BaseModel):
    month: int
    year: int
    title: Optional[str] = None


class NewsletterOut(BaseModel):
    newsletter_id: str
    loop_id: str
    month: int
    year: int
    title: str
    content: Optional[str] = None
    status: str
    sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DashboardOut(BaseModel):
    loops: list[LoopOut]
    recent_newsletters: list[NewsletterOut]
    assignments_this_month: int
