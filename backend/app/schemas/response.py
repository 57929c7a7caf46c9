"""Pydantic schemas for Responses."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ResponseCreate(BaseModel):
    text: str
    media_url: Optional[str] = None


class SubmitterOut(BaseModel):
    user_id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class ResponseOut(BaseModel):
    response_id: str
    loop_question_id: str
    user_id: str
    text: str
    media_url: Optional[str] = None
    created_at: datetime
    user: SubmitterOut

    model_config = {"from_attributes": True}


class UserResponseOut(BaseModel):
    """A user's own response with its question and loop context."""

    response_id: str
    loop_question_id: str
    text: str
    media_url: Optional[str] = None
    created_at: datetime
    question_id: str
    question_text: str
    loop_id: str
    loop_name: str
    month: int
    year: int
