"""Pydantic schemas for the question bank and loop assignments."""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class QuestionCreate(BaseModel):
    text: str
    is_default: bool = False
    is_public: bool = False


class QuestionOut(BaseModel):
    question_id: str
    text: str
    created_by: str
    is_default: bool
    is_public: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AssignmentCreate(BaseModel):
    question_id: str
    month: int
    year: int


class PeriodIn(BaseModel):
    month: int
    year: int


class LoopQuestionOut(BaseModel):
    loop_question_id: str
    loop_id: str
    question_id: str
    month: int
    year: int
    created_at: datetime
    question: QuestionOut

    model_config = {"from_attributes": True}


class PeriodOption(BaseModel):
    key: str
    label: str
    month: int
    year: int
