"""Question bank, loop assignment and period API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db, utcnow
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.question import AssignmentCreate, LoopQuestionOut, PeriodIn, PeriodOption, QuestionCreate, QuestionOut
from app.services import loop_service, question_service, schedule_service

router = APIRouter()


@router.post("/questions/", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def create_question(payload: QuestionCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return question_service.create_question(
        db, user, text=payload.text, is_default=payload.is_default, is_public=payload.is_public,
    )


@router.get("/questions/", response_model=list[QuestionOut])
def list_questions(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Own questions plus public and default ones."""
    return question_service.list_questions(db, user)


@router.get("/loops/{loop_id}/questions", response_model=list[LoopQuestionOut])
def list_loop_questions(
    loop_id: str,
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    period: Optional[str] = Query(None, description="Period key such as '6-2024'"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    loop = loop_service.get_loop(db, loop_id)
    loop_service.require_viewer(db, loop, user)
    if period:
        month, year = schedule_service.parse_period_key(period)
    return question_service.list_loop_questions(db, loop_id, month=month, year=year)


@router.post("/loops/{loop_id}/questions", response_model=LoopQuestionOut, status_code=status.HTTP_201_CREATED)
def assign_question(loop_id: str, payload: AssignmentCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Assign a question for a period. Already assigned → 409."""
    return question_service.assign_question(
        db, user, loop_id, question_id=payload.question_id, month=payload.month, year=payload.year,
    )


@router.post("/loops/{loop_id}/questions/defaults", response_model=list[LoopQuestionOut], status_code=status.HTTP_201_CREATED)
def assign_default_questions(loop_id: str, payload: PeriodIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Assign every not-yet-assigned default question; returns only new rows."""
    return question_service.assign_default_questions(db, user, loop_id, month=payload.month, year=payload.year)


@router.delete("/loop-questions/{loop_question_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_assignment(loop_question_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    question_service.remove_question_assignment(db, user, loop_question_id)


@router.get("/periods", response_model=list[PeriodOption])
def list_periods():
    """Selectable periods around the current month."""
    return schedule_service.period_options(utcnow().date())
