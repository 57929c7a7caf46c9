"""Response API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.response import ResponseCreate, ResponseOut, UserResponseOut
from app.services import loop_service, question_service, response_service

router = APIRouter()


@router.post("/loop-questions/{loop_question_id}/responses", response_model=ResponseOut, status_code=status.HTTP_201_CREATED)
def submit_response(loop_question_id: str, payload: ResponseCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Answer a loop question. One response per user → 409 on repeat."""
    return response_service.submit_response(db, user, loop_question_id, text=payload.text, media_url=payload.media_url)


@router.get("/loop-questions/{loop_question_id}/responses", response_model=list[ResponseOut])
def list_responses(loop_question_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    assignment = question_service.get_loop_question(db, loop_question_id)
    loop_service.require_viewer(db, loop_service.get_loop(db, assignment.loop_id), user)
    return response_service.get_responses(db, loop_question_id)


@router.get("/responses/me", response_model=list[UserResponseOut])
def my_responses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The caller's responses across all loops, newest first."""
    return response_service.get_user_responses(db, user.user_id)
