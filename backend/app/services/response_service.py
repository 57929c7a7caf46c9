"""Response collection — one immutable response per member per loop question."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session, joinedload

from app.database import commit_or_raise
from app.errors import ConflictError
from app.models.loop import Loop
from app.models.newsletter import Newsletter, NewsletterStatus
from app.models.question import LoopQuestion, Question
from app.models.response import Response
from app.models.user import User
from app.services import loop_service, question_service
from app.validation import check_text, raise_if_errors

logger = logging.getLogger(__name__)

ALREADY_RESPONDED = "You have already responded to this question"


def submit_response(
    db: Session,
    actor: User,
    loop_question_id: str,
    text: str,
    media_url: Optional[str] = None,
) -> Response:
    """Record the actor's answer to a loop question."""
    errors: list = []
    check_text(errors, "text", text)
    raise_if_errors(errors)

    assignment = question_service.get_loop_question(db, loop_question_id)
    loop = loop_service.get_loop(db, assignment.loop_id)
    loop_service.require_viewer(db, loop, actor)

    # Locks the period's newsletter row so a concurrent send waits for this commit
    newsletter = (
        db.query(Newsletter)
        .filter(
            Newsletter.loop_id == loop.loop_id,
            Newsletter.month == assignment.month,
            Newsletter.year == assignment.year,
        )
        .with_for_update()
        .first()
    )
    if newsletter is not None and newsletter.status == NewsletterStatus.sent:
        raise ConflictError("The newsletter for this period has already been sent")

    existing = (
        db.query(Response)
        .filter(Response.loop_question_id == loop_question_id, Response.user_id == actor.user_id)
        .first()
    )
    if existing:
        raise ConflictError(ALREADY_RESPONDED)

    response = Response(
        loop_question_id=loop_question_id,
        user_id=actor.user_id,
        text=text.strip(),
        media_url=(media_url or "").strip() or None,
    )
    db.add(response)
    commit_or_raise(db, conflict_message=ALREADY_RESPONDED)
    db.refresh(response)
    logger.info("User %s responded to loop question %s", actor.user_id, loop_question_id)
    return response


def get_responses(db: Session, loop_question_id: str) -> list[Response]:
    """All responses to a loop question with the submitting user attached."""
    question_service.get_loop_question(db, loop_question_id)
    return (
        db.query(Response)
        .options(joinedload(Response.user))
        .filter(Response.loop_question_id == loop_question_id)
        .order_by(Response.created_at.asc())
        .all()
    )


def get_user_responses(db: Session, user_id: str) -> list[dict[str, Any]]:
    """Every response by a user across loops, newest first, with question and loop context."""
    rows = (
        db.query(Response, LoopQuestion, Question, Loop)
        .join(LoopQuestion, Response.loop_question_id == LoopQuestion.loop_question_id)
        .join(Question, LoopQuestion.question_id == Question.question_id)
        .join(Loop, LoopQuestion.loop_id == Loop.loop_id)
        .filter(Response.user_id == user_id)
        .order_by(Response.created_at.desc())
        .all()
    )
    return [
        {
            "response_id": response.response_id,
            "loop_question_id": response.loop_question_id,
            "text": response.text,
            "media_url": response.media_url,
            "created_at": response.created_at,
            "question_id": question.question_id,
            "question_text": question.text,
            "loop_id": loop.loop_id,
            "loop_name": loop.name,
            "month": assignment.month,
            "year": assignment.year,
        }
        for response, assignment, question, loop in rows
    ]
