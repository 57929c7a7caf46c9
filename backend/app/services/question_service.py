"""Question bank and per-period loop assignments.

A question may be assigned to a loop at most once per (month, year). The
database unique constraint is the authority; the pre-insert lookup only
exists to give a clear "already assigned" message.
"""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.database import commit_or_raise
from app.errors import BackendError, ConflictError, NotFoundError
from app.models.question import LoopQuestion, Question
from app.models.response import Response
from app.models.user import User
from app.services import loop_service
from app.validation import check_text, raise_if_errors, validate_period

logger = logging.getLogger(__name__)

ALREADY_ASSIGNED = "This question is already assigned for this month"


def create_question(
    db: Session,
    actor: User,
    text: str,
    is_default: bool = False,
    is_public: bool = False,
) -> Question:
    errors: list = []
    check_text(errors, "text", text)
    raise_if_errors(errors)

    question = Question(
        text=text.strip(),
        created_by=actor.user_id,
        is_default=is_default,
        is_public=is_public,
    )
    db.add(question)
    commit_or_raise(db)
    db.refresh(question)
    logger.info("Question %s created by %s (default=%s, public=%s)", question.question_id, actor.user_id, is_default, is_public)
    return question


def get_question(db: Session, question_id: str) -> Question:
    question = db.query(Question).filter(Question.question_id == question_id).first()
    if not question:
        raise NotFoundError("Question")
    return question


def list_questions(db: Session, actor: User) -> list[Question]:
    """The actor's own questions plus every public or default question."""
    return (
        db.query(Question)
        .filter(or_(Question.created_by == actor.user_id, Question.is_public.is_(True), Question.is_default.is_(True)))
        .order_by(Question.created_at.desc())
        .all()
    )


def _find_assignment(db: Session, loop_id: str, question_id: str, month: int, year: int) -> Optional[LoopQuestion]:
    return (
        db.query(LoopQuestion)
        .filter(
            LoopQuestion.loop_id == loop_id,
            LoopQuestion.question_id == question_id,
            LoopQuestion.month == month,
            LoopQuestion.year == year,
        )
        .first()
    )


def assign_question(db: Session, actor: User, loop_id: str, question_id: str, month: int, year: int) -> LoopQuestion:
    """Assign a question to a loop for one period; a repeat is rejected, never merged."""
    validate_period(month, year)
    loop_service.get_coordinated_loop(db, loop_id, actor)
    get_question(db, question_id)

    if _find_assignment(db, loop_id, question_id, month, year):
        raise ConflictError(ALREADY_ASSIGNED)

    assignment = LoopQuestion(loop_id=loop_id, question_id=question_id, month=month, year=year)
    db.add(assignment)
    commit_or_raise(db, conflict_message=ALREADY_ASSIGNED)
    db.refresh(assignment)
    logger.info("Assigned question %s to loop %s for %d-%d", question_id, loop_id, month, year)
    return assignment


def assign_default_questions(db: Session, actor: User, loop_id: str, month: int, year: int) -> list[LoopQuestion]:
    """Assign every default question not yet assigned for the period.

    The batch is committed as one transaction: either all new rows become
    visible or none do. Returns only the rows created by this call.
    """
    validate_period(month, year)
    loop_service.get_coordinated_loop(db, loop_id, actor)

    assigned_ids = {
        question_id
        for (question_id,) in db.query(LoopQuestion.question_id).filter(
            LoopQuestion.loop_id == loop_id,
            LoopQuestion.month == month,
            LoopQuestion.year == year,
        )
    }
    defaults = (
        db.query(Question)
        .filter(Question.is_default.is_(True))
        .order_by(Question.created_at.asc())
        .all()
    )
    pending = [q for q in defaults if q.question_id not in assigned_ids]
    if not pending:
        logger.info("All default questions already assigned to loop %s for %d-%d", loop_id, month, year)
        return []

    assignments = [
        LoopQuestion(loop_id=loop_id, question_id=q.question_id, month=month, year=year)
        for q in pending
    ]
    db.add_all(assignments)
    commit_or_raise(db, conflict_message="Default questions were assigned concurrently; reload and retry")
    for assignment in assignments:
        db.refresh(assignment)
    logger.info("Assigned %d default question(s) to loop %s for %d-%d", len(assignments), loop_id, month, year)
    return assignments


def list_loop_questions(
    db: Session,
    loop_id: str,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> list[LoopQuestion]:
    query = (
        db.query(LoopQuestion)
        .options(joinedload(LoopQuestion.question))
        .filter(LoopQuestion.loop_id == loop_id)
    )
    if month is not None:
        query = query.filter(LoopQuestion.month == month)
    if year is not None:
        query = query.filter(LoopQuestion.year == year)
    return query.order_by(LoopQuestion.created_at.desc()).all()


def get_loop_question(db: Session, loop_question_id: str) -> LoopQuestion:
    assignment = (
        db.query(LoopQuestion)
        .filter(LoopQuestion.loop_question_id == loop_question_id)
        .first()
    )
    if not assignment:
        raise NotFoundError("Loop question")
    return assignment


def remove_question_assignment(db: Session, actor: User, loop_question_id: str) -> int:
    """Remove an assignment together with the responses submitted against it.

    Returns the number of responses removed.
    """
    assignment = get_loop_question(db, loop_question_id)
    loop_service.get_coordinated_loop(db, assignment.loop_id, actor)

    try:
        removed = (
            db.query(Response)
            .filter(Response.loop_question_id == loop_question_id)
            .delete(synchronize_session=False)
        )
        db.delete(assignment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to remove loop question %s: %s", loop_question_id, exc)
        raise BackendError() from exc

    logger.info("Removed loop question %s and %d response(s)", loop_question_id, removed)
    return removed
