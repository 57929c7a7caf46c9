"""Loop lifecycle — create, update, cascade delete, and access checks.

Responsibilities:
- Range validation for send_date (1-28) and grace_period (1-14) before any write
- Coordinator-only mutation of a loop
- Cascade delete of every child row in one transaction
"""
import logging
from typing import Any, Callable, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import commit_or_raise
from app.errors import CascadeDeleteError, ForbiddenError, NotFoundError
from app.models.loop import Loop, LoopMember, MemberStatus
from app.models.newsletter import Newsletter
from app.models.question import LoopQuestion
from app.models.response import Response
from app.models.user import User, UserRole
from app.validation import (
    GRACE_PERIOD_RANGE, SEND_DATE_RANGE, check_range, check_text, check_timezone, raise_if_errors,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "send_date", "grace_period", "timezone")


def _validate_fields(fields: dict[str, Any]) -> None:
    errors: list = []
    if "name" in fields:
        check_text(errors, "name", fields["name"], min_length=2, max_length=150)
    if "send_date" in fields:
        check_range(errors, "send_date", fields["send_date"], SEND_DATE_RANGE)
    if "grace_period" in fields:
        check_range(errors, "grace_period", fields["grace_period"], GRACE_PERIOD_RANGE)
    if "timezone" in fields:
        check_timezone(errors, "timezone", fields["timezone"])
    raise_if_errors(errors)


def get_loop(db: Session, loop_id: str) -> Loop:
    loop = db.query(Loop).filter(Loop.loop_id == loop_id).first()
    if not loop:
        raise NotFoundError("Loop")
    return loop


def require_coordinator(loop: Loop, actor: User) -> None:
    """Only the loop's coordinator may change it or its children."""
    if loop.coordinator_id != actor.user_id:
        raise ForbiddenError("Only the loop coordinator may perform this action")


def get_coordinated_loop(db: Session, loop_id: str, actor: User) -> Loop:
    loop = get_loop(db, loop_id)
    require_coordinator(loop, actor)
    return loop


def is_active_member(db: Session, loop: Loop, user: User) -> bool:
    member = (
        db.query(LoopMember)
        .filter(
            LoopMember.loop_id == loop.loop_id,
            LoopMember.email == user.email,
            LoopMember.status == MemberStatus.active,
        )
        .first()
    )
    return member is not None


def can_view(db: Session, loop: Loop, user: User) -> bool:
    return loop.coordinator_id == user.user_id or is_active_member(db, loop, user)


def require_viewer(db: Session, loop: Loop, user: User) -> None:
    if not can_view(db, loop, user):
        raise ForbiddenError("You are not a member of this loop")


def create_loop(
    db: Session,
    actor: User,
    name: str,
    description: Optional[str] = None,
    send_date: int = 15,
    grace_period: int = 7,
    timezone: Optional[str] = None,
) -> Loop:
    """Create a loop owned by the acting coordinator."""
    if actor.role != UserRole.coordinator:
        raise ForbiddenError("Only coordinators can create loops")

    timezone = timezone or settings.DEFAULT_TIMEZONE
    _validate_fields({
        "name": name,
        "send_date": send_date,
        "grace_period": grace_period,
        "timezone": timezone,
    })

    loop = Loop(
        name=name.strip(),
        description=description,
        coordinator_id=actor.user_id,
        send_date=send_date,
        grace_period=grace_period,
        timezone=timezone,
    )
    db.add(loop)
    commit_or_raise(db)
    db.refresh(loop)
    logger.info("Created loop '%s' (%s) by coordinator %s", loop.name, loop.loop_id, actor.user_id)
    return loop


def update_loop(db: Session, actor: User, loop_id: str, updates: dict[str, Any]) -> Loop:
    """Partial update; changed numeric fields are re-validated."""
    loop = get_coordinated_loop(db, loop_id, actor)

    updates = {field: value for field, value in updates.items() if field in UPDATABLE_FIELDS}
    _validate_fields(updates)

    for field, value in updates.items():
        if field == "name":
            value = value.strip()
        setattr(loop, field, value)

    commit_or_raise(db)
    db.refresh(loop)
    logger.info("Updated loop %s (%s)", loop_id, ", ".join(sorted(updates)) or "no changes")
    return loop


def _delete_members(db: Session, loop_id: str) -> int:
    return db.query(LoopMember).filter(LoopMember.loop_id == loop_id).delete(synchronize_session=False)


def _delete_responses(db: Session, loop_id: str) -> int:
    assignment_ids = select(LoopQuestion.loop_question_id).where(LoopQuestion.loop_id == loop_id)
    return (
        db.query(Response)
        .filter(Response.loop_question_id.in_(assignment_ids))
        .delete(synchronize_session=False)
    )


def _delete_assignments(db: Session, loop_id: str) -> int:
    return db.query(LoopQuestion).filter(LoopQuestion.loop_id == loop_id).delete(synchronize_session=False)


def _delete_newsletters(db: Session, loop_id: str) -> int:
    return db.query(Newsletter).filter(Newsletter.loop_id == loop_id).delete(synchronize_session=False)


def _delete_loop_row(db: Session, loop_id: str) -> int:
    return db.query(Loop).filter(Loop.loop_id == loop_id).delete(synchronize_session=False)


# Responses reference assignments, so they go before them.
CASCADE_STEPS: list[tuple[str, Callable[[Session, str], int]]] = [
    ("members", _delete_members),
    ("responses", _delete_responses),
    ("question_assignments", _delete_assignments),
    ("newsletters", _delete_newsletters),
    ("loop", _delete_loop_row),
]


def delete_loop(db: Session, actor: User, loop_id: str) -> dict[str, int]:
    """Delete a loop and every row that references it, atomically.

    Returns the number of rows removed per step. If any step fails the
    transaction is rolled back and ``CascadeDeleteError`` names the step.
    """
    get_coordinated_loop(db, loop_id, actor)

    counts: dict[str, int] = {}
    step_name = "commit"
    try:
        for step_name, step in CASCADE_STEPS:
            counts[step_name] = step(db, loop_id)
        step_name = "commit"
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Cascade delete of loop %s failed at step '%s': %s", loop_id, step_name, exc)
        raise CascadeDeleteError(step_name) from exc

    db.expire_all()
    logger.info("Deleted loop %s with %s", loop_id, counts)
    return counts


def list_loops_for_user(db: Session, user: User) -> list[Loop]:
    """Loops the user coordinates plus loops with an active membership for their email."""
    member_loop_ids = select(LoopMember.loop_id).where(
        LoopMember.email == user.email,
        LoopMember.status == MemberStatus.active,
    )
    return (
        db.query(Loop)
        .filter(or_(Loop.coordinator_id == user.user_id, Loop.loop_id.in_(member_loop_ids)))
        .order_by(Loop.created_at.desc())
        .all()
    )
