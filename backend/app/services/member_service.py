"""Loop membership — members are tracked by email, unique per loop."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.errors import ConflictError, NotFoundError
from app.models.loop import LoopMember, MemberStatus
from app.models.user import User
from app.services import loop_service
from app.validation import check_email, check_enum, normalize_email, raise_if_errors

logger = logging.getLogger(__name__)

DUPLICATE_MEMBER = "This email is already a member of this loop"


def _get_member(db: Session, member_id: str) -> LoopMember:
    member = db.query(LoopMember).filter(LoopMember.member_id == member_id).first()
    if not member:
        raise NotFoundError("Member")
    return member


def add_member(
    db: Session,
    actor: User,
    loop_id: str,
    email: str,
    name: Optional[str] = None,
    status: str = "active",
) -> LoopMember:
    """Add an email address to a loop. A second add of the same email is a conflict."""
    loop_service.get_coordinated_loop(db, loop_id, actor)

    email = normalize_email(email)
    errors: list = []
    check_email(errors, "email", email)
    check_enum(errors, "status", status, MemberStatus)
    raise_if_errors(errors)

    existing = (
        db.query(LoopMember)
        .filter(LoopMember.loop_id == loop_id, LoopMember.email == email)
        .first()
    )
    if existing:
        raise ConflictError(DUPLICATE_MEMBER)

    member = LoopMember(
        loop_id=loop_id,
        email=email,
        name=name.strip() if name else None,
        status=MemberStatus(status),
    )
    db.add(member)
    # The unique constraint catches a concurrent add that slipped past the check above
    commit_or_raise(db, conflict_message=DUPLICATE_MEMBER)
    db.refresh(member)
    logger.info("Added %s to loop %s as %s", email, loop_id, status)
    return member


def list_members(db: Session, loop_id: str) -> list[LoopMember]:
    return (
        db.query(LoopMember)
        .filter(LoopMember.loop_id == loop_id)
        .order_by(LoopMember.created_at.asc())
        .all()
    )


def update_member_status(db: Session, actor: User, member_id: str, status: str) -> LoopMember:
    member = _get_member(db, member_id)
    loop_service.get_coordinated_loop(db, member.loop_id, actor)

    errors: list = []
    check_enum(errors, "status", status, MemberStatus)
    raise_if_errors(errors)

    member.status = MemberStatus(status)
    commit_or_raise(db)
    db.refresh(member)
    logger.info("Member %s of loop %s is now %s", member_id, member.loop_id, status)
    return member


def remove_member(db: Session, actor: User, member_id: str) -> None:
    member = _get_member(db, member_id)
    loop_service.get_coordinated_loop(db, member.loop_id, actor)
    email, loop_id = member.email, member.loop_id
    db.delete(member)
    commit_or_raise(db)
    logger.info("Removed member %s (%s) from loop %s", member_id, email, loop_id)
