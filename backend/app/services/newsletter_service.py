"""Newsletter state machine — draft -> sent, with sent_at set in the same write.

One newsletter per loop per (month, year). Content is compiled from the
period's responses while the newsletter is still a draft.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise, utcnow
from app.errors import ConflictError, NotFoundError
from app.models.newsletter import Newsletter, NewsletterStatus
from app.models.user import User
from app.services import loop_service, question_service, response_service
from app.services.schedule_service import period_label
from app.validation import validate_period

logger = logging.getLogger(__name__)

DUPLICATE_PERIOD = "A newsletter already exists for this loop and period"


def get_newsletter(db: Session, newsletter_id: str) -> Newsletter:
    newsletter = db.query(Newsletter).filter(Newsletter.newsletter_id == newsletter_id).first()
    if not newsletter:
        raise NotFoundError("Newsletter")
    return newsletter


def create_newsletter(
    db: Session,
    actor: User,
    loop_id: str,
    month: int,
    year: int,
    title: Optional[str] = None,
) -> Newsletter:
    """Open the draft newsletter for a period."""
    validate_period(month, year)
    loop = loop_service.get_coordinated_loop(db, loop_id, actor)

    existing = (
        db.query(Newsletter)
        .filter(Newsletter.loop_id == loop_id, Newsletter.month == month, Newsletter.year == year)
        .first()
    )
    if existing:
        raise ConflictError(DUPLICATE_PERIOD)

    newsletter = Newsletter(
        loop_id=loop_id,
        month=month,
        year=year,
        title=(title or "").strip() or f"{loop.name}: {period_label(month, year)}",
        status=NewsletterStatus.draft,
        sent_at=None,
    )
    db.add(newsletter)
    commit_or_raise(db, conflict_message=DUPLICATE_PERIOD)
    db.refresh(newsletter)
    logger.info("Created draft newsletter %s for loop %s (%d-%d)", newsletter.newsletter_id, loop_id, month, year)
    return newsletter


def render_content(db: Session, newsletter: Newsletter) -> str:
    assignments = question_service.list_loop_questions(db, newsletter.loop_id, newsletter.month, newsletter.year)
    lines = [newsletter.title, ""]
    if not assignments:
        lines.append("No questions were assigned for this period.")
    for assignment in reversed(assignments):
        lines.append(assignment.question.text)
        responses = response_service.get_responses(db, assignment.loop_question_id)
        if not responses:
            lines.append("  (no responses)")
        for response in responses:
            line = f"  {response.user.name}: {response.text}"
            if response.media_url:
                line += f" [{response.media_url}]"
            lines.append(line)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def compile_newsletter(db: Session, actor: User, newsletter_id: str) -> Newsletter:
    """Render the period's questions and responses into the draft's content."""
    newsletter = get_newsletter(db, newsletter_id)
    loop_service.get_coordinated_loop(db, newsletter.loop_id, actor)
    if newsletter.status != NewsletterStatus.draft:
        raise ConflictError("Only draft newsletters can be compiled")

    newsletter.content = render_content(db, newsletter)
    commit_or_raise(db)
    db.refresh(newsletter)
    logger.info("Compiled newsletter %s (%d chars)", newsletter_id, len(newsletter.content))
    return newsletter


def send_newsletter(db: Session, actor: User, newsletter_id: str) -> Newsletter:
    """Mark a draft as sent.

    status and sent_at change in one conditional UPDATE, so a concurrent
    second send matches no row and gets a conflict.
    """
    newsletter = get_newsletter(db, newsletter_id)
    loop_service.get_coordinated_loop(db, newsletter.loop_id, actor)

    now = utcnow()
    updated = (
        db.query(Newsletter)
        .filter(Newsletter.newsletter_id == newsletter_id, Newsletter.status == NewsletterStatus.draft)
        .update(
            {Newsletter.status: NewsletterStatus.sent, Newsletter.sent_at: now, Newsletter.updated_at: now},
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise ConflictError("Newsletter has already been sent")
    commit_or_raise(db)
    db.refresh(newsletter)
    logger.info("Sent newsletter %s for loop %s", newsletter_id, newsletter.loop_id)
    return newsletter


def list_newsletters(db: Session, loop_id: str) -> list[Newsletter]:
    return (
        db.query(Newsletter)
        .filter(Newsletter.loop_id == loop_id)
        .order_by(Newsletter.created_at.desc())
        .all()
    )
