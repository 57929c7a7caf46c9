"""Coordinator dashboard summary."""
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.loop import Loop
from app.models.newsletter import Newsletter
from app.models.question import LoopQuestion
from app.models.user import User

RECENT_NEWSLETTERS = 5


def dashboard(db: Session, actor: User, now: Optional[datetime] = None) -> dict[str, Any]:
    now = now or utcnow()
    loops = (
        db.query(Loop)
        .filter(Loop.coordinator_id == actor.user_id)
        .order_by(Loop.created_at.desc())
        .all()
    )
    loop_ids = [loop.loop_id for loop in loops]
    if not loop_ids:
        return {"loops": [], "recent_newsletters": [], "assignments_this_month": 0}

    recent = (
        db.query(Newsletter)
        .filter(Newsletter.loop_id.in_(loop_ids))
        .order_by(Newsletter.created_at.desc())
        .limit(RECENT_NEWSLETTERS)
        .all()
    )
    assignments = (
        db.query(LoopQuestion)
        .filter(
            LoopQuestion.loop_id.in_(loop_ids),
            LoopQuestion.month == now.month,
            LoopQuestion.year == now.year,
        )
        .count()
    )
    return {"loops": loops, "recent_newsletters": recent, "assignments_this_month": assignments}
