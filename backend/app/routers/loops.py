"""Loop API routes — delegates to loop_service for validation and cascade delete."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db, utcnow
from app.dependencies import get_current_user
from app.errors import ValidationError
from app.models.user import User
from app.schemas.loop import LoopCreate, LoopOut, LoopUpdate, ScheduleOut
from app.services import loop_service, schedule_service

router = APIRouter()


@router.post("/", response_model=LoopOut, status_code=status.HTTP_201_CREATED)
def create_loop(payload: LoopCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Create a loop; the caller becomes its coordinator."""
    return loop_service.create_loop(
        db=db,
        actor=user,
        name=payload.name,
        description=payload.description,
        send_date=payload.send_date,
        grace_period=payload.grace_period,
        timezone=payload.timezone,
    )


@router.get("/", response_model=list[LoopOut])
def list_loops(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Loops the caller coordinates or is an active member of."""
    return loop_service.list_loops_for_user(db, user)


@router.get("/{loop_id}", response_model=LoopOut)
def get_loop(loop_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    loop = loop_service.get_loop(db, loop_id)
    loop_service.require_viewer(db, loop, user)
    return loop


@router.patch("/{loop_id}", response_model=LoopOut)
def update_loop(loop_id: str, payload: LoopUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Partial update (coordinator only)."""
    return loop_service.update_loop(db, user, loop_id, payload.model_dump(exclude_unset=True))


@router.delete("/{loop_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_loop(loop_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a loop with its members, assignments, responses and newsletters."""
    loop_service.delete_loop(db, user, loop_id)


@router.get("/{loop_id}/schedule", response_model=ScheduleOut)
def get_schedule(
    loop_id: str,
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Response window for a period (defaults to the loop's current period)."""
    loop = loop_service.get_loop(db, loop_id)
    loop_service.require_viewer(db, loop, user)
    if (month is None) != (year is None):
        raise ValidationError.single("period", "month and year must be given together")
    if month is None:
        month, year = schedule_service.current_period(loop, utcnow())
    opens_at, closes_at = schedule_service.period_window(loop, month, year)
    return ScheduleOut(
        loop_id=loop.loop_id,
        month=month,
        year=year,
        period_key=schedule_service.period_key(month, year),
        opens_at=opens_at,
        closes_at=closes_at,
    )
