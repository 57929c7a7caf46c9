"""Loop membership API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.loop import MemberAdd, MemberOut, MemberStatusUpdate
from app.services import loop_service, member_service

router = APIRouter()


@router.post("/loops/{loop_id}/members", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_member(loop_id: str, payload: MemberAdd, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Add an email to a loop. Duplicate emails → 409."""
    return member_service.add_member(db, user, loop_id, email=payload.email, name=payload.name, status=payload.status)


@router.get("/loops/{loop_id}/members", response_model=list[MemberOut])
def list_members(loop_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    loop = loop_service.get_loop(db, loop_id)
    loop_service.require_viewer(db, loop, user)
    return member_service.list_members(db, loop_id)


@router.patch("/members/{member_id}", response_model=MemberOut)
def update_member(member_id: str, payload: MemberStatusUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return member_service.update_member_status(db, user, member_id, payload.status)


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(member_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    member_service.remove_member(db, user, member_id)
