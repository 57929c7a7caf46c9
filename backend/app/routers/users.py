"""User API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.errors import NotFoundError
from app.models.user import User
from app.schemas.user import UserOut, UserUpdate
from app.services import auth_service

router = APIRouter()


@router.patch("/me", response_model=UserOut)
def update_me(payload: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Update the caller's display name. Email and role cannot change."""
    return auth_service.update_profile(db, user, **payload.model_dump(exclude_unset=True))


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User")
    return user
