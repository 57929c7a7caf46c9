"""Auth API routes — register, sign in, sign out, current identity."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_token
from app.models.user import User
from app.schemas.user import LoginRequest, RegisterRequest, TokenOut, UserOut
from app.services import auth_service

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with a fixed coordinator/member role."""
    return auth_service.register(
        db=db,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=payload.role,
    )


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    session = auth_service.login(db=db, email=payload.email, password=payload.password)
    user = auth_service.get_current_identity(db, session.token)
    return TokenOut(access_token=session.token, expires_at=session.expires_at, user=UserOut.model_validate(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(token: str = Depends(get_token), db: Session = Depends(get_db)):
    auth_service.logout(db, token)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
