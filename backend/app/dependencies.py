"""Request-scoped dependencies: database session and acting user."""
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AuthError
from app.models.user import User
from app.services import auth_service

security = HTTPBearer(auto_error=False)


def get_token(credentials: Optional[HTTPAuthorizationCredentials] = Security(security)) -> str:
    if credentials is None:
        raise AuthError()
    return credentials.credentials


def get_current_user(token: str = Depends(get_token), db: Session = Depends(get_db)) -> User:
    """Resolve the bearer token to the acting user or fail with 401."""
    return auth_service.get_current_identity(db, token)
