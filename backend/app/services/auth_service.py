"""Registration, password sign-in and bearer sessions.

The rest of the application never looks up "the current user" on its own:
routers resolve the identity once from the bearer token and pass the
``User`` into every service call as the acting user.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from app.config import settings
from app.database import commit_or_raise, utcnow
from app.errors import AuthError, ConflictError
from app.models.user import AuthSession, User, UserRole
from app.validation import (
    check_email, check_enum, check_text, normalize_email, raise_if_errors,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def _verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def register(db: Session, email: str, name: str, password: str, role: str = "member") -> User:
    """Create a user account. Role is fixed for the life of the account."""
    email = normalize_email(email)
    errors: list = []
    check_email(errors, "email", email)
    check_text(errors, "name", name, max_length=100)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors.append({"field": "password", "message": f"password must be at least {MIN_PASSWORD_LENGTH} characters"})
    elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.append({"field": "password", "message": f"password must be at most {MAX_PASSWORD_BYTES} bytes"})
    check_enum(errors, "role", role, UserRole)
    raise_if_errors(errors)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("An account with this email already exists")

    user = User(
        email=email,
        name=name.strip(),
        role=UserRole(role),
        password_hash=_hash_password(password),
    )
    db.add(user)
    commit_or_raise(db, conflict_message="An account with this email already exists")
    db.refresh(user)
    logger.info("Registered user %s (%s) as %s", user.user_id, user.email, user.role.value)
    return user


def login(db: Session, email: str, password: str) -> AuthSession:
    """Exchange credentials for a new bearer session."""
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not _verify_password(password or "", user.password_hash):
        raise AuthError("Invalid email or password")

    session = AuthSession(
        token=secrets.token_urlsafe(32),
        user_id=user.user_id,
        expires_at=utcnow() + timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    db.add(session)
    commit_or_raise(db)
    db.refresh(session)
    logger.info("User %s signed in", user.user_id)
    return session


def logout(db: Session, token: str) -> None:
    """End a session. Unknown tokens are ignored."""
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if session is None:
        return
    user_id = session.user_id
    db.delete(session)
    commit_or_raise(db)
    logger.info("User %s signed out", user_id)


def get_current_identity(db: Session, token: Optional[str]) -> User:
    """Resolve a bearer token to its user, rejecting missing or expired sessions."""
    if not token:
        raise AuthError()
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if session is None:
        raise AuthError("Invalid session token")
    if _as_utc(session.expires_at) <= utcnow():
        db.delete(session)
        commit_or_raise(db)
        raise AuthError("Session expired")
    user = db.query(User).filter(User.user_id == session.user_id).first()
    if user is None:
        raise AuthError("Invalid session token")
    return user


def update_profile(db: Session, user: User, name: Optional[str] = None) -> User:
    if name is not None:
        errors: list = []
        check_text(errors, "name", name, max_length=100)
        raise_if_errors(errors)
        user.name = name.strip()
    commit_or_raise(db)
    db.refresh(user)
    logger.info("Updated profile of user %s", user.user_id)
    return user
