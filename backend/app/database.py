"""SQLAlchemy engine, session factory and declarative base."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings
from app.errors import BackendError, ConflictError

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def commit_or_raise(db: Session, conflict_message: Optional[str] = None) -> None:
    """Commit the unit of work, rolling back and translating backend failures.

    A unique-constraint violation becomes ``ConflictError`` when the caller
    names the conflict; anything else surfaces as ``BackendError``.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from exc
        logger.error("Integrity error on commit: %s", exc.orig)
        raise BackendError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Commit failed: %s", exc)
        raise BackendError() from exc
