"""Pytest fixtures — SQLite database per test, foreign keys enforced."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.main import app
from app.services import auth_service

# Import all models so they register with Base.metadata
from app.models.user import User, AuthSession             # noqa: F401
from app.models.loop import Loop, LoopMember              # noqa: F401
from app.models.question import Question, LoopQuestion    # noqa: F401
from app.models.response import Response                  # noqa: F401
from app.models.newsletter import Newsletter              # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
DEFAULT_PASSWORD = "correct-horse-42"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: API-level users and loops
# ---------------------------------------------------------------------------
def register_user(client: TestClient, email: str = "coord@example.com", name: str = "Coordinator",
                  role: str = "coordinator", password: str = DEFAULT_PASSWORD) -> dict:
    """Helper — POST /api/auth/register and return response JSON."""
    resp = client.post("/api/auth/register", json={
        "email": email,
        "name": name,
        "password": password,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    """Helper — sign in and return an Authorization header."""
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def create_test_user(client: TestClient, email: str = "coord@example.com", name: str = "Coordinator",
                     role: str = "coordinator") -> tuple[dict, dict]:
    """Register and sign in; returns (user JSON, auth headers)."""
    user = register_user(client, email=email, name=name, role=role)
    return user, auth_headers(client, email)


def create_test_loop(client: TestClient, headers: dict, name: str = "Book Club",
                     send_date: int = 15, grace_period: int = 7, **extra) -> dict:
    """Helper — POST /api/loops and return response JSON."""
    resp = client.post("/api/loops/", headers=headers, json={
        "name": name,
        "description": "Monthly reading roundup",
        "send_date": send_date,
        "grace_period": grace_period,
        **extra,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Helpers: service-level users
# ---------------------------------------------------------------------------
def make_user(db, email: str, name: str = "User", role: str = "coordinator") -> User:
    return auth_service.register(db, email=email, name=name, password=DEFAULT_PASSWORD, role=role)
