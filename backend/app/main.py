"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import Base, engine

# Import routers
from app.routers import auth, users, loops, members, questions, responses, newsletters

# Import all models so Base.metadata knows about them
from app.models.user import User, AuthSession        # noqa: F401
from app.models.loop import Loop, LoopMember         # noqa: F401
from app.models.question import Question, LoopQuestion  # noqa: F401
from app.models.response import Response             # noqa: F401
from app.models.newsletter import Newsletter         # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Newsletter Loops",
    description="Collaborative newsletters: coordinators assign monthly questions to a loop, members answer, answers are compiled into a newsletter",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(loops.router, prefix="/api/loops", tags=["Loops"])
app.include_router(members.router, prefix="/api", tags=["Members"])
app.include_router(questions.router, prefix="/api", tags=["Questions"])
app.include_router(responses.router, prefix="/api", tags=["Responses"])
app.include_router(newsletters.router, prefix="/api", tags=["Newsletters"])


@app.exception_handler(SQLAlchemyError)
def handle_backend_error(request: Request, exc: SQLAlchemyError):
    """Reads that fail outside a service commit still surface as 503."""
    logger.error("Backend error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Database operation failed"})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
