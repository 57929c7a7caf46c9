"""Newsletter and dashboard API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.newsletter import DashboardOut, NewsletterCreate, NewsletterOut
from app.services import dashboard_service, loop_service, newsletter_service

router = APIRouter()


@router.post("/loops/{loop_id}/newsletters", response_model=NewsletterOut, status_code=status.HTTP_201_CREATED)
def create_newsletter(loop_id: str, payload: NewsletterCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Open the draft newsletter for a period. One per period → 409 on repeat."""
    return newsletter_service.create_newsletter(db, user, loop_id, month=payload.month, year=payload.year, title=payload.title)


@router.get("/loops/{loop_id}/newsletters", response_model=list[NewsletterOut])
def list_newsletters(loop_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    loop_service.require_viewer(db, loop_service.get_loop(db, loop_id), user)
    return newsletter_service.list_newsletters(db, loop_id)


@router.get("/newsletters/{newsletter_id}", response_model=NewsletterOut)
def get_newsletter(newsletter_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    newsletter = newsletter_service.get_newsletter(db, newsletter_id)
    loop_service.require_viewer(db, loop_service.get_loop(db, newsletter.loop_id), user)
    return newsletter


@router.post("/newsletters/{newsletter_id}/compile", response_model=NewsletterOut)
def compile_newsletter(newsletter_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return newsletter_service.compile_newsletter(db, user, newsletter_id)


@router.post("/newsletters/{newsletter_id}/send", response_model=NewsletterOut)
def send_newsletter(newsletter_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """draft → sent; sending twice → 409."""
    return newsletter_service.send_newsletter(db, user, newsletter_id)


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Coordinator overview: loops, recent newsletters, this month's assignments."""
    return dashboard_service.dashboard(db, user)
