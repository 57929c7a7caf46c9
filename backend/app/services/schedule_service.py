"""Period keys and response-window computation.

A period is a (month, year) pair with a 1-indexed month. Questions for a
period go out on the loop's ``send_date`` (local midnight in the loop's
timezone) and responses are accepted for ``grace_period`` days after that.

Nothing here runs on its own: ``due_newsletters`` is meant to be called by
an external periodic job.
"""
import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Any

import pytz
from sqlalchemy.orm import Session

from app.errors import ValidationError
from app.models.loop import Loop
from app.models.newsletter import Newsletter, NewsletterStatus
from app.validation import validate_period

logger = logging.getLogger(__name__)


def period_key(month: int, year: int) -> str:
    return f"{month}-{year}"


def parse_period_key(key: str) -> tuple[int, int]:
    """Parse ``"6-2024"`` into ``(6, 2024)``."""
    try:
        month_part, year_part = key.split("-")
        month, year = int(month_part), int(year_part)
    except (AttributeError, ValueError):
        raise ValidationError.single("period", f"Malformed period key: {key!r}")
    validate_period(month, year)
    return month, year


def period_label(month: int, year: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def shift_period(month: int, year: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index % 12 + 1, index // 12


def period_options(today: date) -> list[dict[str, Any]]:
    """Selectable periods: three months back through six months ahead."""
    options = []
    for delta in range(-3, 7):
        month, year = shift_period(today.month, today.year, delta)
        options.append({
            "key": period_key(month, year),
            "label": period_label(month, year),
            "month": month,
            "year": year,
        })
    return options


def period_window(loop: Loop, month: int, year: int) -> tuple[datetime, datetime]:
    """Return (opens_at, closes_at) in UTC for the loop's response window."""
    validate_period(month, year)
    tz = pytz.timezone(loop.timezone)
    opens_local = datetime(year, month, loop.send_date)
    try:
        closes_local = opens_local + timedelta(days=loop.grace_period)
        opens_at = tz.localize(opens_local).astimezone(pytz.utc)
        closes_at = tz.localize(closes_local).astimezone(pytz.utc)
    except OverflowError as exc:
        raise ValidationError.single(
            "year", f"Response window for {period_label(month, year)} ends past the supported date range"
        ) from exc
    return opens_at, closes_at


def current_period(loop: Loop, now: datetime) -> tuple[int, int]:
    local_now = now.astimezone(pytz.timezone(loop.timezone))
    return local_now.month, local_now.year


def due_newsletters(db: Session, now: datetime) -> list[tuple[Loop, int, int]]:
    """Loops whose response window has closed for the current or previous
    period and that have no sent newsletter for it yet."""
    if now.tzinfo is None:
        now = pytz.utc.localize(now)

    due = []
    for loop in db.query(Loop).order_by(Loop.created_at).all():
        month, year = current_period(loop, now)
        for candidate in (shift_period(month, year, -1), (month, year)):
            _, closes_at = period_window(loop, *candidate)
            if closes_at > now:
                continue
            sent = (
                db.query(Newsletter)
                .filter(
                    Newsletter.loop_id == loop.loop_id,
                    Newsletter.month == candidate[0],
                    Newsletter.year == candidate[1],
                    Newsletter.status == NewsletterStatus.sent,
                )
                .first()
            )
            if sent is None:
                due.append((loop, candidate[0], candidate[1]))
    logger.debug("%d newsletter period(s) due at %s", len(due), now.isoformat())
    return due
