"""Tests for response-window computation and due-newsletter detection."""
from datetime import datetime, timezone

import pytest

from app.errors import ValidationError
from app.models.loop import Loop
from app.services import loop_service, newsletter_service, schedule_service
from tests.conftest import make_user


class TestPeriodWindow:
    """Window opens on send_date and closes grace_period days later, local time."""

    def test_utc_loop(self):
        loop = Loop(send_date=15, grace_period=7, timezone="UTC")
        opens_at, closes_at = schedule_service.period_window(loop, 6, 2024)
        assert opens_at == datetime(2024, 6, 15, tzinfo=timezone.utc)
        assert closes_at == datetime(2024, 6, 22, tzinfo=timezone.utc)

    def test_local_timezone(self):
        loop = Loop(send_date=15, grace_period=7, timezone="America/New_York")
        opens_at, closes_at = schedule_service.period_window(loop, 6, 2024)
        assert opens_at == datetime(2024, 6, 15, 4, tzinfo=timezone.utc)
        assert closes_at == datetime(2024, 6, 22, 4, tzinfo=timezone.utc)

    def test_window_across_dst_change(self):
        loop = Loop(send_date=1, grace_period=7, timezone="America/New_York")
        opens_at, closes_at = schedule_service.period_window(loop, 11, 2024)
        assert opens_at == datetime(2024, 11, 1, 4, tzinfo=timezone.utc)
        assert closes_at == datetime(2024, 11, 8, 5, tzinfo=timezone.utc)

    def test_window_spills_into_next_month(self):
        loop = Loop(send_date=28, grace_period=14, timezone="UTC")
        _, closes_at = schedule_service.period_window(loop, 2, 2024)
        assert closes_at == datetime(2024, 3, 13, tzinfo=timezone.utc)

    def test_window_ending_after_year_9999_rejected(self):
        loop = Loop(send_date=28, grace_period=14, timezone="UTC")
        with pytest.raises(ValidationError) as exc_info:
            schedule_service.period_window(loop, 12, 9999)
        assert exc_info.value.errors[0]["field"] == "year"

    def test_window_west_of_utc_in_last_month(self):
        loop = Loop(send_date=28, grace_period=3, timezone="America/Los_Angeles")
        _, closes_at = schedule_service.period_window(loop, 12, 9999)
        assert closes_at == datetime(9999, 12, 31, 8, tzinfo=timezone.utc)

    def test_shift_period_wraps_years(self):
        assert schedule_service.shift_period(1, 2024, -1) == (12, 2023)
        assert schedule_service.shift_period(12, 2024, 1) == (1, 2025)
        assert schedule_service.shift_period(6, 2024, 0) == (6, 2024)


class TestDueNewsletters:
    """Periods whose window closed without a sent newsletter."""

    def test_due_periods(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop = loop_service.create_loop(db, coordinator, "Book Club", send_date=15, grace_period=7)

        due = schedule_service.due_newsletters(db, datetime(2024, 6, 25, tzinfo=timezone.utc))
        assert [(l.loop_id, m, y) for l, m, y in due] == [(loop.loop_id, 5, 2024), (loop.loop_id, 6, 2024)]

    def test_window_still_open(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop_service.create_loop(db, coordinator, "Book Club", send_date=15, grace_period=7)

        due = schedule_service.due_newsletters(db, datetime(2024, 6, 20, tzinfo=timezone.utc))
        assert [(m, y) for _, m, y in due] == [(5, 2024)]

    def test_sent_newsletter_not_due(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop = loop_service.create_loop(db, coordinator, "Book Club", send_date=15, grace_period=7)
        may = newsletter_service.create_newsletter(db, coordinator, loop.loop_id, 5, 2024)
        newsletter_service.send_newsletter(db, coordinator, may.newsletter_id)
        newsletter_service.create_newsletter(db, coordinator, loop.loop_id, 6, 2024)  # draft only

        due = schedule_service.due_newsletters(db, datetime(2024, 6, 25, tzinfo=timezone.utc))
        assert [(m, y) for _, m, y in due] == [(6, 2024)]

    def test_naive_now_treated_as_utc(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop_service.create_loop(db, coordinator, "Book Club", send_date=15, grace_period=7)
        assert len(schedule_service.due_newsletters(db, datetime(2024, 6, 25))) == 2
