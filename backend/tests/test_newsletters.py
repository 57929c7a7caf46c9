"""Tests for the newsletter state machine and the coordinator dashboard."""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from app.errors import ConflictError
from app.models.newsletter import Newsletter, NewsletterStatus
from app.services import (
    dashboard_service, loop_service, member_service, newsletter_service, question_service, response_service,
)
from tests.conftest import create_test_loop, create_test_user, make_user


def _create(client, headers, loop_id, month=6, year=2024, **extra):
    return client.post(f"/api/loops/{loop_id}/newsletters", headers=headers, json={"month": month, "year": year, **extra})


def _assert_sent_at_matches_status(db):
    for newsletter in db.query(Newsletter).all():
        assert (newsletter.status == NewsletterStatus.sent) == (newsletter.sent_at is not None)


class TestNewsletterLifecycle:
    """draft → sent, once."""

    def test_create_draft(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers, name="Book Club")
        resp = _create(client, headers, loop["loop_id"])
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "draft"
        assert data["sent_at"] is None
        assert data["title"] == "Book Club: June 2024"

    def test_custom_title(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers)
        assert _create(client, headers, loop["loop_id"], title="Summer reads").json()["title"] == "Summer reads"

    def test_duplicate_period_conflict(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers)
        _create(client, headers, loop["loop_id"])
        assert _create(client, headers, loop["loop_id"]).status_code == 409
        assert _create(client, headers, loop["loop_id"], month=7).status_code == 201
        assert len(client.get(f"/api/loops/{loop['loop_id']}/newsletters", headers=headers).json()) == 2

    def test_send_sets_sent_at(self, client, db):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers)
        newsletter = _create(client, headers, loop["loop_id"]).json()

        resp = client.post(f"/api/newsletters/{newsletter['newsletter_id']}/send", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "sent"
        assert resp.json()["sent_at"] is not None
        _assert_sent_at_matches_status(db)

    def test_send_twice_conflict(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers)
        newsletter = _create(client, headers, loop["loop_id"]).json()
        client.post(f"/api/newsletters/{newsletter['newsletter_id']}/send", headers=headers)

        resp = client.post(f"/api/newsletters/{newsletter['newsletter_id']}/send", headers=headers)
        assert resp.status_code == 409
        fetched = client.get(f"/api/newsletters/{newsletter['newsletter_id']}", headers=headers).json()
        assert fetched["status"] == "sent"

    def test_only_coordinator_sends(self, client):
        _, owner = create_test_user(client)
        _, other = create_test_user(client, email="other@example.com")
        loop = create_test_loop(client, owner)
        newsletter = _create(client, owner, loop["loop_id"]).json()
        assert client.post(f"/api/newsletters/{newsletter['newsletter_id']}/send", headers=other).status_code == 403

    def test_unknown_newsletter(self, client):
        _, headers = create_test_user(client)
        resp = client.post("/api/newsletters/00000000-0000-0000-0000-000000000000/send", headers=headers)
        assert resp.status_code == 404

    def test_check_constraint_rejects_inconsistent_rows(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop = loop_service.create_loop(db, coordinator, "Book Club")
        db.add(Newsletter(loop_id=loop.loop_id, month=6, year=2024, title="Bad", status=NewsletterStatus.sent, sent_at=None))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

        db.add(Newsletter(
            loop_id=loop.loop_id, month=6, year=2024, title="Bad",
            status=NewsletterStatus.draft, sent_at=datetime(2024, 6, 30, tzinfo=timezone.utc),
        ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
        assert db.query(Newsletter).count() == 0


class TestCompile:
    """Compiling responses into newsletter content."""

    def _setup(self, db):
        coordinator = make_user(db, "coord@example.com", name="Cora")
        ann = make_user(db, "ann@example.com", name="Ann", role="member")
        loop = loop_service.create_loop(db, coordinator, "Book Club")
        member_service.add_member(db, coordinator, loop.loop_id, "ann@example.com", "Ann")
        read = question_service.create_question(db, coordinator, "What did you read?")
        next_q = question_service.create_question(db, coordinator, "What is next?")
        lq_read = question_service.assign_question(db, coordinator, loop.loop_id, read.question_id, 6, 2024)
        question_service.assign_question(db, coordinator, loop.loop_id, next_q.question_id, 6, 2024)
        response_service.submit_response(db, ann, lq_read.loop_question_id, "Dune", media_url="https://x.example/dune.jpg")
        newsletter = newsletter_service.create_newsletter(db, coordinator, loop.loop_id, 6, 2024)
        return coordinator, newsletter

    def test_compile_renders_questions_and_responses(self, db):
        coordinator, newsletter = self._setup(db)
        compiled = newsletter_service.compile_newsletter(db, coordinator, newsletter.newsletter_id)

        assert compiled.status == NewsletterStatus.draft
        assert compiled.content == (
            "Book Club: June 2024\n"
            "\n"
            "What did you read?\n"
            "  Ann: Dune [https://x.example/dune.jpg]\n"
            "\n"
            "What is next?\n"
            "  (no responses)\n"
        )

    def test_compile_after_send_conflict(self, db):
        coordinator, newsletter = self._setup(db)
        newsletter_service.send_newsletter(db, coordinator, newsletter.newsletter_id)
        with pytest.raises(ConflictError):
            newsletter_service.compile_newsletter(db, coordinator, newsletter.newsletter_id)
        _assert_sent_at_matches_status(db)

    def test_compile_via_api(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers, name="Empty Loop")
        newsletter = _create(client, headers, loop["loop_id"]).json()
        resp = client.post(f"/api/newsletters/{newsletter['newsletter_id']}/compile", headers=headers)
        assert resp.status_code == 200
        assert "No questions were assigned for this period." in resp.json()["content"]


class TestDashboard:
    """Coordinator overview."""

    def test_dashboard_summary(self, db):
        coordinator = make_user(db, "coord@example.com")
        loop = loop_service.create_loop(db, coordinator, "Book Club")
        other_loop = loop_service.create_loop(db, coordinator, "Poetry Circle")
        question = question_service.create_question(db, coordinator, "What did you read?")
        question_service.assign_question(db, coordinator, loop.loop_id, question.question_id, 6, 2024)
        question_service.assign_question(db, coordinator, other_loop.loop_id, question.question_id, 6, 2024)
        question_service.assign_question(db, coordinator, loop.loop_id, question.question_id, 7, 2024)
        for month in range(1, 8):
            newsletter_service.create_newsletter(db, coordinator, loop.loop_id, month, 2024)

        summary = dashboard_service.dashboard(db, coordinator, now=datetime(2024, 6, 20, tzinfo=timezone.utc))

        assert [loop.name for loop in summary["loops"]] == ["Poetry Circle", "Book Club"]
        assert [n.month for n in summary["recent_newsletters"]] == [7, 6, 5, 4, 3]
        assert summary["assignments_this_month"] == 2

    def test_dashboard_empty_for_member(self, client):
        _, headers = create_test_user(client, email="m@example.com", role="member")
        resp = client.get("/api/dashboard", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"loops": [], "recent_newsletters": [], "assignments_this_month": 0}

    def test_dashboard_endpoint(self, client):
        _, headers = create_test_user(client)
        loop = create_test_loop(client, headers)
        _create(client, headers, loop["loop_id"])
        data = client.get("/api/dashboard", headers=headers).json()
        assert [item["loop_id"] for item in data["loops"]] == [loop["loop_id"]]
        assert len(data["recent_newsletters"]) == 1
