"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the Newsletter Loops application:
users, auth_sessions, loops, loop_members, questions, loop_questions,
responses, newsletters.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("password_hash", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- auth_sessions ---
    op.create_table(
        "auth_sessions",
        sa.Column("token", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- loops ---
    op.create_table(
        "loops",
        sa.Column("loop_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("coordinator_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False, index=True),
        sa.Column("send_date", sa.Integer, nullable=False, server_default="15"),
        sa.Column("grace_period", sa.Integer, nullable=False, server_default="7"),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("send_date BETWEEN 1 AND 28", name="ck_loops_send_date"),
        sa.CheckConstraint("grace_period BETWEEN 1 AND 14", name="ck_loops_grace_period"),
    )

    # --- loop_members ---
    op.create_table(
        "loop_members",
        sa.Column("member_id", sa.String(36), primary_key=True),
        sa.Column("loop_id", sa.String(36), sa.ForeignKey("loops.loop_id"), nullable=False, index=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("loop_id", "email", name="uq_loop_members_loop_email"),
    )

    # --- questions ---
    op.create_table(
        "questions",
        sa.Column("question_id", sa.String(36), primary_key=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- loop_questions ---
    op.create_table(
        "loop_questions",
        sa.Column("loop_question_id", sa.String(36), primary_key=True),
        sa.Column("loop_id", sa.String(36), sa.ForeignKey("loops.loop_id"), nullable=False),
        sa.Column("question_id", sa.String(36), sa.ForeignKey("questions.question_id"), nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("loop_id", "question_id", "month", "year", name="uq_loop_questions_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_loop_questions_month"),
    )
    op.create_index("ix_loop_questions_loop_period", "loop_questions", ["loop_id", "year", "month"])

    # --- responses ---
    op.create_table(
        "responses",
        sa.Column("response_id", sa.String(36), primary_key=True),
        sa.Column("loop_question_id", sa.String(36), sa.ForeignKey("loop_questions.loop_question_id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False, index=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("media_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("loop_question_id", "user_id", name="uq_responses_question_user"),
    )

    # --- newsletters ---
    op.create_table(
        "newsletters",
        sa.Column("newsletter_id", sa.String(36), primary_key=True),
        sa.Column("loop_id", sa.String(36), sa.ForeignKey("loops.loop_id"), nullable=False, index=True),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="draft"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("loop_id", "month", "year", name="uq_newsletters_loop_period"),
        sa.CheckConstraint(
            "(status = 'sent' AND sent_at IS NOT NULL) OR (status = 'draft' AND sent_at IS NULL)",
            name="ck_newsletters_sent_at_matches_status",
        ),
    )


def downgrade() -> None:
    op.drop_table("newsletters")
    op.drop_table("responses")
    op.drop_index("ix_loop_questions_loop_period", table_name="loop_questions")
    op.drop_table("loop_questions")
    op.drop_table("questions")
    op.drop_table("loop_members")
    op.drop_table("loops")
    op.drop_table("auth_sessions")
    op.drop_table("users")
