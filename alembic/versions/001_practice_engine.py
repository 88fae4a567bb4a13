"""Practice engine: profiles, XP ledger, topic progress, daily sets,
practice sessions, attempts, exercise bank.

Revision ID: 001_practice_engine
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_practice_engine"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("total_xp", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("current_level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("current_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_practice_date", sa.String(10), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("problems_per_day", sa.Integer, nullable=True),
        sa.Column("preferred_locale", sa.String(8), nullable=False, server_default="en"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # --- XP Ledger ---
    op.create_table(
        "xp_ledger",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("source", sa.String(32), nullable=False),
        sa.Column("source_id", sa.String(128), nullable=True),
        sa.Column("description", sa.String(256), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("idempotency_key", sa.String(256), nullable=True, unique=True),
    )
    op.create_index("ix_xp_ledger_user_id", "xp_ledger", ["user_id"])

    # --- Topic Progress ---
    op.create_table(
        "topic_progress",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("topic_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="not_started"),
        sa.Column("mastery", sa.Integer, nullable=False, server_default="0"),
        sa.Column("correct_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_practiced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("days_practiced", sa.Text, nullable=False, server_default="[]"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "topic_id", name="uq_topic_progress_user_topic"),
    )
    op.create_index("ix_topic_progress_user_id", "topic_progress", ["user_id"])

    # --- Daily Sets ---
    op.create_table(
        "daily_sets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("problems", sa.Text, nullable=False, server_default="[]"),
        sa.Column("current_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_problems", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("xp_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("focus_topic_id", sa.String(64), nullable=False),
        sa.Column("focus_topic_name", sa.String(200), nullable=False),
        sa.Column("generated_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("bank_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("placeholder_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("bonus_awarded", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_set_user_date"),
    )
    op.create_index("ix_daily_sets_user_id", "daily_sets", ["user_id"])

    # --- Practice Sessions ---
    op.create_table(
        "practice_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("topic_id", sa.String(64), nullable=False),
        sa.Column("topic_name", sa.String(200), nullable=False),
        sa.Column("topic_name_he", sa.String(200), nullable=False, server_default=""),
        sa.Column("problems", sa.Text, nullable=False, server_default="[]"),
        sa.Column("current_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_problems", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("xp_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("bonus_awarded", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_practice_sessions_user_id", "practice_sessions", ["user_id"])

    # --- Problem Attempts ---
    op.create_table(
        "problem_attempts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("set_id", sa.String(36), nullable=False),
        sa.Column("set_kind", sa.String(16), nullable=False, server_default="daily"),
        sa.Column("problem_id", sa.String(64), nullable=False),
        sa.Column("topic_id", sa.String(64), nullable=False),
        sa.Column("answer_type", sa.String(16), nullable=False),
        sa.Column("answer_text", sa.Text, nullable=True),
        sa.Column("answer_image_url", sa.Text, nullable=True),
        sa.Column("is_correct", sa.Boolean, nullable=True),
        sa.Column("ai_feedback", sa.Text, nullable=True),
        sa.Column("xp_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "set_id", "problem_id", name="uq_problem_attempt"),
    )
    op.create_index("ix_problem_attempts_user_id", "problem_attempts", ["user_id"])
    op.create_index("ix_problem_attempts_set_id", "problem_attempts", ["set_id"])
    op.create_index(
        "idx_problem_attempts_user_topic",
        "problem_attempts",
        ["user_id", "topic_id", sa.text("submitted_at DESC")],
    )

    # --- Exercise Bank ---
    op.create_table(
        "exercises",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("topic_id", sa.String(64), nullable=False),
        sa.Column("difficulty", sa.String(8), nullable=False),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("question_he", sa.Text, nullable=True),
        sa.Column("answer", sa.Text, nullable=False, server_default=""),
        sa.Column("answer_type", sa.String(16), nullable=False, server_default="expression"),
        sa.Column("solution_steps", sa.Text, nullable=False, server_default="[]"),
        sa.Column("solution_steps_he", sa.Text, nullable=False, server_default="[]"),
        sa.Column("tip", sa.Text, nullable=True),
        sa.Column("tip_he", sa.Text, nullable=True),
        sa.Column("estimated_minutes", sa.Integer, nullable=False, server_default="5"),
        sa.Column("xp_reward", sa.Integer, nullable=False, server_default="0"),
        sa.Column("times_used", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_exercises_topic_id", "exercises", ["topic_id"])
    op.create_index("idx_exercises_lookup", "exercises", ["topic_id", "difficulty", "times_used"])


def downgrade() -> None:
    op.drop_table("exercises")
    op.drop_table("problem_attempts")
    op.drop_table("practice_sessions")
    op.drop_table("daily_sets")
    op.drop_table("topic_progress")
    op.drop_table("xp_ledger")
    op.drop_table("user_profiles")
