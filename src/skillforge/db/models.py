"""ORM models for the practice engine.

List-valued columns (days practiced, embedded problems, solution steps) are
stored as serialized JSON text. The repositories in ``skillforge.practice``
and ``skillforge.progress`` own the conversion to typed entities; nothing
else should read these columns directly.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from skillforge.db.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns
_BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class UserProfile(Base):
    """Gamification slice of a user profile. One row per user."""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    total_xp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_practice_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    problems_per_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    preferred_locale: Mapped[str] = mapped_column(String(8), nullable=False, default="en", server_default="en")
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class XPLedger(Base):
    """Immutable XP transaction log with idempotency key."""

    __tablename__ = "xp_ledger"

    id: Mapped[int] = mapped_column(_BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(256), unique=True, nullable=True)


# ---------------------------------------------------------------------------
# Skill progress
# ---------------------------------------------------------------------------


class TopicProgressRecord(Base):
    """Per-(user, topic) attempt counters and derived mastery."""

    __tablename__ = "topic_progress"
    __table_args__ = (UniqueConstraint("user_id", "topic_id", name="uq_topic_progress_user_topic"),)

    id: Mapped[int] = mapped_column(_BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    topic_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="not_started")
    mastery: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    correct_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_practiced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    days_practiced: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Practice
# ---------------------------------------------------------------------------


class DailySetRecord(Base):
    """One generated problem set per user per local calendar day."""

    __tablename__ = "daily_sets"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_set_user_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    problems: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    current_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_problems: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    focus_topic_id: Mapped[str] = mapped_column(String(64), nullable=False)
    focus_topic_name: Mapped[str] = mapped_column(String(200), nullable=False)
    generated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bank_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    placeholder_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_awarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PracticeSessionRecord(Base):
    """On-demand single-topic practice session."""

    __tablename__ = "practice_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    topic_id: Mapped[str] = mapped_column(String(64), nullable=False)
    topic_name: Mapped[str] = mapped_column(String(200), nullable=False)
    topic_name_he: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    problems: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    current_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_problems: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_awarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ProblemAttemptRecord(Base):
    """A single answer to an embedded problem. UNIQUE(user, set, problem)."""

    __tablename__ = "problem_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "set_id", "problem_id", name="uq_problem_attempt"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    set_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    set_kind: Mapped[str] = mapped_column(String(16), nullable=False, default="daily")
    problem_id: Mapped[str] = mapped_column(String(64), nullable=False)
    topic_id: Mapped[str] = mapped_column(String(64), nullable=False)
    answer_type: Mapped[str] = mapped_column(String(16), nullable=False)
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    ai_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Exercise bank
# ---------------------------------------------------------------------------


class Exercise(Base):
    """Pre-seeded exercise bank entry."""

    __tablename__ = "exercises"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    topic_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    difficulty: Mapped[str] = mapped_column(String(8), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    question_he: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    answer_type: Mapped[str] = mapped_column(String(16), nullable=False, default="expression")
    solution_steps: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    solution_steps_he: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    tip: Mapped[str | None] = mapped_column(Text, nullable=True)
    tip_he: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    times_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
