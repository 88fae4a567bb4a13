"""Storage mapping for daily sets, practice sessions and attempts."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.db.models import DailySetRecord, PracticeSessionRecord, ProblemAttemptRecord
from skillforge.practice.types import DailySet, PracticeSession, Problem, ProblemAttempt, SetKind
from skillforge.progress.repository import as_utc


def _load_problems(raw: str | None) -> list[Problem]:
    return [Problem.from_dict(item) for item in json.loads(raw or "[]")]


def _dump_problems(problems: list[Problem]) -> str:
    return json.dumps([p.to_dict() for p in problems], ensure_ascii=False)


# ---------------------------------------------------------------------------
# Daily sets
# ---------------------------------------------------------------------------


def daily_set_to_entity(record: DailySetRecord) -> DailySet:
    return DailySet(
        id=record.id,
        user_id=record.user_id,
        date=record.date,
        problems=_load_problems(record.problems),
        focus_topic_id=record.focus_topic_id,
        focus_topic_name=record.focus_topic_name,
        current_index=record.current_index,
        completed_count=record.completed_count,
        is_completed=record.is_completed,
        completed_at=as_utc(record.completed_at),
        xp_earned=record.xp_earned,
        generated_count=record.generated_count,
        bank_count=record.bank_count,
        placeholder_count=record.placeholder_count,
        bonus_awarded=record.bonus_awarded,
        created_at=as_utc(record.created_at),
    )


def daily_set_to_record(entity: DailySet) -> DailySetRecord:
    return DailySetRecord(
        id=entity.id,
        user_id=entity.user_id,
        date=entity.date,
        problems=_dump_problems(entity.problems),
        current_index=entity.current_index,
        completed_count=entity.completed_count,
        total_problems=entity.total_problems,
        is_completed=entity.is_completed,
        completed_at=entity.completed_at,
        xp_earned=entity.xp_earned,
        focus_topic_id=entity.focus_topic_id,
        focus_topic_name=entity.focus_topic_name,
        generated_count=entity.generated_count,
        bank_count=entity.bank_count,
        placeholder_count=entity.placeholder_count,
        bonus_awarded=entity.bonus_awarded,
        created_at=entity.created_at or datetime.now(timezone.utc),
    )


# ---------------------------------------------------------------------------
# Practice sessions
# ---------------------------------------------------------------------------


def session_to_entity(record: PracticeSessionRecord) -> PracticeSession:
    return PracticeSession(
        id=record.id,
        user_id=record.user_id,
        topic_id=record.topic_id,
        topic_name=record.topic_name,
        topic_name_he=record.topic_name_he,
        problems=_load_problems(record.problems),
        current_index=record.current_index,
        completed_count=record.completed_count,
        is_completed=record.is_completed,
        completed_at=as_utc(record.completed_at),
        xp_earned=record.xp_earned,
        bonus_awarded=record.bonus_awarded,
        created_at=as_utc(record.created_at),
    )


def session_to_record(entity: PracticeSession) -> PracticeSessionRecord:
    return PracticeSessionRecord(
        id=entity.id,
        user_id=entity.user_id,
        topic_id=entity.topic_id,
        topic_name=entity.topic_name,
        topic_name_he=entity.topic_name_he,
        problems=_dump_problems(entity.problems),
        current_index=entity.current_index,
        completed_count=entity.completed_count,
        total_problems=entity.total_problems,
        is_completed=entity.is_completed,
        completed_at=entity.completed_at,
        xp_earned=entity.xp_earned,
        bonus_awarded=entity.bonus_awarded,
        created_at=entity.created_at or datetime.now(timezone.utc),
    )


# ---------------------------------------------------------------------------
# Attempts
# ---------------------------------------------------------------------------


def attempt_to_entity(record: ProblemAttemptRecord) -> ProblemAttempt:
    return ProblemAttempt(
        id=record.id,
        user_id=record.user_id,
        set_id=record.set_id,
        problem_id=record.problem_id,
        topic_id=record.topic_id,
        answer_type=record.answer_type,  # type: ignore[arg-type]
        set_kind=record.set_kind,  # type: ignore[arg-type]
        answer_text=record.answer_text,
        answer_image_url=record.answer_image_url,
        is_correct=record.is_correct,
        ai_feedback=record.ai_feedback,
        xp_earned=record.xp_earned,
        started_at=as_utc(record.started_at),
        submitted_at=as_utc(record.submitted_at),
    )


def attempt_to_record(entity: ProblemAttempt) -> ProblemAttemptRecord:
    return ProblemAttemptRecord(
        id=entity.id,
        user_id=entity.user_id,
        set_id=entity.set_id,
        set_kind=entity.set_kind,
        problem_id=entity.problem_id,
        topic_id=entity.topic_id,
        answer_type=entity.answer_type,
        answer_text=entity.answer_text,
        answer_image_url=entity.answer_image_url,
        is_correct=entity.is_correct,
        ai_feedback=entity.ai_feedback,
        xp_earned=entity.xp_earned,
        started_at=entity.started_at,
        submitted_at=entity.submitted_at,
    )


_PROGRESS_MODELS: dict[str, type[DailySetRecord] | type[PracticeSessionRecord]] = {
    "daily": DailySetRecord,
    "practice": PracticeSessionRecord,
}


@dataclass(frozen=True)
class ProgressUpdate:
    """Counters of a set as stored after one answer was counted."""

    completed_count: int
    current_index: int
    is_completed: bool
    newly_completed: bool


class PracticeRepository:
    """Reads and writes practice entities through one session.

    Writes only flush; the calling service owns commit and rollback.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Daily sets ---

    async def get_daily_set(self, set_id: str) -> DailySet | None:
        record = await self.db.get(DailySetRecord, set_id, populate_existing=True)
        return daily_set_to_entity(record) if record else None

    async def find_daily_set(self, user_id: str, date: str) -> DailySet | None:
        result = await self.db.execute(
            select(DailySetRecord)
            .where(DailySetRecord.user_id == user_id, DailySetRecord.date == date)
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        return daily_set_to_entity(record) if record else None

    async def list_daily_sets(self, user_id: str, limit: int = 10) -> list[DailySet]:
        result = await self.db.execute(
            select(DailySetRecord)
            .where(DailySetRecord.user_id == user_id)
            .order_by(DailySetRecord.date.desc())
            .limit(limit)
        )
        return [daily_set_to_entity(r) for r in result.scalars().all()]

    async def add_daily_set(self, entity: DailySet) -> None:
        self.db.add(daily_set_to_record(entity))
        await self.db.flush()

    # --- Practice sessions ---

    async def get_session(self, session_id: str) -> PracticeSession | None:
        record = await self.db.get(PracticeSessionRecord, session_id, populate_existing=True)
        return session_to_entity(record) if record else None

    async def list_sessions(self, user_id: str, completed: bool | None = None, limit: int = 10) -> list[PracticeSession]:
        stmt = select(PracticeSessionRecord).where(PracticeSessionRecord.user_id == user_id)
        if completed is not None:
            stmt = stmt.where(PracticeSessionRecord.is_completed.is_(completed))
        stmt = stmt.order_by(PracticeSessionRecord.created_at.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return [session_to_entity(r) for r in result.scalars().all()]

    async def add_session(self, entity: PracticeSession) -> None:
        self.db.add(session_to_record(entity))
        await self.db.flush()

    # --- Progress counters ---

    async def advance_progress(self, kind: SetKind, set_id: str, xp: int, now: datetime) -> ProgressUpdate:
        """Count one answer against the stored row, not a loaded copy.

        Both counters are capped to the set size inside the UPDATE, so
        concurrent answers each see the other's increment. Only the
        statement that flips ``is_completed`` reports ``newly_completed``.
        """
        model = _PROGRESS_MODELS[kind]
        await self.db.execute(
            update(model)
            .where(model.id == set_id)
            .values(
                completed_count=case(
                    (model.completed_count < model.total_problems, model.completed_count + 1),
                    else_=model.completed_count,
                ),
                current_index=case(
                    (model.current_index < model.total_problems - 1, model.current_index + 1),
                    else_=model.current_index,
                ),
                xp_earned=model.xp_earned + xp,
            )
            .execution_options(synchronize_session=False)
        )
        flipped = await self.db.execute(
            update(model)
            .where(
                model.id == set_id,
                model.is_completed.is_(False),
                model.completed_count >= model.total_problems,
            )
            .values(is_completed=True, completed_at=now)
            .execution_options(synchronize_session=False)
        )
        row = (
            await self.db.execute(
                select(model.completed_count, model.current_index, model.is_completed).where(model.id == set_id)
            )
        ).one()
        return ProgressUpdate(
            completed_count=row.completed_count,
            current_index=row.current_index,
            is_completed=row.is_completed,
            newly_completed=flipped.rowcount == 1,
        )

    async def claim_completion_bonus(self, kind: SetKind, set_id: str) -> bool:
        """Mark the bonus as awarded. False when another request got there first."""
        model = _PROGRESS_MODELS[kind]
        result = await self.db.execute(
            update(model)
            .where(model.id == set_id, model.bonus_awarded.is_(False))
            .values(bonus_awarded=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def add_set_xp(self, kind: SetKind, set_id: str, xp: int) -> None:
        model = _PROGRESS_MODELS[kind]
        await self.db.execute(
            update(model)
            .where(model.id == set_id)
            .values(xp_earned=model.xp_earned + xp)
            .execution_options(synchronize_session=False)
        )

    # --- Attempts ---

    async def get_attempt(self, user_id: str, set_id: str, problem_id: str) -> ProblemAttempt | None:
        result = await self.db.execute(
            select(ProblemAttemptRecord).where(
                ProblemAttemptRecord.user_id == user_id,
                ProblemAttemptRecord.set_id == set_id,
                ProblemAttemptRecord.problem_id == problem_id,
            )
        )
        record = result.scalar_one_or_none()
        return attempt_to_entity(record) if record else None

    async def list_attempts(self, user_id: str, set_id: str) -> list[ProblemAttempt]:
        result = await self.db.execute(
            select(ProblemAttemptRecord)
            .where(ProblemAttemptRecord.user_id == user_id, ProblemAttemptRecord.set_id == set_id)
            .order_by(ProblemAttemptRecord.submitted_at.asc())
        )
        return [attempt_to_entity(r) for r in result.scalars().all()]

    async def recent_topic_attempts(self, user_id: str, topic_id: str, limit: int = 20) -> list[ProblemAttempt]:
        result = await self.db.execute(
            select(ProblemAttemptRecord)
            .where(ProblemAttemptRecord.user_id == user_id, ProblemAttemptRecord.topic_id == topic_id)
            .order_by(ProblemAttemptRecord.submitted_at.desc())
            .limit(limit)
        )
        return [attempt_to_entity(r) for r in result.scalars().all()]

    async def add_attempt(self, entity: ProblemAttempt) -> None:
        self.db.add(attempt_to_record(entity))
        await self.db.flush()
