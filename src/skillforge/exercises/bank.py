"""Exercise bank: pre-seeded problems used when generation fails."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Collection
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.db.models import Exercise

logger = logging.getLogger(__name__)


@dataclass
class BankExercise:
    id: str
    topic_id: str
    difficulty: str
    question: str
    question_he: str | None = None
    answer: str = ""
    answer_type: str = "expression"
    solution_steps: list[str] = field(default_factory=list)
    solution_steps_he: list[str] = field(default_factory=list)
    tip: str | None = None
    tip_he: str | None = None
    estimated_minutes: int = 5
    xp_reward: int = 0
    times_used: int = 0


def _to_entity(row: Exercise) -> BankExercise:
    return BankExercise(
        id=row.id,
        topic_id=row.topic_id,
        difficulty=row.difficulty,
        question=row.question,
        question_he=row.question_he,
        answer=row.answer or "",
        answer_type=row.answer_type,
        solution_steps=json.loads(row.solution_steps or "[]"),
        solution_steps_he=json.loads(row.solution_steps_he or "[]"),
        tip=row.tip,
        tip_he=row.tip_he,
        estimated_minutes=row.estimated_minutes or 5,
        xp_reward=row.xp_reward or 0,
        times_used=row.times_used or 0,
    )


class ExerciseBank(ABC):
    @abstractmethod
    async def query(
        self,
        topic_id: str,
        difficulty: str,
        exclude_ids: Collection[str] = (),
        limit: int = 1,
    ) -> list[BankExercise]:
        """Active exercises for (topic, difficulty), least used first."""
        ...

    @abstractmethod
    async def increment_usage(self, exercise_id: str) -> None:
        ...


class SqlExerciseBank(ExerciseBank):
    """Exercise bank over the ``exercises`` table.

    Each call opens its own session so usage increments can run in the
    background after the request session has closed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def query(
        self,
        topic_id: str,
        difficulty: str,
        exclude_ids: Collection[str] = (),
        limit: int = 1,
    ) -> list[BankExercise]:
        stmt = (
            select(Exercise)
            .where(
                Exercise.topic_id == topic_id,
                Exercise.difficulty == difficulty,
                Exercise.is_active.is_(True),
            )
            .order_by(Exercise.times_used.asc(), Exercise.created_at.asc())
            .limit(limit)
        )
        if exclude_ids:
            stmt = stmt.where(Exercise.id.not_in(list(exclude_ids)))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_entity(row) for row in result.scalars().all()]

    async def increment_usage(self, exercise_id: str) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Exercise)
                .where(Exercise.id == exercise_id)
                .values(times_used=Exercise.times_used + 1)
            )
            await session.commit()
