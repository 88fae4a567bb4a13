"""Content resolution: generated content, then the exercise bank, then a placeholder."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

from skillforge.ai.content_generator import ContentGenerator, GeneratedQuestion
from skillforge.exercises.bank import BankExercise, ExerciseBank
from skillforge.gamification.rewards import RewardLedger
from skillforge.practice.placeholders import ESTIMATED_MINUTES, build_placeholder
from skillforge.practice.types import Problem, SlotRequest
from skillforge.topics.graph import Topic, TopicGraph

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    generated: int = 0
    bank: int = 0
    placeholder: int = 0

    def count(self, problem: Problem) -> None:
        setattr(self, problem.source, getattr(self, problem.source) + 1)

    @property
    def total(self) -> int:
        return self.generated + self.bank + self.placeholder


@dataclass
class Resolution:
    problems: list[Problem]
    report: ResolutionReport = field(default_factory=ResolutionReport)


class ContentResolver:
    """Turns slot requests into problems. Never fails outright."""

    def __init__(
        self,
        graph: TopicGraph,
        ledger: RewardLedger,
        generator: ContentGenerator | None = None,
        bank: ExerciseBank | None = None,
        retries: int = 3,
        backoff_base: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.graph = graph
        self.ledger = ledger
        self.generator = generator
        self.bank = bank
        self.retries = max(retries, 0)
        self.backoff_base = backoff_base
        self._sleep = sleep
        self._background: set[asyncio.Task[None]] = set()

    # --- Public API ---

    async def resolve(
        self,
        request: SlotRequest,
        already_used_ids: Iterable[str] = (),
        locale: str = "en",
    ) -> Problem:
        topic = self.graph.require(request.topic_id)
        problem = await self._generate(topic, request, locale)
        if problem is None:
            problem = await self._from_bank(topic, request, set(already_used_ids))
        if problem is None:
            problem = self._placeholder(topic, request)
        return problem

    async def resolve_all(self, requests: Sequence[SlotRequest], locale: str = "en") -> Resolution:
        """Resolve a whole set, preserving request order.

        Generation fans out across slots. Slots that could not be generated
        go through the bank one at a time so no exercise is used twice.
        """
        topics = [self.graph.require(r.topic_id) for r in requests]
        generated = await asyncio.gather(
            *(self._generate(topic, req, locale) for topic, req in zip(topics, requests))
        )

        used: set[str] = set()
        problems: list[Problem] = []
        report = ResolutionReport()
        for topic, req, problem in zip(topics, requests, generated):
            if problem is None:
                problem = await self._from_bank(topic, req, used)
            if problem is None:
                problem = self._placeholder(topic, req)
            used.add(problem.id)
            report.count(problem)
            problems.append(problem)

        logger.info(
            "Resolved %d problems: %d generated, %d bank, %d placeholder",
            report.total, report.generated, report.bank, report.placeholder,
        )
        return Resolution(problems=problems, report=report)

    async def drain(self) -> None:
        """Wait for pending usage-counter updates."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # --- Chain steps ---

    async def _generate(self, topic: Topic, request: SlotRequest, locale: str) -> Problem | None:
        if self.generator is None:
            return None

        for attempt in range(self.retries + 1):
            if attempt:
                await self._sleep(self.backoff_base * 2 ** (attempt - 1))
            try:
                question = await self.generator.generate(topic.id, request.difficulty, locale)
            except Exception:
                logger.warning(
                    "Generation attempt %d/%d failed for %s (%s)",
                    attempt + 1, self.retries + 1, topic.id, request.difficulty,
                    exc_info=True,
                )
                continue
            return self._from_generated(topic, request, question)

        logger.warning("Generation exhausted for %s (%s), falling back", topic.id, request.difficulty)
        return None

    async def _from_bank(self, topic: Topic, request: SlotRequest, used: set[str]) -> Problem | None:
        if self.bank is None:
            return None
        try:
            matches = await self.bank.query(topic.id, request.difficulty, exclude_ids=used, limit=1)
        except Exception:
            logger.warning("Exercise bank query failed for %s", topic.id, exc_info=True)
            return None
        if not matches:
            return None

        exercise = matches[0]
        self._spawn_usage_increment(exercise.id)
        return self._from_exercise(topic, request, exercise)

    def _placeholder(self, topic: Topic, request: SlotRequest) -> Problem:
        return build_placeholder(
            topic,
            request.difficulty,
            request.slot,
            self.ledger.xp_for_difficulty(request.difficulty),
        )

    # --- Helpers ---

    def _spawn_usage_increment(self, exercise_id: str) -> None:
        task = asyncio.create_task(self._increment_usage(exercise_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _increment_usage(self, exercise_id: str) -> None:
        try:
            await self.bank.increment_usage(exercise_id)  # type: ignore[union-attr]
        except Exception:
            logger.warning("Failed to bump usage for exercise %s", exercise_id, exc_info=True)

    def _from_generated(self, topic: Topic, request: SlotRequest, question: GeneratedQuestion) -> Problem:
        return Problem(
            id=f"gen-{uuid.uuid4().hex}",
            topic_id=topic.id,
            topic_name=topic.name,
            topic_name_he=topic.name_he,
            slot=request.slot,
            difficulty=request.difficulty,
            question_text=question.question_text,
            question_text_he=question.question_text_he or question.question_text,
            question_latex=question.question_latex,
            correct_answer=question.correct_answer,
            answer_type=question.answer_type,
            solution_steps=list(question.solution_steps),
            solution_steps_he=list(question.solution_steps_he),
            hint=question.hint,
            hint_he=question.hint_he or question.hint,
            estimated_minutes=question.estimated_minutes,
            xp_reward=self.ledger.xp_for_difficulty(request.difficulty),
            source="generated",
        )

    def _from_exercise(self, topic: Topic, request: SlotRequest, exercise: BankExercise) -> Problem:
        return Problem(
            id=exercise.id,
            topic_id=topic.id,
            topic_name=topic.name,
            topic_name_he=topic.name_he,
            slot=request.slot,
            difficulty=request.difficulty,
            question_text=exercise.question,
            question_text_he=exercise.question_he or exercise.question,
            correct_answer=exercise.answer,
            answer_type=exercise.answer_type,
            solution_steps=list(exercise.solution_steps),
            solution_steps_he=list(exercise.solution_steps_he),
            hint=exercise.tip,
            hint_he=exercise.tip_he or exercise.tip,
            estimated_minutes=exercise.estimated_minutes or ESTIMATED_MINUTES.get(request.difficulty, 3),
            xp_reward=exercise.xp_reward or self.ledger.xp_for_difficulty(request.difficulty),
            source="bank",
        )
