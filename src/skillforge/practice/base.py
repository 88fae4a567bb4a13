"""Shared answer evaluation, scoring and completion for practice services."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.ai.image_analyzer import ImageAnalyzer, analyze_image_answer
from skillforge.clock import DEFAULT_TIMEZONE, local_date
from skillforge.gamification.rewards import CompletionBonus, RewardLedger
from skillforge.gamification.streak_service import update_daily_streak
from skillforge.gamification.xp_service import XPGrant, get_profile, grant_xp
from skillforge.practice.answers import check_answer
from skillforge.practice.repository import PracticeRepository
from skillforge.practice.types import (
    AnswerType,
    DailySet,
    PracticeSession,
    Problem,
    ProblemAttempt,
    SetKind,
    StuckInfo,
    SubmissionResult,
)
from skillforge.progress.mastery import MasteryPolicy
from skillforge.progress.tracker import SkillProgressTracker
from skillforge.topics.graph import TopicGraph

logger = logging.getLogger(__name__)

STUCK_THRESHOLD = 5
STUCK_LOOKBACK = 20

_STUCK_SUGGESTIONS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "take_break": (
        (
            "Take a short break and come back with fresh eyes",
            'Consider reviewing the prerequisites for "{name}"',
            "Try watching a tutorial video on this concept",
        ),
        (
            "קח הפסקה קצרה וחזור עם מבט רענן",
            'שקול לחזור על הדרישות המקדימות של "{name_he}"',
            "נסה לצפות בסרטון הסבר על הנושא",
        ),
    ),
    "try_easier": (
        (
            "Try an easier problem first to build confidence",
            "Read the hints carefully before attempting",
            "Review the solution steps from previous problems",
        ),
        (
            "נסה שאלה קלה יותר קודם כדי לבנות ביטחון",
            "קרא את הרמזים בעיון לפני שתנסה",
            "עבור על שלבי הפתרון משאלות קודמות",
        ),
    ),
    "review_hint": (
        (
            "Don't give up! This is a challenging topic",
            "Use the hint button for guidance",
            "Focus on understanding, not just the answer",
        ),
        (
            "אל תוותר! זה נושא מאתגר",
            "השתמש בכפתור הרמז לעזרה",
            "התמקד בהבנה, לא רק בתשובה",
        ),
    ),
}


def stuck_action(consecutive_incorrect: int, threshold: int = STUCK_THRESHOLD) -> str:
    if consecutive_incorrect >= threshold + 3:
        return "take_break"
    if consecutive_incorrect >= threshold + 1:
        return "try_easier"
    if consecutive_incorrect >= threshold:
        return "review_hint"
    return "continue"


@dataclass(frozen=True)
class UserContext:
    """Per-user settings that shape a request."""

    timezone: str
    locale: str
    problems_per_day: int | None


@dataclass(frozen=True)
class Evaluation:
    answer_type: AnswerType
    is_correct: bool | None
    feedback: str | None = None
    extracted_answer: str | None = None


class BasePracticeService:
    """Common plumbing for daily sets and topic sessions."""

    set_kind: SetKind = "daily"
    awards_completion_bonus = True

    def __init__(
        self,
        db: AsyncSession,
        redis: object | None = None,
        *,
        graph: TopicGraph,
        ledger: RewardLedger | None = None,
        analyzer: ImageAnalyzer | None = None,
        mastery_policy: MasteryPolicy | None = None,
        default_timezone: str = DEFAULT_TIMEZONE,
        stuck_threshold: int = STUCK_THRESHOLD,
    ) -> None:
        self.db = db
        self.redis = redis
        self.graph = graph
        self.ledger = ledger or RewardLedger()
        self.analyzer = analyzer
        self.default_timezone = default_timezone
        self.stuck_threshold = stuck_threshold
        self.repo = PracticeRepository(db)
        self.tracker = SkillProgressTracker(db, graph, mastery_policy, default_timezone)

    async def _user_context(self, user_id: str) -> UserContext:
        profile = await get_profile(self.db, user_id)
        if profile is None:
            return UserContext(self.default_timezone, "en", None)
        return UserContext(
            timezone=profile.timezone or self.default_timezone,
            locale=profile.preferred_locale or "en",
            problems_per_day=profile.problems_per_day,
        )

    def _today(self, ctx: UserContext, now: datetime | None = None) -> str:
        return local_date(ctx.timezone, now, self.default_timezone)

    # --- Evaluation ---

    async def _evaluate(
        self,
        problem: Problem,
        answer_text: str | None,
        answer_image_url: str | None,
        is_skipped: bool,
        locale: str,
    ) -> Evaluation:
        if is_skipped or (not (answer_text or "").strip() and not answer_image_url):
            return Evaluation(answer_type="skipped", is_correct=None)

        if answer_image_url:
            analysis = await analyze_image_answer(
                self.analyzer,
                answer_image_url,
                problem.question_text_he if locale == "he" else problem.question_text,
                problem.correct_answer,
                locale,
            )
            return Evaluation(
                answer_type="image",
                is_correct=analysis.is_correct,
                feedback=analysis.feedback,
                extracted_answer=analysis.extracted_answer,
            )

        return Evaluation(answer_type="text", is_correct=check_answer(answer_text, problem.correct_answer))

    def _new_attempt(
        self,
        user_id: str,
        set_id: str,
        problem: Problem,
        evaluation: Evaluation,
        answer_text: str | None,
        answer_image_url: str | None,
        xp: int,
        now: datetime,
    ) -> ProblemAttempt:
        return ProblemAttempt(
            id=str(uuid.uuid4()),
            user_id=user_id,
            set_id=set_id,
            problem_id=problem.id,
            topic_id=problem.topic_id,
            answer_type=evaluation.answer_type,
            set_kind=self.set_kind,
            answer_text=answer_text if evaluation.answer_type == "text" else None,
            answer_image_url=answer_image_url if evaluation.answer_type == "image" else None,
            is_correct=evaluation.is_correct,
            ai_feedback=evaluation.feedback,
            xp_earned=xp,
            started_at=now,
            submitted_at=now,
        )

    # --- Side effects after an attempt is stored ---

    async def _record_progress(
        self,
        user_id: str,
        problem: Problem,
        evaluation: Evaluation,
        ctx: UserContext,
        now: datetime,
    ) -> None:
        if evaluation.is_correct is None:
            return
        await self.tracker.record_attempt(
            user_id, problem.topic_id, evaluation.is_correct, timezone_name=ctx.timezone, now=now
        )

    async def _grant_answer_xp(self, user_id: str, set_id: str, problem: Problem, xp: int) -> XPGrant | None:
        if xp <= 0:
            return None
        return await grant_xp(
            self.db,
            self.redis,
            user_id,
            xp,
            source=f"{self.set_kind}_answer",
            source_id=problem.id,
            description=f"Correct answer: {problem.topic_name}",
            idempotency_key=f"answer:{set_id}:{problem.id}:{user_id}",
            ledger=self.ledger,
        )

    async def _award_completion(
        self,
        user_id: str,
        set_id: str,
        total_problems: int,
        today: str,
    ) -> tuple[CompletionBonus, XPGrant | None]:
        """Update the streak, then grant completion, streak and perfect-day bonuses once."""
        streak = await update_daily_streak(self.db, user_id, today)
        attempts = await self.repo.list_attempts(user_id, set_id)
        all_correct = len(attempts) == total_problems and all(a.is_correct is True for a in attempts)
        bonus = self.ledger.completion_bonus(streak.current_streak, all_correct)
        if not self.awards_completion_bonus:
            bonus = replace(bonus, completion=0)

        grant = await grant_xp(
            self.db,
            self.redis,
            user_id,
            bonus.total,
            source=f"{self.set_kind}_complete",
            source_id=set_id,
            description=(
                f"Set complete: +{bonus.completion} completion, +{bonus.streak} streak, +{bonus.perfect} perfect"
            ),
            idempotency_key=f"{self.set_kind}-complete:{set_id}",
            ledger=self.ledger,
        )
        if grant is None:
            logger.info("Completion bonus for %s already granted", set_id)
        return bonus, grant

    async def check_if_stuck(self, user_id: str, topic_id: str) -> StuckInfo:
        """Count consecutive incorrect answers on a topic, ignoring skips."""
        attempts = await self.repo.recent_topic_attempts(user_id, topic_id, STUCK_LOOKBACK)
        consecutive = 0
        for attempt in attempts:
            if attempt.is_correct is True:
                break
            if attempt.is_correct is False:
                consecutive += 1

        action = stuck_action(consecutive, self.stuck_threshold)
        if action == "continue":
            return StuckInfo(is_stuck=False, consecutive_incorrect=consecutive)

        topic = self.graph.get(topic_id)
        name = topic.name if topic else "this topic"
        name_he = topic.name_he if topic else "נושא זה"
        en, he = _STUCK_SUGGESTIONS[action]
        return StuckInfo(
            is_stuck=True,
            consecutive_incorrect=consecutive,
            recommended_action=action,  # type: ignore[arg-type]
            suggestions=tuple(s.format(name=name) for s in en),
            suggestions_he=tuple(s.format(name_he=name_he) for s in he),
        )

    @staticmethod
    def _now(now: datetime | None) -> datetime:
        return now or datetime.now(timezone.utc)

    # --- Submission ---

    async def _load_container(self, user_id: str, set_id: str) -> DailySet | PracticeSession | None:
        raise NotImplementedError

    async def submit_answer(
        self,
        user_id: str,
        set_id: str,
        problem_id: str,
        *,
        answer_text: str | None = None,
        answer_image_url: str | None = None,
        is_skipped: bool = False,
        locale: str | None = None,
        now: datetime | None = None,
    ) -> SubmissionResult:
        """Score one answer. Submitting the same problem twice is a no-op."""
        container = await self._load_container(user_id, set_id)
        if container is None:
            return SubmissionResult(success=False, error="Set not found")
        problem = container.find_problem(problem_id)
        if problem is None:
            return SubmissionResult(success=False, error="Problem not found")

        if await self.repo.get_attempt(user_id, set_id, problem_id) is not None:
            return SubmissionResult(success=True, already_answered=True, xp_earned=0)

        now = self._now(now)
        ctx = await self._user_context(user_id)
        evaluation = await self._evaluate(problem, answer_text, answer_image_url, is_skipped, locale or ctx.locale)
        xp = self.ledger.answer_xp(problem.xp_reward, evaluation.is_correct)

        try:
            await self.repo.add_attempt(
                self._new_attempt(user_id, set_id, problem, evaluation, answer_text, answer_image_url, xp, now)
            )
            progress = await self.repo.advance_progress(self.set_kind, set_id, xp, now)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return SubmissionResult(success=True, already_answered=True, xp_earned=0)

        await self._record_progress(user_id, problem, evaluation, ctx, now)

        grants: list[XPGrant] = []
        grant = await self._grant_answer_xp(user_id, set_id, problem, xp)
        if grant is not None:
            grants.append(grant)

        bonus = None
        if progress.newly_completed and await self.repo.claim_completion_bonus(self.set_kind, set_id):
            bonus, bonus_grant = await self._award_completion(
                user_id, set_id, container.total_problems, self._today(ctx, now)
            )
            if bonus_grant is not None:
                grants.append(bonus_grant)
                await self.repo.add_set_xp(self.set_kind, set_id, bonus.total)
        await self.db.commit()

        stuck = None
        if evaluation.is_correct is False:
            stuck = await self.check_if_stuck(user_id, problem.topic_id)

        return SubmissionResult(
            success=True,
            is_correct=evaluation.is_correct,
            xp_earned=xp,
            feedback=evaluation.feedback,
            extracted_answer=evaluation.extracted_answer,
            set_completed=progress.newly_completed,
            bonus=bonus,
            leveled_up=any(g.leveled_up for g in grants),
            new_level=grants[-1].new_level if grants else None,
            stuck=stuck,
        )
