"""Daily set lifecycle: idempotent creation, idempotent submission, completion."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.ai.image_analyzer import ImageAnalyzer
from skillforge.clock import DEFAULT_TIMEZONE
from skillforge.gamification.rewards import RewardLedger
from skillforge.practice.base import STUCK_THRESHOLD, BasePracticeService
from skillforge.practice.composer import SetComposer, SlotLayout
from skillforge.practice.resolver import ContentResolver
from skillforge.practice.types import DailySet, ProblemAttempt
from skillforge.progress.mastery import MasteryPolicy
from skillforge.topics.graph import TopicGraph

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.5


class DailySetService(BasePracticeService):
    """One problem set per user per local calendar day."""

    set_kind = "daily"

    def __init__(
        self,
        db: AsyncSession,
        redis: object | None = None,
        *,
        graph: TopicGraph,
        composer: SetComposer,
        resolver: ContentResolver,
        ledger: RewardLedger | None = None,
        analyzer: ImageAnalyzer | None = None,
        mastery_policy: MasteryPolicy | None = None,
        default_timezone: str = DEFAULT_TIMEZONE,
        stuck_threshold: int = STUCK_THRESHOLD,
        lock_ttl_seconds: int = 120,
        lock_wait_seconds: float = 30.0,
        default_problems_per_day: int | None = None,
    ) -> None:
        super().__init__(
            db,
            redis,
            graph=graph,
            ledger=ledger,
            analyzer=analyzer,
            mastery_policy=mastery_policy,
            default_timezone=default_timezone,
            stuck_threshold=stuck_threshold,
        )
        self.composer = composer
        self.resolver = resolver
        self.lock_ttl_seconds = lock_ttl_seconds
        self.lock_wait_seconds = lock_wait_seconds
        self.default_problems_per_day = default_problems_per_day

    # --- Reads ---

    async def get_today(self, user_id: str, now: datetime | None = None) -> DailySet | None:
        ctx = await self._user_context(user_id)
        return await self.repo.find_daily_set(user_id, self._today(ctx, now))

    async def get_by_date(self, user_id: str, date: str) -> DailySet | None:
        return await self.repo.find_daily_set(user_id, date)

    async def get_set(self, user_id: str, set_id: str) -> DailySet | None:
        daily = await self.repo.get_daily_set(set_id)
        if daily is None or daily.user_id != user_id:
            return None
        return daily

    async def get_attempts(self, user_id: str, set_id: str) -> list[ProblemAttempt]:
        return await self.repo.list_attempts(user_id, set_id)

    async def history(self, user_id: str, limit: int = 10) -> list[DailySet]:
        return await self.repo.list_daily_sets(user_id, limit)

    # --- Creation ---

    async def get_or_create(
        self,
        user_id: str,
        *,
        focus_topic_id: str | None = None,
        now: datetime | None = None,
    ) -> DailySet:
        """Return today's set, generating it on first request.

        An explicit focus topic only applies when the set is created; an
        unknown topic id raises UnknownTopicError.
        """
        ctx = await self._user_context(user_id)
        today = self._today(ctx, now)

        existing = await self.repo.find_daily_set(user_id, today)
        if existing is not None:
            return existing

        if focus_topic_id is not None:
            self.graph.require(focus_topic_id)

        lock_key = f"lock:daily_set:{user_id}:{today}"
        token = uuid.uuid4().hex
        acquired = await self._acquire_lock(lock_key, token)
        if not acquired:
            winner = await self._wait_for_set(user_id, today)
            if winner is not None:
                return winner
            logger.warning("Gave up waiting for daily set %s/%s, generating", user_id, today)

        try:
            return await self._generate(
                user_id, today, ctx.locale, ctx.problems_per_day or self.default_problems_per_day, focus_topic_id
            )
        finally:
            if acquired:
                await self._release_lock(lock_key, token)

    async def _generate(
        self,
        user_id: str,
        today: str,
        locale: str,
        problems_per_day: int | None,
        focus_topic_id: str | None,
    ) -> DailySet:
        snapshot = await self.tracker.snapshot(user_id)
        composition = self.composer.compose(snapshot, SlotLayout.for_total(problems_per_day), focus_topic_id)
        resolution = await self.resolver.resolve_all(composition.requests, locale)

        # A concurrent request may have finished first
        existing = await self.repo.find_daily_set(user_id, today)
        if existing is not None:
            logger.info("Discarding duplicate daily set for %s on %s", user_id, today)
            return existing

        daily = DailySet(
            id=str(uuid.uuid4()),
            user_id=user_id,
            date=today,
            problems=resolution.problems,
            focus_topic_id=composition.focus.id,
            focus_topic_name=composition.focus.name,
            generated_count=resolution.report.generated,
            bank_count=resolution.report.bank,
            placeholder_count=resolution.report.placeholder,
        )
        try:
            await self.repo.add_daily_set(daily)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self.repo.find_daily_set(user_id, today)
            if existing is None:
                raise
            logger.info("Lost daily set race for %s on %s", user_id, today)
            return existing

        logger.info(
            "Created daily set %s for %s on %s (focus=%s, generated=%d, bank=%d, placeholder=%d)",
            daily.id, user_id, today, daily.focus_topic_id,
            daily.generated_count, daily.bank_count, daily.placeholder_count,
        )
        return await self.repo.get_daily_set(daily.id) or daily

    async def _acquire_lock(self, key: str, token: str) -> bool:
        """Take the per-(user, date) generation lock. True without Redis."""
        if self.redis is None:
            return True
        try:
            return bool(await self.redis.set(key, token, nx=True, ex=self.lock_ttl_seconds))  # type: ignore[attr-defined]
        except Exception:
            logger.warning("Generation lock unavailable, continuing without it", exc_info=True)
            return True

    async def _release_lock(self, key: str, token: str) -> None:
        if self.redis is None:
            return
        try:
            if await self.redis.get(key) == token:  # type: ignore[attr-defined]
                await self.redis.delete(key)  # type: ignore[attr-defined]
        except Exception:
            logger.warning("Failed to release generation lock %s", key, exc_info=True)

    async def _wait_for_set(self, user_id: str, today: str) -> DailySet | None:
        deadline = time.monotonic() + self.lock_wait_seconds
        while time.monotonic() < deadline:
            await asyncio.sleep(LOCK_POLL_INTERVAL)
            existing = await self.repo.find_daily_set(user_id, today)
            if existing is not None:
                return existing
        return None

    # --- Submission hooks ---

    async def _load_container(self, user_id: str, set_id: str) -> DailySet | None:
        return await self.get_set(user_id, set_id)
