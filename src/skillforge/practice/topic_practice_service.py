"""On-demand single-topic practice sessions."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.ai.image_analyzer import ImageAnalyzer
from skillforge.clock import DEFAULT_TIMEZONE
from skillforge.gamification.rewards import RewardLedger
from skillforge.practice.base import STUCK_THRESHOLD, BasePracticeService
from skillforge.practice.composer import SetComposer
from skillforge.practice.resolver import ContentResolver
from skillforge.practice.types import PracticeSession
from skillforge.progress.mastery import MasteryPolicy
from skillforge.topics.graph import TopicGraph

logger = logging.getLogger(__name__)


class TopicPracticeService(BasePracticeService):
    """Sessions of a few problems on one topic, any time.

    Completion updates the streak and grants the streak and perfect-day
    bonuses; the flat completion bonus belongs to daily sets only.
    """

    set_kind = "practice"
    awards_completion_bonus = False

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
        session_size: int = 5,
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
        self.session_size = session_size

    async def start_session(
        self,
        user_id: str,
        topic_id: str,
        *,
        count: int | None = None,
        difficulty: str | None = None,
        now: datetime | None = None,
    ) -> PracticeSession:
        """Create a session for a topic. Raises UnknownTopicError."""
        topic = self.graph.require(topic_id)
        ctx = await self._user_context(user_id)

        requests = self.composer.compose_topic_practice(topic, count or self.session_size, difficulty)
        resolution = await self.resolver.resolve_all(requests, ctx.locale)

        session = PracticeSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            topic_id=topic.id,
            topic_name=topic.name,
            topic_name_he=topic.name_he,
            problems=resolution.problems,
            created_at=self._now(now),
        )
        await self.repo.add_session(session)
        await self.db.commit()
        logger.info("Started practice session %s for %s on %s", session.id, user_id, topic.id)
        return session

    async def get_session(self, user_id: str, session_id: str) -> PracticeSession | None:
        session = await self.repo.get_session(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    async def active_sessions(self, user_id: str, limit: int = 10) -> list[PracticeSession]:
        return await self.repo.list_sessions(user_id, completed=False, limit=limit)

    async def session_history(self, user_id: str, limit: int = 10) -> list[PracticeSession]:
        return await self.repo.list_sessions(user_id, completed=True, limit=limit)

    async def _load_container(self, user_id: str, set_id: str) -> PracticeSession | None:
        return await self.get_session(user_id, set_id)
