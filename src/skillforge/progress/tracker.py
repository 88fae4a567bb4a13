"""Skill-progress tracker: per-(user, topic) mastery state machine."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.clock import DEFAULT_TIMEZONE, local_date
from skillforge.practice.composer import pick_focus_topic
from skillforge.progress.mastery import MasteryPolicy, TopicProgress
from skillforge.progress.repository import ProgressRepository
from skillforge.topics.graph import Topic, TopicGraph

logger = logging.getLogger(__name__)


class SkillProgressTracker:
    """Records attempts against topics and reports mastery.

    Failures here never block practice: writes fall back to the computed
    snapshot and reads fall back to an empty map.
    """

    def __init__(
        self,
        db: AsyncSession,
        graph: TopicGraph,
        policy: MasteryPolicy | None = None,
        default_timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.db = db
        self.graph = graph
        self.policy = policy or MasteryPolicy()
        self.default_timezone = default_timezone
        self.repo = ProgressRepository(db)

    async def record_attempt(
        self,
        user_id: str,
        topic_id: str,
        is_correct: bool,
        *,
        timezone_name: str | None = None,
        now: datetime | None = None,
    ) -> TopicProgress:
        """Apply one answered attempt and persist the result.

        Runs in the caller's session. Callers commit their own writes first,
        since a failed write here rolls the session back.
        """
        now = now or datetime.now(timezone.utc)
        day = local_date(timezone_name, now, self.default_timezone)

        try:
            current = await self.repo.get(user_id, topic_id)
        except SQLAlchemyError:
            # Saving from a blank row would overwrite the stored history
            logger.warning("Failed to load progress for %s/%s, not recording", user_id, topic_id, exc_info=True)
            await self.db.rollback()
            return TopicProgress(user_id=user_id, topic_id=topic_id).recorded(is_correct, day, now, self.policy)

        updated = (current or TopicProgress(user_id=user_id, topic_id=topic_id)).recorded(
            is_correct, day, now, self.policy
        )

        try:
            await self.repo.save(updated)
            await self.db.commit()
        except SQLAlchemyError:
            logger.warning("Failed to persist progress for %s/%s", user_id, topic_id, exc_info=True)
            await self.db.rollback()
        return updated

    async def snapshot(self, user_id: str) -> dict[str, TopicProgress]:
        """Progress for every topic the user has touched."""
        try:
            rows = await self.repo.list_for_user(user_id)
        except SQLAlchemyError:
            logger.warning("Failed to load progress snapshot for %s", user_id, exc_info=True)
            return {}
        return {p.topic_id: p for p in rows}

    async def topic_view(self, user_id: str, topic: Topic) -> dict:
        snapshot = await self.snapshot(user_id)
        return self._topic_entry(topic, snapshot)

    async def skill_tree(self, user_id: str) -> dict:
        """Full branch/topic view, with untouched topics as not started."""
        snapshot = await self.snapshot(user_id)

        branches = []
        total_mastered = 0
        for branch in self.graph.branches:
            topics = [self._topic_entry(t, snapshot) for t in self.graph.by_branch(branch.id)]
            completed = sum(1 for t in topics if t["status"] == "mastered")
            total_mastered += completed
            branches.append({
                "id": branch.id,
                "name": branch.name,
                "name_he": branch.name_he,
                "order": branch.order,
                "topics": topics,
                "overall_mastery": round(sum(t["mastery"] for t in topics) / len(topics)) if topics else 0,
                "completed_count": completed,
                "total_count": len(topics),
            })

        total_topics = len(self.graph.topics)
        return {
            "branches": branches,
            "current_focus_topic": pick_focus_topic(self.graph, snapshot).id,
            "overall_progress": round(total_mastered / total_topics * 100) if total_topics else 0,
            "total_mastered": total_mastered,
            "total_topics": total_topics,
        }

    def _topic_entry(self, topic: Topic, snapshot: dict[str, TopicProgress]) -> dict:
        progress = snapshot.get(topic.id)
        recommended_first = [
            p.id for p in self.graph.prerequisites(topic.id)
            if snapshot.get(p.id) is None or snapshot[p.id].status != "mastered"
        ]
        return {
            "id": topic.id,
            "name": topic.name,
            "name_he": topic.name_he,
            "description": topic.description,
            "branch_id": topic.branch_id,
            "order": topic.order,
            "prerequisites": list(topic.prerequisites),
            "difficulty_levels": list(topic.difficulty_levels),
            "status": progress.status if progress else "not_started",
            "mastery": progress.mastery if progress else 0,
            "correct_attempts": progress.correct_attempts if progress else 0,
            "total_attempts": progress.total_attempts if progress else 0,
            "last_practiced_at": progress.last_practiced_at if progress else None,
            "days_practiced": list(progress.days_practiced) if progress else [],
            "can_practice": True,
            "has_unmet_prerequisites": bool(recommended_first),
            "recommended_first": recommended_first,
        }
