"""Storage mapping for topic progress."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.db.models import TopicProgressRecord
from skillforge.progress.mastery import TopicProgress


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_entity(record: TopicProgressRecord) -> TopicProgress:
    days = json.loads(record.days_practiced or "[]")
    return TopicProgress(
        user_id=record.user_id,
        topic_id=record.topic_id,
        status=record.status,  # type: ignore[arg-type]
        mastery=record.mastery,
        correct_attempts=record.correct_attempts,
        total_attempts=record.total_attempts,
        last_practiced_at=as_utc(record.last_practiced_at),
        days_practiced=[str(d) for d in days],
    )


def apply_entity(record: TopicProgressRecord, progress: TopicProgress) -> None:
    record.status = progress.status
    record.mastery = progress.mastery
    record.correct_attempts = progress.correct_attempts
    record.total_attempts = progress.total_attempts
    record.last_practiced_at = progress.last_practiced_at
    record.days_practiced = json.dumps(progress.days_practiced)
    record.updated_at = datetime.now(timezone.utc)


class ProgressRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_record(self, user_id: str, topic_id: str) -> TopicProgressRecord | None:
        result = await self.db.execute(
            select(TopicProgressRecord).where(
                TopicProgressRecord.user_id == user_id,
                TopicProgressRecord.topic_id == topic_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, user_id: str, topic_id: str) -> TopicProgress | None:
        record = await self._get_record(user_id, topic_id)
        return to_entity(record) if record else None

    async def list_for_user(self, user_id: str) -> list[TopicProgress]:
        result = await self.db.execute(
            select(TopicProgressRecord).where(TopicProgressRecord.user_id == user_id)
        )
        return [to_entity(r) for r in result.scalars().all()]

    async def save(self, progress: TopicProgress) -> None:
        record = await self._get_record(progress.user_id, progress.topic_id)
        if record is None:
            record = TopicProgressRecord(user_id=progress.user_id, topic_id=progress.topic_id)
            self.db.add(record)
        apply_entity(record, progress)
        await self.db.flush()
