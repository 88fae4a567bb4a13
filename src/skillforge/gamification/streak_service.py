"""Daily practice streak bookkeeping."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.gamification.rewards import StreakUpdate, next_streak
from skillforge.gamification.xp_service import get_or_create_profile

logger = logging.getLogger(__name__)


async def update_daily_streak(db: AsyncSession, user_id: str, today: str) -> StreakUpdate:
    """Record a day of practice for the user and persist the new streak.

    ``today`` is the local calendar date (YYYY-MM-DD) in the user's timezone.
    """
    profile = await get_or_create_profile(db, user_id)
    update = next_streak(
        profile.last_practice_date,
        profile.current_streak,
        profile.longest_streak,
        today,
    )
    profile.current_streak = update.current_streak
    profile.longest_streak = update.longest_streak
    profile.last_practice_date = update.last_practice_date
    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()

    if update.changed:
        logger.debug("Streak for %s is now %d", user_id, update.current_streak)
    return update
