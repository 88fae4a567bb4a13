"""XP grant service with idempotency and level-up detection."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.db.models import UserProfile, XPLedger
from skillforge.gamification.rewards import RewardLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XPGrant:
    amount: int
    total_xp: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


async def get_profile(db: AsyncSession, user_id: str) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_profile(db: AsyncSession, user_id: str) -> UserProfile:
    """Get or create the gamification profile row for a user."""
    profile = await get_profile(db, user_id)
    if profile is None:
        profile = UserProfile(
            user_id=user_id,
            total_xp=0,
            current_level=1,
            current_streak=0,
            longest_streak=0,
            updated_at=datetime.now(timezone.utc),
        )
        db.add(profile)
        await db.flush()
    return profile


async def grant_xp(
    db: AsyncSession,
    redis: object,
    user_id: str,
    amount: int,
    source: str,
    source_id: str,
    description: str,
    idempotency_key: str,
    ledger: RewardLedger | None = None,
) -> XPGrant | None:
    """Grant XP to a user. Returns None if the key was already used.

    After granting:
    1. Insert into xp_ledger
    2. Update user_profiles.total_xp
    3. Recompute level from total_xp
    4. If level changed, publish a level_up event
    """
    existing = await db.execute(
        select(XPLedger).where(XPLedger.idempotency_key == idempotency_key)
    )
    if existing.scalar_one_or_none():
        return None

    ledger = ledger or RewardLedger()
    now = datetime.now(timezone.utc)

    db.add(XPLedger(
        user_id=user_id,
        amount=amount,
        source=source,
        source_id=source_id,
        description=description,
        idempotency_key=idempotency_key,
        created_at=now,
    ))

    profile = await get_or_create_profile(db, user_id)
    old_level = profile.current_level
    profile.total_xp += amount
    profile.current_level = ledger.level_for(profile.total_xp)
    profile.updated_at = now

    await db.flush()

    grant = XPGrant(
        amount=amount,
        total_xp=profile.total_xp,
        old_level=old_level,
        new_level=profile.current_level,
    )
    if grant.leveled_up:
        await _emit_level_up(redis, user_id, old_level, grant.new_level, ledger)
    return grant


async def _emit_level_up(
    redis: object,
    user_id: str,
    old_level: int,
    new_level: int,
    ledger: RewardLedger,
) -> None:
    """Broadcast a level-up event. Best-effort."""
    logger.info("User %s leveled up %d -> %d", user_id, old_level, new_level)
    if redis is None:
        return
    info = ledger.level_info(
        next(e["cumulative"] for e in ledger.policy.levels if e["level"] == new_level)
    )
    try:
        await redis.publish(  # type: ignore[attr-defined]
            "pubsub:level_up",
            json.dumps({
                "user_id": user_id,
                "old_level": old_level,
                "new_level": new_level,
                "title": info["title"],
                "title_he": info["title_he"],
            }),
        )
    except Exception:
        logger.warning("Failed to publish level_up broadcast", exc_info=True)
