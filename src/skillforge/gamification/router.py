"""Gamification API endpoints: profile, levels, XP history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.auth.dependencies import get_current_user_id
from skillforge.db.models import XPLedger
from skillforge.dependencies import get_db, get_reward_ledger
from skillforge.gamification.rewards import RewardLedger
from skillforge.gamification.schemas import (
    AllLevelsResponse,
    LevelEntry,
    ProfileResponse,
    XPHistoryEntry,
    XPHistoryResponse,
)
from skillforge.gamification.xp_service import get_profile

router = APIRouter(prefix="/api/v1/gamification", tags=["Gamification"])


@router.get("/levels", response_model=AllLevelsResponse)
async def list_levels(ledger: RewardLedger = Depends(get_reward_ledger)):
    """Get all level definitions."""
    return AllLevelsResponse(
        levels=[
            LevelEntry(level=t["level"], title=t["title"], title_he=t["title_he"], cumulative=t["cumulative"])
            for t in ledger.levels
        ]
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ledger: RewardLedger = Depends(get_reward_ledger),
):
    """Get current user's XP, level and streak."""
    profile = await get_profile(db, user_id)
    total_xp = profile.total_xp if profile else 0
    info = ledger.level_info(total_xp)

    return ProfileResponse(
        total_xp=total_xp,
        level=info["level"],
        level_title=info["title"],
        level_title_he=info["title_he"],
        xp_into_level=info["xp_into_level"],
        xp_for_level=info["xp_for_level"],
        xp_to_next_level=info["xp_to_next_level"],
        progress_percent=info["progress_percent"],
        next_level=None if info["is_max_level"] else info["next_level"],
        next_title=None if info["is_max_level"] else info["next_title"],
        is_max_level=info["is_max_level"],
        current_streak=profile.current_streak if profile else 0,
        longest_streak=profile.longest_streak if profile else 0,
        last_practice_date=profile.last_practice_date if profile else None,
    )


@router.get("/me/xp/history", response_model=XPHistoryResponse)
async def get_xp_history(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get XP ledger history (paginated)."""
    total_result = await db.execute(
        select(func.count()).select_from(XPLedger).where(XPLedger.user_id == user_id)
    )
    total = total_result.scalar_one()

    offset = (page - 1) * per_page
    result = await db.execute(
        select(XPLedger)
        .where(XPLedger.user_id == user_id)
        .order_by(XPLedger.created_at.desc(), XPLedger.id.desc())
        .offset(offset)
        .limit(per_page)
    )
    entries = result.scalars().all()

    return XPHistoryResponse(
        entries=[
            XPHistoryEntry(
                amount=e.amount,
                source=e.source,
                source_id=e.source_id,
                description=e.description,
                created_at=e.created_at,
            )
            for e in entries
        ],
        total=total,
        page=page,
        per_page=per_page,
    )
