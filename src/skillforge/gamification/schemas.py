"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    total_xp: int
    level: int
    level_title: str
    level_title_he: str
    xp_into_level: int
    xp_for_level: int
    xp_to_next_level: int
    progress_percent: int
    next_level: int | None = None
    next_title: str | None = None
    is_max_level: bool = False
    current_streak: int = 0
    longest_streak: int = 0
    last_practice_date: str | None = None


class LevelEntry(BaseModel):
    level: int
    title: str
    title_he: str
    cumulative: int


class AllLevelsResponse(BaseModel):
    levels: list[LevelEntry]


class XPHistoryEntry(BaseModel):
    amount: int
    source: str
    source_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


class XPHistoryResponse(BaseModel):
    entries: list[XPHistoryEntry]
    total: int
    page: int
    per_page: int
