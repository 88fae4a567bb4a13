"""Tests for the gamification endpoints."""

import pytest
from httpx import AsyncClient

from skillforge.gamification.level_thresholds import LEVEL_THRESHOLDS


@pytest.mark.asyncio
async def test_levels_are_public(client: AsyncClient):
    resp = await client.get("/api/v1/gamification/levels")
    assert resp.status_code == 200
    levels = resp.json()["levels"]
    assert len(levels) == len(LEVEL_THRESHOLDS)
    assert levels[0]["level"] == 1
    assert levels[1]["cumulative"] == 100


@pytest.mark.asyncio
async def test_profile_defaults(authed_client: AsyncClient):
    resp = await authed_client.get("/api/v1/gamification/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_xp"] == 0
    assert body["level"] == 1
    assert body["level_title"] == "Beginner"
    assert body["next_level"] == 2
    assert body["is_max_level"] is False
    assert body["current_streak"] == 0


@pytest.mark.asyncio
async def test_profile_after_completed_session(authed_client: AsyncClient):
    session = (await authed_client.post("/api/v1/practice/topics/fractions/sessions", json={"count": 1})).json()
    await authed_client.post(
        f"/api/v1/practice/sessions/{session['id']}/answers",
        json={"problem_id": session["problems"][0]["id"], "is_skipped": True},
    )

    body = (await authed_client.get("/api/v1/gamification/me")).json()
    # skip earns nothing; the streak bonus for day one is 5
    assert body["total_xp"] == 5
    assert body["current_streak"] == 1

    history = (await authed_client.get("/api/v1/gamification/me/xp/history")).json()
    assert history["total"] == 1
    assert history["entries"][0]["amount"] == 5


@pytest.mark.asyncio
async def test_profile_requires_token(client: AsyncClient):
    resp = await client.get("/api/v1/gamification/me")
    assert resp.status_code == 401
