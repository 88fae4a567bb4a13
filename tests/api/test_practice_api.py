"""Tests for the practice endpoints."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from skillforge.practice.repository import PracticeRepository
from tests.helpers import make_token


async def _correct_answers(session_factory, set_id: str) -> dict[str, str]:
    async with session_factory() as db:
        daily = await PracticeRepository(db).get_daily_set(set_id)
    return {p.id: p.correct_answer for p in daily.problems}


class TestAuth:
    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        resp = await client.get("/api/v1/practice/today")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_rejects_expired_token(self, client: AsyncClient):
        token = make_token("learner-1", expires_in=timedelta(seconds=-10))
        resp = await client.get("/api/v1/practice/today", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestToday:
    @pytest.mark.asyncio
    async def test_returns_set_without_answers(self, authed_client: AsyncClient):
        resp = await authed_client.get("/api/v1/practice/today")
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_problems"] == 5
        assert len(body["problems"]) == 5
        assert all("correct_answer" not in p for p in body["problems"])
        assert all("solution_steps" not in p for p in body["problems"])

    @pytest.mark.asyncio
    async def test_is_stable_across_requests(self, authed_client: AsyncClient):
        first = (await authed_client.get("/api/v1/practice/today")).json()
        second = (await authed_client.get("/api/v1/practice/today")).json()
        assert first["id"] == second["id"]

    @pytest.mark.asyncio
    async def test_focus_topic(self, authed_client: AsyncClient):
        resp = await authed_client.get("/api/v1/practice/today", params={"focus_topic_id": "fractions"})
        assert resp.status_code == 200
        assert resp.json()["focus_topic_id"] == "fractions"

    @pytest.mark.asyncio
    async def test_unknown_focus_topic(self, authed_client: AsyncClient):
        resp = await authed_client.get("/api/v1/practice/today", params={"focus_topic_id": "nope"})
        assert resp.status_code == 404
        assert resp.json()["topic_id"] == "nope"


class TestAnswers:
    @pytest.mark.asyncio
    async def test_submit_and_review(self, authed_client: AsyncClient, session_factory):
        daily = (await authed_client.get("/api/v1/practice/today")).json()
        answers = await _correct_answers(session_factory, daily["id"])
        first, second = daily["problems"][0], daily["problems"][1]

        resp = await authed_client.post(
            f"/api/v1/practice/sets/{daily['id']}/answers",
            json={"problem_id": first["id"], "answer_text": answers[first["id"]]},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["is_correct"] is True
        assert body["xp_earned"] == first["xp_reward"]

        wrong = await authed_client.post(
            f"/api/v1/practice/sets/{daily['id']}/answers",
            json={"problem_id": second["id"], "answer_text": "definitely wrong"},
        )
        assert wrong.json()["is_correct"] is False
        assert wrong.json()["stuck"]["is_stuck"] is False

        attempts = await authed_client.get(f"/api/v1/practice/sets/{daily['id']}/attempts")
        assert attempts.status_code == 200
        review = attempts.json()
        assert len(review["attempts"]) == 2
        assert {s["id"] for s in review["solutions"]} == {first["id"], second["id"]}
        assert all(s["correct_answer"] for s in review["solutions"])

    @pytest.mark.asyncio
    async def test_resubmission(self, authed_client: AsyncClient):
        daily = (await authed_client.get("/api/v1/practice/today")).json()
        payload = {"problem_id": daily["problems"][0]["id"], "is_skipped": True}
        url = f"/api/v1/practice/sets/{daily['id']}/answers"

        await authed_client.post(url, json=payload)
        again = await authed_client.post(url, json=payload)
        assert again.status_code == 200
        assert again.json()["already_answered"] is True
        assert again.json()["xp_earned"] == 0

    @pytest.mark.asyncio
    async def test_unknown_problem(self, authed_client: AsyncClient):
        daily = (await authed_client.get("/api/v1/practice/today")).json()
        resp = await authed_client.post(
            f"/api/v1/practice/sets/{daily['id']}/answers",
            json={"problem_id": "missing", "answer_text": "1"},
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Problem not found"

    @pytest.mark.asyncio
    async def test_unknown_set(self, authed_client: AsyncClient):
        resp = await authed_client.post(
            "/api/v1/practice/sets/missing/answers", json={"problem_id": "p", "answer_text": "1"}
        )
        assert resp.status_code == 404
        attempts = await authed_client.get("/api/v1/practice/sets/missing/attempts")
        assert attempts.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_locale(self, authed_client: AsyncClient):
        resp = await authed_client.post(
            "/api/v1/practice/sets/any/answers", json={"problem_id": "p", "answer_text": "1", "locale": "fr"}
        )
        assert resp.status_code == 422


class TestHistory:
    @pytest.mark.asyncio
    async def test_history_lists_today(self, authed_client: AsyncClient):
        daily = (await authed_client.get("/api/v1/practice/today")).json()
        resp = await authed_client.get("/api/v1/practice/history")
        assert resp.status_code == 200
        sets = resp.json()["sets"]
        assert [s["id"] for s in sets] == [daily["id"]]
        assert sets[0]["total_problems"] == 5


class TestSessions:
    @pytest.mark.asyncio
    async def test_session_lifecycle(self, authed_client: AsyncClient):
        resp = await authed_client.post(
            "/api/v1/practice/topics/fractions/sessions", json={"count": 2, "difficulty": "easy"}
        )
        assert resp.status_code == 201
        session = resp.json()
        assert session["total_problems"] == 2
        assert all(p["difficulty"] == "easy" for p in session["problems"])

        active = await authed_client.get("/api/v1/practice/sessions")
        assert [s["id"] for s in active.json()] == [session["id"]]

        for problem in session["problems"]:
            answer = await authed_client.post(
                f"/api/v1/practice/sessions/{session['id']}/answers",
                json={"problem_id": problem["id"], "is_skipped": True},
            )
            assert answer.status_code == 200

        assert answer.json()["set_completed"] is True
        assert answer.json()["bonus"]["completion"] == 0

        fetched = await authed_client.get(f"/api/v1/practice/sessions/{session['id']}")
        assert fetched.json()["is_completed"] is True
        assert (await authed_client.get("/api/v1/practice/sessions")).json() == []

    @pytest.mark.asyncio
    async def test_session_without_body(self, authed_client: AsyncClient):
        resp = await authed_client.post("/api/v1/practice/topics/fractions/sessions")
        assert resp.status_code == 201
        assert resp.json()["total_problems"] == 5

    @pytest.mark.asyncio
    async def test_unknown_topic(self, authed_client: AsyncClient):
        resp = await authed_client.post("/api/v1/practice/topics/nope/sessions")
        assert resp.status_code == 404
        assert resp.json()["topic_id"] == "nope"

    @pytest.mark.asyncio
    async def test_invalid_count(self, authed_client: AsyncClient):
        resp = await authed_client.post("/api/v1/practice/topics/fractions/sessions", json={"count": 50})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_session(self, authed_client: AsyncClient):
        resp = await authed_client.get("/api/v1/practice/sessions/missing")
        assert resp.status_code == 404
