"""Tests for single-topic practice sessions."""

import asyncio
from collections import Counter
from datetime import timedelta

import pytest
from sqlalchemy import select

from skillforge.db.models import UserProfile, XPLedger
from skillforge.exceptions import UnknownTopicError
from tests.helpers import NOW

USER = "learner-1"


class TestStartSession:
    @pytest.mark.asyncio
    async def test_default_mix(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", now=NOW)

        assert session.total_problems == 5
        assert session.topic_id == "fractions"
        assert all(p.topic_id == "fractions" for p in session.problems)
        assert Counter(p.difficulty for p in session.problems) == {"easy": 2, "medium": 2, "hard": 1}
        assert session.is_completed is False

    @pytest.mark.asyncio
    async def test_count_and_difficulty(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", count=3, difficulty="hard", now=NOW)

        assert session.total_problems == 3
        assert {p.difficulty for p in session.problems} == {"hard"}
        assert {p.slot for p in session.problems} == {"challenge"}

    @pytest.mark.asyncio
    async def test_unknown_topic(self, make_practice_service):
        with pytest.raises(UnknownTopicError):
            await make_practice_service().start_session(USER, "no-such-topic")

    @pytest.mark.asyncio
    async def test_session_is_private(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", now=NOW)
        assert (await svc.get_session(USER, session.id)).id == session.id
        assert await svc.get_session("learner-2", session.id) is None


class TestSessionCompletion:
    @pytest.mark.asyncio
    async def test_no_flat_completion_bonus(self, make_practice_service, db_session):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", now=NOW)

        last = None
        for problem in session.problems:
            last = await svc.submit_answer(
                USER, session.id, problem.id, answer_text=problem.correct_answer, now=NOW
            )

        assert last.set_completed is True
        assert last.bonus.completion == 0
        assert last.bonus.streak == 5
        assert last.bonus.perfect == 15

        answer_xp = sum(p.xp_reward for p in session.problems)
        done = await svc.get_session(USER, session.id)
        assert done.is_completed is True
        assert done.xp_earned == answer_xp + 20

        profile = await db_session.get(UserProfile, USER, populate_existing=True)
        assert profile.total_xp == answer_xp + 20
        assert profile.current_streak == 1

        keys = (await db_session.execute(select(XPLedger.idempotency_key))).scalars().all()
        assert f"practice-complete:{session.id}" in keys
        assert all(not k.startswith("daily-complete:") for k in keys)

    @pytest.mark.asyncio
    async def test_attempts_are_tagged_as_practice(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", now=NOW)
        problem = session.problems[0]

        await svc.submit_answer(USER, session.id, problem.id, answer_text=problem.correct_answer, now=NOW)

        attempts = await svc.repo.list_attempts(USER, session.id)
        assert [a.set_kind for a in attempts] == ["practice"]
        progress = await svc.tracker.snapshot(USER)
        assert progress["fractions"].correct_attempts == 1

    @pytest.mark.asyncio
    async def test_concurrent_final_answers_complete_once(self, make_practice_service, session_factory):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", count=2, now=NOW)

        async def answer(problem):
            async with session_factory() as db:
                return await make_practice_service(db=db).submit_answer(
                    USER, session.id, problem.id, answer_text=problem.correct_answer, now=NOW
                )

        results = await asyncio.gather(*(answer(p) for p in session.problems))

        assert sorted(r.set_completed for r in results) == [False, True]
        done = await svc.get_session(USER, session.id)
        assert done.completed_count == 2
        assert done.is_completed is True
        assert done.bonus_awarded is True


class TestStuckDetection:
    @pytest.mark.asyncio
    async def test_fifth_wrong_answer_flags_stuck(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", count=7, now=NOW)

        results = []
        for i, problem in enumerate(session.problems[:5]):
            results.append(
                await svc.submit_answer(
                    USER, session.id, problem.id, answer_text="wrong", now=NOW + timedelta(minutes=i)
                )
            )

        assert [r.stuck.is_stuck for r in results] == [False, False, False, False, True]
        assert results[-1].stuck.consecutive_incorrect == 5
        assert results[-1].stuck.recommended_action == "review_hint"
        assert len(results[-1].stuck.suggestions) == 3

    @pytest.mark.asyncio
    async def test_skips_do_not_reset_the_run(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", count=7, now=NOW)
        problems = session.problems

        for i in range(3):
            await svc.submit_answer(USER, session.id, problems[i].id, answer_text="wrong", now=NOW + timedelta(minutes=i))
        await svc.submit_answer(USER, session.id, problems[3].id, is_skipped=True, now=NOW + timedelta(minutes=3))
        await svc.submit_answer(USER, session.id, problems[4].id, answer_text="wrong", now=NOW + timedelta(minutes=4))
        result = await svc.submit_answer(
            USER, session.id, problems[5].id, answer_text="wrong", now=NOW + timedelta(minutes=5)
        )

        assert result.stuck.consecutive_incorrect == 5
        assert result.stuck.is_stuck is True

    @pytest.mark.asyncio
    async def test_correct_answer_resets_the_run(self, make_practice_service):
        svc = make_practice_service()
        session = await svc.start_session(USER, "fractions", count=7, now=NOW)
        problems = session.problems

        for i in range(4):
            await svc.submit_answer(USER, session.id, problems[i].id, answer_text="wrong", now=NOW + timedelta(minutes=i))
        await svc.submit_answer(
            USER, session.id, problems[4].id, answer_text=problems[4].correct_answer, now=NOW + timedelta(minutes=4)
        )

        info = await svc.check_if_stuck(USER, "fractions")
        assert info.is_stuck is False
        assert info.consecutive_incorrect == 0


class TestSessionLists:
    @pytest.mark.asyncio
    async def test_active_and_history(self, make_practice_service):
        svc = make_practice_service()
        open_session = await svc.start_session(USER, "fractions", count=1, now=NOW)
        finished = await svc.start_session(USER, "fractions", count=1, now=NOW + timedelta(minutes=1))
        await svc.submit_answer(USER, finished.id, finished.problems[0].id, is_skipped=True, now=NOW)

        assert [s.id for s in await svc.active_sessions(USER)] == [open_session.id]
        assert [s.id for s in await svc.session_history(USER)] == [finished.id]
        assert await svc.active_sessions("learner-2") == []
