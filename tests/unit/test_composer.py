"""Set composition: topic selection and slot layout."""

import random
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from skillforge.exceptions import UnknownTopicError
from skillforge.practice.composer import SetComposer, SlotLayout, pick_focus_topic
from skillforge.progress.mastery import TopicProgress
from skillforge.topics.catalog import get_topic_graph

NOW = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)


def _progress(topic_id: str, status: str = "in_progress", mastery: int = 40, **kwargs) -> TopicProgress:
    return TopicProgress(
        user_id="u1",
        topic_id=topic_id,
        status=status,
        mastery=mastery,
        correct_attempts=kwargs.pop("correct_attempts", 4),
        total_attempts=kwargs.pop("total_attempts", 5),
        last_practiced_at=kwargs.pop("last_practiced_at", NOW),
        **kwargs,
    )


@pytest.fixture
def graph():
    return get_topic_graph()


@pytest.fixture
def composer(graph):
    return SetComposer(graph, rng=random.Random(42))


class TestSlotLayout:
    def test_default(self):
        layout = SlotLayout()
        assert (layout.review, layout.core, layout.foundation, layout.challenge) == (2, 2, 0, 1)
        assert layout.total == 5

    def test_five_matches_default(self):
        assert SlotLayout.for_total(5) == SlotLayout()

    def test_none_is_default(self):
        assert SlotLayout.for_total(None) == SlotLayout()

    def test_ten(self):
        layout = SlotLayout.for_total(10)
        assert (layout.review, layout.core, layout.foundation, layout.challenge) == (3, 3, 2, 2)

    @pytest.mark.parametrize(("requested", "expected"), [(0, 1), (-3, 1), (1, 1), (25, 10)])
    def test_clamped(self, requested, expected):
        assert SlotLayout.for_total(requested).total == expected


class TestFocus:
    def test_new_user_starts_at_first_topic(self, graph):
        assert pick_focus_topic(graph, {}).id == "order-of-operations"

    def test_in_progress_topic_wins(self, graph):
        snapshot = {
            "order-of-operations": _progress("order-of-operations", status="mastered", mastery=100),
            "fractions": _progress("fractions", status="in_progress"),
        }
        assert pick_focus_topic(graph, snapshot).id == "fractions"

    def test_first_untouched_after_mastered(self, graph):
        snapshot = {"order-of-operations": _progress("order-of-operations", status="mastered", mastery=100)}
        assert pick_focus_topic(graph, snapshot).id == "fractions"

    def test_everything_mastered_falls_back_to_default(self, graph):
        snapshot = {t.id: _progress(t.id, status="mastered", mastery=100) for t in graph.topics}
        assert pick_focus_topic(graph, snapshot).id == graph.default_topic.id


class TestReview:
    def test_oldest_qualifying_topic(self, composer):
        snapshot = {
            "fractions": _progress("fractions", mastery=70, last_practiced_at=NOW - timedelta(days=1)),
            "negative-numbers": _progress("negative-numbers", mastery=60, last_practiced_at=NOW - timedelta(days=5)),
            "order-of-operations": _progress("order-of-operations", mastery=30, last_practiced_at=NOW - timedelta(days=9)),
        }
        assert composer.pick_review(snapshot).id == "negative-numbers"

    def test_ties_broken_by_lower_mastery(self, composer):
        snapshot = {
            "fractions": _progress("fractions", mastery=90),
            "negative-numbers": _progress("negative-numbers", mastery=55),
        }
        assert composer.pick_review(snapshot).id == "negative-numbers"

    def test_falls_back_to_touched_topic(self, composer):
        snapshot = {"fractions": _progress("fractions", mastery=20)}
        assert composer.pick_review(snapshot).id == "fractions"

    def test_new_user_reviews_default(self, composer, graph):
        assert composer.pick_review({}).id == graph.default_topic.id


class TestFoundation:
    def test_prerequisite_of_focus(self, composer, graph):
        topic = composer.pick_foundation(graph.require("basic-equations"))
        assert topic.id in {"order-of-operations", "negative-numbers"}

    def test_foundational_branch_without_prerequisites(self, composer, graph):
        topic = composer.pick_foundation(graph.require("order-of-operations"))
        assert topic.branch_id == "foundations"


class TestCompose:
    def test_new_user_default_set(self, composer):
        composition = composer.compose({})
        slots = [r.slot for r in composition.requests]
        assert slots == ["review", "review", "core", "core", "challenge"]
        assert composition.focus.id == "order-of-operations"

        by_slot = {r.slot: r for r in composition.requests}
        assert by_slot["review"].difficulty == "easy"
        assert by_slot["core"].difficulty == "medium"
        assert by_slot["challenge"].difficulty == "hard"
        assert by_slot["core"].topic_id == by_slot["challenge"].topic_id == composition.focus.id

    def test_explicit_focus(self, composer):
        composition = composer.compose({}, focus_topic_id="quadratic-formula")
        assert composition.focus.id == "quadratic-formula"
        core = [r for r in composition.requests if r.slot in ("core", "challenge")]
        assert all(r.topic_id == "quadratic-formula" for r in core)

    def test_unknown_focus(self, composer):
        with pytest.raises(UnknownTopicError):
            composer.compose({}, focus_topic_id="calculus")

    def test_foundation_slots(self, composer):
        composition = composer.compose({}, SlotLayout.for_total(10), focus_topic_id="linear-equations-one-var")
        foundation = [r for r in composition.requests if r.slot == "foundation"]
        assert len(foundation) == 2
        assert all(r.topic_id == "basic-equations" and r.difficulty == "easy" for r in foundation)
        assert len(composition.requests) == 10


class TestTopicPractice:
    def test_default_mix(self, composer, graph):
        requests = composer.compose_topic_practice(graph.require("fractions"))
        assert Counter(r.difficulty for r in requests) == {"easy": 2, "medium": 2, "hard": 1}
        assert all(r.topic_id == "fractions" for r in requests)
        assert all((r.slot == "challenge") == (r.difficulty == "hard") for r in requests)

    def test_fixed_difficulty(self, composer, graph):
        requests = composer.compose_topic_practice(graph.require("fractions"), count=3, difficulty="medium")
        assert [r.difficulty for r in requests] == ["medium"] * 3

    def test_count_clamped(self, composer, graph):
        assert len(composer.compose_topic_practice(graph.require("fractions"), count=50)) == 10
