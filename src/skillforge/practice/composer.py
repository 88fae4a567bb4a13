"""Set composition: choose focus, review and foundation topics and emit slot requests."""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from skillforge.practice.types import SlotRequest
from skillforge.progress.mastery import TopicProgress
from skillforge.topics.graph import Topic, TopicGraph

# Slot order used when sizing a layout to a user's preference
_SLOT_PATTERN = (
    "core", "review", "challenge", "core", "review",
    "foundation", "core", "review", "challenge", "foundation",
)

MIN_PROBLEMS = 1
MAX_PROBLEMS = 10

_TOPIC_PRACTICE_MIX = ("easy", "easy", "medium", "medium", "hard")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class SlotLayout:
    review: int = 2
    core: int = 2
    foundation: int = 0
    challenge: int = 1

    @property
    def total(self) -> int:
        return self.review + self.core + self.foundation + self.challenge

    @classmethod
    def for_total(cls, total: int | None) -> SlotLayout:
        """Layout for a per-day problem count, clamped to 1..10.

        Five problems gives the default 2/2/0/1.
        """
        if total is None:
            return cls()
        total = max(MIN_PROBLEMS, min(MAX_PROBLEMS, total))
        picked = _SLOT_PATTERN[:total]
        return cls(
            review=picked.count("review"),
            core=picked.count("core"),
            foundation=picked.count("foundation"),
            challenge=picked.count("challenge"),
        )


@dataclass(frozen=True)
class Composition:
    focus: Topic
    review: Topic
    foundation: Topic
    requests: list[SlotRequest]


def pick_focus_topic(graph: TopicGraph, snapshot: Mapping[str, TopicProgress]) -> Topic:
    """First in-progress topic, else the first untouched one, else the default."""
    for topic in graph.topics:
        progress = snapshot.get(topic.id)
        if progress is not None and progress.status == "in_progress":
            return topic
    for topic in graph.topics:
        progress = snapshot.get(topic.id)
        if progress is None or progress.status == "not_started":
            return topic
    return graph.default_topic


class SetComposer:
    def __init__(
        self,
        graph: TopicGraph,
        rng: random.Random | None = None,
        review_threshold: int = 50,
        foundational_branch_id: str = "foundations",
    ) -> None:
        self.graph = graph
        self.rng = rng or random.Random()
        self.review_threshold = review_threshold
        self.foundational_branch_id = foundational_branch_id

    def pick_focus(self, snapshot: Mapping[str, TopicProgress]) -> Topic:
        return pick_focus_topic(self.graph, snapshot)

    def pick_review(self, snapshot: Mapping[str, TopicProgress]) -> Topic:
        candidates = [
            (self.graph.get(p.topic_id), p)
            for p in snapshot.values()
            if p.total_attempts > 0 and p.mastery >= self.review_threshold
        ]
        candidates = [(t, p) for t, p in candidates if t is not None]
        if candidates:
            # oldest practice first, never-practiced first of all, then weakest
            candidates.sort(key=lambda tp: (tp[1].last_practiced_at or _EPOCH, tp[1].mastery))
            return candidates[0][0]

        touched = [
            t for t in (self.graph.get(p.topic_id) for p in snapshot.values() if p.total_attempts > 0)
            if t is not None
        ]
        if touched:
            return self.rng.choice(touched)
        return self.graph.default_topic

    def pick_foundation(self, focus: Topic) -> Topic:
        prereqs = self.graph.prerequisites(focus.id)
        if prereqs:
            return self.rng.choice(prereqs)
        foundational = self.graph.by_branch(self.foundational_branch_id)
        if foundational:
            return self.rng.choice(foundational)
        return self.graph.default_topic

    def compose(
        self,
        snapshot: Mapping[str, TopicProgress],
        layout: SlotLayout | None = None,
        focus_topic_id: str | None = None,
    ) -> Composition:
        """Pick topics and emit requests in review, core, foundation, challenge order."""
        layout = layout or SlotLayout()
        focus = self.graph.require(focus_topic_id) if focus_topic_id else self.pick_focus(snapshot)
        review = self.pick_review(snapshot)
        foundation = self.pick_foundation(focus)

        requests: list[SlotRequest] = []
        requests += [SlotRequest(review.id, "easy", "review")] * layout.review
        requests += [SlotRequest(focus.id, "medium", "core")] * layout.core
        requests += [SlotRequest(foundation.id, "easy", "foundation")] * layout.foundation
        requests += [SlotRequest(focus.id, "hard", "challenge")] * layout.challenge
        return Composition(focus=focus, review=review, foundation=foundation, requests=requests)

    def compose_topic_practice(
        self,
        topic: Topic,
        count: int = 5,
        difficulty: str | None = None,
    ) -> list[SlotRequest]:
        """Requests for a single-topic session, shuffled.

        Without a fixed difficulty the mix is two easy, two medium and one
        hard, repeated or truncated to ``count``.
        """
        count = max(MIN_PROBLEMS, min(MAX_PROBLEMS, count))
        if difficulty is not None:
            levels = [difficulty] * count
        else:
            levels = [_TOPIC_PRACTICE_MIX[i % len(_TOPIC_PRACTICE_MIX)] for i in range(count)]
        requests = [
            SlotRequest(topic.id, level, "challenge" if level == "hard" else "core")
            for level in levels
        ]
        self.rng.shuffle(requests)
        return requests
