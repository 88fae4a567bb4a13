"""Static topic graph: branches, topics and prerequisite edges."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from skillforge.exceptions import UnknownTopicError

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard")


@dataclass(frozen=True)
class Branch:
    id: str
    name: str
    name_he: str
    order: int


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    name_he: str
    branch_id: str
    order: int
    description: str = ""
    prerequisites: tuple[str, ...] = ()
    difficulty_levels: tuple[Difficulty, ...] = DIFFICULTIES
    keywords: tuple[str, ...] = field(default=())


class TopicGraph:
    """Read-only lookups over the curriculum.

    Prerequisite edges are acyclic by construction; they drive recommendations
    and topic selection, never access control.
    """

    def __init__(self, branches: Iterable[Branch], topics: Iterable[Topic]) -> None:
        self._branches = sorted(branches, key=lambda b: b.order)
        branch_rank = {b.id: i for i, b in enumerate(self._branches)}
        self._topics = sorted(
            topics,
            key=lambda t: (branch_rank.get(t.branch_id, len(branch_rank)), t.order),
        )
        if not self._topics:
            msg = "Topic graph needs at least one topic"
            raise ValueError(msg)
        self._by_id = {t.id: t for t in self._topics}

    @property
    def branches(self) -> list[Branch]:
        return list(self._branches)

    @property
    def topics(self) -> list[Topic]:
        """All topics in branch order, then topic order."""
        return list(self._topics)

    @property
    def default_topic(self) -> Topic:
        return self._topics[0]

    def get(self, topic_id: str) -> Topic | None:
        return self._by_id.get(topic_id)

    def require(self, topic_id: str) -> Topic:
        topic = self._by_id.get(topic_id)
        if topic is None:
            raise UnknownTopicError(topic_id)
        return topic

    def get_branch(self, branch_id: str) -> Branch | None:
        return next((b for b in self._branches if b.id == branch_id), None)

    def by_branch(self, branch_id: str) -> list[Topic]:
        return [t for t in self._topics if t.branch_id == branch_id]

    def prerequisites(self, topic_id: str) -> list[Topic]:
        topic = self._by_id.get(topic_id)
        if topic is None:
            return []
        return [self._by_id[p] for p in topic.prerequisites if p in self._by_id]

    def all_prerequisites(self, topic_id: str) -> list[str]:
        """Transitive prerequisites of a topic, depth-first."""
        topic = self._by_id.get(topic_id)
        if topic is None:
            return []

        seen: dict[str, None] = {}

        def visit(prereqs: tuple[str, ...]) -> None:
            for prereq in prereqs:
                if prereq in seen:
                    continue
                seen[prereq] = None
                child = self._by_id.get(prereq)
                if child is not None:
                    visit(child.prerequisites)

        visit(topic.prerequisites)
        return list(seen)

    def dependents(self, topic_id: str) -> list[Topic]:
        """Topics that list topic_id as a direct prerequisite."""
        return [t for t in self._topics if topic_id in t.prerequisites]
