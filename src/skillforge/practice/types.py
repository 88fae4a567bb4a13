"""Typed practice entities.

These are what the services work with. ``skillforge.practice.repository``
converts them to and from ORM records.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from skillforge.gamification.rewards import CompletionBonus

SlotKind = Literal["review", "core", "foundation", "challenge"]
ProblemSource = Literal["generated", "bank", "placeholder"]
AnswerType = Literal["text", "image", "skipped"]
SetKind = Literal["daily", "practice"]
StuckAction = Literal["continue", "review_hint", "try_easier", "take_break"]


@dataclass(frozen=True)
class SlotRequest:
    topic_id: str
    difficulty: str
    slot: SlotKind


@dataclass
class Problem:
    """Snapshot of a problem embedded in a set at creation time."""

    id: str
    topic_id: str
    topic_name: str
    topic_name_he: str
    slot: SlotKind
    difficulty: str
    question_text: str
    question_text_he: str = ""
    question_latex: str | None = None
    correct_answer: str = ""
    answer_type: str = "expression"
    solution_steps: list[str] = field(default_factory=list)
    solution_steps_he: list[str] = field(default_factory=list)
    hint: str | None = None
    hint_he: str | None = None
    estimated_minutes: int = 3
    xp_reward: int = 10
    source: ProblemSource = "placeholder"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Problem:
        known = cls.__dataclass_fields__
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class DailySet:
    id: str
    user_id: str
    date: str
    problems: list[Problem]
    focus_topic_id: str
    focus_topic_name: str
    current_index: int = 0
    completed_count: int = 0
    is_completed: bool = False
    completed_at: datetime | None = None
    xp_earned: int = 0
    generated_count: int = 0
    bank_count: int = 0
    placeholder_count: int = 0
    bonus_awarded: bool = False
    created_at: datetime | None = None

    @property
    def total_problems(self) -> int:
        return len(self.problems)

    def find_problem(self, problem_id: str) -> Problem | None:
        return next((p for p in self.problems if p.id == problem_id), None)


@dataclass
class PracticeSession:
    id: str
    user_id: str
    topic_id: str
    topic_name: str
    topic_name_he: str
    problems: list[Problem]
    current_index: int = 0
    completed_count: int = 0
    is_completed: bool = False
    completed_at: datetime | None = None
    xp_earned: int = 0
    bonus_awarded: bool = False
    created_at: datetime | None = None

    @property
    def total_problems(self) -> int:
        return len(self.problems)

    def find_problem(self, problem_id: str) -> Problem | None:
        return next((p for p in self.problems if p.id == problem_id), None)


@dataclass
class ProblemAttempt:
    id: str
    user_id: str
    set_id: str
    problem_id: str
    topic_id: str
    answer_type: AnswerType
    set_kind: SetKind = "daily"
    answer_text: str | None = None
    answer_image_url: str | None = None
    is_correct: bool | None = None
    ai_feedback: str | None = None
    xp_earned: int = 0
    started_at: datetime | None = None
    submitted_at: datetime | None = None


@dataclass(frozen=True)
class StuckInfo:
    is_stuck: bool
    consecutive_incorrect: int
    recommended_action: StuckAction = "continue"
    suggestions: tuple[str, ...] = ()
    suggestions_he: tuple[str, ...] = ()


@dataclass
class SubmissionResult:
    success: bool
    already_answered: bool = False
    is_correct: bool | None = None
    xp_earned: int = 0
    feedback: str | None = None
    extracted_answer: str | None = None
    set_completed: bool = False
    bonus: CompletionBonus | None = None
    leveled_up: bool = False
    new_level: int | None = None
    stuck: StuckInfo | None = None
    error: str | None = None
