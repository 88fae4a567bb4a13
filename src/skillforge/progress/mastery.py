"""Per-topic mastery model."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from skillforge.config import Settings

TopicStatus = Literal["not_started", "in_progress", "mastered"]


@dataclass(frozen=True)
class MasteryPolicy:
    """Thresholds a topic must meet to count as mastered."""

    required_correct: int = 10
    required_accuracy: float = 0.8
    required_days: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> MasteryPolicy:
        return cls(
            required_correct=settings.mastery_required_correct,
            required_accuracy=settings.mastery_required_accuracy,
            required_days=settings.mastery_required_days,
        )

    def mastery(self, correct: int, total: int, days: int) -> int:
        """Score 0-100: 50% correct volume, 30% accuracy, 20% day spread."""
        if total <= 0:
            return 0
        accuracy = correct / total
        volume = min(correct / self.required_correct, 1.0) if self.required_correct > 0 else 1.0
        spread = min(days / self.required_days, 1.0) if self.required_days > 0 else 1.0
        return round((volume * 0.5 + accuracy * 0.3 + spread * 0.2) * 100)

    def status(self, correct: int, total: int, days: int) -> TopicStatus:
        if total <= 0:
            return "not_started"
        if (
            correct >= self.required_correct
            and correct / total >= self.required_accuracy
            and days >= self.required_days
        ):
            return "mastered"
        return "in_progress"


@dataclass
class TopicProgress:
    user_id: str
    topic_id: str
    status: TopicStatus = "not_started"
    mastery: int = 0
    correct_attempts: int = 0
    total_attempts: int = 0
    last_practiced_at: datetime | None = None
    days_practiced: list[str] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.correct_attempts / self.total_attempts

    def recorded(
        self,
        is_correct: bool,
        day: str,
        now: datetime,
        policy: MasteryPolicy,
    ) -> TopicProgress:
        """Return a copy with one more attempt applied and status recomputed."""
        correct = self.correct_attempts + (1 if is_correct else 0)
        total = self.total_attempts + 1
        days = list(self.days_practiced)
        if day not in days:
            days.append(day)
        return replace(
            self,
            correct_attempts=correct,
            total_attempts=total,
            days_practiced=days,
            last_practiced_at=now,
            mastery=policy.mastery(correct, total, len(days)),
            status=policy.status(correct, total, len(days)),
        )
