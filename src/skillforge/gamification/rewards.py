"""Reward arithmetic: per-answer XP, completion bonuses, levels and streak days.

Everything here is pure. Persistence lives in ``xp_service`` and
``streak_service``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skillforge.clock import is_consecutive_day, is_same_day
from skillforge.gamification.level_thresholds import LEVEL_THRESHOLDS, compute_level

if TYPE_CHECKING:
    from skillforge.config import Settings


@dataclass(frozen=True)
class RewardPolicy:
    """Immutable reward table injected into the ledger."""

    base_xp: int = 10
    multipliers: dict[str, float] = field(
        default_factory=lambda: {"easy": 1.0, "medium": 1.5, "hard": 2.0}
    )
    completion_bonus: int = 25
    streak_bonus_per_day: int = 5
    streak_bonus_cap: int = 50
    perfect_day_bonus: int = 15
    levels: tuple[dict, ...] = tuple(LEVEL_THRESHOLDS)

    @classmethod
    def from_settings(cls, settings: Settings) -> RewardPolicy:
        return cls(
            base_xp=settings.xp_base,
            multipliers={
                "easy": settings.xp_multiplier_easy,
                "medium": settings.xp_multiplier_medium,
                "hard": settings.xp_multiplier_hard,
            },
            completion_bonus=settings.xp_completion_bonus,
            streak_bonus_per_day=settings.xp_streak_bonus_per_day,
            streak_bonus_cap=settings.xp_streak_bonus_cap,
            perfect_day_bonus=settings.xp_perfect_day_bonus,
        )


@dataclass(frozen=True)
class CompletionBonus:
    completion: int
    streak: int
    perfect: int

    @property
    def total(self) -> int:
        return self.completion + self.streak + self.perfect


@dataclass(frozen=True)
class StreakUpdate:
    current_streak: int
    longest_streak: int
    last_practice_date: str
    changed: bool


class RewardLedger:
    """XP and level arithmetic over a RewardPolicy."""

    def __init__(self, policy: RewardPolicy | None = None) -> None:
        self.policy = policy or RewardPolicy()

    def xp_for_difficulty(self, difficulty: str) -> int:
        multiplier = self.policy.multipliers.get(difficulty, 1.0)
        # round half up; builtin round() is banker's rounding
        return int(self.policy.base_xp * multiplier + 0.5)

    def answer_xp(self, xp_reward: int, is_correct: bool | None) -> int:
        """XP for one answer. Only a definitely-correct answer earns XP."""
        if is_correct is not True:
            return 0
        return max(xp_reward, 0)

    def streak_bonus(self, streak_days: int) -> int:
        if streak_days <= 0:
            return 0
        return min(streak_days * self.policy.streak_bonus_per_day, self.policy.streak_bonus_cap)

    def completion_bonus(self, streak_days: int, all_correct: bool) -> CompletionBonus:
        return CompletionBonus(
            completion=self.policy.completion_bonus,
            streak=self.streak_bonus(streak_days),
            perfect=self.policy.perfect_day_bonus if all_correct else 0,
        )

    def level_for(self, total_xp: int) -> int:
        return compute_level(total_xp, list(self.policy.levels))["level"]

    def level_info(self, total_xp: int) -> dict:
        return compute_level(total_xp, list(self.policy.levels))

    @property
    def levels(self) -> list[dict]:
        return [dict(entry) for entry in self.policy.levels]


def next_streak(
    last_practice_date: str | None,
    current_streak: int,
    longest_streak: int,
    today: str,
) -> StreakUpdate:
    """Apply one day of practice to a streak.

    Same day leaves the streak alone, the next calendar day extends it, and
    any longer gap restarts it at 1.
    """
    if is_same_day(last_practice_date, today):
        return StreakUpdate(
            current_streak=max(current_streak, 1),
            longest_streak=max(longest_streak, current_streak, 1),
            last_practice_date=today,
            changed=False,
        )

    streak = current_streak + 1 if is_consecutive_day(last_practice_date, today) else 1
    return StreakUpdate(
        current_streak=streak,
        longest_streak=max(longest_streak, streak),
        last_practice_date=today,
        changed=True,
    )
