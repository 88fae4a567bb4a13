"""Mastery score and status transitions."""

from datetime import datetime, timezone

import pytest

from skillforge.progress.mastery import MasteryPolicy, TopicProgress

NOW = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def policy() -> MasteryPolicy:
    return MasteryPolicy()


class TestMasteryScore:
    def test_no_attempts(self, policy):
        assert policy.mastery(0, 0, 0) == 0

    def test_single_correct_attempt(self, policy):
        # 0.1 * 50 + 1.0 * 30 + (1/3) * 20
        assert policy.mastery(1, 1, 1) == 42

    def test_full_mastery(self, policy):
        assert policy.mastery(10, 10, 3) == 100

    def test_volume_and_spread_cap(self, policy):
        assert policy.mastery(40, 40, 12) == 100

    def test_all_wrong(self, policy):
        # 0 + 0 + (2/3) * 20
        assert policy.mastery(0, 6, 2) == 13


class TestStatus:
    def test_not_started(self, policy):
        assert policy.status(0, 0, 0) == "not_started"

    def test_in_progress_until_every_threshold(self, policy):
        assert policy.status(10, 12, 2) == "in_progress"  # too few days
        assert policy.status(10, 14, 3) == "in_progress"  # accuracy 0.71
        assert policy.status(9, 9, 5) == "in_progress"  # too few correct

    def test_mastered(self, policy):
        assert policy.status(10, 12, 3) == "mastered"


class TestRecorded:
    def test_first_attempt(self, policy):
        progress = TopicProgress(user_id="u1", topic_id="fractions").recorded(True, "2026-03-10", NOW, policy)
        assert progress.total_attempts == 1
        assert progress.correct_attempts == 1
        assert progress.status == "in_progress"
        assert progress.days_practiced == ["2026-03-10"]
        assert progress.last_practiced_at == NOW

    def test_incorrect_attempt_counts_total_only(self, policy):
        progress = TopicProgress(user_id="u1", topic_id="fractions").recorded(False, "2026-03-10", NOW, policy)
        assert progress.total_attempts == 1
        assert progress.correct_attempts == 0
        assert progress.accuracy == 0.0

    def test_same_day_not_duplicated(self, policy):
        progress = TopicProgress(user_id="u1", topic_id="fractions")
        progress = progress.recorded(True, "2026-03-10", NOW, policy)
        progress = progress.recorded(True, "2026-03-10", NOW, policy)
        assert progress.days_practiced == ["2026-03-10"]

    def test_original_untouched(self, policy):
        original = TopicProgress(user_id="u1", topic_id="fractions")
        original.recorded(True, "2026-03-10", NOW, policy)
        assert original.total_attempts == 0
        assert original.days_practiced == []

    def test_reaches_mastery_over_three_days(self, policy):
        progress = TopicProgress(user_id="u1", topic_id="fractions")
        for day in ("2026-03-08", "2026-03-09", "2026-03-10"):
            for _ in range(4):
                progress = progress.recorded(True, day, NOW, policy)
        assert progress.status == "mastered"
        assert progress.mastery == 100

    def test_custom_thresholds(self):
        policy = MasteryPolicy(required_correct=2, required_accuracy=0.5, required_days=1)
        progress = TopicProgress(user_id="u1", topic_id="fractions")
        progress = progress.recorded(True, "2026-03-10", NOW, policy)
        progress = progress.recorded(True, "2026-03-10", NOW, policy)
        assert progress.status == "mastered"
