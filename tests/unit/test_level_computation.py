"""Level computation tests: must match the web client's level table."""

from skillforge.gamification.level_thresholds import LEVEL_THRESHOLDS, compute_level


class TestLevelComputation:
    def test_level_1_at_zero_xp(self):
        result = compute_level(0)
        assert result["level"] == 1
        assert result["title"] == "Beginner"
        assert result["title_he"] == "מתחיל"

    def test_level_boundary_99_xp(self):
        """99 XP is still level 1."""
        assert compute_level(99)["level"] == 1

    def test_level_2_at_100_xp(self):
        result = compute_level(100)
        assert result["level"] == 2
        assert result["title"] == "Student"

    def test_xp_into_level_calculation(self):
        result = compute_level(175)  # 75 XP into level 2
        assert result["xp_into_level"] == 75
        assert result["xp_for_level"] == 150  # 250 - 100
        assert result["xp_to_next_level"] == 75
        assert result["progress_percent"] == 50
        assert result["next_level"] == 3
        assert result["next_title"] == "Learner"

    def test_max_level(self):
        result = compute_level(25000)
        assert result["level"] == 10
        assert result["title"] == "Sage"
        assert result["is_max_level"] is True
        assert result["progress_percent"] == 100
        assert result["xp_to_next_level"] == 0

    def test_negative_xp_treated_as_zero(self):
        assert compute_level(-50)["level"] == 1

    def test_thresholds_are_increasing(self):
        cumulative = [t["cumulative"] for t in LEVEL_THRESHOLDS]
        assert cumulative == sorted(cumulative)
        assert [t["level"] for t in LEVEL_THRESHOLDS] == list(range(1, 11))
