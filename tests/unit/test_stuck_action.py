"""Stuck thresholds."""

import pytest

from skillforge.practice.base import stuck_action


@pytest.mark.parametrize(
    ("consecutive", "expected"),
    [
        (0, "continue"),
        (4, "continue"),
        (5, "review_hint"),
        (6, "try_easier"),
        (7, "try_easier"),
        (8, "take_break"),
        (15, "take_break"),
    ],
)
def test_default_threshold(consecutive, expected):
    assert stuck_action(consecutive) == expected


def test_custom_threshold():
    assert stuck_action(3, threshold=3) == "review_hint"
    assert stuck_action(2, threshold=3) == "continue"
