"""Text answer checking."""

from __future__ import annotations

import math
import re

NUMERIC_TOLERANCE = 1e-4

_MIXED_NUMBER = re.compile(r"(-?\d+)\s+(\d+)/(\d+)")
_FRACTION = re.compile(r"^(-?\d+)/(-?\d+)$")
_WHITESPACE = re.compile(r"\s+")


def _mixed_to_fraction(match: re.Match[str]) -> str:
    whole, num, den = int(match.group(1)), int(match.group(2)), int(match.group(3))
    sign = -1 if match.group(1).startswith("-") else 1
    return f"{sign * (abs(whole) * den + num)}/{den}"


def normalize_answer(answer: str | None) -> str:
    """Canonical form for comparison.

    "X = 1 1/4" and "5/4" both normalize to "5/4".
    """
    if not answer:
        return ""
    text = answer.lower().strip()
    text = _MIXED_NUMBER.sub(_mixed_to_fraction, text)
    text = _WHITESPACE.sub("", text)
    # each root of "x=-2,x=-3" carries its own prefix
    text = ",".join(part[2:] if part.startswith("x=") else part for part in text.split(","))
    return text.replace("$", "").replace("*", "")


def to_number(text: str) -> float | None:
    """Parse a normalized answer as a fraction or decimal."""
    match = _FRACTION.match(text)
    if match:
        den = int(match.group(2))
        if den == 0:
            return None
        return int(match.group(1)) / den
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def check_answer(user_answer: str | None, correct_answer: str | None) -> bool:
    if not user_answer or not user_answer.strip():
        return False

    user = normalize_answer(user_answer)
    correct = normalize_answer(correct_answer)
    if user == correct:
        return True

    user_value = to_number(user)
    correct_value = to_number(correct)
    if user_value is None or correct_value is None:
        return False
    return abs(user_value - correct_value) < NUMERIC_TOLERANCE
