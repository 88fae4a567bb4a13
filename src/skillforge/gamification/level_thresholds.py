"""Level thresholds and computation.

Thresholds are cumulative total XP. Titles are shown in both supported
locales and must match the web client's level table.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Beginner", "title_he": "מתחיל", "cumulative": 0},
    {"level": 2, "title": "Student", "title_he": "תלמיד", "cumulative": 100},
    {"level": 3, "title": "Learner", "title_he": "לומד", "cumulative": 250},
    {"level": 4, "title": "Practitioner", "title_he": "מתרגל", "cumulative": 500},
    {"level": 5, "title": "Scholar", "title_he": "חוקר", "cumulative": 1000},
    {"level": 6, "title": "Expert", "title_he": "מומחה", "cumulative": 2000},
    {"level": 7, "title": "Master", "title_he": "אמן", "cumulative": 3500},
    {"level": 8, "title": "Grandmaster", "title_he": "רב אמן", "cumulative": 5500},
    {"level": 9, "title": "Legend", "title_he": "אגדה", "cumulative": 8000},
    {"level": 10, "title": "Sage", "title_he": "חכם", "cumulative": 10000},
]


def compute_level(total_xp: int, thresholds: list[dict] | None = None) -> dict:
    """Compute level info from total XP.

    The level is the highest entry whose cumulative threshold is <= total_xp.
    At the top level, progress is reported as 100%.
    """
    table = thresholds or LEVEL_THRESHOLDS
    total_xp = max(total_xp, 0)

    index = 0
    for i, entry in enumerate(table):
        if total_xp >= entry["cumulative"]:
            index = i

    current = table[index]
    is_max = index == len(table) - 1
    next_level = current if is_max else table[index + 1]

    xp_into_level = total_xp - current["cumulative"]
    xp_for_level = next_level["cumulative"] - current["cumulative"]

    if is_max or xp_for_level <= 0:
        progress = 100
        xp_to_next = 0
    else:
        progress = min(100, round(xp_into_level / xp_for_level * 100))
        xp_to_next = next_level["cumulative"] - total_xp

    return {
        "level": current["level"],
        "title": current["title"],
        "title_he": current["title_he"],
        "xp_into_level": xp_into_level,
        "xp_for_level": xp_for_level,
        "xp_to_next_level": xp_to_next,
        "progress_percent": progress,
        "next_level": next_level["level"],
        "next_title": next_level["title"],
        "is_max_level": is_max,
    }
