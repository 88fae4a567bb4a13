"""Deterministic placeholder problems, the last step of the content chain."""

from __future__ import annotations

import uuid

from skillforge.practice.types import Problem, SlotKind
from skillforge.topics.graph import Topic

_DIFFICULTY_INDEX = {"easy": 0, "medium": 1, "hard": 2}
_DIFFICULTY_HE = {"easy": "קל", "medium": "בינוני", "hard": "קשה"}

ESTIMATED_MINUTES = {"easy": 2, "medium": 3, "hard": 5}

# (question, answer) per topic, ordered easy, medium, hard
TEMPLATES: dict[str, list[tuple[str, str]]] = {
    "order-of-operations": [
        ("Evaluate: 3 + 4 × 2", "11"),
        ("Evaluate: (8 + 2) × 5 - 3", "47"),
        ("Evaluate: 2³ + 4 × (6 - 2)", "40"),
    ],
    "basic-equations": [
        ("Solve for x: x + 5 = 12", "7"),
        ("Solve for x: 2x - 3 = 7", "5"),
        ("Solve for x: 3x + 4 = 2x + 9", "5"),
    ],
    "linear-equations-one-var": [
        ("Solve: 2x + 5 = 13", "4"),
        ("Solve: 3(x - 2) = 12", "6"),
        ("Solve: 4x - 7 = 2x + 9", "8"),
    ],
    "factoring-basics": [
        ("Factor: x² - 9", "(x+3)(x-3)"),
        ("Factor: 2x² + 6x", "2x(x+3)"),
        ("Factor: x² - 4x + 4", "(x-2)²"),
    ],
    "factoring-trinomials": [
        ("Factor: x² + 5x + 6", "(x+2)(x+3)"),
        ("Factor: x² + 7x + 12", "(x+3)(x+4)"),
        ("Factor: x² - x - 6", "(x-3)(x+2)"),
    ],
    "quadratic-by-factoring": [
        ("Solve: x² + 5x + 6 = 0", "x=-2, x=-3"),
        ("Solve: x² - 4x - 5 = 0", "x=-1, x=5"),
        ("Solve: x² + 2x - 15 = 0", "x=-5, x=3"),
    ],
    "quadratic-formula": [
        ("Solve using the quadratic formula: x² + 2x - 3 = 0", "x=1, x=-3"),
        ("Solve: 2x² - 5x + 2 = 0", "x=2, x=0.5"),
        ("Solve: x² - 4x + 1 = 0", "x=2±√3"),
    ],
}

LATEX: dict[str, str] = {
    "factoring-trinomials": "x^2 + 7x + 12",
    "quadratic-formula": "x^2 + 2x - 3 = 0",
    "quadratic-by-factoring": "x^2 + 5x + 6 = 0",
}

# Used for topics without their own templates
GENERIC: dict[str, tuple[str, str, str]] = {
    "easy": ("Simplify: 2x + 3x", "פשט: 2x + 3x", "5x"),
    "medium": ("Solve for x: 2x + 5 = 13", "פתור עבור x: 2x + 5 = 13", "4"),
    "hard": ("Factor: x² + 5x + 6", "פרק לגורמים: x² + 5x + 6", "(x+2)(x+3)"),
}

SOLUTION_STEPS = [
    "Step 1: Identify the problem type",
    "Step 2: Apply the appropriate method",
    "Step 3: Simplify and solve",
]
SOLUTION_STEPS_HE = [
    "שלב 1: זהה את סוג הבעיה",
    "שלב 2: החל את השיטה המתאימה",
    "שלב 3: פשט ופתור",
]


def build_placeholder(topic: Topic, difficulty: str, slot: SlotKind, xp_reward: int) -> Problem:
    """Always succeeds. Same topic and difficulty give the same content."""
    idx = _DIFFICULTY_INDEX.get(difficulty, 0)
    templates = TEMPLATES.get(topic.id)
    if templates:
        question, answer = templates[min(idx, len(templates) - 1)]
        question_he = f"פתור בעיה ב{topic.name_he} ({_DIFFICULTY_HE.get(difficulty, difficulty)})"
    else:
        question, question_he, answer = GENERIC.get(difficulty, GENERIC["easy"])

    return Problem(
        id=f"placeholder-{uuid.uuid4().hex}",
        topic_id=topic.id,
        topic_name=topic.name,
        topic_name_he=topic.name_he,
        slot=slot,
        difficulty=difficulty,
        question_text=question,
        question_text_he=question_he,
        question_latex=LATEX.get(topic.id),
        correct_answer=answer,
        answer_type="expression",
        solution_steps=list(SOLUTION_STEPS),
        solution_steps_he=list(SOLUTION_STEPS_HE),
        hint=f"Think about the basic rules of {topic.name}.",
        hint_he=f"חשוב על הכללים הבסיסיים של {topic.name_he}.",
        estimated_minutes=ESTIMATED_MINUTES.get(difficulty, 3),
        xp_reward=xp_reward,
        source="placeholder",
    )
