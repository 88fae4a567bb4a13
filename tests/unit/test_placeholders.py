"""Placeholder problems."""

from skillforge.practice.answers import check_answer
from skillforge.practice.placeholders import TEMPLATES, build_placeholder
from skillforge.topics.catalog import get_topic_graph


def test_topic_template_by_difficulty():
    topic = get_topic_graph().require("linear-equations-one-var")
    problem = build_placeholder(topic, "medium", "core", 15)
    assert problem.question_text == "Solve: 3(x - 2) = 12"
    assert problem.correct_answer == "6"
    assert problem.source == "placeholder"
    assert problem.id.startswith("placeholder-")
    assert problem.xp_reward == 15
    assert problem.estimated_minutes == 3


def test_generic_fallback_for_topic_without_templates():
    topic = get_topic_graph().require("linear-functions")
    problem = build_placeholder(topic, "easy", "review", 10)
    assert problem.question_text == "Simplify: 2x + 3x"
    assert problem.correct_answer == "5x"
    assert problem.topic_id == "linear-functions"


def test_ids_are_unique_but_content_stable():
    topic = get_topic_graph().require("fractions")
    first = build_placeholder(topic, "hard", "challenge", 20)
    second = build_placeholder(topic, "hard", "challenge", 20)
    assert first.id != second.id
    assert first.question_text == second.question_text


def test_template_answers_check_against_themselves():
    graph = get_topic_graph()
    for topic_id, templates in TEMPLATES.items():
        topic = graph.require(topic_id)
        for difficulty in ("easy", "medium", "hard"):
            problem = build_placeholder(topic, difficulty, "core", 10)
            assert check_answer(problem.correct_answer, problem.correct_answer), (topic_id, difficulty)
        assert len(templates) == 3


def test_bilingual_content():
    topic = get_topic_graph().require("basic-equations")
    problem = build_placeholder(topic, "easy", "core", 10)
    assert problem.question_text_he
    assert len(problem.solution_steps) == len(problem.solution_steps_he) == 3
    assert problem.hint and problem.hint_he
