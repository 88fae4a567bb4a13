"""Pydantic request/response models for practice endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from skillforge.practice.types import DailySet, PracticeSession, Problem, ProblemAttempt, SubmissionResult


# --- Problems ---


class ProblemResponse(BaseModel):
    """A problem as shown to the learner. The correct answer is withheld."""

    id: str
    topic_id: str
    topic_name: str
    topic_name_he: str
    slot: str
    difficulty: str
    question_text: str
    question_text_he: str = ""
    question_latex: str | None = None
    answer_type: str = "expression"
    hint: str | None = None
    hint_he: str | None = None
    estimated_minutes: int = 3
    xp_reward: int = 10
    source: str = "placeholder"

    @classmethod
    def from_problem(cls, problem: Problem) -> ProblemResponse:
        return cls(
            id=problem.id,
            topic_id=problem.topic_id,
            topic_name=problem.topic_name,
            topic_name_he=problem.topic_name_he,
            slot=problem.slot,
            difficulty=problem.difficulty,
            question_text=problem.question_text,
            question_text_he=problem.question_text_he,
            question_latex=problem.question_latex,
            answer_type=problem.answer_type,
            hint=problem.hint,
            hint_he=problem.hint_he,
            estimated_minutes=problem.estimated_minutes,
            xp_reward=problem.xp_reward,
            source=problem.source,
        )


class AnsweredProblemResponse(ProblemResponse):
    """A problem after it has been answered, with its worked solution."""

    correct_answer: str
    solution_steps: list[str] = []
    solution_steps_he: list[str] = []


# --- Sets ---


class DailySetResponse(BaseModel):
    id: str
    date: str
    focus_topic_id: str
    focus_topic_name: str
    problems: list[ProblemResponse]
    current_index: int
    completed_count: int
    total_problems: int
    is_completed: bool
    completed_at: datetime | None = None
    xp_earned: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_set(cls, daily: DailySet) -> DailySetResponse:
        return cls(
            id=daily.id,
            date=daily.date,
            focus_topic_id=daily.focus_topic_id,
            focus_topic_name=daily.focus_topic_name,
            problems=[ProblemResponse.from_problem(p) for p in daily.problems],
            current_index=daily.current_index,
            completed_count=daily.completed_count,
            total_problems=daily.total_problems,
            is_completed=daily.is_completed,
            completed_at=daily.completed_at,
            xp_earned=daily.xp_earned,
            created_at=daily.created_at,
        )


class DailySetSummary(BaseModel):
    id: str
    date: str
    focus_topic_id: str
    focus_topic_name: str
    completed_count: int
    total_problems: int
    is_completed: bool
    xp_earned: int = 0


class HistoryResponse(BaseModel):
    sets: list[DailySetSummary]


class PracticeSessionResponse(BaseModel):
    id: str
    topic_id: str
    topic_name: str
    topic_name_he: str
    problems: list[ProblemResponse]
    current_index: int
    completed_count: int
    total_problems: int
    is_completed: bool
    completed_at: datetime | None = None
    xp_earned: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_session(cls, session: PracticeSession) -> PracticeSessionResponse:
        return cls(
            id=session.id,
            topic_id=session.topic_id,
            topic_name=session.topic_name,
            topic_name_he=session.topic_name_he,
            problems=[ProblemResponse.from_problem(p) for p in session.problems],
            current_index=session.current_index,
            completed_count=session.completed_count,
            total_problems=session.total_problems,
            is_completed=session.is_completed,
            completed_at=session.completed_at,
            xp_earned=session.xp_earned,
            created_at=session.created_at,
        )


class StartSessionRequest(BaseModel):
    count: int | None = Field(default=None, ge=1, le=10)
    difficulty: str | None = Field(default=None, pattern="^(easy|medium|hard)$")


# --- Answers ---


class SubmitAnswerRequest(BaseModel):
    problem_id: str = Field(..., min_length=1, max_length=64)
    answer_text: str | None = Field(default=None, max_length=2000)
    answer_image_url: str | None = Field(default=None, max_length=2048)
    is_skipped: bool = False
    locale: str | None = Field(default=None, pattern="^(en|he)$")


class CompletionBonusResponse(BaseModel):
    completion: int
    streak: int
    perfect: int
    total: int


class StuckResponse(BaseModel):
    is_stuck: bool
    consecutive_incorrect: int
    recommended_action: str
    suggestions: list[str] = []
    suggestions_he: list[str] = []


class SubmissionResponse(BaseModel):
    success: bool
    already_answered: bool = False
    is_correct: bool | None = None
    xp_earned: int = 0
    feedback: str | None = None
    extracted_answer: str | None = None
    set_completed: bool = False
    bonus: CompletionBonusResponse | None = None
    leveled_up: bool = False
    new_level: int | None = None
    stuck: StuckResponse | None = None

    @classmethod
    def from_result(cls, result: SubmissionResult) -> SubmissionResponse:
        bonus = None
        if result.bonus is not None:
            bonus = CompletionBonusResponse(
                completion=result.bonus.completion,
                streak=result.bonus.streak,
                perfect=result.bonus.perfect,
                total=result.bonus.total,
            )
        stuck = None
        if result.stuck is not None:
            stuck = StuckResponse(
                is_stuck=result.stuck.is_stuck,
                consecutive_incorrect=result.stuck.consecutive_incorrect,
                recommended_action=result.stuck.recommended_action,
                suggestions=list(result.stuck.suggestions),
                suggestions_he=list(result.stuck.suggestions_he),
            )
        return cls(
            success=result.success,
            already_answered=result.already_answered,
            is_correct=result.is_correct,
            xp_earned=result.xp_earned,
            feedback=result.feedback,
            extracted_answer=result.extracted_answer,
            set_completed=result.set_completed,
            bonus=bonus,
            leveled_up=result.leveled_up,
            new_level=result.new_level,
            stuck=stuck,
        )


class AttemptResponse(BaseModel):
    problem_id: str
    topic_id: str
    answer_type: str
    answer_text: str | None = None
    is_correct: bool | None = None
    ai_feedback: str | None = None
    xp_earned: int = 0
    submitted_at: datetime | None = None

    @classmethod
    def from_attempt(cls, attempt: ProblemAttempt) -> AttemptResponse:
        return cls(
            problem_id=attempt.problem_id,
            topic_id=attempt.topic_id,
            answer_type=attempt.answer_type,
            answer_text=attempt.answer_text,
            is_correct=attempt.is_correct,
            ai_feedback=attempt.ai_feedback,
            xp_earned=attempt.xp_earned,
            submitted_at=attempt.submitted_at,
        )


class AttemptsResponse(BaseModel):
    attempts: list[AttemptResponse]
    solutions: list[AnsweredProblemResponse]
