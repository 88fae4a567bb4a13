"""Practice API endpoints: daily sets, topic sessions, answers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from skillforge.auth.dependencies import get_current_user_id
from skillforge.dependencies import get_daily_set_service, get_topic_practice_service
from skillforge.practice.daily_set_service import DailySetService
from skillforge.practice.schemas import (
    AnsweredProblemResponse,
    AttemptResponse,
    AttemptsResponse,
    DailySetResponse,
    DailySetSummary,
    HistoryResponse,
    PracticeSessionResponse,
    ProblemResponse,
    StartSessionRequest,
    SubmissionResponse,
    SubmitAnswerRequest,
)
from skillforge.practice.topic_practice_service import TopicPracticeService
from skillforge.practice.types import SubmissionResult

router = APIRouter(prefix="/api/v1/practice", tags=["Practice"])


def _submission_response(result: SubmissionResult) -> SubmissionResponse:
    if not result.success:
        raise HTTPException(status_code=404, detail=result.error or "Not found")
    return SubmissionResponse.from_result(result)


# ---- Daily sets ----


@router.get("/today", response_model=DailySetResponse)
async def get_today(
    focus_topic_id: str | None = Query(None, max_length=64),
    user_id: str = Depends(get_current_user_id),
    svc: DailySetService = Depends(get_daily_set_service),
):
    """Today's set, generated on first request."""
    daily = await svc.get_or_create(user_id, focus_topic_id=focus_topic_id)
    return DailySetResponse.from_set(daily)


@router.post("/sets/{set_id}/answers", response_model=SubmissionResponse)
async def submit_daily_answer(
    set_id: str,
    body: SubmitAnswerRequest,
    user_id: str = Depends(get_current_user_id),
    svc: DailySetService = Depends(get_daily_set_service),
):
    """Submit an answer to a daily-set problem. Re-submitting is a no-op."""
    result = await svc.submit_answer(
        user_id,
        set_id,
        body.problem_id,
        answer_text=body.answer_text,
        answer_image_url=body.answer_image_url,
        is_skipped=body.is_skipped,
        locale=body.locale,
    )
    return _submission_response(result)


@router.get("/sets/{set_id}/attempts", response_model=AttemptsResponse)
async def get_attempts(
    set_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: DailySetService = Depends(get_daily_set_service),
):
    """Attempts on a set, with worked solutions for the answered problems."""
    daily = await svc.get_set(user_id, set_id)
    if daily is None:
        raise HTTPException(status_code=404, detail="Set not found")

    attempts = await svc.get_attempts(user_id, set_id)
    answered = {a.problem_id for a in attempts}
    solutions = [
        AnsweredProblemResponse(
            **ProblemResponse.from_problem(p).model_dump(),
            correct_answer=p.correct_answer,
            solution_steps=p.solution_steps,
            solution_steps_he=p.solution_steps_he,
        )
        for p in daily.problems
        if p.id in answered
    ]
    return AttemptsResponse(
        attempts=[AttemptResponse.from_attempt(a) for a in attempts],
        solutions=solutions,
    )


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    limit: int = Query(10, ge=1, le=60),
    user_id: str = Depends(get_current_user_id),
    svc: DailySetService = Depends(get_daily_set_service),
):
    """Recent daily sets, newest first."""
    sets = await svc.history(user_id, limit)
    return HistoryResponse(
        sets=[
            DailySetSummary(
                id=s.id,
                date=s.date,
                focus_topic_id=s.focus_topic_id,
                focus_topic_name=s.focus_topic_name,
                completed_count=s.completed_count,
                total_problems=s.total_problems,
                is_completed=s.is_completed,
                xp_earned=s.xp_earned,
            )
            for s in sets
        ]
    )


# ---- Topic practice ----


@router.post("/topics/{topic_id}/sessions", response_model=PracticeSessionResponse, status_code=201)
async def start_session(
    topic_id: str,
    body: StartSessionRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    svc: TopicPracticeService = Depends(get_topic_practice_service),
):
    """Start a practice session on one topic."""
    body = body or StartSessionRequest()
    session = await svc.start_session(user_id, topic_id, count=body.count, difficulty=body.difficulty)
    return PracticeSessionResponse.from_session(session)


@router.get("/sessions", response_model=list[PracticeSessionResponse])
async def list_active_sessions(
    user_id: str = Depends(get_current_user_id),
    svc: TopicPracticeService = Depends(get_topic_practice_service),
):
    """Unfinished practice sessions, newest first."""
    sessions = await svc.active_sessions(user_id)
    return [PracticeSessionResponse.from_session(s) for s in sessions]


@router.get("/sessions/{session_id}", response_model=PracticeSessionResponse)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: TopicPracticeService = Depends(get_topic_practice_service),
):
    session = await svc.get_session(user_id, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return PracticeSessionResponse.from_session(session)


@router.post("/sessions/{session_id}/answers", response_model=SubmissionResponse)
async def submit_session_answer(
    session_id: str,
    body: SubmitAnswerRequest,
    user_id: str = Depends(get_current_user_id),
    svc: TopicPracticeService = Depends(get_topic_practice_service),
):
    """Submit an answer to a practice-session problem."""
    result = await svc.submit_answer(
        user_id,
        session_id,
        body.problem_id,
        answer_text=body.answer_text,
        answer_image_url=body.answer_image_url,
        is_skipped=body.is_skipped,
        locale=body.locale,
    )
    return _submission_response(result)
