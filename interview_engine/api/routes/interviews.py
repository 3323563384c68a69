"""
Interview API routes.

Thin transport over SessionService: start, answer, complete, abandon, read.
Engine errors are translated by the global exception handlers.
"""

from typing import List

from fastapi import APIRouter, Query, status
import structlog

from interview_engine.api.dependencies import SessionRepoDep, SessionServiceDep
from interview_engine.api.schemas import (
    AnswerRequest,
    AnswerResponse,
    CompleteResponse,
    InterviewCreate,
    QuestionSchema,
    SessionDetail,
    SessionSummary,
    StartInterviewResponse,
)
from interview_engine.services.voice_analysis import analyze_voice_metadata

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.post(
    "",
    response_model=StartInterviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_interview(request: InterviewCreate, service: SessionServiceDep):
    """Start an interview and return its first question."""
    result = await service.start_session(
        role=request.role,
        level=request.experience_level,
        mode=request.mode,
        user_id=request.user_id,
    )
    session = result.session
    return StartInterviewResponse(
        session_id=session.id,
        status=session.status,
        mode=session.mode,
        question=QuestionSchema.model_validate(result.question),
        max_questions=session.max_questions,
        ends_at=session.ends_at,
    )


@router.get("", response_model=List[SessionSummary])
async def list_interviews(
    session_repo: SessionRepoDep,
    user_id: str = Query(..., min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    """List a user's most recent interviews."""
    sessions = await session_repo.list_by_user(user_id, limit=limit)
    return [SessionSummary.model_validate(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionDetail)
async def get_interview(session_id: str, service: SessionServiceDep):
    """Get the full interview including every turn and the final report."""
    session = await service.get_session(session_id)
    return SessionDetail.model_validate(session)


@router.post("/{session_id}/answers", response_model=AnswerResponse)
async def submit_answer(
    session_id: str,
    request: AnswerRequest,
    service: SessionServiceDep,
):
    """Answer the pending question and receive the next one."""
    voice_meta = request.voice_meta
    if voice_meta is None and request.voice_duration_seconds is not None:
        voice_meta = analyze_voice_metadata(request.answer, request.voice_duration_seconds)

    result = await service.process_answer(session_id, request.answer, voice_meta)

    return AnswerResponse(
        session_id=session_id,
        status=result.status,
        evaluation=result.evaluation,
        voice_evaluation=result.voice_evaluation,
        next_question=(
            QuestionSchema.model_validate(result.next_question)
            if result.next_question is not None
            else None
        ),
        aggregated_scores=result.aggregated_scores,
        question_number=result.question_number,
        remaining_seconds=result.remaining_seconds,
        time_warning=result.time_warning,
    )


@router.post("/{session_id}/complete", response_model=CompleteResponse)
async def complete_interview(session_id: str, service: SessionServiceDep):
    """Finish the interview and build the final report."""
    session = await service.complete_session(session_id)
    return CompleteResponse(
        session_id=session.id,
        status=session.status,
        final_report=session.final_report,
    )


@router.post("/{session_id}/abandon", response_model=SessionSummary)
async def abandon_interview(session_id: str, service: SessionServiceDep):
    """Abandon an in-progress interview."""
    session = await service.abandon_session(session_id)
    return SessionSummary.model_validate(session)
