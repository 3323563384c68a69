"""
API request/response schemas.

Pydantic models for API validation and serialization.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from interview_engine.domain.models.session import (
    AggregatedScores,
    Difficulty,
    Evaluation,
    ExperienceLevel,
    FinalReport,
    FollowUpIntent,
    InterviewMode,
    QuestionEntry,
    QuestionType,
    SessionStatus,
    VoiceEvaluation,
    VoiceMetadata,
)


# ============ INTERVIEW SCHEMAS ============


class InterviewCreate(BaseModel):
    """Request to start a new interview."""

    role: str = Field(..., min_length=1, max_length=100, examples=["Backend Developer"])
    experience_level: ExperienceLevel
    mode: InterviewMode = InterviewMode.TEXT
    user_id: Optional[str] = Field(default=None, max_length=100)


class QuestionSchema(BaseModel):
    """A question as shown to the candidate."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    question_text: str
    topic: str
    difficulty: Difficulty
    level_score: float
    type: QuestionType
    intent: Optional[FollowUpIntent] = None
    generated_from_weakness: Optional[str] = None
    was_corrected: bool = False


class StartInterviewResponse(BaseModel):
    """Response after starting an interview."""

    session_id: str
    status: SessionStatus
    mode: InterviewMode
    question: QuestionSchema
    max_questions: int
    ends_at: datetime


# ============ ANSWER SCHEMAS ============


class AnswerRequest(BaseModel):
    """Answer to the pending question.

    Spoken answers send either precomputed `voice_meta`, or the recording
    duration and let the server derive delivery metadata from the transcript.
    """

    answer: str = Field(..., min_length=1, max_length=10000)
    voice_meta: Optional[VoiceMetadata] = None
    voice_duration_seconds: Optional[float] = Field(default=None, gt=0)


class AnswerResponse(BaseModel):
    """Response after processing an answer."""

    session_id: str
    status: SessionStatus
    evaluation: Evaluation
    voice_evaluation: Optional[VoiceEvaluation] = None
    next_question: Optional[QuestionSchema] = None
    aggregated_scores: AggregatedScores
    question_number: int
    remaining_seconds: float
    time_warning: bool = False


# ============ SESSION SCHEMAS ============


class SessionSummary(BaseModel):
    """Compact session view."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    role: str
    experience_level: ExperienceLevel
    mode: InterviewMode
    status: SessionStatus
    total_questions: int
    aggregated_scores: Optional[AggregatedScores] = None
    ends_at: datetime
    created_at: datetime
    completed_at: Optional[datetime] = None


class SessionDetail(SessionSummary):
    """Full session view with every turn."""

    questions: List[QuestionEntry] = Field(default_factory=list)
    final_report: Optional[FinalReport] = None


class CompleteResponse(BaseModel):
    """Response after completing an interview."""

    session_id: str
    status: SessionStatus
    final_report: FinalReport
