"""Domain models package."""

from .session import (
    AggregatedScores,
    AnswerInfo,
    Difficulty,
    Evaluation,
    ExperienceLevel,
    FinalReport,
    FollowUpIntent,
    InterviewMode,
    QuestionEntry,
    QuestionType,
    ScoreDimension,
    Session,
    SessionStatus,
    VoiceEvaluation,
    VoiceMetadata,
    WeaknessTracker,
)
from .generation import (
    Accepted,
    Corrected,
    GenerationRequest,
    QuestionCandidate,
    RawEvaluation,
    ReportDraft,
    ReportRequest,
)

__all__ = [
    "AggregatedScores",
    "AnswerInfo",
    "Difficulty",
    "Evaluation",
    "ExperienceLevel",
    "FinalReport",
    "FollowUpIntent",
    "InterviewMode",
    "QuestionEntry",
    "QuestionType",
    "ScoreDimension",
    "Session",
    "SessionStatus",
    "VoiceEvaluation",
    "VoiceMetadata",
    "WeaknessTracker",
    "Accepted",
    "Corrected",
    "GenerationRequest",
    "QuestionCandidate",
    "RawEvaluation",
    "ReportDraft",
    "ReportRequest",
]
