"""Contracts exchanged with the external content generator.

The engine never inspects prompt text. It sends structured requests and
receives structured candidates; the generator owns templates and wording.

Core Models:
    - GenerationRequest: Context for an initial or follow-up question
    - QuestionCandidate: Unvalidated generator output
    - RawEvaluation: Unweighted evaluator output
    - ReportRequest / ReportDraft: Final report exchange
    - Accepted / Corrected: Tagged outcome of the guardrail loop
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from interview_engine.domain.models.session import (
    AggregatedScores,
    Difficulty,
    ExperienceLevel,
    FollowUpIntent,
    QuestionType,
)


class GenerationRequest(BaseModel):
    """Structured request for one question.

    Initial requests carry role/level context only; follow-up requests add
    the previous turn, its scores, the chosen intent and target difficulty,
    and the full question history for anti-repetition.
    """

    kind: QuestionType
    role: str
    level: ExperienceLevel
    allowed_topics: List[str] = Field(default_factory=list)
    forbidden_topics: List[str] = Field(default_factory=list)
    allowed_difficulties: List[Difficulty] = Field(default_factory=list)
    band_min: float = 1
    band_max: float = 10

    previous_question: Optional[str] = None
    previous_topic: Optional[str] = None
    previous_difficulty: Optional[Difficulty] = None
    technical_score: Optional[float] = None
    depth_score: Optional[float] = None
    clarity_score: Optional[float] = None
    problem_solving_score: Optional[float] = None
    communication_score: Optional[float] = None
    weaknesses: List[str] = Field(default_factory=list)
    weakness_frequency: Dict[str, int] = Field(default_factory=dict)
    intent: Optional[FollowUpIntent] = None
    target_difficulty: Optional[Difficulty] = None
    asked_questions: List[str] = Field(default_factory=list)


class QuestionCandidate(BaseModel):
    """Generator output before validation. Any field may be missing."""

    question: Optional[str] = None
    topic: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    level_score: Optional[float] = None


class RawEvaluation(BaseModel):
    """Evaluator output before clamping and level weighting."""

    technical_score: float
    depth_score: float
    clarity_score: float
    problem_solving_score: float
    communication_score: float
    overall_score: Optional[float] = None
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    major_technical_errors: List[str] = Field(default_factory=list)


class ReportRequest(BaseModel):
    """Everything the report generator receives at completion."""

    transcript_summary: str
    role: str
    level: ExperienceLevel
    aggregated_scores: AggregatedScores
    hire_band: str
    confidence_level: str
    weakness_frequency: Dict[str, int] = Field(default_factory=dict)


class ReportDraft(BaseModel):
    """Narrative parts of the final report."""

    strongest_areas: List[str] = Field(default_factory=list)
    weakest_areas: List[str] = Field(default_factory=list)
    improvement_roadmap: List[str] = Field(default_factory=list)
    next_preparation_focus: List[str] = Field(default_factory=list)
    executive_summary: Optional[str] = None


# =============================================================================
# Guardrail outcome
# =============================================================================


@dataclass
class Accepted:
    """Candidate passed validation on attempt `attempts`, returned unmodified."""

    candidate: QuestionCandidate
    attempts: int
    rejections: List[str] = field(default_factory=list)

    was_corrected = False


@dataclass
class Corrected:
    """Every attempt violated policy; candidate was forced into range."""

    candidate: QuestionCandidate
    attempts: int
    rejections: List[str] = field(default_factory=list)

    was_corrected = True


GuardrailOutcome = Union[Accepted, Corrected]
