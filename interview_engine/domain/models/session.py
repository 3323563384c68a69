"""Session domain models for interview lifecycle management.

Core Models:
    - Session: Top-level interview aggregate, stored as one document
    - QuestionEntry: One turn (question, answer, evaluation)
    - Evaluation: Five sub-scores plus weighted overall score
    - AggregatedScores: Running per-dimension averages across a session
    - WeaknessTracker: How often each dimension was the weakest on a turn

Session Lifecycle:
    1. Created in CREATED by SessionService.start_session
    2. Moved to IN_PROGRESS once the first question is issued
    3. Mutated by every answer-processing turn
    4. Moved to a terminal state by completion, abandonment, the sweeper,
       the deadline or the question cap. Terminal states are absorbing.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ExperienceLevel(str, Enum):
    """Declared candidate experience level."""

    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"


class Difficulty(str, Enum):
    """Question difficulty label. Ordered easy < medium < hard."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DIFFICULTY_ORDER: List[Difficulty] = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


class InterviewMode(str, Enum):
    """How the candidate answers."""

    TEXT = "text"
    VOICE = "voice"
    HYBRID = "hybrid"


class SessionStatus(str, Enum):
    """Session lifecycle state."""

    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"
    TIME_EXPIRED = "TIME_EXPIRED"
    MAX_QUESTIONS_REACHED = "MAX_QUESTIONS_REACHED"


TERMINAL_STATUSES = frozenset(
    {
        SessionStatus.COMPLETED,
        SessionStatus.ABANDONED,
        SessionStatus.TIME_EXPIRED,
        SessionStatus.MAX_QUESTIONS_REACHED,
    }
)


class QuestionType(str, Enum):
    """Whether a question opened the interview or followed up on an answer."""

    INITIAL = "initial"
    FOLLOWUP = "followup"


class FollowUpIntent(str, Enum):
    """Why the next question is being asked."""

    CLARIFY_TECHNICAL = "CLARIFY_TECHNICAL"
    PROBE_DEPTH = "PROBE_DEPTH"
    SCENARIO_BASED = "SCENARIO_BASED"
    ESCALATE_DIFFICULTY = "ESCALATE_DIFFICULTY"


class ScoreDimension(str, Enum):
    """Scoring dimensions in their fixed declaration order.

    The order matters: strongest/weakest ties go to the first dimension.
    """

    TECHNICAL = "Technical Accuracy"
    DEPTH = "Depth of Explanation"
    CLARITY = "Clarity"
    PROBLEM_SOLVING = "Problem Solving"
    COMMUNICATION = "Communication"


# =============================================================================
# Answer & Evaluation
# =============================================================================


class VoiceMetadata(BaseModel):
    """Delivery statistics produced by the voice analyzer."""

    duration_seconds: float = Field(ge=0)
    filler_word_count: int = Field(ge=0)
    pause_count: int = Field(ge=0)
    words_per_minute: float = Field(ge=0)


class VoiceEvaluation(BaseModel):
    """Spoken-delivery assessment returned by the voice evaluator."""

    confidence_score: float
    fluency_score: float
    structure_score: float
    professionalism_score: float
    spoken_delivery_overall: float
    feedback: List[str] = Field(default_factory=list)


class AnswerInfo(BaseModel):
    """Raw answer attached to a question entry."""

    text: str
    voice_meta: Optional[VoiceMetadata] = None
    voice_evaluation: Optional[VoiceEvaluation] = None
    answered_at: datetime


class Evaluation(BaseModel):
    """Scored evaluation of one answer.

    Sub-scores are already clamped to [1, 10] and rounded to 2 decimals;
    overall_score is the level-weighted combination.
    """

    technical_score: float = Field(ge=1, le=10)
    depth_score: float = Field(ge=1, le=10)
    clarity_score: float = Field(ge=1, le=10)
    problem_solving_score: float = Field(ge=1, le=10)
    communication_score: float = Field(ge=1, le=10)
    overall_score: float = Field(ge=1, le=10)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    major_technical_errors: List[str] = Field(default_factory=list)

    def dimension_scores(self) -> List[Tuple[ScoreDimension, float]]:
        """Sub-scores paired with their dimension, in declaration order."""
        return [
            (ScoreDimension.TECHNICAL, self.technical_score),
            (ScoreDimension.DEPTH, self.depth_score),
            (ScoreDimension.CLARITY, self.clarity_score),
            (ScoreDimension.PROBLEM_SOLVING, self.problem_solving_score),
            (ScoreDimension.COMMUNICATION, self.communication_score),
        ]


# =============================================================================
# Question Entry
# =============================================================================


class QuestionEntry(BaseModel):
    """One interview turn.

    Created when the question is issued; mutated exactly twice (answer
    attached, then evaluation attached); never deleted or reordered.
    """

    id: str
    question_text: str
    topic: str
    difficulty: Difficulty
    level_score: float = Field(ge=1, le=10)
    type: QuestionType
    generated_from_weakness: Optional[str] = None
    intent: Optional[FollowUpIntent] = None
    was_corrected: bool = Field(
        default=False, description="Guardrail had to force the question into policy"
    )
    answer: Optional[AnswerInfo] = None
    evaluation: Optional[Evaluation] = None
    asked_at: datetime
    time_taken_seconds: float = 0.0


# =============================================================================
# Aggregates & Trackers
# =============================================================================


class AggregatedScores(BaseModel):
    """Running averages across all evaluated entries of a session."""

    average_technical: float = 0.0
    average_depth: float = 0.0
    average_clarity: float = 0.0
    average_problem_solving: float = 0.0
    average_communication: float = 0.0
    overall_average: float = 0.0
    strongest_dimension: str = "N/A"
    weakest_dimension: str = "N/A"


class WeaknessTracker(BaseModel):
    """Per-session counters of how often each dimension was the weakest.

    Counters only ever increase.
    """

    technical_weak_count: int = 0
    depth_weak_count: int = 0
    clarity_weak_count: int = 0
    problem_solving_weak_count: int = 0
    communication_weak_count: int = 0

    def record(self, dimension: ScoreDimension) -> None:
        """Increment the counter for the given weakest dimension."""
        field_name = _WEAK_COUNT_FIELDS[dimension]
        setattr(self, field_name, getattr(self, field_name) + 1)

    def as_frequency(self) -> Dict[str, int]:
        """Counters keyed by dimension display name."""
        return {dim.value: getattr(self, name) for dim, name in _WEAK_COUNT_FIELDS.items()}


_WEAK_COUNT_FIELDS: Dict[ScoreDimension, str] = {
    ScoreDimension.TECHNICAL: "technical_weak_count",
    ScoreDimension.DEPTH: "depth_weak_count",
    ScoreDimension.CLARITY: "clarity_weak_count",
    ScoreDimension.PROBLEM_SOLVING: "problem_solving_weak_count",
    ScoreDimension.COMMUNICATION: "communication_weak_count",
}


# =============================================================================
# Final Report
# =============================================================================


class TimeAnalysis(BaseModel):
    """Answer pacing metrics."""

    average_time_per_question: float = 0.0
    fastest_answer_time: float = 0.0
    slowest_answer_time: float = 0.0
    time_efficiency_score: float = 0.0
    insights: List[str] = Field(default_factory=list)


class FinalReport(BaseModel):
    """End-of-interview report.

    Numeric fields (average, confidence, hire band) are computed locally;
    narrative fields come from the report generator.
    """

    average_score: float
    strongest_areas: List[str] = Field(default_factory=list)
    weakest_areas: List[str] = Field(default_factory=list)
    confidence_level: str
    hire_recommendation: str
    hire_band: str
    improvement_roadmap: List[str] = Field(default_factory=list)
    next_preparation_focus: List[str] = Field(default_factory=list)
    executive_summary: Optional[str] = None
    weakness_frequency: Dict[str, int] = Field(default_factory=dict)
    time_analysis: Optional[TimeAnalysis] = None


# =============================================================================
# Session
# =============================================================================


class Session(BaseModel):
    """Top-level interview session aggregate.

    Read, mutated and written back as one unit; `version` is owned by the
    repository and used for compare-and-swap writes.
    """

    id: str
    user_id: Optional[str] = None
    role: str
    experience_level: ExperienceLevel
    mode: InterviewMode = InterviewMode.TEXT
    status: SessionStatus = SessionStatus.CREATED

    questions: List[QuestionEntry] = Field(default_factory=list)
    total_questions: int = 0
    current_question_index: int = 0

    weakness_tracker: WeaknessTracker = Field(default_factory=WeaknessTracker)
    topic_scores: Dict[str, List[float]] = Field(default_factory=dict)
    aggregated_scores: Optional[AggregatedScores] = None

    max_questions: int = 10
    max_duration_minutes: int = 60
    ends_at: datetime
    has_shown_time_warning: bool = False

    final_report: Optional[FinalReport] = None
    prompt_version: str = "v1.0"

    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def pending_entry(self) -> Optional[Tuple[int, QuestionEntry]]:
        """Return the unique unanswered entry and its index, if any."""
        for index, entry in enumerate(self.questions):
            if entry.answer is None:
                return index, entry
        return None

    def evaluations(self) -> List[Evaluation]:
        """Evaluations of all scored entries, in question order."""
        return [q.evaluation for q in self.questions if q.evaluation is not None]

    def append_question(self, entry: QuestionEntry) -> None:
        """Append an entry and keep the counters in sync."""
        self.questions.append(entry)
        self.total_questions = len(self.questions)
        self.current_question_index = len(self.questions) - 1
