"""Scoring engine.

Weighted, level-aware scoring of single answers and running aggregation
across a session, plus the adaptive rules that feed follow-up selection:

- weighted_overall: combine five sub-scores with the level's weight vector
- aggregate: per-dimension means with strongest/weakest dimension
- find_weakest_dimension: lowest sub-score of one evaluation
- next_difficulty: one-rung difficulty ladder
- is_topic_mastered / select_followup_intent: follow-up policy

Strongest/weakest ties go to the first dimension in ScoreDimension order.
That tie-break is arbitrary and kept only for parity with stored sessions.
"""

from typing import Dict, List, Optional, Sequence

from interview_engine.domain.models.generation import RawEvaluation
from interview_engine.domain.models.session import (
    DIFFICULTY_ORDER,
    AggregatedScores,
    Difficulty,
    Evaluation,
    ExperienceLevel,
    FollowUpIntent,
    ScoreDimension,
)

SCORE_MIN = 1.0
SCORE_MAX = 10.0

# Technical score ceiling when the evaluator reports major technical errors
MAJOR_ERROR_TECHNICAL_CAP = 4.0

ESCALATE_ABOVE = 8.0
DEESCALATE_AT_OR_BELOW = 5.0
MASTERY_SCORE = 8.0
MASTERY_HITS = 2


# =============================================================================
# Weights
# =============================================================================

WEIGHT_MAPS: Dict[ExperienceLevel, Dict[ScoreDimension, float]] = {
    ExperienceLevel.JUNIOR: {
        ScoreDimension.TECHNICAL: 0.30,
        ScoreDimension.CLARITY: 0.25,
        ScoreDimension.PROBLEM_SOLVING: 0.20,
        ScoreDimension.DEPTH: 0.15,
        ScoreDimension.COMMUNICATION: 0.10,
    },
    ExperienceLevel.MID: {
        ScoreDimension.TECHNICAL: 0.25,
        ScoreDimension.DEPTH: 0.25,
        ScoreDimension.PROBLEM_SOLVING: 0.25,
        ScoreDimension.CLARITY: 0.15,
        ScoreDimension.COMMUNICATION: 0.10,
    },
    ExperienceLevel.SENIOR: {
        ScoreDimension.DEPTH: 0.30,
        ScoreDimension.TECHNICAL: 0.25,
        ScoreDimension.PROBLEM_SOLVING: 0.25,
        ScoreDimension.CLARITY: 0.10,
        ScoreDimension.COMMUNICATION: 0.10,
    },
}


def get_weight_map(level: ExperienceLevel) -> Dict[ScoreDimension, float]:
    return WEIGHT_MAPS[ExperienceLevel(level)]


def normalize_sub_score(value: float) -> float:
    """Clamp a raw sub-score to [1, 10] and round to 2 decimals."""
    return max(SCORE_MIN, min(SCORE_MAX, round(float(value), 2)))


def weighted_overall(scores: Dict[ScoreDimension, float], level: ExperienceLevel) -> float:
    """
    Combine normalized sub-scores with the level's weight vector.

    Args:
        scores: One normalized sub-score per dimension
        level: Session experience level

    Returns:
        Weighted score rounded to 2 decimals
    """
    weights = get_weight_map(level)
    weighted = sum(scores[dim] * weight for dim, weight in weights.items())
    return round(weighted, 2)


def build_evaluation(raw: RawEvaluation, level: ExperienceLevel) -> Evaluation:
    """Turn raw evaluator output into a weighted Evaluation.

    Sub-scores are clamped and rounded, the technical score is capped when
    major technical errors were reported, and the overall score is always
    recomputed from the level weights (the evaluator's own overall is ignored).
    """
    technical = normalize_sub_score(raw.technical_score)
    if raw.major_technical_errors and technical > MAJOR_ERROR_TECHNICAL_CAP:
        technical = MAJOR_ERROR_TECHNICAL_CAP

    scores = {
        ScoreDimension.TECHNICAL: technical,
        ScoreDimension.DEPTH: normalize_sub_score(raw.depth_score),
        ScoreDimension.CLARITY: normalize_sub_score(raw.clarity_score),
        ScoreDimension.PROBLEM_SOLVING: normalize_sub_score(raw.problem_solving_score),
        ScoreDimension.COMMUNICATION: normalize_sub_score(raw.communication_score),
    }

    return Evaluation(
        technical_score=scores[ScoreDimension.TECHNICAL],
        depth_score=scores[ScoreDimension.DEPTH],
        clarity_score=scores[ScoreDimension.CLARITY],
        problem_solving_score=scores[ScoreDimension.PROBLEM_SOLVING],
        communication_score=scores[ScoreDimension.COMMUNICATION],
        overall_score=weighted_overall(scores, level),
        strengths=list(raw.strengths),
        weaknesses=list(raw.weaknesses),
        improvements=list(raw.improvements),
        major_technical_errors=list(raw.major_technical_errors),
    )


# =============================================================================
# Aggregation
# =============================================================================


def _round2(value: float) -> float:
    return round(value, 2)


def aggregate(evaluations: Sequence[Evaluation]) -> AggregatedScores:
    """
    Aggregate all evaluations of a session.

    Returns a zeroed snapshot with "N/A" dimension names for an empty list.
    """
    if not evaluations:
        return AggregatedScores()

    n = len(evaluations)
    totals: Dict[ScoreDimension, float] = {dim: 0.0 for dim in ScoreDimension}
    overall_total = 0.0
    for evaluation in evaluations:
        for dim, score in evaluation.dimension_scores():
            totals[dim] += score
        overall_total += evaluation.overall_score

    averages = {dim: _round2(total / n) for dim, total in totals.items()}

    strongest: Optional[ScoreDimension] = None
    weakest: Optional[ScoreDimension] = None
    high = float("-inf")
    low = float("inf")
    for dim, avg in averages.items():
        if avg > high:
            high, strongest = avg, dim
        if avg < low:
            low, weakest = avg, dim

    return AggregatedScores(
        average_technical=averages[ScoreDimension.TECHNICAL],
        average_depth=averages[ScoreDimension.DEPTH],
        average_clarity=averages[ScoreDimension.CLARITY],
        average_problem_solving=averages[ScoreDimension.PROBLEM_SOLVING],
        average_communication=averages[ScoreDimension.COMMUNICATION],
        overall_average=_round2(overall_total / n),
        strongest_dimension=strongest.value,
        weakest_dimension=weakest.value,
    )


def find_weakest_dimension(evaluation: Evaluation) -> ScoreDimension:
    """Lowest-scoring dimension of one evaluation (first wins on ties)."""
    weakest = None
    lowest = float("inf")
    for dim, score in evaluation.dimension_scores():
        if score < lowest:
            lowest, weakest = score, dim
    return weakest


# =============================================================================
# Adaptive rules
# =============================================================================


def next_difficulty(current: Difficulty, overall_score: float) -> Difficulty:
    """
    Move one rung along easy < medium < hard.

    Above 8 steps up, 5 or below steps down, otherwise holds. Never jumps
    two rungs and never leaves the ladder.
    """
    index = DIFFICULTY_ORDER.index(Difficulty(current))

    if overall_score > ESCALATE_ABOVE and index < len(DIFFICULTY_ORDER) - 1:
        return DIFFICULTY_ORDER[index + 1]
    if overall_score <= DEESCALATE_AT_OR_BELOW and index > 0:
        return DIFFICULTY_ORDER[index - 1]
    return DIFFICULTY_ORDER[index]


def is_topic_mastered(topic_scores: List[float]) -> bool:
    """A topic is mastered once at least two of its scores exceed 8."""
    if len(topic_scores) < MASTERY_HITS:
        return False
    return sum(1 for score in topic_scores if score > MASTERY_SCORE) >= MASTERY_HITS


def select_followup_intent(
    technical_score: float,
    depth_score: float,
    problem_solving_score: float,
    topic_mastered: bool,
) -> FollowUpIntent:
    """Pick why the next question is asked, by fixed priority."""
    if topic_mastered:
        return FollowUpIntent.ESCALATE_DIFFICULTY
    if technical_score < 5:
        return FollowUpIntent.CLARIFY_TECHNICAL
    if depth_score < 6:
        return FollowUpIntent.PROBE_DEPTH
    if problem_solving_score < 6:
        return FollowUpIntent.SCENARIO_BASED
    return FollowUpIntent.ESCALATE_DIFFICULTY
