"""Final report assembly.

Numeric parts of the report (average, confidence, hire band, time analysis)
are computed locally and always override anything the report generator
says; the generator only contributes narrative fields.
"""

from statistics import pvariance
from typing import List, Sequence

import structlog

from interview_engine.domain.models.generation import ReportRequest
from interview_engine.domain.models.session import (
    AggregatedScores,
    FinalReport,
    QuestionEntry,
    QuestionType,
    ScoreDimension,
    Session,
    TimeAnalysis,
)
from interview_engine.services.protocols import IReportGenerator
from interview_engine.services.scoring_service import aggregate

log = structlog.get_logger(__name__)

# Hire bands, highest threshold first
HIRE_BANDS = [
    (8.5, "Strong Hire"),
    (7.0, "Hire"),
    (6.0, "Borderline"),
]
NO_HIRE = "No Hire"

HIRE_RECOMMENDATION = {
    "Strong Hire": "Yes",
    "Hire": "Yes",
    "Borderline": "No",
    NO_HIRE: "No",
}

PREPARATION_FOCUS = {
    ScoreDimension.TECHNICAL.value: [
        "Review core concepts and terminology for your stack",
        "Practice explaining how common APIs behave under the hood",
    ],
    ScoreDimension.DEPTH.value: [
        "Go one level deeper on every answer: explain the why, not only the what",
        "Study trade-offs between alternative approaches",
    ],
    ScoreDimension.CLARITY.value: [
        "Structure answers as context, approach, result",
        "Practice short, precise definitions before adding detail",
    ],
    ScoreDimension.PROBLEM_SOLVING.value: [
        "Work through scenario questions and talk through edge cases",
        "Practice breaking problems into smaller steps out loud",
    ],
    ScoreDimension.COMMUNICATION.value: [
        "Rehearse answers aloud and record yourself",
        "Summarize your conclusion at the end of each answer",
    ],
}
DEFAULT_PREPARATION_FOCUS = ["Keep practicing mixed-difficulty interview questions"]

# Time efficiency (seconds)
IDEAL_MIN_SECONDS = 30
IDEAL_MAX_SECONDS = 90
RUSHED_SECONDS = 20
STRUGGLING_SECONDS = 180


# =============================================================================
# Metrics
# =============================================================================


def score_variance(scores: Sequence[float]) -> float:
    """Population variance of overall scores (0 for fewer than two)."""
    if len(scores) < 2:
        return 0.0
    return pvariance(scores)


def confidence_from_variance(variance: float, sample_count: int) -> str:
    """Fewer than three answers is always Low; otherwise lower variance is higher confidence."""
    if sample_count < 3:
        return "Low"
    if variance < 1.0:
        return "High"
    if variance < 2.5:
        return "Medium"
    return "Low"


def hire_band(overall_average: float) -> str:
    for threshold, band in HIRE_BANDS:
        if overall_average >= threshold:
            return band
    return NO_HIRE


def hire_recommendation(band: str) -> str:
    return HIRE_RECOMMENDATION.get(band, "No")


def preparation_focus(weakest_dimension: str) -> List[str]:
    """Fallback preparation focus when the report generator offers none."""
    return list(PREPARATION_FOCUS.get(weakest_dimension, DEFAULT_PREPARATION_FOCUS))


def calculate_time_metrics(questions: Sequence[QuestionEntry]) -> TimeAnalysis:
    """Pacing metrics over answered entries with a recorded answer time."""
    answered = [q for q in questions if q.time_taken_seconds > 0]
    if not answered:
        return TimeAnalysis(insights=["Not enough data to analyze time efficiency."])

    times = [q.time_taken_seconds for q in answered]
    average = round(sum(times) / len(times))

    points = 0
    for t in times:
        if IDEAL_MIN_SECONDS <= t <= IDEAL_MAX_SECONDS:
            points += 10
        elif t < RUSHED_SECONDS:
            points += 2
        elif t > STRUGGLING_SECONDS:
            points += 4
        else:
            points += 6
    efficiency = round(points / (len(times) * 10) * 100) / 10

    insights = []
    if average < 25:
        insights.append("You tend to answer very quickly. Ensure you are providing enough depth.")
    if average > 120:
        insights.append("Your answers are quite long on average. Try to be more concise.")
    if efficiency > 8:
        insights.append(
            "Your pacing is excellent. Most answers fall within the ideal 30-90s window."
        )

    rushed_and_low = [
        q
        for q in answered
        if q.time_taken_seconds < RUSHED_SECONDS
        and q.evaluation is not None
        and q.evaluation.overall_score < 5
    ]
    if rushed_and_low:
        insights.append(
            f"You rushed through {len(rushed_and_low)} questions which negatively impacted your score."
        )

    return TimeAnalysis(
        average_time_per_question=average,
        fastest_answer_time=min(times),
        slowest_answer_time=max(times),
        time_efficiency_score=efficiency,
        insights=insights,
    )


def build_transcript_summary(questions: Sequence[QuestionEntry]) -> str:
    """Text summary of every answered and evaluated entry."""
    blocks = []
    evaluated = [q for q in questions if q.answer is not None and q.evaluation is not None]
    for i, q in enumerate(evaluated, start=1):
        e = q.evaluation
        voice = ""
        if q.answer.voice_meta is not None:
            meta = q.answer.voice_meta
            voice = (
                f" | Voice: {meta.words_per_minute:g} WPM, "
                f"{meta.filler_word_count} fillers, {meta.duration_seconds:g}s"
            )
        target = ""
        if q.type == QuestionType.FOLLOWUP and q.generated_from_weakness:
            target = f" [Follow-up targeting: {q.generated_from_weakness}]"

        blocks.append(
            f"Q{i} ({q.difficulty.value}{target}): {q.question_text}\n"
            f"Answer: {q.answer.text}{voice}\n"
            f"Scores: Tech={e.technical_score:g}, Depth={e.depth_score:g}, "
            f"Clarity={e.clarity_score:g}, PS={e.problem_solving_score:g}, "
            f"Comm={e.communication_score:g}, Overall={e.overall_score:g}\n"
            f"Strengths: {', '.join(e.strengths)}\n"
            f"Weaknesses: {', '.join(e.weaknesses)}"
        )
    return "\n\n".join(blocks)


# =============================================================================
# Service
# =============================================================================


class ReportService:
    """Builds the FinalReport for a session."""

    def __init__(self, report_generator: IReportGenerator):
        self.report_generator = report_generator

    async def build_report(self, session: Session) -> FinalReport:
        """
        Compute metrics, ask the generator for narrative, merge.

        Raises whatever the report generator raises; nothing is persisted here.
        """
        scores: AggregatedScores = session.aggregated_scores or aggregate(session.evaluations())
        overall_scores = [e.overall_score for e in session.evaluations()]

        confidence = confidence_from_variance(
            score_variance(overall_scores), len(overall_scores)
        )
        band = hire_band(scores.overall_average)
        weakness_frequency = session.weakness_tracker.as_frequency()

        request = ReportRequest(
            transcript_summary=build_transcript_summary(session.questions),
            role=session.role,
            level=session.experience_level,
            aggregated_scores=scores,
            hire_band=band,
            confidence_level=confidence,
            weakness_frequency=weakness_frequency,
        )
        draft = await self.report_generator.generate_report(request)

        report = FinalReport(
            average_score=scores.overall_average,
            strongest_areas=draft.strongest_areas,
            weakest_areas=draft.weakest_areas,
            confidence_level=confidence,
            hire_recommendation=hire_recommendation(band),
            hire_band=band,
            improvement_roadmap=draft.improvement_roadmap,
            next_preparation_focus=(
                draft.next_preparation_focus or preparation_focus(scores.weakest_dimension)
            ),
            executive_summary=draft.executive_summary,
            weakness_frequency=weakness_frequency,
            time_analysis=calculate_time_metrics(session.questions),
        )

        log.info(
            "final_report_built",
            session_id=session.id,
            average_score=report.average_score,
            hire_band=band,
            confidence_level=confidence,
        )
        return report
