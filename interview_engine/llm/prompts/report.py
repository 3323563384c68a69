"""Prompt for the final interview report.

Scores, confidence and hire band are computed by the engine and passed in as
facts; the model only writes the narrative.
"""

from interview_engine.domain.models.generation import ReportRequest


def get_report_prompt(request: ReportRequest) -> str:
    scores = request.aggregated_scores
    frequency = ", ".join(
        f"{dim}: {count}" for dim, count in request.weakness_frequency.items()
    )
    return f"""Generate a structured final interview report.

Role: {request.role}
Experience Level: {request.level.value}

Computed results (treat as final, do not recompute):
- Overall average: {scores.overall_average:g}
- Technical {scores.average_technical:g}, Depth {scores.average_depth:g}, Clarity {scores.average_clarity:g}, Problem Solving {scores.average_problem_solving:g}, Communication {scores.average_communication:g}
- Strongest dimension: {scores.strongest_dimension}
- Weakest dimension: {scores.weakest_dimension}
- Hire band: {request.hire_band}
- Confidence: {request.confidence_level}
- Times each dimension was the weakest: {frequency}

All questions, answers, and evaluation scores:
{request.transcript_summary}

Rules:
- Identify the 2-3 strongest and 2-3 weakest skill areas.
- Provide an actionable 5-step improvement roadmap with specific advice.
- Provide 3-5 specific areas to study next.
- Write a 2-3 sentence executive summary consistent with the hire band.

Return STRICT JSON only, no markdown formatting, no code blocks:
{{
  "strongest_areas": string[],
  "weakest_areas": string[],
  "improvement_roadmap": string[],
  "next_preparation_focus": string[],
  "executive_summary": string
}}"""
