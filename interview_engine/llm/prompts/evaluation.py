"""Prompts for answer evaluation."""

from typing import Optional

from interview_engine.domain.models.session import ExperienceLevel, VoiceMetadata
from interview_engine.services.voice_analysis import summarize_delivery


def get_evaluation_system_prompt() -> str:
    return """You are a strict and experienced technical interviewer.
Evaluate the candidate's answer objectively, based only on what they said.
Do not inflate scores and do not assume unstated knowledge."""


def get_evaluation_prompt(
    question: str,
    answer: str,
    role: str,
    level: ExperienceLevel,
    voice_meta: Optional[VoiceMetadata] = None,
) -> str:
    """
    Build the evaluation prompt for one answer.

    Args:
        question: Question text
        answer: Candidate answer (typed or transcribed)
        role: Target role
        level: Experience level
        voice_meta: Delivery stats for spoken answers

    Returns:
        User prompt string
    """
    delivery = ""
    if voice_meta is not None:
        delivery = f"\nThe answer was spoken. Delivery: {summarize_delivery(voice_meta)}\n"

    return f"""Role: {role}
Experience Level: {ExperienceLevel(level).value}

Question:
{question}

Candidate Answer:
{answer}
{delivery}
Score each dimension from 1 to 10:
1. technical_score: correctness of concepts; penalize factual errors.
2. depth_score: mechanisms, trade-offs, edge cases; penalize shallow definitions.
3. problem_solving_score: logical, step-by-step reasoning.
4. clarity_score: organized, coherent explanation.
5. communication_score: professional, concise, complete.

Experience-level adjustment:
- Junior: expect foundational understanding.
- Mid: expect implementation details and reasoning.
- Senior: expect architectural thinking, trade-offs, scalability awareness.

Scoring rules:
- 5 = acceptable baseline, 7 = strong, 9+ = exceptional and rare.
- If a major technical error exists, technical_score must be <= 4 and the error
  listed in major_technical_errors.

Return STRICT JSON only in this format:
{{
  "technical_score": number,
  "depth_score": number,
  "problem_solving_score": number,
  "clarity_score": number,
  "communication_score": number,
  "overall_score": number,
  "major_technical_errors": string[],
  "strengths": string[],
  "weaknesses": string[],
  "improvements": string[]
}}"""
