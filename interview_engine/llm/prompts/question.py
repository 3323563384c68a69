"""
Prompts for question generation.

Initial questions get role and level context only. Follow-ups add the
previous turn, its scores, the chosen intent and target difficulty, and the
full history of asked questions so the model does not repeat itself.
"""

from interview_engine.domain.models.generation import GenerationRequest
from interview_engine.domain.models.session import FollowUpIntent

INTENT_GUIDANCE = {
    FollowUpIntent.CLARIFY_TECHNICAL: (
        "The candidate made technical mistakes. Ask a clarifying question on the "
        "same concept that checks whether they understand it correctly."
    ),
    FollowUpIntent.PROBE_DEPTH: (
        "The answer was shallow. Ask them to explain the underlying mechanism, "
        "trade-offs or edge cases of what they described."
    ),
    FollowUpIntent.SCENARIO_BASED: (
        "Problem solving was weak. Pose a short practical scenario that requires "
        "step-by-step reasoning."
    ),
    FollowUpIntent.ESCALATE_DIFFICULTY: (
        "The candidate is doing well. Move to a more demanding question, on the "
        "same topic or a related one from the allowed list."
    ),
}

_OUTPUT_FORMAT = """Return STRICT JSON only, no markdown formatting, no code blocks:
{
  "question": string,
  "topic": string,
  "difficulty": "easy" | "medium" | "hard",
  "level_score": number (1-10)
}"""


def get_question_system_prompt() -> str:
    """System prompt shared by initial and follow-up question generation."""
    return """You are a senior technical interviewer.

Ask ONE realistic, professional interview question at a time.
Stay strictly inside the allowed topics and difficulty labels you are given,
and never ask about a forbidden topic.
`level_score` rates how demanding the question is on a 1-10 scale and must
sit inside the given band."""


def _policy_block(request: GenerationRequest) -> str:
    difficulties = ", ".join(d.value for d in request.allowed_difficulties)
    forbidden = ", ".join(request.forbidden_topics) or "None"
    return (
        f"Role: {request.role}\n"
        f"Experience Level: {request.level.value}\n"
        f"Allowed difficulty: {difficulties}\n"
        f"Level score band: {request.band_min:g}-{request.band_max:g}\n"
        f"Allowed topics: {', '.join(request.allowed_topics)}\n"
        f"Forbidden topics: {forbidden}"
    )


def get_initial_question_prompt(request: GenerationRequest) -> str:
    return f"""Generate the first question of the interview.

{_policy_block(request)}

Rules:
- Pick one topic from the allowed topics.
- Ask a foundational but relevant question for this experience level.
- Avoid generic or overly simple questions.

{_OUTPUT_FORMAT}"""


def get_followup_question_prompt(request: GenerationRequest) -> str:
    intent = request.intent or FollowUpIntent.ESCALATE_DIFFICULTY
    target = request.target_difficulty.value if request.target_difficulty else "same as before"
    weaknesses = ", ".join(request.weaknesses) or "None identified"
    asked = "\n".join(f"- {q}" for q in request.asked_questions) or "- None"
    frequency = ", ".join(
        f"{dim}: {count}" for dim, count in request.weakness_frequency.items() if count
    ) or "None"

    return f"""Generate a follow-up interview question.

{_policy_block(request)}

Previous Question: {request.previous_question}
Previous Topic: {request.previous_topic}
Previous Difficulty: {request.previous_difficulty.value if request.previous_difficulty else "unknown"}
Scores: Tech={request.technical_score}, Depth={request.depth_score}, Clarity={request.clarity_score}, PS={request.problem_solving_score}, Comm={request.communication_score}
Weaknesses identified: {weaknesses}
Recurring weak dimensions: {frequency}

Follow-up intent: {intent.value}
{INTENT_GUIDANCE[intent]}
Target difficulty: {target}

Questions already asked (do not repeat or rephrase these):
{asked}

{_OUTPUT_FORMAT}"""
