# noqa
from interview_engine.llm.prompts.question import (
    get_question_system_prompt,
    get_initial_question_prompt,
    get_followup_question_prompt,
)
from interview_engine.llm.prompts.evaluation import (
    get_evaluation_system_prompt,
    get_evaluation_prompt,
)
from interview_engine.llm.prompts.voice import get_voice_evaluation_prompt
from interview_engine.llm.prompts.report import get_report_prompt

__all__ = [
    "get_question_system_prompt",
    "get_initial_question_prompt",
    "get_followup_question_prompt",
    "get_evaluation_system_prompt",
    "get_evaluation_prompt",
    "get_voice_evaluation_prompt",
    "get_report_prompt",
]
