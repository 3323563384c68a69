"""
LLM-backed content generator.

Implements the four content roles the engine consumes (question generator,
answer evaluator, voice evaluator, report generator) on top of LLMClient.
Prompt wording lives in interview_engine.llm.prompts; this module only sends
prompts and turns JSON replies into domain models.

No retries here beyond the client's transport retry: the guardrail loop owns
question retries, and evaluation failures fail the turn.
"""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from interview_engine.core.config import Settings
from interview_engine.core.exceptions import IncompleteGeneratedContentError
from interview_engine.domain.models.generation import (
    GenerationRequest,
    QuestionCandidate,
    RawEvaluation,
    ReportDraft,
    ReportRequest,
)
from interview_engine.domain.models.session import (
    Difficulty,
    ExperienceLevel,
    QuestionType,
    VoiceEvaluation,
    VoiceMetadata,
)
from interview_engine.llm.client import LLMClient, get_llm_client
from interview_engine.llm.parsing import parse_json_object
from interview_engine.llm.prompts import (
    get_evaluation_prompt,
    get_evaluation_system_prompt,
    get_followup_question_prompt,
    get_initial_question_prompt,
    get_question_system_prompt,
    get_report_prompt,
    get_voice_evaluation_prompt,
)

log = structlog.get_logger(__name__)


def _as_str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item]


def _as_difficulty(value: Any) -> Optional[Difficulty]:
    if not isinstance(value, str):
        return None
    try:
        return Difficulty(value.strip().lower())
    except ValueError:
        return None


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_question_candidate(data: Dict[str, Any]) -> QuestionCandidate:
    """Lenient mapping: unusable fields become None for the guardrail loop to judge."""
    question = data.get("question")
    topic = data.get("topic") or data.get("focus_area")
    return QuestionCandidate(
        question=question.strip() if isinstance(question, str) else None,
        topic=topic.strip() if isinstance(topic, str) else None,
        difficulty=_as_difficulty(data.get("difficulty")),
        level_score=_as_float(data.get("level_score")),
    )


def parse_raw_evaluation(data: Dict[str, Any]) -> RawEvaluation:
    """
    Strict mapping: all five sub-scores are required.

    Raises:
        IncompleteGeneratedContentError: A score is missing or not numeric
    """
    try:
        return RawEvaluation(
            technical_score=data.get("technical_score"),
            depth_score=data.get("depth_score"),
            clarity_score=data.get("clarity_score"),
            problem_solving_score=data.get("problem_solving_score"),
            communication_score=data.get("communication_score"),
            overall_score=_as_float(data.get("overall_score")),
            strengths=_as_str_list(data.get("strengths")),
            weaknesses=_as_str_list(data.get("weaknesses")),
            improvements=_as_str_list(data.get("improvements")),
            major_technical_errors=_as_str_list(data.get("major_technical_errors")),
        )
    except ValidationError as e:
        raise IncompleteGeneratedContentError(
            f"Evaluator returned incomplete scores: {e.error_count()} invalid field(s)"
        ) from e


class LLMContentGenerator:
    """Question generator, evaluators and report writer backed by an LLM.

    Generation uses a higher-temperature client so that guardrail retries get
    different candidates; evaluation and reports use a low-temperature one.
    """

    def __init__(self, generation_client: LLMClient, evaluation_client: LLMClient):
        self.generation_client = generation_client
        self.evaluation_client = evaluation_client

    async def generate_question(self, request: GenerationRequest) -> QuestionCandidate:
        if request.kind == QuestionType.INITIAL:
            prompt = get_initial_question_prompt(request)
        else:
            prompt = get_followup_question_prompt(request)

        response = await self.generation_client.complete(
            prompt, system=get_question_system_prompt(), json_mode=True
        )
        candidate = parse_question_candidate(parse_json_object(response.content))

        log.debug(
            "question_candidate_generated",
            kind=request.kind.value,
            topic=candidate.topic,
            difficulty=candidate.difficulty.value if candidate.difficulty else None,
            level_score=candidate.level_score,
        )
        return candidate

    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        role: str,
        level: ExperienceLevel,
        voice_meta: Optional[VoiceMetadata] = None,
    ) -> RawEvaluation:
        response = await self.evaluation_client.complete(
            get_evaluation_prompt(question, answer, role, level, voice_meta),
            system=get_evaluation_system_prompt(),
            json_mode=True,
        )
        return parse_raw_evaluation(parse_json_object(response.content))

    async def evaluate_voice(
        self, transcript: str, metadata: VoiceMetadata
    ) -> VoiceEvaluation:
        response = await self.evaluation_client.complete(
            get_voice_evaluation_prompt(transcript, metadata), json_mode=True
        )
        data = parse_json_object(response.content)
        try:
            return VoiceEvaluation(
                confidence_score=data.get("confidence_score"),
                fluency_score=data.get("fluency_score"),
                structure_score=data.get("structure_score"),
                professionalism_score=data.get("professionalism_score"),
                spoken_delivery_overall=data.get("spoken_delivery_overall"),
                feedback=_as_str_list(data.get("feedback")),
            )
        except ValidationError as e:
            raise IncompleteGeneratedContentError(
                "Voice evaluator returned incomplete scores"
            ) from e

    async def generate_report(self, request: ReportRequest) -> ReportDraft:
        response = await self.evaluation_client.complete(
            get_report_prompt(request), json_mode=True
        )
        data = parse_json_object(response.content)
        summary = data.get("executive_summary")
        return ReportDraft(
            strongest_areas=_as_str_list(data.get("strongest_areas")),
            weakest_areas=_as_str_list(data.get("weakest_areas")),
            improvement_roadmap=_as_str_list(data.get("improvement_roadmap")),
            next_preparation_focus=_as_str_list(data.get("next_preparation_focus")),
            executive_summary=summary if isinstance(summary, str) else None,
        )


def build_content_generator(config: Optional[Settings] = None) -> LLMContentGenerator:
    """
    Build the content generator from settings.

    Called once at process start; the instance is passed to the services
    that need it.

    Raises:
        ConfigurationError: Unknown provider or missing API key
    """
    generator = LLMContentGenerator(
        generation_client=get_llm_client("generation", config),
        evaluation_client=get_llm_client("evaluation", config),
    )
    log.info("content_generator_built", provider=generator.generation_client.provider_name)
    return generator
