"""Question generation guardrail loop.

Obtains one policy-compliant question from the content generator despite
its unreliability:

- Up to `max_attempts` strictly sequential attempts with an unmodified request
  (the generator is expected to vary its own output across retries)
- Missing required fields reject the attempt (IncompleteGeneratedContentError)
- A missing level score defaults to the band minimum
- Valid candidates are returned immediately as Accepted
- Policy violations are logged and retried; on the last attempt the candidate
  is forced into range and returned as Corrected
- Generator exceptions propagate only after the final attempt

This is the only place in the engine that tolerates non-determinism.
"""

from typing import List, Optional

import structlog

from interview_engine.core.config import interview_config
from interview_engine.core.exceptions import (
    ConfigurationError,
    GeneratorFailureError,
    IncompleteGeneratedContentError,
    PolicyViolationError,
)
from interview_engine.domain.models.generation import (
    Accepted,
    Corrected,
    GenerationRequest,
    GuardrailOutcome,
    QuestionCandidate,
)
from interview_engine.domain.models.session import ExperienceLevel, QuestionType
from interview_engine.services.difficulty_policy import (
    get_allowed_topics,
    get_forbidden_topics,
    get_level_config,
)
from interview_engine.services.guardrail_validator import correct, validate
from interview_engine.services.protocols import IContentGenerator

log = structlog.get_logger(__name__)


class QuestionService:
    """Wraps the content generator with validation and bounded retries.

    Returns a tagged outcome (Accepted or Corrected) so callers can see
    whether the question had to be forced into policy.
    """

    def __init__(
        self,
        generator: IContentGenerator,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            generator: Content generator strategy
            max_attempts: Attempts before correction (defaults to interview_config.yaml)

        Raises:
            ConfigurationError: max_attempts is below 1
        """
        self.generator = generator
        self.max_attempts = (
            max_attempts
            if max_attempts is not None
            else interview_config.guardrail.max_attempts
        )
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )

    def build_request(
        self, kind: QuestionType, role: str, level: ExperienceLevel, **context
    ) -> GenerationRequest:
        """Build a request pre-filled with the level's policy for the role."""
        config = get_level_config(level)
        return GenerationRequest(
            kind=kind,
            role=role,
            level=level,
            allowed_topics=get_allowed_topics(role, level),
            forbidden_topics=get_forbidden_topics(role, level),
            allowed_difficulties=list(config.allowed_difficulty),
            band_min=config.difficulty_band.min,
            band_max=config.difficulty_band.max,
            **context,
        )

    async def generate_initial_question(
        self, role: str, level: ExperienceLevel
    ) -> GuardrailOutcome:
        """Generate the opening question from role and level context only."""
        request = self.build_request(QuestionType.INITIAL, role, level)
        return await self.generate(request)

    async def generate_followup_question(
        self, request: GenerationRequest
    ) -> GuardrailOutcome:
        """Generate a follow-up question from the full adaptive context."""
        return await self.generate(request)

    async def generate(self, request: GenerationRequest) -> GuardrailOutcome:
        """
        Run the bounded guardrail loop for one request.

        Returns:
            Accepted with the first valid candidate, or Corrected when every
            attempt violated policy

        Raises:
            IncompleteGeneratedContentError: Final attempt lacked required fields
            GeneratorFailureError: Final attempt raised
        """
        rejections: List[str] = []

        for attempt in range(1, self.max_attempts + 1):
            is_last = attempt == self.max_attempts

            try:
                raw = await self.generator.generate_question(request)
                candidate = self._complete(raw, request)
            except Exception as e:
                log.warning(
                    "question_generation_attempt_failed",
                    kind=request.kind.value,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if not is_last:
                    continue
                if isinstance(e, IncompleteGeneratedContentError):
                    raise
                raise GeneratorFailureError(
                    f"Question generation failed after {self.max_attempts} attempts: {e}"
                ) from e

            result = validate(candidate, request.level)
            if result.valid:
                log.info(
                    "question_accepted",
                    kind=request.kind.value,
                    attempt=attempt,
                    topic=candidate.topic,
                    difficulty=candidate.difficulty.value,
                )
                return Accepted(candidate=candidate, attempts=attempt, rejections=rejections)

            violation = PolicyViolationError(result.reason)
            rejections.append(violation.message)
            log.warning(
                "policy_violation",
                error_type=type(violation).__name__,
                kind=request.kind.value,
                level=request.level.value,
                attempt=attempt,
                max_attempts=self.max_attempts,
                reason=violation.message,
            )

            if is_last:
                corrected = correct(candidate, request.level)
                log.warning(
                    "question_corrected_after_retries",
                    attempts=attempt,
                    difficulty=corrected.difficulty.value,
                    level_score=corrected.level_score,
                )
                return Corrected(candidate=corrected, attempts=attempt, rejections=rejections)

        raise AssertionError("unreachable")

    def _complete(
        self, raw: QuestionCandidate, request: GenerationRequest
    ) -> QuestionCandidate:
        """Reject incomplete output and fill the fields that have defaults."""
        if not raw.question or not raw.question.strip():
            raise IncompleteGeneratedContentError("Generator returned no question text")

        topic = raw.topic
        difficulty = raw.difficulty

        if request.kind == QuestionType.INITIAL:
            if difficulty is None or not topic:
                raise IncompleteGeneratedContentError(
                    "Generator returned incomplete question data (difficulty and topic required)"
                )
        else:
            topic = topic or request.previous_topic
            difficulty = difficulty or request.target_difficulty or request.previous_difficulty
            if difficulty is None or not topic:
                raise IncompleteGeneratedContentError(
                    "Generator returned incomplete follow-up data"
                )

        level_score = raw.level_score if raw.level_score is not None else request.band_min

        return raw.model_copy(
            update={
                "question": raw.question.strip(),
                "topic": topic,
                "difficulty": difficulty,
                "level_score": level_score,
            }
        )
