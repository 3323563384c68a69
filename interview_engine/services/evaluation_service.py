"""Answer evaluation.

Runs the text evaluator and, when voice metadata is present, the voice
evaluator concurrently; then normalizes and weights the raw scores.
Either call failing fails the whole evaluation and cancels the other. Unlike
question generation there are no retries here.
"""

import asyncio
from typing import Optional, Tuple

import structlog

from interview_engine.core.exceptions import (
    GeneratorFailureError,
    IncompleteGeneratedContentError,
)
from interview_engine.domain.models.session import (
    Evaluation,
    ExperienceLevel,
    VoiceEvaluation,
    VoiceMetadata,
)
from interview_engine.services.protocols import IAnswerEvaluator, IVoiceEvaluator
from interview_engine.services.scoring_service import build_evaluation

log = structlog.get_logger(__name__)


class EvaluationService:
    """Scores one answer against its question."""

    def __init__(
        self,
        evaluator: IAnswerEvaluator,
        voice_evaluator: Optional[IVoiceEvaluator] = None,
    ):
        self.evaluator = evaluator
        self.voice_evaluator = voice_evaluator

    async def evaluate(
        self,
        question: str,
        answer: str,
        role: str,
        level: ExperienceLevel,
        voice_meta: Optional[VoiceMetadata] = None,
    ) -> Tuple[Evaluation, Optional[VoiceEvaluation]]:
        """
        Evaluate an answer.

        Returns:
            (weighted evaluation, voice evaluation or None)

        Raises:
            IncompleteGeneratedContentError: Evaluator output was malformed
            GeneratorFailureError: Evaluator call raised
        """
        text_call = self.evaluator.evaluate_answer(
            question, answer, role, level, voice_meta
        )

        try:
            if voice_meta is not None and self.voice_evaluator is not None:
                raw, voice_evaluation = await self._evaluate_together(
                    text_call,
                    self.voice_evaluator.evaluate_voice(answer, voice_meta),
                )
            else:
                raw = await text_call
                voice_evaluation = None
        except IncompleteGeneratedContentError:
            raise
        except GeneratorFailureError:
            raise
        except Exception as e:
            log.error(
                "answer_evaluation_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise GeneratorFailureError(f"Answer evaluation failed: {e}") from e

        evaluation = build_evaluation(raw, level)

        log.debug(
            "answer_evaluated",
            overall_score=evaluation.overall_score,
            has_voice=voice_evaluation is not None,
        )

        return evaluation, voice_evaluation

    @staticmethod
    async def _evaluate_together(text_call, voice_call):
        """Run both evaluator calls; the first failure cancels the other."""
        text_task = asyncio.create_task(text_call)
        voice_task = asyncio.create_task(voice_call)
        tasks = (text_task, voice_task)

        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in tasks:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()
        return text_task.result(), voice_task.result()
