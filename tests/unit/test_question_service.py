"""Tests for the question generation guardrail loop."""

from unittest.mock import AsyncMock, patch

import pytest

from interview_engine.core.exceptions import (
    ConfigurationError,
    GeneratorFailureError,
    IncompleteGeneratedContentError,
    LLMTimeoutError,
)
from interview_engine.domain.models.generation import (
    Accepted,
    Corrected,
    QuestionCandidate,
)
from interview_engine.domain.models.session import (
    Difficulty,
    ExperienceLevel,
    FollowUpIntent,
    QuestionType,
)
from interview_engine.services.difficulty_policy import get_allowed_topics
from interview_engine.services.question_service import QuestionService


def _generator(*results):
    generator = AsyncMock()
    generator.generate_question.side_effect = list(results)
    return generator


def _question(difficulty=Difficulty.EASY, level_score=2.0, topic="HTTP basics"):
    return QuestionCandidate(
        question="Explain what an HTTP GET request does.",
        topic=topic,
        difficulty=difficulty,
        level_score=level_score,
    )


class TestBuildRequest:
    """Tests for request construction."""

    def test_initial_request_carries_policy(self):
        service = QuestionService(_generator(), max_attempts=3)
        request = service.build_request(
            QuestionType.INITIAL, "Backend Developer", ExperienceLevel.JUNIOR
        )
        assert request.allowed_difficulties == [Difficulty.EASY]
        assert request.band_min == 1 and request.band_max == 3
        assert request.allowed_topics == get_allowed_topics(
            "Backend Developer", ExperienceLevel.JUNIOR
        )
        assert "system design" in request.forbidden_topics

    def test_followup_context_passed_through(self):
        service = QuestionService(_generator(), max_attempts=3)
        request = service.build_request(
            QuestionType.FOLLOWUP,
            "Backend Developer",
            ExperienceLevel.MID,
            previous_topic="Caching basics (Redis)",
            intent=FollowUpIntent.PROBE_DEPTH,
            target_difficulty=Difficulty.MEDIUM,
        )
        assert request.kind == QuestionType.FOLLOWUP
        assert request.previous_topic == "Caching basics (Redis)"
        assert request.intent == FollowUpIntent.PROBE_DEPTH


class TestGuardrailLoop:
    """Tests for generate()."""

    @pytest.mark.asyncio
    async def test_first_valid_candidate_accepted(self):
        generator = _generator(_question())
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.JUNIOR
        )

        assert isinstance(outcome, Accepted)
        assert outcome.attempts == 1
        assert outcome.was_corrected is False
        assert generator.generate_question.await_count == 1

    @pytest.mark.asyncio
    async def test_valid_on_third_attempt_returned_unmodified(self):
        third = _question(level_score=2.5)
        generator = _generator(
            _question(difficulty=Difficulty.HARD),
            _question(level_score=8),
            third,
        )
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.JUNIOR
        )

        assert isinstance(outcome, Accepted)
        assert outcome.attempts == 3
        assert len(outcome.rejections) == 2
        assert outcome.candidate.level_score == 2.5
        assert outcome.candidate.question == third.question

    @pytest.mark.asyncio
    async def test_three_violations_corrected(self):
        generator = _generator(
            _question(difficulty=Difficulty.HARD, level_score=9),
            _question(difficulty=Difficulty.HARD, level_score=9),
            _question(difficulty=Difficulty.MEDIUM, level_score=6),
        )
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.JUNIOR
        )

        assert isinstance(outcome, Corrected)
        assert outcome.was_corrected is True
        assert outcome.attempts == 3
        assert outcome.candidate.difficulty == Difficulty.EASY
        assert outcome.candidate.level_score == 3

    @pytest.mark.asyncio
    async def test_same_request_sent_on_every_attempt(self):
        generator = _generator(
            _question(difficulty=Difficulty.HARD),
            _question(),
        )
        service = QuestionService(generator, max_attempts=3)

        await service.generate_initial_question("Backend Developer", ExperienceLevel.JUNIOR)

        first, second = [c.args[0] for c in generator.generate_question.await_args_list]
        assert first == second

    @pytest.mark.asyncio
    async def test_exception_then_success(self):
        generator = _generator(LLMTimeoutError("timed out"), _question())
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.JUNIOR
        )

        assert isinstance(outcome, Accepted)
        assert outcome.attempts == 2

    @pytest.mark.asyncio
    async def test_final_exception_wrapped(self):
        generator = _generator(
            _question(difficulty=Difficulty.HARD),
            RuntimeError("boom"),
            RuntimeError("boom again"),
        )
        service = QuestionService(generator, max_attempts=3)

        with pytest.raises(GeneratorFailureError, match="after 3 attempts"):
            await service.generate_initial_question("Backend Developer", ExperienceLevel.JUNIOR)

    @pytest.mark.asyncio
    async def test_incomplete_initial_rejected(self):
        incomplete = QuestionCandidate(question="What is REST?", topic=None, difficulty=None)
        generator = _generator(incomplete, incomplete)
        service = QuestionService(generator, max_attempts=2)

        with pytest.raises(IncompleteGeneratedContentError):
            await service.generate_initial_question("Backend Developer", ExperienceLevel.JUNIOR)

    @pytest.mark.asyncio
    async def test_blank_question_text_rejected(self):
        generator = _generator(QuestionCandidate(question="   ", topic="x", difficulty=Difficulty.EASY))
        service = QuestionService(generator, max_attempts=1)

        with pytest.raises(IncompleteGeneratedContentError):
            await service.generate_initial_question("Backend Developer", ExperienceLevel.JUNIOR)

    @pytest.mark.asyncio
    async def test_missing_level_score_defaults_to_band_min(self):
        generator = _generator(_question(difficulty=Difficulty.MEDIUM, level_score=None))
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.SENIOR
        )

        assert isinstance(outcome, Accepted)
        assert outcome.candidate.level_score == 6

    @pytest.mark.asyncio
    async def test_followup_inherits_topic_and_target_difficulty(self):
        generator = _generator(
            QuestionCandidate(question="How would you invalidate that cache?", level_score=5)
        )
        service = QuestionService(generator, max_attempts=3)
        request = service.build_request(
            QuestionType.FOLLOWUP,
            "Backend Developer",
            ExperienceLevel.MID,
            previous_topic="Caching basics (Redis)",
            previous_difficulty=Difficulty.EASY,
            target_difficulty=Difficulty.MEDIUM,
        )

        outcome = await service.generate_followup_question(request)

        assert outcome.candidate.topic == "Caching basics (Redis)"
        assert outcome.candidate.difficulty == Difficulty.MEDIUM

    @pytest.mark.asyncio
    async def test_junior_backend_first_question_in_policy(self, generator):
        """The default scripted generator yields a compliant Junior question."""
        service = QuestionService(generator, max_attempts=3)

        outcome = await service.generate_initial_question(
            "Backend Developer", ExperienceLevel.JUNIOR
        )

        assert outcome.candidate.difficulty == Difficulty.EASY
        assert outcome.candidate.topic in get_allowed_topics(
            "Backend Developer", ExperienceLevel.JUNIOR
        )


class TestConstruction:
    """Tests for constructor validation."""

    @pytest.mark.parametrize("attempts", [0, -1])
    def test_rejects_non_positive_attempts(self, attempts):
        with pytest.raises(ConfigurationError, match="at least 1"):
            QuestionService(_generator(), max_attempts=attempts)

    def test_defaults_to_configured_attempts(self):
        assert QuestionService(_generator()).max_attempts >= 1


class TestPolicyViolationLogging:
    """Rejected candidates are reported through the log, not raised."""

    @pytest.mark.asyncio
    async def test_violation_logged_not_raised(self):
        generator = _generator(_question(difficulty=Difficulty.HARD), _question())
        service = QuestionService(generator, max_attempts=3)

        with patch("interview_engine.services.question_service.log") as mock_log:
            outcome = await service.generate_initial_question(
                "Backend Developer", ExperienceLevel.JUNIOR
            )

        assert isinstance(outcome, Accepted)
        kwargs = next(
            c.kwargs
            for c in mock_log.warning.call_args_list
            if c.args[0] == "policy_violation"
        )
        assert kwargs["error_type"] == "PolicyViolationError"
        assert "not allowed" in kwargs["reason"]
        assert outcome.rejections == [kwargs["reason"]]
