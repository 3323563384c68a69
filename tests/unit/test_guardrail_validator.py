"""Tests for the question guardrail validator."""

from interview_engine.domain.models.generation import QuestionCandidate
from interview_engine.domain.models.session import Difficulty, ExperienceLevel
from interview_engine.services.guardrail_validator import correct, validate


def _candidate(difficulty=Difficulty.EASY, level_score=2.0):
    return QuestionCandidate(
        question="What does HTTP 404 mean?",
        topic="Status codes",
        difficulty=difficulty,
        level_score=level_score,
    )


class TestValidate:
    """Tests for validate()."""

    def test_valid_candidate(self):
        result = validate(_candidate(), ExperienceLevel.JUNIOR)
        assert result.valid
        assert result.reason is None
        assert result.corrected_difficulty is None

    def test_disallowed_difficulty(self):
        result = validate(_candidate(difficulty=Difficulty.HARD), ExperienceLevel.JUNIOR)
        assert not result.valid
        assert "not allowed" in result.reason
        assert result.corrected_difficulty == Difficulty.EASY
        assert result.corrected_level_score is None

    def test_score_outside_band(self):
        result = validate(_candidate(level_score=5), ExperienceLevel.JUNIOR)
        assert not result.valid
        assert "outside band" in result.reason
        assert result.corrected_level_score == 3

    def test_both_checks_reported_independently(self):
        result = validate(
            _candidate(difficulty=Difficulty.EASY, level_score=2), ExperienceLevel.SENIOR
        )
        assert not result.valid
        assert len(result.reasons) == 2
        assert result.corrected_difficulty == Difficulty.MEDIUM
        assert result.corrected_level_score == 6

    def test_missing_score_not_penalized(self):
        result = validate(_candidate(level_score=None), ExperienceLevel.JUNIOR)
        assert result.valid

    def test_band_edges_are_inclusive(self):
        assert validate(_candidate(level_score=1), ExperienceLevel.JUNIOR).valid
        assert validate(_candidate(level_score=3), ExperienceLevel.JUNIOR).valid


class TestCorrect:
    """Tests for correct()."""

    def test_forces_into_range(self):
        fixed = correct(_candidate(difficulty=Difficulty.HARD, level_score=9), ExperienceLevel.JUNIOR)
        assert fixed.difficulty == Difficulty.EASY
        assert fixed.level_score == 3
        assert fixed.question == "What does HTTP 404 mean?"
        assert validate(fixed, ExperienceLevel.JUNIOR).valid

    def test_missing_score_defaults_to_band_min(self):
        fixed = correct(_candidate(level_score=None), ExperienceLevel.SENIOR)
        assert fixed.level_score == 6
        assert fixed.difficulty == Difficulty.MEDIUM

    def test_does_not_mutate_input(self):
        original = _candidate(difficulty=Difficulty.HARD, level_score=9)
        correct(original, ExperienceLevel.JUNIOR)
        assert original.difficulty == Difficulty.HARD
        assert original.level_score == 9
