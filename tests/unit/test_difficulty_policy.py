"""Tests for the difficulty and topic policy table."""

import pytest

from interview_engine.domain.models.session import Difficulty, ExperienceLevel
from interview_engine.services.difficulty_policy import (
    BACKEND_TOPICS,
    GENERIC_TOPICS,
    clamp_difficulty,
    get_allowed_topics,
    get_difficulty_band,
    get_forbidden_topics,
    get_level_config,
    is_difficulty_allowed,
)


class TestLevelConfig:
    """Tests for per-level policy bundles."""

    def test_junior_allows_only_easy(self):
        config = get_level_config(ExperienceLevel.JUNIOR)
        assert config.allowed_difficulty == [Difficulty.EASY]
        assert (config.difficulty_band.min, config.difficulty_band.max) == (1, 3)

    def test_mid_band(self):
        config = get_level_config(ExperienceLevel.MID)
        assert config.allowed_difficulty == [Difficulty.EASY, Difficulty.MEDIUM]
        assert (config.difficulty_band.min, config.difficulty_band.max) == (3, 7)

    def test_senior_band(self):
        config = get_level_config(ExperienceLevel.SENIOR)
        assert config.allowed_difficulty == [Difficulty.MEDIUM, Difficulty.HARD]
        assert (config.difficulty_band.min, config.difficulty_band.max) == (6, 10)

    def test_accepts_plain_string_level(self):
        assert get_level_config("Senior") is get_level_config(ExperienceLevel.SENIOR)


class TestTopics:
    """Tests for role-keyed topic lookups."""

    def test_known_role_topics(self):
        topics = get_allowed_topics("Backend Developer", ExperienceLevel.JUNIOR)
        assert topics == BACKEND_TOPICS["junior"]

    def test_unknown_role_falls_back_to_default(self):
        topics = get_allowed_topics("Data Engineer", ExperienceLevel.MID)
        assert topics == GENERIC_TOPICS["mid"]

    def test_junior_backend_forbids_system_design(self):
        forbidden = get_forbidden_topics("Backend Developer", ExperienceLevel.JUNIOR)
        assert "system design" in forbidden

    def test_senior_has_no_forbidden_topics(self):
        assert get_forbidden_topics("Backend Developer", ExperienceLevel.SENIOR) == []

    def test_unknown_role_forbidden_falls_back_to_default(self):
        forbidden = get_forbidden_topics("Data Engineer", ExperienceLevel.JUNIOR)
        assert "distributed systems" in forbidden


class TestDifficultyChecks:
    """Tests for is_difficulty_allowed and clamp_difficulty."""

    def test_is_difficulty_allowed(self):
        assert is_difficulty_allowed(Difficulty.EASY, ExperienceLevel.JUNIOR)
        assert not is_difficulty_allowed(Difficulty.HARD, ExperienceLevel.JUNIOR)
        assert not is_difficulty_allowed(Difficulty.EASY, ExperienceLevel.SENIOR)

    @pytest.mark.parametrize(
        "difficulty,level,expected",
        [
            (Difficulty.HARD, ExperienceLevel.JUNIOR, Difficulty.EASY),
            (Difficulty.MEDIUM, ExperienceLevel.JUNIOR, Difficulty.EASY),
            (Difficulty.HARD, ExperienceLevel.MID, Difficulty.MEDIUM),
            (Difficulty.EASY, ExperienceLevel.SENIOR, Difficulty.MEDIUM),
            (Difficulty.MEDIUM, ExperienceLevel.MID, Difficulty.MEDIUM),
        ],
    )
    def test_clamp_difficulty(self, difficulty, level, expected):
        assert clamp_difficulty(difficulty, level) == expected

    @pytest.mark.parametrize("level", list(ExperienceLevel))
    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_clamp_is_member_and_idempotent(self, difficulty, level):
        """Clamping always lands in the allowed set and is stable."""
        once = clamp_difficulty(difficulty, level)
        assert once in get_level_config(level).allowed_difficulty
        assert clamp_difficulty(once, level) == once


class TestDifficultyBand:
    """Tests for numeric band helpers."""

    def test_clamp_and_contains(self):
        band = get_difficulty_band(ExperienceLevel.MID)
        assert band.clamp(1) == 3
        assert band.clamp(9.5) == 7
        assert band.clamp(5) == 5
        assert band.contains(3) and band.contains(7)
        assert not band.contains(7.1)
