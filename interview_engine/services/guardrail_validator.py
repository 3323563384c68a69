"""Guardrail validator for generated questions.

Checks a candidate question against the experience level's policy:

1. The difficulty label must be in the level's allowed set.
2. The numeric level score, when present, must sit inside the level's band.

The two checks are evaluated independently. `correct()` forces both fields
into range and is only used once the guardrail loop has run out of attempts.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from interview_engine.domain.models.generation import QuestionCandidate
from interview_engine.domain.models.session import Difficulty, ExperienceLevel
from interview_engine.services.difficulty_policy import (
    clamp_difficulty,
    get_level_config,
    is_difficulty_allowed,
)


@dataclass
class ValidationResult:
    """Outcome of validating one candidate."""

    valid: bool
    reasons: List[str] = field(default_factory=list)
    corrected_difficulty: Optional[Difficulty] = None
    corrected_level_score: Optional[float] = None

    @property
    def reason(self) -> Optional[str]:
        """All failure reasons joined, or None when valid."""
        return "; ".join(self.reasons) if self.reasons else None


def validate(candidate: QuestionCandidate, level: ExperienceLevel) -> ValidationResult:
    """
    Validate a candidate's difficulty and level score for a level.

    Args:
        candidate: Generator output; difficulty must already be set
        level: Session experience level

    Returns:
        ValidationResult with corrections for each failed check
    """
    config = get_level_config(level)
    result = ValidationResult(valid=True)

    if candidate.difficulty is not None and not is_difficulty_allowed(
        candidate.difficulty, level
    ):
        allowed = ", ".join(d.value for d in config.allowed_difficulty)
        result.valid = False
        result.reasons.append(
            f'Difficulty "{candidate.difficulty.value}" not allowed for '
            f"{ExperienceLevel(level).value} level. Allowed: {allowed}"
        )
        result.corrected_difficulty = clamp_difficulty(candidate.difficulty, level)

    # A missing score is not penalized
    if candidate.level_score is not None:
        band = config.difficulty_band
        if not band.contains(candidate.level_score):
            result.valid = False
            result.reasons.append(
                f"Level score {candidate.level_score} outside band "
                f"[{band.min:g}-{band.max:g}] for {ExperienceLevel(level).value} level"
            )
            result.corrected_level_score = band.clamp(candidate.level_score)

    return result


def correct(candidate: QuestionCandidate, level: ExperienceLevel) -> QuestionCandidate:
    """Return a copy with difficulty and level score forced into policy range."""
    config = get_level_config(level)
    band = config.difficulty_band

    difficulty = (
        clamp_difficulty(candidate.difficulty, level)
        if candidate.difficulty is not None
        else config.allowed_difficulty[0]
    )
    level_score = (
        band.clamp(candidate.level_score)
        if candidate.level_score is not None
        else band.min
    )

    return candidate.model_copy(
        update={"difficulty": difficulty, "level_score": level_score}
    )
