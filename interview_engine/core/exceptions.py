"""
Custom exception hierarchy for the interview engine.

All application exceptions inherit from InterviewSystemError.
"""


class InterviewSystemError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(InterviewSystemError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Generator Errors
# =============================================================================


class GeneratorError(InterviewSystemError):
    """Base for errors raised around the content generator."""

    pass


class GeneratorFailureError(GeneratorError):
    """External content/evaluation call failed.

    Raised by the guardrail loop only after its final attempt, and directly
    on non-retried paths such as answer evaluation.
    """

    pass


class IncompleteGeneratedContentError(GeneratorError):
    """Generator output is missing required fields."""

    pass


class PolicyViolationError(GeneratorError):
    """Generated content is outside the experience level's policy.

    Never reaches callers: the guardrail loop logs it and retries or corrects.
    """

    pass


# =============================================================================
# LLM Transport Errors
# =============================================================================


class LLMError(GeneratorError):
    """Base for LLM-related errors."""

    pass


class LLMTimeoutError(LLMError):
    """LLM call timed out."""

    pass


class LLMRateLimitError(LLMError):
    """LLM rate limit exceeded."""

    pass


class LLMResponseParseError(LLMError):
    """Failed to parse LLM response."""

    pass


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(InterviewSystemError):
    """Session-related error."""

    pass


class SessionNotFoundError(SessionError):
    """Session does not exist."""

    pass


class SessionNotActiveError(SessionError):
    """Answer or action submitted to a session that is not IN_PROGRESS."""

    pass


class NoPendingQuestionError(SessionError):
    """Answer submitted while no question is awaiting an answer."""

    pass


class SessionConflictError(SessionError):
    """Session was modified concurrently; the write was rejected."""

    pass


# =============================================================================
# Usage Errors
# =============================================================================


class QuotaExceededError(InterviewSystemError):
    """User has used up their interview allowance for the period."""

    pass
