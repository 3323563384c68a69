"""Repository implementations."""

from interview_engine.persistence.repositories.session_repo import SessionRepository
from interview_engine.persistence.repositories.usage_repo import UsageRepository

__all__ = ["SessionRepository", "UsageRepository"]
