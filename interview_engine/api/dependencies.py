"""Dependency injection for API routes.

Services are built once in the application lifespan and kept on app.state;
these dependencies hand them to routes. Tests override them through
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request

from interview_engine.core.config import settings
from interview_engine.core.exceptions import ConfigurationError
from interview_engine.persistence.repositories.session_repo import SessionRepository
from interview_engine.services.session_service import SessionService


def get_session_service(request: Request) -> SessionService:
    """FastAPI dependency for the process-wide SessionService."""
    service = getattr(request.app.state, "session_service", None)
    if service is None:
        raise ConfigurationError("Session service is not initialized")
    return service


def get_session_repository() -> SessionRepository:
    """FastAPI dependency injection for SessionRepository.

    Each request gets a new repository with database path from settings.
    """
    return SessionRepository(str(settings.database_path))


# Type aliases for dependency injection
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
SessionRepoDep = Annotated[SessionRepository, Depends(get_session_repository)]
