"""
FastAPI application entry point.

Run with: uvicorn interview_engine.main:app --reload
"""

from contextlib import asynccontextmanager
import uuid

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from interview_engine import __version__
from interview_engine.core.config import interview_config, settings
from interview_engine.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
)
from interview_engine.api.exception_handlers import setup_exception_handlers
from interview_engine.api.routes import health, interviews
from interview_engine.llm.content_generator import build_content_generator
from interview_engine.persistence.database import init_database
from interview_engine.persistence.repositories import SessionRepository, UsageRepository
from interview_engine.services import (
    EvaluationService,
    QuestionService,
    ReportService,
    SessionService,
    SessionSweeper,
)

# Configure logging before anything else
configure_logging()
log = structlog.get_logger(__name__)


# =============================================================================
# Correlation ID Middleware
# =============================================================================


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a correlation ID to each request.

    Reuses an incoming X-Request-ID header or generates a UUID4, binds it to
    the structlog context for every log line of the request, and echoes it
    in the response headers.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_context(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()


# =============================================================================
# Wiring
# =============================================================================


def build_session_service(generator, db_path: str) -> SessionService:
    """Wire repositories and services around one content generator."""
    return SessionService(
        session_repo=SessionRepository(db_path),
        question_service=QuestionService(generator),
        evaluation_service=EvaluationService(generator, voice_evaluator=generator),
        report_service=ReportService(generator),
        usage_tracker=UsageRepository(
            db_path, monthly_limit=interview_config.quota.monthly_interview_limit
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: database, content generator (fails fast on a missing API key),
    services and the session sweeper. Shutdown: stops the sweeper.
    """
    log.info(
        "application_starting",
        debug=settings.debug,
        database_path=str(settings.database_path),
        llm_provider=settings.llm_provider,
    )

    await init_database()

    generator = build_content_generator()
    db_path = str(settings.database_path)
    app.state.session_service = build_session_service(generator, db_path)

    sweeper = None
    if interview_config.sweeper.enabled:
        sweeper = SessionSweeper(SessionRepository(db_path))
        await sweeper.start()
    app.state.sweeper = sweeper

    log.info("application_started")

    yield

    log.info("application_shutting_down")
    if sweeper is not None:
        await sweeper.stop()


# Create FastAPI application
app = FastAPI(
    title="Adaptive Interview Engine",
    description="Adaptive technical interview orchestration engine",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware for development
if settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(CorrelationIDMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["system"])
app.include_router(interviews.router)


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {"name": "Adaptive Interview Engine", "version": __version__, "status": "running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "interview_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
