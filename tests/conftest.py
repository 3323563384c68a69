"""
Shared test fixtures.

Temporary SQLite database, repositories, and scripted stand-ins for the
content generator roles (question generator, evaluators, report writer).
"""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from interview_engine.core.config import GuardrailConfig, InterviewConfig, SessionConfig
from interview_engine.domain.models.generation import (
    QuestionCandidate,
    RawEvaluation,
    ReportDraft,
)
from interview_engine.domain.models.session import VoiceEvaluation
from interview_engine.persistence.database import init_database
from interview_engine.persistence.repositories.session_repo import SessionRepository
from interview_engine.persistence.repositories.usage_repo import UsageRepository
from interview_engine.services.evaluation_service import EvaluationService
from interview_engine.services.question_service import QuestionService
from interview_engine.services.report_service import ReportService
from interview_engine.services.session_service import SessionService


# ============ SCRIPTED COLLABORATORS ============


class ScriptedGenerator:
    """Question generator that replays a script.

    Items are QuestionCandidates to return or exceptions to raise, consumed
    in order. With an empty script it returns a policy-compliant question
    built from the request.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.requests = []

    async def generate_question(self, request):
        self.requests.append(request)
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return QuestionCandidate(
            question=f"Question {len(self.requests)} about {request.allowed_topics[0]}?",
            topic=request.previous_topic or request.allowed_topics[0],
            difficulty=request.target_difficulty or request.allowed_difficulties[0],
            level_score=request.band_min,
        )


class ScriptedEvaluator:
    """Answer evaluator returning queued RawEvaluations (default: all 7s)."""

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []

    async def evaluate_answer(self, question, answer, role, level, voice_meta=None):
        self.calls.append((question, answer, role, level, voice_meta))
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return RawEvaluation(
            technical_score=7,
            depth_score=7,
            clarity_score=7,
            problem_solving_score=7,
            communication_score=7,
            strengths=["Clear structure"],
            weaknesses=["Few examples"],
        )


class StubVoiceEvaluator:
    """Voice evaluator with a fixed result."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def evaluate_voice(self, transcript, metadata):
        self.calls.append((transcript, metadata))
        if self.error is not None:
            raise self.error
        return VoiceEvaluation(
            confidence_score=6,
            fluency_score=7,
            structure_score=6,
            professionalism_score=8,
            spoken_delivery_overall=6.5,
            feedback=["Fewer filler words"],
        )


class StubReportGenerator:
    """Report writer returning a fixed draft."""

    def __init__(self, draft=None, error=None):
        self.draft = draft or ReportDraft(
            strongest_areas=["Clarity"],
            weakest_areas=["Depth of Explanation"],
            improvement_roadmap=["Study trade-offs"],
            next_preparation_focus=["Caching"],
            executive_summary="Solid fundamentals.",
        )
        self.error = error
        self.requests = []

    async def generate_report(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.draft


# ============ DATABASE ============


@pytest.fixture
async def test_db():
    """Create and initialize test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        from interview_engine.core import config

        original_path = config.settings.database_path
        config.settings.database_path = db_path

        with patch("interview_engine.persistence.database.settings", config.settings):
            yield db_path

        config.settings.database_path = original_path


@pytest.fixture
async def session_repo(test_db):
    """Create session repository with test database."""
    return SessionRepository(str(test_db))


@pytest.fixture
async def usage_repo(test_db):
    """Usage repository allowing two interviews per month."""
    return UsageRepository(str(test_db), monthly_limit=2)


# ============ COLLABORATORS ============


@pytest.fixture
def generator():
    return ScriptedGenerator()


@pytest.fixture
def evaluator():
    return ScriptedEvaluator()


@pytest.fixture
def voice_evaluator():
    return StubVoiceEvaluator()


@pytest.fixture
def report_generator():
    return StubReportGenerator()


@pytest.fixture
def test_config():
    """Small limits so cap and deadline paths are reachable."""
    return InterviewConfig(
        session=SessionConfig(max_questions=3, max_duration_minutes=30, time_warning_minutes=5),
        guardrail=GuardrailConfig(max_attempts=3),
    )


@pytest.fixture
def session_service(
    session_repo,
    usage_repo,
    generator,
    evaluator,
    voice_evaluator,
    report_generator,
    test_config,
):
    """SessionService wired to the test database and scripted collaborators."""
    return SessionService(
        session_repo=session_repo,
        question_service=QuestionService(generator, max_attempts=3),
        evaluation_service=EvaluationService(evaluator, voice_evaluator),
        report_service=ReportService(report_generator),
        usage_tracker=usage_repo,
        config=test_config,
    )
