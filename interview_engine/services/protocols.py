"""
Collaborator protocol definitions (interfaces).

The engine consumes exactly these contracts. Concrete implementations are
passed in at construction time; LLMContentGenerator implements the four
content roles, SessionRepository the store and UsageRepository the quota.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from interview_engine.domain.models.generation import (
    GenerationRequest,
    QuestionCandidate,
    RawEvaluation,
    ReportDraft,
    ReportRequest,
)
from interview_engine.domain.models.session import (
    ExperienceLevel,
    Session,
    VoiceEvaluation,
    VoiceMetadata,
)


class IContentGenerator(Protocol):
    """Turns a structured request into a question candidate.

    May be slow, may raise at any time, and may return content that violates
    the level policy; the guardrail loop handles all three.
    """

    async def generate_question(self, request: GenerationRequest) -> QuestionCandidate:
        ...


class IAnswerEvaluator(Protocol):
    """Scores an answer against its question.

    Raises IncompleteGeneratedContentError on malformed output.
    """

    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        role: str,
        level: ExperienceLevel,
        voice_meta: Optional[VoiceMetadata] = None,
    ) -> RawEvaluation:
        ...


class IVoiceEvaluator(Protocol):
    """Assesses spoken delivery; only called when voice metadata is present."""

    async def evaluate_voice(
        self, transcript: str, metadata: VoiceMetadata
    ) -> VoiceEvaluation:
        ...


class IReportGenerator(Protocol):
    """Writes the narrative parts of the final report."""

    async def generate_report(self, request: ReportRequest) -> ReportDraft:
        ...


class ISessionStore(Protocol):
    """Session persistence with atomic per-session read-modify-write."""

    async def create(self, session: Session) -> Session:
        ...

    async def get(self, session_id: str) -> Optional[Session]:
        ...

    async def update(self, session: Session) -> Session:
        ...

    async def find_stale(self, cutoff: datetime) -> List[Session]:
        ...


class IUsageTracker(Protocol):
    """Quota collaborator checked and incremented before a session starts."""

    async def check_and_increment(self, user_id: Optional[str]) -> None:
        ...
