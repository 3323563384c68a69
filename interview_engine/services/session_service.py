"""
Session orchestration service.

Main entry point for the interview lifecycle: starting a session, processing
answers turn by turn, completing with a final report and abandoning. Drives
the guardrail loop and scoring engine and owns all tracker bookkeeping.

Each turn reads, mutates and writes back the whole session. Turns on one
session are serialized with a per-session asyncio.Lock; the repository's
version check catches writers outside this process (such as the sweeper).
"""

import asyncio
import weakref
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import structlog

from interview_engine.core.config import InterviewConfig, interview_config
from interview_engine.core.exceptions import (
    GeneratorFailureError,
    InterviewSystemError,
    NoPendingQuestionError,
    SessionNotActiveError,
    SessionNotFoundError,
)
from interview_engine.domain.models.generation import GuardrailOutcome
from interview_engine.domain.models.session import (
    AggregatedScores,
    AnswerInfo,
    Evaluation,
    ExperienceLevel,
    FinalReport,
    FollowUpIntent,
    InterviewMode,
    QuestionEntry,
    QuestionType,
    Session,
    SessionStatus,
    VoiceEvaluation,
    VoiceMetadata,
)
from interview_engine.services.difficulty_policy import clamp_difficulty
from interview_engine.services.evaluation_service import EvaluationService
from interview_engine.services.protocols import ISessionStore, IUsageTracker
from interview_engine.services.question_service import QuestionService
from interview_engine.services.report_service import ReportService
from interview_engine.services.scoring_service import (
    aggregate,
    find_weakest_dimension,
    is_topic_mastered,
    next_difficulty,
    select_followup_intent,
)

log = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StartResult:
    """Result of starting a session."""

    session: Session
    question: QuestionEntry


@dataclass
class AnswerResult:
    """Result of processing one answer."""

    session: Session
    evaluation: Evaluation
    voice_evaluation: Optional[VoiceEvaluation]
    next_question: Optional[QuestionEntry]
    aggregated_scores: AggregatedScores
    question_number: int
    remaining_seconds: float
    time_warning: bool

    @property
    def status(self) -> SessionStatus:
        return self.session.status


class SessionService:
    """Session lifecycle state machine.

    CREATED -> IN_PROGRESS -> {COMPLETED, ABANDONED, TIME_EXPIRED,
    MAX_QUESTIONS_REACHED}. Terminal states are absorbing; the only write
    allowed afterwards is attaching the final report.
    """

    def __init__(
        self,
        session_repo: ISessionStore,
        question_service: QuestionService,
        evaluation_service: EvaluationService,
        report_service: ReportService,
        usage_tracker: Optional[IUsageTracker] = None,
        config: Optional[InterviewConfig] = None,
    ):
        """
        Args:
            session_repo: Session store
            question_service: Guardrail loop around the content generator
            evaluation_service: Text and voice answer evaluation
            report_service: Final report assembly
            usage_tracker: Quota collaborator (no quota if None)
            config: Interview configuration (defaults to interview_config.yaml)
        """
        self.session_repo = session_repo
        self.question_service = question_service
        self.evaluation_service = evaluation_service
        self.report_service = report_service
        self.usage_tracker = usage_tracker
        self.config = config or interview_config

        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def _load(self, session_id: str) -> Session:
        session = await self.session_repo.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def _new_entry(
        self,
        outcome: GuardrailOutcome,
        kind: QuestionType,
        asked_at: datetime,
        generated_from_weakness: Optional[str] = None,
        intent: Optional[FollowUpIntent] = None,
    ) -> QuestionEntry:
        candidate = outcome.candidate
        return QuestionEntry(
            id=str(uuid4()),
            question_text=candidate.question,
            topic=candidate.topic,
            difficulty=candidate.difficulty,
            level_score=candidate.level_score,
            type=kind,
            generated_from_weakness=generated_from_weakness,
            intent=intent,
            was_corrected=outcome.was_corrected,
            asked_at=asked_at,
        )

    # =========================================================================
    # Start
    # =========================================================================

    async def start_session(
        self,
        role: str,
        level: ExperienceLevel,
        mode: InterviewMode = InterviewMode.TEXT,
        user_id: Optional[str] = None,
    ) -> StartResult:
        """
        Start a new interview.

        Checks and increments the usage quota, generates the opening question
        through the guardrail loop and persists the session as IN_PROGRESS.

        Raises:
            QuotaExceededError: User has no interviews left this period
            GeneratorFailureError / IncompleteGeneratedContentError: No question
        """
        if self.usage_tracker is not None:
            await self.usage_tracker.check_and_increment(user_id)

        now = utcnow()
        session_cfg = self.config.session
        session = Session(
            id=str(uuid4()),
            user_id=user_id,
            role=role,
            experience_level=level,
            mode=mode,
            status=SessionStatus.CREATED,
            max_questions=session_cfg.max_questions,
            max_duration_minutes=session_cfg.max_duration_minutes,
            ends_at=now + timedelta(minutes=session_cfg.max_duration_minutes),
            prompt_version=self.config.prompt_version,
            created_at=now,
            updated_at=now,
        )

        outcome = await self.question_service.generate_initial_question(role, level)
        entry = self._new_entry(outcome, QuestionType.INITIAL, utcnow())
        session.append_question(entry)
        session.status = SessionStatus.IN_PROGRESS

        session = await self.session_repo.create(session)

        log.info(
            "session_started",
            session_id=session.id,
            role=role,
            level=session.experience_level.value,
            mode=session.mode.value,
            topic=entry.topic,
            difficulty=entry.difficulty.value,
            was_corrected=entry.was_corrected,
        )

        return StartResult(session=session, question=entry)

    # =========================================================================
    # Answer processing
    # =========================================================================

    async def process_answer(
        self,
        session_id: str,
        answer: str,
        voice_meta: Optional[VoiceMetadata] = None,
    ) -> AnswerResult:
        """
        Process one answer and produce the next question.

        Raises:
            SessionNotFoundError: Unknown session
            SessionNotActiveError: Session is terminal or its deadline passed
            NoPendingQuestionError: No question is awaiting an answer
            GeneratorFailureError / IncompleteGeneratedContentError: Evaluation
                or follow-up generation failed; nothing is written
        """
        async with self._lock_for(session_id):
            session = await self._load(session_id)
            now = utcnow()

            if session.status != SessionStatus.IN_PROGRESS:
                raise SessionNotActiveError(
                    f"Session {session_id} is {session.status.value}"
                )

            if now >= session.ends_at:
                session.status = SessionStatus.TIME_EXPIRED
                session.updated_at = now
                await self.session_repo.update(session)
                log.info("session_time_expired", session_id=session_id)
                raise SessionNotActiveError(f"Session {session_id} time has expired")

            pending = session.pending_entry()
            if pending is None:
                raise NoPendingQuestionError(
                    f"Session {session_id} has no question awaiting an answer"
                )
            index, entry = pending

            evaluation, voice_evaluation = await self.evaluation_service.evaluate(
                entry.question_text,
                answer,
                session.role,
                session.experience_level,
                voice_meta,
            )

            answered_at = utcnow()
            entry.answer = AnswerInfo(
                text=answer,
                voice_meta=voice_meta,
                voice_evaluation=voice_evaluation,
                answered_at=answered_at,
            )
            entry.time_taken_seconds = round(
                max((answered_at - entry.asked_at).total_seconds(), 0.0), 2
            )
            entry.evaluation = evaluation

            if voice_meta is not None and session.mode == InterviewMode.TEXT:
                session.mode = InterviewMode.HYBRID

            # Trackers
            weakest = find_weakest_dimension(evaluation)
            session.weakness_tracker.record(weakest)
            session.topic_scores.setdefault(entry.topic, []).append(evaluation.overall_score)
            session.aggregated_scores = aggregate(session.evaluations())

            # Adaptive decisions
            mastered = is_topic_mastered(session.topic_scores[entry.topic])
            intent = select_followup_intent(
                evaluation.technical_score,
                evaluation.depth_score,
                evaluation.problem_solving_score,
                mastered,
            )
            # The ladder may step outside the level; keep the request inside policy
            target = clamp_difficulty(
                next_difficulty(entry.difficulty, evaluation.overall_score),
                session.experience_level,
            )

            log.info(
                "answer_evaluated",
                session_id=session_id,
                question_index=index,
                overall_score=evaluation.overall_score,
                weakest_dimension=weakest.value,
                topic_mastered=mastered,
                intent=intent.value,
                target_difficulty=target.value,
            )

            next_entry: Optional[QuestionEntry] = None
            answered_count = len(session.evaluations())

            if answered_count >= session.max_questions:
                session.status = SessionStatus.MAX_QUESTIONS_REACHED
                log.info(
                    "session_max_questions_reached",
                    session_id=session_id,
                    answered=answered_count,
                )
            else:
                request = self.question_service.build_request(
                    QuestionType.FOLLOWUP,
                    session.role,
                    session.experience_level,
                    previous_question=entry.question_text,
                    previous_topic=entry.topic,
                    previous_difficulty=entry.difficulty,
                    technical_score=evaluation.technical_score,
                    depth_score=evaluation.depth_score,
                    clarity_score=evaluation.clarity_score,
                    problem_solving_score=evaluation.problem_solving_score,
                    communication_score=evaluation.communication_score,
                    weaknesses=list(evaluation.weaknesses),
                    weakness_frequency=session.weakness_tracker.as_frequency(),
                    intent=intent,
                    target_difficulty=target,
                    asked_questions=[q.question_text for q in session.questions],
                )
                outcome = await self.question_service.generate_followup_question(request)
                next_entry = self._new_entry(
                    outcome,
                    QuestionType.FOLLOWUP,
                    utcnow(),
                    generated_from_weakness=weakest.value,
                    intent=intent,
                )
                session.append_question(next_entry)

            remaining = max((session.ends_at - now).total_seconds(), 0.0)
            time_warning = False
            warning_threshold = self.config.session.time_warning_minutes * 60
            if not session.has_shown_time_warning and remaining <= warning_threshold:
                session.has_shown_time_warning = True
                time_warning = True

            session.updated_at = utcnow()
            session = await self.session_repo.update(session)

            return AnswerResult(
                session=session,
                evaluation=evaluation,
                voice_evaluation=voice_evaluation,
                next_question=next_entry,
                aggregated_scores=session.aggregated_scores,
                question_number=session.total_questions,
                remaining_seconds=round(remaining, 1),
                time_warning=time_warning,
            )

    # =========================================================================
    # Completion
    # =========================================================================

    async def complete_session(self, session_id: str) -> Session:
        """
        Build the final report and mark the session COMPLETED.

        Sessions already ended by the deadline or question cap keep their
        status and only gain the report. A completed session returns as is.

        Raises:
            SessionNotFoundError: Unknown session
            SessionNotActiveError: Session was abandoned
            GeneratorFailureError: Report generation failed
        """
        async with self._lock_for(session_id):
            session = await self._load(session_id)

            if session.status == SessionStatus.COMPLETED and session.final_report:
                return session
            if session.status in (SessionStatus.ABANDONED, SessionStatus.CREATED):
                raise SessionNotActiveError(
                    f"Session {session_id} is {session.status.value}"
                )

            report = await self._build_report(session)

            now = utcnow()
            session.final_report = report
            if session.status == SessionStatus.IN_PROGRESS:
                session.status = SessionStatus.COMPLETED
            session.completed_at = now
            session.updated_at = now
            session = await self.session_repo.update(session)

            log.info(
                "session_completed",
                session_id=session_id,
                status=session.status.value,
                questions=session.total_questions,
                average_score=report.average_score,
                hire_band=report.hire_band,
            )
            return session

    async def _build_report(self, session: Session) -> FinalReport:
        try:
            return await self.report_service.build_report(session)
        except InterviewSystemError:
            raise
        except Exception as e:
            log.error(
                "report_generation_failed",
                session_id=session.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise GeneratorFailureError(f"Report generation failed: {e}") from e

    # =========================================================================
    # Abandon / read
    # =========================================================================

    async def abandon_session(self, session_id: str) -> Session:
        """Mark an active session ABANDONED.

        Raises:
            SessionNotFoundError: Unknown session
            SessionNotActiveError: Session is already terminal
        """
        async with self._lock_for(session_id):
            session = await self._load(session_id)
            if session.is_terminal:
                raise SessionNotActiveError(
                    f"Session {session_id} is {session.status.value}"
                )

            session.status = SessionStatus.ABANDONED
            session.updated_at = utcnow()
            session = await self.session_repo.update(session)

            log.info("session_abandoned", session_id=session_id)
            return session

    async def get_session(self, session_id: str) -> Session:
        """Raises SessionNotFoundError for an unknown id."""
        return await self._load(session_id)
