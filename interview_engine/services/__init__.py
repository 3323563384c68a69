# noqa
from interview_engine.services.question_service import QuestionService
from interview_engine.services.evaluation_service import EvaluationService
from interview_engine.services.report_service import ReportService
from interview_engine.services.session_service import SessionService
from interview_engine.services.session_sweeper import SessionSweeper

__all__ = [
    "QuestionService",
    "EvaluationService",
    "ReportService",
    "SessionService",
    "SessionSweeper",
]
