"""
Global exception handlers for FastAPI.

Engine errors propagate unchanged up to here and are translated into HTTP
status codes with a consistent error body.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

import structlog

from interview_engine.core.exceptions import (
    ConfigurationError,
    GeneratorError,
    InterviewSystemError,
    LLMRateLimitError,
    LLMTimeoutError,
    NoPendingQuestionError,
    QuotaExceededError,
    SessionConflictError,
    SessionNotActiveError,
    SessionNotFoundError,
)

log = structlog.get_logger(__name__)


# Most specific first: LLM transport errors are also GeneratorErrors
STATUS_CODES = [
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionNotActiveError, status.HTTP_409_CONFLICT),
    (NoPendingQuestionError, status.HTTP_409_CONFLICT),
    (SessionConflictError, status.HTTP_409_CONFLICT),
    (QuotaExceededError, status.HTTP_403_FORBIDDEN),
    (LLMTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (LLMRateLimitError, status.HTTP_429_TOO_MANY_REQUESTS),
    (GeneratorError, status.HTTP_502_BAD_GATEWAY),
]


def status_code_for(exc: InterviewSystemError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI):
    """Register custom exception handlers with the FastAPI application.

    Sets up handlers for all InterviewSystemError subclasses with appropriate
    HTTP status codes, plus handlers for configuration errors and generic exceptions.
    """

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request,
        exc: ConfigurationError,
    ) -> JSONResponse:
        """Configuration problems are a 500 without leaking details."""
        log.error(
            "configuration_error",
            path=request.url.path,
            message=exc.message,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "type": "ConfigurationError",
                    "message": "Server configuration error",
                }
            },
        )

    @app.exception_handler(InterviewSystemError)
    async def interview_system_error_handler(
        request: Request,
        exc: InterviewSystemError,
    ) -> JSONResponse:
        """Map engine errors to HTTP status codes with a consistent body."""
        status_code = status_code_for(exc)

        log.warning(
            "request_error",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            message=exc.message,
            status_code=status_code,
        )

        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "type": type(exc).__name__,
                    "message": exc.message,
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle all unhandled exceptions with HTTP 500 status."""
        log.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            message=str(exc),
            exc_info=exc,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "type": "InternalServerError",
                    "message": "An unexpected error occurred",
                }
            },
        )
