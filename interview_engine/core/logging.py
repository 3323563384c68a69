"""
structlog setup for the interview engine.

Every module logs through ``structlog.get_logger(__name__)`` with snake_case
event names. This module wires those loggers to two stdlib handlers, the
console and one file per process run under ``logs/``, and owns the
request-scoped context (``request_id``, ``session_id``) that the HTTP
middleware binds.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.typing import Processor

from interview_engine.core.config import settings

RUN_LOG_PATTERN = "engine_*.log"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _cull_old_logs(logs_dir: Path, keep: int) -> None:
    runs = sorted(
        logs_dir.glob(RUN_LOG_PATTERN),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for stale in runs[keep:]:
        try:
            os.remove(stale)
        except OSError:
            pass  # still open in another process


def _run_log_path(logs_dir: Path) -> Path:
    return logs_dir / f"engine_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"


def _renderers() -> List[Processor]:
    if settings.debug:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]


def configure_logging(
    logs_dir: Path = Path("logs"),
    runs_to_keep: int = 5,
    level: Optional[int] = None,
) -> Path:
    """Configure structlog and the root handlers. Call once at startup.

    Args:
        logs_dir: Directory receiving per-run log files
        runs_to_keep: Run logs retained, counting the one created now
        level: Minimum level; DEBUG when settings.debug, else INFO

    Returns:
        Path of this run's log file
    """
    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO

    logs_dir.mkdir(parents=True, exist_ok=True)
    _cull_old_logs(logs_dir, keep=max(runs_to_keep - 1, 0))
    log_file = _run_log_path(logs_dir)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    for handler in (logging.StreamHandler(), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
        *_renderers(),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return log_file


def bind_context(**kwargs) -> None:
    """Attach fields such as request_id or session_id to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
