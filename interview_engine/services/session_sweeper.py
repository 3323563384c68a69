"""
Background session sweeper.

Periodically moves IN_PROGRESS sessions whose deadline has passed to
TIME_EXPIRED. Runs one sweep at start, then every `interval_seconds`.
Writes go through the repository's version check, so a sweep racing a user
turn on the same session leaves exactly one terminal state.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import structlog

from interview_engine.core.config import interview_config
from interview_engine.core.exceptions import SessionConflictError
from interview_engine.domain.models.session import SessionStatus
from interview_engine.services.protocols import ISessionStore

log = structlog.get_logger(__name__)


class SessionSweeper:
    """Expires stale in-progress sessions on a fixed interval."""

    def __init__(
        self,
        session_repo: ISessionStore,
        interval_seconds: Optional[float] = None,
    ):
        self.session_repo = session_repo
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else interview_config.sweeper.interval_seconds
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self, now: Optional[datetime] = None) -> int:
        """
        Sweep once.

        A failure on one session is logged and the scan continues.

        Returns:
            Number of sessions moved to TIME_EXPIRED
        """
        now = now or datetime.now(timezone.utc)
        stale = await self.session_repo.find_stale(now)
        expired = 0

        for session in stale:
            if session.status != SessionStatus.IN_PROGRESS:
                continue
            session.status = SessionStatus.TIME_EXPIRED
            session.updated_at = now
            try:
                await self.session_repo.update(session)
                expired += 1
            except SessionConflictError:
                # A user turn got there first; its write stands
                log.info("sweeper_session_conflict", session_id=session.id)
            except Exception as e:
                log.error(
                    "sweeper_session_update_failed",
                    session_id=session.id,
                    error_type=type(e).__name__,
                    error=str(e),
                )

        if stale:
            log.info("sweeper_run_complete", found=len(stale), expired=expired)
        return expired

    async def start(self) -> None:
        """Start the background loop (first sweep runs immediately)."""
        if self.running:
            log.warning("sweeper_already_running")
            return
        self._task = asyncio.create_task(self._loop())
        log.info("sweeper_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("sweeper_stopped")

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(
                    "sweeper_run_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                )
            await asyncio.sleep(self.interval_seconds)
