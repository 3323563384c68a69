"""Tests for the background session sweeper."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from interview_engine.core.exceptions import SessionConflictError, SessionNotActiveError
from interview_engine.domain.models.session import ExperienceLevel, SessionStatus
from interview_engine.services.session_sweeper import SessionSweeper


async def _expire(session_repo, session_id):
    session = await session_repo.get(session_id)
    session.ends_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    return await session_repo.update(session)


class TestRunOnce:
    """Tests for a single sweep."""

    @pytest.mark.asyncio
    async def test_expires_stale_sessions_only(self, session_service, session_repo):
        stale = await session_service.start_session("Backend Developer", ExperienceLevel.MID)
        fresh = await session_service.start_session("Backend Developer", ExperienceLevel.MID)
        await _expire(session_repo, stale.session.id)

        expired = await SessionSweeper(session_repo, interval_seconds=60).run_once()

        assert expired == 1
        assert (await session_repo.get(stale.session.id)).status == SessionStatus.TIME_EXPIRED
        assert (await session_repo.get(fresh.session.id)).status == SessionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_answers_rejected_after_sweep(self, session_service, session_repo):
        started = await session_service.start_session("Backend Developer", ExperienceLevel.MID)
        await _expire(session_repo, started.session.id)
        await SessionSweeper(session_repo, interval_seconds=60).run_once()

        with pytest.raises(SessionNotActiveError):
            await session_service.process_answer(started.session.id, "too late")

    @pytest.mark.asyncio
    async def test_race_with_user_turn_keeps_one_outcome(self, session_service, session_repo):
        """A turn that read the session before the sweep cannot overwrite it."""
        started = await session_service.start_session("Backend Developer", ExperienceLevel.MID)
        await _expire(session_repo, started.session.id)
        in_flight = await session_repo.get(started.session.id)

        await SessionSweeper(session_repo, interval_seconds=60).run_once()

        in_flight.status = SessionStatus.COMPLETED
        with pytest.raises(SessionConflictError):
            await session_repo.update(in_flight)
        assert (await session_repo.get(started.session.id)).status == SessionStatus.TIME_EXPIRED

    @pytest.mark.asyncio
    async def test_conflict_is_skipped(self):
        session = MagicMock()
        session.status = SessionStatus.IN_PROGRESS
        repo = MagicMock()
        repo.find_stale = AsyncMock(return_value=[session])
        repo.update = AsyncMock(side_effect=SessionConflictError("conflict"))

        expired = await SessionSweeper(repo, interval_seconds=60).run_once()

        assert expired == 0

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_scan(self):
        first, second = MagicMock(), MagicMock()
        first.status = second.status = SessionStatus.IN_PROGRESS
        repo = MagicMock()
        repo.find_stale = AsyncMock(return_value=[first, second])
        repo.update = AsyncMock(side_effect=[RuntimeError("disk"), second])

        expired = await SessionSweeper(repo, interval_seconds=60).run_once()

        assert expired == 1
        assert repo.update.await_count == 2


class TestLifecycle:
    """Tests for start() and stop()."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        repo = MagicMock()
        repo.find_stale = AsyncMock(return_value=[])
        sweeper = SessionSweeper(repo, interval_seconds=0.01)

        await sweeper.start()
        assert sweeper.running
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert not sweeper.running
        assert repo.find_stale.await_count >= 2

    @pytest.mark.asyncio
    async def test_loop_survives_sweep_errors(self):
        calls = []

        async def find_stale(cutoff):
            calls.append(cutoff)
            if len(calls) == 1:
                raise RuntimeError("database is locked")
            return []

        repo = MagicMock()
        repo.find_stale = find_stale
        sweeper = SessionSweeper(repo, interval_seconds=0.01)

        await sweeper.start()
        await asyncio.sleep(0.05)
        assert sweeper.running
        await sweeper.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        await SessionSweeper(MagicMock(), interval_seconds=1).stop()
