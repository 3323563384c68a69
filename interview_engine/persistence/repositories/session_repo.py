"""Session repository for database operations."""

from datetime import datetime, timezone
from typing import List, Optional

import aiosqlite
import structlog

from interview_engine.core.exceptions import (
    SessionConflictError,
    SessionNotFoundError,
)
from interview_engine.domain.models.session import Session, SessionStatus

log = structlog.get_logger(__name__)


def to_db_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with fixed precision so timestamps compare as text."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class SessionRepository:
    """Repository for session documents.

    `update` is a compare-and-swap on the `version` column: the write only
    lands if nobody else wrote the session since it was read.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def create(self, session: Session) -> Session:
        """Insert a new session at version 0."""
        stored = session.model_copy(update={"version": 0})
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO sessions (id, user_id, role, experience_level, status, "
                "ends_at, document, version, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    stored.user_id,
                    stored.role,
                    stored.experience_level.value,
                    stored.status.value,
                    to_db_timestamp(stored.ends_at),
                    stored.model_dump_json(),
                    stored.version,
                    to_db_timestamp(stored.created_at),
                    to_db_timestamp(stored.updated_at),
                ),
            )
            await db.commit()

        log.debug("session_created", session_id=stored.id)
        return stored

    async def get(self, session_id: str) -> Optional[Session]:
        """Get a session by ID, or None."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT document, version FROM sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if not row:
                return None
            return self._row_to_session(row)

    async def update(self, session: Session) -> Session:
        """
        Write the whole session back if its version is unchanged.

        Returns:
            The stored session with its version incremented

        Raises:
            SessionNotFoundError: Session does not exist
            SessionConflictError: Session was written since it was read
        """
        stored = session.model_copy(update={"version": session.version + 1})
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE sessions SET user_id = ?, status = ?, ends_at = ?, document = ?, "
                "version = ?, updated_at = ? WHERE id = ? AND version = ?",
                (
                    stored.user_id,
                    stored.status.value,
                    to_db_timestamp(stored.ends_at),
                    stored.model_dump_json(),
                    stored.version,
                    to_db_timestamp(stored.updated_at),
                    session.id,
                    session.version,
                ),
            )
            await db.commit()

            if cursor.rowcount == 0:
                cursor = await db.execute(
                    "SELECT version FROM sessions WHERE id = ?", (session.id,)
                )
                row = await cursor.fetchone()
                if not row:
                    raise SessionNotFoundError(f"Session {session.id} not found")
                log.warning(
                    "session_version_conflict",
                    session_id=session.id,
                    expected_version=session.version,
                    actual_version=row[0],
                )
                raise SessionConflictError(
                    f"Session {session.id} was modified concurrently"
                )

        return stored

    async def find_stale(self, cutoff: datetime) -> List[Session]:
        """IN_PROGRESS sessions whose deadline is before `cutoff`."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT document, version FROM sessions "
                "WHERE status = ? AND ends_at < ? ORDER BY ends_at",
                (SessionStatus.IN_PROGRESS.value, to_db_timestamp(cutoff)),
            )
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def list_by_user(self, user_id: str, limit: int = 50) -> List[Session]:
        """Most recent sessions of one user."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT document, version FROM sessions WHERE user_id = ? "
                "ORDER BY created_at DESC LIMIT ?",
                (user_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        session = Session.model_validate_json(row["document"])
        # The column is authoritative for the version
        session.version = row["version"]
        return session
