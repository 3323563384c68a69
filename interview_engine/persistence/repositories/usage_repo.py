"""Usage repository: monthly interview quota per user."""

from datetime import datetime, timezone
from typing import Optional

import aiosqlite
import structlog

from interview_engine.core.exceptions import QuotaExceededError

log = structlog.get_logger(__name__)


def current_period(now: Optional[datetime] = None) -> str:
    """Quota period key (YYYY-MM, UTC)."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


class UsageRepository:
    """Counts interviews started per user per month.

    Anonymous sessions (no user_id) and an unset limit are never counted
    against a quota.
    """

    def __init__(self, db_path: str, monthly_limit: Optional[int] = None):
        self.db_path = db_path
        self.monthly_limit = monthly_limit

    async def get_count(self, user_id: str, period: Optional[str] = None) -> int:
        period = period or current_period()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT interview_count FROM usage WHERE user_id = ? AND period = ?",
                (user_id, period),
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def check_and_increment(self, user_id: Optional[str]) -> None:
        """
        Consume one interview from the user's monthly allowance.

        Raises:
            QuotaExceededError: Allowance already used up
        """
        if user_id is None or self.monthly_limit is None:
            return

        period = current_period()
        now = datetime.now(timezone.utc).isoformat()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR IGNORE INTO usage (user_id, period, interview_count, updated_at) "
                "VALUES (?, ?, 0, ?)",
                (user_id, period, now),
            )
            # Conditional increment keeps check and increment atomic
            cursor = await db.execute(
                "UPDATE usage SET interview_count = interview_count + 1, updated_at = ? "
                "WHERE user_id = ? AND period = ? AND interview_count < ?",
                (now, user_id, period, self.monthly_limit),
            )
            await db.commit()

            if cursor.rowcount == 0:
                log.warning(
                    "quota_exceeded",
                    user_id=user_id,
                    period=period,
                    limit=self.monthly_limit,
                )
                raise QuotaExceededError(
                    f"Monthly interview limit of {self.monthly_limit} reached"
                )
