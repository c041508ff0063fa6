"""DispatchLog — durable record of sent reminders, used to suppress duplicates.

Timestamps are stored as naive ISO strings in the server's local time zone
and "already sent today" means "a record exists whose ``sent_at`` falls in
that local calendar day".
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from todo_backend import db as database
from todo_backend.config import settings
from todo_backend.notifications.models import Channel, DispatchRecord, ReminderCategory
from todo_backend.notifications.policy import to_local_naive

if TYPE_CHECKING:
    from pathlib import Path

    import aiosqlite

logger = logging.getLogger(__name__)


class DispatchLog:
    """Persists DispatchRecords in the ``notifications`` table.

    Records are append-only: nothing here updates or deletes them.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path

    async def _connect(self) -> aiosqlite.Connection:
        return await database.connect(self._db_path)

    async def record_sent(
        self,
        user_id: int,
        task_id: int,
        category: ReminderCategory,
        channel: Channel,
        at: datetime | None = None,
    ) -> bool:
        """Persist a record of a successful send.

        Returns False when a record with the same key already exists for
        that local day (a concurrent cycle got there first).
        """
        category = ReminderCategory(category)
        channel = Channel(channel)
        sent_at = to_local_naive(at or datetime.now())
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO notifications
                    (user_id, task_id, category, channel, sent_at, sent_day)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    task_id,
                    category.value,
                    channel.value,
                    sent_at.isoformat(),
                    sent_at.date().isoformat(),
                ),
            )
            await db.commit()
            inserted = cursor.rowcount > 0
        finally:
            await db.close()

        if not inserted:
            logger.info(
                "Dispatch already recorded: user=%s task=%s %s/%s on %s",
                user_id,
                task_id,
                category.value,
                channel.value,
                sent_at.date(),
            )
        return inserted

    async def was_sent(
        self,
        user_id: int,
        task_id: int,
        category: ReminderCategory,
        channel: Channel,
        day: date,
    ) -> bool:
        """True iff a record for this key has ``sent_at`` within local *day*."""
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                SELECT COUNT(*) FROM notifications
                WHERE user_id = ? AND task_id = ? AND category = ? AND channel = ?
                  AND sent_at >= ? AND sent_at < ?
                """,
                (
                    user_id,
                    task_id,
                    ReminderCategory(category).value,
                    Channel(channel).value,
                    start.isoformat(),
                    end.isoformat(),
                ),
            )
            row = await cursor.fetchone()
            return bool(row and row[0] > 0)
        finally:
            await db.close()

    async def recent_for_user(self, user_id: int, limit: int = 10) -> list[DispatchRecord]:
        """Most recent records for a user, newest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                SELECT id, user_id, task_id, category, channel, sent_at
                FROM notifications
                WHERE user_id = ?
                ORDER BY sent_at DESC, id DESC
                LIMIT ?
                """,
                (user_id, limit),
            )
            rows = await cursor.fetchall()
            return [DispatchRecord.from_row(row) for row in rows]
        finally:
            await db.close()
