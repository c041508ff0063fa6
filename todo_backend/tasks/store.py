"""TaskStore — aiosqlite access to users and tasks."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from todo_backend import db as database
from todo_backend.config import settings
from todo_backend.tasks.models import DEFAULT_PRIORITY, PRIORITIES, TASK_TYPES, Task, User

if TYPE_CHECKING:
    from pathlib import Path

    import aiosqlite

logger = logging.getLogger(__name__)

_TASK_COLUMNS = (
    "t.id, t.user_id, t.title, t.description, t.task_type, t.priority,"
    " t.due_date, t.completed, t.created_at, t.updated_at"
)
_USER_COLUMNS = (
    "u.id, u.username, u.email, u.telegram_chat_id, u.notifications_enabled, u.created_at"
)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class TaskStore:
    """Persists users and tasks in SQLite.

    Pass an explicit *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path

    async def _connect(self) -> aiosqlite.Connection:
        return await database.connect(self._db_path)

    # -- Users -----------------------------------------------------------------

    async def add_user(
        self,
        username: str,
        email: str = "",
        *,
        telegram_chat_id: str | None = None,
        notifications_enabled: bool = True,
    ) -> User:
        """Insert a user and return it with its new ID."""
        created_at = _now()
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                INSERT INTO users
                    (username, email, telegram_chat_id, notifications_enabled, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (username, email, telegram_chat_id, int(notifications_enabled), created_at),
            )
            await db.commit()
            user_id = cursor.lastrowid
        finally:
            await db.close()
        logger.info("Added user: %s (%s)", username, user_id)
        return User(
            id=user_id,
            username=username,
            email=email,
            telegram_chat_id=telegram_chat_id,
            notifications_enabled=notifications_enabled,
            created_at=created_at,
        )

    async def get_user(self, user_id: int) -> User | None:
        """Fetch a user by ID, or None if not found."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT {_USER_COLUMNS} FROM users u WHERE u.id = ?", (user_id,)
            )
            row = await cursor.fetchone()
            return User.from_row(row) if row else None
        finally:
            await db.close()

    async def update_telegram_chat_id(self, user_id: int, chat_id: str | None) -> bool:
        """Set or clear the user's Telegram chat ID. Returns True if a row changed."""
        return await self._update_user(user_id, "telegram_chat_id", chat_id)

    async def update_notifications_enabled(self, user_id: int, enabled: bool) -> bool:
        """Toggle the user's reminder switch. Returns True if a row changed."""
        return await self._update_user(user_id, "notifications_enabled", int(enabled))

    async def _update_user(self, user_id: int, column: str, value: object) -> bool:
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"UPDATE users SET {column} = ? WHERE id = ?", (value, user_id)
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    # -- Tasks -----------------------------------------------------------------

    async def add_task(
        self,
        user_id: int,
        title: str,
        *,
        task_type: str = "casa",
        description: str = "",
        priority: str = DEFAULT_PRIORITY,
        due_date: datetime | None = None,
        completed: bool = False,
    ) -> Task:
        """Insert a task. Raises ValueError on an unknown type or priority."""
        if task_type not in TASK_TYPES:
            msg = f"Unknown task type: {task_type}"
            raise ValueError(msg)
        if priority not in PRIORITIES:
            msg = f"Unknown priority: {priority}"
            raise ValueError(msg)

        now = _now()
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                INSERT INTO tasks
                    (user_id, title, description, task_type, priority, due_date,
                     completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    title,
                    description,
                    task_type,
                    priority,
                    due_date.isoformat() if due_date else None,
                    int(completed),
                    now,
                    now,
                ),
            )
            await db.commit()
            task_id = cursor.lastrowid
        finally:
            await db.close()
        logger.info("Added task: %s (%s) for user %s", title, task_id, user_id)
        return Task(
            id=task_id,
            user_id=user_id,
            title=title,
            task_type=task_type,
            description=description,
            priority=priority,
            due_date=due_date,
            completed=completed,
            created_at=now,
            updated_at=now,
        )

    async def get_task(self, task_id: int) -> Task | None:
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE t.id = ?", (task_id,)
            )
            row = await cursor.fetchone()
            return Task.from_row(row) if row else None
        finally:
            await db.close()

    async def set_completed(self, task_id: int, completed: bool = True) -> bool:
        """Mark a task (in)complete. Returns True if a row changed."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "UPDATE tasks SET completed = ?, updated_at = ? WHERE id = ?",
                (int(completed), _now(), task_id),
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    async def list_reminder_candidates(self) -> list[Task]:
        """Return incomplete tasks with a due date, each carrying its owner."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"""
                SELECT {_TASK_COLUMNS}, {_USER_COLUMNS}
                FROM tasks t
                JOIN users u ON u.id = t.user_id
                WHERE t.completed = 0 AND t.due_date IS NOT NULL
                """
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()
        return [Task.from_row(row[:10], owner=User.from_row(row[10:])) for row in rows]

    async def list_upcoming_tasks(self, user_id: int, limit: int = 10) -> list[Task]:
        """Return the user's incomplete dated tasks, earliest due first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"""
                SELECT {_TASK_COLUMNS} FROM tasks t
                WHERE t.user_id = ? AND t.completed = 0 AND t.due_date IS NOT NULL
                ORDER BY t.due_date ASC
                LIMIT ?
                """,
                (user_id, limit),
            )
            rows = await cursor.fetchall()
            return [Task.from_row(row) for row in rows]
        finally:
            await db.close()
