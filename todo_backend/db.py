"""SQLite schema and connection helper shared by the stores.

Every store opens a short-lived ``aiosqlite`` connection per operation.  The
schema is applied with ``CREATE ... IF NOT EXISTS`` the first time a given
database file is opened by this process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite

if TYPE_CHECKING:
    from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL DEFAULT '',
    telegram_chat_id TEXT,
    notifications_enabled INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    task_type TEXT NOT NULL,
    priority TEXT NOT NULL DEFAULT 'media',
    due_date TEXT,
    completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id);

CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    task_id INTEGER NOT NULL,
    category TEXT NOT NULL,
    channel TEXT NOT NULL,
    sent_at TEXT NOT NULL,
    sent_day TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_notifications_daily_key
    ON notifications(user_id, task_id, category, channel, sent_day);
CREATE INDEX IF NOT EXISTS idx_notifications_user_sent
    ON notifications(user_id, sent_at);
"""

_initialised: set[str] = set()


async def connect(db_path: Path) -> aiosqlite.Connection:
    """Open a connection to *db_path*, creating the schema on first use."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    key = str(db_path.resolve())
    if key not in _initialised:
        await db.executescript(SCHEMA)
        await db.commit()
        _initialised.add(key)
    return db
