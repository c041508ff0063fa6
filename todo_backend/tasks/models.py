"""User and Task data models as read by the reminder subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

TASK_TYPES = ("casa", "trabalho", "lazer", "saude")
PRIORITIES = ("baixa", "media", "alta", "urgente")
DEFAULT_PRIORITY = "media"


@dataclass
class User:
    """A registered user and their notification preferences.

    Attributes:
        id: Primary key.
        username: Unique login name.
        email: Email address; empty when the user has none.
        telegram_chat_id: Telegram chat to deliver reminders to, if linked.
        notifications_enabled: Per-user master switch for reminders.
        created_at: ISO 8601 timestamp.
    """

    id: int
    username: str
    email: str = ""
    telegram_chat_id: str | None = None
    notifications_enabled: bool = True
    created_at: str = ""

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())

    @property
    def has_telegram(self) -> bool:
        return bool(self.telegram_chat_id and self.telegram_chat_id.strip())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "telegram_chat_id": self.telegram_chat_id,
            "notifications_enabled": self.notifications_enabled,
        }

    @classmethod
    def from_row(cls, row: tuple) -> User:
        """Deserialize from ``SELECT id, username, email, telegram_chat_id,
        notifications_enabled, created_at``."""
        return cls(
            id=row[0],
            username=row[1],
            email=row[2] or "",
            telegram_chat_id=row[3],
            notifications_enabled=bool(row[4]),
            created_at=row[5],
        )


@dataclass
class Task:
    """A task snapshot. ``owner`` is populated by the reminder query."""

    id: int
    user_id: int
    title: str
    task_type: str
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    due_date: datetime | None = None
    completed: bool = False
    created_at: str = ""
    updated_at: str = ""
    owner: User | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "type": self.task_type,
            "priority": self.priority,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
        }

    @classmethod
    def from_row(cls, row: tuple, owner: User | None = None) -> Task:
        """Deserialize from the ``tasks`` column order."""
        return cls(
            id=row[0],
            user_id=row[1],
            title=row[2],
            description=row[3] or "",
            task_type=row[4],
            priority=row[5] or DEFAULT_PRIORITY,
            due_date=datetime.fromisoformat(row[6]) if row[6] else None,
            completed=bool(row[7]),
            created_at=row[8],
            updated_at=row[9],
            owner=owner,
        )
