"""Reminder categories, delivery channels, dispatch records and cycle reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum


class ReminderCategory(str, Enum):
    """Which due-date threshold a task has crossed on the reference day."""

    DUE_SOON = "due_soon"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"


class Channel(str, Enum):
    """A reminder delivery mechanism."""

    EMAIL = "email"
    TELEGRAM = "telegram"


@dataclass(frozen=True)
class DispatchRecord:
    """One successful reminder delivery, as persisted by the DispatchLog."""

    user_id: int
    task_id: int
    category: ReminderCategory
    channel: Channel
    sent_at: datetime
    id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "task_id": self.task_id,
            "type": self.category.value,
            "channel": self.channel.value,
            "sent_at": self.sent_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: tuple) -> DispatchRecord:
        """Deserialize from ``SELECT id, user_id, task_id, category, channel, sent_at``."""
        return cls(
            id=row[0],
            user_id=row[1],
            task_id=row[2],
            category=ReminderCategory(row[3]),
            channel=Channel(row[4]),
            sent_at=datetime.fromisoformat(row[5]),
        )


@dataclass
class CycleReport:
    """Counters for one notification cycle.

    Attributes:
        scanned: Tasks returned by the load step.
        skipped: Tasks not dispatched because of a missing due date, a
            disabled user, or because every channel was already notified.
        not_due: Tasks classified as needing no reminder.
        attempted: Channel sends attempted.
        succeeded: Channel sends that the provider accepted.
        failed: Channel sends that failed, plus idempotency checks that errored.
        already_sent: Channel sends suppressed by the dispatch log.
        unconfigured: Channel sends skipped because the channel has no
            credentials configured.
    """

    scanned: int = 0
    skipped: int = 0
    not_due: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    already_sent: int = 0
    unconfigured: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)
