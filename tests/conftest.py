"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from todo_backend.notifications.dispatch_log import DispatchLog
from todo_backend.notifications.engine import NotificationEngine
from todo_backend.notifications.models import Channel
from todo_backend.tasks.store import TaskStore


def make_sender(channel: Channel) -> AsyncMock:
    """A ReminderChannel double whose send() succeeds."""
    sender = AsyncMock()
    sender.channel = channel
    sender.is_configured = MagicMock(return_value=True)
    sender.send = AsyncMock(return_value=None)
    return sender


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def store(db_path: Path) -> TaskStore:
    return TaskStore(db_path=db_path)


@pytest.fixture
def dispatch_log(db_path: Path) -> DispatchLog:
    return DispatchLog(db_path=db_path)


@pytest.fixture
def email_sender() -> AsyncMock:
    return make_sender(Channel.EMAIL)


@pytest.fixture
def telegram_sender() -> AsyncMock:
    return make_sender(Channel.TELEGRAM)


@pytest.fixture
def engine(
    store: TaskStore,
    dispatch_log: DispatchLog,
    email_sender: AsyncMock,
    telegram_sender: AsyncMock,
) -> NotificationEngine:
    return NotificationEngine(
        store=store,
        dispatch_log=dispatch_log,
        email=email_sender,
        telegram=telegram_sender,
    )
