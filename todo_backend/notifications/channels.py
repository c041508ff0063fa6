"""ReminderChannel protocol — interface for the email and Telegram senders."""

from typing import Protocol, runtime_checkable

from todo_backend.notifications.models import Channel


@runtime_checkable
class ReminderChannel(Protocol):
    """Protocol that both reminder senders satisfy."""

    @property
    def channel(self) -> Channel:
        """Which channel this sender delivers on."""
        ...

    def is_configured(self) -> bool:
        """True when credentials are present."""
        ...

    async def send(self, destination: str, subject: str | None, body: str) -> None:
        """Deliver a rendered reminder.

        Returns on success; raises a ``ChannelError`` subclass on failure.
        """
        ...
