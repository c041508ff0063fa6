"""Telegram implementation of the ReminderChannel protocol."""

from __future__ import annotations

import logging

import telegram
from telegram.error import BadRequest, Forbidden, InvalidToken, NetworkError, TelegramError

from todo_backend.notifications.errors import (
    ChannelNotConfiguredError,
    ChannelTransportError,
    ChatForbiddenError,
    ChatNotFoundError,
    ChatProviderError,
    ChatUnauthorizedError,
)
from todo_backend.notifications.models import Channel

logger = logging.getLogger(__name__)


def _chat_id(destination: str) -> int | str:
    """Numeric IDs (negative for groups) go over as ints, ``@names`` as-is."""
    stripped = destination.strip()
    if stripped.lstrip("-").isdigit():
        return int(stripped)
    return stripped


class TelegramChannel:
    """Sends reminders via the Telegram Bot API.

    Provider errors are translated into the ``ChannelError`` taxonomy so the
    log says what the operator has to do about them.
    """

    def __init__(self, bot: telegram.Bot | None, *, timeout: float = 30.0) -> None:
        self._bot = bot
        self._timeout = timeout

    @classmethod
    def from_token(cls, token: str, *, timeout: float = 30.0) -> TelegramChannel:
        return cls(telegram.Bot(token) if token else None, timeout=timeout)

    @property
    def channel(self) -> Channel:
        return Channel.TELEGRAM

    def is_configured(self) -> bool:
        return self._bot is not None

    async def send(self, destination: str, subject: str | None, body: str) -> None:
        """Send an HTML message to the chat *destination*. *subject* is unused."""
        if self._bot is None:
            raise ChannelNotConfiguredError("telegram bot token not configured")
        if not destination or not destination.strip():
            raise ChannelNotConfiguredError("user telegram chat ID not configured")

        try:
            await self._bot.send_message(
                chat_id=_chat_id(destination),
                text=body,
                parse_mode="HTML",
                read_timeout=self._timeout,
                write_timeout=self._timeout,
                connect_timeout=self._timeout,
            )
        except BadRequest as exc:
            if "chat not found" in exc.message.lower():
                msg = (
                    "chat not found: user needs to send a message to the bot first"
                    f" (chat_id: {destination})"
                )
                raise ChatNotFoundError(msg) from exc
            raise ChatProviderError(f"telegram API error (400): {exc.message}") from exc
        except InvalidToken as exc:
            raise ChatUnauthorizedError("telegram API error (401): invalid bot token") from exc
        except Forbidden as exc:
            raise ChatForbiddenError("telegram API error (403): bot was blocked by user") from exc
        except NetworkError as exc:
            raise ChannelTransportError(f"failed to send telegram message: {exc.message}") from exc
        except TelegramError as exc:
            raise ChatProviderError(f"telegram API error: {exc.message}") from exc
        logger.info("Telegram message sent to chat %s", destination)
