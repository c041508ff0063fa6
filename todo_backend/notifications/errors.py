"""Failure taxonomy for reminder delivery."""


class ChannelError(Exception):
    """A channel could not deliver a reminder.

    ``kind`` is a short machine-readable category; ``str(exc)`` is the
    operator-facing diagnostic.
    """

    kind = "error"


class ChannelNotConfiguredError(ChannelError):
    """Credentials or the destination address are missing."""

    kind = "not_configured"


class ChannelTransportError(ChannelError):
    """The provider could not be reached, timed out, or rejected the session."""

    kind = "transport"


class ChatNotFoundError(ChannelError):
    """The chat has never talked to the bot."""

    kind = "not_found"


class ChatUnauthorizedError(ChannelError):
    """The bot token was rejected."""

    kind = "unauthorized"


class ChatForbiddenError(ChannelError):
    """The user blocked the bot."""

    kind = "forbidden"


class ChatProviderError(ChannelError):
    """Any other error reported by the chat provider."""

    kind = "other"


class CycleAbortedError(Exception):
    """A notification cycle could not load its tasks and did not run."""
