"""Tests for EmailChannel — SMTP delivery."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from todo_backend.config import Settings
from todo_backend.notifications.channels import ReminderChannel
from todo_backend.notifications.email_channel import EmailChannel
from todo_backend.notifications.errors import ChannelNotConfiguredError, ChannelTransportError
from todo_backend.notifications.models import Channel


def _channel(port: int = 587, **kwargs) -> EmailChannel:
    defaults = {
        "host": "smtp.example.com",
        "port": port,
        "user": "bot@example.com",
        "password": "secret",
        "from_address": "Tarefas <noreply@example.com>",
        "timeout": 5.0,
    }
    defaults.update(kwargs)
    return EmailChannel(**defaults)


def test_email_channel_satisfies_protocol() -> None:
    ch = _channel()
    assert isinstance(ch, ReminderChannel)
    assert ch.channel is Channel.EMAIL


def test_from_settings() -> None:
    s = Settings(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_user="bot@example.com",
        smtp_password="pw",
        channel_timeout_seconds=3,
    )
    ch = EmailChannel.from_settings(s)
    assert ch.is_configured()
    assert ch._port == 2525
    assert ch._from == "bot@example.com"
    assert ch._timeout == 3


@pytest.mark.parametrize("missing", ["host", "user", "password"])
async def test_missing_credentials_is_not_configured(missing: str) -> None:
    ch = _channel(**{missing: ""})
    assert ch.is_configured() is False
    with pytest.raises(ChannelNotConfiguredError, match="email service not configured"):
        await ch.send("a@x.com", "subject", "<p>body</p>")


async def test_empty_destination_fails_fast() -> None:
    with patch("todo_backend.notifications.email_channel.smtplib.SMTP") as smtp_cls:
        with pytest.raises(ChannelNotConfiguredError):
            await _channel().send("", "subject", "body")
    smtp_cls.assert_not_called()


async def test_send_uses_starttls_and_login() -> None:
    with patch("todo_backend.notifications.email_channel.smtplib.SMTP") as smtp_cls:
        smtp = smtp_cls.return_value
        smtp.has_extn.return_value = True

        await _channel().send("a@x.com", "⏰ Tarefa vence amanhã: Rent", "<p>body</p>")

    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=5.0)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("bot@example.com", "secret")
    smtp.send_message.assert_called_once()
    message = smtp.send_message.call_args.args[0]
    assert message["To"] == "a@x.com"
    assert message["From"] == "Tarefas <noreply@example.com>"
    assert message["Subject"] == "⏰ Tarefa vence amanhã: Rent"
    assert message.get_content_type() == "text/html"
    assert smtp.send_message.call_args.kwargs["to_addrs"] == ["a@x.com"]


async def test_send_skips_starttls_when_not_offered() -> None:
    with patch("todo_backend.notifications.email_channel.smtplib.SMTP") as smtp_cls:
        smtp = smtp_cls.return_value
        smtp.has_extn.return_value = False

        await _channel(port=25).send("a@x.com", "s", "b")

    smtp.starttls.assert_not_called()
    smtp.login.assert_called_once()


async def test_port_465_uses_implicit_tls() -> None:
    with (
        patch("todo_backend.notifications.email_channel.smtplib.SMTP_SSL") as ssl_cls,
        patch("todo_backend.notifications.email_channel.smtplib.SMTP") as smtp_cls,
    ):
        await _channel(port=465).send("a@x.com", "s", "b")

    ssl_cls.assert_called_once_with("smtp.example.com", 465, timeout=5.0)
    smtp_cls.assert_not_called()
    ssl_cls.return_value.starttls.assert_not_called()


async def test_auth_error_is_surfaced_verbatim() -> None:
    with patch("todo_backend.notifications.email_channel.smtplib.SMTP") as smtp_cls:
        smtp = smtp_cls.return_value
        smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"5.7.8 Bad credentials")

        with pytest.raises(ChannelTransportError, match="Bad credentials") as info:
            await _channel().send("a@x.com", "s", "b")

    assert info.value.kind == "transport"


async def test_connection_error_is_transport() -> None:
    with patch(
        "todo_backend.notifications.email_channel.smtplib.SMTP",
        MagicMock(side_effect=ConnectionRefusedError("Connection refused")),
    ):
        with pytest.raises(ChannelTransportError, match="Connection refused"):
            await _channel().send("a@x.com", "s", "b")


async def test_timeout_is_transport() -> None:
    with patch(
        "todo_backend.notifications.email_channel.smtplib.SMTP",
        MagicMock(side_effect=TimeoutError("timed out")),
    ):
        with pytest.raises(ChannelTransportError, match="timed out"):
            await _channel().send("a@x.com", "s", "b")
