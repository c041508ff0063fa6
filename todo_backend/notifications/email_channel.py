"""SMTP implementation of the ReminderChannel protocol."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

from todo_backend.notifications.errors import ChannelNotConfiguredError, ChannelTransportError
from todo_backend.notifications.models import Channel

if TYPE_CHECKING:
    from todo_backend.config import Settings

logger = logging.getLogger(__name__)

SMTP_SSL_PORT = 465


class EmailChannel:
    """Sends reminder emails through an SMTP relay.

    ``smtplib`` is blocking, so each delivery runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        from_address: str,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._from = from_address or user
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailChannel:
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.from_address(),
            timeout=settings.channel_timeout_seconds,
        )

    @property
    def channel(self) -> Channel:
        return Channel.EMAIL

    def is_configured(self) -> bool:
        return bool(self._host and self._user and self._password)

    async def send(self, destination: str, subject: str | None, body: str) -> None:
        """Send an HTML email to *destination*."""
        if not self.is_configured():
            raise ChannelNotConfiguredError("email service not configured")
        if not destination:
            raise ChannelNotConfiguredError("recipient email address is empty")

        message = MIMEText(body, "html", "utf-8")
        message["Subject"] = subject or ""
        message["From"] = self._from
        message["To"] = destination

        try:
            await asyncio.to_thread(self._deliver, message, destination)
        except (smtplib.SMTPException, OSError) as exc:
            raise ChannelTransportError(f"failed to send email: {exc}") from exc
        logger.info("Email sent to %s: %s", destination, subject)

    def _deliver(self, message: MIMEText, destination: str) -> None:
        if self._port == SMTP_SSL_PORT:
            smtp = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        else:
            smtp = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        with smtp:
            if self._port != SMTP_SSL_PORT:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
            smtp.login(self._user, self._password)
            smtp.send_message(message, from_addr=self._from, to_addrs=[destination])
