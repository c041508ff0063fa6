"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


def _mask(value: str) -> str:
    return "[CONFIGURED]" if value else "[NOT CONFIGURED]"


class Settings(BaseSettings):
    """Backend configuration. All values come from environment variables."""

    # Notifications
    notifications_enabled: bool = Field(default=True)
    notification_check_interval: str = Field(default="0 * * * *")
    scheduler_timezone: str = Field(default="")
    channel_timeout_seconds: float = Field(default=30.0)

    # Email (SMTP)
    smtp_host: str = Field(default="")
    smtp_port: int = Field(default=587)
    smtp_user: str = Field(default="")
    smtp_password: str = Field(default="")
    smtp_from: str = Field(default="")

    # Telegram
    telegram_bot_token: str = Field(default="")

    # Database
    database_path: Path = Field(default=Path("data/todo.db"))

    # HTTP API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)
    api_secret: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def smtp_configured(self) -> bool:
        """True when host and credentials are all present."""
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token)

    def from_address(self) -> str:
        """Sender address for reminder emails (falls back to SMTP_USER)."""
        return self.smtp_from or self.smtp_user

    def configuration_status(self) -> dict[str, str]:
        """Notification settings with credentials masked, for the startup log."""
        return {
            "notifications_enabled": str(self.notifications_enabled),
            "notification_check_interval": self.notification_check_interval,
            "scheduler_timezone": self.scheduler_timezone or "local",
            "smtp_host": _mask(self.smtp_host),
            "smtp_port": str(self.smtp_port),
            "smtp_user": _mask(self.smtp_user),
            "smtp_password": _mask(self.smtp_password),
            "smtp_from": _mask(self.smtp_from),
            "telegram_bot_token": _mask(self.telegram_bot_token),
        }


settings = Settings()
