"""Tests for service wiring in the entry point."""

from pathlib import Path

from todo_backend.api.server import SECRET_KEY
from todo_backend.config import Settings
from todo_backend.main import build_services


def test_build_services_wires_config_through(tmp_path: Path) -> None:
    config = Settings(
        database_path=tmp_path / "todo.db",
        notification_check_interval="@every 5m",
        scheduler_timezone="America/Sao_Paulo",
        notifications_enabled=False,
        smtp_host="smtp.example.com",
        smtp_user="bot@example.com",
        smtp_password="pw",
        telegram_bot_token="",
        api_secret="s3cret",
        api_port=9090,
    )

    services = build_services(config)

    assert services.store._db_path == tmp_path / "todo.db"
    assert services.dispatch_log._db_path == tmp_path / "todo.db"
    assert services.engine._email.is_configured() is True
    assert services.engine._telegram.is_configured() is False
    assert services.scheduler._interval == "@every 5m"
    assert services.scheduler._timezone == "America/Sao_Paulo"
    assert services.scheduler._enabled is False
    assert services.api.port == 9090
    assert services.api.app[SECRET_KEY] == "s3cret"


async def test_services_start_and_stop_when_everything_is_disabled(tmp_path: Path) -> None:
    config = Settings(database_path=tmp_path / "todo.db", notifications_enabled=False)
    services = build_services(config)

    await services.start()
    assert services.scheduler.running is False
    assert services.api._runner is None
    await services.stop()
