"""Backend entry point: wires stores, senders, engine, scheduler and HTTP server."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from dataclasses import dataclass

from todo_backend.api.server import ApiServer, create_app
from todo_backend.config import Settings, settings
from todo_backend.notifications.dispatch_log import DispatchLog
from todo_backend.notifications.email_channel import EmailChannel
from todo_backend.notifications.engine import NotificationEngine
from todo_backend.notifications.scheduler import NotificationScheduler
from todo_backend.notifications.telegram_channel import TelegramChannel
from todo_backend.tasks.store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the process owns, built once at startup."""

    store: TaskStore
    dispatch_log: DispatchLog
    engine: NotificationEngine
    scheduler: NotificationScheduler
    api: ApiServer

    async def start(self) -> None:
        await self.scheduler.start()
        await self.api.start()

    async def stop(self) -> None:
        await self.api.stop()
        await self.scheduler.stop()


def build_services(config: Settings) -> Services:
    """Compose the object graph from *config*."""
    store = TaskStore(db_path=config.database_path)
    dispatch_log = DispatchLog(db_path=config.database_path)
    engine = NotificationEngine(
        store=store,
        dispatch_log=dispatch_log,
        email=EmailChannel.from_settings(config),
        telegram=TelegramChannel.from_token(
            config.telegram_bot_token, timeout=config.channel_timeout_seconds
        ),
    )
    scheduler = NotificationScheduler(
        engine,
        interval=config.notification_check_interval,
        timezone=config.scheduler_timezone or None,
        enabled=config.notifications_enabled,
    )
    app = create_app(store, dispatch_log, scheduler, api_secret=config.api_secret)
    api = ApiServer(app, host=config.api_host, port=config.api_port)
    return Services(store, dispatch_log, engine, scheduler, api)


def log_configuration(config: Settings) -> None:
    logger.info("=== Configuration Status ===")
    for name, value in config.configuration_status().items():
        logger.info("%s: %s", name, value)


async def run(config: Settings) -> None:
    """Start all services and block until SIGINT/SIGTERM."""
    services = build_services(config)
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    await services.start()
    logger.info("Backend started")
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await services.stop()


def main() -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    log_configuration(settings)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
