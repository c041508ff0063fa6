"""aiohttp application exposing reminder settings, triggers and diagnostics.

Authentication is done upstream: the gateway forwards the shared
``X-Api-Key`` and the caller's ``X-User-Id``.  ``/health`` is open.
"""

from __future__ import annotations

import hmac
import logging
import re
from typing import TYPE_CHECKING, Any

from aiohttp import web

from todo_backend.config import settings
from todo_backend.notifications.debug import build_debug_snapshot
from todo_backend.notifications.errors import CycleAbortedError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from todo_backend.notifications.dispatch_log import DispatchLog
    from todo_backend.notifications.scheduler import NotificationScheduler
    from todo_backend.tasks.store import TaskStore

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", object)
DISPATCH_LOG_KEY = web.AppKey("dispatch_log", object)
SCHEDULER_KEY = web.AppKey("scheduler", object)
SECRET_KEY = web.AppKey("api_secret", str)

_CHAT_ID = re.compile(r"-?[0-9]+")
_USER_ID = re.compile(r"[0-9]+")
_OPEN_PATHS = frozenset({"/health"})


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


@web.middleware
async def _auth_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Reject requests without the shared key or a numeric user ID."""
    if request.path in _OPEN_PATHS:
        return await handler(request)

    secret = request.app[SECRET_KEY]
    supplied = request.headers.get("X-Api-Key", "")
    if not secret or not hmac.compare_digest(supplied, secret):
        logger.warning("API request rejected: invalid key (path=%s)", request.path)
        return _error(401, "unauthorized")

    raw_user_id = request.headers.get("X-User-Id", "")
    if not _USER_ID.fullmatch(raw_user_id):
        return _error(401, "missing or invalid user id")
    request["user_id"] = int(raw_user_id)
    return await handler(request)


async def _read_json(request: web.Request) -> dict[str, Any] | None:
    try:
        payload = await request.json()
    except Exception:
        return None
    return payload if isinstance(payload, dict) else None


# -- Handlers ----------------------------------------------------------------


async def _health(request: web.Request) -> web.Response:
    """GET /health — basic liveness check."""
    return web.json_response({"status": "ok"})


async def _trigger_notifications(request: web.Request) -> web.Response:
    """POST /api/v1/notifications/test — run one cycle synchronously."""
    scheduler: NotificationScheduler = request.app[SCHEDULER_KEY]
    try:
        report = await scheduler.run_now()
    except CycleAbortedError:
        logger.exception("Manual notification check failed")
        return _error(500, "notification check failed")

    return web.json_response({
        "message": (
            "Notification check completed. Check server logs for details"
            " and verify your email/Telegram."
        ),
        "data": report.to_dict(),
    })


async def _debug_info(request: web.Request) -> web.Response:
    """GET /api/v1/notifications/debug — the caller's reminder diagnostics."""
    snapshot = await build_debug_snapshot(
        request.app[STORE_KEY], request.app[DISPATCH_LOG_KEY], request["user_id"]
    )
    if snapshot is None:
        return _error(404, "user not found")
    return web.json_response({"message": "Debug information retrieved", "data": snapshot})


async def _update_telegram_chat_id(request: web.Request) -> web.Response:
    """PUT /api/v1/users/telegram-chat-id — link or unlink a Telegram chat."""
    payload = await _read_json(request)
    if payload is None or "telegram_chat_id" not in payload:
        return _error(400, "telegram_chat_id is required (use null to remove)")

    chat_id = payload["telegram_chat_id"]
    if chat_id is not None:
        chat_id = str(chat_id).strip()
        if not _CHAT_ID.fullmatch(chat_id):
            return _error(
                400,
                "telegram_chat_id must be a numeric string (e.g., '123456789')."
                " For group chats, it can be negative (e.g., '-123456789')",
            )

    store: TaskStore = request.app[STORE_KEY]
    if not await store.update_telegram_chat_id(request["user_id"], chat_id):
        return _error(404, "user not found")

    message = "Telegram chat ID updated successfully"
    if chat_id is None:
        message = "Telegram chat ID removed successfully"
    return web.json_response({"message": message})


async def _update_notifications_enabled(request: web.Request) -> web.Response:
    """PUT /api/v1/users/notifications-enabled — per-user reminder switch."""
    payload = await _read_json(request)
    enabled = payload.get("notifications_enabled") if payload else None
    if not isinstance(enabled, bool):
        return _error(400, "notifications_enabled is required")

    store: TaskStore = request.app[STORE_KEY]
    if not await store.update_notifications_enabled(request["user_id"], enabled):
        return _error(404, "user not found")
    return web.json_response({
        "message": "Notifications enabled" if enabled else "Notifications disabled"
    })


def create_app(
    store: TaskStore,
    dispatch_log: DispatchLog,
    scheduler: NotificationScheduler,
    api_secret: str | None = None,
) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application(middlewares=[_auth_middleware])
    app[STORE_KEY] = store
    app[DISPATCH_LOG_KEY] = dispatch_log
    app[SCHEDULER_KEY] = scheduler
    app[SECRET_KEY] = settings.api_secret if api_secret is None else api_secret

    app.router.add_get("/health", _health)
    app.router.add_post("/api/v1/notifications/test", _trigger_notifications)
    app.router.add_get("/api/v1/notifications/debug", _debug_info)
    app.router.add_put("/api/v1/users/telegram-chat-id", _update_telegram_chat_id)
    app.router.add_put("/api/v1/users/notifications-enabled", _update_notifications_enabled)
    return app


class ApiServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        app: web.Application,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.app = app
        self.host = host or settings.api_host
        self.port = port or settings.api_port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening. Disabled when no API secret is configured."""
        if not self.app[SECRET_KEY]:
            logger.warning("API_SECRET empty — HTTP server disabled")
            return
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("API server listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("API server stopped")
