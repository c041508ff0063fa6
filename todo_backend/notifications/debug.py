"""Per-user notification diagnostics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from todo_backend.notifications.dispatch_log import DispatchLog
    from todo_backend.tasks.store import TaskStore

SNAPSHOT_LIMIT = 10


async def build_debug_snapshot(
    store: TaskStore, dispatch_log: DispatchLog, user_id: int
) -> dict[str, Any] | None:
    """Return the user's reminder settings, next due tasks and recent sends.

    Returns None when the user does not exist.
    """
    user = await store.get_user(user_id)
    if user is None:
        return None

    tasks = await store.list_upcoming_tasks(user_id, limit=SNAPSHOT_LIMIT)
    records = await dispatch_log.recent_for_user(user_id, limit=SNAPSHOT_LIMIT)
    return {
        "user": user.to_dict(),
        "tasks_count": len(tasks),
        "tasks": [task.to_dict() for task in tasks],
        "notifications_count": len(records),
        "recent_notifications": [record.to_dict() for record in records],
    }
