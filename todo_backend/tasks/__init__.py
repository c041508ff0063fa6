"""Users and tasks — the data the reminder engine reads."""

from todo_backend.tasks.models import Task, User
from todo_backend.tasks.store import TaskStore

__all__ = ["Task", "TaskStore", "User"]
