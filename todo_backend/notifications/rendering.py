"""Reminder message templates for each channel and category."""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from todo_backend.notifications.models import ReminderCategory

if TYPE_CHECKING:
    from todo_backend.tasks.models import Task

DUE_DATE_FORMAT = "%d/%m/%Y"

_HEADLINES: dict[ReminderCategory, tuple[str, str, str]] = {
    # category: (emoji, subject prefix, headline)
    ReminderCategory.DUE_SOON: ("⏰", "Tarefa vence amanhã", "Tarefa vence amanhã!"),
    ReminderCategory.DUE_TODAY: ("📅", "Tarefa vence hoje", "Tarefa vence hoje!"),
    ReminderCategory.OVERDUE: ("⚠️", "Tarefa atrasada", "Tarefa atrasada!"),
}


def _due_date(task: Task) -> str:
    return task.due_date.strftime(DUE_DATE_FORMAT) if task.due_date else ""


def render_email(task: Task, category: ReminderCategory) -> tuple[str, str]:
    """Return ``(subject, html_body)`` for a reminder email."""
    emoji, prefix, headline = _HEADLINES[category]
    subject = f"{emoji} {prefix}: {task.title}"
    body = (
        "<html>\n<body>\n"
        f"<h2>{headline}</h2>\n"
        f"<p><strong>{html.escape(task.title)}</strong></p>\n"
        f"<p>{html.escape(task.description)}</p>\n"
        f"<p><strong>Prioridade:</strong> {html.escape(task.priority)}</p>\n"
        f"<p><strong>Data de vencimento:</strong> {_due_date(task)}</p>\n"
        "</body>\n</html>\n"
    )
    return subject, body


def render_telegram(task: Task, category: ReminderCategory) -> str:
    """Return an HTML-formatted Telegram message."""
    emoji, _, headline = _HEADLINES[category]
    return (
        f"{emoji} <b>{headline}</b>\n\n"
        f"<b>{html.escape(task.title)}</b>\n"
        f"{html.escape(task.description)}\n\n"
        f"<b>Prioridade:</b> {html.escape(task.priority)}\n"
        f"<b>Data de vencimento:</b> {_due_date(task)}"
    )
