"""Due-date reminders: policy, dispatch log, channels, engine and scheduler."""

from todo_backend.notifications.channels import ReminderChannel
from todo_backend.notifications.dispatch_log import DispatchLog
from todo_backend.notifications.email_channel import EmailChannel
from todo_backend.notifications.engine import NotificationEngine
from todo_backend.notifications.models import Channel, CycleReport, DispatchRecord, ReminderCategory
from todo_backend.notifications.policy import classify
from todo_backend.notifications.scheduler import NotificationScheduler
from todo_backend.notifications.telegram_channel import TelegramChannel

__all__ = [
    "Channel",
    "CycleReport",
    "DispatchLog",
    "DispatchRecord",
    "EmailChannel",
    "NotificationEngine",
    "NotificationScheduler",
    "ReminderCategory",
    "ReminderChannel",
    "TelegramChannel",
    "classify",
]
