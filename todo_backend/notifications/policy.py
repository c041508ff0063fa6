"""Reminder policy — which category, if any, a due date falls into."""

from __future__ import annotations

from datetime import date, datetime

from todo_backend.notifications.models import ReminderCategory


def classify(due_date: date, reference_date: date) -> ReminderCategory | None:
    """Classify a due date relative to the cycle's reference day.

    Overdue when strictly before, DueToday on the same day, DueSoon exactly
    one day after; anything later needs no reminder.
    """
    delta = (due_date - reference_date).days
    if delta < 0:
        return ReminderCategory.OVERDUE
    if delta == 0:
        return ReminderCategory.DUE_TODAY
    if delta == 1:
        return ReminderCategory.DUE_SOON
    return None


def to_local_naive(moment: datetime) -> datetime:
    """Convert *moment* to naive server-local time. Naive input is already local."""
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def local_date(moment: datetime) -> date:
    """Calendar date of *moment* in the server's local time zone."""
    return to_local_naive(moment).date()
