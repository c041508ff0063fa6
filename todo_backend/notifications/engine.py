"""NotificationEngine — scan tasks, classify, dispatch and record reminders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from todo_backend.notifications.errors import ChannelError, CycleAbortedError
from todo_backend.notifications.models import Channel, CycleReport, ReminderCategory
from todo_backend.notifications.policy import classify, local_date, to_local_naive
from todo_backend.notifications.rendering import render_email, render_telegram

if TYPE_CHECKING:
    from todo_backend.notifications.channels import ReminderChannel
    from todo_backend.notifications.dispatch_log import DispatchLog
    from todo_backend.tasks.models import Task, User
    from todo_backend.tasks.store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class _Cycle:
    """Per-run context: the reference day and the clock used to stamp records."""

    today: date
    clock_offset: timedelta
    report: CycleReport = field(default_factory=CycleReport)
    warned_unconfigured: set[Channel] = field(default_factory=set)

    def now(self) -> datetime:
        """Wall-clock time shifted onto the reference timeline.

        Clamped to the end of the reference day, so a cycle that runs past
        midnight still records on the day ``was_sent`` checked.
        """
        return min(datetime.now() + self.clock_offset, datetime.combine(self.today, time.max))


class NotificationEngine:
    """Runs reminder cycles.

    Holds no state between cycles; everything it needs is re-read from the
    store on each run.  Tasks and channels are processed sequentially.

    Args:
        store: TaskStore that supplies the reminder candidates.
        dispatch_log: DispatchLog used to suppress same-day duplicates.
        email: Sender for the email channel.
        telegram: Sender for the Telegram channel.
    """

    def __init__(
        self,
        store: TaskStore,
        dispatch_log: DispatchLog,
        email: ReminderChannel,
        telegram: ReminderChannel,
    ) -> None:
        self._store = store
        self._dispatch_log = dispatch_log
        self._email = email
        self._telegram = telegram

    async def run_cycle(self, reference_time: datetime | None = None) -> CycleReport:
        """Run one full scan-classify-dispatch pass.

        Raises CycleAbortedError if the task set cannot be loaded.  Every
        other failure is contained to its (task, channel) pair.
        """
        wall_clock = datetime.now()
        reference = to_local_naive(reference_time) if reference_time else wall_clock
        cycle = _Cycle(today=reference.date(), clock_offset=reference - wall_clock)
        logger.info(
            "Starting notification check: today=%s tomorrow=%s",
            cycle.today,
            cycle.today + timedelta(days=1),
        )

        try:
            tasks = await self._store.list_reminder_candidates()
        except Exception as exc:
            logger.exception("Failed to load tasks for notification check")
            raise CycleAbortedError("could not load tasks with due dates") from exc

        report = cycle.report
        report.scanned = len(tasks)
        logger.info("Found %d task(s) with due dates", len(tasks))

        for task in tasks:
            try:
                await self._process_task(task, cycle)
            except Exception:
                # A failing task must not stop the rest of the cycle.
                report.failed += 1
                logger.exception("Task %s: unexpected error while notifying", task.id)

        logger.info(
            "Notification check completed: scanned=%d skipped=%d not_due=%d "
            "attempted=%d succeeded=%d failed=%d already_sent=%d unconfigured=%d",
            report.scanned,
            report.skipped,
            report.not_due,
            report.attempted,
            report.succeeded,
            report.failed,
            report.already_sent,
            report.unconfigured,
        )
        return report

    async def _process_task(self, task: Task, cycle: _Cycle) -> None:
        report = cycle.report
        user = task.owner
        if task.due_date is None or task.completed:
            logger.debug("Task %s: skipping (no due date or completed)", task.id)
            report.skipped += 1
            return
        if user is None or not user.notifications_enabled:
            logger.debug("Task %s: skipping (user notifications disabled)", task.id)
            report.skipped += 1
            return

        due = local_date(task.due_date)
        category = classify(due, cycle.today)
        if category is None:
            logger.debug("Task %s: not due yet (due %s)", task.id, due)
            report.not_due += 1
            return

        logger.info("Task %s: %s (due %s) user=%s", task.id, category.value, due, user.id)

        suppressed_before = report.already_sent
        channels = 0
        if user.has_email:
            channels += 1
            await self._notify(task, user, category, Channel.EMAIL, user.email, cycle)
        else:
            logger.debug("Task %s: user has no email address", task.id)

        if user.has_telegram:
            channels += 1
            await self._notify(
                task, user, category, Channel.TELEGRAM, user.telegram_chat_id, cycle
            )
        else:
            logger.debug("Task %s: user has no telegram chat ID", task.id)

        if channels and report.already_sent - suppressed_before == channels:
            report.skipped += 1

    async def _notify(
        self,
        task: Task,
        user: User,
        category: ReminderCategory,
        channel: Channel,
        destination: str,
        cycle: _Cycle,
    ) -> None:
        """Check the dispatch log, send on one channel, and record success."""
        report = cycle.report
        sender = self._email if channel is Channel.EMAIL else self._telegram
        if not sender.is_configured():
            report.unconfigured += 1
            if channel not in cycle.warned_unconfigured:
                cycle.warned_unconfigured.add(channel)
                logger.warning(
                    "%s channel is not configured; skipping its reminders", channel.value
                )
            return

        try:
            sent = await self._dispatch_log.was_sent(
                user.id, task.id, category, channel, cycle.today
            )
        except Exception:
            # An unreadable log must not be read as "not sent".
            report.failed += 1
            logger.exception(
                "Task %s: could not check %s dispatch log, not sending", task.id, channel.value
            )
            return
        if sent:
            report.already_sent += 1
            logger.info(
                "Task %s: %s %s notification already sent today",
                task.id,
                channel.value,
                category.value,
            )
            return

        if channel is Channel.EMAIL:
            subject, body = render_email(task, category)
        else:
            subject, body = None, render_telegram(task, category)

        report.attempted += 1
        try:
            await sender.send(destination, subject, body)
        except ChannelError as exc:
            report.failed += 1
            logger.warning(
                "Task %s: %s notification failed [%s]: %s",
                task.id,
                channel.value,
                exc.kind,
                exc,
            )
            return
        except Exception:
            report.failed += 1
            logger.exception("Task %s: %s notification failed unexpectedly", task.id, channel.value)
            return

        report.succeeded += 1
        logger.info("Task %s: %s notification sent to user %s", task.id, channel.value, user.id)
        try:
            await self._dispatch_log.record_sent(user.id, task.id, category, channel, cycle.now())
        except Exception:
            logger.exception(
                "Task %s: %s notification delivered but not recorded", task.id, channel.value
            )
