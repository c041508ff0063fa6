"""NotificationScheduler — APScheduler lifecycle for periodic reminder cycles."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from todo_backend.config import settings
from todo_backend.notifications.errors import CycleAbortedError

if TYPE_CHECKING:
    from datetime import datetime

    from apscheduler.triggers.base import BaseTrigger

    from todo_backend.notifications.engine import NotificationEngine
    from todo_backend.notifications.models import CycleReport

logger = logging.getLogger(__name__)

JOB_ID = "notification_check"

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_EVERY = re.compile(r"^@every\s+(\d+)\s*([smh])$")
_UNITS = {"s": "seconds", "m": "minutes", "h": "hours"}

# Crontab counts weekdays from Sunday (0 and 7); APScheduler counts from Monday.
_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
_WEEKDAY_TERM = re.compile(r"^(\*|\d+)(?:-(\d+))?(?:/(\d+))?$")


def _crontab_weekdays(field: str) -> str:
    """Rewrite a crontab day-of-week field as APScheduler day names.

    Numeric terms, ranges and steps are expanded into an explicit list
    (``1-5`` becomes ``mon,tue,wed,thu,fri``).  Name terms pass through.
    """
    if field == "*":
        return field
    names: list[str] = []
    for term in field.lower().split(","):
        match = _WEEKDAY_TERM.match(term)
        if match is None:
            names.append(term)
            continue
        start, end, step = match.groups()
        if start == "*":
            first, last = 0, 6
        else:
            first = int(start)
            last = int(end) if end is not None else (7 if step else first)
        if not 0 <= first <= last <= 7:
            msg = f"Invalid day of week: {term!r}"
            raise ValueError(msg)
        for day in range(first, last + 1, int(step or 1)):
            name = _WEEKDAYS[day % 7]
            if name not in names:
                names.append(name)
    return ",".join(names)


def build_trigger(expression: str, timezone: str | None = None) -> BaseTrigger:
    """Turn a cadence string into an APScheduler trigger.

    Accepts 5-field crontab expressions (weekday 0 is Sunday), the
    ``@hourly``-style descriptors and ``@every <n>s|m|h``.  Raises
    ValueError for anything else.
    """
    expression = expression.strip()
    match = _EVERY.match(expression)
    if match:
        amount = int(match.group(1))
        if amount <= 0:
            msg = f"Invalid interval: {expression!r}"
            raise ValueError(msg)
        return IntervalTrigger(timezone=timezone, **{_UNITS[match.group(2)]: amount})

    fields = _DESCRIPTORS.get(expression.lower(), expression).split()
    if len(fields) != 5:
        msg = f"Wrong number of fields in {expression!r}: got {len(fields)}, expected 5"
        raise ValueError(msg)
    minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_crontab_weekdays(day_of_week),
        timezone=timezone,
    )


class NotificationScheduler:
    """Runs the engine on a cadence and on demand.

    Args:
        engine: The NotificationEngine to drive.
        interval: Cadence string (default from settings).
        timezone: IANA zone for cron fields (default: settings, else local).
        enabled: Master switch (default from settings). When False,
            ``start()`` does not create a job at all.
    """

    def __init__(
        self,
        engine: NotificationEngine,
        interval: str | None = None,
        timezone: str | None = None,
        enabled: bool | None = None,
    ) -> None:
        self._engine = engine
        self._interval = interval or settings.notification_check_interval
        self._timezone = timezone or settings.scheduler_timezone or None
        self._enabled = settings.notifications_enabled if enabled is None else enabled
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Create the periodic job and start ticking (unless disabled)."""
        if not self._enabled:
            logger.info("Notifications are disabled; scheduler not started")
            return
        if self._scheduler is not None:
            return

        trigger = build_trigger(self._interval, self._timezone)
        scheduler = (
            AsyncIOScheduler(timezone=self._timezone) if self._timezone else AsyncIOScheduler()
        )
        scheduler.add_job(
            self._tick,
            trigger=trigger,
            id=JOB_ID,
            name="Notification check",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Notification scheduler started with interval: %s", self._interval)

    async def stop(self) -> None:
        """Shut down the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Notification scheduler stopped")

    def next_run_time(self) -> datetime | None:
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    # -- Execution -------------------------------------------------------------

    async def run_now(self) -> CycleReport:
        """Run one cycle immediately and return its report.

        Raises CycleAbortedError when the cycle could not load its tasks.
        """
        logger.info("Manual notification check requested")
        return await self._engine.run_cycle()

    async def _tick(self) -> None:
        """Callback invoked by APScheduler."""
        logger.info("Running notification check...")
        try:
            await self._engine.run_cycle()
        except CycleAbortedError:
            logger.exception("Error checking notifications")
            return
        except Exception:
            logger.exception("Unexpected error during notification check")
            return
        logger.info("Notification check completed")
