"""
In-process reminder scheduling on APScheduler.

One job per task (``reminder:<task id>``) plus one standing daily summary
job. Firing a job only logs; handing the reminder to a device is outside
this service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from dayflow.core.config import get_settings
from dayflow.core.exceptions import InfrastructureError
from dayflow.core.logger import setup_logger
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.utils.datetime_utils import ensure_utc, minute_of_day, now_utc

logger = setup_logger(__name__)

DAILY_SUMMARY_JOB_ID = "daily-summary"


def reminder_job_id(entity_id: UUID) -> str:
    return f"reminder:{entity_id}"


def build_summary_message(active_count: int) -> str:
    if active_count > 0:
        plural = "" if active_count == 1 else "s"
        return f"You have {active_count} task{plural} scheduled for today. Tap to review!"
    return "You're all caught up! Review today's plan anyway?"


class APSchedulerReminderService(IReminderService):
    """
    Reminder service backed by an ``AsyncIOScheduler``.

    Jobs added before ``start()`` are kept pending by APScheduler and
    activated once the scheduler runs.
    """

    def __init__(
        self,
        scheduler: Optional[AsyncIOScheduler] = None,
        timezone: Optional[str] = None,
        summary_hour: Optional[int] = None,
    ):
        settings = get_settings()
        self._timezone = timezone or settings.TIMEZONE
        self._summary_hour = (
            summary_hour if summary_hour is not None else settings.DAILY_SUMMARY_HOUR
        )
        self._scheduler = scheduler or AsyncIOScheduler(timezone=self._timezone)

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info(f"Reminder scheduler started (timezone={self._timezone})")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    async def schedule(
        self,
        entity_id: UUID,
        title: str,
        fire_at: datetime,
        repeat_daily: bool = False,
    ) -> None:
        fire_at = ensure_utc(fire_at)
        if repeat_daily:
            minutes = minute_of_day(fire_at, self._timezone)
            trigger = CronTrigger(
                hour=minutes // 60,
                minute=minutes % 60,
                timezone=self._timezone,
            )
        else:
            if fire_at <= now_utc():
                logger.warning(f"Skipping reminder in the past for {entity_id}")
                await self.cancel(entity_id)
                return
            trigger = DateTrigger(run_date=fire_at)

        try:
            self._scheduler.add_job(
                self._fire_reminder,
                trigger,
                args=[str(entity_id), title],
                id=reminder_job_id(entity_id),
                name=f"Reminder: {title}",
                replace_existing=True,
            )
        except Exception as e:
            raise InfrastructureError(f"Failed to schedule reminder for {entity_id}: {e}") from e
        logger.debug(f"Scheduled reminder {entity_id} at {fire_at.isoformat()} (daily={repeat_daily})")

    async def cancel(self, entity_id: UUID) -> None:
        try:
            self._scheduler.remove_job(reminder_job_id(entity_id))
        except JobLookupError:
            return
        logger.debug(f"Cancelled reminder {entity_id}")

    async def schedule_daily_summary(self, active_count: int) -> None:
        """Fire every day at the summary hour with the latest count."""
        await self.cancel_daily_summary()
        self._scheduler.add_job(
            self._fire_summary,
            CronTrigger(hour=self._summary_hour, minute=0, timezone=self._timezone),
            args=[build_summary_message(active_count)],
            id=DAILY_SUMMARY_JOB_ID,
            name="Today's plan",
            replace_existing=True,
        )

    async def cancel_daily_summary(self) -> None:
        try:
            self._scheduler.remove_job(DAILY_SUMMARY_JOB_ID)
        except JobLookupError:
            pass

    async def _fire_reminder(self, entity_id: str, title: str) -> None:
        logger.info(f"Task reminder: {title} ({entity_id})")

    async def _fire_summary(self, message: str) -> None:
        logger.info(f"Today's plan: {message}")
