"""
Unit tests for the APScheduler-backed reminder service.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from dayflow.infrastructure.local.reminder_scheduler import (
    DAILY_SUMMARY_JOB_ID,
    APSchedulerReminderService,
    build_summary_message,
    reminder_job_id,
)
from dayflow.utils.datetime_utils import now_utc


def _cron_fields(trigger: CronTrigger) -> dict[str, str]:
    return {field.name: str(field) for field in trigger.fields}


@pytest_asyncio.fixture
async def scheduler():
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.start(paused=True)
    yield scheduler
    scheduler.shutdown(wait=False)


@pytest.fixture
def reminder_service(scheduler):
    return APSchedulerReminderService(scheduler=scheduler, timezone="UTC", summary_hour=8)


@pytest.mark.asyncio
async def test_one_off_reminder_uses_date_trigger(scheduler, reminder_service):
    task_id = uuid4()
    fire_at = now_utc() + timedelta(hours=2)

    await reminder_service.schedule(task_id, "Dentist", fire_at)

    job = scheduler.get_job(reminder_job_id(task_id))
    assert isinstance(job.trigger, DateTrigger)
    assert job.trigger.run_date == fire_at
    assert job.args == (str(task_id), "Dentist")


@pytest.mark.asyncio
async def test_scheduling_again_replaces_the_job(scheduler, reminder_service):
    task_id = uuid4()
    later = now_utc() + timedelta(hours=3)

    await reminder_service.schedule(task_id, "Dentist", now_utc() + timedelta(hours=1))
    await reminder_service.schedule(task_id, "Dentist (moved)", later)

    jobs = scheduler.get_jobs()
    assert len(jobs) == 1
    assert jobs[0].trigger.run_date == later
    assert jobs[0].args[1] == "Dentist (moved)"


@pytest.mark.asyncio
async def test_past_one_off_reminder_is_skipped_and_cleared(scheduler, reminder_service):
    task_id = uuid4()
    await reminder_service.schedule(task_id, "Dentist", now_utc() + timedelta(hours=1))

    await reminder_service.schedule(task_id, "Dentist", now_utc() - timedelta(minutes=5))

    assert scheduler.get_job(reminder_job_id(task_id)) is None


@pytest.mark.asyncio
async def test_daily_reminder_uses_cron_at_local_minute(scheduler):
    service = APSchedulerReminderService(scheduler=scheduler, timezone="Asia/Tokyo", summary_hour=8)
    task_id = uuid4()

    # 03:30 UTC is 12:30 in Tokyo
    await service.schedule(task_id, "Lunch", datetime(2026, 3, 1, 3, 30, tzinfo=timezone.utc), repeat_daily=True)

    job = scheduler.get_job(reminder_job_id(task_id))
    assert isinstance(job.trigger, CronTrigger)
    fields = _cron_fields(job.trigger)
    assert (fields["hour"], fields["minute"]) == ("12", "30")


@pytest.mark.asyncio
async def test_cancel_removes_job_and_ignores_unknown(scheduler, reminder_service):
    task_id = uuid4()
    await reminder_service.schedule(task_id, "Sleep", now_utc(), repeat_daily=True)

    await reminder_service.cancel(task_id)
    await reminder_service.cancel(task_id)

    assert scheduler.get_job(reminder_job_id(task_id)) is None


@pytest.mark.asyncio
async def test_daily_summary_is_a_single_standing_job(scheduler, reminder_service):
    await reminder_service.schedule_daily_summary(3)
    await reminder_service.schedule_daily_summary(1)

    jobs = [job for job in scheduler.get_jobs() if job.id == DAILY_SUMMARY_JOB_ID]
    assert len(jobs) == 1
    assert jobs[0].args == ("You have 1 task scheduled for today. Tap to review!",)
    assert isinstance(jobs[0].trigger, CronTrigger)
    fields = _cron_fields(jobs[0].trigger)
    assert (fields["hour"], fields["minute"]) == ("8", "0")

    # Still scheduled for the next morning after it fires.
    first = jobs[0].trigger.get_next_fire_time(None, now_utc())
    assert first - now_utc() <= timedelta(days=1)
    following = jobs[0].trigger.get_next_fire_time(first, first + timedelta(minutes=1))
    assert following - first == timedelta(days=1)

    await reminder_service.cancel_daily_summary()
    assert scheduler.get_job(DAILY_SUMMARY_JOB_ID) is None


@pytest.mark.parametrize(
    "count,message",
    [
        (0, "You're all caught up! Review today's plan anyway?"),
        (1, "You have 1 task scheduled for today. Tap to review!"),
        (4, "You have 4 tasks scheduled for today. Tap to review!"),
    ],
)
def test_summary_message(count, message):
    assert build_summary_message(count) == message


@pytest.mark.asyncio
async def test_start_and_shutdown_are_idempotent():
    service = APSchedulerReminderService(timezone="UTC", summary_hour=8)

    service.start()
    service.start()
    assert service.scheduler.running

    service.shutdown()
    service.shutdown()
    assert not service.scheduler.running
