"""
Best-effort reminder synchronisation.

Reminder failures are logged and never propagate: a task's other fields
are unaffected by a scheduler problem.
"""

from __future__ import annotations

from typing import Iterable

from dayflow.core.logger import setup_logger
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.models.task import Task

logger = setup_logger(__name__)


def reminder_is_active(task: Task) -> bool:
    """Routines always remind daily; a completed one-off task stays silent."""
    if task.reminder_at is None:
        return False
    return task.is_routine or not task.is_completed


async def sync_task_reminder(reminder_service: IReminderService, task: Task) -> None:
    """Schedule or cancel ``task``'s reminder to match its record."""
    try:
        if reminder_is_active(task):
            await reminder_service.schedule(
                task.id,
                task.title,
                task.reminder_at,
                repeat_daily=task.is_routine,
            )
        else:
            await reminder_service.cancel(task.id)
    except Exception as e:
        logger.warning(f"Failed to sync reminder for task {task.id}: {e}")


async def sync_reminders(reminder_service: IReminderService, tasks: Iterable[Task]) -> None:
    """Re-sync every task that carries a reminder; the rest have no job to touch."""
    for task in tasks:
        if task.reminder_at is not None:
            await sync_task_reminder(reminder_service, task)


async def cancel_task_reminder(reminder_service: IReminderService, task_id) -> None:
    try:
        await reminder_service.cancel(task_id)
    except Exception as e:
        logger.warning(f"Failed to cancel reminder for task {task_id}: {e}")


async def refresh_daily_summary(reminder_service: IReminderService, active_count: int) -> None:
    try:
        await reminder_service.schedule_daily_summary(active_count)
    except Exception as e:
        logger.warning(f"Failed to schedule daily summary: {e}")
