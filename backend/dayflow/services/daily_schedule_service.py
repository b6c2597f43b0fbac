"""
Daily schedule service.

Orchestrates the engine against the stores: every load runs
migrate -> sync reminders -> reconcile -> daily summary strictly in order,
and a routine time edit is persisted before its cascade is written one
routine at a time.

Operations for one user are serialized in-process with an asyncio lock;
across processes the store stays last-write-wins.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from dayflow.core.config import get_settings
from dayflow.core.exceptions import NotFoundError, ValidationError
from dayflow.core.logger import setup_logger
from dayflow.interfaces.meal_preferences_repository import IMealPreferencesRepository
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.interfaces.schema_version_repository import ISchemaVersionRepository
from dayflow.interfaces.task_repository import ITaskRepository
from dayflow.models.meal_preferences import DEFAULT_MEAL_PREFERENCES, MealPreferences
from dayflow.models.routine import RoutineSeed
from dayflow.models.schedule import DailySchedule, RoutineUpdate
from dayflow.models.task import Task, TaskUpdate
from dayflow.services.cascade_redistributor import realign_reminder, redistribute
from dayflow.services.reminder_sync import (
    refresh_daily_summary,
    sync_reminders,
    sync_task_reminder,
)
from dayflow.services.routine_catalog import build_routine_seeds
from dayflow.services.routine_migration import RoutineMigrationService
from dayflow.services.schedule_reconciler import build_daily_schedule
from dayflow.utils.datetime_utils import day_bounds_utc, get_user_today
from dayflow.utils.time_range import (
    MINUTES_IN_DAY,
    TimeRange,
    inject_time_metadata,
    normalize_range,
    parse_time_range,
)

logger = setup_logger(__name__)


def _build_task_update(title: str, fields: dict) -> TaskUpdate:
    try:
        return TaskUpdate(**fields)
    except PydanticValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        raise ValidationError(f"Cannot update '{title}': {messages}") from e


class DailyScheduleService:
    """Loads reconciled days and applies routine edits."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        meal_preferences_repo: IMealPreferencesRepository,
        version_repo: ISchemaVersionRepository,
        reminder_service: IReminderService,
        timezone: Optional[str] = None,
    ):
        self.task_repo = task_repo
        self.meal_preferences_repo = meal_preferences_repo
        self.reminder_service = reminder_service
        self.timezone = timezone or get_settings().TIMEZONE
        self.migration = RoutineMigrationService(
            task_repo=task_repo,
            version_repo=version_repo,
            reminder_service=reminder_service,
            timezone=self.timezone,
        )
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    async def get_meal_preferences(self, user_id: str) -> MealPreferences:
        preferences = await self.meal_preferences_repo.load(user_id)
        return preferences or DEFAULT_MEAL_PREFERENCES

    async def get_seeds(self, user_id: str) -> list[RoutineSeed]:
        return build_routine_seeds(await self.get_meal_preferences(user_id))

    async def _list_routines(self, user_id: str) -> list[Task]:
        # An empty due window leaves only the routines.
        start, _ = day_bounds_utc(get_user_today(self.timezone), self.timezone)
        tasks = await self.task_repo.list(user_id, start=start, end=start)
        return [task for task in tasks if task.is_routine]

    async def load_day(
        self,
        user_id: str,
        day: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> DailySchedule:
        """
        Load the reconciled schedule for ``day`` (default: today).

        Store errors while listing propagate; migration, reminder and
        summary failures are logged inside their steps.
        """
        day = day or get_user_today(self.timezone)
        async with self._lock_for(user_id):
            start, end = day_bounds_utc(day, self.timezone)
            tasks = await self.task_repo.list(user_id, start=start, end=end, include_completed=True)
            seeds = await self.get_seeds(user_id)

            tasks = await self.migration.ensure_routines(user_id, tasks, seeds, now=now)
            await sync_reminders(self.reminder_service, tasks)

            entries = build_daily_schedule(tasks, day, seeds, self.timezone)
            active_count = sum(1 for task in entries if not task.is_completed)
            await refresh_daily_summary(self.reminder_service, active_count)

            return DailySchedule(day=day, tasks=entries, active_count=active_count)

    async def edit_routine_time(
        self,
        user_id: str,
        task_id: UUID,
        time_range: TimeRange,
        now: Optional[datetime] = None,
    ) -> list[Task]:
        """
        Set a routine's window and cascade into the flexible routines after it.

        Every write is built before the first one is stored, so an invalid
        edit or cascade leaves the store untouched.

        Returns:
            The edited routine followed by every cascaded routine, in write order

        Raises:
            NotFoundError: If the routine does not exist
            ValidationError: If the task is a one-off task, the window is
                longer than a day, or the resulting notes are too long
        """
        new_range = normalize_range(time_range)
        if new_range.duration > MINUTES_IN_DAY:
            raise ValidationError("A routine window cannot be longer than one day")

        async with self._lock_for(user_id):
            routine = await self.task_repo.get(user_id, task_id)
            if routine is None:
                raise NotFoundError(f"Task {task_id} not found")
            if not routine.is_routine:
                raise ValidationError("Only routines have an adjustable daily window")

            old_range = parse_time_range(routine.description)
            update: dict = {"description": inject_time_metadata(routine.description, new_range)}
            new_reminder = realign_reminder(routine, old_range, new_range, self.timezone, now)
            if new_reminder is not None:
                update["reminder_at"] = new_reminder
            edited_update = _build_task_update(routine.title, update)
            preview = routine.model_copy(update=update)

            routines = [
                preview if task.id == preview.id else task
                for task in await self._list_routines(user_id)
            ]
            seeds = await self.get_seeds(user_id)
            updates = redistribute(preview, routines, seeds, self.timezone, now)

            cascade: list[tuple[RoutineUpdate, TaskUpdate]] = []
            for routine_update in updates:
                payload: dict = {"description": routine_update.description}
                if routine_update.reminder_changed:
                    payload["reminder_at"] = routine_update.reminder_at
                cascade.append((routine_update, _build_task_update(routine_update.title, payload)))

            edited = await self.task_repo.update(user_id, task_id, edited_update)
            if new_reminder is not None:
                await sync_task_reminder(self.reminder_service, edited)

            written = [edited]
            for routine_update, task_update in cascade:
                task = await self.task_repo.update(user_id, routine_update.task_id, task_update)
                if routine_update.reminder_changed:
                    await sync_task_reminder(self.reminder_service, task)
                written.append(task)

            if updates:
                logger.info(
                    f"Cascaded '{edited.title}' edit into "
                    f"{', '.join(update.title for update in updates)}"
                )
            return written

    async def update_meal_preferences(
        self,
        user_id: str,
        preferences: MealPreferences,
        now: Optional[datetime] = None,
    ) -> MealPreferences:
        """Save preferences and move uncustomized routines onto the new seeds."""
        async with self._lock_for(user_id):
            old_seeds = await self.get_seeds(user_id)
            saved = await self.meal_preferences_repo.save(user_id, preferences)
            new_seeds = build_routine_seeds(saved)
            routines = await self._list_routines(user_id)
            await self.migration.reseed_routines(user_id, routines, old_seeds, new_seeds, now=now)
            return saved
