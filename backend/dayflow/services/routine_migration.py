"""
Routine seeding and catalog migration.

Creates any missing canonical routine on every load and, when the stored
catalog version differs from ``ROUTINE_CATALOG_VERSION``, repairs
seed-derived fields of existing routines without overwriting a window the
user chose.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from dayflow.core.logger import setup_logger
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.interfaces.schema_version_repository import ISchemaVersionRepository
from dayflow.interfaces.task_repository import ITaskRepository
from dayflow.models.routine import RoutineSeed
from dayflow.models.schema_version import SchemaVersion
from dayflow.models.task import Task, TaskCreate, TaskUpdate
from dayflow.services.reminder_sync import cancel_task_reminder, sync_task_reminder
from dayflow.services.routine_catalog import (
    LEGACY_ROUTINE_TITLES,
    ROUTINE_CATALOG_VERSION,
    build_reminder_at,
    build_routine_description,
    expected_time_range,
    seed_index,
)
from dayflow.services.schedule_reconciler import select_catalog_routines
from dayflow.utils.datetime_utils import minute_of_day
from dayflow.utils.time_range import MINUTES_IN_DAY, normalize_range, parse_time_range

logger = setup_logger(__name__)


def is_customized(task: Task, seed: RoutineSeed) -> bool:
    """True when the routine's stored window is not the one the seed would write."""
    parsed = parse_time_range(task.description)
    stored = normalize_range(parsed) if parsed is not None else None
    return stored != expected_time_range(seed)


class RoutineMigrationService:
    """Seeds missing routines and applies catalog upgrades."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        version_repo: ISchemaVersionRepository,
        reminder_service: IReminderService,
        timezone: str = "UTC",
        catalog_version: int = ROUTINE_CATALOG_VERSION,
    ):
        self.task_repo = task_repo
        self.version_repo = version_repo
        self.reminder_service = reminder_service
        self.timezone = timezone
        self.catalog_version = catalog_version

    async def needs_migration(self, user_id: str) -> bool:
        record = await self.version_repo.get(user_id)
        stored = record.effective_version if record else None
        return stored != self.catalog_version

    async def ensure_routines(
        self,
        user_id: str,
        tasks: list[Task],
        seeds: list[RoutineSeed],
        now: Optional[datetime] = None,
    ) -> list[Task]:
        """
        Bring the user's routines up to the current catalog.

        Missing routines are created on every call; repairs and legacy
        cleanup run only on a version mismatch. Each seed is handled on its
        own: a store failure is logged and the remaining seeds still run,
        and the version is only advanced once every step succeeded.

        Args:
            user_id: Owner user ID
            tasks: The user's current task snapshot (day tasks + routines)
            seeds: Routine catalog for the user's meal preferences
            now: Reference time for reminder computation

        Returns:
            The snapshot with created / repaired routines swapped in and
            retired legacy routines removed
        """
        upgrading = await self.needs_migration(user_id)
        if upgrading:
            logger.info(f"Migrating routines for {user_id} to catalog v{self.catalog_version}")

        next_tasks = list(tasks)
        routines = select_catalog_routines(tasks, seeds)
        failed = False

        for seed in seeds:
            current = routines.get(seed.key)
            if current is None:
                try:
                    next_tasks.append(await self._create_routine(user_id, seed, now))
                except Exception as e:
                    failed = True
                    logger.warning(f"Failed to create routine '{seed.title}' for {user_id}: {e}")
                continue
            if not upgrading:
                continue
            try:
                repaired = await self.repair_routine(user_id, current, seed, now=now)
                if repaired is not current:
                    next_tasks = [repaired if task.id == repaired.id else task for task in next_tasks]
            except Exception as e:
                failed = True
                logger.warning(f"Failed to migrate routine '{seed.title}' for {user_id}: {e}")

        if not upgrading:
            return next_tasks

        next_tasks, removed_all = await self._remove_legacy_routines(user_id, next_tasks, seeds)
        if failed or not removed_all:
            logger.warning(f"Routine catalog for {user_id} left at its old version; retrying next load")
            return next_tasks

        try:
            await self.version_repo.save(
                SchemaVersion(user_id=user_id, version=self.catalog_version, legacy_seeded=False)
            )
        except Exception as e:
            logger.warning(f"Failed to store routine catalog version for {user_id}: {e}")

        return next_tasks

    async def reseed_routines(
        self,
        user_id: str,
        tasks: list[Task],
        old_seeds: list[RoutineSeed],
        new_seeds: list[RoutineSeed],
        now: Optional[datetime] = None,
    ) -> list[Task]:
        """
        Move routines that still follow the old seeds onto the new seeds.

        Used when meal preferences change; customized routines keep their
        window.
        """
        old_index = seed_index(old_seeds)
        routines = select_catalog_routines(tasks, new_seeds)
        next_tasks = list(tasks)

        for seed in new_seeds:
            current = routines.get(seed.key)
            if current is None:
                continue
            try:
                repaired = await self.repair_routine(
                    user_id,
                    current,
                    seed,
                    reference_seed=old_index.get(seed.key, seed),
                    now=now,
                )
                if repaired is not current:
                    next_tasks = [repaired if task.id == repaired.id else task for task in next_tasks]
            except Exception as e:
                logger.warning(f"Failed to reseed routine '{seed.title}' for {user_id}: {e}")

        return next_tasks

    async def repair_routine(
        self,
        user_id: str,
        current: Task,
        seed: RoutineSeed,
        reference_seed: Optional[RoutineSeed] = None,
        now: Optional[datetime] = None,
    ) -> Task:
        """
        Rewrite seed-derived fields of one routine when they are stale.

        A routine whose stored window differs from ``reference_seed`` (the
        seed it was created from; defaults to ``seed``) is customized: its
        description is kept and only its reminder is realigned to its own
        start.

        Returns:
            The updated task, or ``current`` itself when nothing changed
        """
        customized = is_customized(current, reference_seed or seed)
        update: dict = {}

        if not customized:
            description = build_routine_description(seed)
            if (current.description or "") != description:
                update["description"] = description

        if seed.reminder_minutes is not None:
            parsed = parse_time_range(current.description)
            anchor = parsed.start_minutes if customized and parsed else seed.reminder_minutes
            anchor %= MINUTES_IN_DAY
            if (
                current.reminder_at is None
                or minute_of_day(current.reminder_at, self.timezone) != anchor
            ):
                update["reminder_at"] = build_reminder_at(anchor, self.timezone, now)
        elif current.reminder_at is not None and not customized:
            update["reminder_at"] = None

        if not update:
            return current

        updated = await self.task_repo.update(user_id, current.id, TaskUpdate(**update))
        if "reminder_at" in update:
            await sync_task_reminder(self.reminder_service, updated)
        logger.debug(f"Repaired routine '{seed.title}' ({', '.join(update)})")
        return updated

    async def _create_routine(
        self,
        user_id: str,
        seed: RoutineSeed,
        now: Optional[datetime],
    ) -> Task:
        task = await self.task_repo.create(
            user_id,
            TaskCreate(
                title=seed.title,
                description=build_routine_description(seed),
                due_at=None,
                reminder_at=build_reminder_at(seed.reminder_minutes, self.timezone, now),
            ),
        )
        if task.reminder_at:
            await sync_task_reminder(self.reminder_service, task)
        logger.debug(f"Created routine '{seed.title}' for {user_id}")
        return task

    async def _remove_legacy_routines(
        self,
        user_id: str,
        tasks: list[Task],
        seeds: list[RoutineSeed],
    ) -> tuple[list[Task], bool]:
        """Delete retired routines; the flag is False when any delete failed."""
        known = seed_index(seeds)
        remaining: list[Task] = []
        removed_all = True
        for task in tasks:
            key = task.title.lower()
            if task.is_routine and key in LEGACY_ROUTINE_TITLES and key not in known:
                try:
                    await self.task_repo.delete(user_id, task.id)
                    await cancel_task_reminder(self.reminder_service, task.id)
                    logger.info(f"Removed retired routine '{task.title}' for {user_id}")
                    continue
                except Exception as e:
                    removed_all = False
                    logger.warning(f"Failed to remove retired routine '{task.title}': {e}")
            remaining.append(task)
        return remaining, removed_all
