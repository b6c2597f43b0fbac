"""
Task service.

User-initiated create / update / completion / delete with the matching
reminder side effects. Store errors propagate to the caller; reminder
errors are logged.
"""

from __future__ import annotations

from uuid import UUID

from dayflow.core.exceptions import NotFoundError
from dayflow.core.logger import setup_logger
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.interfaces.task_repository import ITaskRepository
from dayflow.models.task import Task, TaskCreate, TaskUpdate
from dayflow.services.reminder_sync import cancel_task_reminder, sync_task_reminder

logger = setup_logger(__name__)


class TaskService:
    """Mutating task operations."""

    def __init__(self, task_repo: ITaskRepository, reminder_service: IReminderService):
        self.task_repo = task_repo
        self.reminder_service = reminder_service

    async def create_task(self, user_id: str, payload: TaskCreate) -> Task:
        task = await self.task_repo.create(user_id, payload)
        if task.reminder_at:
            await sync_task_reminder(self.reminder_service, task)
        logger.info(f"Created {'routine' if task.is_routine else 'task'} {task.id}")
        return task

    async def update_task(self, user_id: str, task_id: UUID, payload: TaskUpdate) -> Task:
        task = await self.task_repo.update(user_id, task_id, payload)
        await sync_task_reminder(self.reminder_service, task)
        return task

    async def set_completion(self, user_id: str, task_id: UUID, is_completed: bool) -> Task:
        """
        Toggle completion.

        Completing a one-off task cancels its reminder and reopening it
        schedules the reminder again; routines keep their daily reminder.
        """
        task = await self.task_repo.set_completion(user_id, task_id, is_completed)
        if task.reminder_at:
            await sync_task_reminder(self.reminder_service, task)
        return task

    async def delete_task(self, user_id: str, task_id: UUID) -> None:
        """
        Delete a task.

        The reminder is cancelled whether or not the store delete succeeds.

        Raises:
            NotFoundError: If the task does not exist
        """
        try:
            deleted = await self.task_repo.delete(user_id, task_id)
        finally:
            await cancel_task_reminder(self.reminder_service, task_id)
        if not deleted:
            raise NotFoundError(f"Task {task_id} not found")
