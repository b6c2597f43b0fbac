"""
Task repository interface.

Defines the contract for task persistence operations.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from dayflow.models.task import Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Owner user ID
            task: Task creation data

        Returns:
            Created task with generated ID and timestamps
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID.

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_completed: bool = True,
    ) -> list[Task]:
        """
        List a user's tasks for a day range.

        Args:
            user_id: Owner user ID
            start: Inclusive lower bound on due_at (None = unbounded)
            end: Exclusive upper bound on due_at (None = unbounded)
            include_completed: Include completed tasks

        Returns:
            Tasks due within [start, end) plus every routine (no due_at)
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """
        Update an existing task.

        Raises:
            NotFoundError: If task not found
        """
        pass

    @abstractmethod
    async def set_completion(self, user_id: str, task_id: UUID, is_completed: bool) -> Task:
        """
        Mark a task complete or incomplete.

        Raises:
            NotFoundError: If task not found
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, task_id: UUID) -> bool:
        """
        Delete a task.

        Returns:
            True if deleted, False if not found
        """
        pass
