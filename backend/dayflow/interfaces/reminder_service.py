"""
Reminder service interface.

Schedules per-task reminders and the standing daily summary. Delivery of
the notification itself is up to the implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID


class IReminderService(ABC):
    """Abstract interface for reminder scheduling."""

    @abstractmethod
    async def schedule(
        self,
        entity_id: UUID,
        title: str,
        fire_at: datetime,
        repeat_daily: bool = False,
    ) -> None:
        """
        Schedule a reminder, replacing any existing one for the entity.

        Args:
            entity_id: Task ID the reminder belongs to
            title: Text shown in the reminder
            fire_at: First fire time (UTC)
            repeat_daily: Fire every day at the same local time
        """
        pass

    @abstractmethod
    async def cancel(self, entity_id: UUID) -> None:
        """Cancel the entity's reminder; unknown ids are ignored."""
        pass

    @abstractmethod
    async def schedule_daily_summary(self, active_count: int) -> None:
        """Replace the standing daily summary with one for ``active_count`` tasks."""
        pass

    @abstractmethod
    async def cancel_daily_summary(self) -> None:
        pass
