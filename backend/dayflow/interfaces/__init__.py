"""Abstract interfaces for infrastructure abstraction."""

from dayflow.interfaces.meal_preferences_repository import IMealPreferencesRepository
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.interfaces.schema_version_repository import ISchemaVersionRepository
from dayflow.interfaces.task_repository import ITaskRepository

__all__ = [
    "IMealPreferencesRepository",
    "IReminderService",
    "ISchemaVersionRepository",
    "ITaskRepository",
]
