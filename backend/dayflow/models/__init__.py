"""Pydantic models (schemas) for the application."""

from dayflow.models.meal_preferences import DEFAULT_MEAL_PREFERENCES, MealPreferences
from dayflow.models.routine import RoutineKind, RoutineSeed
from dayflow.models.schedule import DailySchedule, RoutineTimeUpdate, RoutineUpdate
from dayflow.models.schema_version import SchemaVersion
from dayflow.models.task import Task, TaskCreate, TaskUpdate
from dayflow.models.user import User

__all__ = [
    "DEFAULT_MEAL_PREFERENCES",
    "DailySchedule",
    "MealPreferences",
    "RoutineKind",
    "RoutineSeed",
    "RoutineTimeUpdate",
    "RoutineUpdate",
    "SchemaVersion",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "User",
]
