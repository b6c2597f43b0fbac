"""API routers."""

from dayflow.api import meal_preferences, schedule, tasks

__all__ = [
    "tasks",
    "schedule",
    "meal_preferences",
]
