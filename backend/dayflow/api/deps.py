"""
Dependency injection for API endpoints.

Repositories and services are process-wide singletons so that the reminder
scheduler and the per-user schedule locks are shared by every request.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from dayflow.interfaces.meal_preferences_repository import IMealPreferencesRepository
from dayflow.interfaces.reminder_service import IReminderService
from dayflow.interfaces.schema_version_repository import ISchemaVersionRepository
from dayflow.interfaces.task_repository import ITaskRepository
from dayflow.models.user import User
from dayflow.services.daily_schedule_service import DailyScheduleService
from dayflow.services.task_service import TaskService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from dayflow.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository()


@lru_cache()
def get_meal_preferences_repository() -> IMealPreferencesRepository:
    """Get meal preferences repository instance."""
    from dayflow.infrastructure.local.meal_preferences_repository import (
        SqliteMealPreferencesRepository,
    )
    return SqliteMealPreferencesRepository()


@lru_cache()
def get_schema_version_repository() -> ISchemaVersionRepository:
    """Get routine catalog version repository instance."""
    from dayflow.infrastructure.local.schema_version_repository import (
        SqliteSchemaVersionRepository,
    )
    return SqliteSchemaVersionRepository()


@lru_cache()
def get_reminder_service() -> IReminderService:
    """Get the shared reminder scheduler."""
    from dayflow.infrastructure.local.reminder_scheduler import APSchedulerReminderService
    return APSchedulerReminderService()


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_task_service() -> TaskService:
    return TaskService(
        task_repo=get_task_repository(),
        reminder_service=get_reminder_service(),
    )


@lru_cache()
def get_daily_schedule_service() -> DailyScheduleService:
    return DailyScheduleService(
        task_repo=get_task_repository(),
        meal_preferences_repo=get_meal_preferences_repository(),
        version_repo=get_schema_version_repository(),
        reminder_service=get_reminder_service(),
    )


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """
    Get current user.

    Local mode has no identity provider: the bearer token is taken as the
    user ID, and requests without one act as the development user.
    """
    if not authorization:
        return User(id="dev_user", display_name="Developer")

    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    return User(id=token)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

Tasks = Annotated[TaskService, Depends(get_task_service)]
DailySchedules = Annotated[DailyScheduleService, Depends(get_daily_schedule_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
