"""
Task model definitions.

A task with a due date is a one-off commitment; a task without one is a
daily routine.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dayflow.utils.time_range import TIME_METADATA_MAX_LENGTH, strip_time_metadata

DESCRIPTION_MAX_LENGTH = 2000
# User notes leave room for the time window lines added on every edit.
NOTES_MAX_LENGTH = DESCRIPTION_MAX_LENGTH - TIME_METADATA_MAX_LENGTH


def _check_notes_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(strip_time_metadata(value)) > NOTES_MAX_LENGTH:
        raise ValueError(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
    return value


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: Optional[str] = Field(
        None,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Free-text notes (may embed a time window)",
    )
    due_at: Optional[datetime] = Field(None, description="Due date (absent for routines)")
    reminder_at: Optional[datetime] = Field(None, description="Reminder fire time")


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    _notes_length = field_validator("description")(_check_notes_length)


class TaskUpdate(BaseModel):
    """Schema for updating an existing task.

    Fields explicitly set to ``None`` are cleared; unset fields are left alone.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    due_at: Optional[datetime] = None
    reminder_at: Optional[datetime] = None

    _notes_length = field_validator("description")(_check_notes_length)


class Task(TaskBase):
    """Complete task model with all fields."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str = Field(..., description="Owner user ID")
    is_completed: bool = False
    created_at: datetime
    updated_at: datetime

    @property
    def is_routine(self) -> bool:
        return self.due_at is None
