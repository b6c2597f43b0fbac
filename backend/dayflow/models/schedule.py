"""
Daily schedule model definitions.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from dayflow.models.task import Task
from dayflow.utils.time_range import MINUTES_IN_DAY, TimeRange, normalize_range


class DailySchedule(BaseModel):
    """Reconciled view of one day."""

    day: date
    tasks: list[Task] = Field(default_factory=list)
    active_count: int = Field(0, ge=0, description="Incomplete entries in the view")


class RoutineTimeUpdate(BaseModel):
    """Request body for editing a routine's time window."""

    start_minutes: int = Field(..., ge=0, lt=MINUTES_IN_DAY)
    end_minutes: int = Field(..., ge=0, le=2 * MINUTES_IN_DAY)

    @model_validator(mode="after")
    def validate_duration(self):
        if self.end_minutes == self.start_minutes:
            raise ValueError("A routine window must have a non-zero duration")
        if normalize_range(self.to_time_range()).duration > MINUTES_IN_DAY:
            raise ValueError("A routine window cannot be longer than one day")
        return self

    def to_time_range(self) -> TimeRange:
        return TimeRange(self.start_minutes, self.end_minutes)


class RoutineUpdate(BaseModel):
    """One write produced by a cascade."""

    task_id: UUID
    title: str
    start_minutes: int
    end_minutes: int
    description: str
    reminder_changed: bool = False
    reminder_at: Optional[datetime] = None
