"""
Routine catalog model definitions.

Seeds describe the canonical daily routines; they are derived from meal
preferences and never persisted.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from dayflow.utils.time_range import MINUTES_IN_DAY, TimeRange

# Fixed day boundaries (minutes from local midnight)
WAKE_START = 6 * 60
WAKE_END = 6 * 60 + 30
SLEEP_START = 23 * 60
SLEEP_END = 6 * 60

MEAL_DURATION_MINUTES = 60
MIN_MEAL_SPACING_MINUTES = 60
LATEST_BREAKFAST = 11 * 60
LATEST_LUNCH = 17 * 60
LATEST_DINNER = SLEEP_START - 60


class RoutineKind(str, Enum):
    """Placement behaviour of a routine in the daily schedule."""

    WAKE = "WAKE"
    FLEXIBLE = "FLEXIBLE"
    FOOD = "FOOD"
    SLEEP = "SLEEP"


class RoutineSeed(BaseModel):
    """Canonical routine template."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    summary: str = ""
    kind: RoutineKind
    start_minutes: int = Field(..., ge=0, lt=MINUTES_IN_DAY)
    end_minutes: int = Field(..., ge=0, lt=MINUTES_IN_DAY)
    reminder_minutes: Optional[int] = Field(None, ge=0, lt=MINUTES_IN_DAY)

    @property
    def key(self) -> str:
        return self.title.lower()

    @property
    def is_flexible(self) -> bool:
        return self.kind == RoutineKind.FLEXIBLE

    @property
    def is_food(self) -> bool:
        return self.kind == RoutineKind.FOOD

    @property
    def is_cascade_boundary(self) -> bool:
        """Meals and sleep stop a cascade."""
        return self.kind in (RoutineKind.FOOD, RoutineKind.SLEEP)

    @property
    def time_range(self) -> TimeRange:
        """
        Seed window in raw minutes.

        An end before the start crosses midnight; an end equal to the start
        is an empty window (a flexible block squeezed out by its meals).
        """
        end = self.end_minutes
        if end < self.start_minutes:
            end += MINUTES_IN_DAY
        return TimeRange(self.start_minutes, end)

    @property
    def has_window(self) -> bool:
        return self.time_range.duration > 0
