"""
Meal preference model.

Three anchor start times from which the routine catalog is derived.
"""

from pydantic import BaseModel, Field

from dayflow.models.routine import (
    LATEST_BREAKFAST,
    LATEST_DINNER,
    LATEST_LUNCH,
    MIN_MEAL_SPACING_MINUTES,
    WAKE_END,
)
from dayflow.utils.time_range import MINUTES_IN_DAY


class MealPreferences(BaseModel):
    """Per-user meal start times in minutes from local midnight."""

    breakfast_start: int = Field(8 * 60, description="Breakfast start (minutes)")
    lunch_start: int = Field(14 * 60, description="Lunch start (minutes)")
    dinner_start: int = Field(20 * 60, description="Dinner start (minutes)")

    def clamped(self) -> "MealPreferences":
        """
        Wrap every value into one day, then apply the legal bands.

        Breakfast sits between the end of wake-up and 11:00; lunch and dinner
        keep at least an hour after the previous meal, so a collapsed gap
        pushes the later meal later within its own band.
        """
        breakfast = self.breakfast_start % MINUTES_IN_DAY
        lunch = self.lunch_start % MINUTES_IN_DAY
        dinner = self.dinner_start % MINUTES_IN_DAY

        breakfast = min(max(breakfast, WAKE_END), LATEST_BREAKFAST)
        lunch = min(max(lunch, breakfast + MIN_MEAL_SPACING_MINUTES), LATEST_LUNCH)
        dinner = min(max(dinner, lunch + MIN_MEAL_SPACING_MINUTES), LATEST_DINNER)
        return MealPreferences(
            breakfast_start=breakfast,
            lunch_start=lunch,
            dinner_start=dinner,
        )


DEFAULT_MEAL_PREFERENCES = MealPreferences()
