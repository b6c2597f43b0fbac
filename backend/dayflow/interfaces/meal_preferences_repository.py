"""
Meal preferences repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from dayflow.models.meal_preferences import MealPreferences


class IMealPreferencesRepository(ABC):
    @abstractmethod
    async def load(self, user_id: str) -> Optional[MealPreferences]:
        pass

    @abstractmethod
    async def save(self, user_id: str, preferences: MealPreferences) -> MealPreferences:
        """Persist the clamped form of ``preferences`` and return it."""
        pass
