"""
Meal preferences API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from dayflow.api.deps import CurrentUser, DailySchedules
from dayflow.models.meal_preferences import MealPreferences

router = APIRouter()


@router.get("/meal-preferences", response_model=MealPreferences)
async def get_meal_preferences(
    user: CurrentUser,
    service: DailySchedules,
):
    return await service.get_meal_preferences(user.id)


@router.put("/meal-preferences", response_model=MealPreferences)
async def update_meal_preferences(
    payload: MealPreferences,
    user: CurrentUser,
    service: DailySchedules,
):
    return await service.update_meal_preferences(user.id, payload)
