"""
SQLite implementation of meal preferences repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from dayflow.infrastructure.local.database import MealPreferencesORM, get_session_factory
from dayflow.interfaces.meal_preferences_repository import IMealPreferencesRepository
from dayflow.models.meal_preferences import MealPreferences
from dayflow.utils.datetime_utils import now_utc


class SqliteMealPreferencesRepository(IMealPreferencesRepository):
    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MealPreferencesORM) -> MealPreferences:
        return MealPreferences(
            breakfast_start=orm.breakfast_start,
            lunch_start=orm.lunch_start,
            dinner_start=orm.dinner_start,
        ).clamped()

    async def load(self, user_id: str) -> Optional[MealPreferences]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MealPreferencesORM).where(MealPreferencesORM.user_id == user_id)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def save(self, user_id: str, preferences: MealPreferences) -> MealPreferences:
        clamped = preferences.clamped()
        async with self._session_factory() as session:
            result = await session.execute(
                select(MealPreferencesORM).where(MealPreferencesORM.user_id == user_id)
            )
            orm = result.scalar_one_or_none()
            now = now_utc().replace(tzinfo=None)
            if orm is None:
                orm = MealPreferencesORM(user_id=user_id)
                session.add(orm)
            orm.breakfast_start = clamped.breakfast_start
            orm.lunch_start = clamped.lunch_start
            orm.dinner_start = clamped.dinner_start
            orm.updated_at = now
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)
