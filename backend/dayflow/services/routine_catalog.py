"""
Routine catalog.

The ordered list of canonical daily routines, derived from a user's meal
preferences. Catalog order doubles as the tie-breaking ordinal in the
daily schedule.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Iterable, Optional

from dayflow.models.meal_preferences import DEFAULT_MEAL_PREFERENCES, MealPreferences
from dayflow.models.routine import (
    MEAL_DURATION_MINUTES,
    SLEEP_END,
    SLEEP_START,
    WAKE_END,
    WAKE_START,
    RoutineKind,
    RoutineSeed,
)
from dayflow.utils.datetime_utils import next_occurrence
from dayflow.utils.time_range import MINUTES_IN_DAY, TimeRange, inject_time_metadata

# Bump when seed titles, summaries or reminder rules change.
ROUTINE_CATALOG_VERSION = 4

WAKE_UP = "Wake up"
EARLY_FOCUS = "Early focus"
BREAKFAST = "Breakfast"
MORNING_WORK = "Morning work"
LUNCH = "Lunch"
AFTERNOON_WORK = "Afternoon work"
DINNER = "Dinner"
EVENING_TIME = "Evening time"
SLEEP = "Sleep"

# Titles seeded by earlier catalog versions and since retired.
LEGACY_ROUTINE_TITLES = frozenset(
    {
        "early morning rest",
        "midday rest",
        "afternoon rest",
        "evening wind-down",
        "late evening rest",
    }
)

UNKNOWN_ORDINAL = sys.maxsize


def build_routine_seeds(
    preferences: Optional[MealPreferences] = None,
) -> list[RoutineSeed]:
    """
    Build the nine canonical routines in catalog order.

    Meals last an hour from their (clamped) preferred start; each flexible
    block fills the gap between its neighbouring anchors. Meals and sleep
    carry a reminder at their start.
    """
    prefs = (preferences or DEFAULT_MEAL_PREFERENCES).clamped()
    breakfast_end = prefs.breakfast_start + MEAL_DURATION_MINUTES
    lunch_end = prefs.lunch_start + MEAL_DURATION_MINUTES
    dinner_end = prefs.dinner_start + MEAL_DURATION_MINUTES

    def flexible(title: str, summary: str, start: int, end: int) -> RoutineSeed:
        # A gap squeezed to nothing becomes an empty window.
        return RoutineSeed(
            title=title,
            summary=summary,
            kind=RoutineKind.FLEXIBLE,
            start_minutes=start,
            end_minutes=max(start, end),
        )

    def meal(title: str, summary: str, start: int) -> RoutineSeed:
        return RoutineSeed(
            title=title,
            summary=summary,
            kind=RoutineKind.FOOD,
            start_minutes=start,
            end_minutes=start + MEAL_DURATION_MINUTES,
            reminder_minutes=start,
        )

    return [
        RoutineSeed(
            title=WAKE_UP,
            summary="Rise, hydrate and get moving.",
            kind=RoutineKind.WAKE,
            start_minutes=WAKE_START,
            end_minutes=WAKE_END,
        ),
        flexible(
            EARLY_FOCUS,
            "Ease into the day with light stretching or journaling.",
            WAKE_END,
            prefs.breakfast_start,
        ),
        meal(BREAKFAST, "Start the day with a healthy meal.", prefs.breakfast_start),
        flexible(
            MORNING_WORK,
            "Focus, meetings, or flexible work time.",
            breakfast_end,
            prefs.lunch_start,
        ),
        meal(LUNCH, "Fuel up during the midday break.", prefs.lunch_start),
        flexible(
            AFTERNOON_WORK,
            "Project work, errands, or downtime.",
            lunch_end,
            prefs.dinner_start,
        ),
        meal(DINNER, "Share a relaxed evening meal.", prefs.dinner_start),
        flexible(
            EVENING_TIME,
            "Reflect, enjoy hobbies, or connect with family.",
            dinner_end,
            SLEEP_START,
        ),
        RoutineSeed(
            title=SLEEP,
            summary="Wind down and get ready for tomorrow.",
            kind=RoutineKind.SLEEP,
            start_minutes=SLEEP_START,
            end_minutes=SLEEP_END,
            reminder_minutes=SLEEP_START,
        ),
    ]


def seed_index(seeds: Iterable[RoutineSeed]) -> dict[str, RoutineSeed]:
    """Map lower-cased title to seed."""
    return {seed.key: seed for seed in seeds}


def routine_ordinals(seeds: Iterable[RoutineSeed]) -> dict[str, int]:
    """Map lower-cased title to catalog position."""
    return {seed.key: index for index, seed in enumerate(seeds)}


def build_routine_description(seed: RoutineSeed) -> str:
    """Seed summary with the seed window embedded; no marker for an empty window."""
    if not seed.has_window:
        return seed.summary
    return inject_time_metadata(seed.summary, seed.time_range)


def expected_time_range(seed: RoutineSeed) -> Optional[TimeRange]:
    """The range a freshly seeded routine's description decodes to."""
    return seed.time_range if seed.has_window else None


def build_reminder_at(
    start_minutes: Optional[int],
    timezone: str,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Next occurrence of ``start_minutes`` as a UTC reminder time."""
    if start_minutes is None:
        return None
    return next_occurrence(start_minutes % MINUTES_IN_DAY, timezone, now)
