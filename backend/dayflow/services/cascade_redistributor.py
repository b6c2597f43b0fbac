"""
Cascade redistribution of flexible routines.

When the user edits one routine's window, the flexible routines between it
and the next meal or sleep are re-flowed into the space that is left:
each keeps up to its original duration, every later block keeps at least
a small floor, and the last block before the boundary ends exactly where
the boundary starts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from dayflow.models.routine import RoutineSeed
from dayflow.models.schedule import RoutineUpdate
from dayflow.models.task import Task
from dayflow.services.routine_catalog import build_reminder_at
from dayflow.services.schedule_reconciler import select_catalog_routines
from dayflow.utils.datetime_utils import minute_of_day
from dayflow.utils.time_range import (
    MINUTES_IN_DAY,
    TimeRange,
    inject_time_metadata,
    normalize_range,
    parse_time_range,
)

CASCADE_FLOOR_MINUTES = 2


def realign_reminder(
    task: Task,
    old_range: Optional[TimeRange],
    new_range: TimeRange,
    timezone: str,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    New reminder time when the reminder tracked the old start, else ``None``.

    A reminder "tracks" the window when it fires at the window's start
    minute of the day.
    """
    if task.reminder_at is None or old_range is None:
        return None
    if minute_of_day(task.reminder_at, timezone) != old_range.start_minutes % MINUTES_IN_DAY:
        return None
    if old_range.start_minutes % MINUTES_IN_DAY == new_range.start_minutes % MINUTES_IN_DAY:
        return None
    return build_reminder_at(new_range.start_minutes, timezone, now)


def redistribute(
    edited: Task,
    routines: Iterable[Task],
    seeds: list[RoutineSeed],
    timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> list[RoutineUpdate]:
    """
    Re-flow the flexible routines after ``edited``.

    Args:
        edited: The routine with its new window already in its description
        routines: The user's routine records
        seeds: Routine catalog (order matters)
        timezone: IANA timezone of the user
        now: Reference time for reminder recomputation

    Returns:
        Updates for routines whose window changes. Empty when there is no
        boundary, nothing between, or not enough room for the floor.
    """
    edited_range = parse_time_range(edited.description)
    if edited_range is None:
        return []
    edited_range = normalize_range(edited_range)

    keys = [seed.key for seed in seeds]
    edited_key = edited.title.lower()
    if edited_key not in keys:
        return []
    position = keys.index(edited_key)

    boundary_position = next(
        (
            index
            for index in range(position + 1, len(seeds))
            if seeds[index].is_cascade_boundary
        ),
        None,
    )
    if boundary_position is None:
        return []

    by_key = select_catalog_routines(routines, seeds)
    boundary_seed = seeds[boundary_position]
    boundary = by_key.get(boundary_seed.key)
    if boundary is None:
        return []
    boundary_range = normalize_range(
        parse_time_range(boundary.description) or boundary_seed.time_range
    )
    boundary_start = boundary_range.start_minutes

    targets = [
        (seed, by_key[seed.key])
        for seed in seeds[position + 1 : boundary_position]
        if seed.is_flexible and seed.key in by_key
    ]
    if not targets:
        return []

    cursor = min(edited_range.end_minutes, boundary_start)
    if boundary_start - cursor < CASCADE_FLOOR_MINUTES * len(targets):
        return []

    updates: list[RoutineUpdate] = []
    last_index = len(targets) - 1
    for index, (seed, routine) in enumerate(targets):
        current = parse_time_range(routine.description)
        original = current or seed.time_range
        original_duration = max(original.duration, 0)

        reserved = CASCADE_FLOOR_MINUTES * (last_index - index)
        available = boundary_start - cursor - reserved
        duration = max(CASCADE_FLOOR_MINUTES, min(original_duration, available))

        start = cursor
        end = boundary_start if index == last_index else start + duration
        new_range = TimeRange(start, end)
        cursor = end

        if current is not None and normalize_range(current) == new_range:
            continue

        new_reminder = realign_reminder(routine, current, new_range, timezone, now)
        updates.append(
            RoutineUpdate(
                task_id=routine.id,
                title=routine.title,
                start_minutes=new_range.start_minutes,
                end_minutes=new_range.end_minutes,
                description=inject_time_metadata(routine.description, new_range),
                reminder_changed=new_reminder is not None,
                reminder_at=new_reminder,
            )
        )

    return updates
