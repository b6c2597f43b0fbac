"""
Daily schedule reconciliation.

Turns a user's fixed tasks for one day plus their routines into a single
time-ordered schedule. Fixed tasks always keep their slot; meals move to
the first time after whatever blocks them; flexible blocks shrink to the
largest free gap in their window or disappear for the day.

Everything here is pure: inputs are never mutated and adjusted routines
are returned as new ``Task`` objects that are not persisted.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from dayflow.core.logger import setup_logger
from dayflow.models.routine import RoutineSeed
from dayflow.models.task import Task
from dayflow.services.routine_catalog import UNKNOWN_ORDINAL, routine_ordinals, seed_index
from dayflow.utils.datetime_utils import ensure_utc, local_date
from dayflow.utils.time_range import (
    MINUTES_IN_DAY,
    TimeRange,
    clamp_range_to_bounds,
    inject_time_metadata,
    normalize_range,
    parse_time_range,
    range_duration,
    ranges_overlap,
)

logger = setup_logger(__name__)


def merge_overlaps(segments: Iterable[TimeRange]) -> list[TimeRange]:
    """Merge overlapping or touching segments into sorted disjoint ones."""
    ordered = sorted(
        (normalize_range(segment) for segment in segments),
        key=lambda segment: segment.start_minutes,
    )
    merged: list[TimeRange] = []
    for segment in ordered:
        if merged and merged[-1].end_minutes >= segment.start_minutes:
            last = merged[-1]
            merged[-1] = TimeRange(
                last.start_minutes, max(last.end_minutes, segment.end_minutes)
            )
        else:
            merged.append(segment)
    return merged


def find_largest_gap(bounds: TimeRange, blockers: Iterable[TimeRange]) -> Optional[TimeRange]:
    """
    Widest uncovered interval of ``bounds``.

    Blockers are clipped to the bounds and merged, then scanned left to
    right including the tail after the last one. The earliest gap wins a
    tie. Returns ``None`` when the bounds are fully covered.
    """
    normalized_bounds = normalize_range(bounds)
    clipped = [
        clipped_block
        for clipped_block in (clamp_range_to_bounds(block, normalized_bounds) for block in blockers)
        if clipped_block is not None
    ]

    cursor = normalized_bounds.start_minutes
    best: Optional[TimeRange] = None

    for block in merge_overlaps(clipped):
        if block.start_minutes > cursor:
            candidate = TimeRange(cursor, block.start_minutes)
            if best is None or candidate.duration > best.duration:
                best = candidate
        cursor = max(cursor, block.end_minutes)

    if cursor < normalized_bounds.end_minutes:
        candidate = TimeRange(cursor, normalized_bounds.end_minutes)
        if best is None or candidate.duration > best.duration:
            best = candidate

    return best


def place_food_range(base: TimeRange, blockers: list[TimeRange]) -> TimeRange:
    """
    Move a meal past the blockers it overlaps, keeping its duration.

    The start jumps to the latest end among overlapping blockers until the
    meal is clear. A meal pushed past midnight is clamped so it ends at
    the end of the day.
    """
    placed = normalize_range(base)
    duration = range_duration(placed)

    while True:
        overlapping = [block for block in blockers if ranges_overlap(block, placed)]
        if not overlapping:
            return placed
        latest_end = max(normalize_range(block).end_minutes for block in overlapping)
        start = max(placed.start_minutes, latest_end)
        if start + duration > MINUTES_IN_DAY:
            start = MINUTES_IN_DAY - duration
            return TimeRange(start, start + duration)
        placed = TimeRange(start, start + duration)


def _routine_blockers(time_range: TimeRange) -> list[TimeRange]:
    """A daily routine that runs past midnight also occupies the next morning."""
    normalized = normalize_range(time_range)
    blockers = [normalized]
    if normalized.end_minutes > MINUTES_IN_DAY:
        blockers.append(
            TimeRange(
                normalized.start_minutes - MINUTES_IN_DAY,
                normalized.end_minutes - MINUTES_IN_DAY,
            )
        )
    return blockers


def _with_time_range(task: Task, time_range: TimeRange) -> Task:
    if parse_time_range(task.description) == normalize_range(time_range):
        return task
    return task.model_copy(
        update={"description": inject_time_metadata(task.description, time_range)}
    )


def _base_window(task: Task, seed: RoutineSeed) -> TimeRange:
    """The routine's stored window, or its seed window when none is stored."""
    return parse_time_range(task.description) or seed.time_range


def select_catalog_routines(
    tasks: Iterable[Task], seeds: Iterable[RoutineSeed]
) -> dict[str, Task]:
    """
    One routine record per catalog title (earliest created wins).

    Routines whose title is not in the catalog are left out.
    """
    known = seed_index(seeds)
    selected: dict[str, Task] = {}
    for task in tasks:
        if not task.is_routine:
            continue
        key = task.title.lower()
        if key not in known:
            continue
        current = selected.get(key)
        if current is None or ensure_utc(task.created_at) < ensure_utc(current.created_at):
            selected[key] = task
    return selected


def reconcile(
    tasks: Iterable[Task],
    day: date,
    seeds: list[RoutineSeed],
    timezone: str = "UTC",
) -> list[Task]:
    """
    Compute the effective routine windows for ``day``.

    Args:
        tasks: Fixed tasks for the day and the user's routines
        day: Local calendar day being viewed
        seeds: Routine catalog (order matters)
        timezone: IANA timezone of the user

    Returns:
        Fixed tasks unchanged plus placed routines, unsorted. Routines that
        are not in the catalog, duplicates, and flexible blocks with no
        free time left are omitted.
    """
    tasks = list(tasks)
    routines = select_catalog_routines(tasks, seeds)

    blocking: list[TimeRange] = []
    for task in tasks:
        if task.is_routine or local_date(task.due_at, timezone) != day:
            continue
        parsed = parse_time_range(task.description)
        if parsed is not None:
            blocking.append(normalize_range(parsed))

    placed: dict[UUID, Task] = {}

    for seed in seeds:
        if seed.is_flexible:
            continue
        routine = routines.get(seed.key)
        if routine is None:
            continue
        base = _base_window(routine, seed)
        time_range = place_food_range(base, blocking) if seed.is_food else normalize_range(base)
        blocking.extend(_routine_blockers(time_range))
        placed[routine.id] = _with_time_range(routine, time_range)

    for seed in seeds:
        if not seed.is_flexible:
            continue
        routine = routines.get(seed.key)
        if routine is None:
            continue
        base = _base_window(routine, seed)
        gap = find_largest_gap(base, blocking) if base.duration > 0 else None
        if gap is None:
            logger.debug(f"No free time left for {routine.title} on {day}")
            continue
        blocking.append(gap)
        placed[routine.id] = _with_time_range(routine, gap)

    result: list[Task] = []
    for task in tasks:
        if task.is_routine:
            if task.id in placed:
                result.append(placed[task.id])
        else:
            result.append(task)
    return result


def sort_schedule(tasks: Iterable[Task], seeds: Iterable[RoutineSeed]) -> list[Task]:
    """
    Order a schedule for display.

    Incomplete entries first, then by start minute (entries without a
    window last), then routines by catalog position, then newest first.
    """
    ordinals = routine_ordinals(seeds)

    def sort_key(task: Task):
        parsed = parse_time_range(task.description)
        ordinal = ordinals.get(task.title.lower(), UNKNOWN_ORDINAL) if task.is_routine else UNKNOWN_ORDINAL
        return (
            task.is_completed,
            parsed is None,
            parsed.start_minutes if parsed else 0,
            ordinal,
            -ensure_utc(task.created_at).timestamp(),
        )

    return sorted(tasks, key=sort_key)


def build_daily_schedule(
    tasks: Iterable[Task],
    day: date,
    seeds: list[RoutineSeed],
    timezone: str = "UTC",
) -> list[Task]:
    """Reconcile then sort."""
    return sort_schedule(reconcile(tasks, day, seeds, timezone), seeds)
