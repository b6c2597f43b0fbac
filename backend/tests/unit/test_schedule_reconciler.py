"""
Unit tests for daily schedule reconciliation.
"""

from datetime import date, datetime, timedelta, timezone
from itertools import combinations
from typing import Optional
from uuid import uuid4

import pytest

from dayflow.models.task import Task
from dayflow.services.routine_catalog import build_routine_description, build_routine_seeds
from dayflow.services.schedule_reconciler import (
    build_daily_schedule,
    find_largest_gap,
    merge_overlaps,
    place_food_range,
    reconcile,
    select_catalog_routines,
    sort_schedule,
)
from dayflow.utils.time_range import TimeRange, inject_time_metadata, parse_time_range, ranges_overlap

DAY = date(2026, 3, 2)
BASE_TIME = datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)
SEEDS = build_routine_seeds()


def _make_task(
    title: str,
    time_range: Optional[TimeRange] = None,
    *,
    due_at: Optional[datetime] = None,
    description: Optional[str] = None,
    is_completed: bool = False,
    created_at: datetime = BASE_TIME,
) -> Task:
    if time_range is not None:
        description = inject_time_metadata(description, time_range)
    return Task(
        id=uuid4(),
        user_id="test-user",
        title=title,
        description=description,
        due_at=due_at,
        is_completed=is_completed,
        created_at=created_at,
        updated_at=created_at,
    )


def _fixed(title: str, start: int, end: int, day: date = DAY) -> Task:
    due_at = datetime(day.year, day.month, day.day, tzinfo=timezone.utc) + timedelta(minutes=start)
    return _make_task(title, TimeRange(start, end), due_at=due_at)


def _routines() -> list[Task]:
    return [
        _make_task(
            seed.title,
            description=build_routine_description(seed),
            created_at=BASE_TIME + timedelta(seconds=index),
        )
        for index, seed in enumerate(SEEDS)
    ]


def _ranges(tasks: list[Task]) -> dict[str, Optional[TimeRange]]:
    return {task.title: parse_time_range(task.description) for task in tasks}


class TestIntervalHelpers:
    def test_merge_joins_overlapping_and_touching_segments(self):
        merged = merge_overlaps([TimeRange(60, 90), TimeRange(0, 30), TimeRange(30, 45), TimeRange(80, 120)])
        assert merged == [TimeRange(0, 45), TimeRange(60, 120)]

    def test_largest_gap_includes_tail(self):
        gap = find_largest_gap(TimeRange(0, 100), [TimeRange(10, 20)])
        assert gap == TimeRange(20, 100)

    def test_largest_gap_tie_keeps_earliest(self):
        assert find_largest_gap(TimeRange(0, 100), [TimeRange(40, 60)]) == TimeRange(0, 40)

    def test_largest_gap_clips_blockers_to_bounds(self):
        gap = find_largest_gap(TimeRange(100, 200), [TimeRange(0, 120), TimeRange(190, 400)])
        assert gap == TimeRange(120, 190)

    def test_fully_covered_window_has_no_gap(self):
        assert find_largest_gap(TimeRange(100, 200), [TimeRange(50, 150), TimeRange(150, 260)]) is None

    def test_food_moves_to_latest_overlapping_end(self):
        placed = place_food_range(TimeRange(480, 540), [TimeRange(480, 525), TimeRange(530, 600)])
        assert placed == TimeRange(600, 660)

    def test_food_keeps_moving_until_clear(self):
        placed = place_food_range(TimeRange(480, 540), [TimeRange(480, 525), TimeRange(560, 600)])
        assert placed == TimeRange(600, 660)

    def test_food_clamped_to_end_of_day(self):
        placed = place_food_range(TimeRange(1320, 1380), [TimeRange(1300, 1430)])
        assert placed == TimeRange(1380, 1440)

    def test_unblocked_food_stays(self):
        assert place_food_range(TimeRange(480, 540), [TimeRange(540, 600)]) == TimeRange(480, 540)


class TestReconcile:
    def test_no_tasks_yields_empty_schedule(self):
        assert reconcile([], DAY, SEEDS) == []

    def test_routines_without_conflicts_keep_seed_windows(self):
        result = reconcile(_routines(), DAY, SEEDS)
        assert _ranges(result) == {seed.title: seed.time_range for seed in SEEDS}

    def test_fixed_task_displaces_breakfast(self):
        tasks = _routines() + [_fixed("Dentist", 480, 525)]

        result = _ranges(reconcile(tasks, DAY, SEEDS))

        assert result["Breakfast"] == TimeRange(525, 585)
        assert result["Dentist"] == TimeRange(480, 525)
        assert result["Morning work"] == TimeRange(585, 840)

    def test_fully_covered_flexible_routine_is_dropped(self):
        tasks = _routines() + [_fixed("Workshop", 540, 840)]

        result = reconcile(tasks, DAY, SEEDS)

        assert "Morning work" not in [task.title for task in result]
        assert len(result) == len(SEEDS)

    def test_flexible_routine_takes_largest_gap(self):
        tasks = _routines() + [_fixed("Standup", 540, 600), _fixed("Lunch meeting prep", 720, 750)]

        result = _ranges(reconcile(tasks, DAY, SEEDS))

        assert result["Morning work"] == TimeRange(600, 720)

    def test_wake_and_sleep_are_not_moved(self):
        tasks = _routines() + [_fixed("Early flight", 330, 420), _fixed("Late call", 1400, 1430)]

        result = _ranges(reconcile(tasks, DAY, SEEDS))

        assert result["Wake up"] == TimeRange(360, 390)
        assert result["Sleep"] == TimeRange(1380, 1800)
        assert result["Early focus"] == TimeRange(420, 480)

    def test_fixed_tasks_from_other_local_days_do_not_block(self):
        # 23:30 UTC on the 2nd is the 3rd in Tokyo.
        late = _make_task(
            "Call",
            TimeRange(480, 540),
            due_at=datetime(2026, 3, 2, 23, 30, tzinfo=timezone.utc),
        )

        result = _ranges(reconcile(_routines() + [late], DAY, SEEDS, timezone="Asia/Tokyo"))

        assert result["Breakfast"] == TimeRange(480, 540)

    def test_fixed_task_without_window_imposes_nothing(self):
        untimed = _make_task(
            "Buy milk",
            description="from the corner shop",
            due_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        )

        result = reconcile(_routines() + [untimed], DAY, SEEDS)

        assert untimed in result
        assert _ranges(result)["Morning work"] == TimeRange(540, 840)

    def test_customized_routine_window_is_the_base(self):
        routines = _routines()
        breakfast = next(task for task in routines if task.title == "Breakfast")
        custom = breakfast.model_copy(
            update={"description": inject_time_metadata(breakfast.description, TimeRange(600, 630))}
        )
        tasks = [custom if task.id == breakfast.id else task for task in routines]

        result = _ranges(reconcile(tasks, DAY, SEEDS))

        assert result["Breakfast"] == TimeRange(600, 630)
        assert result["Morning work"] == TimeRange(630, 840)

    def test_unparseable_routine_window_falls_back_to_seed(self):
        routines = _routines()
        lunch = next(task for task in routines if task.title == "Lunch")
        broken = lunch.model_copy(update={"description": "@time whenever"})
        tasks = [broken if task.id == lunch.id else task for task in routines]

        result = _ranges(reconcile(tasks, DAY, SEEDS))

        assert result["Lunch"] == TimeRange(840, 900)

    def test_unknown_and_duplicate_routines_are_filtered(self):
        routines = _routines()
        duplicate = _make_task(
            "breakfast",
            TimeRange(700, 760),
            created_at=BASE_TIME + timedelta(days=1),
        )
        unknown = _make_task("Gym", TimeRange(1000, 1060))

        result = reconcile(routines + [duplicate, unknown], DAY, SEEDS)
        ids = {task.id for task in result}

        assert duplicate.id not in ids
        assert unknown.id not in ids
        assert _ranges(result)["Breakfast"] == TimeRange(480, 540)

    def test_inputs_are_not_mutated(self):
        routines = _routines()
        before = [task.description for task in routines]

        reconcile(routines + [_fixed("Dentist", 480, 525)], DAY, SEEDS)

        assert [task.description for task in routines] == before

    def test_reconciling_twice_is_stable(self):
        tasks = _routines() + [
            _fixed("Dentist", 480, 525),
            _fixed("Review", 750, 780),
            _fixed("Call", 855, 900),
        ]

        first = reconcile(tasks, DAY, SEEDS)
        second = reconcile(first, DAY, SEEDS)

        assert _ranges(second) == _ranges(first)

    def test_output_windows_never_overlap(self):
        tasks = _routines() + [
            _fixed("Dentist", 480, 525),
            _fixed("Review", 750, 780),
            _fixed("Call", 855, 900),
            _fixed("Gym", 1170, 1230),
        ]

        result = reconcile(tasks, DAY, SEEDS)
        windows = [
            (task.title, parse_time_range(task.description))
            for task in result
            if parse_time_range(task.description) is not None
        ]

        for (title_a, a), (title_b, b) in combinations(windows, 2):
            assert not ranges_overlap(a, b), f"{title_a} overlaps {title_b}"

        placed = _ranges(result)
        assert placed["Lunch"] == TimeRange(900, 960)
        assert placed["Afternoon work"] == TimeRange(960, 1170)
        assert placed["Dinner"] == TimeRange(1230, 1290)
        assert placed["Evening time"] == TimeRange(1290, 1380)


class TestSelectCatalogRoutines:
    def test_earliest_created_wins(self):
        older = _make_task("Lunch", created_at=BASE_TIME)
        newer = _make_task("LUNCH", created_at=BASE_TIME + timedelta(hours=1))

        selected = select_catalog_routines([newer, older], SEEDS)

        assert selected == {"lunch": older}


class TestSortSchedule:
    def test_same_start_sorts_by_catalog_order(self):
        breakfast = _make_task("Breakfast", TimeRange(480, 540), created_at=BASE_TIME)
        morning = _make_task("Morning work", TimeRange(480, 600), created_at=BASE_TIME + timedelta(hours=1))

        assert sort_schedule([morning, breakfast], SEEDS) == [breakfast, morning]

    def test_incomplete_first_then_start_then_unscheduled(self):
        done = _make_task("Report", TimeRange(300, 330), due_at=BASE_TIME, is_completed=True)
        later = _make_task("Call", TimeRange(900, 930), due_at=BASE_TIME)
        earlier = _make_task("Walk", TimeRange(420, 450), due_at=BASE_TIME)
        untimed = _make_task("Buy milk", due_at=BASE_TIME)

        assert sort_schedule([untimed, done, later, earlier], SEEDS) == [earlier, later, untimed, done]

    def test_newest_first_as_final_tiebreak(self):
        old = _make_task("A", TimeRange(600, 630), due_at=BASE_TIME, created_at=BASE_TIME)
        new = _make_task("B", TimeRange(600, 630), due_at=BASE_TIME, created_at=BASE_TIME + timedelta(minutes=5))

        assert sort_schedule([old, new], SEEDS) == [new, old]

    def test_build_daily_schedule_orders_by_start(self):
        tasks = _routines() + [_fixed("Dentist", 480, 525)]

        schedule = build_daily_schedule(tasks, DAY, SEEDS)

        assert [task.title for task in schedule[:4]] == ["Wake up", "Early focus", "Dentist", "Breakfast"]
        assert schedule[-1].title == "Sleep"


@pytest.mark.parametrize(
    "fixed_range,expected",
    [
        ((540, 840), None),
        ((540, 600), TimeRange(600, 840)),
        ((780, 840), TimeRange(540, 780)),
    ],
)
def test_morning_work_placement(fixed_range, expected):
    tasks = _routines() + [_fixed("Block", *fixed_range)]

    assert _ranges(reconcile(tasks, DAY, SEEDS)).get("Morning work") == expected
