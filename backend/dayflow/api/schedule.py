"""
Daily schedule API endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from dayflow.api.deps import CurrentUser, DailySchedules
from dayflow.core.exceptions import NotFoundError, ValidationError
from dayflow.models.schedule import DailySchedule, RoutineTimeUpdate
from dayflow.models.task import Task

router = APIRouter()


@router.get("/schedule", response_model=DailySchedule)
async def get_daily_schedule(
    user: CurrentUser,
    service: DailySchedules,
    day: Optional[date] = Query(None, description="Local day to load (default: today)"),
):
    """Load the reconciled schedule for one day."""
    return await service.load_day(user.id, day)


@router.put("/routines/{task_id}/time", response_model=list[Task])
async def update_routine_time(
    task_id: UUID,
    body: RoutineTimeUpdate,
    user: CurrentUser,
    service: DailySchedules,
):
    """Set a routine's window; later flexible routines are re-spread."""
    try:
        return await service.edit_routine_time(user.id, task_id, body.to_time_range())
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
