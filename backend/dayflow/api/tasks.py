"""
Tasks API endpoints.

Create, edit, complete and delete tasks and routines. Reminder side effects
are handled by ``TaskService``.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from dayflow.api.deps import CurrentUser, Tasks
from dayflow.core.exceptions import NotFoundError
from dayflow.models.task import Task, TaskCreate, TaskUpdate

router = APIRouter()


class CompletionRequest(BaseModel):
    is_completed: bool


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: CurrentUser,
    service: Tasks,
):
    """Create a new task."""
    return await service.create_task(user.id, task)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    update: TaskUpdate,
    user: CurrentUser,
    service: Tasks,
):
    """Update a task."""
    try:
        return await service.update_task(user.id, task_id, update)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.post("/{task_id}/completion", response_model=Task)
async def set_task_completion(
    task_id: UUID,
    body: CompletionRequest,
    user: CurrentUser,
    service: Tasks,
):
    """Mark a task complete or incomplete."""
    try:
        return await service.set_completion(user.id, task_id, body.is_completed)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    user: CurrentUser,
    service: Tasks,
):
    """Delete a task."""
    try:
        await service.delete_task(user.id, task_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
