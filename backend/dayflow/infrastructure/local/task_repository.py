"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, or_, select

from dayflow.core.exceptions import NotFoundError
from dayflow.infrastructure.local.database import TaskORM, get_session_factory
from dayflow.interfaces.task_repository import ITaskRepository
from dayflow.models.task import Task, TaskCreate, TaskUpdate
from dayflow.utils.datetime_utils import ensure_utc, now_utc


def _to_db(dt: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC."""
    if dt is None:
        return None
    return ensure_utc(dt).replace(tzinfo=None)


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            user_id=orm.user_id,
            title=orm.title,
            description=orm.description,
            due_at=ensure_utc(orm.due_at),
            reminder_at=ensure_utc(orm.reminder_at),
            is_completed=bool(orm.is_completed),
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def _get_orm(self, session, user_id: str, task_id: UUID) -> TaskORM:
        result = await session.execute(
            select(TaskORM).where(
                and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id)
            )
        )
        orm = result.scalar_one_or_none()
        if not orm:
            raise NotFoundError(f"Task {task_id} not found")
        return orm

    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """Create a new task."""
        async with self._session_factory() as session:
            now = _to_db(now_utc())
            orm = TaskORM(
                id=str(uuid4()),
                user_id=user_id,
                title=task.title,
                description=task.description,
                due_at=_to_db(task.due_at),
                reminder_at=_to_db(task.reminder_at),
                is_completed=False,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(
                    and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_completed: bool = True,
    ) -> list[Task]:
        """List tasks due in [start, end) together with all routines."""
        async with self._session_factory() as session:
            query = select(TaskORM).where(TaskORM.user_id == user_id)

            due_filters = []
            if start is not None:
                due_filters.append(TaskORM.due_at >= _to_db(start))
            if end is not None:
                due_filters.append(TaskORM.due_at < _to_db(end))
            if due_filters:
                query = query.where(or_(TaskORM.due_at.is_(None), and_(*due_filters)))

            if not include_completed:
                query = query.where(TaskORM.is_completed.is_(False))

            query = query.order_by(TaskORM.created_at.desc())
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """Update an existing task. Explicit ``None`` values clear the field."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if field in ("due_at", "reminder_at"):
                    value = _to_db(value)
                elif field == "title" and value is None:
                    continue
                setattr(orm, field, value)
            orm.updated_at = _to_db(now_utc())

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def set_completion(self, user_id: str, task_id: UUID, is_completed: bool) -> Task:
        """Mark a task complete or incomplete."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            orm.is_completed = is_completed
            orm.updated_at = _to_db(now_utc())
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, user_id: str, task_id: UUID) -> bool:
        """Delete a task."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(
                    and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True
