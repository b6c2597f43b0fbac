"""
SQLite implementation of the routine catalog version repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from dayflow.infrastructure.local.database import SchemaVersionORM, get_session_factory
from dayflow.interfaces.schema_version_repository import ISchemaVersionRepository
from dayflow.models.schema_version import SchemaVersion
from dayflow.utils.datetime_utils import ensure_utc, now_utc


class SqliteSchemaVersionRepository(ISchemaVersionRepository):
    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: SchemaVersionORM) -> SchemaVersion:
        return SchemaVersion(
            user_id=orm.user_id,
            version=orm.version,
            legacy_seeded=bool(orm.legacy_seeded),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def get(self, user_id: str) -> Optional[SchemaVersion]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SchemaVersionORM).where(SchemaVersionORM.user_id == user_id)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def save(self, record: SchemaVersion) -> SchemaVersion:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SchemaVersionORM).where(SchemaVersionORM.user_id == record.user_id)
            )
            orm = result.scalar_one_or_none()
            if orm is None:
                orm = SchemaVersionORM(user_id=record.user_id)
                session.add(orm)
            orm.version = record.version
            orm.legacy_seeded = record.legacy_seeded
            orm.updated_at = now_utc().replace(tzinfo=None)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)
