"""
Routine catalog version repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from dayflow.models.schema_version import SchemaVersion


class ISchemaVersionRepository(ABC):
    @abstractmethod
    async def get(self, user_id: str) -> Optional[SchemaVersion]:
        pass

    @abstractmethod
    async def save(self, record: SchemaVersion) -> SchemaVersion:
        pass
