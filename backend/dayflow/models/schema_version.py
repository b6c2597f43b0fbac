"""
Routine catalog version record.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Version implied by the pre-versioning "routines created" flag
LEGACY_ROUTINE_VERSION = 1


class SchemaVersion(BaseModel):
    """Per-user marker of the routine catalog version last applied."""

    user_id: str
    version: Optional[int] = Field(None, ge=1, description="Last applied catalog version")
    legacy_seeded: bool = Field(
        False, description="Routines were seeded before versioning existed"
    )
    updated_at: Optional[datetime] = None

    @property
    def effective_version(self) -> Optional[int]:
        """Stored version, or the legacy version when only the old flag is set."""
        if self.version is not None:
            return self.version
        if self.legacy_seeded:
            return LEGACY_ROUTINE_VERSION
        return None
