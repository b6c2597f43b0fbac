"""
User model.
"""

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user."""

    id: str
    display_name: Optional[str] = None
