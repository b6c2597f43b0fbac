"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class DayflowError(Exception):
    """Base exception for dayflow."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(DayflowError):
    """Resource not found."""

    pass


class ValidationError(DayflowError):
    """Validation error."""

    pass


class InfrastructureError(DayflowError):
    """Infrastructure-related error (DB, reminder scheduler, etc.)."""

    pass
