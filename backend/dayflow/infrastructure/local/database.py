"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
Timestamps are stored as naive UTC.
"""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from dayflow.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class TaskORM(Base):
    """Task ORM model. A NULL due_at marks a routine."""

    __tablename__ = "tasks"
    __table_args__ = (Index("idx_tasks_user_due_at", "user_id", "due_at"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    due_at = Column(DateTime, nullable=True)
    reminder_at = Column(DateTime, nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MealPreferencesORM(Base):
    """Meal preferences ORM model (one row per user)."""

    __tablename__ = "meal_preferences"

    user_id = Column(String(255), primary_key=True)
    breakfast_start = Column(Integer, nullable=False)
    lunch_start = Column(Integer, nullable=False)
    dinner_start = Column(Integer, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SchemaVersionORM(Base):
    """Routine catalog version marker (one row per user)."""

    __tablename__ = "routine_schema_versions"

    user_id = Column(String(255), primary_key=True)
    version = Column(Integer, nullable=True)
    legacy_seeded = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ===========================================
# Engine / Session
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=False)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Create all tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
