"""
SQLAlchemy models for CommandStack.

This module exports all database models for easy importing and
ensures Alembic can discover them for migrations.
"""

from commandstack.models.base import Base, BaseModel, GUID, UTCDateTime

from commandstack.models.user import User
from commandstack.models.context import Context
from commandstack.models.work_items import (
    DEFAULT_DETAILS,
    Command,
    Task,
    WorkStatus,
    WorkType,
)

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "GUID",
    "UTCDateTime",
    # Models
    "User",
    "Context",
    "Command",
    "Task",
    # Enums and defaults
    "WorkStatus",
    "WorkType",
    "DEFAULT_DETAILS",
]
