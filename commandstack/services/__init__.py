"""
Service layer for CommandStack.

Services take a SQLAlchemy session, flush their changes and leave the
commit to the caller (``get_db`` commits at the end of each request).
The calendar pull is the exception: it commits per event.
"""

from commandstack.services.calendar_sync import CalendarSyncService, SyncResult
from commandstack.services.commands import CommandService
from commandstack.services.contexts import ContextService
from commandstack.services.exceptions import ConflictError, NotFoundError, ServiceError
from commandstack.services.tasks import TaskService

__all__ = [
    "CalendarSyncService",
    "SyncResult",
    "CommandService",
    "ContextService",
    "TaskService",
    "ServiceError",
    "NotFoundError",
    "ConflictError",
]
