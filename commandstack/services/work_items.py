"""
Queries and lifecycle operations shared by commands and tasks.
"""

import logging
from datetime import datetime
from typing import Generic, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from commandstack.models import Command, Context, Task, WorkStatus, WorkType
from commandstack.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

W = TypeVar("W", Command, Task)


class WorkItemService(Generic[W]):
    """Base service for a work item model."""

    model: Type[W]
    entity_name: str

    def __init__(self, db: Session):
        self.db = db

    def _require_context(self, context_id: UUID) -> Context:
        context = self.db.get(Context, context_id)
        if context is None:
            raise NotFoundError("Context", context_id)
        return context

    def _list(self, *conditions) -> Sequence[W]:
        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.created_at.desc())
        )
        return self.db.scalars(stmt).all()

    def get_all(self) -> Sequence[W]:
        return self._list()

    def get_active(self) -> Sequence[W]:
        """Items not yet completed successfully."""
        return self._list(self.model.status != WorkStatus.EXIT_SUCCESS)

    def get_archived(self) -> Sequence[W]:
        """Items that completed successfully."""
        return self._list(self.model.status == WorkStatus.EXIT_SUCCESS)

    def get_by_context(self, context_id: UUID) -> Sequence[W]:
        return self._list(self.model.context_id == context_id)

    def list_items(
        self,
        filter: Optional[str] = None,
        context_id: Optional[UUID] = None,
    ) -> Sequence[W]:
        """
        List items for the API.

        ``context_id`` takes precedence over ``filter``; ``filter`` is
        ``active`` or ``archived``, anything else lists everything.
        """
        if context_id is not None:
            return self.get_by_context(context_id)
        if filter == "active":
            return self.get_active()
        if filter == "archived":
            return self.get_archived()
        return self.get_all()

    def get(self, item_id: UUID) -> W:
        """
        Get an item by ID.

        Raises:
            NotFoundError: If no such item exists
        """
        item = self.db.get(self.model, item_id)
        if item is None:
            raise NotFoundError(self.entity_name, item_id)
        return item

    def _create(
        self,
        syntax: str,
        details: Optional[str],
        type: WorkType,
        context_id: UUID,
        deadline: Optional[datetime],
        **extra,
    ) -> W:
        self._require_context(context_id)
        item = self.model(
            syntax=syntax,
            details=details,
            type=type,
            context_id=context_id,
            deadline=deadline,
            **extra,
        )
        self.db.add(item)
        self.db.flush()
        logger.info(f"Created {self.entity_name.lower()} {item.id}")
        return item

    def _update(
        self,
        item_id: UUID,
        syntax: str,
        details: Optional[str],
        type: WorkType,
        context_id: UUID,
        deadline: Optional[datetime],
    ) -> W:
        item = self.get(item_id)
        self._require_context(context_id)
        item.update(syntax, details, type, context_id, deadline)
        self.db.flush()
        return item

    def update_status(self, item_id: UUID, status: WorkStatus) -> W:
        item = self.get(item_id)
        item.update_status(status)
        self.db.flush()
        logger.info(f"{self.entity_name} {item_id} moved to {status.value}")
        return item

    def _delete(self, item: W) -> None:
        self.db.delete(item)
        self.db.flush()
        logger.info(f"Deleted {self.entity_name.lower()} {item.id}")
