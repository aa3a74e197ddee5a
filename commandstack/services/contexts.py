"""
Context service.

Contexts are namespaces that group commands and tasks. The ``google``
namespace is reserved for events pulled from Google Calendar.
"""

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from commandstack.models import Command, Context, Task
from commandstack.services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class ContextService:
    """CRUD over contexts."""

    def __init__(self, db: Session):
        self.db = db

    def create_context(
        self,
        namespace: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Context:
        """
        Create a context.

        Raises:
            ConflictError: If the namespace is already taken
        """
        if self.get_by_namespace(namespace) is not None:
            raise ConflictError(f"Context namespace already exists: {namespace}")

        context = Context(namespace=namespace, description=description, color=color)
        self.db.add(context)
        self.db.flush()
        logger.info(f"Created context {context.id} ({namespace})")
        return context

    def get_all_contexts(self) -> Sequence[Context]:
        stmt = select(Context).order_by(Context.namespace)
        return self.db.scalars(stmt).all()

    def get_context(self, context_id: UUID) -> Context:
        """
        Get a context by ID.

        Raises:
            NotFoundError: If no such context exists
        """
        context = self.db.get(Context, context_id)
        if context is None:
            raise NotFoundError("Context", context_id)
        return context

    def get_by_namespace(self, namespace: str) -> Optional[Context]:
        stmt = select(Context).where(Context.namespace == namespace)
        return self.db.scalars(stmt).first()

    def update_context(
        self,
        context_id: UUID,
        namespace: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Context:
        """
        Update namespace, description and color.

        Raises:
            NotFoundError: If no such context exists
            ConflictError: If the new namespace belongs to another context
        """
        context = self.get_context(context_id)

        existing = self.get_by_namespace(namespace)
        if existing is not None and existing.id != context.id:
            raise ConflictError(f"Context namespace already exists: {namespace}")

        context.update(namespace, description, color)
        self.db.flush()
        return context

    def delete_context(self, context_id: UUID) -> None:
        """
        Delete a context.

        Raises:
            NotFoundError: If no such context exists
            ConflictError: If commands or tasks still reference it
        """
        context = self.get_context(context_id)

        in_use = 0
        for model in (Command, Task):
            stmt = select(func.count()).select_from(model).where(model.context_id == context.id)
            in_use += self.db.scalar(stmt) or 0

        if in_use:
            raise ConflictError(
                f"Context {context.namespace} is still used by {in_use} item(s)"
            )

        self.db.delete(context)
        self.db.flush()
        logger.info(f"Deleted context {context_id}")

    def ensure_google_context(self) -> Context:
        """Get the reserved ``google`` context, creating it on first use."""
        context = self.get_by_namespace(Context.NAMESPACE_GOOGLE)
        if context is not None:
            return context

        context = Context(
            namespace=Context.NAMESPACE_GOOGLE,
            description=Context.GOOGLE_DESCRIPTION,
            color=Context.GOOGLE_COLOR,
        )
        self.db.add(context)
        self.db.flush()
        logger.info("Created reserved google context")
        return context
