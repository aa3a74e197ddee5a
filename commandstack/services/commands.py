"""
Command service.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from commandstack.models import Command, WorkType
from commandstack.services.work_items import WorkItemService


class CommandService(WorkItemService[Command]):
    """CRUD and status transitions for commands."""

    model = Command
    entity_name = "Command"

    def create_command(
        self,
        syntax: str,
        context_id: UUID,
        details: Optional[str] = None,
        type: WorkType = WorkType.TASK,
        deadline: Optional[datetime] = None,
    ) -> Command:
        """
        Create a command in PENDING status.

        Raises:
            NotFoundError: If the context does not exist
        """
        return self._create(syntax, details, type, context_id, deadline)

    def update_command(
        self,
        command_id: UUID,
        syntax: str,
        context_id: UUID,
        details: Optional[str] = None,
        type: WorkType = WorkType.TASK,
        deadline: Optional[datetime] = None,
    ) -> Command:
        return self._update(command_id, syntax, details, type, context_id, deadline)

    def delete_command(self, command_id: UUID) -> None:
        self._delete(self.get(command_id))
