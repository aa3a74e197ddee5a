"""
Task service with Google Calendar push.

When a task has ``sync_to_google`` set and a signed-in user is supplied,
create/update/delete are mirrored to the user's calendar. Calendar
failures never fail the task operation: the task is saved and the link
is simply left unset.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from commandstack.models import Task, User, WorkType
from commandstack.services.calendar_sync import CalendarSyncService
from commandstack.services.work_items import WorkItemService

logger = logging.getLogger(__name__)


class TaskService(WorkItemService[Task]):
    """CRUD and status transitions for tasks, with calendar push."""

    model = Task
    entity_name = "Task"

    def __init__(self, db: Session, calendar: Optional[CalendarSyncService] = None):
        super().__init__(db)
        self.calendar = calendar or CalendarSyncService(db)

    def create_task(
        self,
        syntax: str,
        context_id: UUID,
        details: Optional[str] = None,
        type: WorkType = WorkType.TASK,
        deadline: Optional[datetime] = None,
        sync_to_google: bool = False,
        user: Optional[User] = None,
    ) -> Task:
        """
        Create a task, and a calendar event when sync is requested.

        Raises:
            NotFoundError: If the context does not exist
        """
        task = self._create(
            syntax,
            details,
            type,
            context_id,
            deadline,
            sync_to_google=sync_to_google,
            user_id=user.id if user is not None else None,
        )

        if sync_to_google and user is not None:
            event_id = self.calendar.create_event(user, task)
            if event_id:
                task.google_event_id = event_id
                self.db.flush()

        return task

    def update_task(
        self,
        task_id: UUID,
        syntax: str,
        context_id: UUID,
        details: Optional[str] = None,
        type: WorkType = WorkType.TASK,
        deadline: Optional[datetime] = None,
        sync_to_google: Optional[bool] = None,
        user: Optional[User] = None,
    ) -> Task:
        """
        Update a task and reconcile its calendar event.

        - sync on, unlinked: create the event
        - sync on, linked: push the new fields
        - sync turned off while linked: delete the event and unlink

        ``sync_to_google=None`` keeps the current flag.
        """
        task = self._update(task_id, syntax, details, type, context_id, deadline)

        if sync_to_google is not None:
            task.sync_to_google = sync_to_google

        if user is None:
            self.db.flush()
            return task

        if task.sync_to_google:
            if task.is_linked:
                self.calendar.update_event(user, task)
            else:
                event_id = self.calendar.create_event(user, task)
                if event_id:
                    task.google_event_id = event_id
        elif task.is_linked:
            self.calendar.delete_event(user, task.google_event_id)
            task.google_event_id = None

        self.db.flush()
        return task

    def delete_task(self, task_id: UUID, user: Optional[User] = None) -> None:
        """Delete a task, best-effort deleting its linked event."""
        task = self.get(task_id)

        if user is not None and task.is_linked:
            self.calendar.delete_event(user, task.google_event_id)

        self._delete(task)
