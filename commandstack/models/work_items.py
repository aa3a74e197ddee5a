"""
Command and Task models.

Both are work items with the same lifecycle:

    PENDING -> EXECUTING -> EXIT_SUCCESS | SIGKILL

``started_at`` is stamped the first time an item enters EXECUTING and
``completed_at`` the first time it enters EXIT_SUCCESS or SIGKILL. Moving
back to an earlier status never clears or re-stamps either field.

Tasks can additionally be linked to a Google Calendar event.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from commandstack.models.base import BaseModel
from commandstack.time_utils import utcnow

DEFAULT_DETAILS = "No additional details provided."


class WorkStatus(str, enum.Enum):
    PENDING = "PENDING"
    EXECUTING = "EXECUTING"
    EXIT_SUCCESS = "EXIT_SUCCESS"
    SIGKILL = "SIGKILL"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkStatus.EXIT_SUCCESS, WorkStatus.SIGKILL)


class WorkType(str, enum.Enum):
    TASK = "TASK"
    SCHEDULE = "SCHEDULE"


class WorkItemMixin:
    """Columns and lifecycle shared by commands and tasks."""

    syntax: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        doc="Title of the work item"
    )

    details: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    status: Mapped[WorkStatus] = mapped_column(
        Enum(WorkStatus, native_enum=False, length=20),
        nullable=False,
        default=WorkStatus.PENDING,
    )

    type: Mapped[WorkType] = mapped_column(
        Enum(WorkType, native_enum=False, length=20),
        nullable=False,
        default=WorkType.TASK,
    )

    context_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("contexts.id"),
        nullable=False,
        index=True,
    )

    deadline: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    started_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    def __init__(self, **kwargs):
        kwargs.setdefault("status", WorkStatus.PENDING)
        if kwargs.get("details") is None:
            kwargs["details"] = DEFAULT_DETAILS
        super().__init__(**kwargs)

    def update_status(self, new_status: WorkStatus) -> None:
        """Move to ``new_status``, stamping start/completion times once."""
        self.status = new_status

        if new_status == WorkStatus.EXECUTING and self.started_at is None:
            self.started_at = utcnow()

        if new_status.is_terminal and self.completed_at is None:
            self.completed_at = utcnow()

        self.touch()

    def update(
        self,
        syntax: str,
        details: Optional[str],
        type: WorkType,
        context_id: uuid.UUID,
        deadline: Optional[datetime],
    ) -> None:
        self.syntax = syntax
        self.details = details
        self.type = type
        self.context_id = context_id
        self.deadline = deadline
        self.touch()


class Command(WorkItemMixin, BaseModel):
    """A shell-style command tracked through its lifecycle."""

    __tablename__ = "commands"


class Task(WorkItemMixin, BaseModel):
    """
    A task that may be mirrored to Google Calendar.

    Attributes:
        google_event_id: Linked Google Calendar event (join key for sync)
        sync_to_google: Whether local edits are pushed to Google Calendar
        user_id: Owner, set when the task was created by or for a signed-in user
    """

    __tablename__ = "tasks"

    google_event_id: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        unique=True,
        doc="Google Calendar event ID"
    )

    sync_to_google: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("sync_to_google", False)
        super().__init__(**kwargs)

    def apply_calendar_event(
        self,
        syntax: str,
        details: Optional[str],
        started_at: Optional[datetime],
        deadline: Optional[datetime],
    ) -> None:
        """Overwrite fields from a pulled calendar event.

        Context and ``sync_to_google`` are left as they are.
        """
        self.syntax = syntax
        self.details = details
        self.type = WorkType.SCHEDULE
        self.started_at = started_at
        self.deadline = deadline
        self.touch()

    @property
    def is_linked(self) -> bool:
        return self.google_event_id is not None
