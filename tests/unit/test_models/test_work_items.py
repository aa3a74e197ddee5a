"""
Unit tests for Command and Task models.

Tests:
- Creation defaults (status, details, timestamps)
- Status transitions stamping started_at/completed_at once
- Calendar event application on tasks
- UTC round-trip through SQLite
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from commandstack.models import (
    DEFAULT_DETAILS,
    Command,
    Context,
    Task,
    WorkStatus,
    WorkType,
)


class TestWorkItemDefaults:
    """Test values set at construction."""

    def test_command_defaults(self, db_session: Session, sample_context: Context):
        """New commands are PENDING with default details and timestamps."""
        command = Command(syntax="ls -la", type=WorkType.TASK, context_id=sample_context.id)
        db_session.add(command)
        db_session.commit()

        assert isinstance(command.id, uuid.UUID)
        assert command.status == WorkStatus.PENDING
        assert command.details == DEFAULT_DETAILS
        assert command.created_at is not None
        assert command.updated_at == command.created_at
        assert command.started_at is None
        assert command.completed_at is None

    def test_task_defaults(self, sample_task: Task):
        """Tasks start unsynced and unlinked."""
        assert sample_task.sync_to_google is False
        assert sample_task.google_event_id is None
        assert sample_task.is_linked is False

    def test_context_foreign_key_enforced(self, db_session: Session):
        """A work item must reference an existing context."""
        db_session.add(Command(syntax="x", type=WorkType.TASK, context_id=uuid.uuid4()))

        with pytest.raises(IntegrityError):
            db_session.commit()


class TestUpdateStatus:
    """Test status transitions."""

    def test_executing_stamps_started_at(self, sample_task: Task):
        """PENDING -> EXECUTING sets started_at."""
        sample_task.update_status(WorkStatus.EXECUTING)

        assert sample_task.status == WorkStatus.EXECUTING
        assert sample_task.started_at is not None
        assert sample_task.completed_at is None

    def test_started_at_is_not_restamped(self, sample_task: Task):
        """EXECUTING -> PENDING -> EXECUTING keeps the original started_at."""
        sample_task.update_status(WorkStatus.EXECUTING)
        first_start = sample_task.started_at

        sample_task.update_status(WorkStatus.PENDING)
        sample_task.update_status(WorkStatus.EXECUTING)

        assert sample_task.started_at == first_start

    @pytest.mark.parametrize("terminal", [WorkStatus.EXIT_SUCCESS, WorkStatus.SIGKILL])
    def test_terminal_status_stamps_completed_at(self, sample_task: Task, terminal: WorkStatus):
        """Both terminal statuses stamp completed_at once."""
        sample_task.update_status(terminal)
        completed = sample_task.completed_at
        assert completed is not None

        sample_task.update_status(WorkStatus.EXECUTING)
        sample_task.update_status(terminal)

        assert sample_task.completed_at == completed

    def test_update_touches_updated_at(self, sample_task: Task):
        """update() overwrites fields and bumps updated_at."""
        before = sample_task.updated_at

        sample_task.update(
            "Renamed",
            "New details",
            WorkType.SCHEDULE,
            sample_task.context_id,
            None,
        )

        assert sample_task.syntax == "Renamed"
        assert sample_task.type == WorkType.SCHEDULE
        assert sample_task.deadline is None
        assert sample_task.updated_at >= before


class TestApplyCalendarEvent:
    """Test pulling event fields into a task."""

    def test_apply_keeps_context_and_sync_flag(self, sample_task: Task):
        """Context and sync flag survive; type becomes SCHEDULE."""
        sample_task.sync_to_google = True
        context_id = sample_task.context_id
        start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

        sample_task.apply_calendar_event("Standup", None, start, start + timedelta(minutes=15))

        assert sample_task.syntax == "Standup"
        assert sample_task.type == WorkType.SCHEDULE
        assert sample_task.started_at == start
        assert sample_task.context_id == context_id
        assert sample_task.sync_to_google is True


class TestUTCDateTime:
    """Test timezone handling of stored datetimes."""

    def test_aware_datetime_round_trip(self, db_session: Session, sample_task: Task):
        """Datetimes load back as aware UTC values."""
        deadline = datetime(2026, 5, 1, 18, 30, tzinfo=timezone(timedelta(hours=9)))
        sample_task.deadline = deadline
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.get(Task, sample_task.id)

        assert loaded.deadline.tzinfo is not None
        assert loaded.deadline == deadline
        assert loaded.deadline.utcoffset() == timedelta(0)
