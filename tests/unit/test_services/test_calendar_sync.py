"""Tests for CalendarSyncService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from commandstack.integrations.google_calendar import (
    GoogleCalendarAuthError,
    GoogleCalendarClient,
    GoogleCalendarError,
)
from commandstack.models import Context, Task, User, WorkStatus, WorkType
from commandstack.services import CalendarSyncService, ContextService
from commandstack.time_utils import utcnow


def make_event(event_id="evt-1", summary="Standup", start=None, end=None, **extra) -> dict:
    event = {
        "id": event_id,
        "summary": summary,
        "start": start or {"dateTime": "2026-03-02T09:00:00+09:00"},
        "end": end or {"dateTime": "2026-03-02T09:30:00+09:00"},
    }
    event.update(extra)
    return event


@pytest.fixture
def calendar_client() -> MagicMock:
    return MagicMock(spec=GoogleCalendarClient)


@pytest.fixture
def refresher() -> MagicMock:
    return MagicMock()


@pytest.fixture
def sync(db_session: Session, calendar_client, refresher) -> CalendarSyncService:
    return CalendarSyncService(
        db_session,
        client_factory=lambda user: calendar_client,
        refresher=refresher,
    )


def tasks_for_event(db_session: Session, event_id: str) -> list[Task]:
    return list(db_session.scalars(select(Task).where(Task.google_event_id == event_id)))


class TestCreateEvent:
    """Tests for pushing a new task."""

    def test_returns_event_id(self, sync, calendar_client, sample_task: Task, sample_user: User):
        """The created event's ID is returned."""
        calendar_client.insert_event.return_value = {"id": "new-evt"}

        assert sync.create_event(sample_user, sample_task) == "new-evt"

        calendar_id, body = calendar_client.insert_event.call_args.args
        assert calendar_id == "primary"
        assert body["summary"] == "Write report"
        assert body["description"] == "Quarterly numbers"
        assert body["end"]["timeZone"] == "Asia/Seoul"

    def test_provider_error_returns_none(
        self, sync, calendar_client, sample_task: Task, sample_user: User
    ):
        """Calendar errors are swallowed."""
        calendar_client.insert_event.side_effect = GoogleCalendarError("boom")

        assert sync.create_event(sample_user, sample_task) is None

    def test_missing_credentials_returns_none(
        self, db_session: Session, sample_task: Task, sample_user: User
    ):
        """A user without an access token cannot push, and nothing raises."""
        sample_user.access_token = None
        service = CalendarSyncService(db_session, refresher=MagicMock())

        assert service.create_event(sample_user, sample_task) is None

    def test_refreshes_expiring_token_first(
        self, sync, calendar_client, refresher, sample_task: Task, sample_user: User
    ):
        """An expiring token is refreshed before the call."""
        sample_user.token_expires_at = utcnow() + timedelta(minutes=1)
        refresher.side_effect = RuntimeError("token endpoint down")
        calendar_client.insert_event.return_value = {"id": "new-evt"}

        assert sync.create_event(sample_user, sample_task) == "new-evt"
        refresher.assert_called_once_with("refresh-token")


class TestUpdateEvent:
    """Tests for pushing task edits."""

    def test_unlinked_task_is_noop(self, sync, calendar_client, sample_task: Task, sample_user: User):
        sync.update_event(sample_user, sample_task)

        calendar_client.get_event.assert_not_called()

    def test_updates_summary_and_times(
        self, sync, calendar_client, sample_task: Task, sample_user: User
    ):
        """The fetched event is overwritten with the task's fields."""
        sample_task.google_event_id = "evt-1"
        calendar_client.get_event.return_value = make_event(location="Room 1")

        sync.update_event(sample_user, sample_task)

        _, event_id, body = calendar_client.update_event.call_args.args
        assert event_id == "evt-1"
        assert body["summary"] == "Write report"
        assert body["location"] == "Room 1"
        assert "dateTime" in body["end"]

    def test_error_is_swallowed(self, sync, calendar_client, sample_task: Task, sample_user: User):
        sample_task.google_event_id = "evt-1"
        calendar_client.get_event.side_effect = GoogleCalendarAuthError("denied")

        sync.update_event(sample_user, sample_task)

        calendar_client.update_event.assert_not_called()


class TestDeleteEvent:
    """Tests for best-effort deletes."""

    def test_none_is_noop(self, sync, calendar_client, sample_user: User):
        sync.delete_event(sample_user, None)

        calendar_client.delete_event.assert_not_called()

    def test_error_is_swallowed(self, sync, calendar_client, sample_user: User):
        calendar_client.delete_event.side_effect = GoogleCalendarError("gone")

        sync.delete_event(sample_user, "evt-1")

        calendar_client.delete_event.assert_called_once_with("primary", "evt-1")


class TestGetEvents:
    """Tests for listing events."""

    def test_maps_events(self, sync, calendar_client, sample_user: User):
        """Timed and all-day events are mapped."""
        calendar_client.list_events.return_value = [
            make_event(htmlLink="https://calendar.google.com/e1"),
            make_event("evt-2", "Holiday", start={"date": "2026-03-03"}, end={"date": "2026-03-04"}),
        ]
        now = utcnow()

        events = sync.get_events(sample_user, now, now + timedelta(days=7))

        assert [e.id for e in events] == ["evt-1", "evt-2"]
        assert events[0].is_all_day is False
        assert events[0].html_link == "https://calendar.google.com/e1"
        assert events[1].is_all_day is True
        assert events[1].start == "2026-03-03"
        assert calendar_client.list_events.call_args.kwargs["max_results"] == 100

    def test_error_returns_empty(self, sync, calendar_client, sample_user: User):
        calendar_client.list_events.side_effect = GoogleCalendarError("boom")
        now = utcnow()

        assert sync.get_events(sample_user, now, now + timedelta(days=1)) == []


class TestPull:
    """Tests for importing events as tasks."""

    def test_creates_tasks_in_google_context(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """New events become SCHEDULE tasks in the reserved context."""
        calendar_client.list_events.return_value = [make_event()]

        result = sync.pull(sample_user)

        assert (result.created, result.updated, result.failed) == (1, 0, 0)
        [task] = tasks_for_event(db_session, "evt-1")
        context = db_session.get(Context, task.context_id)
        assert context.namespace == Context.NAMESPACE_GOOGLE
        assert task.type == WorkType.SCHEDULE
        assert task.status == WorkStatus.PENDING
        assert task.sync_to_google is True
        assert task.user_id == sample_user.id
        assert task.started_at == datetime(2026, 3, 2, 0, 0, tzinfo=timezone.utc)
        assert task.deadline == datetime(2026, 3, 2, 0, 30, tzinfo=timezone.utc)

    def test_pulling_twice_updates_one_row(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """The same external event maps to one task."""
        calendar_client.list_events.return_value = [make_event()]
        sync.pull(sample_user)

        calendar_client.list_events.return_value = [make_event(summary="Standup (moved)")]
        result = sync.pull(sample_user)

        assert (result.created, result.updated) == (0, 1)
        [task] = tasks_for_event(db_session, "evt-1")
        assert task.syntax == "Standup (moved)"

    def test_update_keeps_context_and_sync_flag(
        self,
        sync,
        calendar_client,
        db_session: Session,
        sample_task: Task,
        sample_user: User,
    ):
        """Linked local tasks stay in their context."""
        sample_task.google_event_id = "evt-1"
        sample_task.sync_to_google = False
        db_session.commit()
        calendar_client.list_events.return_value = [make_event()]

        sync.pull(sample_user)

        db_session.refresh(sample_task)
        assert sample_task.syntax == "Standup"
        assert sample_task.context_id != db_session.scalar(
            select(Context.id).where(Context.namespace == Context.NAMESPACE_GOOGLE)
        )
        assert sample_task.sync_to_google is False

    def test_all_day_event_is_local_midnight(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """Date-only events start at midnight in the configured timezone."""
        calendar_client.list_events.return_value = [
            make_event(start={"date": "2026-03-03"}, end={"date": "2026-03-04"}),
        ]

        sync.pull(sample_user)

        [task] = tasks_for_event(db_session, "evt-1")
        assert task.started_at == datetime(2026, 3, 3, tzinfo=ZoneInfo("Asia/Seoul"))
        assert task.deadline == datetime(2026, 3, 4, tzinfo=ZoneInfo("Asia/Seoul"))

    def test_untitled_event(self, sync, calendar_client, db_session: Session, sample_user: User):
        calendar_client.list_events.return_value = [make_event(summary=None)]

        sync.pull(sample_user)

        [task] = tasks_for_event(db_session, "evt-1")
        assert task.syntax == "Untitled"

    def test_unparseable_time_falls_back_to_now(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """Bad dates do not fail the event."""
        calendar_client.list_events.return_value = [
            make_event(start={"dateTime": "not a date"}),
        ]
        before = utcnow()

        result = sync.pull(sample_user)

        assert result.created == 1
        [task] = tasks_for_event(db_session, "evt-1")
        assert task.started_at >= before - timedelta(seconds=1)

    def test_failed_event_does_not_stop_batch(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """One bad event is counted and the rest are imported."""
        bad = make_event()
        del bad["id"]
        calendar_client.list_events.return_value = [bad, make_event("evt-2")]

        result = sync.pull(sample_user)

        assert (result.created, result.failed) == (1, 1)
        assert len(tasks_for_event(db_session, "evt-2")) == 1

    def test_list_error_returns_empty_result(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """If listing fails nothing is imported, but the context exists."""
        calendar_client.list_events.side_effect = GoogleCalendarAuthError("denied")

        result = sync.pull(sample_user)

        assert result.total == 0
        assert db_session.scalar(
            select(Context).where(Context.namespace == Context.NAMESPACE_GOOGLE)
        ) is not None

    def test_default_window(self, sync, calendar_client, sample_user: User):
        """The default window spans one week back to 90 days ahead."""
        calendar_client.list_events.return_value = []

        sync.pull(sample_user)

        kwargs = calendar_client.list_events.call_args.kwargs
        time_min = datetime.fromisoformat(kwargs["time_min"])
        time_max = datetime.fromisoformat(kwargs["time_max"])
        assert time_max - time_min == timedelta(days=97)


class TestGoogleContextRace:
    """Two first-time pulls racing to create the reserved context."""

    def test_concurrent_creation_reuses_existing_context(
        self, sync, calendar_client, db_session: Session, sample_user: User
    ):
        """The unique namespace violation is absorbed and the winner's context used."""

        def create_after_other_request(service):
            db_session.add(Context(namespace=Context.NAMESPACE_GOOGLE))
            db_session.commit()
            db_session.add(Context(namespace=Context.NAMESPACE_GOOGLE))
            db_session.flush()

        calendar_client.list_events.return_value = [make_event()]

        with patch.object(
            ContextService,
            "ensure_google_context",
            autospec=True,
            side_effect=create_after_other_request,
        ):
            result = sync.pull(sample_user)

        assert result.created == 1
        [context] = db_session.scalars(
            select(Context).where(Context.namespace == Context.NAMESPACE_GOOGLE)
        ).all()
        [task] = tasks_for_event(db_session, "evt-1")
        assert task.context_id == context.id
