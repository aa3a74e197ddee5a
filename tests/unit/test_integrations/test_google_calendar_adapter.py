"""Tests for mapping between tasks and Google Calendar events."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from commandstack.integrations.google_calendar import GoogleCalendarAdapter
from commandstack.models import Task, WorkType
from commandstack.time_utils import utcnow

NOW = datetime(2026, 6, 1, 3, 0, tzinfo=timezone.utc)


def make_task(started_at=None, deadline=None) -> Task:
    return Task(
        syntax="Review PR",
        details="Backend changes",
        type=WorkType.TASK,
        context_id=None,
        started_at=started_at,
        deadline=deadline,
    )


class TestEventWindow:
    """Tests for start/end derivation."""

    def test_started_and_deadline(self):
        start = NOW
        end = NOW + timedelta(hours=3)

        assert GoogleCalendarAdapter.event_window(make_task(start, end), NOW) == (start, end)

    def test_deadline_only(self):
        """Without started_at the event is the hour before the deadline."""
        deadline = NOW + timedelta(days=1)

        start, end = GoogleCalendarAdapter.event_window(make_task(deadline=deadline), NOW)

        assert start == deadline - timedelta(hours=1)
        assert end == deadline

    def test_started_only(self):
        """Without a deadline the event lasts one hour."""
        start, end = GoogleCalendarAdapter.event_window(make_task(started_at=NOW), NOW)

        assert end == NOW + timedelta(hours=1)

    def test_neither(self):
        """Without either the event runs from now for an hour."""
        assert GoogleCalendarAdapter.event_window(make_task(), NOW) == (
            NOW,
            NOW + timedelta(hours=1),
        )


class TestToGoogleEvent:
    """Tests for building insert bodies."""

    def test_body(self):
        """Times are RFC 3339 in the configured timezone."""
        body = GoogleCalendarAdapter.to_google_event(make_task(deadline=NOW), NOW)

        assert body["summary"] == "Review PR"
        assert body["description"] == "Backend changes"
        assert body["end"] == {"dateTime": "2026-06-01T12:00:00+09:00", "timeZone": "Asia/Seoul"}
        assert body["start"]["dateTime"] == "2026-06-01T11:00:00+09:00"

    def test_apply_task_keeps_times_without_dates(self):
        """A task with no dates leaves the event's times alone."""
        event = {"summary": "Old", "start": {"date": "2026-06-01"}, "end": {"date": "2026-06-02"}}

        body = GoogleCalendarAdapter.apply_task(event, make_task())

        assert body["summary"] == "Review PR"
        assert body["start"] == {"date": "2026-06-01"}


class TestParseEventTime:
    """Tests for reading event times."""

    def test_date_time_with_offset(self):
        parsed = GoogleCalendarAdapter.parse_event_time("2026-06-01T09:00:00-07:00")

        assert parsed == datetime(2026, 6, 1, 16, 0, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_date_is_local_midnight(self):
        parsed = GoogleCalendarAdapter.parse_event_time("2026-06-01")

        assert parsed == datetime(2026, 6, 1, tzinfo=ZoneInfo("Asia/Seoul"))

    def test_none(self):
        assert GoogleCalendarAdapter.parse_event_time(None) is None

    def test_garbage_falls_back_to_now(self):
        before = utcnow()

        parsed = GoogleCalendarAdapter.parse_event_time("tomorrow-ish at noon")

        assert before <= parsed <= utcnow()


class TestFromGoogleEvent:
    """Tests for the response shape."""

    def test_timed_event(self):
        event = GoogleCalendarAdapter.from_google_event({
            "id": "e1",
            "summary": "Sync",
            "start": {"dateTime": "2026-06-01T09:00:00+09:00"},
            "end": {"dateTime": "2026-06-01T10:00:00+09:00"},
            "htmlLink": "https://calendar.google.com/e1",
        })

        assert event.is_all_day is False
        assert event.start == "2026-06-01T09:00:00+09:00"
        assert event.html_link == "https://calendar.google.com/e1"

    def test_all_day_event(self):
        event = GoogleCalendarAdapter.from_google_event({
            "id": "e2",
            "start": {"date": "2026-06-01"},
            "end": {"date": "2026-06-02"},
        })

        assert event.is_all_day is True
        assert event.summary is None
        assert event.end == "2026-06-02"
