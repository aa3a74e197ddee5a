"""
Mapping between tasks and Google Calendar event resources.

Handles:
- Deriving an event's start/end from a task's started_at/deadline
- RFC 3339 formatting with the configured timezone
- All-day events (``date`` only), normalized to local midnight
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateutil.parser import parse as parse_datetime

from commandstack.models import Task
from commandstack.time_utils import get_local_timezone, to_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_EVENT_SPAN = timedelta(hours=1)
UNTITLED = "Untitled"


@dataclass
class CalendarEvent:
    """An event as returned to API clients."""

    id: str
    summary: Optional[str]
    description: Optional[str]
    start: Optional[str]
    end: Optional[str]
    html_link: Optional[str]
    is_all_day: bool


class GoogleCalendarAdapter:
    """Maps between Task records and Google Calendar API format."""

    @staticmethod
    def event_window(
        task: Task,
        now: Optional[datetime] = None,
    ) -> tuple[datetime, datetime]:
        """
        Compute the event span for a task.

        start = started_at, else deadline - 1h, else now
        end   = deadline, else started_at + 1h, else now + 1h
        """
        now = now or utcnow()

        if task.started_at is not None:
            start = task.started_at
        elif task.deadline is not None:
            start = task.deadline - DEFAULT_EVENT_SPAN
        else:
            start = now

        if task.deadline is not None:
            end = task.deadline
        elif task.started_at is not None:
            end = task.started_at + DEFAULT_EVENT_SPAN
        else:
            end = now + DEFAULT_EVENT_SPAN

        return start, end

    @staticmethod
    def to_google_event(task: Task, now: Optional[datetime] = None) -> dict:
        """
        Convert a task to an event body for insert.

        Args:
            task: Task to convert
            now: Reference time for tasks without started_at or deadline

        Returns:
            Dict suitable for Google Calendar API insert
        """
        start, end = GoogleCalendarAdapter.event_window(task, now)

        google_event: dict = {
            "summary": task.syntax,
            "description": task.details,
        }
        google_event.update(_time_fields(start, end))
        return google_event

    @staticmethod
    def apply_task(google_event: dict, task: Task) -> dict:
        """
        Overwrite a fetched event with the task's fields.

        Start/end are only replaced when the task has a started_at or
        deadline; otherwise the event keeps its existing times.
        """
        google_event["summary"] = task.syntax
        google_event["description"] = task.details

        if task.started_at is not None or task.deadline is not None:
            start, end = GoogleCalendarAdapter.event_window(task)
            google_event.update(_time_fields(start, end))

        return google_event

    @staticmethod
    def from_google_event(google_event: dict) -> CalendarEvent:
        """Convert a Google Calendar event to the API response shape."""
        start_data = google_event.get("start", {})
        end_data = google_event.get("end", {})
        is_all_day = "date" in start_data and "dateTime" not in start_data

        if is_all_day:
            start = start_data.get("date")
            end = end_data.get("date")
        else:
            start = start_data.get("dateTime")
            end = end_data.get("dateTime")

        return CalendarEvent(
            id=google_event.get("id", ""),
            summary=google_event.get("summary"),
            description=google_event.get("description"),
            start=start,
            end=end,
            html_link=google_event.get("htmlLink"),
            is_all_day=is_all_day,
        )

    @staticmethod
    def parse_event_time(value: Optional[str]) -> Optional[datetime]:
        """
        Parse an event start/end value into an aware UTC datetime.

        Date-only values (all-day events) become midnight local time.
        Values without an offset are read as local time. Unparseable
        values fall back to now.
        """
        if value is None:
            return None

        try:
            if len(value) <= 10:
                day = datetime.strptime(value, "%Y-%m-%d")
                return to_utc(day.replace(tzinfo=get_local_timezone()))
            return to_utc(parse_datetime(value))
        except (ValueError, OverflowError) as e:
            logger.error(f"Failed to parse event time {value!r}: {e}")
            return utcnow()


def _time_fields(start: datetime, end: datetime) -> dict:
    tz = get_local_timezone()
    return {
        "start": {
            "dateTime": _format_datetime(start),
            "timeZone": tz.key,
        },
        "end": {
            "dateTime": _format_datetime(end),
            "timeZone": tz.key,
        },
    }


def _format_datetime(dt: datetime) -> str:
    """
    Format datetime to RFC 3339 in the configured timezone.

    Naive values are read as local time.
    """
    tz = get_local_timezone()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt.astimezone(tz).isoformat()


def format_query_time(dt: datetime) -> str:
    """Format a datetime for timeMin/timeMax query parameters."""
    return _format_datetime(dt)
